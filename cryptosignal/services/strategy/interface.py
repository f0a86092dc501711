"""
Signal Service Interface

Defines the strategy panel contract and the orchestrator that turns a
strategy key + symbol into a TradeSignal.
"""

import asyncio
from abc import abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from cryptosignal.services.base import BaseService
from cryptosignal.schemas.market import MarketSnapshot
from cryptosignal.schemas.signal import StrategyDecision, StrategyInfo, TradeSignal


class StrategyKey(str, Enum):
    """Closed set of strategies in the panel."""

    MOMENTUM = "momentum"
    MEAN_REVERSION = "mean-reversion"
    BREAKOUT = "breakout"
    RSI_DIVERGENCE = "rsi-divergence"
    MACD_CROSSOVER = "macd-crossover"
    VOLUME_SPIKE = "volume-spike"
    SUPPORT_RESISTANCE = "support-resistance"
    TREND_FOLLOWING = "trend-following"


Evaluator = Callable[[MarketSnapshot], StrategyDecision]


@dataclass(frozen=True)
class StrategyDescriptor:
    """
    One entry of the strategy panel.

    evaluator is the pure technical rule. For Trend Following it is the
    fallback rule used when the sentiment collaborator is unavailable.
    """

    key: StrategyKey
    name: str
    description: str
    evaluator: Evaluator

    def to_info(self) -> StrategyInfo:
        return StrategyInfo(key=self.key.value, description=self.description)


@dataclass
class SignalRequest:
    """Request for a trade signal."""

    strategy_key: str
    symbol: str
    timeout: Optional[float] = None
    cancel_event: Optional[asyncio.Event] = None
    snapshot: Optional[MarketSnapshot] = None  # Skips the market feed


class SignalServiceInterface(BaseService[SignalRequest, TradeSignal]):
    """
    Signal Orchestrator Contract.

    INPUT: SignalRequest
        - strategy_key: one of the 8 panel keys (case-insensitive)
        - symbol: ticker to analyze
        - timeout / cancel_event: optional bounds on upstream calls
        - snapshot: optional pre-built MarketSnapshot, used instead of the feed

    OUTPUT: TradeSignal

    PIPELINE:
        ┌───────────────┐
        │ SignalRequest │
        └───────┬───────┘
                │  resolve key (UnknownStrategyError on miss)
                ▼
        ┌───────────────┐
        │ Market Data   │ → MarketSnapshot (never fails; skipped if supplied)
        └───────┬───────┘
                │
                ▼
        ┌───────────────┐
        │ Strategy      │ → StrategyDecision (+ risk levels)
        └───────┬───────┘
                │
                ▼
        ┌───────────────┐
        │  TradeSignal  │
        └───────────────┘

    Only UnknownStrategyError reaches the caller; anything else yields the
    fallback signal.
    """

    @property
    def name(self) -> str:
        return "SignalService"

    @abstractmethod
    def list_strategies(self) -> list[StrategyInfo]:
        """The fixed strategy panel, in order."""
        pass

    @abstractmethod
    async def get_trade_signal(
        self,
        strategy_key: str,
        symbol: str,
        timeout: Optional[float] = None,
        cancel_event: Optional[asyncio.Event] = None,
        snapshot: Optional[MarketSnapshot] = None,
    ) -> TradeSignal:
        """Evaluate one strategy for one symbol."""
        pass
