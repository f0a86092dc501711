"""
Signal Decision Engine

CONTRACT:
    Input:  strategy key + symbol
    Output: TradeSignal

RESPONSIBILITIES:
    - Resolve the strategy against the fixed 8-strategy panel
    - Obtain a MarketSnapshot (never fails)
    - Evaluate the strategy and attach risk levels
    - Always return a TradeSignal; only unknown strategy keys raise

This is the main entry point for generating trade signals.
"""

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
from cryptosignal.services.strategy.service import (
    FALLBACK_REFERENCE_PRICE,
    SignalService,
    get_signal_service,
)

__all__ = [
    "SignalRequest",
    "SignalServiceInterface",
    "StrategyDescriptor",
    "StrategyKey",
    "STRATEGY_PANEL",
    "resolve_strategy",
    "strategy_keys",
    "TrendFollowingStrategy",
    "FALLBACK_REFERENCE_PRICE",
    "SignalService",
    "get_signal_service",
]
