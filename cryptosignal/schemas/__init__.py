"""
CryptoSignal Schema Contracts

This module defines the data contracts between engine components.
These are the authoritative interfaces - all modules must conform to these schemas.
"""

from cryptosignal.schemas.market import (
    IndicatorSource,
    MarketSnapshot,
    SnapshotSource,
    TickerData,
)
from cryptosignal.schemas.signal import (
    RiskLevel,
    RiskLevels,
    SentimentAnalysis,
    StrategyDecision,
    StrategyInfo,
    TradeDecision,
    TradeSignal,
)

__all__ = [
    # Market
    "IndicatorSource",
    "MarketSnapshot",
    "SnapshotSource",
    "TickerData",
    # Signal
    "RiskLevel",
    "RiskLevels",
    "SentimentAnalysis",
    "StrategyDecision",
    "StrategyInfo",
    "TradeDecision",
    "TradeSignal",
]
