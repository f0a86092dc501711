"""
Strategy Panel

The fixed, ordered set of eight strategies. No dynamic registration.
"""

from typing import Optional

from cryptosignal.services.strategy.evaluators import (
    breakout_strategy,
    macd_crossover_strategy,
    mean_reversion_strategy,
    momentum_strategy,
    rsi_divergence_strategy,
    support_resistance_strategy,
    trend_following_technical,
    volume_spike_strategy,
)
from cryptosignal.services.strategy.interface import StrategyDescriptor, StrategyKey

STRATEGY_PANEL: tuple[StrategyDescriptor, ...] = (
    StrategyDescriptor(
        key=StrategyKey.MOMENTUM,
        name="Momentum",
        description="Trades based on price momentum and trend strength",
        evaluator=momentum_strategy,
    ),
    StrategyDescriptor(
        key=StrategyKey.MEAN_REVERSION,
        name="Mean Reversion",
        description="Buys low, sells high based on price deviation from average",
        evaluator=mean_reversion_strategy,
    ),
    StrategyDescriptor(
        key=StrategyKey.BREAKOUT,
        name="Breakout",
        description="Identifies and trades breakouts from consolidation patterns",
        evaluator=breakout_strategy,
    ),
    StrategyDescriptor(
        key=StrategyKey.RSI_DIVERGENCE,
        name="RSI Divergence",
        description="Uses RSI to identify overbought/oversold conditions",
        evaluator=rsi_divergence_strategy,
    ),
    StrategyDescriptor(
        key=StrategyKey.MACD_CROSSOVER,
        name="MACD Crossover",
        description="Trades based on MACD signal line crossovers",
        evaluator=macd_crossover_strategy,
    ),
    StrategyDescriptor(
        key=StrategyKey.VOLUME_SPIKE,
        name="Volume Spike",
        description="Identifies unusual volume patterns for entry/exit",
        evaluator=volume_spike_strategy,
    ),
    StrategyDescriptor(
        key=StrategyKey.SUPPORT_RESISTANCE,
        name="Support/Resistance",
        description="Trades at key support and resistance levels",
        evaluator=support_resistance_strategy,
    ),
    StrategyDescriptor(
        key=StrategyKey.TREND_FOLLOWING,
        name="Trend Following",
        description="Follows long-term trends using AI news analysis and moving averages",
        evaluator=trend_following_technical,
    ),
)

_PANEL_BY_KEY = {descriptor.key: descriptor for descriptor in STRATEGY_PANEL}


def strategy_keys() -> list[str]:
    """Valid strategy keys, in panel order."""
    return [descriptor.key.value for descriptor in STRATEGY_PANEL]


def resolve_strategy(strategy_key: Optional[str]) -> Optional[StrategyDescriptor]:
    """Case-insensitive lookup; None for keys outside the panel."""
    if not isinstance(strategy_key, str):
        return None
    try:
        key = StrategyKey(strategy_key.strip().lower())
    except ValueError:
        return None
    return _PANEL_BY_KEY[key]
