"""
Strategy Evaluators

Pure technical rules mapping a MarketSnapshot to a StrategyDecision.
No I/O, no randomness: confidence is derived from how far the input
is past each rule's threshold.

Directional (BUY/SELL) confidence is bounded to [50, 100]; HOLD is 50.
"""

from typing import Optional

from cryptosignal.schemas.market import MarketSnapshot
from cryptosignal.schemas.signal import (
    MIN_DIRECTIONAL_CONFIDENCE,
    NEUTRAL_CONFIDENCE,
    RiskLevel,
    StrategyDecision,
    TradeDecision,
)
from cryptosignal.services.risk import calculate_risk_levels

# Momentum
MOMENTUM_BUY_THRESHOLD = 1.0
MOMENTUM_SELL_THRESHOLD = -2.0

# Mean reversion (deviation from MA50, percent)
OVERSOLD_DEVIATION = -2.0
OVERBOUGHT_DEVIATION = 3.0

# Breakout (position within 24h range)
BREAKOUT_HIGH_POSITION = 0.7
BREAKDOWN_LOW_POSITION = 0.2

# RSI
RSI_OVERSOLD = 30.0
RSI_OVERBOUGHT = 70.0
RSI_DIVERGENCE_CONFIDENCE = 60

# MACD
MACD_BUY_THRESHOLD = 0.5
MACD_SELL_THRESHOLD = -0.5

# Volume
AVERAGE_VOLUME_BASELINE = 500_000
VOLUME_SPIKE_RATIO = 2.0

# Support / resistance proximity (percent)
LEVEL_PROXIMITY_PERCENT = 2.0

AI_UNAVAILABLE_NOTE = "(AI unavailable)"


def build_decision(
    snapshot: MarketSnapshot,
    decision: TradeDecision,
    confidence: float,
    reasoning: str,
    news_impact: Optional[str] = None,
    risk_level: Optional[RiskLevel] = None,
    timeframe: Optional[str] = None,
    evidence_count: Optional[int] = None,
) -> StrategyDecision:
    """Bound confidence and attach risk levels for the decision."""
    confidence = int(confidence)
    if decision == TradeDecision.HOLD:
        confidence = max(0, min(100, confidence))
    else:
        confidence = max(MIN_DIRECTIONAL_CONFIDENCE, min(100, confidence))

    levels = calculate_risk_levels(snapshot.current_price, decision)

    return StrategyDecision(
        decision=decision,
        confidence=confidence,
        reasoning=reasoning,
        stop_loss=levels.stop_loss,
        take_profit=levels.take_profit,
        news_impact=news_impact,
        risk_level=risk_level,
        timeframe=timeframe,
        evidence_count=evidence_count,
    )


def hold(snapshot: MarketSnapshot, reasoning: str) -> StrategyDecision:
    return build_decision(snapshot, TradeDecision.HOLD, NEUTRAL_CONFIDENCE, reasoning)


# =============================================================================
# 1. MOMENTUM
# =============================================================================


def momentum_strategy(snapshot: MarketSnapshot) -> StrategyDecision:
    """
    Momentum Trading

    Buy on strong upward 24h change, sell on strong decline. Neutral
    conditions lean BUY (the strategy is biased toward action).
    """
    change = snapshot.change_24h

    if change > MOMENTUM_BUY_THRESHOLD:
        confidence = 80 + min(15, (change - MOMENTUM_BUY_THRESHOLD) * 5)
        return build_decision(
            snapshot, TradeDecision.BUY, confidence,
            f"Strong upward momentum ({change:+.2f}% in 24h)",
        )

    if change < MOMENTUM_SELL_THRESHOLD:
        confidence = 75 + min(15, (MOMENTUM_SELL_THRESHOLD - change) * 5)
        return build_decision(
            snapshot, TradeDecision.SELL, confidence,
            f"Negative momentum detected ({change:+.2f}% in 24h)",
        )

    # Scale 70-79 across the neutral band
    band = MOMENTUM_BUY_THRESHOLD - MOMENTUM_SELL_THRESHOLD
    confidence = 70 + (change - MOMENTUM_SELL_THRESHOLD) / band * 9
    return build_decision(
        snapshot, TradeDecision.BUY, confidence,
        f"Momentum building ({change:+.2f}% in 24h), good entry point",
    )


# =============================================================================
# 2. MEAN REVERSION
# =============================================================================


def mean_reversion_strategy(snapshot: MarketSnapshot) -> StrategyDecision:
    """
    Mean Reversion

    Buy when price is well below MA50, sell when well above.
    """
    ma50 = snapshot.moving_average_50
    deviation = (snapshot.current_price - ma50) / ma50 * 100

    if deviation < OVERSOLD_DEVIATION:
        confidence = 80 + min(15, (OVERSOLD_DEVIATION - deviation) * 3)
        return build_decision(
            snapshot, TradeDecision.BUY, confidence,
            f"Price {abs(deviation):.2f}% below 50-period mean, oversold",
        )

    if deviation > OVERBOUGHT_DEVIATION:
        confidence = 75 + min(15, (deviation - OVERBOUGHT_DEVIATION) * 3)
        return build_decision(
            snapshot, TradeDecision.SELL, confidence,
            f"Price {deviation:.2f}% above 50-period mean, overbought",
        )

    return hold(snapshot, f"Price near fair value ({deviation:+.2f}% from mean)")


# =============================================================================
# 3. BREAKOUT
# =============================================================================


def breakout_strategy(snapshot: MarketSnapshot) -> StrategyDecision:
    """
    Breakout Trading

    Position within the 24h range: 0 = at the low, 1 = at the high.
    Upward breakouts need volume at or above the baseline.
    """
    price_range = snapshot.high_24h - snapshot.low_24h
    if price_range <= 0:
        position = 0.5
    else:
        position = (snapshot.current_price - snapshot.low_24h) / price_range

    volume_ratio = snapshot.volume / AVERAGE_VOLUME_BASELINE

    if position > BREAKOUT_HIGH_POSITION:
        if volume_ratio < 1:
            return hold(
                snapshot,
                f"Near 24h high ({position:.0%} of range) but volume does not confirm",
            )
        excess = (position - BREAKOUT_HIGH_POSITION) / (1 - BREAKOUT_HIGH_POSITION)
        confidence = 85 + min(10, excess * 10)
        return build_decision(
            snapshot, TradeDecision.BUY, confidence,
            f"Upward breakout at {position:.0%} of 24h range with {volume_ratio:.1f}x volume",
        )

    if position < BREAKDOWN_LOW_POSITION:
        excess = (BREAKDOWN_LOW_POSITION - position) / BREAKDOWN_LOW_POSITION
        confidence = 80 + min(10, excess * 10)
        return build_decision(
            snapshot, TradeDecision.SELL, confidence,
            f"Downward breakout at {position:.0%} of 24h range",
        )

    return hold(snapshot, f"Consolidating mid-range ({position:.0%} of 24h range)")


# =============================================================================
# 4. RSI DIVERGENCE
# =============================================================================


def rsi_divergence_strategy(snapshot: MarketSnapshot) -> StrategyDecision:
    """
    RSI Divergence

    Oversold buys, overbought sells; a falling price with mid-range RSI
    is treated as a weak bullish divergence.
    """
    rsi = snapshot.rsi

    if rsi < RSI_OVERSOLD:
        confidence = 70 + min(25, RSI_OVERSOLD - rsi)
        return build_decision(
            snapshot, TradeDecision.BUY, confidence,
            f"RSI oversold at {rsi:.1f}, reversal likely",
        )

    if rsi > RSI_OVERBOUGHT:
        confidence = 70 + min(25, rsi - RSI_OVERBOUGHT)
        return build_decision(
            snapshot, TradeDecision.SELL, confidence,
            f"RSI overbought at {rsi:.1f}",
        )

    if snapshot.change_24h < 0:
        return build_decision(
            snapshot, TradeDecision.BUY, RSI_DIVERGENCE_CONFIDENCE,
            f"Price falling ({snapshot.change_24h:+.2f}%) while RSI holds at {rsi:.1f}, "
            "possible bullish divergence",
        )

    return hold(snapshot, f"RSI neutral at {rsi:.1f}")


# =============================================================================
# 5. MACD CROSSOVER
# =============================================================================


def macd_crossover_strategy(snapshot: MarketSnapshot) -> StrategyDecision:
    """MACD Crossover: trade MACD strength confirmed by the 24h change."""
    macd_value = snapshot.macd
    change = snapshot.change_24h

    if macd_value > MACD_BUY_THRESHOLD and change > 0:
        strength = (macd_value - MACD_BUY_THRESHOLD) * 20 + change * 2
        confidence = 70 + min(19, int(strength))
        return build_decision(
            snapshot, TradeDecision.BUY, confidence,
            f"Bullish MACD crossover (MACD {macd_value:.3f}, {change:+.2f}%)",
        )

    if macd_value < MACD_SELL_THRESHOLD and change < 0:
        strength = (MACD_SELL_THRESHOLD - macd_value) * 20 - change * 2
        confidence = 68 + min(19, int(strength))
        return build_decision(
            snapshot, TradeDecision.SELL, confidence,
            f"Bearish MACD crossover (MACD {macd_value:.3f}, {change:+.2f}%)",
        )

    return hold(snapshot, "No clear MACD signal")


# =============================================================================
# 6. VOLUME SPIKE
# =============================================================================


def volume_spike_strategy(snapshot: MarketSnapshot) -> StrategyDecision:
    """Volume Spike: unusual volume in the direction of the 24h change."""
    volume_ratio = snapshot.volume / AVERAGE_VOLUME_BASELINE
    change = snapshot.change_24h

    if volume_ratio > VOLUME_SPIKE_RATIO:
        spike = min(15, (volume_ratio - VOLUME_SPIKE_RATIO) * 5)
        if change > 0:
            return build_decision(
                snapshot, TradeDecision.BUY, 80 + spike,
                f"Volume spike ({volume_ratio:.1f}x average) with price increase",
            )
        if change < 0:
            return build_decision(
                snapshot, TradeDecision.SELL, 75 + spike,
                f"Volume spike ({volume_ratio:.1f}x average) with price decline",
            )

    return hold(snapshot, f"No directional volume spike ({volume_ratio:.1f}x average)")


# =============================================================================
# 7. SUPPORT / RESISTANCE
# =============================================================================


def support_resistance_strategy(snapshot: MarketSnapshot) -> StrategyDecision:
    """
    Support/Resistance

    Support is the lower of the 24h low and MA200; resistance is the 24h high.
    """
    price = snapshot.current_price
    support = min(snapshot.low_24h, snapshot.moving_average_200)
    resistance = snapshot.high_24h

    distance_to_support = (
        (price - support) / support * 100 if support > 0 else float("inf")
    )
    distance_to_resistance = (resistance - price) / price * 100

    if distance_to_support < LEVEL_PROXIMITY_PERCENT:
        confidence = 75 + min(20, (LEVEL_PROXIMITY_PERCENT - distance_to_support) * 10)
        return build_decision(
            snapshot, TradeDecision.BUY, confidence,
            f"Price within {distance_to_support:.2f}% of support at {support:,.4f}",
        )

    if distance_to_resistance < LEVEL_PROXIMITY_PERCENT:
        confidence = 70 + min(20, (LEVEL_PROXIMITY_PERCENT - distance_to_resistance) * 10)
        return build_decision(
            snapshot, TradeDecision.SELL, confidence,
            f"Price within {distance_to_resistance:.2f}% of resistance at {resistance:,.4f}",
        )

    return hold(
        snapshot,
        f"Price between levels ({distance_to_support:.2f}% above support, "
        f"{distance_to_resistance:.2f}% below resistance)",
    )


# =============================================================================
# 8. TREND FOLLOWING (technical rule)
# =============================================================================


def trend_following_technical(snapshot: MarketSnapshot) -> StrategyDecision:
    """
    Golden/death cross rule used when the sentiment collaborator is
    unavailable.
    """
    price = snapshot.current_price
    ma50 = snapshot.moving_average_50
    ma200 = snapshot.moving_average_200
    change = snapshot.change_24h

    golden_cross = ma50 > ma200
    death_cross = ma50 < ma200

    if golden_cross and price > ma50 and change > 0:
        confidence = 85 + min(10, change * 2)
        return build_decision(
            snapshot, TradeDecision.BUY, confidence,
            f"Golden cross confirmed, strong uptrend {AI_UNAVAILABLE_NOTE}",
        )

    if death_cross and price < ma50 and change < 0:
        confidence = 80 + min(10, -change * 2)
        return build_decision(
            snapshot, TradeDecision.SELL, confidence,
            f"Death cross confirmed, downtrend {AI_UNAVAILABLE_NOTE}",
        )

    if golden_cross:
        spread = (ma50 / ma200 - 1) * 100
        confidence = 65 + min(14, spread * 3)
        return build_decision(
            snapshot, TradeDecision.BUY, confidence,
            f"Uptrend in progress (MA50 {spread:.2f}% above MA200) {AI_UNAVAILABLE_NOTE}",
        )

    return hold(snapshot, f"No clear trend {AI_UNAVAILABLE_NOTE}")
