"""
Risk Level Calculator

Maps a decision and reference price to stop-loss / take-profit bounds.
PURE PYTHON - deterministic and total.

The bands are fixed engine constants (2% stop, 4% target); they are not
derived from volatility.
"""

from cryptosignal.schemas.signal import RiskLevels, TradeDecision

STOP_LOSS_PERCENT = 2.0
TAKE_PROFIT_PERCENT = 4.0


def calculate_risk_levels(price: float, decision: TradeDecision) -> RiskLevels:
    """
    Calculate stop loss and take profit for a decision.

    BUY:  stop below entry, target above.
    SELL: stop above entry, target below.
    HOLD: no levels.
    """
    decision = TradeDecision(decision)

    if decision == TradeDecision.BUY:
        return RiskLevels(
            stop_loss=price * (1 - STOP_LOSS_PERCENT / 100),
            take_profit=price * (1 + TAKE_PROFIT_PERCENT / 100),
        )
    if decision == TradeDecision.SELL:
        return RiskLevels(
            stop_loss=price * (1 + STOP_LOSS_PERCENT / 100),
            take_profit=price * (1 - TAKE_PROFIT_PERCENT / 100),
        )
    return RiskLevels()
