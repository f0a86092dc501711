"""
Risk Level Calculator

CONTRACT:
    Input:  price + TradeDecision
    Output: RiskLevels (stop_loss, take_profit)

PURE PYTHON - No I/O, no randomness.
"""

from cryptosignal.services.risk.service import (
    STOP_LOSS_PERCENT,
    TAKE_PROFIT_PERCENT,
    calculate_risk_levels,
)

__all__ = [
    "STOP_LOSS_PERCENT",
    "TAKE_PROFIT_PERCENT",
    "calculate_risk_levels",
]
