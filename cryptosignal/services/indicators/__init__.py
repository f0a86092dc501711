"""
Indicator Synthesizer

CONTRACT:
    Input:  closing-price window (optional) + current price + 24h change
    Output: IndicatorValues (RSI, MACD, MA50, MA200)

RESPONSIBILITIES:
    - RSI (14-period, Wilder smoothing)
    - MACD (EMA12 - EMA26, 9-period signal line)
    - 50 / 200 period simple moving averages
    - Deterministic synthetic values when no history is available

PURE PYTHON - Uses NumPy for calculations.
All math is deterministic and reproducible.
"""

from cryptosignal.services.indicators.service import (
    IndicatorService,
    IndicatorValues,
    get_indicator_service,
)

__all__ = [
    "IndicatorService",
    "IndicatorValues",
    "get_indicator_service",
]
