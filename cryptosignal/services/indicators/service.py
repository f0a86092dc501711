"""
Indicator Synthesizer Implementation

Computes RSI, MACD and moving averages for a snapshot.

With a closing-price window the indicators are real calculations. Without
one (cold start, feed fallback) they are derived deterministically from
the current price and 24h change, so identical inputs always give
identical snapshots.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from cryptosignal.schemas.market import IndicatorSource
from cryptosignal.services.indicators.calculations import (
    get_last_valid,
    macd,
    rsi,
    sma,
)

logger = logging.getLogger(__name__)

RSI_PERIOD = 14
MACD_FAST = 12
MACD_SLOW = 26
MACD_SIGNAL = 9
MA_SHORT = 50
MA_LONG = 200

# Cold-start offsets below price
SYNTHETIC_MA50_FACTOR = 0.98
SYNTHETIC_MA200_FACTOR = 0.95
SYNTHETIC_RSI_SLOPE = 4.0  # RSI points per 1% of 24h change
SYNTHETIC_MACD_LIMIT = 2.0


@dataclass(frozen=True)
class IndicatorValues:
    """Indicator set attached to a MarketSnapshot."""

    rsi: float
    macd: float
    moving_average_50: float
    moving_average_200: float
    source: IndicatorSource


class IndicatorService:
    """
    Indicator Synthesizer.

    Pure computation; holds only the lookback configuration.
    """

    def __init__(self, rsi_period: int = RSI_PERIOD):
        self.rsi_period = rsi_period

    @property
    def name(self) -> str:
        return "IndicatorService"

    def synthesize(self, current_price: float, change_24h: float = 0.0) -> IndicatorValues:
        """Deterministic indicators for when no price history is available."""
        rsi_value = float(np.clip(50 + SYNTHETIC_RSI_SLOPE * change_24h, 0, 100))
        macd_value = float(
            np.clip(change_24h / 2, -SYNTHETIC_MACD_LIMIT, SYNTHETIC_MACD_LIMIT)
        )

        return IndicatorValues(
            rsi=round(rsi_value, 2),
            macd=round(macd_value, 4),
            moving_average_50=current_price * SYNTHETIC_MA50_FACTOR,
            moving_average_200=current_price * SYNTHETIC_MA200_FACTOR,
            source=IndicatorSource.SYNTHETIC,
        )

    def from_history(
        self,
        closes: Optional[Sequence[float]],
        current_price: float,
        change_24h: float = 0.0,
    ) -> IndicatorValues:
        """
        Compute indicators from a closing-price window (oldest first).

        Indicators the window is too short for keep their synthetic value.
        """
        synthetic = self.synthesize(current_price, change_24h)
        if not closes:
            return synthetic

        data = np.asarray(closes, dtype=float)
        data = data[np.isfinite(data) & (data > 0)]
        if len(data) < self.rsi_period + 1:
            logger.debug(f"History window too short ({len(data)}), using synthetic indicators")
            return synthetic

        rsi_value = get_last_valid(rsi(data, self.rsi_period))
        macd_line, _, _ = macd(data, MACD_FAST, MACD_SLOW, MACD_SIGNAL)
        macd_value = get_last_valid(macd_line)
        ma50 = get_last_valid(sma(data, MA_SHORT))
        ma200 = get_last_valid(sma(data, MA_LONG))

        return IndicatorValues(
            rsi=round(rsi_value, 2) if rsi_value is not None else synthetic.rsi,
            macd=round(macd_value, 4) if macd_value is not None else synthetic.macd,
            moving_average_50=ma50 if ma50 is not None else synthetic.moving_average_50,
            moving_average_200=ma200 if ma200 is not None else synthetic.moving_average_200,
            source=IndicatorSource.HISTORY,
        )


# Singleton instance
_service_instance: Optional[IndicatorService] = None


def get_indicator_service() -> IndicatorService:
    """Get or create indicator service instance."""
    global _service_instance
    if _service_instance is None:
        _service_instance = IndicatorService()
    return _service_instance
