"""
CONTRACT 1: Market Snapshot Layer

Input: symbol (any case)
Output: MarketSnapshot

Normalized market observation for one symbol at one instant. The snapshot
is what every strategy evaluator reads; it is built per request and never
mutated afterwards.
"""

import math
from datetime import datetime, timezone
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


# =============================================================================
# ENUMS
# =============================================================================


class SnapshotSource(str, Enum):
    LIVE = "LIVE"  # Upstream market feed
    FALLBACK = "FALLBACK"  # Synthesized from the reference price table


class IndicatorSource(str, Enum):
    HISTORY = "HISTORY"  # Computed from a closing-price window
    SYNTHETIC = "SYNTHETIC"  # Deterministic cold-start values


# =============================================================================
# INPUT: Market feed rows
# =============================================================================


class TickerData(BaseModel):
    """
    One row of the 24h ticker feed, quote suffix already stripped.
    Sent by: Market feed collaborator
    Received by: Market Data Service
    """

    symbol: str
    last_price: float
    price_change_percent: float = 0.0
    volume: float = 0.0
    high_price: float = 0.0
    low_price: float = 0.0


# =============================================================================
# OUTPUT: MarketSnapshot
# =============================================================================


class MarketSnapshot(BaseModel):
    """
    Normalized market observation.

    Invariants: current_price > 0 and high_24h >= low_24h >= 0.
    """

    model_config = ConfigDict(frozen=True)

    symbol: str = Field(..., min_length=1, description="Uppercase ticker (BTC, ETH, ...)")
    current_price: float = Field(..., gt=0)
    volume: float = Field(default=0.0, ge=0)
    high_24h: float = Field(..., ge=0)
    low_24h: float = Field(..., ge=0)
    change_24h: float = Field(default=0.0, description="24h change in percent")
    rsi: float = Field(default=50.0, ge=0, le=100)
    macd: float = 0.0
    moving_average_50: float = Field(..., gt=0)
    moving_average_200: float = Field(..., gt=0)
    observed_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    source: SnapshotSource = SnapshotSource.LIVE
    indicator_source: IndicatorSource = IndicatorSource.SYNTHETIC

    @field_validator("symbol")
    @classmethod
    def normalize_symbol(cls, v: str) -> str:
        return v.strip().upper()

    @field_validator(
        "current_price", "volume", "high_24h", "low_24h", "change_24h", "macd",
        "moving_average_50", "moving_average_200",
    )
    @classmethod
    def must_be_finite(cls, v: float) -> float:
        if not math.isfinite(v):
            raise ValueError("value must be finite")
        return v

    @model_validator(mode="after")
    def range_must_be_ordered(self):
        if self.high_24h < self.low_24h:
            raise ValueError(
                f"high_24h ({self.high_24h}) must be >= low_24h ({self.low_24h})"
            )
        return self
