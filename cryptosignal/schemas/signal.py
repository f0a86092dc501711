"""
CONTRACT 2: Trade Signal Layer

Input: MarketSnapshot + strategy key
Output: TradeSignal

A TradeSignal is the engine's only output. It must always be well formed:
stop loss and take profit are present for BUY/SELL and absent for HOLD.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)


# =============================================================================
# ENUMS
# =============================================================================


class TradeDecision(str, Enum):
    BUY = "BUY"
    SELL = "SELL"
    HOLD = "HOLD"


class RiskLevel(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


NEUTRAL_CONFIDENCE = 50
MIN_DIRECTIONAL_CONFIDENCE = 50


# =============================================================================
# RISK LEVELS
# =============================================================================


class RiskLevels(BaseModel):
    """Stop loss / take profit bounds for a decision."""

    model_config = ConfigDict(frozen=True)

    stop_loss: Optional[float] = None
    take_profit: Optional[float] = None


# =============================================================================
# SENTIMENT (external AI collaborator response, validated)
# =============================================================================


class SentimentAnalysis(BaseModel):
    """
    Validated response of the sentiment/AI collaborator.

    Payloads are untrusted; anything that does not fit this shape is
    rejected before the decision is adopted.
    """

    model_config = ConfigDict(populate_by_name=True)

    decision: TradeDecision
    confidence: int = Field(..., ge=0, le=100)
    reasoning: str = Field(..., min_length=1)
    news_impact: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("news_impact", "newsImpact")
    )
    risk_level: Optional[RiskLevel] = Field(
        default=None, validation_alias=AliasChoices("risk_level", "riskLevel")
    )
    timeframe: Optional[str] = None
    evidence_count: int = Field(
        default=0,
        ge=0,
        validation_alias=AliasChoices("evidence_count", "evidenceCount", "newsCount"),
    )

    @field_validator("decision", "risk_level", mode="before")
    @classmethod
    def upper_enum_values(cls, v):
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @field_validator("reasoning")
    @classmethod
    def reasoning_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("reasoning must not be blank")
        return v.strip()

    @model_validator(mode="after")
    def directional_confidence_floor(self):
        if (
            self.decision != TradeDecision.HOLD
            and self.confidence < MIN_DIRECTIONAL_CONFIDENCE
        ):
            raise ValueError(
                f"{self.decision.value} confidence {self.confidence} "
                f"below {MIN_DIRECTIONAL_CONFIDENCE}"
            )
        return self


# =============================================================================
# STRATEGY OUTPUT
# =============================================================================


class StrategyDecision(BaseModel):
    """What a single evaluator returns (risk levels already attached)."""

    model_config = ConfigDict(frozen=True)

    decision: TradeDecision
    confidence: int = Field(..., ge=0, le=100)
    reasoning: str = Field(..., min_length=1)
    stop_loss: Optional[float] = None
    take_profit: Optional[float] = None

    # Sentiment overlay (AI-augmented strategy only)
    news_impact: Optional[str] = None
    risk_level: Optional[RiskLevel] = None
    timeframe: Optional[str] = None
    evidence_count: Optional[int] = None


class StrategyInfo(BaseModel):
    """Public listing entry for a strategy."""

    key: str
    description: str


# =============================================================================
# OUTPUT: TradeSignal
# =============================================================================


class TradeSignal(BaseModel):
    """
    Final trade recommendation.

    Consumed by the execution layer, which acts on BUY/SELL and skips HOLD.
    """

    model_config = ConfigDict(frozen=True)

    strategy_name: str
    symbol: str
    decision: TradeDecision
    price: float = Field(..., gt=0, description="Snapshot price the signal was derived from")
    confidence: int = Field(..., ge=0, le=100)
    reasoning: str = Field(..., min_length=1)
    stop_loss: Optional[float] = None
    take_profit: Optional[float] = None
    generated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    # Sentiment overlay (present only when the AI analysis was adopted)
    news_impact: Optional[str] = None
    risk_level: Optional[RiskLevel] = None
    timeframe: Optional[str] = None
    evidence_count: Optional[int] = None

    @model_validator(mode="after")
    def risk_levels_match_decision(self):
        has_levels = self.stop_loss is not None and self.take_profit is not None
        no_levels = self.stop_loss is None and self.take_profit is None

        if self.decision == TradeDecision.HOLD and not no_levels:
            raise ValueError("HOLD signals must not carry stop loss / take profit")
        if self.decision != TradeDecision.HOLD and not has_levels:
            raise ValueError(
                f"{self.decision.value} signals require stop loss and take profit"
            )
        return self
