"""Insight service contract — request items and validated recommendations."""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictStr, field_validator

from tradeplan.signals.models import PAIR_SYMBOLS

Action = Literal["BUY", "SELL", "HOLD"]
BiasValue = Literal["BUY", "SELL", "NEUTRAL"]


class InsightRequestItem(BaseModel):
    pair: str
    bias: BiasValue
    confidence: float


class Recommendation(BaseModel):
    """One recommendation returned by the insight service."""

    model_config = ConfigDict(frozen=True)

    pair: StrictStr
    action: Action
    reasoning: StrictStr
    confidence: float = Field(allow_inf_nan=False)

    @field_validator("pair")
    @classmethod
    def _known_pair(cls, v: str) -> str:
        if v not in PAIR_SYMBOLS:
            raise ValueError(f"unknown pair symbol '{v}'")
        return v

    @field_validator("confidence", mode="before")
    @classmethod
    def _numeric_confidence(cls, v):
        # Reject booleans and numeric strings; pydantic would coerce both.
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            raise ValueError("confidence must be a number")
        return v


class RecommendationBatch(BaseModel):
    recommendations: list[Recommendation]


class InsightOutcome(BaseModel):
    """Exactly one of success (``ok``) or failure per insight request."""

    ok: bool
    ticket: int
    recommendations: Optional[list[Recommendation]] = None
    error: Optional[str] = None
    errors: list[str] = Field(default_factory=list)
    stale: bool = False
