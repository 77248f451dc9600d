"""
Recommendation output models.

``RateRecommendation`` is the transient result of one engine call: a
suggested integer rate, an integer confidence, an explanation, and the
``RecommendationFactors`` that produced it.  The engine assigns only a
locally generated id; persisting, applying or discarding the record is
the caller's business.

Both models are frozen and re-validate the output invariants on
construction, so a malformed recommendation can never leave the engine.
"""

from __future__ import annotations

import datetime as dt

from pydantic import BaseModel, ConfigDict, field_validator

from rate_engine.taxonomy.levels import DemandLevel, MarketTrend


class RecommendationFactors(BaseModel):
    """The intermediate signals surfaced alongside a suggested rate.

    Attributes:
        competitor_average: Mean relevant competitor rate, rounded.
        market_trend: ``"up"``, ``"down"`` or ``"stable"``.
        demand_level: ``"low"``, ``"medium"`` or ``"high"``.
        occupancy_forecast: Projected occupancy percentage, rounded, 0–100.
    """

    model_config = ConfigDict(frozen=True)

    competitor_average: int
    market_trend: MarketTrend
    demand_level: DemandLevel
    occupancy_forecast: int

    @field_validator("occupancy_forecast")
    @classmethod
    def validate_occupancy_range(cls, v: int) -> int:
        if not 0 <= v <= 100:
            raise ValueError(f"occupancy_forecast must be in [0, 100], got {v}.")
        return v


class RateRecommendation(BaseModel):
    """A bounded, confidence-scored, explained rate suggestion.

    Attributes:
        id: Locally generated identifier (``rec_<hex>``).
        property_id: Copied from the ``RateContext``.
        room_type_id: Copied from the ``RateContext``.
        rate_plan_id: Copied from the ``RateContext``.
        date: Stay date.
        current_rate: Rate the suggestion was computed against.
        suggested_rate: Integer currency amount inside the clamp band.
        confidence: Integer score in [30, 100].
        reasoning: Human-readable explanation.
        factors: Signals behind the suggestion.
        created_at: UTC timestamp of the engine call.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    property_id: str
    room_type_id: str
    rate_plan_id: str
    date: dt.date
    current_rate: float
    suggested_rate: int
    confidence: int
    reasoning: str
    factors: RecommendationFactors
    created_at: dt.datetime

    @field_validator("confidence")
    @classmethod
    def validate_confidence_range(cls, v: int) -> int:
        if not 30 <= v <= 100:
            raise ValueError(f"confidence must be in [30, 100], got {v}.")
        return v

    @field_validator("reasoning")
    @classmethod
    def validate_reasoning_not_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("reasoning must not be empty.")
        return v.strip()

    @property
    def rate_change_pct(self) -> float:
        """Signed change of the suggestion versus the current rate, in percent."""
        return (self.suggested_rate - self.current_rate) / self.current_rate * 100.0
