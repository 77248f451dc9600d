"""
Engine input models — one rate cell, competitor observations, history.

  1. ``RateContext``            — our own rate for one room type / rate plan / date.
  2. ``CompetitorObservation``  — one competitor price as delivered by a rate
                                  shopper; not yet filtered for relevance.
  3. ``HistoricalPerformance``  — aggregated booking history for the room type.

All three are frozen. Contract violations (non-positive or non-finite current
rate, negative inventory, occupancy outside 0–100, NaN or infinite history
figures) are rejected here, at construction, so the engine itself stays total
over valid inputs.  Competitor observations are deliberately lenient:
unavailable, zero-priced or non-finite observations are legal records that
the engine simply filters out.
"""

from __future__ import annotations

import datetime as dt
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from rate_engine.taxonomy.levels import MarketTrend
from rate_engine.utils.time_utils import parse_iso_date


def _coerce_date(v: Any) -> Any:
    """Accept ``date``, ``datetime`` or ISO strings for calendar-date fields."""
    if v is None:
        return v
    return parse_iso_date(v)


class RateContext(BaseModel):
    """A single rate cell the engine is asked to price.

    Attributes:
        rate_id: Identifier of the rate record in the caller's store.
        property_id: Hotel property identifier.
        room_type_id: Room type identifier.
        rate_plan_id: Rate plan identifier.
        date: Stay date being priced.
        current_rate: Currently published rate; must be positive.
        inventory: Rooms left to sell; must be non-negative.
        room_type_code: Short code used to match competitor observations.
        room_type_name: Display name of the room type.
        rate_plan_code: Short code of the rate plan (e.g. ``"BAR"``).
        rate_plan_name: Display name of the rate plan.
    """

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    rate_id: str
    property_id: str
    room_type_id: str
    rate_plan_id: str
    date: dt.date
    current_rate: float
    inventory: int = 0
    room_type_code: str
    room_type_name: str = ""
    rate_plan_code: str = ""
    rate_plan_name: str = ""

    @field_validator("date", mode="before")
    @classmethod
    def normalize_date(cls, v: Any) -> Any:
        return _coerce_date(v)

    @field_validator("current_rate")
    @classmethod
    def validate_rate_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"current_rate must be positive, got {v}.")
        return v

    @field_validator("inventory")
    @classmethod
    def validate_inventory_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"inventory must be non-negative, got {v}.")
        return v

    @field_validator("room_type_code")
    @classmethod
    def validate_room_type_code(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("room_type_code must not be empty.")
        return v.strip()


class CompetitorObservation(BaseModel):
    """One competitor rate as collected by a rate shopper.

    Attributes:
        competitor_id: Competitor property identifier.
        competitor_name: Display name used in positioning advice.
        room_type_code: Room type code mapped to our own codes.
        rate: Observed price; zero or negative means "no usable price".
        currency: ISO currency code.
        date: Stay date the price applies to.
        availability: ``False`` when the competitor was sold out.
    """

    model_config = ConfigDict(frozen=True)

    competitor_id: str
    competitor_name: str = ""
    room_type_code: str
    rate: float
    currency: str = "USD"
    date: dt.date
    availability: bool = True

    @field_validator("date", mode="before")
    @classmethod
    def normalize_date(cls, v: Any) -> Any:
        return _coerce_date(v)

    @field_validator("currency")
    @classmethod
    def validate_currency(cls, v: str) -> str:
        v = v.strip().upper()
        if len(v) != 3 or not v.isalpha():
            raise ValueError(f"currency must be a 3-letter ISO code, got '{v}'.")
        return v


class HistoricalPerformance(BaseModel):
    """Aggregated booking history for a room type.

    Attributes:
        average_occupancy: Mean occupancy percentage, 0–100.
        average_adr: Mean average daily rate; non-negative.
        seasonal_trend: Direction observed in history for this period.
        has_historical_data: Explicit data-quality flag.  ``None`` means the
            upstream system did not say, and the legacy placeholder-occupancy
            convention decides instead (see ``ConfidenceConfig``).
    """

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    average_occupancy: float
    average_adr: float = 0.0
    seasonal_trend: MarketTrend = MarketTrend.STABLE
    has_historical_data: Optional[bool] = None

    @field_validator("average_occupancy")
    @classmethod
    def validate_occupancy_range(cls, v: float) -> float:
        if not 0.0 <= v <= 100.0:
            raise ValueError(f"average_occupancy must be in [0, 100], got {v}.")
        return v

    @field_validator("average_adr")
    @classmethod
    def validate_adr_non_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError(f"average_adr must be non-negative, got {v}.")
        return v
