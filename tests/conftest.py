"""
Shared pytest fixtures for the rate recommendation engine test suite.

Provides:
  - ``stay_date`` / ``fixed_now``: a June Saturday and a clock four days
    before it, so lead-time penalties stay at zero unless a test asks.
  - Factory fixtures (``make_context``, ``make_observations``, ``make_history``)
    that build valid domain objects with overridable fields.
  - ``reference_rates``: a calm five-competitor set (average 5130) used across modules.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Callable, Sequence

import pytest

from rate_engine.models.rates import CompetitorObservation, HistoricalPerformance, RateContext
from rate_engine.taxonomy.levels import MarketTrend

# Saturday in June (summer, weekend).
STAY_DATE = date(2025, 6, 14)
FIXED_NOW = datetime(2025, 6, 10, 12, 0, 0, tzinfo=timezone.utc)

REFERENCE_RATES = (5200.0, 5300.0, 4800.0, 5100.0, 5250.0)


@pytest.fixture
def stay_date() -> date:
    return STAY_DATE


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def reference_rates() -> tuple[float, ...]:
    return REFERENCE_RATES


@pytest.fixture
def make_context() -> Callable[..., RateContext]:
    """Return a factory for ``RateContext`` with sensible defaults."""

    def _make(**overrides) -> RateContext:
        fields = {
            "rate_id": "rate-1",
            "property_id": "prop-1",
            "room_type_id": "rt-dlx",
            "rate_plan_id": "bar",
            "date": STAY_DATE,
            "current_rate": 5000.0,
            "inventory": 4,
            "room_type_code": "DLX",
            "room_type_name": "Deluxe King",
            "rate_plan_code": "BAR",
            "rate_plan_name": "Best Available Rate",
        }
        fields.update(overrides)
        return RateContext(**fields)

    return _make


@pytest.fixture
def make_observations() -> Callable[..., list[CompetitorObservation]]:
    """Return a factory turning a list of rates into competitor observations."""

    def _make(
        rates: Sequence[float] = REFERENCE_RATES,
        room_type_code: str = "DLX",
        stay_date: date = STAY_DATE,
        availability: bool = True,
    ) -> list[CompetitorObservation]:
        return [
            CompetitorObservation(
                competitor_id=f"comp-{i}",
                competitor_name=f"Competitor {i}",
                room_type_code=room_type_code,
                rate=rate,
                currency="USD",
                date=stay_date,
                availability=availability,
            )
            for i, rate in enumerate(rates, start=1)
        ]

    return _make


@pytest.fixture
def make_history() -> Callable[..., HistoricalPerformance]:
    """Return a factory for ``HistoricalPerformance`` (88% occupancy, stable)."""

    def _make(
        average_occupancy: float = 88.0,
        seasonal_trend: MarketTrend = MarketTrend.STABLE,
        has_historical_data: bool | None = None,
        average_adr: float = 5100.0,
    ) -> HistoricalPerformance:
        return HistoricalPerformance(
            average_occupancy=average_occupancy,
            average_adr=average_adr,
            seasonal_trend=seasonal_trend,
            has_historical_data=has_historical_data,
        )

    return _make
