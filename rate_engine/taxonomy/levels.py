"""
Classification vocabularies shared by the engine, the models and reporting.

  - ``DemandLevel``        — booking pressure for one room/date.
  - ``MarketTrend``        — direction of competitor pricing.
  - ``MarketPositionTier`` — where our rate sits in the competitive set.
  - ``GapAction``          — per-competitor rate gap verdict.

This module has NO imports from any other ``rate_engine`` package.
"""

from enum import StrEnum


class DemandLevel(StrEnum):
    """Engine's classification of demand for a room/date."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class MarketTrend(StrEnum):
    """Directional movement of competitor pricing."""

    UP = "up"
    DOWN = "down"
    STABLE = "stable"


class MarketPositionTier(StrEnum):
    """Percentile band of the current rate within the competitor set."""

    PREMIUM = "premium"
    """At or above the 75th percentile."""

    COMPETITIVE = "competitive"
    """Between the 25th and 75th percentile."""

    VALUE = "value"
    """Below the 25th percentile."""


class GapAction(StrEnum):
    """Suggested move relative to a single competitor."""

    INCREASE = "increase"
    DECREASE = "decrease"
    MAINTAIN = "maintain"
