"""
Calendar rules shared by the demand classifier, the trend classifier, the
occupancy forecaster and the confidence scorer.

Months are expressed 0-indexed (January = 0) to match the season table:

    month index   season           factor (default)
    -----------   --------------   ----------------
    5–8           summer           1.15   (June–September)
    11, 0         winter holiday   1.20   (December, January)
    2–4           spring           1.05   (March–May)
    other         fall             0.95   (February, October, November)
"""

from __future__ import annotations

import math
from datetime import date, datetime, time, timezone
from typing import Optional

from rate_engine.config import DEFAULT_ENGINE_CONFIG, SeasonalityConfig
from rate_engine.utils.time_utils import ensure_utc, utcnow

_SECONDS_PER_DAY = 86_400


def month_index(stay_date: date) -> int:
    """Return the 0-indexed calendar month (January = 0)."""
    return stay_date.month - 1


def season_of(stay_date: date) -> str:
    """Return ``"summer"``, ``"winter_holiday"``, ``"spring"`` or ``"fall"``."""
    month = month_index(stay_date)
    if 5 <= month <= 8:
        return "summer"
    if month in (11, 0):
        return "winter_holiday"
    if 2 <= month <= 4:
        return "spring"
    return "fall"


def seasonal_demand_factor(
    stay_date: date,
    config: SeasonalityConfig = DEFAULT_ENGINE_CONFIG.seasonality,
) -> float:
    """Return the seasonal demand multiplier for ``stay_date``."""
    return getattr(config, season_of(stay_date))


def is_weekend(stay_date: date) -> bool:
    """True on Saturday and Sunday."""
    return stay_date.weekday() >= 5


def days_ahead(stay_date: date, now: Optional[datetime] = None) -> int:
    """Whole days from ``now`` until midnight UTC of ``stay_date``, rounded up.

    Past dates give zero or a negative number.  A naive ``now`` is read as UTC.
    """
    now = ensure_utc(now) if now is not None else utcnow()
    target = datetime.combine(stay_date, time.min, tzinfo=timezone.utc)
    return math.ceil((target - now).total_seconds() / _SECONDS_PER_DAY)
