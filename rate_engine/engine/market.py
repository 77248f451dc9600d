"""
Market metrics: reduce the relevant competitor rates for one room type and
stay date into average, min, max and population standard deviation.

Relevance
---------
An observation is relevant to a rate cell when all of these hold:
    room_type_code == cell.room_type_code
    date           == cell.date           (exact calendar date)
    availability   is True
    rate           > 0 and finite

No rounding happens here; rounding is applied only when the orchestrator
assembles the output record.

``MarketMetricsCache`` indexes one observation set by (room_type_code, date)
so that the many rate plans of a room type on the same date share a single
filter + reduction.  It is safe to share across threads; a miss is computed
outside the lock, and when two workers race on one key the first stored
snapshot wins.
"""

from __future__ import annotations

import math
import threading
from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional, Sequence

from rate_engine.models.rates import CompetitorObservation


@dataclass(frozen=True)
class MarketMetrics:
    """Summary statistics of the relevant competitor rates.

    Attributes:
        average:            Arithmetic mean rate.
        min:                Lowest rate.
        max:                Highest rate.
        standard_deviation: Population standard deviation.
        count:              Number of rates reduced.
    """

    average:            float
    min:                float
    max:                float
    standard_deviation: float
    count:              int

    @property
    def volatility(self) -> float:
        """Coefficient of variation (std / mean); 0.0 for a zero mean."""
        if self.average == 0:
            return 0.0
        return self.standard_deviation / self.average


def is_relevant(
    observation:    CompetitorObservation,
    room_type_code: str,
    stay_date:      date,
) -> bool:
    """Return True if ``observation`` can be compared against the rate cell."""
    return (
        observation.room_type_code == room_type_code
        and observation.date == stay_date
        and observation.availability
        and math.isfinite(observation.rate)
        and observation.rate > 0
    )


def filter_relevant_observations(
    observations:   Iterable[CompetitorObservation],
    room_type_code: str,
    stay_date:      date,
) -> list[CompetitorObservation]:
    """Keep only observations for the same room type, exact date, available, priced."""
    return [o for o in observations if is_relevant(o, room_type_code, stay_date)]


def compute_market_metrics(rates: Sequence[float]) -> MarketMetrics:
    """Reduce a non-empty sequence of rates to ``MarketMetrics``.

    Args:
        rates: Competitor rates; callers filter to relevant observations first.

    Returns:
        MarketMetrics with unrounded values.

    Raises:
        ValueError: If ``rates`` is empty.
    """
    if not rates:
        raise ValueError("compute_market_metrics() requires at least one rate.")

    n       = len(rates)
    average = sum(rates) / n
    variance = sum((r - average) ** 2 for r in rates) / n

    return MarketMetrics(
        average=average,
        min=min(rates),
        max=max(rates),
        standard_deviation=math.sqrt(variance),
        count=n,
    )


@dataclass(frozen=True)
class MarketSnapshot:
    """Relevant observations for one (room_type_code, date) and their metrics.

    ``metrics`` is None when no observation is relevant.
    """

    room_type_code: str
    date:           date
    observations:   tuple[CompetitorObservation, ...]
    metrics:        Optional[MarketMetrics]


def build_market_snapshot(
    observations:   Iterable[CompetitorObservation],
    room_type_code: str,
    stay_date:      date,
) -> MarketSnapshot:
    """Filter ``observations`` for one cell and reduce them, if any remain."""
    relevant = filter_relevant_observations(observations, room_type_code, stay_date)
    metrics = compute_market_metrics([o.rate for o in relevant]) if relevant else None
    return MarketSnapshot(
        room_type_code=room_type_code,
        date=stay_date,
        observations=tuple(relevant),
        metrics=metrics,
    )


class MarketMetricsCache:
    """Memoized ``MarketSnapshot`` lookup over one fixed observation set.

    Observations are bucketed by (room_type_code, date) once at construction;
    each bucket is filtered and reduced on first request and then reused.

    Usage::

        cache = MarketMetricsCache(observations)
        snapshot = cache.snapshot("DLX", date(2025, 6, 14))
    """

    def __init__(self, observations: Iterable[CompetitorObservation]) -> None:
        buckets: dict[tuple[str, date], list[CompetitorObservation]] = defaultdict(list)
        for obs in observations:
            buckets[(obs.room_type_code, obs.date)].append(obs)
        self._buckets = dict(buckets)
        self._snapshots: dict[tuple[str, date], MarketSnapshot] = {}
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def snapshot(self, room_type_code: str, stay_date: date) -> MarketSnapshot:
        """Return the (possibly cached) snapshot for one room type and date."""
        key = (room_type_code, stay_date)
        with self._lock:
            cached = self._snapshots.get(key)
            if cached is not None:
                self.hits += 1
                return cached
            self.misses += 1

        snap = build_market_snapshot(self._buckets.get(key, ()), room_type_code, stay_date)
        with self._lock:
            return self._snapshots.setdefault(key, snap)

    def __len__(self) -> int:
        return len(self._snapshots)
