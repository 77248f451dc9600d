"""
Tests for rate_engine/engine/market.py.

What we test
------------
filter_relevant_observations():
  - Keeps only same room type, exact date, available, positive finite rate.

compute_market_metrics():
  - Average / min / max / population standard deviation.
  - Single rate has zero deviation and zero volatility.
  - Empty input raises ValueError.

build_market_snapshot():
  - metrics is None when nothing is relevant.

MarketMetricsCache:
  - Second lookup for the same (room type, date) is a cache hit.
  - Matches an uncached snapshot.
  - Concurrent lookups of one key all return the stored snapshot.
"""

from __future__ import annotations

import math
from concurrent.futures import ThreadPoolExecutor
from datetime import date

import pytest

from rate_engine.engine.market import (
    MarketMetricsCache,
    build_market_snapshot,
    compute_market_metrics,
    filter_relevant_observations,
)
from rate_engine.models.rates import CompetitorObservation


def _obs(rate: float, code: str = "DLX", day: date = date(2025, 6, 14), available: bool = True):
    return CompetitorObservation(
        competitor_id=f"c-{rate}-{code}-{day}",
        room_type_code=code,
        rate=rate,
        date=day,
        availability=available,
    )


class TestFilterRelevant:
    def test_filters_every_rule(self):
        keep = _obs(5000)
        observations = [
            keep,
            _obs(5100, code="STD"),
            _obs(5200, day=date(2025, 6, 15)),
            _obs(5300, available=False),
            _obs(0),
            _obs(-10),
            _obs(float("inf")),
            _obs(float("nan")),
        ]
        result = filter_relevant_observations(observations, "DLX", date(2025, 6, 14))
        assert result == [keep]

    def test_empty_input(self):
        assert filter_relevant_observations([], "DLX", date(2025, 6, 14)) == []


class TestComputeMarketMetrics:
    def test_reference_set(self, reference_rates):
        m = compute_market_metrics(reference_rates)
        assert m.average == pytest.approx(5130.0)
        assert m.min == 4800.0
        assert m.max == 5300.0
        assert m.count == 5
        assert m.standard_deviation == pytest.approx(math.sqrt(31600.0))
        assert m.volatility == pytest.approx(math.sqrt(31600.0) / 5130.0)

    def test_single_rate(self):
        m = compute_market_metrics([4200.0])
        assert m.average == 4200.0
        assert m.standard_deviation == 0.0
        assert m.volatility == 0.0

    def test_empty_raises(self):
        with pytest.raises(ValueError, match="at least one rate"):
            compute_market_metrics([])


class TestMarketSnapshot:
    def test_no_relevant_observations(self):
        snap = build_market_snapshot([_obs(5000, code="STD")], "DLX", date(2025, 6, 14))
        assert snap.metrics is None
        assert snap.observations == ()

    def test_relevant_observations_reduced(self):
        snap = build_market_snapshot([_obs(4000), _obs(6000)], "DLX", date(2025, 6, 14))
        assert snap.metrics is not None
        assert snap.metrics.average == pytest.approx(5000.0)
        assert len(snap.observations) == 2


class TestMarketMetricsCache:
    def test_second_lookup_hits(self):
        cache = MarketMetricsCache([_obs(4000), _obs(6000), _obs(3000, code="STD")])
        first = cache.snapshot("DLX", date(2025, 6, 14))
        second = cache.snapshot("DLX", date(2025, 6, 14))
        assert first is second
        assert cache.hits == 1
        assert cache.misses == 1
        assert len(cache) == 1

    def test_matches_uncached(self):
        observations = [_obs(4000), _obs(6000), _obs(5000, available=False)]
        cache = MarketMetricsCache(observations)
        cached = cache.snapshot("DLX", date(2025, 6, 14))
        direct = build_market_snapshot(observations, "DLX", date(2025, 6, 14))
        assert cached.metrics == direct.metrics

    def test_unknown_bucket_has_no_metrics(self):
        cache = MarketMetricsCache([_obs(4000)])
        assert cache.snapshot("STE", date(2025, 6, 14)).metrics is None

    def test_concurrent_lookups_share_one_snapshot(self):
        cache = MarketMetricsCache([_obs(4000 + i) for i in range(50)])
        with ThreadPoolExecutor(max_workers=8) as pool:
            snaps = list(pool.map(lambda _: cache.snapshot("DLX", date(2025, 6, 14)), range(32)))
        assert all(s is snaps[0] for s in snaps)
        assert len(cache) == 1
        assert cache.hits + cache.misses == 32
