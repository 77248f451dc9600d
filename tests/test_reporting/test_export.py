"""
Tests for rate_engine/reporting/export.py.

What we test
------------
recommendation_to_row():
  - Factors are flattened; change_pct is signed with two decimals.

write_recommendation_csv():
  - File name pattern, header, row order (date, room type, rate plan).

write_recommendation_json():
  - Payload metadata and JSON-mode recommendation dumps.
"""

from __future__ import annotations

import csv
import json
from datetime import date, datetime, timezone

from rate_engine.models.recommendation import RateRecommendation, RecommendationFactors
from rate_engine.reporting.export import (
    CSV_FIELDNAMES,
    SCHEMA_VERSION,
    recommendation_to_row,
    write_recommendation_csv,
    write_recommendation_json,
)
from rate_engine.taxonomy.levels import DemandLevel, MarketTrend

RUN_DATE = date(2025, 6, 10)


def _rec(stay: date, room: str = "rt-dlx", plan: str = "bar", suggested: int = 5335) -> RateRecommendation:
    return RateRecommendation(
        id=f"rec_{room}_{plan}_{stay}",
        property_id="prop-1",
        room_type_id=room,
        rate_plan_id=plan,
        date=stay,
        current_rate=5000.0,
        suggested_rate=suggested,
        confidence=97,
        reasoning="Consider increasing rate by 7%.",
        factors=RecommendationFactors(
            competitor_average=5130,
            market_trend=MarketTrend.STABLE,
            demand_level=DemandLevel.MEDIUM,
            occupancy_forecast=100,
        ),
        created_at=datetime(2025, 6, 10, 12, tzinfo=timezone.utc),
    )


class TestRecommendationToRow:
    def test_flat_row(self):
        row = recommendation_to_row(_rec(date(2025, 6, 14)))
        assert set(row) == set(CSV_FIELDNAMES)
        assert row["date"] == "2025-06-14"
        assert row["change_pct"] == "+6.70"
        assert row["market_trend"] == "stable"
        assert row["demand_level"] == "medium"

    def test_negative_change(self):
        assert recommendation_to_row(_rec(date(2025, 6, 14), suggested=3750))["change_pct"] == "-25.00"


class TestWriteCsv:
    def test_writes_sorted_rows(self, tmp_path):
        recs = [
            _rec(date(2025, 6, 15), "rt-std"),
            _rec(date(2025, 6, 14), "rt-std", "nrf"),
            _rec(date(2025, 6, 14), "rt-dlx"),
            _rec(date(2025, 6, 14), "rt-std", "bar"),
        ]
        path = write_recommendation_csv(recs, tmp_path / "out", "prop-1", RUN_DATE)
        assert path.name == "recommendations_prop-1_2025-06-10.csv"

        with path.open(encoding="utf-8") as f:
            rows = list(csv.DictReader(f))
        assert list(rows[0].keys()) == CSV_FIELDNAMES
        assert [(r["date"], r["room_type_id"], r["rate_plan_id"]) for r in rows] == [
            ("2025-06-14", "rt-dlx", "bar"),
            ("2025-06-14", "rt-std", "bar"),
            ("2025-06-14", "rt-std", "nrf"),
            ("2025-06-15", "rt-std", "bar"),
        ]

    def test_empty_list_writes_header_only(self, tmp_path):
        path = write_recommendation_csv([], tmp_path, "prop-1", RUN_DATE)
        lines = path.read_text(encoding="utf-8").strip().splitlines()
        assert len(lines) == 1


class TestWriteJson:
    def test_payload(self, tmp_path):
        recs = [_rec(date(2025, 6, 14)), _rec(date(2025, 6, 15))]
        path = write_recommendation_json(recs, tmp_path, "prop-1", RUN_DATE, run_slug="run-1")
        assert path.name == "recommendations_prop-1_2025-06-10.json"

        payload = json.loads(path.read_text(encoding="utf-8"))
        assert payload["schema_version"] == SCHEMA_VERSION
        assert payload["property_id"] == "prop-1"
        assert payload["generated_at"] == "2025-06-10"
        assert payload["run_slug"] == "run-1"
        assert payload["count"] == 2
        first = payload["recommendations"][0]
        assert first["suggested_rate"] == 5335
        assert first["factors"]["competitor_average"] == 5130
