"""
Recommendation report writers: CSV and JSON output for a batch run.

All functions are pure I/O and consume in-memory ``RateRecommendation``
lists; nothing here recomputes a number.

Output files
------------
  data/outputs/recommendations/
    recommendations_{property}_{date}.csv   -- one flat row per recommendation
    recommendations_{property}_{date}.json  -- same data, structured JSON

CSV rows are flat (factors spread into columns) so they load directly in
Excel or pandas without any pre-processing step.
"""

from __future__ import annotations

import csv
import json
import logging
from datetime import date
from pathlib import Path
from typing import Sequence

from rate_engine.models.recommendation import RateRecommendation

logger = logging.getLogger(__name__)

SCHEMA_VERSION = "v0.3.0"

CSV_FIELDNAMES = [
    "id", "property_id", "room_type_id", "rate_plan_id", "date",
    "current_rate", "suggested_rate", "change_pct", "confidence",
    "competitor_average", "market_trend", "demand_level", "occupancy_forecast",
    "reasoning", "created_at",
]


def recommendation_to_row(rec: RateRecommendation) -> dict:
    """Flatten one recommendation into a CSV-ready dict."""
    return {
        "id":                 rec.id,
        "property_id":        rec.property_id,
        "room_type_id":       rec.room_type_id,
        "rate_plan_id":       rec.rate_plan_id,
        "date":               rec.date.isoformat(),
        "current_rate":       rec.current_rate,
        "suggested_rate":     rec.suggested_rate,
        "change_pct":         f"{rec.rate_change_pct:+.2f}",
        "confidence":         rec.confidence,
        "competitor_average": rec.factors.competitor_average,
        "market_trend":       rec.factors.market_trend.value,
        "demand_level":       rec.factors.demand_level.value,
        "occupancy_forecast": rec.factors.occupancy_forecast,
        "reasoning":          rec.reasoning,
        "created_at":         rec.created_at.isoformat(),
    }


def write_recommendation_csv(
    recommendations: Sequence[RateRecommendation],
    output_dir: Path,
    property_id: str,
    run_date: date | None = None,
) -> Path:
    """Write recommendations to ``recommendations_{property}_{date}.csv``.

    Rows are sorted by stay date, then room type, then rate plan.

    Args:
        recommendations: Recommendations from a batch run.
        output_dir:      Target directory (created if missing).
        property_id:     Used in the filename.
        run_date:        Date label for the filename. Defaults to today.

    Returns:
        Path to the written CSV file.
    """
    if run_date is None:
        run_date = date.today()

    output_dir.mkdir(parents=True, exist_ok=True)
    csv_path = output_dir / f"recommendations_{property_id}_{run_date}.csv"

    ordered = sorted(
        recommendations, key=lambda r: (r.date, r.room_type_id, r.rate_plan_id)
    )
    with csv_path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=CSV_FIELDNAMES)
        writer.writeheader()
        for rec in ordered:
            writer.writerow(recommendation_to_row(rec))

    logger.info("Recommendation CSV written: %s (%d rows)", csv_path, len(ordered))
    return csv_path


def write_recommendation_json(
    recommendations: Sequence[RateRecommendation],
    output_dir: Path,
    property_id: str,
    run_date: date | None = None,
    run_slug: str = "",
) -> Path:
    """Write recommendations to a structured JSON file.

    Args:
        recommendations: Recommendations from a batch run.
        output_dir:      Target directory.
        property_id:     Used in filename + metadata.
        run_date:        Date label. Defaults to today.
        run_slug:        Batch run identifier for provenance.

    Returns:
        Path to the written JSON file.
    """
    if run_date is None:
        run_date = date.today()

    output_dir.mkdir(parents=True, exist_ok=True)
    json_path = output_dir / f"recommendations_{property_id}_{run_date}.json"

    payload: dict = {
        "schema_version":  SCHEMA_VERSION,
        "property_id":     property_id,
        "generated_at":    run_date.isoformat(),
        "run_slug":        run_slug,
        "count":           len(recommendations),
        "recommendations": [rec.model_dump(mode="json") for rec in recommendations],
    }

    json_path.write_text(json.dumps(payload, indent=2, default=str), encoding="utf-8")
    logger.info("Recommendation JSON written: %s", json_path)
    return json_path
