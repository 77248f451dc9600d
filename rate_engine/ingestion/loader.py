"""
JSON input-bundle loader for offline runs of the engine.

Format — one JSON object with three keys::

    {
      "rate_contexts": [
        {"rate_id": "r-1", "property_id": "p-1", "room_type_id": "rt-1",
         "rate_plan_id": "bar", "date": "2025-06-14", "current_rate": 5000,
         "inventory": 4, "room_type_code": "DLX"}
      ],
      "competitor_observations": [
        {"competitor_id": "c-1", "competitor_name": "Harbor Inn",
         "room_type_code": "DLX", "rate": 5200, "currency": "USD",
         "date": "2025-06-14", "availability": true}
      ],
      "historical_performance": {
        "DLX": {"average_occupancy": 88, "average_adr": 5100,
                "seasonal_trend": "stable"}
      }
    }

``historical_performance`` is keyed by room type code.  Dates accept
``YYYY-MM-DD`` or full ISO 8601 timestamps.

All records are validated before any are returned.  If **any** record fails,
a single ``ValueError`` lists the first 10 failures.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, TypeVar

from pydantic import BaseModel, ValidationError

from rate_engine.models.rates import CompetitorObservation, HistoricalPerformance, RateContext

logger = logging.getLogger(__name__)

REQUIRED_BUNDLE_KEYS = frozenset({
    "rate_contexts", "competitor_observations", "historical_performance",
})

_MAX_ERRORS_SHOWN = 10

M = TypeVar("M", bound=BaseModel)


@dataclass
class InputBundle:
    """Validated engine inputs for one run."""

    rate_contexts:           list[RateContext] = field(default_factory=list)
    competitor_observations: list[CompetitorObservation] = field(default_factory=list)
    historical_performance:  dict[str, HistoricalPerformance] = field(default_factory=dict)

    def contexts_for(self, room_type_code: str) -> list[RateContext]:
        return [c for c in self.rate_contexts if c.room_type_code == room_type_code]


def load_input_bundle(path: Path) -> InputBundle:
    """Read and validate a JSON input bundle.

    Args:
        path: Path to the JSON file (must exist).

    Returns:
        Fully validated ``InputBundle``.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        ValueError: On malformed JSON, missing keys, or any invalid record.
    """
    if not path.exists():
        raise FileNotFoundError(f"Input bundle not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            raw = json.load(f)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path.name}: {exc}") from exc

    return parse_input_bundle(raw, source=path.name)


def parse_input_bundle(raw: Any, source: str = "<bundle>") -> InputBundle:
    """Validate an already-decoded bundle dict.  See module docstring for shape."""
    if not isinstance(raw, dict):
        raise ValueError(f"{source}: input bundle must be a JSON object.")

    missing = REQUIRED_BUNDLE_KEYS - raw.keys()
    if missing:
        raise ValueError(f"{source}: missing required keys: {sorted(missing)}")

    errors: list[str] = []

    contexts = _validate_list(raw["rate_contexts"], "rate_contexts", RateContext, errors)
    observations = _validate_list(
        raw["competitor_observations"], "competitor_observations",
        CompetitorObservation, errors,
    )

    history_raw = raw["historical_performance"]
    history: dict[str, HistoricalPerformance] = {}
    if not isinstance(history_raw, dict):
        errors.append("historical_performance: must be an object keyed by room type code")
    else:
        for code, record in history_raw.items():
            parsed = _validate_one(
                record, f"historical_performance[{code}]", HistoricalPerformance, errors
            )
            if parsed is not None:
                history[code] = parsed

    if errors:
        detail = "\n".join(f"  {msg}" for msg in errors[:_MAX_ERRORS_SHOWN])
        suffix = (
            f"\n  … and {len(errors) - _MAX_ERRORS_SHOWN} more"
            if len(errors) > _MAX_ERRORS_SHOWN else ""
        )
        raise ValueError(
            f"{len(errors)} record(s) failed validation in {source}:\n{detail}{suffix}"
        )

    logger.info(
        "Loaded bundle %s | rate_contexts=%d | observations=%d | room_types=%d",
        source, len(contexts), len(observations), len(history),
    )
    return InputBundle(
        rate_contexts=contexts,
        competitor_observations=observations,
        historical_performance=history,
    )


# ── Private helpers ────────────────────────────────────────────────────────────

def _validate_one(
    record: Any,
    label: str,
    model: Callable[..., M],
    errors: list[str],
) -> M | None:
    if not isinstance(record, dict):
        errors.append(f"{label}: expected an object, got {type(record).__name__}")
        return None
    try:
        return model(**record)
    except (ValidationError, ValueError, TypeError) as exc:
        errors.append(f"{label}: {exc}")
        return None


def _validate_list(
    records: Any,
    key: str,
    model: Callable[..., M],
    errors: list[str],
) -> list[M]:
    if not isinstance(records, list):
        errors.append(f"{key}: must be an array")
        return []
    parsed: list[M] = []
    for i, record in enumerate(records):
        item = _validate_one(record, f"{key}[{i}]", model, errors)
        if item is not None:
            parsed.append(item)
    return parsed
