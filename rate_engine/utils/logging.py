"""
Logging setup for the rate recommendation engine.

``configure_logging(config)`` is called once by the CLI before a batch run.
Library modules only ever do ``logger = logging.getLogger(__name__)``; the
heuristic modules under ``rate_engine.engine`` do not log at all, only the
orchestrator and the batch runner do.

The orchestrator attaches the rate cell to its records via ``extra=``
(``rate_id``, ``property_id``, ``room_type_code``, ``stay_date``).  Both
formatters surface it:

  text  ``2026-02-24T15:00:00Z [WARNING] rate_engine.engine.orchestrator: ... {DLX 2025-06-14 rate_id=r-1}``
  json  ``{"ts": "...", "level": "WARNING", "logger": "...", "msg": "...", "cell": {...}}``
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from rate_engine.config import LoggingConfig

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

CELL_FIELDS = ("rate_id", "property_id", "room_type_code", "stay_date")

_STANDARD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


def _cell_of(record: logging.LogRecord) -> dict[str, Any]:
    return {name: getattr(record, name) for name in CELL_FIELDS if hasattr(record, name)}


class _TextFormatter(logging.Formatter):
    """Plain single-line format with the rate cell appended in braces."""

    def __init__(self) -> None:
        super().__init__(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        cell = _cell_of(record)
        if not cell:
            return line
        label = " ".join(
            str(cell[k]) for k in ("room_type_code", "stay_date") if k in cell
        )
        if "rate_id" in cell:
            label = f"{label} rate_id={cell['rate_id']}".strip()
        first, sep, rest = line.partition("\n")
        return f"{first} {{{label}}}{sep}{rest}"


class _JsonFormatter(logging.Formatter):
    """One JSON object per line: ``ts``, ``level``, ``logger``, ``msg``.

    Rate-cell fields are grouped under ``cell``; any other ``extra=`` keys
    stay at the top level.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).strftime(
                LOG_DATE_FORMAT
            ),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        cell = _cell_of(record)
        if cell:
            payload["cell"] = cell
        for key, val in vars(record).items():
            if key in _STANDARD_ATTRS or key in CELL_FIELDS or key.startswith("_"):
                continue
            payload[key] = val
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def _build_handlers(config: "LoggingConfig", level: int) -> list[logging.Handler]:
    formatter: logging.Formatter = _JsonFormatter() if config.json_format else _TextFormatter()

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if config.log_file:
        log_path = Path(config.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
    return handlers


def configure_logging(config: "LoggingConfig") -> None:
    """Install stdout (and optional file) handlers on the root logger.

    Args:
        config: ``AppConfig.logging``; ``level`` is already validated and
            upper-cased by the config model.
    """
    level = logging.getLevelName(config.level)
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(level=level, handlers=_build_handlers(config, level), force=True)
