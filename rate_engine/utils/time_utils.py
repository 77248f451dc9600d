"""
Date and time helpers shared by models, ingestion and the CLI.

Calendar rules used by the heuristic itself (season, weekend, lead time)
live in ``rate_engine.engine.seasonality``; this module only deals with
clocks and parsing.
"""

from __future__ import annotations

from datetime import date, datetime, timezone


def utcnow() -> datetime:
    """Return the current UTC datetime with timezone info.

    Prefer this over ``datetime.utcnow()`` (which returns naive datetimes).
    """
    return datetime.now(tz=timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to a naive datetime; convert an aware one to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_iso_date(value: str | date | datetime) -> date:
    """Parse ``YYYY-MM-DD`` (or a full ISO timestamp) into a calendar date.

    Timestamps are reduced to their UTC calendar date, which is how rate
    shoppers stamp competitor observations.

    Raises:
        ValueError: If the string is not a valid ISO date or timestamp.
    """
    if isinstance(value, datetime):
        return ensure_utc(value).date() if value.tzinfo else value.date()
    if isinstance(value, date):
        return value
    text = value.strip()
    if len(text) == 10:
        return date.fromisoformat(text)
    parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    return ensure_utc(parsed).date() if parsed.tzinfo else parsed.date()
