"""Numeric helpers for output boundaries."""

from __future__ import annotations

import math


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from negative infinity.

    ``round()`` uses banker's rounding (``round(2.5) == 2``); published rates
    and scores round halves up (``round_half_up(2.5) == 3``).
    """
    return math.floor(value + 0.5)


def round_within(value: float, lo: float, hi: float) -> int:
    """Round ``value`` half-up, then nudge it back inside ``[lo, hi]``.

    Rounding a clamped value can step just outside the band (a floor of
    3749.25 rounds to 3749).

    Known limitation: a band narrower than one unit may contain no integer
    at all (a current rate of 1.5 gives ``[1.125, 1.875]``).  An integer
    inside the band cannot exist then, so the plain half-up value is
    returned and lies outside the band (``2`` for that example).  Only
    current rates below 2 can hit this.
    """
    rounded = round_half_up(value)
    lo_int, hi_int = math.ceil(lo), math.floor(hi)
    if lo_int > hi_int:
        return rounded
    return max(lo_int, min(hi_int, rounded))
