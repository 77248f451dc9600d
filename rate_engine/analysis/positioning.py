"""
Competitive positioning: where the current rate sits within its competitor
set for one room type and stay date, and what that suggests.

All functions are pure; ``analyze_market()`` is the one-call entry point.

Rules
-----
percentile        : share of competitor rates strictly below the current rate.
tier              : premium >= 75, competitive >= 25, value otherwise.
position_index    : 0–100 linear position between market min and max
                    (50 when every competitor charges the same).
segment_market    : top 30% premium, next 40% mid, rest value (counts rounded up).
competitive gaps  : current vs. each competitor; > +15% → decrease,
                    < −15% → increase, otherwise maintain.
rate clusters     : runs of sorted rates with consecutive gaps <= 20,
                    kept when they hold at least two rates.
"""

from __future__ import annotations

import datetime as dt
import math
import statistics
from dataclasses import dataclass, field
from typing import Optional, Sequence

from rate_engine.engine.market import compute_market_metrics, filter_relevant_observations
from rate_engine.models.rates import CompetitorObservation, RateContext
from rate_engine.taxonomy.levels import GapAction, MarketPositionTier

PREMIUM_PERCENTILE = 75.0
VALUE_PERCENTILE = 25.0
GAP_ACTION_PCT = 15.0
SIGNIFICANT_GAP_PCT = 25.0
MEDIAN_GAP_ALERT = 20.0
CLUSTER_THRESHOLD = 20.0


@dataclass(frozen=True)
class MarketPosition:
    """Percentile position of a rate within the competitor set."""

    percentile:     int
    tier:           MarketPositionTier
    gap_to_median:  float
    gap_to_closest: float


@dataclass(frozen=True)
class MarketSegmentation:
    """Competitor set split into premium / mid / value tiers (by rate, desc)."""

    premium:         tuple[CompetitorObservation, ...]
    mid:             tuple[CompetitorObservation, ...]
    value:           tuple[CompetitorObservation, ...]
    premium_average: float
    mid_average:     float
    value_average:   float


@dataclass(frozen=True)
class CompetitiveGap:
    """Rate difference to one competitor."""

    competitor_name:       str
    rate_difference:       float
    percentage_difference: float
    action:                GapAction


@dataclass(frozen=True)
class RateCluster:
    """A run of closely spaced competitor rates."""

    center: float
    rates:  tuple[float, ...]

    @property
    def size(self) -> int:
        return len(self.rates)

    def contains(self, rate: float) -> bool:
        return min(self.rates) <= rate <= max(self.rates)


@dataclass(frozen=True)
class MarketAnalysis:
    """Market snapshot plus positioning advice for one rate cell."""

    property_id:      str
    room_type_code:   str
    date:             dt.date
    current_rate:     float
    market_average:   float
    market_min:       float
    market_max:       float
    position_index:   float
    competitor_count: int
    position:         MarketPosition
    advice:           list[str] = field(default_factory=list)


def _average(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def position_index(current_rate: float, market_min: float, market_max: float) -> float:
    """Linear 0–100 position of ``current_rate`` between min and max.

    Values outside the observed band fall outside 0–100.
    """
    if market_max <= market_min:
        return 50.0
    return (current_rate - market_min) / (market_max - market_min) * 100.0


def analyze_market_position(current_rate: float, rates: Sequence[float]) -> MarketPosition:
    """Percentile, tier and gaps of ``current_rate`` within ``rates``.

    Raises:
        ValueError: If ``rates`` is empty.
    """
    if not rates:
        raise ValueError("analyze_market_position() requires at least one rate.")

    below = sum(1 for r in rates if r < current_rate)
    percentile = below / len(rates) * 100.0

    if percentile >= PREMIUM_PERCENTILE:
        tier = MarketPositionTier.PREMIUM
    elif percentile >= VALUE_PERCENTILE:
        tier = MarketPositionTier.COMPETITIVE
    else:
        tier = MarketPositionTier.VALUE

    ordered = sorted(rates)
    # min() keeps the first (lowest) rate on ties
    closest = min(ordered, key=lambda r: abs(r - current_rate))

    return MarketPosition(
        percentile=math.floor(percentile + 0.5),
        tier=tier,
        gap_to_median=current_rate - statistics.median(ordered),
        gap_to_closest=current_rate - closest,
    )


def segment_market(observations: Sequence[CompetitorObservation]) -> MarketSegmentation:
    """Split competitors into premium (top 30%), mid (next 40%) and value tiers."""
    ordered = sorted(observations, key=lambda o: o.rate, reverse=True)
    total = len(ordered)
    premium_count = math.ceil(total * 0.3)
    mid_count = math.ceil(total * 0.4)

    premium = tuple(ordered[:premium_count])
    mid = tuple(ordered[premium_count:premium_count + mid_count])
    value = tuple(ordered[premium_count + mid_count:])

    return MarketSegmentation(
        premium=premium,
        mid=mid,
        value=value,
        premium_average=_average([o.rate for o in premium]),
        mid_average=_average([o.rate for o in mid]),
        value_average=_average([o.rate for o in value]),
    )


def identify_competitive_gaps(
    current_rate: float,
    observations: Sequence[CompetitorObservation],
) -> list[CompetitiveGap]:
    """Compare the current rate against every competitor with a positive, finite rate."""
    gaps: list[CompetitiveGap] = []
    for obs in observations:
        if obs.rate <= 0 or not math.isfinite(obs.rate):
            continue
        difference = current_rate - obs.rate
        pct = difference / obs.rate * 100.0
        if pct > GAP_ACTION_PCT:
            action = GapAction.DECREASE
        elif pct < -GAP_ACTION_PCT:
            action = GapAction.INCREASE
        else:
            action = GapAction.MAINTAIN
        gaps.append(
            CompetitiveGap(
                competitor_name=obs.competitor_name or obs.competitor_id,
                rate_difference=difference,
                percentage_difference=pct,
                action=action,
            )
        )
    return gaps


def identify_rate_clusters(
    rates: Sequence[float],
    threshold: float = CLUSTER_THRESHOLD,
) -> list[RateCluster]:
    """Group sorted rates whose consecutive gaps are at most ``threshold``."""
    clusters: list[RateCluster] = []
    current: list[float] = []

    for rate in sorted(rates):
        if not current or rate - current[-1] <= threshold:
            current.append(rate)
            continue
        if len(current) >= 2:
            clusters.append(RateCluster(center=_average(current), rates=tuple(current)))
        current = [rate]

    if len(current) >= 2:
        clusters.append(RateCluster(center=_average(current), rates=tuple(current)))
    return clusters


# ── Advice ────────────────────────────────────────────────────────────────────

def _positioning_advice(position: MarketPosition) -> list[str]:
    advice: list[str] = []
    if position.tier == MarketPositionTier.PREMIUM:
        if position.percentile > 90:
            advice.append(
                "You are positioned in the top 10% of the market - "
                "ensure value proposition justifies premium pricing"
            )
        else:
            advice.append(
                "Strong premium positioning - consider highlighting unique amenities and services"
            )
    elif position.tier == MarketPositionTier.VALUE:
        if position.percentile < 10:
            advice.append(
                "Very aggressive value positioning - "
                "monitor for potential revenue optimization opportunities"
            )
        else:
            advice.append(
                "Value positioning may attract price-sensitive guests - "
                "ensure operational efficiency"
            )
    else:
        advice.append(
            "Well-positioned in the competitive middle tier - "
            "good balance of rate and market appeal"
        )

    if abs(position.gap_to_median) > MEDIAN_GAP_ALERT:
        direction = "above" if position.gap_to_median > 0 else "below"
        advice.append(
            f"Rate is {abs(position.gap_to_median):.0f} {direction} market median - "
            "consider market positioning strategy"
        )
    return advice


def _gap_advice(gaps: Sequence[CompetitiveGap]) -> list[str]:
    if not gaps:
        return []
    advice: list[str] = []
    total = len(gaps)
    increase = sum(1 for g in gaps if g.action == GapAction.INCREASE)
    decrease = sum(1 for g in gaps if g.action == GapAction.DECREASE)
    maintain = sum(1 for g in gaps if g.action == GapAction.MAINTAIN)

    if decrease > total * 0.6:
        advice.append(
            "Rate appears high relative to most competitors - consider competitive adjustment"
        )
    elif increase > total * 0.6:
        advice.append(
            "Rate appears low relative to most competitors - opportunity for rate optimization"
        )
    elif maintain > total * 0.5:
        advice.append(
            "Rate is well-aligned with competitive set - maintain current positioning"
        )

    significant = [g for g in gaps if abs(g.percentage_difference) > SIGNIFICANT_GAP_PCT]
    if significant:
        first = significant[0]
        direction = "higher" if first.percentage_difference > 0 else "lower"
        advice.append(
            f"Significant rate gap with {first.competitor_name} "
            f"({abs(first.percentage_difference):.0f}% {direction})"
        )
    return advice


def _market_condition_advice(
    current_rate: float,
    market_average: float,
    observations: Sequence[CompetitorObservation],
) -> list[str]:
    advice: list[str] = []
    priced = [o.rate for o in observations if o.rate > 0 and math.isfinite(o.rate)]

    if priced and market_average > 0:
        cv = compute_market_metrics(priced).standard_deviation / market_average
        if cv > 0.2:
            advice.append(
                "High market volatility detected - monitor competitor rate changes closely"
            )
        elif cv < 0.1:
            advice.append(
                "Stable market conditions - good environment for strategic positioning"
            )

    available_share = sum(1 for o in observations if o.availability) / len(observations)
    if available_share < 0.7:
        advice.append(
            "Limited competitor availability suggests strong demand - consider rate optimization"
        )
    elif available_share > 0.9:
        advice.append("High competitor availability indicates competitive market conditions")

    clusters = identify_rate_clusters(priced)
    if len(clusters) > 1:
        for cluster in clusters:
            if cluster.contains(current_rate):
                advice.append(
                    f"Rate aligns with {cluster.size}-property cluster around {cluster.center:.0f}"
                )
                break
    return advice


def build_market_advice(
    current_rate: Optional[float],
    market_average: float,
    observations: Sequence[CompetitorObservation],
) -> list[str]:
    """Positioning, gap and market-condition advice for one rate cell.

    ``observations`` should be the competitor set for the same room type and
    date; unavailable competitors count towards the availability signal.
    """
    if not current_rate or not observations:
        return ["Insufficient data for competitive analysis"]

    priced = [o for o in observations if o.rate > 0 and math.isfinite(o.rate)]
    if not priced:
        return ["Insufficient data for competitive analysis"]

    position = analyze_market_position(current_rate, [o.rate for o in priced])
    return (
        _positioning_advice(position)
        + _gap_advice(identify_competitive_gaps(current_rate, priced))
        + _market_condition_advice(current_rate, market_average, observations)
    )


def analyze_market(
    rate_context: RateContext,
    observations: Sequence[CompetitorObservation],
) -> Optional[MarketAnalysis]:
    """Full positioning analysis for one rate cell.

    Market statistics use the relevant observations only (same room type,
    exact date, available, priced); the availability signal in the advice
    uses every observation for the room type and date.

    Returns:
        ``MarketAnalysis``, or None when no observation is relevant.
    """
    relevant = filter_relevant_observations(
        observations, rate_context.room_type_code, rate_context.date
    )
    if not relevant:
        return None

    same_cell = [
        o for o in observations
        if o.room_type_code == rate_context.room_type_code and o.date == rate_context.date
    ]
    metrics = compute_market_metrics([o.rate for o in relevant])
    current = rate_context.current_rate

    return MarketAnalysis(
        property_id=rate_context.property_id,
        room_type_code=rate_context.room_type_code,
        date=rate_context.date,
        current_rate=current,
        market_average=metrics.average,
        market_min=metrics.min,
        market_max=metrics.max,
        position_index=position_index(current, metrics.min, metrics.max),
        competitor_count=metrics.count,
        position=analyze_market_position(current, [o.rate for o in relevant]),
        advice=build_market_advice(current, metrics.average, same_cell),
    )
