"""
Reasoning text for a rate recommendation.

Pure formatting: the sentences restate signals the engine already computed
and never take a decision of their own.  Four sentences, in order:

    1. Rate change  : |Δ%| < 2 → well-positioned, else increase/decrease by N%.
    2. Market position (current vs. average):
                      > +10% → significantly above, < −10% → significantly
                      below, otherwise close to the market average.
    3. Demand       : one sentence per demand level.
    4. Trend        : one sentence per market trend.

The thresholds are part of the output contract: dashboards render this text
next to the numeric factors, so both must tell the same story.
"""

from __future__ import annotations

from rate_engine.engine.market import MarketMetrics
from rate_engine.taxonomy.levels import DemandLevel, MarketTrend
from rate_engine.utils.numbers import round_half_up

NO_CHANGE_THRESHOLD_PCT = 2.0
MARKET_BAND_PCT = 10.0

_DEMAND_SENTENCES: dict[DemandLevel, str] = {
    DemandLevel.HIGH:   "High demand conditions support premium pricing.",
    DemandLevel.MEDIUM: "Moderate demand allows for balanced pricing.",
    DemandLevel.LOW:    "Lower demand suggests competitive pricing needed.",
}

_TREND_SENTENCES: dict[MarketTrend, str] = {
    MarketTrend.UP:     "Market trends are favorable for rate increases.",
    MarketTrend.DOWN:   "Market softening suggests caution with rate increases.",
    MarketTrend.STABLE: "Stable market conditions support current strategy.",
}


def rate_change_sentence(current_rate: float, suggested_rate: float) -> str:
    change_pct = (suggested_rate - current_rate) / current_rate * 100.0
    if abs(change_pct) < NO_CHANGE_THRESHOLD_PCT:
        return "Current rate is well-positioned."
    if change_pct > 0:
        return f"Consider increasing rate by {round_half_up(change_pct)}%."
    return f"Consider decreasing rate by {round_half_up(abs(change_pct))}%."


def market_position_sentence(current_rate: float, market_average: float) -> str:
    position_pct = (current_rate - market_average) / market_average * 100.0
    if position_pct > MARKET_BAND_PCT:
        return "Your rate is significantly above market average."
    if position_pct < -MARKET_BAND_PCT:
        return "Your rate is significantly below market average."
    return "Your rate is close to market average."


def build_reasoning(
    current_rate:   float,
    suggested_rate: float,
    metrics:        MarketMetrics,
    demand_level:   DemandLevel,
    market_trend:   MarketTrend,
) -> str:
    """Assemble the four-sentence explanation for a recommendation.

    Example::

        "Consider increasing rate by 7%. Your rate is close to market average.
        Moderate demand allows for balanced pricing. Stable market conditions
        support current strategy."
    """
    return " ".join(
        (
            rate_change_sentence(current_rate, suggested_rate),
            market_position_sentence(current_rate, metrics.average),
            _DEMAND_SENTENCES[DemandLevel(demand_level)],
            _TREND_SENTENCES[MarketTrend(market_trend)],
        )
    )
