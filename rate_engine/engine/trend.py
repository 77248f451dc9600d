"""
Market trend classification.

Rules (evaluated in order, first match wins):
    1. Historical trend is "up" or "down"      → return it unchanged.
    2. Volatility (std / mean) <= threshold    → "stable".
    3. Volatile market, summer / winter holiday / spring stay date → "up".
    4. Volatile market, any other month        → "down".

Volatility above the threshold without a historical signal is resolved
through the seasonal prior instead of being reported as "stable".
"""

from __future__ import annotations

from datetime import date

from rate_engine.config import DEFAULT_ENGINE_CONFIG, EngineConfig
from rate_engine.engine.market import MarketMetrics
from rate_engine.engine.seasonality import season_of
from rate_engine.taxonomy.levels import MarketTrend

_RISING_SEASONS = frozenset({"summer", "winter_holiday", "spring"})


def classify_trend(
    historical_trend: MarketTrend,
    metrics:          MarketMetrics,
    stay_date:        date,
    config:           EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> MarketTrend:
    """Return the market trend for a rate cell.

    Args:
        historical_trend: ``HistoricalPerformance.seasonal_trend``.
        metrics:          Market metrics of the relevant competitor set.
        stay_date:        Stay date, used for the seasonal prior.
        config:           Engine configuration.

    Raises:
        ZeroDivisionError: If the market average is zero.
    """
    if historical_trend != MarketTrend.STABLE:
        return MarketTrend(historical_trend)

    volatility = metrics.standard_deviation / metrics.average
    if volatility <= config.trend.volatility_threshold:
        return MarketTrend.STABLE

    if season_of(stay_date) in _RISING_SEASONS:
        return MarketTrend.UP
    return MarketTrend.DOWN
