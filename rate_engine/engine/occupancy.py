"""Occupancy forecast for a stay date."""

from __future__ import annotations

from datetime import date

from rate_engine.config import DEFAULT_ENGINE_CONFIG, EngineConfig
from rate_engine.engine.seasonality import is_weekend, seasonal_demand_factor
from rate_engine.taxonomy.levels import DemandLevel


def forecast_occupancy(
    average_occupancy: float,
    demand_level:      DemandLevel,
    stay_date:         date,
    config:            EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> float:
    """Project occupancy (percent) from history, demand, season and weekday.

    ``(history ± demand adjustment) * seasonal factor + weekend bump``,
    clamped to [20, 100].
    """
    cfg = config.occupancy
    forecast = average_occupancy

    if demand_level == DemandLevel.HIGH:
        forecast += cfg.high_demand_bump
    elif demand_level == DemandLevel.LOW:
        forecast -= cfg.low_demand_drop

    forecast *= seasonal_demand_factor(stay_date, config.seasonality)

    if is_weekend(stay_date):
        forecast += cfg.weekend_bump

    return max(cfg.floor, min(cfg.ceiling, forecast))
