"""
Rate optimizer: blend towards the market, apply multipliers, clamp.

Steps (each multiplies the running value)
-----------------------------------------
    1. base    = 0.6 * market_average + 0.4 * current_rate
    2. demand  : high ×1.08 | medium ×1.02 | low ×0.95
    3. trend   : up ×1.05   | down ×0.97   | stable ×1.0
    4. history : occupancy > 85 ×1.03 | occupancy < 65 ×0.98 | else ×1.0
    5. clamp   : [0.75 * current_rate, 1.25 * current_rate]

The result is left unrounded; the orchestrator rounds once when it
assembles the output record.
"""

from __future__ import annotations

from dataclasses import dataclass

from rate_engine.config import DEFAULT_ENGINE_CONFIG, EngineConfig
from rate_engine.engine.market import MarketMetrics
from rate_engine.models.rates import HistoricalPerformance
from rate_engine.taxonomy.levels import DemandLevel, MarketTrend


@dataclass(frozen=True)
class RateBand:
    """Inclusive bounds a suggested rate must fall within."""

    floor:   float
    ceiling: float

    def clamp(self, value: float) -> float:
        return max(self.floor, min(self.ceiling, value))

    def __contains__(self, value: float) -> bool:
        return self.floor <= value <= self.ceiling


def rate_band(current_rate: float, config: EngineConfig = DEFAULT_ENGINE_CONFIG) -> RateBand:
    """Return the clamp band around ``current_rate``."""
    m = config.multipliers
    return RateBand(floor=current_rate * m.floor_ratio, ceiling=current_rate * m.ceiling_ratio)


def demand_multiplier(level: DemandLevel, config: EngineConfig = DEFAULT_ENGINE_CONFIG) -> float:
    m = config.multipliers
    return {
        DemandLevel.HIGH:   m.demand_high,
        DemandLevel.MEDIUM: m.demand_medium,
        DemandLevel.LOW:    m.demand_low,
    }[DemandLevel(level)]


def trend_multiplier(trend: MarketTrend, config: EngineConfig = DEFAULT_ENGINE_CONFIG) -> float:
    m = config.multipliers
    return {
        MarketTrend.UP:     m.trend_up,
        MarketTrend.DOWN:   m.trend_down,
        MarketTrend.STABLE: m.trend_stable,
    }[MarketTrend(trend)]


def performance_multiplier(
    average_occupancy: float,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> float:
    """Premium for strong history, discount for weak history, else neutral."""
    m = config.multipliers
    if average_occupancy > m.strong_occupancy:
        return m.strong_multiplier
    if average_occupancy < m.weak_occupancy:
        return m.weak_multiplier
    return 1.0


def optimize_rate(
    current_rate: float,
    metrics:      MarketMetrics,
    demand_level: DemandLevel,
    market_trend: MarketTrend,
    history:      HistoricalPerformance,
    config:       EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> float:
    """Return the unrounded suggested rate for one cell.

    Args:
        current_rate: Currently published rate (> 0).
        metrics:      Market metrics of the relevant competitor set.
        demand_level: Output of ``classify_demand()``.
        market_trend: Output of ``classify_trend()``.
        history:      Historical performance of the room type.
        config:       Engine configuration.

    Returns:
        Suggested rate inside ``rate_band(current_rate)``.
    """
    blend = config.market_blend
    suggested = metrics.average * blend.market_weight + current_rate * blend.current_weight

    suggested *= demand_multiplier(demand_level, config)
    suggested *= trend_multiplier(market_trend, config)
    suggested *= performance_multiplier(history.average_occupancy, config)

    return rate_band(current_rate, config).clamp(suggested)
