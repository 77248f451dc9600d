"""
Demand level classification for one rate cell.

Score formula (weighted sum, defaults)
--------------------------------------
    total = (
        rate_position     * 0.30   # current rate / market average
        + occupancy_factor* 0.40   # historical occupancy / 100
        + weekend_factor  * 0.15   # 1.2 on Sat/Sun, else 1.0
        + seasonal_factor * 0.15   # see seasonality.seasonal_demand_factor
    )

Classification (first match wins)
---------------------------------
    1. HIGH   : total >= 1.10
    2. MEDIUM : total >= 0.90
    3. LOW    : everything else
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from rate_engine.config import DEFAULT_ENGINE_CONFIG, EngineConfig
from rate_engine.engine.seasonality import is_weekend, seasonal_demand_factor
from rate_engine.taxonomy.levels import DemandLevel


@dataclass(frozen=True)
class DemandScore:
    """Components of the composite demand score.

    Attributes:
        rate_position:    current_rate / market_average.
        occupancy_factor: average_occupancy / 100.
        weekend_factor:   Weekend multiplier (1.0 on weekdays).
        seasonal_factor:  Seasonal demand factor for the stay date.
        total:            Weighted sum of the four components.
    """

    rate_position:    float
    occupancy_factor: float
    weekend_factor:   float
    seasonal_factor:  float
    total:            float


def compute_demand_score(
    current_rate:      float,
    market_average:    float,
    average_occupancy: float,
    stay_date:         date,
    config:            EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> DemandScore:
    """Compute the four demand components and their weighted total.

    Raises:
        ZeroDivisionError: If ``market_average`` is zero.
    """
    cfg = config.demand

    rate_position    = current_rate / market_average
    occupancy_factor = average_occupancy / 100.0
    weekend_factor   = cfg.weekend_factor if is_weekend(stay_date) else 1.0
    seasonal_factor  = seasonal_demand_factor(stay_date, config.seasonality)

    total = (
        rate_position      * cfg.rate_position_weight
        + occupancy_factor * cfg.occupancy_weight
        + weekend_factor   * cfg.weekend_weight
        + seasonal_factor  * cfg.seasonal_weight
    )

    return DemandScore(
        rate_position=rate_position,
        occupancy_factor=occupancy_factor,
        weekend_factor=weekend_factor,
        seasonal_factor=seasonal_factor,
        total=total,
    )


def level_for_score(total: float, config: EngineConfig = DEFAULT_ENGINE_CONFIG) -> DemandLevel:
    """Map a composite demand score onto LOW / MEDIUM / HIGH."""
    if total >= config.demand.high_threshold:
        return DemandLevel.HIGH
    if total >= config.demand.medium_threshold:
        return DemandLevel.MEDIUM
    return DemandLevel.LOW


def classify_demand(
    current_rate:      float,
    market_average:    float,
    average_occupancy: float,
    stay_date:         date,
    config:            EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> DemandLevel:
    """Classify demand for one rate cell.  Deterministic and stateless."""
    score = compute_demand_score(
        current_rate, market_average, average_occupancy, stay_date, config
    )
    return level_for_score(score.total, config)
