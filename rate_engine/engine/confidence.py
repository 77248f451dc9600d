"""
Confidence scoring for a rate recommendation.

Starts at 100 and subtracts (never multiplies), in order:

    sample size  : < 3 competitors −30, else < 5 competitors −15
    volatility   : min(25, volatility * 100)
    history      : −10 when no real historical data is available
    lead time    : days_ahead > 30 → min(20, (days_ahead − 30) * 0.5)

The result is clamped to [30, 100].  Holding everything else fixed, more
competitors or lower volatility never lowers the score.

"No real historical data" is read from ``HistoricalPerformance.has_historical_data``
when the caller sets it.  When it is None, the legacy convention applies:
an ``average_occupancy`` exactly equal to ``placeholder_occupancy`` (75)
marks a placeholder record.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from rate_engine.config import DEFAULT_ENGINE_CONFIG, ConfidenceConfig, EngineConfig
from rate_engine.engine.seasonality import days_ahead
from rate_engine.models.rates import HistoricalPerformance


@dataclass(frozen=True)
class ConfidenceBreakdown:
    """Individual penalties behind a confidence score.

    Attributes:
        base:               Starting score.
        sample_penalty:     Penalty for a sparse competitor set.
        volatility_penalty: Penalty for market volatility.
        history_penalty:    Penalty for placeholder / missing history.
        horizon_penalty:    Penalty for far-future stay dates.
        floor:              Lower clamp.
        ceiling:            Upper clamp.
    """

    base:               float
    sample_penalty:     float
    volatility_penalty: float
    history_penalty:    float
    horizon_penalty:    float
    floor:              float
    ceiling:            float

    @property
    def unclamped(self) -> float:
        return (
            self.base
            - self.sample_penalty
            - self.volatility_penalty
            - self.history_penalty
            - self.horizon_penalty
        )

    @property
    def score(self) -> float:
        """Final clamped confidence (unrounded)."""
        return max(self.floor, min(self.ceiling, self.unclamped))


def lacks_historical_data(history: HistoricalPerformance, cfg: ConfidenceConfig) -> bool:
    """True if ``history`` should be treated as a placeholder record."""
    if history.has_historical_data is not None:
        return not history.has_historical_data
    return cfg.use_placeholder_sentinel and history.average_occupancy == cfg.placeholder_occupancy


def compute_confidence(
    competitor_count: int,
    volatility:       float,
    history:          HistoricalPerformance,
    stay_date:        date,
    now:              Optional[datetime] = None,
    config:           EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> ConfidenceBreakdown:
    """Compute every confidence penalty for one rate cell.

    Args:
        competitor_count: Number of relevant competitor observations.
        volatility:       Market std / mean.
        history:          Historical performance of the room type.
        stay_date:        Stay date being priced.
        now:              Reference clock; defaults to the current UTC time.
        config:           Engine configuration.
    """
    cfg = config.confidence

    if competitor_count < cfg.sparse_count:
        sample_penalty = cfg.sparse_penalty
    elif competitor_count < cfg.thin_count:
        sample_penalty = cfg.thin_penalty
    else:
        sample_penalty = 0.0

    volatility_penalty = min(cfg.volatility_cap, volatility * 100.0)

    history_penalty = cfg.placeholder_penalty if lacks_historical_data(history, cfg) else 0.0

    lead_days = days_ahead(stay_date, now)
    if lead_days > cfg.horizon_free_days:
        horizon_penalty = min(
            cfg.horizon_cap,
            (lead_days - cfg.horizon_free_days) * cfg.horizon_penalty_per_day,
        )
    else:
        horizon_penalty = 0.0

    return ConfidenceBreakdown(
        base=cfg.base,
        sample_penalty=sample_penalty,
        volatility_penalty=volatility_penalty,
        history_penalty=history_penalty,
        horizon_penalty=horizon_penalty,
        floor=cfg.floor,
        ceiling=cfg.ceiling,
    )


def score_confidence(
    competitor_count: int,
    volatility:       float,
    history:          HistoricalPerformance,
    stay_date:        date,
    now:              Optional[datetime] = None,
    config:           EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> float:
    """Return the clamped, unrounded confidence score."""
    return compute_confidence(
        competitor_count, volatility, history, stay_date, now, config
    ).score
