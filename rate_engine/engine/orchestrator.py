"""
Recommendation orchestrator — the public entry point of the engine.

Pipeline for one rate cell:

    FilterCompetitors ─┬─ none relevant ──────────────────────────→ no_data
                       └─ ComputeMetrics → ClassifyDemand → ClassifyTrend
                          → OptimizeRate → ScoreConfidence → ForecastOccupancy
                          → GenerateReasoning → Assemble ───────────→ ok

Any exception raised inside the pipeline becomes an ``error`` outcome; it is
never propagated to the caller, so one bad record cannot abort a batch.

Two entry points:

``evaluate_rate_cell()``
    Returns a ``RecommendationResult`` (status + recommendation + diagnostics)
    and does not log.  Use it when the caller wants to inspect why a cell
    produced nothing.

``generate_recommendation()``
    Returns ``Optional[RateRecommendation]`` and logs the outcome:
    DEBUG on entry, WARNING for no data, ERROR (with traceback) for faults.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Literal, Optional
from uuid import uuid4

from rate_engine.config import DEFAULT_ENGINE_CONFIG, EngineConfig
from rate_engine.engine.confidence import ConfidenceBreakdown, compute_confidence
from rate_engine.engine.demand import DemandScore, compute_demand_score, level_for_score
from rate_engine.engine.market import MarketMetrics, MarketSnapshot, build_market_snapshot
from rate_engine.engine.occupancy import forecast_occupancy
from rate_engine.engine.optimizer import optimize_rate, rate_band
from rate_engine.engine.reasoning import build_reasoning
from rate_engine.engine.trend import classify_trend
from rate_engine.models.rates import CompetitorObservation, HistoricalPerformance, RateContext
from rate_engine.models.recommendation import RateRecommendation, RecommendationFactors
from rate_engine.utils.numbers import round_half_up, round_within
from rate_engine.utils.time_utils import ensure_utc, utcnow

logger = logging.getLogger(__name__)

RecommendationStatus = Literal["ok", "no_data", "error"]


@dataclass(frozen=True)
class RecommendationDiagnostics:
    """Unrounded intermediate values of a successful pipeline run."""

    metrics:            MarketMetrics
    demand_score:       DemandScore
    confidence:         ConfidenceBreakdown
    raw_suggested_rate: float
    raw_occupancy:      float


@dataclass(frozen=True)
class RecommendationResult:
    """Outcome of evaluating one rate cell.

    Attributes:
        status:         ``"ok"``, ``"no_data"`` or ``"error"``.
        recommendation: The recommendation when status is ``"ok"``.
        detail:         Human-readable reason for a non-ok status.
        diagnostics:    Intermediate values when status is ``"ok"``.
        error:          The caught exception when status is ``"error"``.
    """

    status:         RecommendationStatus
    recommendation: Optional[RateRecommendation] = None
    detail:         str = ""
    diagnostics:    Optional[RecommendationDiagnostics] = None
    error:          Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.status == "ok"


def new_recommendation_id() -> str:
    return f"rec_{uuid4().hex}"


def evaluate_rate_cell(
    rate_context: RateContext,
    competitor_observations: Iterable[CompetitorObservation],
    historical_performance: HistoricalPerformance,
    *,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
    now: Optional[datetime] = None,
    snapshot: Optional[MarketSnapshot] = None,
) -> RecommendationResult:
    """Run the full pipeline for one rate cell without logging.

    Args:
        rate_context:            The rate cell to price.
        competitor_observations: Unfiltered competitor observations.
        historical_performance:  Booking history of the room type.
        config:                  Engine configuration.
        now:                     Reference clock for lead time and ``created_at``.
        snapshot:                Pre-computed market snapshot for this cell
                                 (from ``MarketMetricsCache``); when given,
                                 ``competitor_observations`` is ignored.

    Returns:
        ``RecommendationResult``; never raises.
    """
    try:
        clock = ensure_utc(now) if now is not None else utcnow()

        if snapshot is None:
            snapshot = build_market_snapshot(
                competitor_observations, rate_context.room_type_code, rate_context.date
            )
        metrics = snapshot.metrics
        if metrics is None:
            return RecommendationResult(
                status="no_data",
                detail=(
                    f"No competitor data available for {rate_context.room_type_code} "
                    f"on {rate_context.date.isoformat()}"
                ),
            )

        current = rate_context.current_rate
        history = historical_performance

        demand_score = compute_demand_score(
            current, metrics.average, history.average_occupancy, rate_context.date, config
        )
        demand_level = level_for_score(demand_score.total, config)

        market_trend = classify_trend(history.seasonal_trend, metrics, rate_context.date, config)

        raw_suggested = optimize_rate(
            current, metrics, demand_level, market_trend, history, config
        )

        confidence = compute_confidence(
            metrics.count,
            metrics.standard_deviation / metrics.average,
            history,
            rate_context.date,
            clock,
            config,
        )

        raw_occupancy = forecast_occupancy(
            history.average_occupancy, demand_level, rate_context.date, config
        )

        reasoning = build_reasoning(current, raw_suggested, metrics, demand_level, market_trend)

        band = rate_band(current, config)
        recommendation = RateRecommendation(
            id=new_recommendation_id(),
            property_id=rate_context.property_id,
            room_type_id=rate_context.room_type_id,
            rate_plan_id=rate_context.rate_plan_id,
            date=rate_context.date,
            current_rate=current,
            suggested_rate=round_within(raw_suggested, band.floor, band.ceiling),
            confidence=round_half_up(confidence.score),
            reasoning=reasoning,
            factors=RecommendationFactors(
                competitor_average=round_half_up(metrics.average),
                market_trend=market_trend,
                demand_level=demand_level,
                occupancy_forecast=round_half_up(raw_occupancy),
            ),
            created_at=clock,
        )

    except Exception as exc:
        return RecommendationResult(
            status="error",
            detail=f"{type(exc).__name__}: {exc}",
            error=exc,
        )

    return RecommendationResult(
        status="ok",
        recommendation=recommendation,
        diagnostics=RecommendationDiagnostics(
            metrics=metrics,
            demand_score=demand_score,
            confidence=confidence,
            raw_suggested_rate=raw_suggested,
            raw_occupancy=raw_occupancy,
        ),
    )


def log_outcome(rate_context: RateContext, result: RecommendationResult) -> None:
    """Log a non-ok result at the level its status calls for."""
    cell = {
        "rate_id":        rate_context.rate_id,
        "property_id":    rate_context.property_id,
        "room_type_code": rate_context.room_type_code,
        "stay_date":      rate_context.date.isoformat(),
    }
    if result.status == "no_data":
        logger.warning("%s", result.detail, extra=cell)
    elif result.status == "error":
        logger.error(
            "Failed to generate recommendation: %s",
            result.detail,
            exc_info=result.error,
            extra=cell,
        )


def generate_recommendation(
    rate_context: RateContext,
    competitor_observations: Iterable[CompetitorObservation],
    historical_performance: HistoricalPerformance,
    *,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
    now: Optional[datetime] = None,
) -> Optional[RateRecommendation]:
    """Generate a rate recommendation, or None when none can be made.

    None means either that no competitor observation matched the cell's room
    type and exact date, or that the pipeline failed; both are logged.

    Example::

        rec = generate_recommendation(ctx, observations, history)
        if rec is None:
            ...  # render "no recommendation available"
    """
    logger.debug("Generating recommendation for rate %s", rate_context.rate_id)
    result = evaluate_rate_cell(
        rate_context,
        competitor_observations,
        historical_performance,
        config=config,
        now=now,
    )
    log_outcome(rate_context, result)
    return result.recommendation
