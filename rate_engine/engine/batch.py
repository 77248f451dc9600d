"""
Batch runner: price every cell of a property's rate grid.

Each cell is independent, so cells fan out over a thread pool with no
locking beyond the shared ``MarketMetricsCache``.  Cells that produce no
recommendation are collected (not raised) so a single bad record never
aborts the batch.

Usage flow
----------
1. recommend_rate_grid(contexts, observations, history_for)
   -> BatchResult (recommendations in input order + skipped cells)

2. BatchResult.summary()
   -> counts for CLI display / logging
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Mapping, Optional, Sequence, Union

from rate_engine.config import DEFAULT_ENGINE_CONFIG, EngineConfig
from rate_engine.engine.market import MarketMetricsCache
from rate_engine.engine.orchestrator import RecommendationResult, evaluate_rate_cell, log_outcome
from rate_engine.models.rates import CompetitorObservation, HistoricalPerformance, RateContext
from rate_engine.models.recommendation import RateRecommendation
from rate_engine.utils.time_utils import ensure_utc, utcnow

logger = logging.getLogger(__name__)

HistorySource = Union[
    Mapping[str, HistoricalPerformance],
    Callable[[RateContext], Optional[HistoricalPerformance]],
]


@dataclass
class SkippedCell:
    """A rate cell that produced no recommendation."""

    rate_context: RateContext
    status:       str
    detail:       str


@dataclass
class BatchResult:
    """Outcome of one grid run.

    Attributes:
        recommendations: Successful recommendations, in input order.
        no_data:         Cells without relevant competitor observations.
        errors:          Cells whose pipeline failed (or had no history).
        total:           Number of cells evaluated.
    """

    recommendations: list[RateRecommendation] = field(default_factory=list)
    no_data:         list[SkippedCell] = field(default_factory=list)
    errors:          list[SkippedCell] = field(default_factory=list)
    total:           int = 0

    def summary(self) -> dict[str, int]:
        return {
            "total":     self.total,
            "generated": len(self.recommendations),
            "no_data":   len(self.no_data),
            "errors":    len(self.errors),
        }


def _resolve_history(
    history_for: HistorySource,
    rate_context: RateContext,
) -> Optional[HistoricalPerformance]:
    if callable(history_for):
        return history_for(rate_context)
    return history_for.get(rate_context.room_type_code)


def recommend_rate_grid(
    rate_contexts: Sequence[RateContext],
    competitor_observations: Sequence[CompetitorObservation],
    history_for: HistorySource,
    *,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
    now: Optional[datetime] = None,
    max_workers: int = 1,
    use_cache: bool = True,
) -> BatchResult:
    """Evaluate every rate cell and collect the outcomes.

    Args:
        rate_contexts:           Cells to price.
        competitor_observations: Observations for the whole grid.
        history_for:             ``room_type_code -> HistoricalPerformance``
                                 mapping, or a callable taking the cell.
        config:                  Engine configuration.
        now:                     Shared reference clock for the whole batch.
        max_workers:             Thread pool size; 1 runs serially.
        use_cache:               Share market metrics per (room type, date).

    Returns:
        BatchResult with recommendations in the same order as ``rate_contexts``.
    """
    clock = ensure_utc(now) if now is not None else utcnow()
    cache = MarketMetricsCache(competitor_observations) if use_cache else None

    def _evaluate(ctx: RateContext) -> RecommendationResult:
        history = _resolve_history(history_for, ctx)
        if history is None:
            return RecommendationResult(
                status="error",
                detail=f"No historical performance for room type {ctx.room_type_code}",
            )
        snapshot = cache.snapshot(ctx.room_type_code, ctx.date) if cache else None
        return evaluate_rate_cell(
            ctx,
            competitor_observations,
            history,
            config=config,
            now=clock,
            snapshot=snapshot,
        )

    if max_workers > 1 and len(rate_contexts) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            results = list(pool.map(_evaluate, rate_contexts))
    else:
        results = [_evaluate(ctx) for ctx in rate_contexts]

    batch = BatchResult(total=len(rate_contexts))
    for ctx, result in zip(rate_contexts, results):
        log_outcome(ctx, result)
        if result.recommendation is not None:
            batch.recommendations.append(result.recommendation)
        elif result.status == "no_data":
            batch.no_data.append(SkippedCell(ctx, result.status, result.detail))
        else:
            batch.errors.append(SkippedCell(ctx, result.status, result.detail))

    logger.info(
        "Rate grid evaluated | cells=%d | generated=%d | no_data=%d | errors=%d",
        batch.total, len(batch.recommendations), len(batch.no_data), len(batch.errors),
    )
    return batch
