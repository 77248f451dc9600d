"""
Command-line interface for the rate recommendation engine.

Each command loads ``AppConfig`` first (exit code 1 on a bad or missing
file), sets up logging when it will do real work, checks its own options,
then prints a plain-text report.  Heavy imports happen inside the command
bodies so ``rate-engine --help`` stays fast.

    rate-engine validate-config [--full]
    rate-engine recommend --input data/inputs/grid.json [--format csv|json|both]
    rate-engine analyze-market --input data/inputs/grid.json --room-type DLX --date 2025-06-14
"""

from __future__ import annotations

import json
from datetime import date
from pathlib import Path
from typing import Optional
from uuid import uuid4

import typer

app = typer.Typer(
    name="rate-engine",
    help="Hotel rate recommendation engine — explainable suggested rates.",
    add_completion=False,
)

_FORMATS = ("csv", "json", "both")

_CONFIG_OPTION_HELP = "TOML config file; defaults to config/default.toml."


# ── Helpers ───────────────────────────────────────────────────────────────────

def _fail(message: str) -> typer.Exit:
    typer.echo(f"[ERROR] {message}", err=True)
    return typer.Exit(code=1)


def _load_config_or_exit(config_path: Optional[str] = None, *, with_logging: bool = False):
    """Return the validated ``AppConfig``, or exit 1 with the reason on stderr."""
    from rate_engine.config import load_config

    try:
        config = load_config(Path(config_path) if config_path else None)
    except FileNotFoundError as exc:
        raise _fail(str(exc))
    except Exception as exc:
        raise _fail(f"Config validation failed: {exc}")

    if with_logging:
        from rate_engine.utils.logging import configure_logging

        configure_logging(config.logging)
    return config


def _load_bundle_or_exit(input_path: str):
    from rate_engine.ingestion.loader import load_input_bundle

    try:
        return load_input_bundle(Path(input_path))
    except FileNotFoundError as exc:
        raise _fail(str(exc))
    except ValueError as exc:
        raise _fail(f"Input bundle invalid:\n{exc}")


# ── Commands ──────────────────────────────────────────────────────────────────

@app.command("validate-config")
def validate_config(
    config_path: Optional[str] = typer.Option(None, "--config", help=_CONFIG_OPTION_HELP),
    show_full: bool = typer.Option(
        False,
        "--full",
        help="Also dump every field as JSON.",
    ),
) -> None:
    """Check the config file and summarise the values the engine will use."""
    config = _load_config_or_exit(config_path)
    eng = config.engine

    rows = (
        ("Market blend", f"{eng.market_blend.market_weight:.2f} market / "
                         f"{eng.market_blend.current_weight:.2f} current"),
        ("Clamp band", f"[{eng.multipliers.floor_ratio:.2f}, "
                       f"{eng.multipliers.ceiling_ratio:.2f}] x current rate"),
        ("Demand cutoffs", f"high >= {eng.demand.high_threshold}, "
                           f"medium >= {eng.demand.medium_threshold}"),
        ("Confidence range", f"[{eng.confidence.floor:.0f}, {eng.confidence.ceiling:.0f}]"),
        ("Batch workers", config.batch.max_workers),
        ("Output dir", config.output.output_dir),
        ("Log level", config.logging.level),
        ("Debug", config.debug),
    )
    typer.echo("Config loaded.\n")
    for label, value in rows:
        typer.echo(f"  {label + ':':<18}{value}")

    if show_full:
        typer.echo("\nFull config (JSON):")
        typer.echo(json.dumps(config.model_dump(), indent=2, default=str))

    typer.echo("\n[OK] Config valid.")


@app.command("recommend")
def recommend(
    input_path: str = typer.Option(
        ...,
        "--input",
        "-i",
        help="Path to the JSON input bundle (rate contexts, competitor rates, history).",
    ),
    output_dir: Optional[str] = typer.Option(
        None,
        "--output-dir",
        help="Directory for report files. Uses config.output.output_dir if omitted.",
    ),
    fmt: str = typer.Option(
        "both",
        "--format",
        help="Report format: csv, json or both.",
    ),
    workers: Optional[int] = typer.Option(
        None,
        "--workers",
        help="Thread pool size. Uses config.batch.max_workers if omitted.",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Compute and print recommendations without writing files.",
    ),
    config_path: Optional[str] = typer.Option(None, "--config", help=_CONFIG_OPTION_HELP),
) -> None:
    """Generate rate recommendations for every cell in an input bundle.

    \b
    Cells with no matching competitor observation (same room type code and
    exact stay date) are skipped and reported as "no data".  Cells whose
    computation fails are skipped and reported as errors; the run continues.
    """
    from rate_engine.engine.batch import recommend_rate_grid
    from rate_engine.reporting.export import (
        write_recommendation_csv,
        write_recommendation_json,
    )

    config = _load_config_or_exit(config_path, with_logging=True)

    fmt = fmt.lower()
    if fmt not in _FORMATS:
        raise _fail(f"--format must be one of {', '.join(_FORMATS)}.")

    if workers is not None and workers < 1:
        raise _fail("--workers must be >= 1.")

    bundle = _load_bundle_or_exit(input_path)
    typer.echo(
        f"Loaded {len(bundle.rate_contexts)} rate cell(s), "
        f"{len(bundle.competitor_observations)} competitor observation(s)."
    )

    result = recommend_rate_grid(
        bundle.rate_contexts,
        bundle.competitor_observations,
        bundle.historical_performance,
        config=config.engine,
        max_workers=workers or config.batch.max_workers,
        use_cache=config.batch.cache_market_metrics,
    )

    codes = {c.room_type_id: c.room_type_code for c in bundle.rate_contexts}

    typer.echo("")
    typer.echo(f"  {'date':<10}  {'room':<8}  {'current':>9}  {'suggested':>9}  {'conf':>4}  demand  trend")
    for rec in result.recommendations:
        code = codes.get(rec.room_type_id, rec.room_type_id)
        typer.echo(
            f"  {rec.date.isoformat():<10}  {code:<8}  {rec.current_rate:>9.0f}  "
            f"{rec.suggested_rate:>9d}  {rec.confidence:>4d}  "
            f"{rec.factors.demand_level.value:<6}  {rec.factors.market_trend.value}"
        )
    for skipped in result.no_data:
        typer.echo(
            f"  {skipped.rate_context.date.isoformat():<10}  "
            f"{skipped.rate_context.room_type_code:<8}  no recommendation available"
        )

    summary = result.summary()
    typer.echo("")
    typer.echo(
        f"  generated={summary['generated']} | no_data={summary['no_data']} | "
        f"errors={summary['errors']} | total={summary['total']}"
    )
    for skipped in result.errors[:5]:
        typer.echo(
            f"  [WARN] {skipped.rate_context.rate_id}: {skipped.detail}", err=True
        )

    if dry_run:
        typer.echo("[DRY RUN] No report files written.")
        return

    if result.recommendations:
        property_ids = {c.property_id for c in bundle.rate_contexts}
        property_id = property_ids.pop() if len(property_ids) == 1 else "multi"
        target_dir = Path(output_dir or config.output.output_dir)
        run_slug = str(uuid4())

        if fmt in ("csv", "both"):
            path = write_recommendation_csv(result.recommendations, target_dir, property_id)
            typer.echo(f"  CSV:  {path}")
        if fmt in ("json", "both"):
            path = write_recommendation_json(
                result.recommendations, target_dir, property_id, run_slug=run_slug
            )
            typer.echo(f"  JSON: {path}")

    typer.echo("[OK] Recommendations complete.")


@app.command("analyze-market")
def analyze_market_cmd(
    input_path: str = typer.Option(
        ...,
        "--input",
        "-i",
        help="Path to the JSON input bundle.",
    ),
    room_type: str = typer.Option(
        ...,
        "--room-type",
        help="Room type code to analyze (e.g. DLX).",
    ),
    stay_date: str = typer.Option(
        ...,
        "--date",
        help="Stay date (ISO date, e.g. 2025-06-14).",
    ),
    config_path: Optional[str] = typer.Option(None, "--config", help=_CONFIG_OPTION_HELP),
) -> None:
    """Print competitive positioning for one room type and stay date."""
    from rate_engine.analysis.positioning import analyze_market

    _load_config_or_exit(config_path, with_logging=True)

    try:
        target = date.fromisoformat(stay_date)
    except ValueError as exc:
        raise _fail(f"Invalid date format: {exc}")

    bundle = _load_bundle_or_exit(input_path)
    context = next(
        (c for c in bundle.contexts_for(room_type) if c.date == target), None
    )
    if context is None:
        raise _fail(f"No rate context for room type {room_type} on {target}.")

    analysis = analyze_market(context, bundle.competitor_observations)
    if analysis is None:
        typer.echo(f"No competitor data available for {room_type} on {target}.")
        raise typer.Exit(code=1)

    typer.echo(f"Market analysis | {analysis.room_type_code} | {analysis.date}")
    typer.echo("")
    typer.echo(f"  Current rate:     {analysis.current_rate:.0f}")
    typer.echo(
        f"  Market average:   {analysis.market_average:.0f} "
        f"(min {analysis.market_min:.0f}, max {analysis.market_max:.0f})"
    )
    typer.echo(f"  Competitors:      {analysis.competitor_count}")
    typer.echo(f"  Position index:   {analysis.position_index:.0f}/100")
    typer.echo(
        f"  Percentile:       {analysis.position.percentile} "
        f"({analysis.position.tier.value})"
    )
    typer.echo("")
    for line in analysis.advice:
        typer.echo(f"  - {line}")


# ── Entry point ───────────────────────────────────────────────────────────────

if __name__ == "__main__":
    app()
