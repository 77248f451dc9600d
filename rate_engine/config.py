"""
Configuration for the rate engine: pydantic models plus a layered TOML loader.

Sources, lowest precedence first: ``config/default.toml``, an optional
``config/local.toml`` beside it (not committed), ``.env`` at the project root,
then ``RATE_ENGINE_*`` environment variables.  ``load_config()`` returns a
frozen ``AppConfig``.

Every weight, multiplier and threshold of the recommendation heuristic lives
in ``EngineConfig``.  Engine functions accept an ``EngineConfig`` argument and
fall back to ``DEFAULT_ENGINE_CONFIG``, so tuning never needs a config file.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Callable, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator, model_validator

# ── Engine sub-config models ──────────────────────────────────────────────────


class MarketBlendConfig(BaseModel):
    """Weights of the base blend between market average and current rate."""

    model_config = ConfigDict(frozen=True)

    market_weight: float = 0.6
    current_weight: float = 0.4

    @model_validator(mode="after")
    def validate_weights_sum(self) -> "MarketBlendConfig":
        if abs(self.market_weight + self.current_weight - 1.0) > 1e-9:
            raise ValueError(
                "market_weight + current_weight must equal 1.0, got "
                f"{self.market_weight + self.current_weight}."
            )
        return self


class DemandConfig(BaseModel):
    """Composite demand score weights and classification thresholds."""

    model_config = ConfigDict(frozen=True)

    rate_position_weight: float = 0.30
    occupancy_weight: float = 0.40
    weekend_weight: float = 0.15
    seasonal_weight: float = 0.15
    weekend_factor: float = 1.2
    high_threshold: float = 1.10
    medium_threshold: float = 0.90

    @model_validator(mode="after")
    def validate_thresholds(self) -> "DemandConfig":
        if self.high_threshold <= self.medium_threshold:
            raise ValueError(
                f"high_threshold ({self.high_threshold}) must be greater than "
                f"medium_threshold ({self.medium_threshold})."
            )
        return self


class SeasonalityConfig(BaseModel):
    """Seasonal demand factors by calendar season."""

    model_config = ConfigDict(frozen=True)

    summer: float = 1.15
    winter_holiday: float = 1.20
    spring: float = 1.05
    fall: float = 0.95

    @field_validator("summer", "winter_holiday", "spring", "fall")
    @classmethod
    def validate_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"Seasonal factors must be positive, got {v}.")
        return v


class TrendConfig(BaseModel):
    """Market trend classification settings."""

    model_config = ConfigDict(frozen=True)

    volatility_threshold: float = 0.15


class MultiplierConfig(BaseModel):
    """Rate optimizer multipliers and the clamp band around the current rate."""

    model_config = ConfigDict(frozen=True)

    demand_high: float = 1.08
    demand_medium: float = 1.02
    demand_low: float = 0.95
    trend_up: float = 1.05
    trend_down: float = 0.97
    trend_stable: float = 1.0
    strong_occupancy: float = 85.0
    strong_multiplier: float = 1.03
    weak_occupancy: float = 65.0
    weak_multiplier: float = 0.98
    floor_ratio: float = 0.75
    ceiling_ratio: float = 1.25

    @model_validator(mode="after")
    def validate_band(self) -> "MultiplierConfig":
        if not 0.0 < self.floor_ratio <= 1.0 <= self.ceiling_ratio:
            raise ValueError(
                "Clamp band must satisfy 0 < floor_ratio <= 1 <= ceiling_ratio, "
                f"got [{self.floor_ratio}, {self.ceiling_ratio}]."
            )
        if self.weak_occupancy > self.strong_occupancy:
            raise ValueError("weak_occupancy must not exceed strong_occupancy.")
        return self


class ConfidenceConfig(BaseModel):
    """Subtractive confidence penalties and the final clamp range."""

    model_config = ConfigDict(frozen=True)

    base: float = 100.0
    sparse_count: int = 3
    sparse_penalty: float = 30.0
    thin_count: int = 5
    thin_penalty: float = 15.0
    volatility_cap: float = 25.0
    use_placeholder_sentinel: bool = True
    placeholder_occupancy: float = 75.0
    placeholder_penalty: float = 10.0
    horizon_free_days: int = 30
    horizon_penalty_per_day: float = 0.5
    horizon_cap: float = 20.0
    floor: float = 30.0
    ceiling: float = 100.0

    @model_validator(mode="after")
    def validate_ranges(self) -> "ConfidenceConfig":
        if self.floor > self.ceiling:
            raise ValueError(
                f"floor ({self.floor}) must be <= ceiling ({self.ceiling})."
            )
        if self.sparse_count > self.thin_count:
            raise ValueError("sparse_count must be <= thin_count.")
        return self


class OccupancyConfig(BaseModel):
    """Occupancy forecast adjustments (percentage points) and clamp range."""

    model_config = ConfigDict(frozen=True)

    high_demand_bump: float = 10.0
    low_demand_drop: float = 8.0
    weekend_bump: float = 5.0
    floor: float = 20.0
    ceiling: float = 100.0


class EngineConfig(BaseModel):
    """All tunables of the rate recommendation heuristic."""

    model_config = ConfigDict(frozen=True)

    market_blend: MarketBlendConfig = MarketBlendConfig()
    demand: DemandConfig = DemandConfig()
    seasonality: SeasonalityConfig = SeasonalityConfig()
    trend: TrendConfig = TrendConfig()
    multipliers: MultiplierConfig = MultiplierConfig()
    confidence: ConfidenceConfig = ConfidenceConfig()
    occupancy: OccupancyConfig = OccupancyConfig()


DEFAULT_ENGINE_CONFIG = EngineConfig()


# ── Application sub-config models ─────────────────────────────────────────────


class BatchConfig(BaseModel):
    """Batch (rate grid) execution settings."""

    model_config = ConfigDict(frozen=True)

    max_workers: int = 4
    cache_market_metrics: bool = True

    @field_validator("max_workers")
    @classmethod
    def validate_workers(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"max_workers must be >= 1, got {v}.")
        return v


class OutputConfig(BaseModel):
    """Filesystem paths for written reports."""

    model_config = ConfigDict(frozen=True)

    output_dir: str = "data/outputs/recommendations"


class LoggingConfig(BaseModel):
    """Logging output settings."""

    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    log_file: str = "data/logs/rate_engine.log"
    json_format: bool = False

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"Log level must be one of {sorted(valid)}, got '{v}'.")
        return v.upper()


class AppConfig(BaseModel):
    """Everything ``load_config()`` produces, one frozen model per TOML table.

    The CLI hands ``config.engine`` to the engine and ``config.batch`` to the
    batch runner.
    """

    model_config = ConfigDict(frozen=True)

    engine: EngineConfig = EngineConfig()
    batch: BatchConfig = BatchConfig()
    output: OutputConfig = OutputConfig()
    logging: LoggingConfig = LoggingConfig()
    debug: bool = False


# ── Loading ───────────────────────────────────────────────────────────────────

# (env var, key path into the raw dict, parser)
_ENV_OVERRIDES: tuple[tuple[str, tuple[str, ...], Callable[[str], Any]], ...] = (
    ("RATE_ENGINE_LOG_LEVEL", ("logging", "level"), str),
    ("RATE_ENGINE_OUTPUT_DIR", ("output", "output_dir"), str),
    ("RATE_ENGINE_MAX_WORKERS", ("batch", "max_workers"), int),
    ("RATE_ENGINE_DEBUG", ("debug",), lambda s: s.strip().lower() in {"1", "true", "yes", "on"}),
)

_ENGINE_SECTIONS: dict[str, type[BaseModel]] = {
    "market_blend": MarketBlendConfig,
    "demand": DemandConfig,
    "seasonality": SeasonalityConfig,
    "trend": TrendConfig,
    "multipliers": MultiplierConfig,
    "confidence": ConfidenceConfig,
    "occupancy": OccupancyConfig,
}

_SECTION_MODELS: dict[str, type[BaseModel]] = {
    "batch": BatchConfig,
    "output": OutputConfig,
    "logging": LoggingConfig,
}


def _project_root() -> Path:
    """Nearest ancestor of this package holding a ``pyproject.toml``."""
    here = Path(__file__).resolve().parent
    for candidate in (here, *here.parents[:4]):
        if (candidate / "pyproject.toml").is_file():
            return candidate
    return here.parent


def _read_toml(path: Path) -> dict[str, Any]:
    with path.open("rb") as fh:
        return tomllib.load(fh)


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """Build the ``AppConfig`` for this process.

    Layers, later ones winning: the TOML file (``config/default.toml`` under
    the project root unless *config_path* is given), a ``local.toml`` beside
    it if present, then ``RATE_ENGINE_*`` variables.  A ``.env`` at the
    project root is loaded first but never overrides variables already set.

    Raises:
        FileNotFoundError: *config_path* (or the default file) is missing.
        pydantic.ValidationError: a merged value is out of range.
    """
    root = _project_root()
    load_dotenv(dotenv_path=root / ".env", override=False)

    path = Path(config_path) if config_path is not None else root / "config" / "default.toml"
    if not path.is_file():
        raise FileNotFoundError(
            f"No config file at {path}; create config/default.toml or pass --config."
        )

    raw = _read_toml(path)
    local = path.with_name("local.toml")
    if local.is_file():
        raw = _deep_merge(raw, _read_toml(local))

    return _to_app_config(_with_env_overrides(raw))


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Return a new dict with *override* layered onto *base*; tables merge, scalars replace."""
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = _deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def _with_env_overrides(raw: dict[str, Any]) -> dict[str, Any]:
    for var, keys, parse in _ENV_OVERRIDES:
        text = os.environ.get(var)
        if not text:
            continue
        section = raw
        for key in keys[:-1]:
            section = section.setdefault(key, {})
        section[keys[-1]] = parse(text)
    return raw


def _to_app_config(raw: dict[str, Any]) -> AppConfig:
    engine_raw = raw.get("engine", {})
    engine = EngineConfig(
        **{name: model(**engine_raw.get(name, {})) for name, model in _ENGINE_SECTIONS.items()}
    )
    sections = {name: model(**raw.get(name, {})) for name, model in _SECTION_MODELS.items()}
    return AppConfig(engine=engine, debug=raw.get("debug", False), **sections)
