"""
Tests for rate_engine/config.py.

What we test
------------
load_config():
  - Committed config/default.toml loads and matches the engine defaults.
  - A custom TOML file overrides only the keys it sets.
  - local.toml next to the config is merged on top.
  - RATE_ENGINE_* environment variables override file values.
  - Missing files raise FileNotFoundError; invalid values raise.

_deep_merge():
  - Nested dicts merge; scalars replace.
"""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from rate_engine.config import (
    DEFAULT_ENGINE_CONFIG,
    AppConfig,
    EngineConfig,
    LoggingConfig,
    _deep_merge,
    load_config,
)

_ENV_VARS = (
    "RATE_ENGINE_LOG_LEVEL",
    "RATE_ENGINE_OUTPUT_DIR",
    "RATE_ENGINE_MAX_WORKERS",
    "RATE_ENGINE_DEBUG",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for var in _ENV_VARS:
        monkeypatch.delenv(var, raising=False)


def _write_toml(tmp_path: Path, text: str, name: str = "test.toml") -> Path:
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    return path


class TestLoadConfig:
    def test_default_file_matches_defaults(self):
        config = load_config()
        assert isinstance(config, AppConfig)
        assert config.engine == DEFAULT_ENGINE_CONFIG
        assert config.batch.max_workers == 4

    def test_partial_override(self, tmp_path):
        path = _write_toml(
            tmp_path,
            "[engine.demand]\nhigh_threshold = 1.2\n\n[batch]\nmax_workers = 2\n",
        )
        config = load_config(path)
        assert config.engine.demand.high_threshold == 1.2
        assert config.engine.demand.medium_threshold == 0.90
        assert config.engine.multipliers == EngineConfig().multipliers
        assert config.batch.max_workers == 2

    def test_local_toml_merged(self, tmp_path):
        path = _write_toml(tmp_path, "[engine.trend]\nvolatility_threshold = 0.2\n")
        _write_toml(tmp_path, "[engine.trend]\nvolatility_threshold = 0.3\n", name="local.toml")
        assert load_config(path).engine.trend.volatility_threshold == 0.3

    def test_env_overrides(self, tmp_path, monkeypatch):
        path = _write_toml(tmp_path, "[logging]\nlevel = \"INFO\"\n")
        monkeypatch.setenv("RATE_ENGINE_LOG_LEVEL", "debug")
        monkeypatch.setenv("RATE_ENGINE_OUTPUT_DIR", "/tmp/recs")
        monkeypatch.setenv("RATE_ENGINE_MAX_WORKERS", "8")
        monkeypatch.setenv("RATE_ENGINE_DEBUG", "true")
        config = load_config(path)
        assert config.logging.level == "DEBUG"
        assert config.output.output_dir == "/tmp/recs"
        assert config.batch.max_workers == 8
        assert config.debug is True

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.toml")

    def test_invalid_blend_weights(self, tmp_path):
        path = _write_toml(
            tmp_path, "[engine.market_blend]\nmarket_weight = 0.7\ncurrent_weight = 0.4\n"
        )
        with pytest.raises(ValidationError):
            load_config(path)

    def test_invalid_workers(self, tmp_path):
        path = _write_toml(tmp_path, "[batch]\nmax_workers = 0\n")
        with pytest.raises(ValidationError):
            load_config(path)


class TestModels:
    def test_log_level_normalised(self):
        assert LoggingConfig(level="warning").level == "WARNING"

    def test_bad_log_level(self):
        with pytest.raises(ValidationError):
            LoggingConfig(level="LOUD")

    def test_engine_config_frozen(self):
        with pytest.raises(ValidationError):
            DEFAULT_ENGINE_CONFIG.demand.high_threshold = 2.0


class TestDeepMerge:
    def test_nested(self):
        base = {"engine": {"demand": {"a": 1, "b": 2}}, "debug": False}
        override = {"engine": {"demand": {"b": 3}}, "debug": True}
        assert _deep_merge(base, override) == {
            "engine": {"demand": {"a": 1, "b": 3}},
            "debug": True,
        }

    def test_base_not_mutated(self):
        base = {"x": {"y": 1}}
        _deep_merge(base, {"x": {"y": 2}})
        assert base == {"x": {"y": 1}}
