"""
Tests for rate_engine/engine/reasoning.py.

What we test
------------
rate_change_sentence():
  - |change| < 2% → well-positioned.
  - Increase / decrease sentences carry the rounded percentage.

market_position_sentence():
  - > +10% above, < -10% below, otherwise close (boundaries inclusive of "close").

build_reasoning():
  - Four sentences in fixed order, with demand and trend sentences.
"""

from __future__ import annotations

import pytest

from rate_engine.engine.market import compute_market_metrics
from rate_engine.engine.reasoning import (
    build_reasoning,
    market_position_sentence,
    rate_change_sentence,
)
from rate_engine.taxonomy.levels import DemandLevel, MarketTrend


class TestRateChangeSentence:
    def test_small_change(self):
        assert rate_change_sentence(5000.0, 5050.0) == "Current rate is well-positioned."
        assert rate_change_sentence(5000.0, 4905.0) == "Current rate is well-positioned."

    def test_increase(self):
        assert rate_change_sentence(5000.0, 5334.95) == "Consider increasing rate by 7%."

    def test_decrease(self):
        assert rate_change_sentence(5000.0, 3750.0) == "Consider decreasing rate by 25%."

    def test_exactly_two_percent_is_a_change(self):
        assert rate_change_sentence(5000.0, 5100.0) == "Consider increasing rate by 2%."


class TestMarketPositionSentence:
    @pytest.mark.parametrize(
        "current, average, expected",
        [
            (5600.0, 5000.0, "Your rate is significantly above market average."),
            (4400.0, 5000.0, "Your rate is significantly below market average."),
            (5500.0, 5000.0, "Your rate is close to market average."),
            (4500.0, 5000.0, "Your rate is close to market average."),
            (5000.0, 5130.0, "Your rate is close to market average."),
        ],
    )
    def test_bands(self, current, average, expected):
        assert market_position_sentence(current, average) == expected


class TestBuildReasoning:
    def test_reference_case(self, reference_rates):
        metrics = compute_market_metrics(reference_rates)
        text = build_reasoning(5000.0, 5334.95, metrics, DemandLevel.MEDIUM, MarketTrend.STABLE)
        assert text == (
            "Consider increasing rate by 7%. "
            "Your rate is close to market average. "
            "Moderate demand allows for balanced pricing. "
            "Stable market conditions support current strategy."
        )

    def test_high_demand_up_trend(self):
        metrics = compute_market_metrics([4000.0])
        text = build_reasoning(5000.0, 5050.0, metrics, DemandLevel.HIGH, MarketTrend.UP)
        assert "High demand conditions support premium pricing." in text
        assert "Market trends are favorable for rate increases." in text
        assert "significantly above" in text

    def test_low_demand_down_trend(self):
        metrics = compute_market_metrics([3000.0])
        text = build_reasoning(5000.0, 3750.0, metrics, DemandLevel.LOW, MarketTrend.DOWN)
        assert text.startswith("Consider decreasing rate by 25%.")
        assert "Lower demand suggests competitive pricing needed." in text
        assert text.endswith("Market softening suggests caution with rate increases.")
