"""
Rate recommendation engine: turns one rate cell, its competitor set and
its booking history into a bounded, confidence-scored, explained rate.

Modules
-------
market       : filter_relevant_observations() + compute_market_metrics()
               + MarketMetricsCache.
seasonality  : seasonal_demand_factor(), is_weekend(), days_ahead().
demand       : classify_demand() — rate position + occupancy + calendar.
trend        : classify_trend() — history first, then volatility + season.
optimizer    : optimize_rate() — blend, multiply, clamp.
confidence   : score_confidence() — subtractive penalties, clamped 30–100.
occupancy    : forecast_occupancy().
reasoning    : build_reasoning() — pure formatting, no decisions.
orchestrator : evaluate_rate_cell() + generate_recommendation() — the
               public entry points.
batch        : recommend_rate_grid() — fan-out over a property's rate grid.

Everything except orchestrator/batch is a pure function of its arguments;
only those two modules log.
"""
