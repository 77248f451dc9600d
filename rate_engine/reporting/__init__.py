"""
rate_engine.reporting — flat-file output for recommendation runs.

Modules:
  export — CSV / JSON writers for RateRecommendation lists.
"""
