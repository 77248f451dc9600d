"""
rate_engine.analysis — competitive positioning for a single rate cell.

Modules:
  positioning — percentile tier, market segmentation, competitor gaps,
                rate clusters and the advice strings built from them.

Nothing here feeds back into the suggested rate; it is context shown next
to a recommendation.
"""
