"""
rate_engine.ingestion — reading engine inputs from disk.

Live data arrives from a rate shopper and the booking store upstream of this
package; for offline runs and the CLI the same inputs are read from a JSON
bundle.

Modules:
  loader — load_input_bundle() / parse_input_bundle() → InputBundle.
"""
