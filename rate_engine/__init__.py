"""Hotel rate recommendation engine."""

__version__ = "0.3.0"
