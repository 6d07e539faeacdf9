"""Catalyst Watch - price-revisit alerting and consolidation breakout analysis."""

__version__ = "0.1.0"
