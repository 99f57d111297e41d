"""Scorecard calculation and access-control engine for call-center coaching."""

__version__ = "1.0.0"
