"""
Configuration package for the scorecard engine.

Holds environment settings and the Redis connection helpers used by the
cache layer.
"""

from scorecard_engine.config.settings import Settings, get_settings, settings

__all__ = ['Settings', 'get_settings', 'settings']
