# TICKWISE Indicator Plugins
"""
Indicator plugins.

Available Plugins:
    - indicators: Registry-driven indicator feed
"""

from .indicator_feed import IndicatorFeed

__all__ = [
    "IndicatorFeed",
]
