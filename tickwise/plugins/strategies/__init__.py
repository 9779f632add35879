# TICKWISE Strategy Plugins
"""
Strategy plugins for advice generation.

Available Plugins:
    - trading_advisor: Runs a registered strategy
"""

from .trading_advisor import TradingAdvisor

__all__ = [
    "TradingAdvisor",
]
