# TICKWISE Trader Plugins
"""
Trader plugins for order execution.

Available Plugins:
    - paper_trader: Simulated fills with fees, triggers and market limits
"""

from .paper_trader import PaperTrader, PaperTraderSettings

__all__ = [
    "PaperTrader",
    "PaperTraderSettings",
]
