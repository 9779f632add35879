# TICKWISE Plugins
"""
Built-in pipeline plugins.

Available Plugins:
    - indicators: Registry-driven indicator feed
    - trading_advisor: Runs a registered strategy
    - paper_trader: Simulated fills, triggers and portfolio
    - performance_analyzer: Roundtrips and performance report
"""

from tickwise.core.plugin_registry import PluginRegistry

from .analyzers import PerformanceAnalyzer
from .indicators import IndicatorFeed
from .strategies import TradingAdvisor
from .traders import PaperTrader

BUILTIN_PLUGINS = (IndicatorFeed, TradingAdvisor, PaperTrader, PerformanceAnalyzer)


def default_registry() -> PluginRegistry:
    """Registry holding every built-in plugin."""
    registry = PluginRegistry()
    for plugin_class in BUILTIN_PLUGINS:
        registry.register(plugin_class)
    return registry


__all__ = [
    "BUILTIN_PLUGINS",
    "default_registry",
    "IndicatorFeed",
    "TradingAdvisor",
    "PaperTrader",
    "PerformanceAnalyzer",
]
