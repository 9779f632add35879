# TICKWISE - Backtesting & Paper Trading Engine
"""
TICKWISE: Plugin pipeline for backtesting and paper trading.

Core Components:
    - Event Bus: Deterministic plugin-to-plugin events
    - Plugin System: Descriptor-driven plugins
    - Orchestrator: Dependency-ordered tick execution

Plugins:
    - indicators: Technical indicator feed
    - trading_advisor: Strategy runner producing advice
    - paper_trader: Simulated fills, triggers and portfolio
    - performance_analyzer: Roundtrips and run report

Example:
    from tickwise import Orchestrator
    from tickwise.plugins import default_registry

    orchestrator = Orchestrator("backtest", plugin_settings, default_registry(), services)
    outcome = await orchestrator.run(candles)

Author: TICKWISE Development Team
Version: 1.0.0
"""

from tickwise.core.event_bus import EventBus, Event
from tickwise.core.plugin_base import (
    Plugin,
    PluginCategory,
    PluginDescriptor,
    PluginState,
)
from tickwise.core.plugin_registry import PluginRegistry
from tickwise.core.config_manager import ConfigManager
from tickwise.core.orchestrator import Orchestrator, RunOutcome, RunStatus

__version__ = "1.0.0"
__author__ = "TICKWISE Development Team"

__all__ = [
    "EventBus",
    "Event",
    "Plugin",
    "PluginCategory",
    "PluginDescriptor",
    "PluginState",
    "PluginRegistry",
    "ConfigManager",
    "Orchestrator",
    "RunOutcome",
    "RunStatus",
]
