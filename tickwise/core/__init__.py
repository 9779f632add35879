# TICKWISE Core Infrastructure
"""
Core infrastructure components for TICKWISE.

Modules:
    event_bus: Deterministic event routing between plugins
    plugin_base: Base classes and descriptors for all plugins
    plugin_registry: Name -> plugin class lookup
    dependency_resolver: Dependency-ordered execution
    event_validator: Emitted event collision checks
    config_manager: Configuration management
    orchestrator: Pipeline construction and tick execution
"""

from .event_bus import EventBus, Event
from .plugin_base import Plugin, PluginCategory, PluginDescriptor, PluginState
from .plugin_registry import PluginRegistry
from .dependency_resolver import resolve_execution_order
from .event_validator import check_event_collisions
from .config_manager import ConfigManager, SystemConfig
from .orchestrator import Orchestrator, PipelineContext, RunOutcome, RunStatus

__all__ = [
    "EventBus",
    "Event",
    "Plugin",
    "PluginCategory",
    "PluginDescriptor",
    "PluginState",
    "PluginRegistry",
    "resolve_execution_order",
    "check_event_collisions",
    "ConfigManager",
    "SystemConfig",
    "Orchestrator",
    "PipelineContext",
    "RunOutcome",
    "RunStatus",
]
