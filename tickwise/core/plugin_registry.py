# TICKWISE_FEAT: plugin-registry-001
"""
TICKWISE - Plugin Registry
==========================

Name -> plugin class lookup used by the orchestrator.

Author: TICKWISE Development Team
Version: 1.0.0
"""

import logging
from typing import Dict, Iterator, List, Type

from shared.tickwise_core.exceptions import DuplicatePluginError, UnknownPluginError

from .plugin_base import Plugin, PluginDescriptor

logger = logging.getLogger("TICKWISE_PluginRegistry")


class PluginRegistry:
    """Explicit registry of plugin classes keyed by descriptor name."""

    def __init__(self):
        self._plugins: Dict[str, Type[Plugin]] = {}

    def register(self, plugin_class: Type[Plugin]) -> Type[Plugin]:
        """Register a plugin class. Usable as a class decorator."""
        name = plugin_class.descriptor.name
        if name in self._plugins:
            raise DuplicatePluginError(name)
        self._plugins[name] = plugin_class
        logger.debug(f"Plugin registered: {name}")
        return plugin_class

    def get(self, name: str) -> Type[Plugin]:
        try:
            return self._plugins[name]
        except KeyError:
            raise UnknownPluginError(name) from None

    def descriptor(self, name: str) -> PluginDescriptor:
        return self.get(name).descriptor

    def names(self) -> List[str]:
        return list(self._plugins)

    def descriptors(self) -> List[PluginDescriptor]:
        return [cls.descriptor for cls in self._plugins.values()]

    def __contains__(self, name: object) -> bool:
        return name in self._plugins

    def __iter__(self) -> Iterator[str]:
        return iter(self._plugins)

    def __len__(self) -> int:
        return len(self._plugins)


__all__ = [
    "PluginRegistry",
]
