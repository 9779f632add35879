# TICKWISE_FEAT: event-validator-001
"""
TICKWISE - Event Collision Validator
====================================

Rejects pipelines where more than one plugin emits the same event.
Every collision is gathered into a single error.

Author: TICKWISE Development Team
Version: 1.0.0
"""

import logging
from collections import defaultdict
from typing import Dict, List, Sequence

from shared.tickwise_core.exceptions import PluginsEmitSameEventError

from .plugin_base import PluginDescriptor

logger = logging.getLogger("TICKWISE_EventValidator")


def find_event_collisions(descriptors: Sequence[PluginDescriptor]) -> Dict[str, List[str]]:
    """Map each event emitted by 2+ plugins to its emitters, in declaration order."""
    emitters: Dict[str, List[str]] = defaultdict(list)
    for descriptor in descriptors:
        for event in descriptor.events_emitted:
            emitters[event].append(descriptor.name)
    return {
        event: names
        for event, names in sorted(emitters.items())
        if len(names) > 1
    }


def check_event_collisions(descriptors: Sequence[PluginDescriptor]) -> None:
    collisions = find_event_collisions(descriptors)
    if not collisions:
        return

    plugin_names: List[str] = []
    for names in collisions.values():
        for name in names:
            if name not in plugin_names:
                plugin_names.append(name)

    logger.error(f"Event collisions: {collisions}")
    raise PluginsEmitSameEventError(plugin_names, list(collisions))


__all__ = [
    "find_event_collisions",
    "check_event_collisions",
]
