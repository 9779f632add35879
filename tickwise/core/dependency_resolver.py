# TICKWISE_FEAT: dependency-resolver-001
"""
TICKWISE - Plugin Dependency Resolver
=====================================

Orders plugins so every plugin runs after all of its dependencies.

Kahn's algorithm with a stable tie-break: among plugins whose
dependencies are satisfied, the one declared first goes first. The same
input always yields the same order.

Author: TICKWISE Development Team
Version: 1.0.0
"""

import heapq
import logging
from typing import Dict, List, Optional, Sequence

from shared.tickwise_core.exceptions import (
    DependencyCycleError,
    DuplicatePluginError,
    MissingDependencyError,
)

from .plugin_base import PluginDescriptor

logger = logging.getLogger("TICKWISE_Resolver")


def _check_missing(descriptors: Sequence[PluginDescriptor]) -> None:
    names = {d.name for d in descriptors}
    missing: Dict[str, List[str]] = {}
    for descriptor in descriptors:
        absent = sorted(descriptor.dependencies - names)
        if absent:
            missing[descriptor.name] = absent
    if missing:
        raise MissingDependencyError(missing)


def _find_cycle(
    remaining: Sequence[str], dependencies: Dict[str, Sequence[str]]
) -> List[str]:
    """Walk dependency edges among unresolved plugins until a name repeats."""
    pending = set(remaining)
    for start in remaining:
        path: List[str] = []
        position: Dict[str, int] = {}
        node: Optional[str] = start
        while node is not None and node not in position:
            position[node] = len(path)
            path.append(node)
            node = next((dep for dep in dependencies[node] if dep in pending), None)
        if node is not None:
            cycle = path[position[node]:]
            return cycle + [node]
    return list(remaining)


def resolve_execution_order(
    descriptors: Sequence[PluginDescriptor],
) -> List[PluginDescriptor]:
    """
    Compute a dependency-respecting execution order.

    Args:
        descriptors: Active plugin descriptors in declaration order

    Returns:
        Descriptors ordered so each follows all of its dependencies

    Raises:
        DuplicatePluginError: same name declared twice
        MissingDependencyError: a dependency is not an active plugin
        DependencyCycleError: dependencies form a cycle
    """
    index: Dict[str, int] = {}
    for position, descriptor in enumerate(descriptors):
        if descriptor.name in index:
            raise DuplicatePluginError(descriptor.name)
        index[descriptor.name] = position

    _check_missing(descriptors)

    by_name = {d.name: d for d in descriptors}
    indegree = {d.name: len(d.dependencies) for d in descriptors}
    dependents: Dict[str, List[str]] = {d.name: [] for d in descriptors}
    for descriptor in descriptors:
        for dep in descriptor.dependencies:
            dependents[dep].append(descriptor.name)

    ready = [index[name] for name, degree in indegree.items() if degree == 0]
    heapq.heapify(ready)

    order: List[PluginDescriptor] = []
    while ready:
        current = descriptors[heapq.heappop(ready)]
        order.append(current)
        for dependent in dependents[current.name]:
            indegree[dependent] -= 1
            if indegree[dependent] == 0:
                heapq.heappush(ready, index[dependent])

    if len(order) != len(descriptors):
        remaining = [d.name for d in descriptors if indegree[d.name] > 0]
        dependencies = {name: sorted(by_name[name].dependencies) for name in remaining}
        cycle = _find_cycle(remaining, dependencies)
        logger.error(f"Dependency cycle: {' -> '.join(cycle)}")
        raise DependencyCycleError(cycle)

    logger.debug(f"Execution order: {[d.name for d in order]}")
    return order


__all__ = [
    "resolve_execution_order",
]
