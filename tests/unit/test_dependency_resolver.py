"""
Tests for TICKWISE Dependency Resolver and Event Collisions
==========================================================

Tests execution ordering and construction-time event validation.
"""

import pytest

from shared.tickwise_core.exceptions import (
    DependencyCycleError,
    DuplicatePluginError,
    MissingDependencyError,
    PluginsEmitSameEventError,
)
from tickwise.core.dependency_resolver import resolve_execution_order
from tickwise.core.event_validator import check_event_collisions, find_event_collisions
from tickwise.core.plugin_base import PluginDescriptor


def descriptor(name, depends=(), emits=()):
    return PluginDescriptor(name=name, dependencies=depends, events_emitted=emits)


def names(descriptors):
    return [d.name for d in descriptors]


class TestExecutionOrder:
    """Tests for dependency ordering."""

    def test_dependencies_run_first(self):
        """Each plugin should follow all of its dependencies."""
        order = resolve_execution_order([
            descriptor("analyzer", depends={"trader"}),
            descriptor("trader", depends={"advisor"}),
            descriptor("advisor", depends={"indicators"}),
            descriptor("indicators"),
        ])
        assert names(order) == ["indicators", "advisor", "trader", "analyzer"]

    def test_independent_plugins_keep_declaration_order(self):
        """Ready plugins should be taken in declaration order."""
        order = resolve_execution_order([
            descriptor("c"),
            descriptor("a"),
            descriptor("b"),
        ])
        assert names(order) == ["c", "a", "b"]

    def test_stable_tie_break(self):
        """Among ready plugins the earlier declared one should go first."""
        order = resolve_execution_order([
            descriptor("late", depends={"base"}),
            descriptor("early"),
            descriptor("base"),
        ])
        assert names(order) == ["early", "base", "late"]

    def test_deterministic(self):
        """Same input should always give the same order."""
        declared = [
            descriptor("x", depends={"a", "b"}),
            descriptor("b"),
            descriptor("a"),
            descriptor("y", depends={"a"}),
        ]
        first = names(resolve_execution_order(declared))
        for _ in range(5):
            assert names(resolve_execution_order(declared)) == first

    def test_empty(self):
        """No plugins should give an empty order."""
        assert resolve_execution_order([]) == []


class TestResolverErrors:
    """Tests for invalid dependency graphs."""

    def test_missing_dependency_reports_all(self):
        """Should report every missing dependency."""
        with pytest.raises(MissingDependencyError) as exc_info:
            resolve_execution_order([
                descriptor("trader", depends={"advisor"}),
                descriptor("analyzer", depends={"trader", "ghost"}),
            ])
        assert exc_info.value.missing == {"trader": ["advisor"], "analyzer": ["ghost"]}

    def test_cycle_lists_members(self):
        """Should name the plugins on the cycle."""
        with pytest.raises(DependencyCycleError) as exc_info:
            resolve_execution_order([
                descriptor("root"),
                descriptor("a", depends={"b"}),
                descriptor("b", depends={"a"}),
            ])
        cycle = exc_info.value.cycle
        assert cycle[0] == cycle[-1]
        assert set(cycle) == {"a", "b"}
        assert "root" not in str(exc_info.value)

    def test_self_dependency_is_a_cycle(self):
        """A plugin depending on itself should be a cycle."""
        with pytest.raises(DependencyCycleError):
            resolve_execution_order([descriptor("loop", depends={"loop"})])

    def test_duplicate_name(self):
        """Should reject duplicate plugin names."""
        with pytest.raises(DuplicatePluginError):
            resolve_execution_order([descriptor("a"), descriptor("a")])


class TestEventCollisions:
    """Tests for the emitted-event collision check."""

    def test_two_plugins_emit_tick(self):
        """Should fail naming both plugins and the event."""
        with pytest.raises(PluginsEmitSameEventError) as exc_info:
            check_event_collisions([
                descriptor("feed_a", emits={"tick"}),
                descriptor("feed_b", emits={"tick"}),
            ])

        error = exc_info.value
        assert error.plugin_names == ["feed_a", "feed_b"]
        assert error.events == ["tick"]
        assert str(error.message) == (
            "Multiple plugins (feed_a,feed_b) are broadcasting the same event(s) (tick). "
            "This is unsupported"
        )

    def test_all_collisions_in_one_error(self):
        """Every colliding event should be reported together."""
        with pytest.raises(PluginsEmitSameEventError) as exc_info:
            check_event_collisions([
                descriptor("a", emits={"x", "y"}),
                descriptor("b", emits={"x"}),
                descriptor("c", emits={"y", "z"}),
            ])
        assert exc_info.value.events == ["x", "y"]
        assert exc_info.value.plugin_names == ["a", "b", "c"]

    def test_distinct_events_pass(self):
        """Distinct emitted events should be accepted."""
        declared = [descriptor("a", emits={"x"}), descriptor("b", emits={"y"})]
        assert find_event_collisions(declared) == {}
        check_event_collisions(declared)
