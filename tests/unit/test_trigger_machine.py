"""
Tests for TICKWISE Order Trigger State Machine
==============================================

Tests trigger conditions, lifecycle transitions and the trigger book.
"""

import pytest

from shared.tickwise_core.exceptions import InvalidTriggerTransitionError
from shared.tickwise_core.models import OrderSide
from shared.tickwise_core.trigger_machine import (
    ConditionKind,
    TriggerBook,
    TriggerCondition,
    TriggerState,
)


@pytest.fixture
def book():
    """Create an empty trigger book."""
    return TriggerBook()


class TestConditions:
    """Tests for trigger conditions."""

    def test_below(self):
        """Should be satisfied at or under the threshold."""
        condition = TriggerCondition.below(90)
        assert condition.update(95) is False
        assert condition.update(90) is True
        assert condition.update(89) is True

    def test_above(self):
        """Should be satisfied at or over the threshold."""
        condition = TriggerCondition.above(110)
        assert condition.update(105) is False
        assert condition.update(110) is True

    def test_trailing_percent_follows_peak(self):
        """Should move the trailing point up with new highs."""
        condition = TriggerCondition.trailing(trail_percent=10, reference_price=100)
        assert condition.trailing_point == pytest.approx(90)
        assert condition.update(120) is False
        assert condition.trailing_point == pytest.approx(108)
        assert condition.update(110) is False
        assert condition.update(108) is True

    def test_trailing_fixed_distance(self):
        """Should support a fixed trailing distance."""
        condition = TriggerCondition.trailing(trail=5)
        assert condition.update(100) is False
        assert condition.trailing_point == 95
        assert condition.update(95) is True

    def test_trailing_needs_one_distance(self):
        """Should require exactly one trailing distance."""
        with pytest.raises(ValueError):
            TriggerCondition.trailing()
        with pytest.raises(ValueError):
            TriggerCondition.trailing(trail_percent=5, trail=5)

    def test_price_condition_needs_price(self):
        """Below/above conditions need a threshold."""
        with pytest.raises(ValueError):
            TriggerCondition(kind=ConditionKind.BELOW)

    def test_from_dict(self):
        """Should build conditions from advice payloads."""
        below = TriggerCondition.from_dict({"type": "below", "price": 90})
        assert below.kind is ConditionKind.BELOW
        assert below.threshold == 90.0

        trailing = TriggerCondition.from_dict(
            {"type": "trailing", "trail_percent": 2, "reference_price": 50}
        )
        assert trailing.peak == 50
        assert trailing.to_dict()["trailing_point"] == pytest.approx(49)

    def test_from_dict_unknown_type(self):
        """Should reject unknown condition types."""
        with pytest.raises(ValueError):
            TriggerCondition.from_dict({"type": "sideways", "price": 1})


class TestTransitions:
    """Tests for trigger lifecycle."""

    def test_fire_then_abort_fails(self, book):
        """A fired trigger should never change state again."""
        trigger = book.create("advice-1", OrderSide.SELL, TriggerCondition.below(90), created_at=0)
        trigger.fire(89, 1)
        assert trigger.state is TriggerState.FIRED
        assert trigger.state.terminal

        with pytest.raises(InvalidTriggerTransitionError) as exc_info:
            trigger.abort("canceled", 2)
        assert exc_info.value.from_state == "fired"
        assert exc_info.value.to_state == "aborted"

    def test_abort_then_fire_fails(self, book):
        """An aborted trigger should never fire."""
        trigger = book.create("advice-1", OrderSide.BUY, TriggerCondition.above(10), created_at=0)
        trigger.abort("canceled", 1)
        with pytest.raises(InvalidTriggerTransitionError):
            trigger.fire(11, 2)

    def test_expiry(self, book):
        """Should expire at the expiry timestamp."""
        trigger = book.create(
            "advice-1", OrderSide.SELL, TriggerCondition.below(90), created_at=0, expires_at=100
        )
        assert trigger.is_expired(99) is False
        assert trigger.is_expired(100) is True


class TestTriggerBook:
    """Tests for the trigger book."""

    def test_scenario_fires_on_89(self, book):
        """A below-90 trigger created at 100 should fire on 89 only."""
        trigger = book.create(
            "advice-1", OrderSide.BUY, TriggerCondition.below(90), created_at=0, tick_index=0
        )

        assert book.evaluate(100, 0, 0) == []
        assert book.evaluate(95, 60_000, 1) == []
        transitions = book.evaluate(89, 120_000, 2)

        assert len(transitions) == 1
        assert transitions[0].trigger is trigger
        assert transitions[0].state is TriggerState.FIRED
        assert transitions[0].price == 89
        assert trigger.fired_price == 89
        assert len(book) == 0

    def test_fires_once(self, book):
        """A trigger should transition exactly once."""
        book.create("advice-1", OrderSide.SELL, TriggerCondition.below(90), created_at=0)
        assert len(book.evaluate(80, 1, 1)) == 1
        assert book.evaluate(70, 2, 2) == []
        assert book.get_stats()["fired"] == 1

    def test_skips_creation_tick(self, book):
        """A trigger should not evaluate on the tick that created it."""
        book.create("advice-1", OrderSide.SELL, TriggerCondition.below(90), created_at=0, tick_index=5)
        assert book.evaluate(50, 0, 5) == []
        assert len(book.evaluate(50, 1, 6)) == 1

    def test_oldest_first(self, book):
        """Transitions should follow creation order."""
        first = book.create("a", OrderSide.SELL, TriggerCondition.below(90), created_at=0)
        second = book.create("b", OrderSide.SELL, TriggerCondition.below(95), created_at=0)
        transitions = book.evaluate(80, 1, 1)
        assert [t.trigger.id for t in transitions] == [first.id, second.id]
        assert first.id == "trigger-1"
        assert second.id == "trigger-2"

    def test_expired_trigger_aborted(self, book):
        """Expired triggers should be aborted instead of fired."""
        trigger = book.create(
            "a", OrderSide.SELL, TriggerCondition.below(90), created_at=0, expires_at=10
        )
        transitions = book.evaluate(50, 10, 1)
        assert transitions[0].state is TriggerState.ABORTED
        assert transitions[0].reason == "expired"
        assert trigger.abort_reason == "expired"

    def test_expire_without_price(self, book):
        """Should abort only expired triggers created before the current tick."""
        expired = book.create(
            "a", OrderSide.SELL, TriggerCondition.below(90), created_at=0, expires_at=10
        )
        book.create("b", OrderSide.SELL, TriggerCondition.below(90), created_at=0, expires_at=50)
        book.create(
            "c", OrderSide.SELL, TriggerCondition.below(90), created_at=0, tick_index=2, expires_at=10
        )

        transitions = book.expire(20, 2)

        assert [t.trigger.id for t in transitions] == [expired.id]
        assert transitions[0].reason == "expired"
        assert expired.closed_at == 20
        assert [t.advice_id for t in book.open_triggers()] == ["b", "c"]

    def test_abort_for_advice(self, book):
        """Should abort every open trigger of an advice."""
        book.create("a", OrderSide.SELL, TriggerCondition.below(90), created_at=0)
        book.create("b", OrderSide.SELL, TriggerCondition.below(90), created_at=0)

        transitions = book.abort_for_advice("a", "canceled", 5)

        assert len(transitions) == 1
        assert transitions[0].trigger.closed_at == 5
        assert [t.advice_id for t in book.open_triggers()] == ["b"]

    def test_abort_unknown(self, book):
        """Aborting a closed or unknown trigger should fail."""
        with pytest.raises(InvalidTriggerTransitionError):
            book.abort("trigger-42", "canceled")

    def test_to_dict(self, book):
        """Should serialize the trigger."""
        trigger = book.create("a", OrderSide.SELL, TriggerCondition.below(90), created_at=7)
        data = trigger.to_dict()
        assert data["side"] == "sell"
        assert data["state"] == "created"
        assert data["condition"] == {"type": "below", "price": 90}
        assert data["created_at"] == 7
