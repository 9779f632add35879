"""
TICKWISE - Order Trigger State Machine
======================================

Conditional orders that wait for a price condition before executing.

Features:
- Three conditions: stop below, take above and trailing stop
- Lifecycle created -> fired | aborted, both terminal
- Optional expiry, aborting the trigger with reason "expired", also on
  clock ticks that carry no price
- Oldest-first evaluation with a single transition per trigger
- Triggers never evaluate on the tick that created them

Usage:
    book = TriggerBook()
    trigger = book.create("advice-1", OrderSide.SELL,
                          TriggerCondition.below(90), created_at=ts, tick_index=0)
    for transition in book.evaluate(price=89, timestamp=ts2, tick_index=2):
        ...

Author: TICKWISE Development Team
Version: 1.0.0
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .constants import ABORT_REASON_EXPIRED
from .exceptions import InvalidTriggerTransitionError
from .models import OrderSide

logger = logging.getLogger("TICKWISE_Triggers")


class TriggerState(str, Enum):
    CREATED = "created"
    FIRED = "fired"
    ABORTED = "aborted"

    @property
    def terminal(self) -> bool:
        return self is not TriggerState.CREATED


class ConditionKind(str, Enum):
    BELOW = "below"
    ABOVE = "above"
    TRAILING = "trailing"


@dataclass
class TriggerCondition:
    """
    Price condition of a trigger.

    ``below`` fires when price <= threshold, ``above`` when price >=
    threshold. ``trailing`` follows the highest price seen and fires when
    price drops to the trailing point, set either as a percentage of the
    peak (``trail_percent``) or a fixed distance (``trail``).
    """

    kind: ConditionKind
    threshold: Optional[float] = None
    trail_percent: Optional[float] = None
    trail: Optional[float] = None
    peak: Optional[float] = None

    def __post_init__(self):
        if self.kind is ConditionKind.TRAILING:
            if (self.trail_percent is None) == (self.trail is None):
                raise ValueError("Trailing condition needs exactly one of trail_percent or trail")
            if (self.trail_percent or 0) < 0 or (self.trail or 0) < 0:
                raise ValueError("Trailing distance must be positive")
        elif self.threshold is None:
            raise ValueError(f"{self.kind.value} condition needs a price")

    @classmethod
    def below(cls, price: float) -> "TriggerCondition":
        return cls(kind=ConditionKind.BELOW, threshold=price)

    @classmethod
    def above(cls, price: float) -> "TriggerCondition":
        return cls(kind=ConditionKind.ABOVE, threshold=price)

    @classmethod
    def trailing(
        cls,
        trail_percent: Optional[float] = None,
        trail: Optional[float] = None,
        reference_price: Optional[float] = None,
    ) -> "TriggerCondition":
        return cls(
            kind=ConditionKind.TRAILING,
            trail_percent=trail_percent,
            trail=trail,
            peak=reference_price,
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TriggerCondition":
        kind = ConditionKind(data.get("type", data.get("kind")))
        if kind is ConditionKind.TRAILING:
            return cls.trailing(
                trail_percent=data.get("trail_percent"),
                trail=data.get("trail"),
                reference_price=data.get("reference_price"),
            )
        return cls(kind=kind, threshold=float(data["price"]))

    @property
    def trailing_point(self) -> Optional[float]:
        if self.kind is not ConditionKind.TRAILING or self.peak is None:
            return None
        if self.trail_percent is not None:
            return self.peak * (1 - self.trail_percent / 100)
        return self.peak - self.trail

    def update(self, price: float) -> bool:
        """Feed a price. Returns True when the condition is satisfied."""
        if self.kind is ConditionKind.BELOW:
            return price <= self.threshold
        if self.kind is ConditionKind.ABOVE:
            return price >= self.threshold

        if self.peak is None or price > self.peak:
            self.peak = price
            return False
        return price <= self.trailing_point

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"type": self.kind.value}
        if self.kind is ConditionKind.TRAILING:
            data["trail_percent"] = self.trail_percent
            data["trail"] = self.trail
            data["trailing_point"] = self.trailing_point
        else:
            data["price"] = self.threshold
        return data


@dataclass
class Trigger:
    id: str
    advice_id: str
    side: OrderSide
    condition: TriggerCondition
    created_at: int
    tick_index: int = 0
    amount: Optional[float] = None
    expires_at: Optional[int] = None
    state: TriggerState = TriggerState.CREATED
    fired_price: Optional[float] = None
    closed_at: Optional[int] = None
    abort_reason: Optional[str] = None

    def _transition(self, target: TriggerState) -> None:
        if self.state.terminal:
            raise InvalidTriggerTransitionError(self.id, self.state.value, target.value)
        self.state = target

    def fire(self, price: float, timestamp: int) -> None:
        self._transition(TriggerState.FIRED)
        self.fired_price = price
        self.closed_at = timestamp

    def abort(self, reason: str, timestamp: Optional[int] = None) -> None:
        self._transition(TriggerState.ABORTED)
        self.abort_reason = reason
        self.closed_at = timestamp

    def is_expired(self, timestamp: int) -> bool:
        return self.expires_at is not None and timestamp >= self.expires_at

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "advice_id": self.advice_id,
            "side": self.side.value,
            "condition": self.condition.to_dict(),
            "state": self.state.value,
            "created_at": self.created_at,
            "expires_at": self.expires_at,
            "amount": self.amount,
            "fired_price": self.fired_price,
            "closed_at": self.closed_at,
            "abort_reason": self.abort_reason,
        }


@dataclass(frozen=True)
class TriggerTransition:
    """One state change produced by the book."""

    trigger: Trigger
    state: TriggerState
    price: Optional[float] = None
    reason: Optional[str] = None


@dataclass
class TriggerBook:
    """
    Active triggers of one trader in insertion order.

    Fired and aborted triggers leave the active set immediately so each
    trigger transitions exactly once.
    """

    id_prefix: str = "trigger"
    _active: Dict[str, Trigger] = field(default_factory=dict)
    _sequence: int = 0
    _stats: Dict[str, int] = field(
        default_factory=lambda: {"created": 0, "fired": 0, "aborted": 0}
    )

    def create(
        self,
        advice_id: str,
        side: OrderSide,
        condition: TriggerCondition,
        created_at: int,
        tick_index: int = 0,
        amount: Optional[float] = None,
        expires_at: Optional[int] = None,
    ) -> Trigger:
        self._sequence += 1
        trigger = Trigger(
            id=f"{self.id_prefix}-{self._sequence}",
            advice_id=advice_id,
            side=side,
            condition=condition,
            created_at=created_at,
            tick_index=tick_index,
            amount=amount,
            expires_at=expires_at,
        )
        self._active[trigger.id] = trigger
        self._stats["created"] += 1
        logger.debug(f"Trigger {trigger.id} created for advice {advice_id}")
        return trigger

    def evaluate(
        self, price: float, timestamp: int, tick_index: int
    ) -> List[TriggerTransition]:
        """Evaluate every open trigger against a new price, oldest first."""
        transitions = []
        for trigger in list(self._active.values()):
            if trigger.tick_index >= tick_index:
                continue

            if trigger.is_expired(timestamp):
                transitions.append(self._close_aborted(trigger, ABORT_REASON_EXPIRED, timestamp))
                continue

            if trigger.condition.update(price):
                trigger.fire(price, timestamp)
                del self._active[trigger.id]
                self._stats["fired"] += 1
                logger.info(f"Trigger {trigger.id} fired at {price}")
                transitions.append(
                    TriggerTransition(trigger=trigger, state=TriggerState.FIRED, price=price)
                )
        return transitions

    def expire(self, timestamp: int, tick_index: int) -> List[TriggerTransition]:
        """Abort expired triggers on a tick that carries no price."""
        return [
            self._close_aborted(trigger, ABORT_REASON_EXPIRED, timestamp)
            for trigger in list(self._active.values())
            if trigger.tick_index < tick_index and trigger.is_expired(timestamp)
        ]

    def abort(
        self, trigger_id: str, reason: str, timestamp: Optional[int] = None
    ) -> TriggerTransition:
        trigger = self._active.get(trigger_id)
        if trigger is None:
            raise InvalidTriggerTransitionError(
                trigger_id, "closed", TriggerState.ABORTED.value
            )
        return self._close_aborted(trigger, reason, timestamp)

    def abort_for_advice(
        self, advice_id: str, reason: str, timestamp: Optional[int] = None
    ) -> List[TriggerTransition]:
        return [
            self._close_aborted(trigger, reason, timestamp)
            for trigger in list(self._active.values())
            if trigger.advice_id == advice_id
        ]

    def _close_aborted(
        self, trigger: Trigger, reason: str, timestamp: Optional[int]
    ) -> TriggerTransition:
        trigger.abort(reason, timestamp)
        del self._active[trigger.id]
        self._stats["aborted"] += 1
        logger.info(f"Trigger {trigger.id} aborted: {reason}")
        return TriggerTransition(trigger=trigger, state=TriggerState.ABORTED, reason=reason)

    def open_triggers(self) -> List[Trigger]:
        return list(self._active.values())

    def get(self, trigger_id: str) -> Optional[Trigger]:
        return self._active.get(trigger_id)

    def __len__(self) -> int:
        return len(self._active)

    def get_stats(self) -> Dict[str, int]:
        return {**self._stats, "open": len(self._active)}


__all__ = [
    "TriggerState",
    "ConditionKind",
    "TriggerCondition",
    "Trigger",
    "TriggerTransition",
    "TriggerBook",
]
