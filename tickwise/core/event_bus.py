# TICKWISE_FEAT: event-bus-001
"""
TICKWISE - Event Bus
====================

Deterministic in-process event routing between pipeline plugins.

Features:
- Routes built once from each plugin's handled events, then sealed
- Synchronous delivery in subscription (pipeline) order
- A plugin never receives its own events
- Monotonic sequence numbers instead of wall-clock ids
- Event history and delivery statistics for debugging

Handler errors are never swallowed: the failing event goes to the dead
letter list and the error propagates to the caller.

Author: TICKWISE Development Team
Version: 1.0.0
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Callable, Coroutine, Dict, FrozenSet, Iterable, List, Optional

from shared.tickwise_core.exceptions import PipelineError, StopPipelineError

logger = logging.getLogger("TICKWISE_EventBus")


@dataclass(frozen=True)
class Event:
    """Event message for the event bus."""

    name: str
    payload: Any
    source: str
    sequence: int = 0

    def to_dict(self) -> dict:
        payload = self.payload
        if hasattr(payload, "to_dict"):
            payload = payload.to_dict()
        return {
            "name": self.name,
            "payload": payload,
            "source": self.source,
            "sequence": self.sequence,
        }


# Type alias for event handlers
EventHandler = Callable[[Event], Coroutine[Any, Any, None]]


@dataclass
class Subscription:
    """Event subscription."""

    handler: EventHandler
    subscriber_id: str
    event_names: FrozenSet[str] = field(default_factory=frozenset)


class EventBus:
    """
    Event bus for plugin communication.

    Subscriptions are registered while the pipeline is being built and the
    bus is sealed before the first tick, so routing never changes during a
    run.

    Example:
        bus = EventBus()

        async def handle_trade(event: Event):
            print(f"Trade completed: {event.payload}")

        bus.subscribe("analyzer", {"tradeCompleted"}, handle_trade)
        bus.seal()

        await bus.publish(bus.create_event("tradeCompleted", trade, "paper_trader"))
    """

    def __init__(self, history_size: int = 1000):
        self._subscriptions: Dict[str, Subscription] = {}
        self._routes: Dict[str, List[str]] = defaultdict(list)
        self._dead_letter: List[Event] = []
        self._history: List[Event] = []
        self._history_size = history_size
        self._sealed = False
        self._sequence = 0

        self._stats = {
            "events_published": 0,
            "events_delivered": 0,
            "events_failed": 0,
        }

        logger.info("EventBus initialized")

    @property
    def sealed(self) -> bool:
        return self._sealed

    def subscribe(
        self,
        subscriber_id: str,
        event_names: Iterable[str],
        handler: EventHandler,
    ) -> None:
        """
        Subscribe to events.

        Args:
            subscriber_id: Unique subscriber identifier (the plugin name)
            event_names: Event names to subscribe to
            handler: Async handler function
        """
        if self._sealed:
            raise PipelineError(f"Event bus is sealed, cannot subscribe {subscriber_id}")
        if subscriber_id in self._subscriptions:
            raise PipelineError(f"Subscriber {subscriber_id} is already registered")

        names = frozenset(event_names)
        self._subscriptions[subscriber_id] = Subscription(
            handler=handler,
            subscriber_id=subscriber_id,
            event_names=names,
        )
        for name in sorted(names):
            self._routes[name].append(subscriber_id)

        logger.debug(f"Subscription added: {subscriber_id} -> {sorted(names)}")

    def seal(self) -> None:
        """Freeze the routing table."""
        self._sealed = True
        logger.debug(f"EventBus sealed with {len(self._subscriptions)} subscribers")

    def create_event(self, name: str, payload: Any, source: str) -> Event:
        self._sequence += 1
        return Event(name=name, payload=payload, source=source, sequence=self._sequence)

    def subscribers_of(self, name: str) -> List[str]:
        return list(self._routes.get(name, ()))

    async def publish(self, event: Event) -> int:
        """
        Deliver an event to every subscriber except its source.

        Returns:
            Number of handlers that processed the event
        """
        self._history.append(event)
        if len(self._history) > self._history_size:
            self._history = self._history[-self._history_size:]

        self._stats["events_published"] += 1
        logger.debug(f"Event published: {event.name} from {event.source}")

        return await self._dispatch_event(event)

    async def _dispatch_event(self, event: Event) -> int:
        """Dispatch event to matching subscribers."""
        handlers_called = 0

        for subscriber_id in self._routes.get(event.name, ()):
            if subscriber_id == event.source:
                continue

            subscription = self._subscriptions[subscriber_id]
            try:
                await subscription.handler(event)
            except StopPipelineError:
                raise
            except Exception as e:
                logger.error(f"Handler error for {subscriber_id} on {event.name}: {e}")
                self._dead_letter.append(event)
                self._stats["events_failed"] += 1
                raise

            handlers_called += 1
            self._stats["events_delivered"] += 1

        return handlers_called

    def get_stats(self) -> Dict[str, Any]:
        """Get event bus statistics."""
        return {
            **self._stats,
            "subscribers": len(self._subscriptions),
            "sealed": self._sealed,
            "dead_letter_count": len(self._dead_letter),
            "history_size": len(self._history),
        }

    def get_history(self, name: Optional[str] = None, limit: int = 100) -> List[Event]:
        """Get event history, optionally filtered by name."""
        events = self._history
        if name:
            events = [e for e in events if e.name == name]
        return events[-limit:]

    def clear_dead_letter(self) -> List[Event]:
        """Clear and return dead letter queue."""
        events = self._dead_letter.copy()
        self._dead_letter.clear()
        return events


# =============================================================================
# EXPORTS
# =============================================================================

__all__ = [
    "Event",
    "EventHandler",
    "Subscription",
    "EventBus",
]
