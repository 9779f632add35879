# TICKWISE_FEAT: plugin-base-001
"""
TICKWISE - Plugin Base Classes
==============================

Base classes and interfaces for all TICKWISE pipeline plugins.

Plugin Categories:
- Indicator: Technical indicator computation
- Strategy: Trading advice generation
- Trader: Order execution (paper or live)
- Analyzer: Performance tracking and reporting
- Data: Market data feeds
- Monitoring: Run monitoring and alerting

Every plugin class declares a static ``descriptor`` (name, events it emits
and handles, dependencies, injected services, supported modes and an
optional pydantic settings schema). The orchestrator only ever talks to
plugins through this contract.

Author: TICKWISE Development Team
Version: 1.0.0
"""

import importlib
import logging
import re
from abc import ABC
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum, auto
from typing import (
    Any,
    ClassVar,
    Dict,
    FrozenSet,
    Iterable,
    List,
    Optional,
    Type,
    TYPE_CHECKING,
)

from pydantic import BaseModel, ValidationError

from shared.tickwise_core.constants import MODES
from shared.tickwise_core.exceptions import (
    PluginConfigurationError,
    PluginEmitEmptyEventError,
    PluginEmitUndeclaredEventError,
    PluginMissingHandlerError,
    PluginMissingServiceError,
)
from shared.tickwise_core.models import Tick

if TYPE_CHECKING:
    from .event_bus import Event, EventBus

logger = logging.getLogger("TICKWISE_Plugin")

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")

# Lifecycle hooks; events mapping onto them cannot be handled
LIFECYCLE_METHODS = frozenset({"on_init", "on_tick", "on_event", "on_finalize"})


def handler_name(event_name: str) -> str:
    """Handler method for an event: ``tradeCompleted`` -> ``on_trade_completed``."""
    return "on_" + _CAMEL_BOUNDARY.sub("_", event_name).lower()


class PluginCategory(Enum):
    """Plugin categories."""

    INDICATOR = "indicator"
    STRATEGY = "strategy"
    TRADER = "trader"
    ANALYZER = "analyzer"
    DATA = "data"
    MONITORING = "monitoring"


class PluginState(Enum):
    """Plugin lifecycle state."""

    CONFIGURED = auto()
    INITIALIZING = auto()
    READY = auto()
    RUNNING = auto()
    FINALIZED = auto()
    ERROR = auto()


def _frozen(values: Optional[Iterable[str]]) -> FrozenSet[str]:
    if values is None:
        return frozenset()
    if isinstance(values, str):
        return frozenset({values})
    return frozenset(values)


@dataclass(frozen=True)
class PluginDescriptor:
    """Static metadata of a plugin class."""

    name: str
    category: PluginCategory = PluginCategory.STRATEGY
    events_emitted: FrozenSet[str] = field(default_factory=frozenset)
    events_handled: FrozenSet[str] = field(default_factory=frozenset)
    dependencies: FrozenSet[str] = field(default_factory=frozenset)
    inject: FrozenSet[str] = field(default_factory=frozenset)
    modes: FrozenSet[str] = MODES
    config_schema: Optional[Type[BaseModel]] = None
    version: str = "1.0.0"

    def __post_init__(self):
        for attr in ("events_emitted", "events_handled", "dependencies", "inject", "modes"):
            object.__setattr__(self, attr, _frozen(getattr(self, attr)))
        if isinstance(self.category, str):
            object.__setattr__(self, "category", PluginCategory(self.category))
        if not self.name:
            raise ValueError("Plugin descriptor needs a name")
        unknown = self.modes - MODES
        if unknown:
            raise ValueError(f"Plugin {self.name} declares unknown modes: {sorted(unknown)}")

    def supports(self, mode: str) -> bool:
        return mode in self.modes

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        schema = None
        if self.config_schema is not None:
            schema = f"{self.config_schema.__module__}:{self.config_schema.__qualname__}"
        return {
            "name": self.name,
            "category": self.category.value,
            "events_emitted": sorted(self.events_emitted),
            "events_handled": sorted(self.events_handled),
            "dependencies": sorted(self.dependencies),
            "inject": sorted(self.inject),
            "modes": sorted(self.modes),
            "config_schema": schema,
            "version": self.version,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PluginDescriptor":
        schema = data.get("config_schema")
        if isinstance(schema, str):
            module_name, _, qualname = schema.partition(":")
            target: Any = importlib.import_module(module_name)
            for part in qualname.split("."):
                target = getattr(target, part)
            schema = target
        return cls(
            name=data["name"],
            category=PluginCategory(data.get("category", PluginCategory.STRATEGY.value)),
            events_emitted=data.get("events_emitted", ()),
            events_handled=data.get("events_handled", ()),
            dependencies=data.get("dependencies", ()),
            inject=data.get("inject", ()),
            modes=data.get("modes", MODES),
            config_schema=schema,
            version=data.get("version", "1.0.0"),
        )


class Plugin(ABC):
    """
    Base class for all TICKWISE plugins.

    Lifecycle:
        1. configure() - Validate settings and instantiate
        2. inject_service() - Receive requested services
        3. initialize() - Bind event handlers, run on_init()
        4. process_tick() / on_event() - Per tick work
        5. process_finalize() - End of run, returns an optional report

    Handled events dispatch to ``on_<snake_case_event>`` coroutines, so a
    plugin handling ``tradeCompleted`` must define ``on_trade_completed``.
    Emitted events are queued with ``_emit`` and delivered by the
    orchestrator right after the current tick or handler returns.

    Example:
        class MyAnalyzer(Plugin):
            descriptor = PluginDescriptor(
                name="my_analyzer",
                category=PluginCategory.ANALYZER,
                events_handled={"tradeCompleted"},
            )

            async def on_trade_completed(self, trade):
                self._logger.info(f"Trade {trade.id} done")
    """

    descriptor: ClassVar[PluginDescriptor]

    def __init__(self, settings: Optional[BaseModel] = None):
        self.settings = settings
        self.state = PluginState.CONFIGURED
        self._event_bus: Optional["EventBus"] = None
        self._services: Dict[str, Any] = {}
        self._handlers: Dict[str, Any] = {}
        self._pending: List["Event"] = []
        self._logger = logging.getLogger(f"TICKWISE_{self.descriptor.name}")
        self._started_at: Optional[datetime] = None
        self._stats = {
            "ticks_processed": 0,
            "events_processed": 0,
            "events_emitted": 0,
            "errors": 0,
        }

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    @classmethod
    def validate_settings(cls, raw: Optional[Dict[str, Any]] = None) -> Optional[BaseModel]:
        """Validate raw settings against the descriptor schema."""
        schema = cls.descriptor.config_schema
        if schema is None:
            return None
        try:
            return schema.model_validate(raw or {})
        except ValidationError as e:
            error = e.errors()[0]
            field_name = ".".join(str(part) for part in error["loc"]) or "<root>"
            raise PluginConfigurationError(
                cls.descriptor.name, field_name, error["msg"]
            ) from e

    @classmethod
    def configure(cls, raw: Optional[Dict[str, Any]] = None) -> "Plugin":
        """Validate settings and build the plugin."""
        return cls(cls.validate_settings(raw))

    @property
    def name(self) -> str:
        """Plugin name."""
        return self.descriptor.name

    @property
    def category(self) -> PluginCategory:
        """Plugin category."""
        return self.descriptor.category

    @property
    def event_bus(self) -> Optional["EventBus"]:
        """Get event bus reference."""
        return self._event_bus

    # -------------------------------------------------------------------------
    # Services
    # -------------------------------------------------------------------------

    def inject_service(self, name: str, service: Any) -> None:
        self._services[name] = service

    def get_service(self, name: str) -> Any:
        service = self._services.get(name)
        if service is None:
            raise PluginMissingServiceError(self.name, name)
        return service

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def bind_handlers(self) -> None:
        """Resolve the handler of every handled event once."""
        for event_name in sorted(self.descriptor.events_handled):
            method = handler_name(event_name)
            if method in LIFECYCLE_METHODS:
                raise PluginMissingHandlerError(self.name, event_name, method, lifecycle=True)
            handler = getattr(self, method, None)
            if handler is None or not callable(handler):
                raise PluginMissingHandlerError(self.name, event_name, method)
            self._handlers[event_name] = handler

    async def initialize(self, event_bus: "EventBus") -> bool:
        """
        Initialize plugin with event bus.

        Args:
            event_bus: Event bus for communication

        Returns:
            True if initialized successfully
        """
        self.state = PluginState.INITIALIZING
        self._event_bus = event_bus

        for service in self.descriptor.inject:
            self.get_service(service)

        if not self._handlers:
            self.bind_handlers()

        await self.on_init()

        self.state = PluginState.READY
        self._logger.info(f"Plugin initialized: {self.name}")
        return True

    async def on_init(self) -> None:
        """Hook run once before the first tick."""

    async def process_tick(self, tick: Tick) -> None:
        if self.state == PluginState.READY:
            self.state = PluginState.RUNNING
            self._started_at = datetime.now(timezone.utc)
        try:
            await self.on_tick(tick)
        except Exception:
            self._stats["errors"] += 1
            raise
        self._stats["ticks_processed"] += 1

    async def on_tick(self, tick: Tick) -> None:
        """Handle a market tick. Plugins that only react to events skip it."""

    async def on_event(self, event: "Event") -> None:
        """Dispatch an event to its bound handler."""
        handler = self._handlers.get(event.name)
        if handler is None:
            raise PluginMissingHandlerError(self.name, event.name, handler_name(event.name))
        try:
            await handler(event.payload)
        except Exception:
            self._stats["errors"] += 1
            raise
        self._stats["events_processed"] += 1

    async def process_finalize(self) -> Optional[Dict[str, Any]]:
        report = await self.on_finalize()
        self.state = PluginState.FINALIZED
        self._logger.info(f"Plugin finalized: {self.name}")
        return report

    async def on_finalize(self) -> Optional[Dict[str, Any]]:
        """Hook run once at the end of the run. May return a report."""
        return None

    # -------------------------------------------------------------------------
    # Emitting
    # -------------------------------------------------------------------------

    def _emit(self, name: str, payload: Any = None) -> None:
        """Queue an event for delivery after the current step."""
        if not name or not self.name:
            raise PluginEmitEmptyEventError(self.name, name)
        if name not in self.descriptor.events_emitted:
            raise PluginEmitUndeclaredEventError(self.name, name)
        if not self._event_bus:
            raise RuntimeError("Event bus not initialized")

        self._pending.append(self._event_bus.create_event(name, payload, self.name))
        self._stats["events_emitted"] += 1

    @property
    def has_pending_events(self) -> bool:
        return bool(self._pending)

    def drain_events(self) -> List["Event"]:
        """Hand over queued events in emission order."""
        events, self._pending = self._pending, []
        return events

    def get_stats(self) -> Dict[str, Any]:
        """Get plugin statistics."""
        return {
            "name": self.name,
            "category": self.category.value,
            "state": self.state.name,
            "started_at": self._started_at.isoformat() if self._started_at else None,
            **self._stats,
        }

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.name} state={self.state.name}>"


# =============================================================================
# EXPORTS
# =============================================================================

__all__ = [
    "handler_name",
    "PluginCategory",
    "PluginState",
    "PluginDescriptor",
    "LIFECYCLE_METHODS",
    "Plugin",
]
