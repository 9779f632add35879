# TICKWISE_FEAT: orchestrator-001
"""
TICKWISE - Pipeline Orchestrator
================================

Builds the plugin pipeline for one run and drives the tick stream
through it.

Features:
- Fail-fast construction (registry, mode, settings, dependencies,
  event collisions, services)
- Broker market preload before the first tick
- Deterministic per-tick execution in dependency order
- Breadth-first delivery of cascaded events before the next plugin runs
- Early stop, cancellation and guaranteed finalization

Author: TICKWISE Development Team
Version: 1.0.0
"""

import asyncio
import logging
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import (
    Any,
    AsyncIterable,
    AsyncIterator,
    Deque,
    Dict,
    Iterable,
    List,
    Optional,
    Tuple,
    Type,
    Union,
)

from pydantic import BaseModel

from shared.tickwise_core.constants import MODES, SERVICE_BROKER
from shared.tickwise_core.exceptions import (
    ConfigurationError,
    DuplicatePluginError,
    PipelineError,
    PluginMissingServiceError,
    PluginUnsupportedModeError,
    StopPipelineError,
)
from shared.tickwise_core.models import Tick

from .dependency_resolver import resolve_execution_order
from .event_bus import Event, EventBus
from .event_validator import check_event_collisions
from .plugin_base import Plugin, PluginDescriptor
from .plugin_registry import PluginRegistry

logger = logging.getLogger("TICKWISE_Orchestrator")

TickSource = Union[Iterable[Tick], AsyncIterable[Tick]]


class RunStatus(Enum):
    COMPLETED = "completed"
    STOPPED = "stopped"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class PipelineEntry:
    descriptor: PluginDescriptor
    plugin_class: Type[Plugin]
    settings: Optional[BaseModel] = None


@dataclass(frozen=True)
class PipelineContext:
    """Resolved pipeline of one run. Never changes once built."""

    mode: str
    entries: Tuple[PipelineEntry, ...]

    @property
    def names(self) -> List[str]:
        return [entry.descriptor.name for entry in self.entries]

    def entry(self, name: str) -> PipelineEntry:
        for entry in self.entries:
            if entry.descriptor.name == name:
                return entry
        raise KeyError(name)


@dataclass
class RunOutcome:
    status: RunStatus
    ticks_processed: int
    reports: Dict[str, Any] = field(default_factory=dict)
    reason: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "ticks_processed": self.ticks_processed,
            "reports": self.reports,
            "reason": self.reason,
        }


async def _iterate(ticks: TickSource) -> AsyncIterator[Tick]:
    if hasattr(ticks, "__aiter__"):
        async for tick in ticks:
            yield tick
    else:
        for tick in ticks:
            yield tick


class Orchestrator:
    """
    Pipeline orchestrator for a single run.

    Example:
        orchestrator = Orchestrator(
            mode="backtest",
            plugin_settings=[{"name": "paper_trader", "pair": "BTC/USD"}],
            registry=default_registry(),
            services={"broker": broker},
        )
        await orchestrator.build()
        outcome = await orchestrator.run(candles)
    """

    def __init__(
        self,
        mode: str,
        plugin_settings: List[Dict[str, Any]],
        registry: PluginRegistry,
        services: Optional[Dict[str, Any]] = None,
        history_size: int = 1000,
    ):
        if mode not in MODES:
            raise ConfigurationError(f"Unknown mode: {mode}")

        self.mode = mode
        self._plugin_settings = [dict(entry) for entry in plugin_settings]
        self._registry = registry
        self._services = dict(services or {})
        self._event_bus = EventBus(history_size=history_size)

        self._context: Optional[PipelineContext] = None
        self._plugins: List[Plugin] = []
        self._cancel_requested = asyncio.Event()
        self._ran = False

        self._stats = {
            "ticks_processed": 0,
            "events_dispatched": 0,
            "events_discarded": 0,
        }

        logger.info(f"Orchestrator initialized in {mode} mode")

    @property
    def event_bus(self) -> EventBus:
        """Get event bus."""
        return self._event_bus

    @property
    def context(self) -> Optional[PipelineContext]:
        return self._context

    @property
    def plugins(self) -> List[Plugin]:
        return list(self._plugins)

    def get_plugin(self, name: str) -> Optional[Plugin]:
        """Get a plugin by name."""
        for plugin in self._plugins:
            if plugin.name == name:
                return plugin
        return None

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    async def build(self) -> PipelineContext:
        """
        Build the pipeline. Every check runs before any plugin is created.

        Raises:
            UnknownPluginError, DuplicatePluginError,
            PluginUnsupportedModeError, PluginConfigurationError,
            MissingDependencyError, DependencyCycleError,
            PluginsEmitSameEventError, PluginMissingServiceError
        """
        if self._context is not None:
            return self._context

        logger.info("Building pipeline...")

        declared: List[Tuple[PluginDescriptor, Type[Plugin], Dict[str, Any]]] = []
        seen = set()
        for entry in self._plugin_settings:
            raw = dict(entry)
            name = raw.pop("name", None)
            if not name:
                raise ConfigurationError("Plugin entry without a name")
            if name in seen:
                raise DuplicatePluginError(name)
            seen.add(name)
            plugin_class = self._registry.get(name)
            declared.append((plugin_class.descriptor, plugin_class, raw))

        for descriptor, _, _ in declared:
            if not descriptor.supports(self.mode):
                raise PluginUnsupportedModeError(descriptor.name, self.mode)

        settings = {
            descriptor.name: plugin_class.validate_settings(raw)
            for descriptor, plugin_class, raw in declared
        }
        classes = {descriptor.name: plugin_class for descriptor, plugin_class, _ in declared}

        ordered = resolve_execution_order([descriptor for descriptor, _, _ in declared])
        check_event_collisions(ordered)

        for descriptor in ordered:
            for service in sorted(descriptor.inject):
                if self._services.get(service) is None:
                    raise PluginMissingServiceError(descriptor.name, service)

        if any(SERVICE_BROKER in d.inject for d in ordered):
            broker = self._services[SERVICE_BROKER]
            await broker.load_markets()
            logger.info("Broker markets loaded")

        context = PipelineContext(
            mode=self.mode,
            entries=tuple(
                PipelineEntry(
                    descriptor=descriptor,
                    plugin_class=classes[descriptor.name],
                    settings=settings[descriptor.name],
                )
                for descriptor in ordered
            ),
        )

        plugins = [entry.plugin_class(entry.settings) for entry in context.entries]
        for plugin in plugins:
            for service in plugin.descriptor.inject:
                plugin.inject_service(service, self._services[service])

        for plugin in plugins:
            plugin.bind_handlers()
            if plugin.descriptor.events_handled:
                self._event_bus.subscribe(
                    plugin.name, plugin.descriptor.events_handled, plugin.on_event
                )
        self._event_bus.seal()

        for plugin in plugins:
            await plugin.initialize(self._event_bus)

        self._plugins = plugins
        self._context = context
        logger.info(f"Pipeline built: {' -> '.join(context.names)}")
        return context

    # -------------------------------------------------------------------------
    # Execution
    # -------------------------------------------------------------------------

    def cancel(self) -> None:
        """Request cancellation. Honoured between ticks."""
        self._cancel_requested.set()

    async def run(
        self, ticks: TickSource, cancel_event: Optional[asyncio.Event] = None
    ) -> RunOutcome:
        """
        Drive the tick stream through the pipeline.

        Fatal errors, task cancellation and interrupts are re-raised after
        every plugin has been finalized.
        """
        await self.build()
        if self._ran:
            raise PipelineError("Pipeline already ran, build a new orchestrator")
        self._ran = True

        status = RunStatus.COMPLETED
        reason: Optional[str] = None
        failure: Optional[BaseException] = None
        processed = 0

        try:
            async for tick in _iterate(ticks):
                if self._is_cancelled(cancel_event):
                    status = RunStatus.CANCELLED
                    reason = "cancelled"
                    logger.info(f"Run cancelled after {processed} ticks")
                    break
                await self._process_tick(tick)
                processed += 1
        except StopPipelineError as e:
            status = RunStatus.STOPPED
            reason = e.reason
            processed += 1
            logger.info(f"Run stopped early: {e.reason}")
        except Exception as e:
            failure = e
            logger.error(f"Run failed on tick {processed}: {e}")
        except (asyncio.CancelledError, KeyboardInterrupt) as e:
            failure = e
            logger.warning(f"Run interrupted on tick {processed}, finalizing plugins")

        self._discard_pending()
        reports, finalize_error = await self._finalize()
        if failure is None:
            failure = finalize_error
        self._stats["ticks_processed"] = processed

        if failure is not None:
            raise failure

        logger.info(f"Run {status.value}: {processed} ticks")
        return RunOutcome(status=status, ticks_processed=processed, reports=reports, reason=reason)

    def _is_cancelled(self, cancel_event: Optional[asyncio.Event]) -> bool:
        if self._cancel_requested.is_set():
            return True
        return cancel_event is not None and cancel_event.is_set()

    async def _process_tick(self, tick: Tick) -> None:
        for plugin in self._plugins:
            await plugin.process_tick(tick)
            await self._flush(plugin)

    async def _flush(self, plugin: Plugin) -> None:
        """Deliver the plugin's events, then whatever those deliveries emitted."""
        queue: Deque[Event] = deque(plugin.drain_events())
        while queue:
            event = queue.popleft()
            await self._event_bus.publish(event)
            self._stats["events_dispatched"] += 1
            for other in self._plugins:
                queue.extend(other.drain_events())

    def _discard_pending(self) -> None:
        for plugin in self._plugins:
            dropped = plugin.drain_events()
            if dropped:
                self._stats["events_discarded"] += len(dropped)
                logger.warning(
                    f"Discarding {len(dropped)} undelivered events from {plugin.name}: "
                    f"{[e.name for e in dropped]}"
                )

    async def _finalize(self) -> Tuple[Dict[str, Any], Optional[Exception]]:
        """Finalize every plugin in order. Returns the reports and the first error."""
        reports: Dict[str, Any] = {}
        first_error: Optional[Exception] = None
        for plugin in self._plugins:
            try:
                report = await plugin.process_finalize()
                await self._flush(plugin)
            except StopPipelineError as e:
                logger.info(f"{plugin.name} requested a stop while finalizing: {e.reason}")
                self._discard_pending()
                continue
            except Exception as e:
                logger.error(f"Finalize failed for {plugin.name}: {e}")
                if first_error is None:
                    first_error = e
                continue
            if report is not None:
                reports[plugin.name] = report
        return reports, first_error

    def get_stats(self) -> Dict[str, Any]:
        return {
            **self._stats,
            "mode": self.mode,
            "plugins": [p.get_stats() for p in self._plugins],
            "event_bus": self._event_bus.get_stats(),
        }


# =============================================================================
# EXPORTS
# =============================================================================

__all__ = [
    "RunStatus",
    "PipelineEntry",
    "PipelineContext",
    "RunOutcome",
    "Orchestrator",
]
