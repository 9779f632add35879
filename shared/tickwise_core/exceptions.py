"""
TICKWISE - Centralized Exception Hierarchy
==========================================

Provides structured exception types for proper error handling
and categorization across the trading engine.

Every exception carries a stable ``kind`` tag so calling code can
branch on the category without matching on message text.

Exception Categories:
    - ConfigurationError: Invalid or missing configuration
    - PipelineError: Plugin pipeline construction and wiring failures
    - UndefinedLimitsError: Broker market limits were never loaded
    - RegistryLookupError: Unknown broker or strategy names
    - IndicatorError: Indicator construction or computation failures
    - InvalidDateRangeError: Malformed or inverted date ranges
    - OrderError: Order sizing and range validation failures
    - DuplicateTradeError: A fill id was applied twice
    - InvalidTriggerTransitionError: Trigger left a terminal state
    - StopPipelineError: A plugin requested an early stop

Author: TICKWISE Development Team
Version: 1.0.0
"""

from typing import Any, Dict, Iterable, Optional, Sequence


class TickwiseError(Exception):
    """
    Base exception for all TICKWISE errors.

    Attributes:
        message: Human-readable error description
        kind: Stable category tag for programmatic handling
        details: Optional dict with additional context
        recoverable: Whether the run can continue after this error
    """

    kind: str = "tickwise"
    recoverable: bool = False

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return f"[{self.kind}] {self.message}"


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================


class ConfigurationError(TickwiseError):
    """Base exception for configuration errors."""

    kind = "configuration"


class InvalidConfigError(ConfigurationError):
    """Invalid configuration value."""

    def __init__(self, message: str, field: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.field = field


class MissingConfigError(ConfigurationError):
    """Required configuration is missing."""

    pass


class PluginConfigurationError(ConfigurationError):
    """A plugin's settings failed validation against its schema."""

    def __init__(self, plugin_name: str, field: str, reason: str, **kwargs):
        super().__init__(
            f"Invalid setting '{field}' for plugin {plugin_name}: {reason}",
            **kwargs,
        )
        self.plugin_name = plugin_name
        self.field = field
        self.reason = reason


# =============================================================================
# PIPELINE ERRORS
# =============================================================================


class PipelineError(TickwiseError):
    """Base exception for pipeline construction errors."""

    kind = "pipeline"


class DependencyCycleError(PipelineError):
    """Plugin dependencies form a cycle."""

    def __init__(self, cycle: Sequence[str], **kwargs):
        super().__init__(
            f"Plugin dependency cycle detected: {' -> '.join(cycle)}", **kwargs
        )
        self.cycle = list(cycle)


class MissingDependencyError(PipelineError):
    """A plugin depends on a plugin that is not part of the pipeline."""

    def __init__(self, missing: Dict[str, Sequence[str]], **kwargs):
        parts = [
            f"{plugin} requires {', '.join(deps)}" for plugin, deps in missing.items()
        ]
        super().__init__(
            f"Missing plugin dependencies: {'; '.join(parts)}", **kwargs
        )
        self.missing = {plugin: list(deps) for plugin, deps in missing.items()}


class PluginsEmitSameEventError(PipelineError):
    """Several plugins declare the same emitted event."""

    def __init__(self, plugin_names: Iterable[str], events: Iterable[str], **kwargs):
        self.plugin_names = list(plugin_names)
        self.events = list(events)
        super().__init__(
            f"Multiple plugins ({','.join(self.plugin_names)}) are broadcasting "
            f"the same event(s) ({' '.join(self.events)}). This is unsupported",
            **kwargs,
        )


class PluginUnsupportedModeError(PipelineError):
    """Plugin was configured for a mode it does not support."""

    def __init__(self, plugin_name: str, mode: str, **kwargs):
        super().__init__(
            f"Plugin {plugin_name} does not support {mode} mode.", **kwargs
        )
        self.plugin_name = plugin_name
        self.mode = mode


class PluginMissingServiceError(PipelineError):
    """Plugin asked for a service that was never injected."""

    def __init__(self, plugin_name: str, service: str, **kwargs):
        super().__init__(
            f"Missing {service} in {plugin_name} plugin. "
            f"Did you forget to inject it ?",
            **kwargs,
        )
        self.plugin_name = plugin_name
        self.service = service


class PluginMissingHandlerError(PipelineError):
    """Plugin declares a handled event without a usable handler method."""

    def __init__(
        self, plugin_name: str, event: str, handler: str, lifecycle: bool = False, **kwargs
    ):
        if lifecycle:
            message = (
                f"Plugin {plugin_name} handles {event} but {handler}() is a "
                f"lifecycle method, rename the event"
            )
        else:
            message = f"Plugin {plugin_name} handles {event} but does not define {handler}()"
        super().__init__(message, **kwargs)
        self.plugin_name = plugin_name
        self.event = event
        self.handler = handler
        self.lifecycle = lifecycle


class PluginEmitEmptyEventError(PipelineError):
    """Plugin emitted an event without a name."""

    def __init__(self, plugin_name: Optional[str], event: Optional[str], **kwargs):
        super().__init__(
            f"Event name ({event}) or plugin name ({plugin_name}) is/are "
            f"missing when creating event.",
            **kwargs,
        )
        self.plugin_name = plugin_name
        self.event = event


class PluginEmitUndeclaredEventError(PipelineError):
    """Plugin emitted an event it never declared."""

    def __init__(self, plugin_name: str, event: str, **kwargs):
        super().__init__(
            f"Plugin {plugin_name} emitted undeclared event {event}", **kwargs
        )
        self.plugin_name = plugin_name
        self.event = event


class UnknownPluginError(PipelineError):
    """No plugin is registered under the configured name."""

    def __init__(self, plugin_name: str, **kwargs):
        super().__init__(f"Unknown plugin: {plugin_name}", **kwargs)
        self.plugin_name = plugin_name


class DuplicatePluginError(PipelineError):
    """The same plugin name was registered or configured twice."""

    def __init__(self, plugin_name: str, **kwargs):
        super().__init__(f"Plugin {plugin_name} is declared twice", **kwargs)
        self.plugin_name = plugin_name


# =============================================================================
# BROKER ERRORS
# =============================================================================


class UndefinedLimitsError(TickwiseError):
    """Market limits were requested before the broker loaded them."""

    kind = "broker_limits_undefined"

    def __init__(
        self,
        property: str,
        minimum: Optional[float] = None,
        maximum: Optional[float] = None,
        **kwargs,
    ):
        super().__init__(
            f"{property} limits are not defined (minimal {property}: {minimum}, "
            f"maximal {property}: {maximum}). Did you forget to call "
            f"broker.load_markets() ?",
            **kwargs,
        )
        self.property = property
        self.minimum = minimum
        self.maximum = maximum


# =============================================================================
# LOOKUP ERRORS
# =============================================================================


class RegistryLookupError(TickwiseError):
    """Base exception for unknown names in a registry."""

    kind = "lookup"


class UnknownBrokerError(RegistryLookupError):
    """No broker factory is registered under the configured name."""

    def __init__(self, broker_name: str, **kwargs):
        super().__init__(f"Unknown broker: {broker_name}", **kwargs)
        self.broker_name = broker_name


class StrategyNotFoundError(RegistryLookupError):
    """No strategy factory is registered under the configured name."""

    def __init__(self, strategy_name: str, **kwargs):
        super().__init__(f"Strategy not found: {strategy_name}", **kwargs)
        self.strategy_name = strategy_name


# =============================================================================
# DATA ERRORS
# =============================================================================


class IndicatorError(TickwiseError):
    """Indicator failed to build or compute. The calling plugin decides if fatal."""

    kind = "indicator"
    recoverable = True

    def __init__(self, indicator_name: str, message: str, **kwargs):
        super().__init__(f"{indicator_name}: {message}", **kwargs)
        self.indicator_name = indicator_name


class InvalidDateRangeError(TickwiseError):
    """Date range is malformed or its start is not before its end."""

    kind = "invalid_date_range"


# =============================================================================
# ORDER & LEDGER ERRORS
# =============================================================================


class OrderError(TickwiseError):
    """Base exception for order-related errors."""

    kind = "order"
    recoverable = True


class OrderOutOfRangeError(OrderError):
    """Order amount, price or cost falls outside the market limits."""

    def __init__(
        self,
        property: str,
        current: float,
        minimum: Optional[float] = None,
        maximum: Optional[float] = None,
        **kwargs,
    ):
        prefix = f"Order '{property}' with value {current}"
        if minimum is not None and maximum is not None:
            message = (
                f"{prefix} is out of range. "
                f"Expected a value between {minimum} and {maximum}."
            )
        elif minimum is not None:
            message = f"{prefix} is too low. Minimum allowed is {minimum}."
        else:
            message = f"{prefix} is too high. Maximum allowed is {maximum}."
        super().__init__(message, **kwargs)
        self.property = property
        self.current = current
        self.minimum = minimum
        self.maximum = maximum


class InsufficientFundsError(OrderError):
    """Portfolio cannot cover the requested order."""

    pass


class DuplicateTradeError(TickwiseError):
    """A fill with this id was already applied to the ledger."""

    kind = "duplicate_trade"

    def __init__(self, trade_id: str, **kwargs):
        super().__init__(f"Trade {trade_id} was already applied", **kwargs)
        self.trade_id = trade_id


# =============================================================================
# STATE ERRORS
# =============================================================================


class InvalidTriggerTransitionError(TickwiseError):
    """Trigger attempted to leave a terminal state."""

    kind = "trigger_transition"

    def __init__(self, trigger_id: str, from_state: str, to_state: str, **kwargs):
        super().__init__(
            f"Trigger {trigger_id} cannot move from {from_state} to {to_state}",
            **kwargs,
        )
        self.trigger_id = trigger_id
        self.from_state = from_state
        self.to_state = to_state


# =============================================================================
# STRATEGY ERRORS
# =============================================================================


class StrategyError(TickwiseError):
    """Base exception for strategy-related errors."""

    kind = "strategy"


# =============================================================================
# CONTROL FLOW
# =============================================================================


class StopPipelineError(TickwiseError):
    """Raised by a plugin to end the run early. Not a failure."""

    kind = "stop"
    recoverable = True

    def __init__(self, reason: str, **kwargs):
        super().__init__(reason, **kwargs)
        self.reason = reason


# =============================================================================
# EXPORTS
# =============================================================================

__all__ = [
    # Base
    "TickwiseError",
    # Configuration
    "ConfigurationError",
    "InvalidConfigError",
    "MissingConfigError",
    "PluginConfigurationError",
    # Pipeline
    "PipelineError",
    "DependencyCycleError",
    "MissingDependencyError",
    "PluginsEmitSameEventError",
    "PluginUnsupportedModeError",
    "PluginMissingServiceError",
    "PluginMissingHandlerError",
    "PluginEmitEmptyEventError",
    "PluginEmitUndeclaredEventError",
    "UnknownPluginError",
    "DuplicatePluginError",
    # Broker
    "UndefinedLimitsError",
    # Lookup
    "RegistryLookupError",
    "UnknownBrokerError",
    "StrategyNotFoundError",
    # Data
    "IndicatorError",
    "InvalidDateRangeError",
    # Order
    "OrderError",
    "OrderOutOfRangeError",
    "InsufficientFundsError",
    "DuplicateTradeError",
    # State
    "InvalidTriggerTransitionError",
    # Strategy
    "StrategyError",
    # Control flow
    "StopPipelineError",
]
