# TICKWISE Core - Trading Logic
"""
Core trading logic for the TICKWISE engine.

Modules:
    constants: System-wide constants and the event catalog
    exceptions: Centralized exception hierarchy
    models: Ticks, portfolio, advice and trade payloads, date ranges
    order_summary: Fill aggregation with a NaN sentinel
    trigger_machine: Conditional order state machine
    paper_ledger: Simulated fills, fees and portfolio bookkeeping
"""

from .constants import (
    VERSION,
    SYSTEM_NAME,
    DEFAULT_FEE_BUFFER,
    MAX_PAIRS,
    PAIR_SEPARATOR,
)

from .exceptions import (
    TickwiseError,
    ConfigurationError,
    PipelineError,
    StopPipelineError,
)

from .models import (
    Candle,
    TradeTick,
    ClockTick,
    DateRange,
    Portfolio,
    MarketLimits,
    LimitRange,
    OrderSide,
    Recommendation,
    Advice,
    Trade,
    TradeInitiated,
    TradeCompleted,
    TradeAborted,
)

from .order_summary import (
    OrderSummary,
    EMPTY_ORDER_SUMMARY,
    summarize_trades,
)

from .trigger_machine import (
    TriggerState,
    TriggerCondition,
    Trigger,
    TriggerBook,
)

from .paper_ledger import (
    PaperLedger,
    compute_order_pricing,
    resolve_order_amount,
)

__all__ = [
    # Constants
    "VERSION",
    "SYSTEM_NAME",
    "DEFAULT_FEE_BUFFER",
    "MAX_PAIRS",
    "PAIR_SEPARATOR",
    # Exceptions
    "TickwiseError",
    "ConfigurationError",
    "PipelineError",
    "StopPipelineError",
    # Models
    "Candle",
    "TradeTick",
    "ClockTick",
    "DateRange",
    "Portfolio",
    "MarketLimits",
    "LimitRange",
    "OrderSide",
    "Recommendation",
    "Advice",
    "Trade",
    "TradeInitiated",
    "TradeCompleted",
    "TradeAborted",
    # Order summary
    "OrderSummary",
    "EMPTY_ORDER_SUMMARY",
    "summarize_trades",
    # Triggers
    "TriggerState",
    "TriggerCondition",
    "Trigger",
    "TriggerBook",
    # Ledger
    "PaperLedger",
    "compute_order_pricing",
    "resolve_order_amount",
]
