"""
TICKWISE - System Constants
===========================

Centralized constants for the TICKWISE trading engine.
All magic numbers and system-wide values should be defined here.

Author: TICKWISE Development Team
Version: 1.0.0
"""

# =============================================================================
# SYSTEM IDENTIFICATION
# =============================================================================

VERSION = "1.0.0"
SYSTEM_NAME = "TICKWISE"
ENV_PREFIX = "TICKWISE_"

# =============================================================================
# RUN MODES
# =============================================================================

MODE_BACKTEST = "backtest"
MODE_PAPER = "paper"
MODE_LIVE = "live"
MODES = frozenset({MODE_BACKTEST, MODE_PAPER, MODE_LIVE})

# =============================================================================
# PAIR CONFIGURATION
# =============================================================================

PAIR_SEPARATOR = "/"
MIN_PAIRS = 1
MAX_PAIRS = 5

# =============================================================================
# TRADING CONSTANTS
# =============================================================================

# Safety margin on top of the fee rate when sizing a buy from the whole balance
DEFAULT_FEE_BUFFER = 0.05

# Order amounts are rounded down to this many decimals
AMOUNT_DECIMALS = 8

# Default fee percentages (maker / taker)
DEFAULT_FEE_MAKER = 0.15
DEFAULT_FEE_TAKER = 0.25

# Default risk free return (%) used for the sharpe ratio
DEFAULT_RISK_FREE_RETURN = 1.0

# =============================================================================
# TIMING CONSTANTS (milliseconds)
# =============================================================================

ONE_MINUTE_MS = 60_000
ONE_DAY_MS = 86_400_000
ONE_YEAR_MS = 365 * ONE_DAY_MS

# =============================================================================
# SERVICES
# =============================================================================

SERVICE_BROKER = "broker"
SERVICE_STORAGE = "storage"

# =============================================================================
# EVENT CATALOG
# =============================================================================

PORTFOLIO_CHANGE_EVENT = "portfolioChange"
PORTFOLIO_VALUE_CHANGE_EVENT = "portfolioValueChange"
TRADE_COMPLETED_EVENT = "tradeCompleted"
TRADE_INITIATED_EVENT = "tradeInitiated"
TRADE_ABORTED_EVENT = "tradeAborted"
TRIGGER_ABORTED_EVENT = "triggerAborted"
TRIGGER_CREATED_EVENT = "triggerCreated"
TRIGGER_FIRED_EVENT = "triggerFired"

STRATEGY_ADVICE_EVENT = "strategyAdvice"
STRATEGY_CANCEL_ADVICE_EVENT = "strategyCancelAdvice"
STRATEGY_INFO_EVENT = "strategyInfo"
INDICATORS_UPDATE_EVENT = "indicatorsUpdate"
ROUNDTRIP_COMPLETED_EVENT = "roundtripCompleted"
PERFORMANCE_REPORT_EVENT = "performanceReport"

CORE_EVENTS = frozenset(
    {
        PORTFOLIO_CHANGE_EVENT,
        PORTFOLIO_VALUE_CHANGE_EVENT,
        TRADE_COMPLETED_EVENT,
        TRADE_INITIATED_EVENT,
        TRIGGER_ABORTED_EVENT,
        TRIGGER_CREATED_EVENT,
        TRIGGER_FIRED_EVENT,
    }
)

# =============================================================================
# TRIGGER ABORT REASONS
# =============================================================================

ABORT_REASON_EXPIRED = "expired"
ABORT_REASON_CANCELED = "canceled"
