"""
TICKWISE - Market & Trading Models
==================================

Plain data types shared by the pipeline, the trigger machine and the
paper trading ledger.

Features:
- Tick variants (candle, trade, clock) with price/time accessors
- Portfolio and market limit value objects
- Advice and trade lifecycle payloads carried on the event bus
- Date ranges with ISO-8601 / epoch-millisecond parsing

Timestamps are epoch milliseconds (UTC) throughout.

Author: TICKWISE Development Team
Version: 1.0.0
"""

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union

from .constants import ONE_MINUTE_MS, PAIR_SEPARATOR
from .exceptions import InvalidDateRangeError


def to_iso(timestamp_ms: int) -> str:
    """Format epoch milliseconds as an ISO-8601 UTC string."""
    moment = datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc)
    return moment.isoformat().replace("+00:00", "Z")


def parse_timestamp(value: Union[int, float, str, datetime]) -> int:
    """Parse epoch milliseconds, an ISO-8601 string or a datetime."""
    if isinstance(value, bool):
        raise InvalidDateRangeError(f"Invalid timestamp: {value!r}")
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, datetime):
        moment = value
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            moment = datetime.fromisoformat(text)
        except ValueError as e:
            raise InvalidDateRangeError(f"Invalid timestamp: {value!r}") from e
    else:
        raise InvalidDateRangeError(f"Invalid timestamp: {value!r}")
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return int(moment.timestamp() * 1000)


# =============================================================================
# TICKS
# =============================================================================


@dataclass(frozen=True)
class Candle:
    """One OHLCV candle. ``start`` is the candle open time."""

    start: int
    open: float
    high: float
    low: float
    close: float
    volume: float = 0.0
    symbol: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class TradeTick:
    """A single public market trade."""

    id: str
    timestamp: int
    price: float
    amount: float
    symbol: Optional[str] = None


@dataclass(frozen=True)
class ClockTick:
    """Time-only tick with no price."""

    timestamp: int


Tick = Union[Candle, TradeTick, ClockTick]


def tick_price(tick: Tick) -> Optional[float]:
    """Reference price of a tick, or None for clock ticks."""
    if isinstance(tick, Candle):
        return tick.close
    if isinstance(tick, TradeTick):
        return tick.price
    return None


def tick_timestamp(tick: Tick) -> int:
    if isinstance(tick, Candle):
        return tick.start
    return tick.timestamp


def tick_close_time(tick: Tick) -> int:
    """Moment the tick is complete: candle close, or the tick timestamp."""
    if isinstance(tick, Candle):
        return tick.start + ONE_MINUTE_MS
    return tick.timestamp


def tick_symbol(tick: Tick) -> Optional[str]:
    return getattr(tick, "symbol", None)


# =============================================================================
# PAIRS & LIMITS
# =============================================================================


def split_pair(symbol: str) -> Tuple[str, str]:
    """Split ``BASE/QUOTE`` into its asset and currency."""
    asset, _, currency = symbol.partition(PAIR_SEPARATOR)
    return asset, currency


@dataclass(frozen=True)
class LimitRange:
    """Inclusive bounds. The limit is only defined once both bounds are set."""

    min: Optional[float] = None
    max: Optional[float] = None

    @property
    def defined(self) -> bool:
        return self.min is not None and self.max is not None


@dataclass(frozen=True)
class MarketLimits:
    """Order limits of one market as loaded by the broker."""

    amount: LimitRange = field(default_factory=LimitRange)
    price: LimitRange = field(default_factory=LimitRange)
    cost: LimitRange = field(default_factory=LimitRange)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# =============================================================================
# PORTFOLIO
# =============================================================================


@dataclass
class Portfolio:
    """Holdings of one pair: ``asset`` units and ``currency`` cash."""

    asset: float = 0.0
    currency: float = 0.0

    def copy(self) -> "Portfolio":
        return Portfolio(asset=self.asset, currency=self.currency)

    def value(self, price: float) -> float:
        """Total worth expressed in currency."""
        return self.asset * price + self.currency

    def is_empty(self) -> bool:
        return self.asset == 0 and self.currency == 0

    def to_dict(self) -> Dict[str, float]:
        return {"asset": self.asset, "currency": self.currency}


@dataclass(frozen=True)
class PortfolioValueChange:
    balance: float
    date: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# =============================================================================
# ADVICE & TRADES
# =============================================================================


class OrderSide(str, Enum):
    BUY = "buy"
    SELL = "sell"


class Recommendation(str, Enum):
    LONG = "long"
    SHORT = "short"

    @property
    def side(self) -> OrderSide:
        return OrderSide.BUY if self is Recommendation.LONG else OrderSide.SELL


@dataclass(frozen=True)
class Advice:
    """
    Strategy advice.

    Without ``trigger`` the advice executes on the current price. With a
    trigger (``{"type": "below", "price": 90}``) the trader parks it in the
    trigger book until the condition holds.
    """

    id: str
    recommendation: Recommendation
    date: int
    trigger: Optional[Dict[str, Any]] = None
    amount: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["recommendation"] = self.recommendation.value
        return data


@dataclass(frozen=True)
class Trade:
    """A fill recorded in the ledger history."""

    id: str
    amount: float
    timestamp: int
    price: float
    fee_rate: float


@dataclass(frozen=True)
class TradeInitiated:
    """Fill request. ``amount`` None lets the ledger size the order."""

    id: str
    advice_id: str
    action: OrderSide
    price: float
    date: int
    portfolio: Portfolio
    balance: float
    amount: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["action"] = self.action.value
        return data


@dataclass(frozen=True)
class TradeCompleted:
    id: str
    advice_id: str
    action: OrderSide
    cost: float
    fee: float
    amount: float
    price: float
    portfolio: Portfolio
    balance: float
    date: int
    fee_percent: float
    effective_price: float

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["action"] = self.action.value
        return data


@dataclass(frozen=True)
class TradeAborted:
    id: str
    advice_id: str
    action: OrderSide
    date: int
    portfolio: Portfolio
    balance: float
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["action"] = self.action.value
        return data


# =============================================================================
# DATE RANGES
# =============================================================================


@dataclass(frozen=True)
class DateRange:
    """Closed interval ``[start, end]`` in epoch milliseconds."""

    start: int
    end: int

    def __post_init__(self):
        if self.start >= self.end:
            raise InvalidDateRangeError(
                f"Date range start ({self.start}) must be before end ({self.end})"
            )

    @classmethod
    def parse(cls, start: Any, end: Any) -> "DateRange":
        return cls(start=parse_timestamp(start), end=parse_timestamp(end))

    def contains(self, timestamp: int) -> bool:
        return self.start <= timestamp <= self.end

    def __str__(self) -> str:
        return f"{to_iso(self.start)} - {to_iso(self.end)}"

    def to_dict(self) -> Dict[str, int]:
        return {"start": self.start, "end": self.end}


# =============================================================================
# EXPORTS
# =============================================================================

__all__ = [
    "to_iso",
    "parse_timestamp",
    "Candle",
    "TradeTick",
    "ClockTick",
    "Tick",
    "tick_price",
    "tick_timestamp",
    "tick_close_time",
    "tick_symbol",
    "split_pair",
    "LimitRange",
    "MarketLimits",
    "Portfolio",
    "PortfolioValueChange",
    "OrderSide",
    "Recommendation",
    "Advice",
    "Trade",
    "TradeInitiated",
    "TradeCompleted",
    "TradeAborted",
    "DateRange",
]
