"""
TICKWISE - Paper Trading Ledger
===============================

Simulated fills against an in-memory portfolio.

Features:
- Fee-adjusted pricing (base, fee, total, effective price)
- Whole-balance buy sizing kept under the fee plus a safety buffer
- Market limit validation (amount, price, cost), oversized amounts
  capped at the market maximum
- Idempotent fill application keyed by trade id
- Append-only trade history

Pricing:
    base  = amount * price
    fee   = base * fee_percent / 100
    total = base + fee   (buy)
    total = base - fee   (sell)

Author: TICKWISE Development Team
Version: 1.0.0
"""

import logging
from dataclasses import dataclass
from decimal import ROUND_DOWN, Decimal
from typing import Callable, Dict, List, Optional, Set

from .constants import AMOUNT_DECIMALS, DEFAULT_FEE_BUFFER
from .exceptions import (
    DuplicateTradeError,
    InsufficientFundsError,
    OrderOutOfRangeError,
    UndefinedLimitsError,
)
from .models import (
    LimitRange,
    MarketLimits,
    OrderSide,
    Portfolio,
    Trade,
    TradeCompleted,
    TradeInitiated,
)

logger = logging.getLogger("TICKWISE_Ledger")


@dataclass(frozen=True)
class OrderPricing:
    base: float
    fee: float
    total: float
    effective_price: float
    fee_percent: float


def compute_order_pricing(
    side: OrderSide, amount: float, price: float, fee_percent: Optional[float] = None
) -> OrderPricing:
    """
    Price an order including fees.

    A missing fee percent prices the order without fees. Negative fee
    percents are treated as zero.
    """
    if price <= 0 or amount <= 0:
        raise ValueError(
            f"Price and amount must be positive (price: {price}, amount: {amount})"
        )

    base = amount * price
    if fee_percent is None:
        logger.warning("No fee percent given, pricing order without fees")
        return OrderPricing(base=base, fee=0.0, total=base, effective_price=price, fee_percent=0.0)

    fee_rate = max(0.0, fee_percent) / 100
    fee = base * fee_rate
    total = base + fee if side is OrderSide.BUY else base - fee
    return OrderPricing(
        base=base,
        fee=fee,
        total=total,
        effective_price=total / amount,
        fee_percent=max(0.0, fee_percent),
    )


def round_down(value: float, decimals: int = AMOUNT_DECIMALS) -> float:
    quantum = Decimal(1).scaleb(-decimals)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_DOWN))


def resolve_order_amount(
    side: OrderSide,
    portfolio: Portfolio,
    price: float,
    fee_percent: float,
    amount: Optional[float] = None,
    buffer: float = DEFAULT_FEE_BUFFER,
) -> float:
    """
    Work out the order amount.

    An explicit amount is used as is. Otherwise a buy spends the currency
    balance sized as ``currency / (price * (1 + fee_rate + buffer))`` so the
    fee-inclusive cost never exceeds the balance, and a sell liquidates the
    whole asset position.
    """
    if amount is not None:
        return round_down(amount)

    if side is OrderSide.SELL:
        return round_down(portfolio.asset)

    fee_rate = max(0.0, fee_percent) / 100
    return round_down(portfolio.currency / (price * (1 + fee_rate + buffer)))


def _check_range(name: str, value: float, limits: LimitRange) -> None:
    if not limits.defined:
        raise UndefinedLimitsError(name, limits.min, limits.max)
    if value < limits.min or value > limits.max:
        raise OrderOutOfRangeError(name, value, limits.min, limits.max)


def cap_amount(amount: float, limits: LimitRange) -> float:
    """
    Fit an order amount into the market amount limits.

    Amounts above the maximum are lowered to it; amounts below the minimum
    cannot be traded.
    """
    if not limits.defined:
        raise UndefinedLimitsError("amount", limits.min, limits.max)
    if amount < limits.min:
        raise OrderOutOfRangeError("amount", amount, limits.min)
    if amount > limits.max:
        logger.info(f"Amount {amount} capped to market maximum {limits.max}")
        return limits.max
    return amount


class PaperLedger:
    """
    Portfolio and trade history of one simulated trader.

    ``limits_provider`` returns the current market limits; it is called on
    every fill so limits loaded after construction are honoured.
    """

    def __init__(
        self,
        portfolio: Portfolio,
        fee_percent: float,
        limits_provider: Callable[[], MarketLimits],
        buffer: float = DEFAULT_FEE_BUFFER,
    ):
        self._portfolio = portfolio.copy()
        self.fee_percent = fee_percent
        self.buffer = buffer
        self._limits_provider = limits_provider
        self._trades: List[Trade] = []
        self._applied: Set[str] = set()

        self._stats = {
            "fills_applied": 0,
            "buys": 0,
            "sells": 0,
            "fees_paid": 0.0,
            "duplicates_rejected": 0,
        }

    @property
    def portfolio(self) -> Portfolio:
        return self._portfolio.copy()

    @property
    def trades(self) -> List[Trade]:
        return list(self._trades)

    def balance(self, price: float) -> float:
        return self._portfolio.value(price)

    def has_applied(self, trade_id: str) -> bool:
        return trade_id in self._applied

    def size_order(self, side: OrderSide, price: float, amount: Optional[float] = None) -> float:
        return resolve_order_amount(
            side, self._portfolio, price, self.fee_percent, amount, self.buffer
        )

    def validate_limits(self, amount: float, price: float) -> float:
        """Check an order against the market limits. Returns the tradable amount."""
        limits = self._limits_provider()
        amount = cap_amount(amount, limits.amount)
        _check_range("price", price, limits.price)
        _check_range("cost", amount * price, limits.cost)
        return amount

    def apply(self, fill: TradeInitiated) -> TradeCompleted:
        """
        Apply a fill to the portfolio.

        Raises:
            DuplicateTradeError: fill id already applied, state untouched
            UndefinedLimitsError: broker limits were never loaded
            OrderOutOfRangeError: amount under the market minimum, or price
                or cost out of market limits
            InsufficientFundsError: portfolio cannot cover the order
        """
        if fill.id in self._applied:
            self._stats["duplicates_rejected"] += 1
            raise DuplicateTradeError(fill.id)

        amount = self.size_order(fill.action, fill.price, fill.amount)
        if amount <= 0:
            raise InsufficientFundsError(
                f"Nothing to {fill.action.value} for trade {fill.id}"
            )

        amount = self.validate_limits(amount, fill.price)
        pricing = compute_order_pricing(fill.action, amount, fill.price, self.fee_percent)

        if fill.action is OrderSide.BUY:
            if pricing.total > self._portfolio.currency:
                raise InsufficientFundsError(
                    f"Buy of {amount} costs {pricing.total}, "
                    f"only {self._portfolio.currency} available"
                )
            self._portfolio.currency -= pricing.total
            self._portfolio.asset += amount
            self._stats["buys"] += 1
        else:
            if amount > self._portfolio.asset:
                raise InsufficientFundsError(
                    f"Sell of {amount} exceeds held asset {self._portfolio.asset}"
                )
            self._portfolio.asset -= amount
            self._portfolio.currency += pricing.total
            self._stats["sells"] += 1

        self._applied.add(fill.id)
        self._trades.append(
            Trade(
                id=fill.id,
                amount=amount,
                timestamp=fill.date,
                price=fill.price,
                fee_rate=pricing.fee_percent / 100,
            )
        )
        self._stats["fills_applied"] += 1
        self._stats["fees_paid"] += pricing.fee

        logger.info(
            f"{fill.action.value.upper()} {amount} @ {fill.price} "
            f"(total {pricing.total:.8f}, fee {pricing.fee:.8f})"
        )

        return TradeCompleted(
            id=fill.id,
            advice_id=fill.advice_id,
            action=fill.action,
            cost=pricing.total,
            fee=pricing.fee,
            amount=amount,
            price=fill.price,
            portfolio=self._portfolio.copy(),
            balance=self._portfolio.value(fill.price),
            date=fill.date,
            fee_percent=pricing.fee_percent,
            effective_price=pricing.effective_price,
        )

    def get_stats(self) -> Dict[str, float]:
        return dict(self._stats)


__all__ = [
    "OrderPricing",
    "compute_order_pricing",
    "round_down",
    "resolve_order_amount",
    "cap_amount",
    "PaperLedger",
]
