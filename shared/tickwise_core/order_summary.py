"""
TICKWISE - Order Summary
========================

Aggregates the fills of one order into a single summary.

An order that never traded is represented by ``EMPTY_ORDER_SUMMARY``,
whose numeric fields are all NaN. NaN fields compare equal to each other
so an unset summary still equals the sentinel, and ``is_empty`` gives an
explicit presence check.

Author: TICKWISE Development Team
Version: 1.0.0
"""

import math
from dataclasses import dataclass
from typing import Any, Dict, Sequence

from .models import Trade

NAN = float("nan")


def _same(a: float, b: float) -> bool:
    if math.isnan(a) and math.isnan(b):
        return True
    return a == b


@dataclass(frozen=True, eq=False)
class OrderSummary:
    amount: float = NAN
    price: float = NAN
    fee_percent: float = NAN
    order_execution_date: float = NAN

    @property
    def is_empty(self) -> bool:
        return math.isnan(self.amount)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, OrderSummary):
            return NotImplemented
        return (
            _same(self.amount, other.amount)
            and _same(self.price, other.price)
            and _same(self.fee_percent, other.fee_percent)
            and _same(self.order_execution_date, other.order_execution_date)
        )

    def __hash__(self) -> int:
        if self.is_empty:
            return hash("empty-order-summary")
        return hash(
            (self.amount, self.price, self.fee_percent, self.order_execution_date)
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "amount": self.amount,
            "price": self.price,
            "fee_percent": self.fee_percent,
            "order_execution_date": self.order_execution_date,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OrderSummary":
        return cls(
            amount=float(data.get("amount", NAN)),
            price=float(data.get("price", NAN)),
            fee_percent=float(data.get("fee_percent", NAN)),
            order_execution_date=float(data.get("order_execution_date", NAN)),
        )


EMPTY_ORDER_SUMMARY = OrderSummary()


def summarize_trades(trades: Sequence[Trade]) -> OrderSummary:
    """
    Summarize fills: total amount, amount-weighted price and fee.

    ``fee_percent`` is expressed in percent while ``Trade.fee_rate`` is a
    fraction. The execution date is the timestamp of the last fill.
    """
    if not trades:
        return EMPTY_ORDER_SUMMARY

    amount = sum(t.amount for t in trades)
    if amount == 0:
        return EMPTY_ORDER_SUMMARY

    price = sum(t.price * t.amount for t in trades) / amount
    fee_rate = sum(t.fee_rate * t.amount for t in trades) / amount
    return OrderSummary(
        amount=amount,
        price=price,
        fee_percent=fee_rate * 100,
        order_execution_date=trades[-1].timestamp,
    )


__all__ = [
    "OrderSummary",
    "EMPTY_ORDER_SUMMARY",
    "summarize_trades",
]
