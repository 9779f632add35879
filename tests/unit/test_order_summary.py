"""
Tests for TICKWISE Order Summary
================================
"""

import math

from shared.tickwise_core.models import Trade
from shared.tickwise_core.order_summary import (
    EMPTY_ORDER_SUMMARY,
    OrderSummary,
    summarize_trades,
)


class TestOrderSummary:
    """Tests for order summaries."""

    def test_empty_trades(self):
        """No trades should give the empty sentinel."""
        summary = summarize_trades([])
        assert summary is EMPTY_ORDER_SUMMARY
        assert summary.is_empty
        assert math.isnan(summary.price)

    def test_nan_sentinel_equality(self):
        """NaN fields should compare equal."""
        assert OrderSummary() == EMPTY_ORDER_SUMMARY
        assert hash(OrderSummary()) == hash(EMPTY_ORDER_SUMMARY)

    def test_weighted_summary(self):
        """Should weight price and fee by amount."""
        summary = summarize_trades([
            Trade(id="1", amount=1, timestamp=10, price=100, fee_rate=0.001),
            Trade(id="2", amount=3, timestamp=20, price=200, fee_rate=0.002),
        ])
        assert summary.amount == 4
        assert summary.price == 175
        assert math.isclose(summary.fee_percent, 0.175)
        assert summary.order_execution_date == 20
        assert not summary.is_empty

    def test_round_trip(self):
        """Should survive to_dict / from_dict."""
        summary = OrderSummary(amount=1.5, price=10.0, fee_percent=0.1, order_execution_date=99)
        assert OrderSummary.from_dict(summary.to_dict()) == summary
        assert OrderSummary.from_dict(EMPTY_ORDER_SUMMARY.to_dict()) == EMPTY_ORDER_SUMMARY
