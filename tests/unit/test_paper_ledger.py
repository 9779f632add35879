"""
Tests for TICKWISE Paper Trading Ledger
=======================================

Tests pricing, sizing, limits and fill application.
"""

import math

import pytest

from shared.tickwise_core.exceptions import (
    DuplicateTradeError,
    InsufficientFundsError,
    OrderOutOfRangeError,
    UndefinedLimitsError,
)
from shared.tickwise_core.models import (
    LimitRange,
    MarketLimits,
    OrderSide,
    Portfolio,
    TradeInitiated,
)
from shared.tickwise_core.paper_ledger import (
    PaperLedger,
    compute_order_pricing,
    resolve_order_amount,
    round_down,
)


def fill(trade_id="trade-1", side=OrderSide.BUY, price=100.0, amount=None, date=60_000):
    return TradeInitiated(
        id=trade_id,
        advice_id="advice-1",
        action=side,
        price=price,
        date=date,
        portfolio=Portfolio(),
        balance=0.0,
        amount=amount,
    )


@pytest.fixture
def ledger(market_limits):
    """Ledger with 1000 currency and a 0.25% fee."""
    return PaperLedger(
        Portfolio(asset=0.0, currency=1000.0),
        fee_percent=0.25,
        limits_provider=lambda: market_limits,
    )


class TestPricing:
    """Tests for fee-adjusted pricing."""

    def test_buy_pricing(self):
        """Buy total should include the fee."""
        pricing = compute_order_pricing(OrderSide.BUY, 2, 100, 0.25)
        assert pricing.base == 200
        assert pricing.fee == pytest.approx(0.5)
        assert pricing.total == pytest.approx(200.5)
        assert pricing.effective_price == pytest.approx(100.25)

    def test_sell_pricing(self):
        """Sell total should deduct the fee."""
        pricing = compute_order_pricing(OrderSide.SELL, 2, 100, 0.25)
        assert pricing.total == pytest.approx(199.5)
        assert pricing.effective_price == pytest.approx(99.75)

    def test_missing_fee(self):
        """No fee percent should price without fees."""
        pricing = compute_order_pricing(OrderSide.BUY, 1, 100)
        assert pricing.fee == 0
        assert pricing.total == 100

    def test_non_positive_inputs(self):
        """Should reject non-positive prices or amounts."""
        with pytest.raises(ValueError):
            compute_order_pricing(OrderSide.BUY, 1, 0, 0.1)
        with pytest.raises(ValueError):
            compute_order_pricing(OrderSide.BUY, -1, 10, 0.1)


class TestSizing:
    """Tests for order sizing."""

    def test_round_down(self):
        """Should truncate to eight decimals."""
        assert round_down(1.123456789) == 1.12345678
        assert round_down(0.999999999) == 0.99999999

    def test_buy_whole_balance(self):
        """Should size buys under the fee plus buffer."""
        amount = resolve_order_amount(OrderSide.BUY, Portfolio(currency=1000), 100, 0.25)
        assert amount == round_down(1000 / (100 * (1 + 0.0025 + 0.05)))
        assert amount * 100 * 1.0025 < 1000

    def test_sell_whole_asset(self):
        """Should liquidate the whole position."""
        assert resolve_order_amount(OrderSide.SELL, Portfolio(asset=3.5), 100, 0.25) == 3.5

    def test_explicit_amount(self):
        """Explicit amounts should win."""
        assert resolve_order_amount(OrderSide.BUY, Portfolio(currency=1000), 100, 0.25, 1.5) == 1.5


class TestApply:
    """Tests for fill application."""

    def test_buy_updates_portfolio(self, ledger):
        """Buy should move currency into asset."""
        completed = ledger.apply(fill())

        expected_amount = round_down(1000 / (100 * 1.0525))
        assert completed.amount == expected_amount
        assert completed.cost == pytest.approx(expected_amount * 100 * 1.0025)
        assert completed.fee == pytest.approx(expected_amount * 100 * 0.0025)
        assert completed.effective_price == pytest.approx(100.25)
        assert ledger.portfolio.asset == expected_amount
        assert ledger.portfolio.currency == pytest.approx(1000 - completed.cost)
        assert completed.balance == pytest.approx(ledger.balance(100))

    def test_sell_after_buy(self, ledger):
        """Sell should move asset back into currency."""
        bought = ledger.apply(fill())
        sold = ledger.apply(fill("trade-2", OrderSide.SELL, price=110.0))

        assert sold.amount == bought.amount
        assert ledger.portfolio.asset == 0
        assert ledger.portfolio.currency == pytest.approx(
            1000 - bought.cost + bought.amount * 110 * (1 - 0.0025)
        )
        assert len(ledger.trades) == 2

    def test_balance_conserved_minus_fees(self, ledger):
        """Balance should only lose the fees at a constant price."""
        first = ledger.apply(fill())
        second = ledger.apply(fill("trade-2", OrderSide.SELL))
        assert ledger.balance(100) == pytest.approx(1000 - first.fee - second.fee)

    def test_duplicate_rejected(self, ledger):
        """Applying the same fill twice should leave state untouched."""
        ledger.apply(fill())
        before = ledger.portfolio

        with pytest.raises(DuplicateTradeError):
            ledger.apply(fill())

        assert ledger.portfolio == before
        assert ledger.has_applied("trade-1")
        assert ledger.get_stats()["duplicates_rejected"] == 1

    def test_nothing_to_sell(self, ledger):
        """Selling without asset should fail."""
        with pytest.raises(InsufficientFundsError):
            ledger.apply(fill(side=OrderSide.SELL))

    def test_explicit_amount_over_balance(self, ledger):
        """Buying more than the balance covers should fail."""
        with pytest.raises(InsufficientFundsError):
            ledger.apply(fill(amount=20))
        assert ledger.portfolio.currency == 1000

    def test_amount_below_minimum(self, market_limits):
        """Should reject amounts under the market minimum."""
        ledger = PaperLedger(
            Portfolio(currency=1000),
            fee_percent=0.25,
            limits_provider=lambda: MarketLimits(
                amount=LimitRange(min=50, max=1000),
                price=market_limits.price,
                cost=market_limits.cost,
            ),
        )
        with pytest.raises(OrderOutOfRangeError) as exc_info:
            ledger.apply(fill())
        assert exc_info.value.property == "amount"
        assert "too low" in exc_info.value.message

    def test_amount_capped_at_maximum(self, market_limits):
        """Amounts above the market maximum should fill at the maximum."""
        ledger = PaperLedger(
            Portfolio(currency=1000),
            fee_percent=0.25,
            limits_provider=lambda: MarketLimits(
                amount=LimitRange(min=0.001, max=1.0),
                price=market_limits.price,
                cost=market_limits.cost,
            ),
        )

        completed = ledger.apply(fill(amount=5.0))

        assert completed.amount == 1.0
        assert ledger.portfolio.asset == 1.0
        assert completed.cost == pytest.approx(100 * 1.0025)

    def test_half_defined_limits(self, market_limits):
        """A limit with only one bound should count as undefined."""
        ledger = PaperLedger(
            Portfolio(currency=1000),
            fee_percent=0.25,
            limits_provider=lambda: MarketLimits(
                amount=LimitRange(min=0.001),
                price=market_limits.price,
                cost=market_limits.cost,
            ),
        )
        with pytest.raises(UndefinedLimitsError):
            ledger.apply(fill())
        assert ledger.portfolio.currency == 1000
        assert not ledger.has_applied("trade-1")

    def test_undefined_limits(self):
        """Should refuse to trade before limits are loaded."""
        ledger = PaperLedger(Portfolio(currency=1000), 0.25, limits_provider=MarketLimits)
        with pytest.raises(UndefinedLimitsError) as exc_info:
            ledger.apply(fill())
        assert exc_info.value.kind == "broker_limits_undefined"
        assert not ledger.has_applied("trade-1")

    def test_trade_history(self, ledger):
        """Should record fee rate as a fraction."""
        ledger.apply(fill(date=123))
        trade = ledger.trades[0]
        assert trade.timestamp == 123
        assert math.isclose(trade.fee_rate, 0.0025)
