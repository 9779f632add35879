"""
Tests for TICKWISE Performance Analyzer
=======================================

Tests roundtrip tracking and the final performance report.
"""

import math

import pytest

from tickwise.core.orchestrator import Orchestrator
from tickwise.plugins import default_registry
from tickwise.plugins.analyzers import PerformanceAnalyzer
from tickwise.plugins.analyzers.performance_analyzer import downside, sharpe_ratio


def pipeline(broker, actions, **analyzer_settings):
    return Orchestrator(
        mode="backtest",
        plugin_settings=[
            {"name": "indicators"},
            {"name": "trading_advisor", "strategy": "scripted", "params": {"actions": actions}},
            {"name": "paper_trader", "pair": "BTC/USD"},
            {"name": "performance_analyzer", **analyzer_settings},
        ],
        registry=default_registry(),
        services={"broker": broker},
    )


class TestRatios:
    """Tests for the report ratios."""

    def test_sharpe(self):
        """Should divide excess yearly return by the sample deviation."""
        expected = (11 - 1) / math.sqrt(50)
        assert sharpe_ratio([10.0, 20.0], 11.0, 1.0) == pytest.approx(expected)

    def test_sharpe_needs_two_roundtrips(self):
        """A single roundtrip has no spread."""
        assert sharpe_ratio([10.0], 11.0, 1.0) == 0.0

    def test_sharpe_flat_profits(self):
        """Identical profits have no spread either."""
        assert sharpe_ratio([5.0, 5.0], 11.0, 1.0) == 0.0

    def test_sharpe_without_timespan(self):
        """No yearly profit means no ratio."""
        assert sharpe_ratio([10.0, 20.0], None, 1.0) == 0.0

    def test_downside(self):
        """Should be the negative RMS of the losses only."""
        assert downside([5.0, -3.0, -4.0]) == pytest.approx(-math.sqrt(12.5))

    def test_downside_without_losses(self):
        """No losing roundtrips means no downside."""
        assert downside([1.0, 2.0]) == 0.0
        assert downside([]) == 0.0


class TestReport:
    """Tests for the performance report of a run."""

    @pytest.mark.asyncio
    async def test_winning_roundtrip(self, broker, candle_factory):
        """Buy at 100 and sell at 120 should report one winning roundtrip."""
        orchestrator = pipeline(broker, [
            {"at": 0, "recommendation": "long"},
            {"at": 2, "recommendation": "short"},
        ])

        outcome = await orchestrator.run(candle_factory([100, 110, 120]))

        report = outcome.reports["performance_analyzer"]
        assert report["trades"] == 2
        assert report["roundtrips"] == 1
        assert report["start_balance"] == 1000
        assert report["profit"] > 0
        assert report["market"] == pytest.approx(20.0)
        assert report["alpha"] == pytest.approx(report["relative_profit"] - 20.0)
        assert report["win_ratio"] == 1.0
        assert report["sharpe"] == 0.0
        assert report["downside"] == 0.0
        assert report["exposure"] == pytest.approx(200 / 3)
        assert report["timespan"] == 180_000
        assert report["portfolio"]["asset"] == 0

    @pytest.mark.asyncio
    async def test_roundtrip_event(self, broker, candle_factory):
        """Closing a position should publish the roundtrip."""
        orchestrator = pipeline(broker, [
            {"at": 0, "recommendation": "long"},
            {"at": 1, "recommendation": "short"},
        ])

        await orchestrator.run(candle_factory([100, 90, 95]))

        roundtrips = [e.payload for e in orchestrator.event_bus.get_history("roundtripCompleted")]
        assert len(roundtrips) == 1
        roundtrip = roundtrips[0]
        assert roundtrip["entry_price"] == 100.0
        assert roundtrip["exit_price"] == 90.0
        assert roundtrip["profit"] < 0
        assert roundtrip["pnl"] < 0
        assert roundtrip["duration"] == 60_000

    @pytest.mark.asyncio
    async def test_open_position_counts_as_exposure(self, broker, candle_factory):
        """A position still open at the end should be exposed until the end."""
        orchestrator = pipeline(broker, [{"at": 0, "recommendation": "long"}])

        outcome = await orchestrator.run(candle_factory([100, 100]))

        report = outcome.reports["performance_analyzer"]
        assert report["roundtrips"] == 0
        assert report["win_ratio"] is None
        assert report["exposure"] == pytest.approx(50.0)

    @pytest.mark.asyncio
    async def test_no_trades(self, broker, candle_factory):
        """Without trades the profit is zero and alpha is minus the market."""
        outcome = await pipeline(broker, []).run(candle_factory([100, 105]))

        report = outcome.reports["performance_analyzer"]
        assert report["trades"] == 0
        assert report["profit"] == 0
        assert report["exposure"] == 0
        assert report["alpha"] == pytest.approx(-5.0)

    def test_no_data_no_report(self):
        """Should produce no report without market data."""
        assert PerformanceAnalyzer.configure().calculate_report() is None
