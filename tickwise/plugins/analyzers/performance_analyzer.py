# TICKWISE_FEAT: performance-analyzer-001
"""
TICKWISE - Performance Analyzer Plugin
======================================

Tracks the simulated portfolio and reports how the run performed.

Features:
- Roundtrip tracking (entry, exit, pnl, profit, max adverse excursion)
- Market exposure over the run
- Final report: profit, relative and yearly profit, market move, alpha,
  sharpe ratio, downside and win ratio

Author: TICKWISE Development Team
Version: 1.0.0
"""

from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional

import numpy as np
from pydantic import BaseModel

from shared.tickwise_core.constants import (
    DEFAULT_RISK_FREE_RETURN,
    ONE_YEAR_MS,
    PERFORMANCE_REPORT_EVENT,
    PORTFOLIO_CHANGE_EVENT,
    PORTFOLIO_VALUE_CHANGE_EVENT,
    ROUNDTRIP_COMPLETED_EVENT,
    TRADE_COMPLETED_EVENT,
)
from shared.tickwise_core.models import (
    OrderSide,
    Portfolio,
    PortfolioValueChange,
    Tick,
    TradeCompleted,
    tick_close_time,
    tick_price,
    tick_timestamp,
    to_iso,
)
from tickwise.core.plugin_base import Plugin, PluginCategory, PluginDescriptor


class PerformanceAnalyzerSettings(BaseModel):
    # Yearly percent used as the sharpe baseline
    risk_free_return: float = DEFAULT_RISK_FREE_RETURN


@dataclass
class Roundtrip:
    id: int
    entry_at: int
    entry_price: float
    entry_balance: float
    exit_at: int
    exit_price: float
    exit_balance: float
    pnl: float
    profit: float
    duration: int
    max_adverse_excursion: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class _OpenPosition:
    entry_at: int
    entry_price: float
    entry_balance: float
    lowest_balance: float


def sharpe_ratio(profits: List[float], yearly_profit: Optional[float], risk_free_return: float) -> float:
    """Excess yearly return over the spread of roundtrip profits."""
    if yearly_profit is None or len(profits) < 2:
        return 0.0
    deviation = float(np.std(profits, ddof=1))
    if deviation == 0:
        return 0.0
    return (yearly_profit - risk_free_return) / deviation


def downside(profits: List[float]) -> float:
    """Negative root mean square of the losing roundtrips."""
    losses = np.array([p for p in profits if p < 0], dtype=float)
    if losses.size == 0:
        return 0.0
    return -float(np.sqrt(np.mean(losses ** 2)))


class PerformanceAnalyzer(Plugin):
    """Portfolio performance tracker."""

    descriptor = PluginDescriptor(
        name="performance_analyzer",
        category=PluginCategory.ANALYZER,
        events_emitted={ROUNDTRIP_COMPLETED_EVENT, PERFORMANCE_REPORT_EVENT},
        events_handled={
            PORTFOLIO_CHANGE_EVENT,
            PORTFOLIO_VALUE_CHANGE_EVENT,
            TRADE_COMPLETED_EVENT,
        },
        dependencies={"paper_trader"},
        config_schema=PerformanceAnalyzerSettings,
    )

    def __init__(self, settings: Optional[PerformanceAnalyzerSettings] = None):
        super().__init__(settings or PerformanceAnalyzerSettings())
        self.roundtrips: List[Roundtrip] = []
        self.trades = 0
        self._position: Optional[_OpenPosition] = None
        self._start_portfolio: Optional[Portfolio] = None
        self._portfolio: Optional[Portfolio] = None
        self._start_balance: Optional[float] = None
        self._balance: Optional[float] = None
        self._start_price: Optional[float] = None
        self._end_price: Optional[float] = None
        self._start_time: Optional[int] = None
        self._end_time: Optional[int] = None
        self._exposure = 0

    # -------------------------------------------------------------------------
    # Tracking
    # -------------------------------------------------------------------------

    async def on_tick(self, tick: Tick) -> None:
        price = tick_price(tick)
        if price is None:
            return
        if self._start_price is None:
            self._start_price = price
            self._start_time = tick_timestamp(tick)
        self._end_price = price
        self._end_time = tick_close_time(tick)

    async def on_portfolio_change(self, portfolio: Portfolio) -> None:
        if self._start_portfolio is None:
            self._start_portfolio = portfolio.copy()
        self._portfolio = portfolio.copy()

    async def on_portfolio_value_change(self, change: PortfolioValueChange) -> None:
        if self._start_balance is None:
            self._start_balance = change.balance
        self._balance = change.balance
        if self._position is not None:
            self._position.lowest_balance = min(self._position.lowest_balance, change.balance)

    async def on_trade_completed(self, trade: TradeCompleted) -> None:
        self.trades += 1
        self._balance = trade.balance

        if trade.action is OrderSide.BUY:
            if self._position is None:
                self._position = _OpenPosition(
                    entry_at=trade.date,
                    entry_price=trade.price,
                    entry_balance=trade.balance,
                    lowest_balance=trade.balance,
                )
            return

        if self._position is None:
            self._logger.debug(f"Sell {trade.id} without an open position, no roundtrip")
            return
        self._close_roundtrip(trade)

    def _close_roundtrip(self, trade: TradeCompleted) -> None:
        position, self._position = self._position, None
        lowest = min(position.lowest_balance, trade.balance)
        excursion = 0.0
        if position.entry_balance > 0:
            excursion = max(0.0, (position.entry_balance - lowest) / position.entry_balance * 100)

        roundtrip = Roundtrip(
            id=len(self.roundtrips),
            entry_at=position.entry_at,
            entry_price=position.entry_price,
            entry_balance=position.entry_balance,
            exit_at=trade.date,
            exit_price=trade.price,
            exit_balance=trade.balance,
            pnl=trade.balance - position.entry_balance,
            profit=(trade.balance / position.entry_balance - 1) * 100 if position.entry_balance else 0.0,
            duration=trade.date - position.entry_at,
            max_adverse_excursion=excursion,
        )
        self.roundtrips.append(roundtrip)
        self._exposure += roundtrip.duration
        self._logger.info(
            f"Roundtrip {roundtrip.id}: {roundtrip.profit:.2f}% "
            f"({to_iso(roundtrip.entry_at)} -> {to_iso(roundtrip.exit_at)})"
        )
        self._emit(ROUNDTRIP_COMPLETED_EVENT, roundtrip.to_dict())

    # -------------------------------------------------------------------------
    # Report
    # -------------------------------------------------------------------------

    def calculate_report(self) -> Optional[Dict[str, Any]]:
        if self._start_balance is None or self._start_time is None:
            return None

        balance = self._balance if self._balance is not None else self._start_balance
        timespan = max(0, self._end_time - self._start_time)
        exposure = self._exposure
        if self._position is not None:
            exposure += max(0, self._end_time - self._position.entry_at)

        profit = balance - self._start_balance
        relative_profit = profit / self._start_balance * 100 if self._start_balance else 0.0
        market = (self._end_price / self._start_price - 1) * 100

        years = timespan / ONE_YEAR_MS
        yearly_profit = profit / years if years > 0 else None
        relative_yearly_profit = relative_profit / years if years > 0 else None

        profits = [r.profit for r in self.roundtrips]
        wins = sum(1 for p in profits if p > 0)

        return {
            "start_time": to_iso(self._start_time),
            "end_time": to_iso(self._end_time),
            "timespan": timespan,
            "start_price": self._start_price,
            "end_price": self._end_price,
            "start_balance": self._start_balance,
            "balance": balance,
            "start_portfolio": self._start_portfolio.to_dict() if self._start_portfolio else None,
            "portfolio": self._portfolio.to_dict() if self._portfolio else None,
            "profit": profit,
            "relative_profit": relative_profit,
            "yearly_profit": yearly_profit,
            "relative_yearly_profit": relative_yearly_profit,
            "market": market,
            "alpha": relative_profit - market,
            "exposure": exposure / timespan * 100 if timespan else 0.0,
            "trades": self.trades,
            "roundtrips": len(self.roundtrips),
            "sharpe": sharpe_ratio(
                profits, relative_yearly_profit, self.settings.risk_free_return
            ),
            "downside": downside(profits),
            "win_ratio": wins / len(profits) if profits else None,
        }

    async def on_finalize(self) -> Optional[Dict[str, Any]]:
        report = self.calculate_report()
        if report is None:
            self._logger.warning("No market data seen, no performance report")
            return None

        self._logger.info(
            f"Profit {report['relative_profit']:.2f}% vs market {report['market']:.2f}% "
            f"over {report['roundtrips']} roundtrips"
        )
        self._emit(PERFORMANCE_REPORT_EVENT, report)
        return report


__all__ = [
    "PerformanceAnalyzerSettings",
    "Roundtrip",
    "sharpe_ratio",
    "downside",
    "PerformanceAnalyzer",
]
