# TICKWISE_FEAT: paper-trader-001
"""
TICKWISE - Paper Trader Plugin
==============================

Simulated trader for backtests and paper trading.

Features:
- Immediate advice filled at the current price
- Conditional advice parked as triggers and filled when they fire
- Expired triggers aborted on clock ticks even when no price arrives
- Fee-adjusted fills through the paper ledger, checked against the
  broker's market limits
- Portfolio and balance events for downstream analyzers
- Early stop once a roundtrip leaves the portfolio completely empty

Advice received while other plugins handle a tick is queued and
processed when this plugin handles the same tick, so every fill uses the
price of the tick that produced the advice.

Author: TICKWISE Development Team
Version: 1.0.0
"""

from typing import Any, Dict, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, Field, field_validator

from shared.tickwise_core.constants import (
    DEFAULT_FEE_MAKER,
    DEFAULT_FEE_TAKER,
    MODE_BACKTEST,
    MODE_PAPER,
    PORTFOLIO_CHANGE_EVENT,
    PORTFOLIO_VALUE_CHANGE_EVENT,
    ROUNDTRIP_COMPLETED_EVENT,
    SERVICE_BROKER,
    STRATEGY_ADVICE_EVENT,
    STRATEGY_CANCEL_ADVICE_EVENT,
    TRADE_ABORTED_EVENT,
    TRADE_COMPLETED_EVENT,
    TRADE_INITIATED_EVENT,
    TRIGGER_ABORTED_EVENT,
    TRIGGER_CREATED_EVENT,
    TRIGGER_FIRED_EVENT,
    ABORT_REASON_CANCELED,
)
from shared.tickwise_core.exceptions import (
    InvalidConfigError,
    OrderError,
    StopPipelineError,
    StrategyError,
)
from shared.tickwise_core.models import (
    Advice,
    ClockTick,
    OrderSide,
    Portfolio,
    PortfolioValueChange,
    Tick,
    TradeAborted,
    TradeCompleted,
    TradeInitiated,
    tick_close_time,
    tick_price,
    tick_symbol,
)
from shared.tickwise_core.order_summary import summarize_trades
from shared.tickwise_core.paper_ledger import PaperLedger
from shared.tickwise_core.trigger_machine import (
    TriggerBook,
    TriggerCondition,
    TriggerState,
)
from tickwise.core.config_manager import validate_pair_symbol
from tickwise.core.plugin_base import Plugin, PluginCategory, PluginDescriptor


class SimulationBalance(BaseModel):
    asset: float = Field(default=0.0, ge=0)
    currency: float = Field(default=1000.0, ge=0)


class PaperTraderSettings(BaseModel):
    pair: str
    simulation_balance: SimulationBalance = Field(default_factory=SimulationBalance)
    fee_maker: float = DEFAULT_FEE_MAKER
    fee_taker: float = DEFAULT_FEE_TAKER
    fee_using: Literal["maker", "taker"] = "maker"

    @field_validator("pair")
    @classmethod
    def _check_pair(cls, value: str) -> str:
        try:
            return validate_pair_symbol(value)
        except InvalidConfigError as e:
            raise ValueError(e.message) from e

    @property
    def fee_percent(self) -> float:
        return self.fee_maker if self.fee_using == "maker" else self.fee_taker


class PaperTrader(Plugin):
    """
    Paper Trading Trader.

    Owns the portfolio (through the ledger) and the open triggers. Other
    plugins only see them through events.
    """

    descriptor = PluginDescriptor(
        name="paper_trader",
        category=PluginCategory.TRADER,
        events_emitted={
            PORTFOLIO_CHANGE_EVENT,
            PORTFOLIO_VALUE_CHANGE_EVENT,
            TRADE_INITIATED_EVENT,
            TRADE_COMPLETED_EVENT,
            TRADE_ABORTED_EVENT,
            TRIGGER_CREATED_EVENT,
            TRIGGER_FIRED_EVENT,
            TRIGGER_ABORTED_EVENT,
        },
        events_handled={
            STRATEGY_ADVICE_EVENT,
            STRATEGY_CANCEL_ADVICE_EVENT,
            ROUNDTRIP_COMPLETED_EVENT,
        },
        dependencies={"trading_advisor"},
        inject={SERVICE_BROKER},
        modes={MODE_BACKTEST, MODE_PAPER},
        config_schema=PaperTraderSettings,
    )

    def __init__(self, settings: PaperTraderSettings):
        super().__init__(settings)
        self.ledger: Optional[PaperLedger] = None
        self.triggers = TriggerBook()
        self._queued: List[Tuple[str, Union[Advice, Dict[str, Any]]]] = []
        self._price: Optional[float] = None
        self._date: int = 0
        self._tick_index = -1
        self._trade_count = 0
        self._announced = False
        self._stats.update({
            "trades_completed": 0,
            "trades_aborted": 0,
            "triggers_fired": 0,
            "triggers_aborted": 0,
        })

    async def on_init(self) -> None:
        broker = self.get_service(SERVICE_BROKER)
        pair = self.settings.pair
        balance = self.settings.simulation_balance
        self.ledger = PaperLedger(
            Portfolio(asset=balance.asset, currency=balance.currency),
            fee_percent=self.settings.fee_percent,
            limits_provider=lambda: broker.get_market_limits(pair),
        )
        self._logger.info(
            f"Paper trader on {pair}: {balance.asset} asset, {balance.currency} currency, "
            f"fee {self.settings.fee_percent}%"
        )

    @property
    def portfolio(self) -> Portfolio:
        return self.ledger.portfolio

    # -------------------------------------------------------------------------
    # Handlers
    # -------------------------------------------------------------------------

    async def on_strategy_advice(self, advice: Advice) -> None:
        self._queued.append(("advice", advice))

    async def on_strategy_cancel_advice(self, cancel: Dict[str, Any]) -> None:
        self._queued.append(("cancel", cancel))

    async def on_roundtrip_completed(self, roundtrip: Dict[str, Any]) -> None:
        if self.ledger.portfolio.is_empty():
            raise StopPipelineError("Portfolio is completely empty")

    # -------------------------------------------------------------------------
    # Tick processing
    # -------------------------------------------------------------------------

    async def on_tick(self, tick: Tick) -> None:
        if isinstance(tick, ClockTick):
            self._tick_index += 1
            self._abort_transitions(self.triggers.expire(tick.timestamp, self._tick_index))
            return

        price = tick_price(tick)
        symbol = tick_symbol(tick)
        if price is None or (symbol and symbol != self.settings.pair):
            return

        self._tick_index += 1
        self._price = price
        self._date = tick_close_time(tick)

        if not self._announced:
            self._announced = True
            self._emit(PORTFOLIO_CHANGE_EVENT, self.ledger.portfolio)
            self._emit_value()

        filled = False
        pending, self._queued = self._queued, []
        for action, payload in pending:
            if action == "cancel":
                self._cancel_advice(payload["advice_id"])
            else:
                filled = self._handle_advice(payload) or filled

        for transition in self.triggers.evaluate(price, self._date, self._tick_index):
            trigger = transition.trigger
            if transition.state is TriggerState.FIRED:
                self._stats["triggers_fired"] += 1
                self._emit(TRIGGER_FIRED_EVENT, trigger.to_dict())
                filled = self._execute(trigger.advice_id, trigger.side, price, trigger.amount) or filled
            else:
                self._stats["triggers_aborted"] += 1
                self._emit(TRIGGER_ABORTED_EVENT, trigger.to_dict())

        if not filled and self.ledger.portfolio.asset > 0:
            self._emit_value()

    def _abort_transitions(self, transitions) -> None:
        for transition in transitions:
            self._stats["triggers_aborted"] += 1
            self._emit(TRIGGER_ABORTED_EVENT, transition.trigger.to_dict())

    def _handle_advice(self, advice: Advice) -> bool:
        side = advice.recommendation.side
        if not advice.trigger:
            return self._execute(advice.id, side, self._price, advice.amount)

        try:
            condition = TriggerCondition.from_dict(advice.trigger)
        except (KeyError, TypeError, ValueError) as e:
            raise StrategyError(f"Invalid trigger in advice {advice.id}: {advice.trigger}") from e

        trigger = self.triggers.create(
            advice_id=advice.id,
            side=side,
            condition=condition,
            created_at=self._date,
            tick_index=self._tick_index,
            amount=advice.amount,
            expires_at=advice.trigger.get("expires_at"),
        )
        self._emit(TRIGGER_CREATED_EVENT, trigger.to_dict())
        return False

    def _cancel_advice(self, advice_id: str) -> None:
        self._abort_transitions(
            self.triggers.abort_for_advice(advice_id, ABORT_REASON_CANCELED, self._date)
        )

    def _execute(
        self, advice_id: str, side: OrderSide, price: float, amount: Optional[float]
    ) -> bool:
        """Fill one order. Returns True when the portfolio changed."""
        self._trade_count += 1
        initiated = TradeInitiated(
            id=f"trade-{self._trade_count}",
            advice_id=advice_id,
            action=side,
            price=price,
            date=self._date,
            portfolio=self.ledger.portfolio,
            balance=self.ledger.balance(price),
            amount=amount,
        )
        self._emit(TRADE_INITIATED_EVENT, initiated)

        try:
            completed = self.ledger.apply(initiated)
        except OrderError as e:
            self._stats["trades_aborted"] += 1
            self._logger.warning(f"Trade {initiated.id} aborted: {e.message}")
            self._emit(
                TRADE_ABORTED_EVENT,
                TradeAborted(
                    id=initiated.id,
                    advice_id=advice_id,
                    action=side,
                    date=self._date,
                    portfolio=initiated.portfolio,
                    balance=initiated.balance,
                    reason=e.message,
                ),
            )
            return False

        self._stats["trades_completed"] += 1
        self._publish_fill(completed)
        return True

    def _publish_fill(self, completed: TradeCompleted) -> None:
        self._emit(PORTFOLIO_CHANGE_EVENT, completed.portfolio)
        self._emit(
            PORTFOLIO_VALUE_CHANGE_EVENT,
            PortfolioValueChange(balance=completed.balance, date=completed.date),
        )
        self._emit(TRADE_COMPLETED_EVENT, completed)

    def _emit_value(self) -> None:
        self._emit(
            PORTFOLIO_VALUE_CHANGE_EVENT,
            PortfolioValueChange(balance=self.ledger.balance(self._price), date=self._date),
        )

    # -------------------------------------------------------------------------
    # Finalize
    # -------------------------------------------------------------------------

    async def on_finalize(self) -> Optional[Dict[str, Any]]:
        open_triggers = self.triggers.open_triggers()
        if open_triggers:
            self._logger.warning(
                f"{len(open_triggers)} trigger(s) never fired: "
                f"{[t.id for t in open_triggers]}"
            )
        if self._queued:
            self._logger.warning(f"{len(self._queued)} advice(s) arrived after the last tick")

        trades = self.ledger.trades
        return {
            "pair": self.settings.pair,
            "portfolio": self.ledger.portfolio.to_dict(),
            "balance": self.ledger.balance(self._price) if self._price is not None else None,
            "trades": len(trades),
            "order_summary": summarize_trades(trades).to_dict(),
            "open_triggers": [t.to_dict() for t in open_triggers],
            "ledger": self.ledger.get_stats(),
            "triggers": self.triggers.get_stats(),
        }


__all__ = [
    "SimulationBalance",
    "PaperTraderSettings",
    "PaperTrader",
]
