# TICKWISE_FEAT: trading-advisor-001
"""
TICKWISE - Trading Advisor Plugin
=================================

Runs one strategy per candle and turns its decisions into advice events.

Features:
- Strategy resolved by name when the plugin is built
- Latest indicator values handed to the strategy on each candle
- Trade and trigger outcomes fed back to the strategy
- Strategy info broadcast at the end of the run

Author: TICKWISE Development Team
Version: 1.0.0
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from shared.tickwise_core.constants import (
    INDICATORS_UPDATE_EVENT,
    ONE_MINUTE_MS,
    STRATEGY_ADVICE_EVENT,
    STRATEGY_CANCEL_ADVICE_EVENT,
    STRATEGY_INFO_EVENT,
    TRADE_COMPLETED_EVENT,
    TRIGGER_ABORTED_EVENT,
    TRIGGER_FIRED_EVENT,
)
from shared.tickwise_core.exceptions import StrategyError
from shared.tickwise_core.models import Advice, Candle, Recommendation, Tick, TradeCompleted
from tickwise.core.plugin_base import Plugin, PluginCategory, PluginDescriptor
from tickwise.strategies import StrategyTools, create_strategy


class TradingAdvisorSettings(BaseModel):
    strategy: str
    params: Dict[str, Any] = Field(default_factory=dict)
    pair: Optional[str] = None


class TradingAdvisor(Plugin):
    """Strategy runner plugin."""

    descriptor = PluginDescriptor(
        name="trading_advisor",
        category=PluginCategory.STRATEGY,
        events_emitted={
            STRATEGY_ADVICE_EVENT,
            STRATEGY_CANCEL_ADVICE_EVENT,
            STRATEGY_INFO_EVENT,
        },
        events_handled={
            INDICATORS_UPDATE_EVENT,
            TRADE_COMPLETED_EVENT,
            TRIGGER_FIRED_EVENT,
            TRIGGER_ABORTED_EVENT,
        },
        dependencies={"indicators"},
        config_schema=TradingAdvisorSettings,
    )

    def __init__(self, settings: TradingAdvisorSettings):
        super().__init__(settings)
        self.strategy = create_strategy(settings.strategy, settings.params)
        self._indicators: Dict[str, Optional[float]] = {}
        self._advice_count = 0
        self._current_date = 0
        self._tools = StrategyTools(self._advise, self._cancel, self._logger)
        self._stats["advices"] = 0
        self._stats["cancellations"] = 0

    async def on_indicators_update(self, update: Dict[str, Any]) -> None:
        if self.settings.pair and update.get("symbol") and update["symbol"] != self.settings.pair:
            return
        self._indicators = dict(update.get("values", {}))

    async def on_tick(self, tick: Tick) -> None:
        if not isinstance(tick, Candle):
            return
        if self.settings.pair and tick.symbol and tick.symbol != self.settings.pair:
            return
        self._current_date = tick.start + ONE_MINUTE_MS
        self.strategy.on_candle(tick, dict(self._indicators), self._tools)

    def _advise(
        self,
        recommendation: str,
        trigger: Optional[Dict[str, Any]] = None,
        amount: Optional[float] = None,
    ) -> str:
        try:
            direction = Recommendation(recommendation)
        except ValueError as e:
            raise StrategyError(
                f"{self.strategy.name} gave an invalid recommendation: {recommendation!r}"
            ) from e

        self._advice_count += 1
        advice = Advice(
            id=f"advice-{self._advice_count}",
            recommendation=direction,
            date=self._current_date,
            trigger=dict(trigger) if trigger else None,
            amount=amount,
        )
        self._emit(STRATEGY_ADVICE_EVENT, advice)
        self._stats["advices"] += 1
        self._logger.info(f"Advice {advice.id}: {direction.value}" + (" (trigger)" if trigger else ""))
        return advice.id

    def _cancel(self, advice_id: str) -> None:
        self._emit(STRATEGY_CANCEL_ADVICE_EVENT, {"advice_id": advice_id, "date": self._current_date})
        self._stats["cancellations"] += 1

    async def on_trade_completed(self, trade: TradeCompleted) -> None:
        self.strategy.on_trade_completed(trade)

    async def on_trigger_fired(self, trigger: Dict[str, Any]) -> None:
        self.strategy.on_trigger_fired(trigger)

    async def on_trigger_aborted(self, trigger: Dict[str, Any]) -> None:
        self.strategy.on_trigger_aborted(trigger)

    async def on_finalize(self) -> Optional[Dict[str, Any]]:
        info = self.strategy.end()
        report = {
            "strategy": self.strategy.name,
            "advices": self._stats["advices"],
            "cancellations": self._stats["cancellations"],
            "info": info,
        }
        self._emit(STRATEGY_INFO_EVENT, report)
        return report


__all__ = [
    "TradingAdvisorSettings",
    "TradingAdvisor",
]
