# TICKWISE_FEAT: sma-crossover-001
"""
TICKWISE - SMA Crossover Strategy
=================================

Goes long when the fast average crosses above the slow one and exits
when it crosses back below.

Features:
- Indicator labels configurable (defaults "fast" / "slow")
- Optional protective stop placed as a trigger right after entering
- Stop advice cancelled when the crossover exit fires first

Author: TICKWISE Development Team
Version: 1.0.0
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from shared.tickwise_core.exceptions import StrategyError
from shared.tickwise_core.models import Candle, TradeCompleted

from .base import Strategy, StrategyTools


@dataclass
class SMACrossoverConfig:
    """SMA crossover configuration."""

    fast: str = "fast"
    slow: str = "slow"
    stop_loss_percent: Optional[float] = None
    trailing: bool = False


class SMACrossover(Strategy):
    name = "sma_crossover"

    def init(self) -> None:
        try:
            self.config = SMACrossoverConfig(**self.params)
        except TypeError as e:
            raise StrategyError(f"Invalid {self.name} params {self.params}: {e}") from e
        if self.config.stop_loss_percent is not None and self.config.stop_loss_percent <= 0:
            raise StrategyError("stop_loss_percent must be positive")

        self._previous: Optional[float] = None
        self._in_market = False
        self._stop_advice: Optional[str] = None
        self._crossings = 0

    def on_candle(
        self,
        candle: Candle,
        indicators: Dict[str, Optional[float]],
        tools: StrategyTools,
    ) -> None:
        fast = indicators.get(self.config.fast)
        slow = indicators.get(self.config.slow)
        if fast is None or slow is None:
            return

        spread = fast - slow
        previous, self._previous = self._previous, spread
        if previous is None:
            return

        if previous <= 0 < spread and not self._in_market:
            self._crossings += 1
            tools.long()
            self._in_market = True
            self._place_stop(candle, tools)
        elif previous >= 0 > spread and self._in_market:
            self._crossings += 1
            if self._stop_advice:
                tools.cancel(self._stop_advice)
                self._stop_advice = None
            tools.short()
            self._in_market = False

    def _place_stop(self, candle: Candle, tools: StrategyTools) -> None:
        percent = self.config.stop_loss_percent
        if percent is None:
            return
        if self.config.trailing:
            trigger: Dict[str, Any] = {
                "type": "trailing",
                "trail_percent": percent,
                "reference_price": candle.close,
            }
        else:
            trigger = {"type": "below", "price": candle.close * (1 - percent / 100)}
        self._stop_advice = tools.short(trigger=trigger)

    def on_trigger_fired(self, trigger: Dict[str, Any]) -> None:
        if trigger.get("advice_id") == self._stop_advice:
            self._stop_advice = None
            self._in_market = False

    def on_trade_completed(self, trade: TradeCompleted) -> None:
        self._logger.debug(f"{trade.action.value} {trade.amount} @ {trade.price}")

    def end(self) -> Optional[Dict[str, Any]]:
        return {"crossings": self._crossings, "in_market": self._in_market}


__all__ = [
    "SMACrossoverConfig",
    "SMACrossover",
]
