# TICKWISE_FEAT: strategy-base-001
"""
TICKWISE - Strategy Base
========================

Strategies turn candles and indicator values into advice. They never
touch the portfolio: the trading advisor plugin hands them a small tool
set to advise or cancel advice.

Author: TICKWISE Development Team
Version: 1.0.0
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, ClassVar, Dict, Optional

from shared.tickwise_core.models import Candle, TradeCompleted


class StrategyTools:
    """Actions available to a strategy while handling a candle."""

    def __init__(
        self,
        advise: Callable[..., str],
        cancel: Callable[[str], None],
        logger: logging.Logger,
    ):
        self._advise = advise
        self._cancel = cancel
        self.log = logger

    def long(
        self,
        trigger: Optional[Dict[str, Any]] = None,
        amount: Optional[float] = None,
    ) -> str:
        return self._advise("long", trigger=trigger, amount=amount)

    def short(
        self,
        trigger: Optional[Dict[str, Any]] = None,
        amount: Optional[float] = None,
    ) -> str:
        return self._advise("short", trigger=trigger, amount=amount)

    def advice(
        self,
        recommendation: str,
        trigger: Optional[Dict[str, Any]] = None,
        amount: Optional[float] = None,
    ) -> str:
        return self._advise(recommendation, trigger=trigger, amount=amount)

    def cancel(self, advice_id: str) -> None:
        self._cancel(advice_id)


class Strategy(ABC):
    """
    Base class for strategies.

    Example:
        class AlwaysLong(Strategy):
            name = "always_long"

            def on_candle(self, candle, indicators, tools):
                tools.long()
    """

    name: ClassVar[str] = "strategy"

    def __init__(self, params: Optional[Dict[str, Any]] = None):
        self.params = dict(params or {})
        self._logger = logging.getLogger(f"TICKWISE_Strategy_{self.name}")
        self.init()

    def init(self) -> None:
        """Read params and set up state."""

    @abstractmethod
    def on_candle(
        self,
        candle: Candle,
        indicators: Dict[str, Optional[float]],
        tools: StrategyTools,
    ) -> None:
        """Handle one candle with the latest indicator values."""

    def on_trade_completed(self, trade: TradeCompleted) -> None:
        pass

    def on_trigger_fired(self, trigger: Dict[str, Any]) -> None:
        pass

    def on_trigger_aborted(self, trigger: Dict[str, Any]) -> None:
        pass

    def end(self) -> Optional[Dict[str, Any]]:
        """Called once when the run ends. May return strategy info."""
        return None


__all__ = [
    "StrategyTools",
    "Strategy",
]
