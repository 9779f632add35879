"""
TICKWISE - Scripted Strategy
============================

Replays a fixed list of actions by candle index. Handy for reproducible
runs and for exercising the trader.

Params:
    actions: list of
        {"at": 0, "recommendation": "long"}
        {"at": 2, "recommendation": "short", "trigger": {"type": "below", "price": 90}}
        {"at": 5, "cancel": 1}      # cancels the advice of action #1

Author: TICKWISE Development Team
Version: 1.0.0
"""

from typing import Any, Dict, List, Optional

from shared.tickwise_core.exceptions import StrategyError
from shared.tickwise_core.models import Candle

from .base import Strategy, StrategyTools


class ScriptedStrategy(Strategy):
    name = "scripted"

    def init(self) -> None:
        actions = self.params.get("actions", [])
        if not isinstance(actions, list):
            raise StrategyError("scripted strategy needs a list of actions")
        for position, action in enumerate(actions):
            if "at" not in action:
                raise StrategyError(f"action #{position} has no 'at' index")
            if "recommendation" not in action and "cancel" not in action:
                raise StrategyError(f"action #{position} neither advises nor cancels")
        self._actions: List[Dict[str, Any]] = actions
        self._advice_ids: Dict[int, str] = {}
        self._index = 0

    def on_candle(
        self,
        candle: Candle,
        indicators: Dict[str, Optional[float]],
        tools: StrategyTools,
    ) -> None:
        for position, action in enumerate(self._actions):
            if action["at"] != self._index:
                continue
            if "cancel" in action:
                advice_id = self._advice_ids.get(action["cancel"])
                if advice_id is None:
                    raise StrategyError(f"action #{position} cancels unknown action {action['cancel']}")
                tools.cancel(advice_id)
            else:
                self._advice_ids[position] = tools.advice(
                    action["recommendation"],
                    trigger=action.get("trigger"),
                    amount=action.get("amount"),
                )
        self._index += 1

    def end(self) -> Optional[Dict[str, Any]]:
        return {"candles_seen": self._index, "advices": len(self._advice_ids)}


__all__ = [
    "ScriptedStrategy",
]
