"""
TICKWISE - Strategy Registry
============================

Name -> strategy factory map, resolved when the trading advisor is built.

Author: TICKWISE Development Team
Version: 1.0.0
"""

from typing import Any, Callable, Dict, List, Optional

from shared.tickwise_core.exceptions import StrategyNotFoundError

from .base import Strategy
from .scripted import ScriptedStrategy
from .sma_crossover import SMACrossover

StrategyFactory = Callable[[Optional[Dict[str, Any]]], Strategy]

STRATEGY_FACTORIES: Dict[str, StrategyFactory] = {
    SMACrossover.name: SMACrossover,
    ScriptedStrategy.name: ScriptedStrategy,
}


def create_strategy(name: str, params: Optional[Dict[str, Any]] = None) -> Strategy:
    """
    Build a strategy by name.

    Raises:
        StrategyNotFoundError: no factory registered under ``name``
    """
    factory = STRATEGY_FACTORIES.get(name)
    if factory is None:
        raise StrategyNotFoundError(name)
    return factory(params)


def strategy_names() -> List[str]:
    return sorted(STRATEGY_FACTORIES)


__all__ = [
    "STRATEGY_FACTORIES",
    "create_strategy",
    "strategy_names",
]
