# TICKWISE Strategies
"""
Trading strategies run by the trading advisor plugin.

Modules:
    base: Strategy base class and tools
    sma_crossover: Moving average crossover with optional stop
    scripted: Replays fixed actions by candle index
    registry: Name -> factory map
"""

from .base import Strategy, StrategyTools
from .registry import STRATEGY_FACTORIES, create_strategy, strategy_names
from .scripted import ScriptedStrategy
from .sma_crossover import SMACrossover

__all__ = [
    "Strategy",
    "StrategyTools",
    "SMACrossover",
    "ScriptedStrategy",
    "STRATEGY_FACTORIES",
    "create_strategy",
    "strategy_names",
]
