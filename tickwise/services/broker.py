# TICKWISE_FEAT: broker-001
"""
TICKWISE - Broker Services
==========================

Market metadata providers injected into trading plugins.

Features:
- Broker interface with market loading and per-pair limits
- Simulated broker configured from static limits
- Name -> factory map resolved at construction time

Author: TICKWISE Development Team
Version: 1.0.0
"""

import logging
from abc import ABC, abstractmethod
from typing import Callable, Dict, Optional

from shared.tickwise_core.exceptions import UndefinedLimitsError, UnknownBrokerError
from shared.tickwise_core.models import MarketLimits

logger = logging.getLogger("TICKWISE_Broker")


class Broker(ABC):
    """
    Base class for brokers.

    Limits are only known after ``load_markets()``. Reading them before
    that returns undefined limits, which the ledger rejects.
    """

    name: str = "broker"

    def __init__(self):
        self._markets: Dict[str, MarketLimits] = {}
        self._loaded = False

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    @abstractmethod
    async def _fetch_markets(self) -> Dict[str, MarketLimits]:
        """Fetch market limits keyed by pair symbol."""

    async def load_markets(self) -> None:
        self._markets = await self._fetch_markets()
        self._loaded = True
        logger.info(f"{self.name}: {len(self._markets)} markets loaded")

    def get_market_limits(self, pair: str) -> MarketLimits:
        if not self._loaded:
            return MarketLimits()
        return self._markets.get(pair, MarketLimits())

    def min_amount(self, pair: str) -> float:
        return self._require(pair, "amount", "min")

    def max_amount(self, pair: str) -> float:
        return self._require(pair, "amount", "max")

    def min_price(self, pair: str) -> float:
        return self._require(pair, "price", "min")

    def max_price(self, pair: str) -> float:
        return self._require(pair, "price", "max")

    def min_cost(self, pair: str) -> float:
        return self._require(pair, "cost", "min")

    def max_cost(self, pair: str) -> float:
        return self._require(pair, "cost", "max")

    def _require(self, pair: str, prop: str, bound: str) -> float:
        limits = getattr(self.get_market_limits(pair), prop)
        value = getattr(limits, bound)
        if value is None:
            raise UndefinedLimitsError(prop, limits.min, limits.max)
        return value


class SimulatedBroker(Broker):
    """Broker backed by limits given up front. Used for backtests and paper runs."""

    name = "simulated"

    def __init__(self, markets: Optional[Dict[str, MarketLimits]] = None):
        super().__init__()
        self._configured = dict(markets or {})

    async def _fetch_markets(self) -> Dict[str, MarketLimits]:
        return dict(self._configured)


# =============================================================================
# BROKER FACTORIES
# =============================================================================

BrokerFactory = Callable[..., Broker]

BROKER_FACTORIES: Dict[str, BrokerFactory] = {
    SimulatedBroker.name: SimulatedBroker,
}


def create_broker(name: str, **kwargs) -> Broker:
    """
    Build a broker by name.

    Raises:
        UnknownBrokerError: no factory registered under ``name``
    """
    factory = BROKER_FACTORIES.get(name)
    if factory is None:
        raise UnknownBrokerError(name)
    return factory(**kwargs)


__all__ = [
    "Broker",
    "SimulatedBroker",
    "BROKER_FACTORIES",
    "create_broker",
]
