"""
TICKWISE Test Configuration
===========================

Pytest fixtures and configuration for TICKWISE tests.
"""

from typing import List

import pytest

from shared.tickwise_core.constants import ONE_MINUTE_MS
from shared.tickwise_core.models import Candle, LimitRange, MarketLimits
from tickwise.services.broker import SimulatedBroker
from tickwise.services.storage import MemoryStorage

PAIR = "BTC/USD"
START = 1_704_067_200_000  # 2024-01-01T00:00:00Z


def make_candles(closes: List[float], start: int = START, symbol: str = PAIR) -> List[Candle]:
    """One-minute candles closing at the given prices."""
    return [
        Candle(
            start=start + i * ONE_MINUTE_MS,
            open=close,
            high=close,
            low=close,
            close=close,
            volume=1.0,
            symbol=symbol,
        )
        for i, close in enumerate(closes)
    ]


@pytest.fixture
def pair():
    """Standard test pair."""
    return PAIR


@pytest.fixture
def market_limits():
    """Wide market limits for the test pair."""
    return MarketLimits(
        amount=LimitRange(min=0.0001, max=100_000),
        price=LimitRange(min=0.01, max=10_000_000),
        cost=LimitRange(min=1, max=100_000_000),
    )


@pytest.fixture
def broker(market_limits):
    """Simulated broker knowing the test pair."""
    return SimulatedBroker(markets={PAIR: market_limits})


@pytest.fixture
def candle_factory():
    """Factory building candles from a list of closes."""
    return make_candles


@pytest.fixture
def candles():
    """Three candles closing at 100, 95 and 89."""
    return make_candles([100.0, 95.0, 89.0])


@pytest.fixture
def memory_storage():
    """Empty in-memory storage defaulting to the test pair."""
    return MemoryStorage(default_pair=PAIR)
