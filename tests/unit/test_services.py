"""
Tests for TICKWISE Services
===========================

Tests the simulated broker and the candle storages.
"""

import pytest

from shared.tickwise_core.constants import ONE_MINUTE_MS
from shared.tickwise_core.exceptions import (
    MissingConfigError,
    UndefinedLimitsError,
    UnknownBrokerError,
)
from shared.tickwise_core.models import DateRange
from tickwise.services.broker import SimulatedBroker, create_broker
from tickwise.services.storage import MemoryStorage, SQLStorage, group_contiguous


class TestBroker:
    """Tests for the simulated broker."""

    @pytest.mark.asyncio
    async def test_limits_after_load(self, broker, pair):
        """Should expose limits once markets are loaded."""
        await broker.load_markets()
        assert broker.is_loaded
        assert broker.min_amount(pair) == 0.0001
        assert broker.max_cost(pair) == 100_000_000
        assert broker.get_market_limits(pair).price.min == 0.01

    def test_limits_undefined_before_load(self, broker, pair):
        """Limits should be undefined until load_markets()."""
        assert broker.get_market_limits(pair).amount.defined is False
        with pytest.raises(UndefinedLimitsError) as exc_info:
            broker.min_amount(pair)
        assert "load_markets" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_unknown_pair(self, broker):
        """Unknown pairs should have undefined limits."""
        await broker.load_markets()
        with pytest.raises(UndefinedLimitsError):
            broker.max_price("DOGE/USD")

    def test_factory(self):
        """Should build brokers by name."""
        assert isinstance(create_broker("simulated"), SimulatedBroker)

    def test_unknown_broker(self):
        """Should fail for unknown broker names."""
        with pytest.raises(UnknownBrokerError) as exc_info:
            create_broker("nasdaq")
        assert exc_info.value.kind == "lookup"


class TestGroupContiguous:
    """Tests for date range grouping."""

    def test_islands(self):
        """Should split runs of consecutive minutes."""
        starts = [0, ONE_MINUTE_MS, 2 * ONE_MINUTE_MS, 10 * ONE_MINUTE_MS]
        assert group_contiguous(starts) == [
            DateRange(0, 3 * ONE_MINUTE_MS),
            DateRange(10 * ONE_MINUTE_MS, 11 * ONE_MINUTE_MS),
        ]

    def test_empty(self):
        """No candles should give no ranges."""
        assert group_contiguous([]) == []


class TestMemoryStorage:
    """Tests for the in-memory storage."""

    def test_insert_and_read(self, memory_storage, candles):
        """Should store candles once and return them ordered."""
        assert memory_storage.insert_candles(reversed(candles)) == 3
        assert memory_storage.insert_candles(candles) == 0
        assert [c.close for c in memory_storage.get_candles()] == [100.0, 95.0, 89.0]

    def test_dateranges(self, memory_storage, candle_factory):
        """Should report contiguous ranges."""
        memory_storage.insert_candles(candle_factory([1, 2]))
        memory_storage.insert_candles(candle_factory([3], start=1_704_067_200_000 + 5 * ONE_MINUTE_MS))
        ranges = memory_storage.get_candle_dateranges()
        assert len(ranges) == 2
        assert ranges[0].end - ranges[0].start == 2 * ONE_MINUTE_MS

    def test_daterange_filter(self, memory_storage, candles):
        """Should filter candles by date range."""
        memory_storage.insert_candles(candles)
        window = DateRange(candles[1].start, candles[2].start)
        assert [c.close for c in memory_storage.get_candles(daterange=window)] == [95.0, 89.0]

    def test_needs_pair(self):
        """Should fail without a pair."""
        with pytest.raises(MissingConfigError):
            MemoryStorage().get_candle_dateranges()


class TestSQLStorage:
    """Tests for the SQLAlchemy storage."""

    @pytest.fixture
    def storage(self, pair):
        storage = SQLStorage("sqlite://", default_pair=pair)
        yield storage
        storage.close()

    def test_insert_and_read(self, storage, candles):
        """Should persist candles and skip duplicates."""
        assert storage.insert_candles(candles) == 3
        assert storage.insert_candles(candles[:1]) == 0
        stored = storage.get_candles()
        assert [c.close for c in stored] == [100.0, 95.0, 89.0]
        assert stored[0].symbol == "BTC/USD"

    def test_dateranges(self, storage, candle_factory):
        """Should find contiguous islands with a window query."""
        start = 1_704_067_200_000
        storage.insert_candles(candle_factory([1, 2, 3], start=start))
        storage.insert_candles(candle_factory([4, 5], start=start + 60 * ONE_MINUTE_MS))

        ranges = storage.get_candle_dateranges()

        assert ranges == [
            DateRange(start, start + 3 * ONE_MINUTE_MS),
            DateRange(start + 60 * ONE_MINUTE_MS, start + 62 * ONE_MINUTE_MS),
        ]

    def test_no_dateranges(self, storage):
        """An empty table should give no ranges."""
        assert storage.get_candle_dateranges() == []

    def test_pairs_are_separate(self, storage, candle_factory):
        """Candles of other pairs should not leak."""
        storage.insert_candles(candle_factory([1, 2], symbol="ETH/USD"))
        assert storage.get_candles() == []
        assert len(storage.get_candles("ETH/USD")) == 2
