# TICKWISE_FEAT: storage-001
"""
TICKWISE - Candle Storage
=========================

Persistence for one-minute candles.

Features:
- SQLAlchemy storage (SQLite, PostgreSQL, ...) with a single candles table
- In-memory storage for tests and synthetic runs
- Contiguous date range detection (gaps-and-islands over candle starts)

A date range spans from the first candle's start to the last candle's
close (start + one minute).

Author: TICKWISE Development Team
Version: 1.0.0
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional

from sqlalchemy import BigInteger, Float, Integer, String, UniqueConstraint, create_engine, func, select
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column

from shared.tickwise_core.constants import ONE_MINUTE_MS
from shared.tickwise_core.exceptions import MissingConfigError
from shared.tickwise_core.models import Candle, DateRange

logger = logging.getLogger("TICKWISE_Storage")


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


class CandleRecord(Base):
    """One-minute candle row."""

    __tablename__ = "candles"
    __table_args__ = (UniqueConstraint("symbol", "start", name="uq_candles_symbol_start"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    symbol: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    start: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)
    open: Mapped[float] = mapped_column(Float, nullable=False)
    high: Mapped[float] = mapped_column(Float, nullable=False)
    low: Mapped[float] = mapped_column(Float, nullable=False)
    close: Mapped[float] = mapped_column(Float, nullable=False)
    volume: Mapped[float] = mapped_column(Float, default=0.0)

    def to_candle(self) -> Candle:
        return Candle(
            start=self.start,
            open=self.open,
            high=self.high,
            low=self.low,
            close=self.close,
            volume=self.volume,
            symbol=self.symbol,
        )


def group_contiguous(starts: Iterable[int]) -> List[DateRange]:
    """Split sorted candle starts into runs of consecutive minutes."""
    ranges: List[DateRange] = []
    first: Optional[int] = None
    last: Optional[int] = None
    for start in starts:
        if first is None:
            first = last = start
        elif start - last == ONE_MINUTE_MS:
            last = start
        elif start == last:
            continue
        else:
            ranges.append(DateRange(first, last + ONE_MINUTE_MS))
            first = last = start
    if first is not None:
        ranges.append(DateRange(first, last + ONE_MINUTE_MS))
    return ranges


class Storage(ABC):
    """Base class for candle storages."""

    def __init__(self, default_pair: Optional[str] = None):
        self.default_pair = default_pair

    def _pair(self, pair: Optional[str]) -> str:
        pair = pair or self.default_pair
        if not pair:
            raise MissingConfigError("No pair given and no default pair configured")
        return pair

    @abstractmethod
    def get_candle_dateranges(self, pair: Optional[str] = None) -> List[DateRange]:
        """Contiguous date ranges with stored candles, ordered by start."""

    @abstractmethod
    def get_candles(
        self, pair: Optional[str] = None, daterange: Optional[DateRange] = None
    ) -> List[Candle]:
        """Candles ordered by start, optionally within a date range."""

    @abstractmethod
    def insert_candles(self, candles: Iterable[Candle], pair: Optional[str] = None) -> int:
        """Store candles. Returns the number of new rows."""

    @abstractmethod
    def close(self) -> None:
        """Release resources."""


class SQLStorage(Storage):
    """
    SQLAlchemy candle storage.

    Example:
        storage = SQLStorage("sqlite:///candles.db", default_pair="BTC/USDT")
        for daterange in storage.get_candle_dateranges():
            print(daterange)
        storage.close()
    """

    def __init__(self, url: str, default_pair: Optional[str] = None, echo: bool = False):
        super().__init__(default_pair)
        self._engine = create_engine(url, echo=echo)
        Base.metadata.create_all(self._engine)
        logger.info(f"SQL storage opened: {self._engine.url.render_as_string(hide_password=True)}")

    def get_candle_dateranges(self, pair: Optional[str] = None) -> List[DateRange]:
        symbol = self._pair(pair)
        island = (
            select(
                CandleRecord.start.label("start"),
                (
                    CandleRecord.start // ONE_MINUTE_MS
                    - func.row_number().over(order_by=CandleRecord.start)
                ).label("grp"),
            )
            .where(CandleRecord.symbol == symbol)
            .subquery()
        )
        query = (
            select(func.min(island.c.start), func.max(island.c.start))
            .group_by(island.c.grp)
            .order_by(func.min(island.c.start))
        )
        with Session(self._engine) as session:
            rows = session.execute(query).all()
        return [DateRange(int(first), int(last) + ONE_MINUTE_MS) for first, last in rows]

    def get_candles(
        self, pair: Optional[str] = None, daterange: Optional[DateRange] = None
    ) -> List[Candle]:
        query = select(CandleRecord).where(CandleRecord.symbol == self._pair(pair))
        if daterange is not None:
            query = query.where(
                CandleRecord.start >= daterange.start, CandleRecord.start <= daterange.end
            )
        query = query.order_by(CandleRecord.start)
        with Session(self._engine) as session:
            return [record.to_candle() for record in session.scalars(query)]

    def insert_candles(self, candles: Iterable[Candle], pair: Optional[str] = None) -> int:
        inserted = 0
        with Session(self._engine) as session:
            for candle in candles:
                symbol = candle.symbol or self._pair(pair)
                exists = session.scalar(
                    select(CandleRecord.id).where(
                        CandleRecord.symbol == symbol, CandleRecord.start == candle.start
                    )
                )
                if exists is not None:
                    continue
                session.add(
                    CandleRecord(
                        symbol=symbol,
                        start=candle.start,
                        open=candle.open,
                        high=candle.high,
                        low=candle.low,
                        close=candle.close,
                        volume=candle.volume,
                    )
                )
                inserted += 1
            session.commit()
        logger.debug(f"Inserted {inserted} candles")
        return inserted

    def close(self) -> None:
        self._engine.dispose()
        logger.info("SQL storage closed")


class MemoryStorage(Storage):
    """In-memory candle storage."""

    def __init__(self, default_pair: Optional[str] = None):
        super().__init__(default_pair)
        self._candles: Dict[str, Dict[int, Candle]] = {}
        self.closed = False

    def get_candle_dateranges(self, pair: Optional[str] = None) -> List[DateRange]:
        return group_contiguous(sorted(self._candles.get(self._pair(pair), {})))

    def get_candles(
        self, pair: Optional[str] = None, daterange: Optional[DateRange] = None
    ) -> List[Candle]:
        by_start = self._candles.get(self._pair(pair), {})
        return [
            by_start[start]
            for start in sorted(by_start)
            if daterange is None or daterange.contains(start)
        ]

    def insert_candles(self, candles: Iterable[Candle], pair: Optional[str] = None) -> int:
        inserted = 0
        for candle in candles:
            symbol = candle.symbol or self._pair(pair)
            by_start = self._candles.setdefault(symbol, {})
            if candle.start not in by_start:
                by_start[candle.start] = candle
                inserted += 1
        return inserted

    def close(self) -> None:
        self.closed = True


__all__ = [
    "Base",
    "CandleRecord",
    "group_contiguous",
    "Storage",
    "SQLStorage",
    "MemoryStorage",
]
