"""
TICKWISE - Moving Averages
==========================

Simple and exponential moving averages.

Author: TICKWISE Development Team
Version: 1.0.0
"""

from collections import deque
from typing import Deque, Optional

import numpy as np

from .base import Indicator, IndicatorKind


class SMA(Indicator):
    """Arithmetic mean of the last ``period`` values."""

    kind = IndicatorKind.SMA

    def __init__(self, name: str, period: int):
        super().__init__(name, period)
        self._window: Deque[float] = deque(maxlen=period)

    def _compute(self, value: float) -> Optional[float]:
        self._window.append(value)
        if len(self._window) < self.period:
            return None
        return float(np.mean(self._window))


class EMA(Indicator):
    """
    Exponential moving average with ``k = 2 / (period + 1)``.

    Seeded with the SMA of the first ``period`` values.
    """

    kind = IndicatorKind.EMA

    def __init__(self, name: str, period: int):
        super().__init__(name, period)
        self.weight = 2 / (period + 1)
        self._seed: list = []
        self._ema: Optional[float] = None

    def _compute(self, value: float) -> Optional[float]:
        if self._ema is None:
            self._seed.append(value)
            if len(self._seed) < self.period:
                return None
            self._ema = float(np.mean(self._seed))
            self._seed = []
            return self._ema

        self._ema = value * self.weight + self._ema * (1 - self.weight)
        return self._ema


__all__ = [
    "SMA",
    "EMA",
]
