"""
TICKWISE - Relative Strength Index
==================================

Wilder's RSI: smoothed average gain over smoothed average loss, scaled
to 0..100.

Author: TICKWISE Development Team
Version: 1.0.0
"""

from typing import List, Optional

import numpy as np

from .base import Indicator, IndicatorKind


class RSI(Indicator):
    kind = IndicatorKind.RSI

    def __init__(self, name: str, period: int = 14):
        super().__init__(name, period)
        self._last: Optional[float] = None
        self._gains: List[float] = []
        self._losses: List[float] = []
        self._avg_gain: Optional[float] = None
        self._avg_loss: Optional[float] = None

    def _compute(self, value: float) -> Optional[float]:
        if self._last is None:
            self._last = value
            return None

        change = value - self._last
        self._last = value
        gain = max(change, 0.0)
        loss = max(-change, 0.0)

        if self._avg_gain is None:
            self._gains.append(gain)
            self._losses.append(loss)
            if len(self._gains) < self.period:
                return None
            self._avg_gain = float(np.mean(self._gains))
            self._avg_loss = float(np.mean(self._losses))
        else:
            self._avg_gain = (self._avg_gain * (self.period - 1) + gain) / self.period
            self._avg_loss = (self._avg_loss * (self.period - 1) + loss) / self.period

        if self._avg_loss == 0:
            return 100.0 if self._avg_gain > 0 else 50.0
        relative_strength = self._avg_gain / self._avg_loss
        return 100 - 100 / (1 + relative_strength)


__all__ = [
    "RSI",
]
