"""
TICKWISE - Indicator Base
=========================

Streaming indicators fed one value per tick.

Author: TICKWISE Development Team
Version: 1.0.0
"""

import math
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, Optional

from shared.tickwise_core.exceptions import IndicatorError


class IndicatorKind(str, Enum):
    SMA = "sma"
    EMA = "ema"
    RSI = "rsi"


class Indicator(ABC):
    """
    Base class for streaming indicators.

    ``update`` returns the latest result, or None while warming up.
    """

    kind: IndicatorKind

    def __init__(self, name: str, period: int):
        if not isinstance(period, int) or isinstance(period, bool) or period <= 0:
            raise IndicatorError(name, f"period must be a positive integer, got {period!r}")
        self.name = name
        self.period = period
        self.result: Optional[float] = None
        self._count = 0

    @property
    def ready(self) -> bool:
        return self.result is not None

    def update(self, value: Any) -> Optional[float]:
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
            raise IndicatorError(self.name, f"invalid input {value!r}")
        self._count += 1
        self.result = self._compute(float(value))
        return self.result

    @abstractmethod
    def _compute(self, value: float) -> Optional[float]:
        """Fold a new value into the indicator state."""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "kind": self.kind.value,
            "period": self.period,
            "result": self.result,
            "samples": self._count,
        }

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.name} period={self.period} result={self.result}>"


__all__ = [
    "IndicatorKind",
    "Indicator",
]
