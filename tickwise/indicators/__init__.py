# TICKWISE Indicators
"""
Streaming technical indicators.

Modules:
    base: Indicator base class and kinds
    moving_averages: SMA, EMA
    rsi: Relative Strength Index
    registry: Kind -> factory registry
"""

from .base import Indicator, IndicatorKind
from .moving_averages import EMA, SMA
from .rsi import RSI
from .registry import IndicatorRegistry, IndicatorSpec, default_indicator_registry

__all__ = [
    "Indicator",
    "IndicatorKind",
    "SMA",
    "EMA",
    "RSI",
    "IndicatorRegistry",
    "IndicatorSpec",
    "default_indicator_registry",
]
