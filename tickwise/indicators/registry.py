"""
TICKWISE - Indicator Registry
=============================

Explicit map from indicator kind to factory and input/output types.

Author: TICKWISE Development Team
Version: 1.0.0
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Type, Union

from shared.tickwise_core.exceptions import IndicatorError
from shared.tickwise_core.models import Candle

from .base import Indicator, IndicatorKind
from .moving_averages import EMA, SMA
from .rsi import RSI

logger = logging.getLogger("TICKWISE_Indicators")


@dataclass(frozen=True)
class IndicatorSpec:
    kind: IndicatorKind
    factory: Callable[..., Indicator]
    input_type: Type = float
    output_type: Type = float


class IndicatorRegistry:
    """Registered indicator kinds."""

    def __init__(self):
        self._specs: Dict[IndicatorKind, IndicatorSpec] = {}

    def register(
        self,
        kind: IndicatorKind,
        factory: Callable[..., Indicator],
        input_type: Type = float,
        output_type: Type = float,
    ) -> None:
        if kind in self._specs:
            raise IndicatorError(kind.value, "indicator kind is already registered")
        self._specs[kind] = IndicatorSpec(kind, factory, input_type, output_type)

    def spec(self, kind: Union[str, IndicatorKind]) -> IndicatorSpec:
        try:
            return self._specs[IndicatorKind(kind)]
        except (KeyError, ValueError):
            raise IndicatorError(str(kind), "unknown indicator kind") from None

    def create(self, kind: Union[str, IndicatorKind], name: str, **params: Any) -> Indicator:
        spec = self.spec(kind)
        try:
            return spec.factory(name, **params)
        except TypeError as e:
            raise IndicatorError(name, f"invalid parameters {params}: {e}") from e

    def input_for(self, kind: Union[str, IndicatorKind], candle: Candle) -> Any:
        """Value fed to an indicator of this kind for one candle."""
        spec = self.spec(kind)
        return candle if spec.input_type is Candle else candle.close

    def kinds(self) -> List[IndicatorKind]:
        return list(self._specs)


def default_indicator_registry() -> IndicatorRegistry:
    registry = IndicatorRegistry()
    registry.register(IndicatorKind.SMA, SMA)
    registry.register(IndicatorKind.EMA, EMA)
    registry.register(IndicatorKind.RSI, RSI)
    return registry


__all__ = [
    "IndicatorSpec",
    "IndicatorRegistry",
    "default_indicator_registry",
]
