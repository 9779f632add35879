# TICKWISE_FEAT: indicator-feed-001
"""
TICKWISE - Indicator Feed Plugin
================================

Runs the configured indicators on every candle and broadcasts their
latest values.

Features:
- Indicators built from the indicator registry at construction
- One indicatorsUpdate event per candle
- Strict mode: indicator errors stop the run; otherwise the value is
  reported as None and the run goes on

Author: TICKWISE Development Team
Version: 1.0.0
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from shared.tickwise_core.constants import INDICATORS_UPDATE_EVENT
from shared.tickwise_core.exceptions import IndicatorError
from shared.tickwise_core.models import Candle, Tick
from tickwise.core.plugin_base import Plugin, PluginCategory, PluginDescriptor
from tickwise.indicators import Indicator, default_indicator_registry


class IndicatorDefinition(BaseModel):
    label: str
    kind: str
    period: int = 14


class IndicatorFeedSettings(BaseModel):
    pair: Optional[str] = None
    indicators: List[IndicatorDefinition] = Field(default_factory=list)
    strict: bool = True


class IndicatorFeed(Plugin):
    """Indicator computation plugin."""

    descriptor = PluginDescriptor(
        name="indicators",
        category=PluginCategory.INDICATOR,
        events_emitted={INDICATORS_UPDATE_EVENT},
        config_schema=IndicatorFeedSettings,
    )

    def __init__(self, settings: Optional[IndicatorFeedSettings] = None):
        super().__init__(settings or IndicatorFeedSettings())
        self._registry = default_indicator_registry()
        self._indicators: Dict[str, Indicator] = {}
        for definition in self.settings.indicators:
            if definition.label in self._indicators:
                raise IndicatorError(definition.label, "duplicate indicator label")
            self._indicators[definition.label] = self._registry.create(
                definition.kind, definition.label, period=definition.period
            )
        self._kinds = {d.label: d.kind for d in self.settings.indicators}
        self._stats["indicator_errors"] = 0

    @property
    def values(self) -> Dict[str, Optional[float]]:
        return {label: indicator.result for label, indicator in self._indicators.items()}

    async def on_tick(self, tick: Tick) -> None:
        if not isinstance(tick, Candle):
            return
        if self.settings.pair and tick.symbol and tick.symbol != self.settings.pair:
            return

        values: Dict[str, Any] = {}
        for label, indicator in self._indicators.items():
            try:
                values[label] = indicator.update(self._registry.input_for(self._kinds[label], tick))
            except IndicatorError as e:
                self._stats["indicator_errors"] += 1
                if self.settings.strict:
                    raise
                self._logger.warning(f"Indicator skipped: {e}")
                values[label] = None

        self._emit(
            INDICATORS_UPDATE_EVENT,
            {"symbol": tick.symbol, "date": tick.start, "values": values},
        )

    async def on_finalize(self) -> Optional[Dict[str, Any]]:
        return {
            "indicators": [indicator.to_dict() for indicator in self._indicators.values()],
            "errors": self._stats["indicator_errors"],
        }


__all__ = [
    "IndicatorDefinition",
    "IndicatorFeedSettings",
    "IndicatorFeed",
]
