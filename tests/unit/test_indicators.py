"""
Tests for TICKWISE Indicators
=============================

Tests the streaming indicators and the indicator registry.
"""

import pytest

from shared.tickwise_core.exceptions import IndicatorError
from tickwise.indicators import (
    EMA,
    RSI,
    SMA,
    IndicatorKind,
    IndicatorRegistry,
    default_indicator_registry,
)


class TestMovingAverages:
    """Tests for SMA and EMA."""

    def test_sma_warmup_and_window(self):
        """Should return None until the window is full."""
        sma = SMA("sma", 3)
        assert sma.update(1) is None
        assert sma.update(2) is None
        assert sma.update(3) == pytest.approx(2)
        assert sma.update(6) == pytest.approx(11 / 3)
        assert sma.ready

    def test_ema_seeded_with_sma(self):
        """Should seed with the SMA then smooth."""
        ema = EMA("ema", 3)
        ema.update(1)
        ema.update(2)
        assert ema.update(3) == pytest.approx(2)
        assert ema.update(4) == pytest.approx(4 * 0.5 + 2 * 0.5)

    def test_invalid_period(self):
        """Should reject non-positive periods."""
        with pytest.raises(IndicatorError):
            SMA("sma", 0)
        with pytest.raises(IndicatorError):
            EMA("ema", 2.5)

    def test_invalid_input(self):
        """Should reject non-numeric or non-finite input."""
        sma = SMA("sma", 2)
        with pytest.raises(IndicatorError) as exc_info:
            sma.update(float("nan"))
        assert exc_info.value.indicator_name == "sma"
        with pytest.raises(IndicatorError):
            sma.update("1")


class TestRSI:
    """Tests for RSI."""

    def test_only_gains(self):
        """Rising prices should give 100."""
        rsi = RSI("rsi", 3)
        results = [rsi.update(v) for v in (1, 2, 3, 4)]
        assert results[:3] == [None, None, None]
        assert results[3] == 100.0

    def test_balanced(self):
        """Equal gains and losses should give 50."""
        rsi = RSI("rsi", 2)
        rsi.update(10)
        rsi.update(11)
        assert rsi.update(10) == pytest.approx(50)

    def test_flat(self):
        """No movement should give 50."""
        rsi = RSI("rsi", 2)
        for value in (5, 5, 5):
            result = rsi.update(value)
        assert result == 50.0


class TestIndicatorRegistry:
    """Tests for the indicator registry."""

    def test_default_kinds(self):
        """Should register SMA, EMA and RSI."""
        registry = default_indicator_registry()
        assert set(registry.kinds()) == {IndicatorKind.SMA, IndicatorKind.EMA, IndicatorKind.RSI}

    def test_create_by_name(self):
        """Should build indicators from kind strings."""
        indicator = default_indicator_registry().create("ema", "fast", period=5)
        assert isinstance(indicator, EMA)
        assert indicator.to_dict()["kind"] == "ema"

    def test_unknown_kind(self):
        """Should fail for unknown kinds."""
        with pytest.raises(IndicatorError):
            default_indicator_registry().create("macd", "x", period=5)

    def test_bad_parameters(self):
        """Should wrap bad parameters."""
        with pytest.raises(IndicatorError):
            default_indicator_registry().create("sma", "x", window=5)

    def test_duplicate_registration(self):
        """Should refuse registering a kind twice."""
        registry = IndicatorRegistry()
        registry.register(IndicatorKind.SMA, SMA)
        with pytest.raises(IndicatorError):
            registry.register(IndicatorKind.SMA, SMA)

    def test_input_for(self, candles):
        """Float indicators should be fed the close."""
        assert default_indicator_registry().input_for("sma", candles[0]) == 100.0
