# TICKWISE_FEAT: config-manager-001
"""
TICKWISE - Configuration Manager
================================

Centralized configuration management for TICKWISE runs.

Features:
- YAML/JSON configuration loading
- Environment variable overrides (TICKWISE_SECTION__KEY=value)
- Pydantic validation with field-level error messages
- Pair list and date range validation

Author: TICKWISE Development Team
Version: 1.0.0
"""

import json
import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional, Sequence, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from pydantic_core import PydanticCustomError

from shared.tickwise_core.constants import (
    ENV_PREFIX,
    MAX_PAIRS,
    MIN_PAIRS,
    MODE_BACKTEST,
    PAIR_SEPARATOR,
)
from shared.tickwise_core.exceptions import InvalidConfigError, InvalidDateRangeError
from shared.tickwise_core.models import DateRange, LimitRange, MarketLimits

logger = logging.getLogger("TICKWISE_ConfigManager")


# =============================================================================
# PAIR VALIDATION
# =============================================================================


def validate_pair_symbol(symbol: str) -> str:
    """Check a ``BASE/QUOTE`` symbol. Returns it unchanged."""
    if PAIR_SEPARATOR not in symbol:
        raise InvalidConfigError("Symbol must contain a slash", field="symbol")
    if symbol.count(PAIR_SEPARATOR) > 1:
        raise InvalidConfigError("Symbol must contain exactly one slash", field="symbol")
    base, _, quote = symbol.partition(PAIR_SEPARATOR)
    if not base or not quote:
        raise InvalidConfigError(
            "Symbol must have a base and a quote asset around the slash", field="symbol"
        )
    return symbol


def validate_pairs(pairs: Sequence[Any]) -> Sequence[Any]:
    """Check the number of watched pairs."""
    if len(pairs) < MIN_PAIRS:
        raise InvalidConfigError("At least one pair is required", field="pairs")
    if len(pairs) > MAX_PAIRS:
        raise InvalidConfigError(
            f"Maximum {MAX_PAIRS} pairs allowed, found {len(pairs)}", field="pairs"
        )
    return pairs


def _custom_error(error_type: str, error: Exception) -> PydanticCustomError:
    message = getattr(error, "message", str(error))
    return PydanticCustomError(error_type, message.replace("{", "(").replace("}", ")"))


# =============================================================================
# CONFIG MODELS
# =============================================================================


class PairConfig(BaseModel):
    """One watched market."""

    symbol: str
    timeframe: str = "1m"

    @field_validator("symbol")
    @classmethod
    def _check_symbol(cls, value: str) -> str:
        try:
            return validate_pair_symbol(value)
        except InvalidConfigError as e:
            raise _custom_error("pair_symbol", e) from e


class WatchConfig(BaseModel):
    """What to watch and how."""

    mode: Literal["backtest", "paper", "live"] = MODE_BACKTEST
    pairs: List[PairConfig]
    daterange: Optional[Dict[str, Union[int, str]]] = None

    @field_validator("pairs")
    @classmethod
    def _check_pairs(cls, value: List[PairConfig]) -> List[PairConfig]:
        try:
            validate_pairs(value)
        except InvalidConfigError as e:
            raise _custom_error("pair_count", e) from e
        return value

    @field_validator("daterange")
    @classmethod
    def _check_daterange(cls, value: Optional[Dict[str, Union[int, str]]]):
        if value is None:
            return value
        try:
            DateRange.parse(value.get("start"), value.get("end"))
        except InvalidDateRangeError as e:
            raise _custom_error("daterange", e) from e
        return value

    @property
    def symbols(self) -> List[str]:
        return [pair.symbol for pair in self.pairs]

    def date_range(self) -> Optional[DateRange]:
        if self.daterange is None:
            return None
        return DateRange.parse(self.daterange.get("start"), self.daterange.get("end"))


class LimitConfig(BaseModel):
    min: Optional[float] = None
    max: Optional[float] = None

    @model_validator(mode="after")
    def _check_bounds(self) -> "LimitConfig":
        if self.min is not None and self.max is not None and self.min > self.max:
            raise PydanticCustomError("limit_bounds", "min must not exceed max")
        return self

    def to_range(self) -> LimitRange:
        return LimitRange(min=self.min, max=self.max)


class MarketLimitsConfig(BaseModel):
    amount: LimitConfig = Field(default_factory=LimitConfig)
    price: LimitConfig = Field(default_factory=LimitConfig)
    cost: LimitConfig = Field(default_factory=LimitConfig)

    def to_limits(self) -> MarketLimits:
        return MarketLimits(
            amount=self.amount.to_range(),
            price=self.price.to_range(),
            cost=self.cost.to_range(),
        )


class BrokerConfig(BaseModel):
    """Broker configuration."""

    name: str = "simulated"
    markets: Dict[str, MarketLimitsConfig] = Field(default_factory=dict)


class StorageConfig(BaseModel):
    """Candle storage configuration."""

    url: str = "sqlite:///tickwise.db"
    echo: bool = False


class MonitoringConfig(BaseModel):
    """Monitoring configuration."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"


class PluginEntry(BaseModel):
    """A plugin to run. Any extra keys are the plugin's own settings."""

    model_config = ConfigDict(extra="allow")

    name: str

    def settings(self) -> Dict[str, Any]:
        return self.model_dump()


class SystemConfig(BaseModel):
    """Complete system configuration."""

    watch: WatchConfig
    broker: BrokerConfig = Field(default_factory=BrokerConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    monitoring: MonitoringConfig = Field(default_factory=MonitoringConfig)
    plugins: List[PluginEntry] = Field(default_factory=list)

    @property
    def mode(self) -> str:
        return self.watch.mode


def _format_errors(error: ValidationError) -> List[str]:
    messages = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"]) or "<root>"
        messages.append(f"{location}: {item['msg']}")
    return messages


class ConfigManager:
    """
    Configuration manager for TICKWISE.

    Handles loading, validation, and access to system configuration.

    Example:
        config_manager = ConfigManager()
        config_manager.load("config/backtest.yaml")

        mode = config_manager.get("watch.mode")
        pairs = config_manager.config.watch.symbols
    """

    def __init__(self, config_path: Optional[Path] = None, env_prefix: str = ENV_PREFIX):
        self._config_path = config_path
        self._config: Optional[SystemConfig] = None
        self._raw_config: Dict[str, Any] = {}
        self._errors: List[str] = []
        self._first_error: Optional[ValidationError] = None
        self._loaded_at: Optional[datetime] = None
        self._env_prefix = env_prefix

        if config_path:
            self.load(config_path)

        logger.info("ConfigManager initialized")

    def load(self, path: Union[str, Path]) -> bool:
        """
        Load configuration from file.

        Args:
            path: Path to config file (YAML or JSON)

        Returns:
            True if the file was read. Validation problems are reported by
            validate() and raised by the config property.
        """
        path = Path(path)

        if not path.exists():
            logger.warning(f"Config file not found: {path}")
            return False

        if path.suffix not in (".yaml", ".yml", ".json"):
            logger.error(f"Unsupported config format: {path.suffix}")
            return False

        try:
            with open(path, "r") as f:
                if path.suffix == ".json":
                    raw = json.load(f)
                else:
                    raw = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError, json.JSONDecodeError) as e:
            logger.error(f"Failed to load config: {e}")
            return False

        self._config_path = path
        self.load_dict(raw)
        logger.info(f"Configuration loaded from: {path}")
        return True

    def load_dict(self, raw: Dict[str, Any]) -> None:
        """Load configuration from an in-memory mapping."""
        self._raw_config = dict(raw)
        self._apply_env_overrides()
        self._parse_config()
        self._loaded_at = datetime.now(timezone.utc)

    def _apply_env_overrides(self) -> None:
        """Apply environment variable overrides."""
        for key, value in os.environ.items():
            if key.startswith(self._env_prefix):
                config_key = key[len(self._env_prefix):].lower().replace("__", ".")
                self._set_nested(config_key, self._parse_value(value))

    def _parse_value(self, value: str) -> Any:
        """Parse string value to appropriate type."""
        # Try boolean
        if value.lower() in ("true", "false"):
            return value.lower() == "true"

        # Try integer
        try:
            return int(value)
        except ValueError:
            pass

        # Try float
        try:
            return float(value)
        except ValueError:
            pass

        # Return as string
        return value

    def _set_nested(self, key: str, value: Any) -> None:
        """Set a nested config value using dot notation."""
        parts = key.split(".")
        current = self._raw_config

        for part in parts[:-1]:
            if not isinstance(current.get(part), dict):
                current[part] = {}
            current = current[part]

        current[parts[-1]] = value

    def _parse_config(self) -> None:
        """Parse raw config into structured config."""
        try:
            self._config = SystemConfig.model_validate(self._raw_config)
            self._errors = []
            self._first_error = None
        except ValidationError as e:
            self._config = None
            self._errors = _format_errors(e)
            self._first_error = e
            for message in self._errors:
                logger.error(f"Config error: {message}")

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value by key.

        Args:
            key: Dot-notation key (e.g., "watch.mode")
            default: Default value if not found

        Returns:
            Configuration value
        """
        parts = key.split(".")
        current = self._raw_config

        for part in parts:
            if isinstance(current, dict) and part in current:
                current = current[part]
            else:
                return default

        return current

    def set(self, key: str, value: Any) -> None:
        """Set a configuration value (runtime only)."""
        self._set_nested(key, value)
        self._parse_config()

    @property
    def config(self) -> SystemConfig:
        """
        Get the structured configuration.

        Raises:
            InvalidConfigError: naming the first offending field
        """
        if self._config is None:
            if self._first_error is None:
                raise InvalidConfigError("No configuration loaded")
            item = self._first_error.errors()[0]
            location = ".".join(str(part) for part in item["loc"]) or "<root>"
            raise InvalidConfigError(f"{location}: {item['msg']}", field=location)
        return self._config

    @property
    def watch(self) -> WatchConfig:
        """Get watch configuration."""
        return self.config.watch

    @property
    def broker(self) -> BrokerConfig:
        """Get broker configuration."""
        return self.config.broker

    @property
    def storage(self) -> StorageConfig:
        """Get storage configuration."""
        return self.config.storage

    @property
    def monitoring(self) -> MonitoringConfig:
        """Get monitoring configuration."""
        return self.config.monitoring

    @property
    def plugins(self) -> List[Dict[str, Any]]:
        """Get plugin entries as plain settings mappings."""
        return [entry.settings() for entry in self.config.plugins]

    def validate(self) -> List[str]:
        """
        Validate configuration.

        Returns:
            List of validation errors (empty if valid)
        """
        if self._config is None and not self._errors:
            return ["No configuration loaded"]
        return list(self._errors)

    def save(self, path: Optional[Path] = None) -> bool:
        """
        Save configuration to file.

        Args:
            path: Optional path (uses loaded path if not specified)

        Returns:
            True if saved successfully
        """
        path = Path(path) if path else self._config_path

        if not path:
            logger.error("No config path specified")
            return False

        try:
            with open(path, "w") as f:
                if path.suffix in [".yaml", ".yml"]:
                    yaml.safe_dump(self._raw_config, f, default_flow_style=False)
                else:
                    json.dump(self._raw_config, f, indent=2)
        except OSError as e:
            logger.error(f"Failed to save config: {e}")
            return False

        logger.info(f"Configuration saved to: {path}")
        return True

    def get_info(self) -> Dict[str, Any]:
        """Get configuration info."""
        return {
            "path": str(self._config_path) if self._config_path else None,
            "loaded_at": self._loaded_at.isoformat() if self._loaded_at else None,
            "mode": self.get("watch.mode"),
            "pairs": [p.get("symbol") for p in self.get("watch.pairs", []) if isinstance(p, dict)],
            "validation_errors": self.validate(),
        }


# =============================================================================
# EXPORTS
# =============================================================================

__all__ = [
    "validate_pair_symbol",
    "validate_pairs",
    "PairConfig",
    "WatchConfig",
    "LimitConfig",
    "MarketLimitsConfig",
    "BrokerConfig",
    "StorageConfig",
    "MonitoringConfig",
    "PluginEntry",
    "SystemConfig",
    "ConfigManager",
]
