"""Configuration management for rating runs."""

import os
import tomllib
from dataclasses import asdict, dataclass, field
from decimal import ROUND_HALF_EVEN, ROUND_HALF_UP, Decimal, InvalidOperation
from pathlib import Path
from typing import Any

from loguru import logger

from cdrrate.core.exceptions.base import ConfigurationError

ROUNDING_MODES = {"half_up": ROUND_HALF_UP, "half_even": ROUND_HALF_EVEN}
PERIOD_POLICIES = ("evening-weekend", "night-window")


@dataclass
class BillingConfig:
    """Billing block and rounding configuration."""

    block_seconds: int = 60
    rounding: str = "half_up"

    def __post_init__(self) -> None:
        if not isinstance(self.block_seconds, int) or self.block_seconds <= 0:
            raise ConfigurationError("block_seconds must be a positive integer", setting="billing.block_seconds")
        if self.rounding not in ROUNDING_MODES:
            raise ConfigurationError(
                f"Unsupported rounding mode '{self.rounding}'",
                setting="billing.rounding",
                details={"allowed": sorted(ROUNDING_MODES)},
            )

    @property
    def rounding_mode(self) -> str:
        return ROUNDING_MODES[self.rounding]


@dataclass
class PeriodConfig:
    """Rate-period policy configuration.

    ``policy`` names a preset; the hour/weekend fields override it when set.
    """

    policy: str = "evening-weekend"
    reduced_start_hour: int | None = None
    reduced_end_hour: int | None = None
    weekend_days: list[int] | None = None

    def __post_init__(self) -> None:
        if self.policy not in PERIOD_POLICIES:
            raise ConfigurationError(
                f"Unknown rate period policy '{self.policy}'",
                setting="periods.policy",
                details={"allowed": list(PERIOD_POLICIES)},
            )
        for name in ("reduced_start_hour", "reduced_end_hour"):
            value = getattr(self, name)
            if value is not None and not 0 <= value <= 23:
                raise ConfigurationError(f"{name} must be within 0-23", setting=f"periods.{name}")
        if self.weekend_days is not None and any(not 0 <= day <= 6 for day in self.weekend_days):
            raise ConfigurationError("weekend_days must be weekday numbers 0-6", setting="periods.weekend_days")


@dataclass
class RoutingConfig:
    """Outbound prefixes recognised by the destination resolver."""

    international_prefix: str = "00"
    economic_prefixes: list[str] = field(default_factory=lambda: ["095", "097", "098", "099"])
    max_dial_plan_length: int = 4

    def __post_init__(self) -> None:
        if not self.international_prefix:
            raise ConfigurationError("international_prefix must not be empty", setting="routing.international_prefix")
        if self.max_dial_plan_length <= 0:
            raise ConfigurationError("max_dial_plan_length must be positive", setting="routing.max_dial_plan_length")


@dataclass
class TariffConfig:
    """Flat domestic override rates and the built-in default rate (per minute)."""

    landline_standard: str = "0.03"
    landline_reduced: str = "0.03"
    mobile_standard: str = "0.05"
    mobile_reduced: str = "0.05"
    default_standard: str = "0.1"
    default_reduced: str = "0.05"

    def __post_init__(self) -> None:
        for name, value in asdict(self).items():
            try:
                amount = Decimal(str(value))
            except InvalidOperation as exc:
                raise ConfigurationError(f"{name} is not a decimal amount", setting=f"tariffs.{name}") from exc
            if amount < 0:
                raise ConfigurationError(f"{name} must not be negative", setting=f"tariffs.{name}")
            setattr(self, name, str(value))

    def rate(self, name: str) -> Decimal:
        return Decimal(getattr(self, name))


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "INFO"
    file: str | None = None


@dataclass
class RatingConfig:
    """cdrrate main configuration."""

    billing: BillingConfig = field(default_factory=BillingConfig)
    periods: PeriodConfig = field(default_factory=PeriodConfig)
    routing: RoutingConfig = field(default_factory=RoutingConfig)
    tariffs: TariffConfig = field(default_factory=TariffConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_dict(cls, config_dict: dict[str, Any]) -> "RatingConfig":
        """Build a configuration from a (possibly partial) nested dict."""
        try:
            return cls(
                billing=BillingConfig(**config_dict.get("billing", {})),
                periods=PeriodConfig(**config_dict.get("periods", {})),
                routing=RoutingConfig(**config_dict.get("routing", {})),
                tariffs=TariffConfig(**config_dict.get("tariffs", {})),
                logging=LoggingConfig(**config_dict.get("logging", {})),
            )
        except TypeError as exc:
            raise ConfigurationError(f"Invalid configuration: {exc}") from exc

    def to_dict(self) -> dict[str, Any]:
        return {
            "billing": asdict(self.billing),
            "periods": asdict(self.periods),
            "routing": asdict(self.routing),
            "tariffs": asdict(self.tariffs),
            "logging": asdict(self.logging),
        }


def _deep_update(d: dict[str, Any], u: dict[str, Any]) -> dict[str, Any]:
    for k, v in u.items():
        if isinstance(v, dict):
            d[k] = _deep_update(d.get(k, {}), v)
        else:
            d[k] = v
    return d


class ConfigManager:
    """Loads :class:`RatingConfig` from TOML and applies environment overrides."""

    def __init__(self, config_path: Path | None = None, use_env: bool = True):
        """Initialise the manager.

        Args:
            config_path: TOML file; defaults to ``~/.cdrrate/config.toml``
            use_env: apply ``CDRRATE_*`` environment overrides on top of the file
        """
        self.config_path = config_path or Path.home() / ".cdrrate" / "config.toml"
        self.use_env = use_env
        self.config = self._load_config()

    def _load_config(self) -> RatingConfig:
        config_dict: dict[str, Any] = {}
        if self.config_path.exists():
            try:
                with open(self.config_path, "rb") as f:
                    config_dict = tomllib.load(f)
            except (OSError, tomllib.TOMLDecodeError) as e:
                logger.warning(f"Failed to load config from {self.config_path}: {e}")
                config_dict = {}

        if self.use_env:
            _deep_update(config_dict, load_config_from_env())
        return RatingConfig.from_dict(config_dict)

    def get_config(self) -> RatingConfig:
        return self.config

    def update_config(self, **updates: Any) -> None:
        """Apply nested updates, e.g. ``update_config(billing={"block_seconds": 30})``."""
        config_dict = self.config.to_dict()
        _deep_update(config_dict, updates)
        self.config = RatingConfig.from_dict(config_dict)


def get_default_config() -> RatingConfig:
    return RatingConfig()


def _env_int(name: str) -> int | None:
    raw = os.getenv(name)
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer", setting=name) from exc


def load_config_from_env() -> dict[str, Any]:
    """Read ``CDRRATE_*`` environment variables into a nested config dict."""
    config: dict[str, Any] = {}

    billing_config: dict[str, Any] = {}
    block_seconds = _env_int("CDRRATE_BLOCK_SECONDS")
    if block_seconds is not None:
        billing_config["block_seconds"] = block_seconds
    rounding = os.getenv("CDRRATE_ROUNDING")
    if rounding is not None:
        billing_config["rounding"] = rounding.lower()
    if billing_config:
        config["billing"] = billing_config

    period_policy = os.getenv("CDRRATE_PERIOD_POLICY")
    if period_policy is not None:
        config["periods"] = {"policy": period_policy.lower()}

    international_prefix = os.getenv("CDRRATE_INTERNATIONAL_PREFIX")
    if international_prefix is not None:
        config["routing"] = {"international_prefix": international_prefix}

    logging_config: dict[str, Any] = {}
    logging_level = os.getenv("CDRRATE_LOGGING_LEVEL")
    if logging_level is not None:
        logging_config["level"] = logging_level.upper()
    logging_file = os.getenv("CDRRATE_LOGGING_FILE")
    if logging_file is not None:
        logging_config["file"] = logging_file
    if logging_config:
        config["logging"] = logging_config

    return config
