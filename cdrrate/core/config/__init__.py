"""Configuration management module."""

from cdrrate.core.config.settings import (
    PERIOD_POLICIES,
    BillingConfig,
    ConfigManager,
    LoggingConfig,
    PeriodConfig,
    RatingConfig,
    RoutingConfig,
    TariffConfig,
    get_default_config,
    load_config_from_env,
)

__all__ = [
    "PERIOD_POLICIES",
    "BillingConfig",
    "ConfigManager",
    "LoggingConfig",
    "PeriodConfig",
    "RatingConfig",
    "RoutingConfig",
    "TariffConfig",
    "get_default_config",
    "load_config_from_env",
]
