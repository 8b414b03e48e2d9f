"""Configuration for FleetProTax.

This module provides Pydantic Settings-based configuration with environment
variable support and sensible defaults.

Usage:
    from fleetprotax_core.config import FleetProTaxConfig, configure_logging

    # Load from environment variables and .env file
    config = FleetProTaxConfig()
    configure_logging(config.log_level)

    # Effective rates with any overrides from the environment
    rates = resolve(config.rates.as_custom_rates())
"""

import logging
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
from typing import Optional

import structlog
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError
from .export import generate_backup_filename
from .models import CustomTaxRates


class TaxRateConfig(BaseSettings):
    """Optional rate overrides.

    Unset values fall back to the statutory defaults when resolved.

    Environment Variables:
        FLEETPROTAX_RATES_MEAL_RATE_8H: Meal allowance from 8 hours
        FLEETPROTAX_RATES_MEAL_RATE_24H: Meal allowance from 24 hours
        FLEETPROTAX_RATES_MILEAGE_RATE_CAR: Per-km rate for cars
        FLEETPROTAX_RATES_MILEAGE_RATE_MOTORCYCLE: Per-km rate for motorcycles
        FLEETPROTAX_RATES_MILEAGE_RATE_BIKE: Per-km rate for bikes
        FLEETPROTAX_RATES_GWG_LIMIT: Low-value asset threshold
    """

    model_config = SettingsConfigDict(
        env_prefix="FLEETPROTAX_RATES_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    meal_rate_8h: Optional[Decimal] = Field(default=None, gt=0)
    meal_rate_24h: Optional[Decimal] = Field(default=None, gt=0)
    mileage_rate_car: Optional[Decimal] = Field(default=None, gt=0)
    mileage_rate_motorcycle: Optional[Decimal] = Field(default=None, gt=0)
    mileage_rate_bike: Optional[Decimal] = Field(default=None, gt=0)
    gwg_limit: Optional[Decimal] = Field(default=None, gt=0)

    def as_custom_rates(self) -> CustomTaxRates:
        return CustomTaxRates(**self.model_dump())


class FleetProTaxConfig(BaseSettings):
    """Root configuration for FleetProTax.

    Environment Variables:
        FLEETPROTAX_ENV: Environment name (development, staging, production, test)
        FLEETPROTAX_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)
        FLEETPROTAX_DATA_DIR: Directory for exported data and backups
        FLEETPROTAX_SELECTED_YEAR: Tax year shown by default

    Example:
        config = FleetProTaxConfig(
            log_level="DEBUG",
            rates=TaxRateConfig(mileage_rate_bike=Decimal("0.10")),
        )
    """

    model_config = SettingsConfigDict(
        env_prefix="FLEETPROTAX_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    env: str = Field(
        default="development",
        description="Environment name (development, staging, production, test)",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    data_dir: str = Field(
        default="./data",
        description="Directory for exported data and backups",
    )
    selected_year: int = Field(
        default_factory=lambda: date.today().year,
        ge=1900,
        le=2100,
        description="Tax year shown by default",
    )

    rates: TaxRateConfig = Field(default_factory=TaxRateConfig)

    @field_validator("env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        """Validate environment name."""
        valid_envs = {"development", "staging", "production", "test"}
        v_lower = v.lower().strip()
        if v_lower not in valid_envs:
            raise ValueError(f"Invalid environment: {v}. Must be one of: {valid_envs}")
        return v_lower

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate and normalize log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper().strip()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of: {valid_levels}")
        return v_upper

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.env == "production"

    @property
    def is_debug(self) -> bool:
        return self.log_level == "DEBUG"

    def backup_path(self, now: Optional[datetime] = None) -> Path:
        """Where a backup taken at ``now`` is written, inside ``data_dir``."""
        return Path(self.data_dir) / generate_backup_filename(now)


def configure_logging(log_level: str = "INFO") -> None:
    """Route structlog output through a level filter.

    Args:
        log_level: Name of the minimum level to emit (e.g. "DEBUG")

    Raises:
        ConfigurationError: If the level name is unknown.
    """
    level = logging.getLevelName(log_level.upper().strip())
    if not isinstance(level, int):
        raise ConfigurationError(
            f"Unknown log level: {log_level}",
            config_key="log_level",
            expected="DEBUG, INFO, WARNING, ERROR or CRITICAL",
            actual=log_level,
        )
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=False,
    )
