"""
Centralized configuration with environment variable overrides.

Slot granularity, range limits and commit timeouts are configurable here.
Nothing scheduling-related is hardcoded in the resolver or coordinator.
"""

import logging
import os
from dataclasses import dataclass, field

import pytz
from dotenv import load_dotenv

from booking_engine.errors import InvalidConfiguration

load_dotenv()

logger = logging.getLogger(__name__)


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise InvalidConfiguration(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


def _safe_float(env_var: str, default: str) -> float:
    """Parse a float from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return float(raw)
    except (ValueError, TypeError):
        raise InvalidConfiguration(
            f"Invalid float for {env_var}: {raw!r}"
        ) from None


@dataclass(frozen=True)
class SchedulingConfig:
    """Slot generation and availability resolution settings."""

    slot_step_minutes: int = _safe_int("SLOT_STEP_MINUTES", "15")
    default_timezone: str = os.getenv("DEFAULT_TIMEZONE", "UTC")
    max_range_days: int = _safe_int("MAX_RANGE_DAYS", "62")


@dataclass(frozen=True)
class CommitConfig:
    """Booking commit protocol settings."""

    lock_timeout_seconds: float = _safe_float("LOCK_TIMEOUT_SECONDS", "5.0")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    scheduling: SchedulingConfig = field(default_factory=SchedulingConfig)
    commit: CommitConfig = field(default_factory=CommitConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    engine_name: str = os.getenv("ENGINE_NAME", "booking-engine")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    if config.scheduling.slot_step_minutes < 1:
        raise InvalidConfiguration(
            f"SLOT_STEP_MINUTES must be >= 1, got {config.scheduling.slot_step_minutes}"
        )
    if config.scheduling.max_range_days < 1:
        raise InvalidConfiguration(
            f"MAX_RANGE_DAYS must be >= 1, got {config.scheduling.max_range_days}"
        )
    if config.commit.lock_timeout_seconds <= 0:
        raise InvalidConfiguration(
            "LOCK_TIMEOUT_SECONDS must be > 0, "
            f"got {config.commit.lock_timeout_seconds}"
        )

    if config.scheduling.default_timezone not in pytz.all_timezones_set:
        raise InvalidConfiguration(
            f"DEFAULT_TIMEZONE is not a known timezone: {config.scheduling.default_timezone!r}"
        )


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logger.info("Configuration loaded for '%s'", config.engine_name)
    return config


# Singleton instance
settings = load_config()
