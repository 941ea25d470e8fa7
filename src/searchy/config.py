"""Runtime settings, read from SEARCHY_* environment variables."""
import logging
import os
from dataclasses import dataclass, replace
from typing import Optional

from searchy.errors import ConfigError

ENV_PREFIX = "SEARCHY_"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class Settings:
    """Browser and retrieval knobs shared by every command."""
    headless: bool = True
    navigation_timeout_ms: int = 30000
    content_retries: int = 3  # extra attempts after the first content read
    retry_delay: float = 1.0  # seconds between content reads while navigating
    max_rate_limit_waits: Optional[int] = None  # None waits out the rate limit forever
    run_timeout: Optional[float] = None  # seconds for a whole command
    user_agent: Optional[str] = None
    log_level: int = logging.WARNING

    @classmethod
    def from_env(cls, environ=None) -> "Settings":
        """Build settings from the environment, falling back to defaults."""
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            headless=_read_bool(env, "HEADLESS", defaults.headless),
            navigation_timeout_ms=_read_int(env, "NAV_TIMEOUT_MS", defaults.navigation_timeout_ms, minimum=0),
            content_retries=_read_int(env, "CONTENT_RETRIES", defaults.content_retries, minimum=0),
            retry_delay=_read_float(env, "RETRY_DELAY", defaults.retry_delay),
            max_rate_limit_waits=_read_int(env, "MAX_RATE_LIMIT_WAITS", None, minimum=0),
            run_timeout=_read_float(env, "TIMEOUT", None),
            user_agent=env.get(ENV_PREFIX + "USER_AGENT") or None,
            log_level=_read_level(env, "LOG_LEVEL", defaults.log_level),
        )

    def with_overrides(self, **changes) -> "Settings":
        """Return a copy with every non-None keyword applied."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})


def _raw(env, key):
    value = env.get(ENV_PREFIX + key)
    if value is None or not value.strip():
        return None
    return value.strip()


def _read_bool(env, key, default):
    value = _raw(env, key)
    if value is None:
        return default
    if value.lower() in _TRUE:
        return True
    if value.lower() in _FALSE:
        return False
    raise ConfigError(f"{ENV_PREFIX}{key} must be a boolean, got {value!r}")


def _read_int(env, key, default, minimum=None):
    value = _raw(env, key)
    if value is None:
        return default
    try:
        number = int(value)
    except ValueError:
        raise ConfigError(f"{ENV_PREFIX}{key} must be an integer, got {value!r}") from None
    if minimum is not None and number < minimum:
        raise ConfigError(f"{ENV_PREFIX}{key} must be >= {minimum}, got {number}")
    return number


def _read_float(env, key, default):
    value = _raw(env, key)
    if value is None:
        return default
    try:
        number = float(value)
    except ValueError:
        raise ConfigError(f"{ENV_PREFIX}{key} must be a number, got {value!r}") from None
    if number < 0:
        raise ConfigError(f"{ENV_PREFIX}{key} must not be negative, got {number}")
    return number


def _read_level(env, key, default):
    value = _raw(env, key)
    if value is None:
        return default
    level = logging.getLevelName(value.upper())
    if not isinstance(level, int):
        raise ConfigError(f"{ENV_PREFIX}{key} must be a logging level name, got {value!r}")
    return level
