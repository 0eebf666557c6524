"""Environment driven settings for the fake driver."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache

logger = logging.getLogger(__name__)

PARAMSTYLES = ("qmark", "format")
DEFAULT_PARAMSTYLE = "qmark"

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off", ""}


def _load_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in _TRUTHY:
        return True
    if normalized in _FALSY:
        return False
    logger.debug("Invalid %s value %s; defaulting to %s", name, value, default)
    return default


def _load_paramstyle() -> str:
    value = os.getenv("SQLCATCHER_PARAMSTYLE", DEFAULT_PARAMSTYLE).strip().lower()
    if value not in PARAMSTYLES:
        logger.debug(
            "Invalid SQLCATCHER_PARAMSTYLE value %s; defaulting to %s",
            value,
            DEFAULT_PARAMSTYLE,
        )
        return DEFAULT_PARAMSTYLE
    return value


@dataclass(frozen=True, slots=True)
class Settings:
    """Runtime options shared by catalogs and connections."""

    log_queries: bool = False
    paramstyle: str = DEFAULT_PARAMSTYLE


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the settings loaded from the environment.

    The result is cached; tests that change the environment call
    ``get_settings.cache_clear()`` afterwards.
    """

    return Settings(
        log_queries=_load_bool("SQLCATCHER_LOG_QUERIES", False),
        paramstyle=_load_paramstyle(),
    )


__all__ = ["DEFAULT_PARAMSTYLE", "PARAMSTYLES", "Settings", "get_settings"]
