"""Environment-driven settings.

Each getter validates its variable and raises ``RuntimeError`` on a bad
value so misconfiguration surfaces at startup.
"""

from __future__ import annotations

import logging
import os

DEFAULT_DATABASE_URL = "sqlite:///./stockdash.db"
DEFAULT_MINIMUM_LEVEL = 5
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_database_url() -> str:
    url = os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL).strip()
    if not url:
        raise RuntimeError("DATABASE_URL must be non-empty when set")
    return url


def get_sql_echo() -> bool:
    return os.getenv("STOCKDASH_SQL_ECHO", "").strip().lower() in {"1", "true", "yes"}


def get_default_minimum_level() -> int:
    raw = os.getenv("STOCKDASH_DEFAULT_MINIMUM_LEVEL", str(DEFAULT_MINIMUM_LEVEL)).strip()
    try:
        value = int(raw)
    except ValueError as exc:
        raise RuntimeError("STOCKDASH_DEFAULT_MINIMUM_LEVEL must be an integer") from exc
    if value < 0:
        raise RuntimeError("STOCKDASH_DEFAULT_MINIMUM_LEVEL must not be negative")
    return value


def get_log_level() -> int:
    name = os.getenv("STOCKDASH_LOG_LEVEL", "INFO").strip().upper()
    level = logging.getLevelName(name)
    if not isinstance(level, int):
        raise RuntimeError(f"STOCKDASH_LOG_LEVEL is not a valid logging level: {name}")
    return level


def configure_logging() -> None:
    level = get_log_level()
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger("stockdash").setLevel(level)


def ensure_config() -> None:
    get_database_url()
    get_default_minimum_level()
    get_log_level()
