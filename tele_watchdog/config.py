"""Central configuration for tele_watchdog."""

from __future__ import annotations

import logging
import os
import shutil
from dataclasses import dataclass
from typing import Set

logger = logging.getLogger(__name__)


def _split_ints(s: str) -> Set[int]:
    """Parse comma-separated string into a set of integers.

    Negative values are kept since Telegram group chat ids are negative.

    Example:
        >>> _split_ints("123,-456,invalid,789")
        {123, -456, 789}
    """
    out = set()
    for part in (s or "").split(","):
        p = part.strip()
        if p.lstrip("-").isdigit():
            out.add(int(p))
    return out


def _detect_ping_bin() -> str:
    return shutil.which("ping") or "/bin/ping"


@dataclass
class Settings:
    """Process settings for tele_watchdog.

    All settings are loaded from environment variables with sensible defaults.
    The watched resource and the destinations live in the config/state files.
    """

    BOT_TOKEN: str | None
    ALLOWED_CHAT_IDS: Set[int]
    RATE_LIMIT_S: float
    DATA_PATH: str
    CONFIG_PATH: str
    PING_BIN: str
    LOG_FILE: str | None


def _read_settings() -> Settings:
    """Read all configuration from environment variables.

    Note:
        Invalid numeric values fall back to sensible defaults.
    """
    token = os.environ.get("BOT_TOKEN") or None
    allowed = _split_ints(os.environ.get("ALLOWED_CHAT_IDS", ""))
    try:
        rate_limit = float(os.environ.get("RATE_LIMIT_S", "1.0") or "1.0")
    except Exception:
        rate_limit = 1.0
    data_path = os.environ.get("DATA_PATH") or "data/watchdog_state.json"
    config_path = os.environ.get("CONFIG_PATH") or "watchdog_config.json"
    ping_bin = os.environ.get("PING_BIN") or _detect_ping_bin()
    log_file = os.environ.get("LOG_FILE") or None

    return Settings(
        BOT_TOKEN=token,
        ALLOWED_CHAT_IDS=allowed,
        RATE_LIMIT_S=rate_limit,
        DATA_PATH=data_path,
        CONFIG_PATH=config_path,
        PING_BIN=ping_bin,
        LOG_FILE=log_file,
    )


settings = _read_settings()


def validate_settings() -> None:
    """Log errors/warnings for settings the bot cannot work well without."""
    if settings.BOT_TOKEN is None:
        logger.error("BOT_TOKEN environment variable is not set")
    if not settings.ALLOWED_CHAT_IDS:
        logger.warning(
            "ALLOWED_CHAT_IDS is empty; administration commands will be unauthorized."
        )
    if not shutil.which(settings.PING_BIN) and not os.path.exists(settings.PING_BIN):
        logger.warning("ping binary %s not found; probes will fail", settings.PING_BIN)


# Exported constants
TOKEN: str | None = settings.BOT_TOKEN
ALLOWED: set[int] = settings.ALLOWED_CHAT_IDS
RATE_LIMIT_S: float = settings.RATE_LIMIT_S
DATA_PATH: str = settings.DATA_PATH
CONFIG_PATH: str = settings.CONFIG_PATH
PING_BIN: str = settings.PING_BIN
LOG_FILE: str | None = settings.LOG_FILE

validate_settings()
