"""Настройки сервиса из окружения или .env."""

import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

ENV_PREFIX = "CURL_APP_"


def _env_int(name, default):
    raw = os.getenv(ENV_PREFIX + name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Некорректное значение %s%s=%r, используем %s", ENV_PREFIX, name, raw, default)
        return default


def _env_bool(name, default):
    raw = os.getenv(ENV_PREFIX + name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Settings:
    host: str = "0.0.0.0"
    port: int = 7700
    debug: bool = False
    log_level: str = "INFO"
    max_command_length: int = 100_000

    @classmethod
    def from_env(cls, dotenv_path=None) -> "Settings":
        load_dotenv(dotenv_path)
        return cls(
            host=os.getenv(ENV_PREFIX + "HOST", cls.host),
            port=_env_int("PORT", cls.port),
            debug=_env_bool("DEBUG", cls.debug),
            log_level=os.getenv(ENV_PREFIX + "LOG_LEVEL", cls.log_level).upper(),
            max_command_length=_env_int("MAX_COMMAND_LENGTH", cls.max_command_length),
        )
