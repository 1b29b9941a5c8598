# config.py
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv


class ConfigError(RuntimeError):
    """필수 설정 누락/잘못된 값 -> 서버를 시작하지 않음"""


LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


def str_to_bool(value) -> bool:
    truthy = ("true", "1", "yes", "on")
    falsey = ("false", "0", "no", "off")

    val = str(value).strip().lower()
    if val in truthy:
        return True
    if val in falsey:
        return False
    raise ConfigError(f"Invalid boolean string: '{value}'")


def _int_env(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got '{raw}'")


@dataclass(frozen=True)
class Settings:
    secret_key: str
    default_queue: str = "5v5"
    queue_timeout_seconds: int = 60 * 60
    avoid_highlight: bool = False
    redis_url: Optional[str] = None
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 5000


def load_settings() -> Settings:
    """.env + 환경변수에서 설정을 읽는다. SECRET_KEY가 없으면 ConfigError."""
    load_dotenv()

    secret_key = os.environ.get("SECRET_KEY")
    if not secret_key:
        raise ConfigError(
            "SECRET_KEY environment variable must be provided either through .env file or via envvars, quitting."
        )

    timeout = _int_env("QUEUE_TIMEOUT_SECONDS", 60 * 60)
    if timeout <= 0:
        raise ConfigError(f"QUEUE_TIMEOUT_SECONDS must be positive, got {timeout}")

    log_level = os.environ.get("LOG_LEVEL", "INFO").strip().upper()
    if log_level not in LOG_LEVELS:
        raise ConfigError(f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got '{log_level}'")

    return Settings(
        secret_key=secret_key,
        default_queue=os.environ.get("DEFAULT_QUEUE") or "5v5",
        queue_timeout_seconds=timeout,
        avoid_highlight=str_to_bool(os.environ.get("AVOID_HIGHLIGHT", "false")),
        redis_url=os.environ.get("REDIS_URL") or None,
        log_level=log_level,
        host=os.environ.get("HOST", "0.0.0.0"),
        port=_int_env("PORT", 5000),
    )
