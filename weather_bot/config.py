"""Application configuration helpers for the weather bot."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Tuple

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .utils.timeparse import parse_send_time


_logger = logging.getLogger("weather_bot.config")

PROVIDERS: Tuple[str, ...] = ("open-meteo", "yandex")
STORAGE_BACKENDS: Tuple[str, ...] = ("sqlite", "json")
LANGUAGES: Tuple[str, ...] = ("ru", "en")


class ConfigError(RuntimeError):
    """Raised when application configuration is invalid."""


def _read_int(name: str, default: int, *, min_value: int | None = None) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        value = default
    else:
        try:
            value = int(raw)
        except ValueError as exc:
            raise ConfigError(f"{name} must be an integer") from exc
    if min_value is not None and value < min_value:
        raise ConfigError(f"{name} must be >= {min_value}")
    return value


def _read_float(name: str, default: float, *, min_value: float | None = None) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        value = default
    else:
        try:
            value = float(raw)
        except ValueError as exc:
            raise ConfigError(f"{name} must be a number") from exc
    if min_value is not None and value < min_value:
        raise ConfigError(f"{name} must be >= {min_value}")
    return value


@dataclass(slots=True)
class BotSettings:
    """Telegram runtime settings."""

    token: str
    language: str = "ru"


@dataclass(slots=True)
class WeatherSettings:
    """Weather provider selection and request limits."""

    provider: str = "open-meteo"
    api_key: str = ""
    timeout: float = 10.0


@dataclass(slots=True)
class DeliverySettings:
    """Daily delivery behaviour."""

    default_send_time: str = "09:00"
    concurrency: int = 8
    timezone: ZoneInfo | None = None


@dataclass(slots=True)
class Config:
    """Container for application configuration."""

    bot: BotSettings
    weather: WeatherSettings
    delivery: DeliverySettings
    storage_backend: str
    storage_path: Path
    logs_dir: Path | None = None


def parse_database_url(raw: str | None) -> Path:
    """Return the file path behind ``sqlite:///path`` or a bare path."""

    if raw is None or not raw.strip():
        return Path("data/weather_bot.db")
    value = raw.strip()
    if "://" in value:
        scheme, _, rest = value.partition("://")
        if scheme.lower() not in ("sqlite", "file"):
            raise ConfigError(f"DATABASE_URL scheme {scheme!r} is not supported")
        # sqlite:///relative.db -> "/relative.db", sqlite:////abs.db -> "//abs.db"
        if rest.startswith("//"):
            rest = rest[1:]
        elif rest.startswith("/"):
            rest = rest[1:]
        value = rest
    if not value:
        raise ConfigError("DATABASE_URL does not contain a path")
    return Path(value).expanduser()


def _load_timezone(name: str | None) -> ZoneInfo | None:
    if not name or not name.strip():
        return None
    try:
        return ZoneInfo(name.strip())
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ConfigError(f"Unknown timezone {name!r}") from exc


def _validate_config(config: Config) -> None:
    if not config.bot.token:
        raise ConfigError("BOT_TOKEN must not be empty")
    if config.bot.language not in LANGUAGES:
        raise ConfigError(f"LOCALE must be one of {', '.join(LANGUAGES)}")
    if config.weather.provider not in PROVIDERS:
        raise ConfigError(f"WEATHER_PROVIDER must be one of {', '.join(PROVIDERS)}")
    if config.weather.provider == "yandex" and not config.weather.api_key:
        raise ConfigError("WEATHER_API_KEY must be set for the yandex provider")
    if config.storage_backend not in STORAGE_BACKENDS:
        raise ConfigError(f"BOT_STORAGE_BACKEND must be one of {', '.join(STORAGE_BACKENDS)}")
    if config.storage_path.exists() and config.storage_path.is_dir():
        raise ConfigError("DATABASE_URL must point to a file path")


def log_summary(config: Config) -> None:
    timezone = config.delivery.timezone
    timezone_name = getattr(timezone, "key", "local") if timezone else "local"
    _logger.info(
        "Configuration loaded: storage=%s:%s, provider=%s, timeout=%.1fs, timezone=%s, default time=%s, concurrency=%s, locale=%s",
        config.storage_backend,
        config.storage_path,
        config.weather.provider,
        config.weather.timeout,
        timezone_name,
        config.delivery.default_send_time,
        config.delivery.concurrency,
        config.bot.language,
    )


def load_config() -> Config:
    """Load configuration from environment variables."""

    token = (os.getenv("BOT_TOKEN") or os.getenv("TELEGRAM_BOT_TOKEN") or "").strip()
    if not token:
        raise ConfigError("BOT_TOKEN environment variable must be set")

    storage_backend = (os.getenv("BOT_STORAGE_BACKEND") or "sqlite").strip().lower()
    storage_path = parse_database_url(os.getenv("DATABASE_URL"))
    if storage_backend == "json" and not os.getenv("DATABASE_URL"):
        storage_path = Path("data/subscriptions.json")

    raw_time = (os.getenv("DEFAULT_SEND_TIME") or "09:00").strip()
    default_send_time = parse_send_time(raw_time)
    if default_send_time is None:
        raise ConfigError("DEFAULT_SEND_TIME must use HH:MM format")

    logs_raw = os.getenv("BOT_LOG_DIR")
    logs_dir = Path(logs_raw).expanduser() if logs_raw and logs_raw.strip() else None

    config = Config(
        bot=BotSettings(
            token=token,
            language=(os.getenv("LOCALE") or "ru").strip().lower()[:2] or "ru",
        ),
        weather=WeatherSettings(
            provider=(os.getenv("WEATHER_PROVIDER") or "open-meteo").strip().lower(),
            api_key=(os.getenv("WEATHER_API_KEY") or "").strip(),
            timeout=_read_float("WEATHER_TIMEOUT", 10.0, min_value=0.1),
        ),
        delivery=DeliverySettings(
            default_send_time=default_send_time,
            concurrency=_read_int("DELIVERY_CONCURRENCY", 8, min_value=1),
            timezone=_load_timezone(os.getenv("BOT_TIMEZONE")),
        ),
        storage_backend=storage_backend,
        storage_path=storage_path,
        logs_dir=logs_dir,
    )

    _validate_config(config)
    config.storage_path.parent.mkdir(parents=True, exist_ok=True)

    return config
