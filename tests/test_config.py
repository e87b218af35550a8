from pathlib import Path

import pytest

from weather_bot import config as config_module
from weather_bot.config import ConfigError, load_config, parse_database_url

ENV_VARS = (
    "BOT_TOKEN",
    "TELEGRAM_BOT_TOKEN",
    "DATABASE_URL",
    "BOT_STORAGE_BACKEND",
    "WEATHER_PROVIDER",
    "WEATHER_API_KEY",
    "WEATHER_TIMEOUT",
    "BOT_TIMEZONE",
    "DEFAULT_SEND_TIME",
    "DELIVERY_CONCURRENCY",
    "LOCALE",
    "BOT_LOG_DIR",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'weather.db'}")


def test_defaults(monkeypatch, tmp_path):
    monkeypatch.setenv("TELEGRAM_BOT_TOKEN", "123:abc")
    config = load_config()
    assert config.bot.token == "123:abc"
    assert config.bot.language == "ru"
    assert config.weather.provider == "open-meteo"
    assert config.delivery.default_send_time == "09:00"
    assert config.delivery.timezone is None
    assert config.storage_backend == "sqlite"
    assert config.storage_path == tmp_path / "weather.db"


def test_missing_token_is_fatal():
    with pytest.raises(ConfigError):
        load_config()


def test_yandex_requires_api_key(monkeypatch):
    monkeypatch.setenv("BOT_TOKEN", "123:abc")
    monkeypatch.setenv("WEATHER_PROVIDER", "yandex")
    with pytest.raises(ConfigError):
        load_config()
    monkeypatch.setenv("WEATHER_API_KEY", "key")
    assert load_config().weather.api_key == "key"


@pytest.mark.parametrize(
    "name, value",
    [
        ("DEFAULT_SEND_TIME", "25:00"),
        ("DELIVERY_CONCURRENCY", "zero"),
        ("DELIVERY_CONCURRENCY", "0"),
        ("BOT_TIMEZONE", "Mars/Olympus"),
        ("WEATHER_PROVIDER", "weather.com"),
        ("LOCALE", "de"),
        ("BOT_STORAGE_BACKEND", "postgres"),
        ("DATABASE_URL", "postgres://localhost/weather"),
    ],
)
def test_invalid_values_are_fatal(monkeypatch, name, value):
    monkeypatch.setenv("BOT_TOKEN", "123:abc")
    monkeypatch.setenv(name, value)
    with pytest.raises(ConfigError):
        load_config()


def test_default_send_time_is_normalized(monkeypatch):
    monkeypatch.setenv("BOT_TOKEN", "123:abc")
    monkeypatch.setenv("DEFAULT_SEND_TIME", "7:5")
    assert load_config().delivery.default_send_time == "07:05"


@pytest.mark.parametrize(
    "raw, expected",
    [
        (None, Path("data/weather_bot.db")),
        ("sqlite:///data/bot.db", Path("data/bot.db")),
        ("sqlite:////var/lib/bot.db", Path("/var/lib/bot.db")),
        ("bot.db", Path("bot.db")),
    ],
)
def test_parse_database_url(raw, expected):
    assert parse_database_url(raw) == expected


def test_summary_is_logged(monkeypatch, caplog):
    monkeypatch.setenv("BOT_TOKEN", "123:abc")
    config = load_config()
    with caplog.at_level("INFO", logger=config_module._logger.name):
        config_module.log_summary(config)
    assert "Configuration loaded" in caplog.text
