"""Weather provider clients.

Each client performs a single GET request and turns the response into the
two-line text shown to users. Condition indicators are mapped through fixed
tables; an indicator missing from the table renders as an empty phrase so a
provider adding new codes never breaks delivery.
"""
from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Hashable, Mapping

import aiohttp

from ..locales import get_text

logger = logging.getLogger("weather_bot.services.weather")

OPEN_METEO_URL = "https://api.open-meteo.com/v1/forecast"
YANDEX_WEATHER_URL = "https://api.weather.yandex.ru/v2/forecast"
YANDEX_KEY_HEADER = "X-Yandex-Weather-Key"


class WeatherError(RuntimeError):
    """Raised when weather data cannot be fetched or decoded."""


# WMO weather interpretation codes used by Open-Meteo
WMO_CONDITIONS: Mapping[str, Mapping[int, str]] = MappingProxyType(
    {
        "ru": MappingProxyType(
            {
                0: "Чистое небо",
                1: "Преимущественно ясно",
                2: "Переменная облачность",
                3: "Пасмурно",
                45: "Туман",
                48: "Изморозь",
                51: "Морось слабая и интенсивная",
                53: "Морось умеренная",
                55: "Морось интенсивная",
                56: "Замерзающая морось",
                57: "Сильная замерзающая морось",
                61: "Дождь слабый",
                63: "Дождь умеренный",
                65: "Дождь интенсивный",
                66: "Замерзающий дождь слабый",
                67: "Замерзающий дождь сильный",
                71: "Снегопад слабый",
                73: "Снегопад умеренный",
                75: "Снегопад сильный",
                77: "Снежные зерна",
                80: "Ливневые дожди слабые",
                81: "Ливневые дожди умеренные",
                82: "Ливневые дожди сильные",
                85: "Снежные ливни слабые",
                86: "Снежные ливни сильные",
                95: "Гроза",
                96: "Гроза с небольшим градом",
                99: "Гроза с сильным градом",
            }
        ),
        "en": MappingProxyType(
            {
                0: "Clear sky",
                1: "Mainly clear",
                2: "Partly cloudy",
                3: "Overcast",
                45: "Fog",
                48: "Depositing rime fog",
                51: "Light drizzle",
                53: "Moderate drizzle",
                55: "Dense drizzle",
                56: "Light freezing drizzle",
                57: "Dense freezing drizzle",
                61: "Slight rain",
                63: "Moderate rain",
                65: "Heavy rain",
                66: "Light freezing rain",
                67: "Heavy freezing rain",
                71: "Slight snowfall",
                73: "Moderate snowfall",
                75: "Heavy snowfall",
                77: "Snow grains",
                80: "Slight rain showers",
                81: "Moderate rain showers",
                82: "Violent rain showers",
                85: "Slight snow showers",
                86: "Heavy snow showers",
                95: "Thunderstorm",
                96: "Thunderstorm with slight hail",
                99: "Thunderstorm with heavy hail",
            }
        ),
    }
)

YANDEX_CONDITIONS: Mapping[str, Mapping[str, str]] = MappingProxyType(
    {
        "ru": MappingProxyType(
            {
                "clear": "Ясно",
                "partly-cloudy": "Малооблачно",
                "cloudy": "Облачно с прояснениями",
                "overcast": "Пасмурно",
                "light-rain": "Небольшой дождь",
                "rain": "Дождь",
                "heavy-rain": "Сильный дождь",
                "showers": "Ливень",
                "wet-snow": "Дождь со снегом",
                "light-snow": "Небольшой снег",
                "snow": "Снег",
                "snow-showers": "Снегопад",
                "hail": "Град",
                "thunderstorm": "Гроза",
                "thunderstorm-with-rain": "Дождь с грозой",
                "thunderstorm-with-hail": "Гроза с градом",
            }
        ),
        "en": MappingProxyType(
            {
                "clear": "Clear",
                "partly-cloudy": "Partly cloudy",
                "cloudy": "Cloudy with clearings",
                "overcast": "Overcast",
                "light-rain": "Light rain",
                "rain": "Rain",
                "heavy-rain": "Heavy rain",
                "showers": "Showers",
                "wet-snow": "Sleet",
                "light-snow": "Light snow",
                "snow": "Snow",
                "snow-showers": "Snowfall",
                "hail": "Hail",
                "thunderstorm": "Thunderstorm",
                "thunderstorm-with-rain": "Rain with thunderstorm",
                "thunderstorm-with-hail": "Thunderstorm with hail",
            }
        ),
    }
)


@dataclass(frozen=True, slots=True)
class WeatherReport:
    temperature: float
    condition: Hashable


def describe_condition(
    table: Mapping[str, Mapping[Any, str]], language: str, condition: Hashable
) -> str:
    phrases = table.get(language) or table["ru"]
    return phrases.get(condition, "")


def format_report(phrase: str, temperature: float, language: str) -> str:
    return get_text(language, "weather_report", condition=phrase, temperature=f"{temperature:.1f}")


class WeatherClient(ABC):
    """Base class holding the shared aiohttp session and request plumbing."""

    name = "weather"
    conditions: Mapping[str, Mapping[Any, str]] = MappingProxyType({"ru": MappingProxyType({})})

    def __init__(
        self,
        *,
        language: str = "ru",
        timeout: float = 10.0,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self._language = language
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._session = session
        self._owns_session = session is None

    async def fetch(self, latitude: float, longitude: float) -> str:
        payload = await self._request(latitude, longitude)
        report = self.parse(payload)
        phrase = describe_condition(self.conditions, self._language, report.condition)
        return format_report(phrase, report.temperature, self._language)

    async def close(self) -> None:
        if self._session is not None and self._owns_session:
            await self._session.close()
        self._session = None

    @abstractmethod
    def _request_args(self, latitude: float, longitude: float) -> tuple[str, dict[str, str], dict[str, str]]:
        """Return the URL, query parameters and headers for one request."""

    @abstractmethod
    def parse(self, payload: Any) -> WeatherReport:
        """Extract temperature and condition from a decoded response."""

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
            self._owns_session = True
        return self._session

    async def _request(self, latitude: float, longitude: float) -> Any:
        url, params, headers = self._request_args(latitude, longitude)
        session = self._get_session()
        try:
            async with session.get(url, params=params, headers=headers, timeout=self._timeout) as resp:
                resp.raise_for_status()
                return await resp.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as exc:
            logger.warning("%s request failed lat=%.2f lon=%.2f: %r", self.name, latitude, longitude, exc)
            raise WeatherError(f"{self.name} request failed: {exc!r}") from exc


class OpenMeteoClient(WeatherClient):
    name = "open-meteo"
    conditions = WMO_CONDITIONS

    def _request_args(self, latitude: float, longitude: float) -> tuple[str, dict[str, str], dict[str, str]]:
        params = {
            "latitude": f"{latitude:.2f}",
            "longitude": f"{longitude:.2f}",
            "current": "temperature_2m,weather_code",
        }
        return OPEN_METEO_URL, params, {}

    def parse(self, payload: Any) -> WeatherReport:
        try:
            current = payload["current"]
            temperature = float(current["temperature_2m"])
            code = int(current["weather_code"])
        except (KeyError, TypeError, ValueError) as exc:
            raise WeatherError(f"unexpected open-meteo payload: {exc!r}") from exc
        return WeatherReport(temperature=temperature, condition=code)


class YandexWeatherClient(WeatherClient):
    name = "yandex"
    conditions = YANDEX_CONDITIONS

    def __init__(self, *, api_key: str, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._api_key = api_key

    def _request_args(self, latitude: float, longitude: float) -> tuple[str, dict[str, str], dict[str, str]]:
        params = {"lat": f"{latitude:.2f}", "lon": f"{longitude:.2f}"}
        return YANDEX_WEATHER_URL, params, {YANDEX_KEY_HEADER: self._api_key}

    def parse(self, payload: Any) -> WeatherReport:
        try:
            fact = payload["fact"]
            temperature = float(fact["temp"])
            condition = str(fact.get("condition") or "")
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            raise WeatherError(f"unexpected yandex payload: {exc!r}") from exc
        return WeatherReport(temperature=temperature, condition=condition)


def create_weather_client(
    provider: str,
    *,
    language: str = "ru",
    timeout: float = 10.0,
    api_key: str = "",
) -> WeatherClient:
    if provider == "yandex":
        return YandexWeatherClient(api_key=api_key, language=language, timeout=timeout)
    return OpenMeteoClient(language=language, timeout=timeout)
