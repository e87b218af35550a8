from __future__ import annotations

from dataclasses import dataclass
from typing import Dict


@dataclass(frozen=True)
class Texts:
    start: str
    help: str
    share_location_button: str
    location_saved: str
    location_required: str
    settime_usage: str
    settime_invalid: str
    settime_done: str
    current_header: str
    daily_header: str
    weather_report: str
    weather_unavailable: str
    storage_failed: str
    settings_template: str
    unknown_command: str


MESSAGES: Dict[str, Texts] = {
    "ru": Texts(
        start="👋 Привет! Отправь мне свою геолокацию 📍, и я каждый день буду присылать прогноз погоды.",
        help=(
            "Я умею:\n"
            "• 📍 Запоминать геолокацию — просто отправь её.\n"
            "• /settime HH:MM — изменить время ежедневного прогноза.\n"
            "• /current — показать погоду прямо сейчас.\n"
            "• /settings — показать сохранённые настройки."
        ),
        share_location_button="📍 Отправить геолокацию",
        location_saved=(
            "✅ Локация сохранена! По умолчанию прогноз погоды будет приходить в {time}.\n"
            "Ты можешь изменить время с помощью /settime HH:MM."
        ),
        location_required="❌ Сначала отправь мне свою геолокацию 📍!",
        settime_usage="❌ Некорректный формат. Используй /settime HH:MM",
        settime_invalid="❌ Некорректный формат времени. Используй формат HH:MM (например, /settime 07:30)",
        settime_done="✅ Время отправки погоды изменено на {time}",
        current_header="🌎 Текущая погода:",
        daily_header="🌎 Ежедневный прогноз:",
        weather_report="🌤 Погода: {condition}\n🌡 Температура: {temperature}°C",
        weather_unavailable="⚠️ Не удалось получить погоду, попробуй позже.",
        storage_failed="⚠️ Не удалось сохранить настройки, попробуй ещё раз.",
        settings_template="📍 Координаты: {latitude}, {longitude}\n⏰ Время прогноза: {time}",
        unknown_command="⚠️ Неизвестная команда!",
    ),
    "en": Texts(
        start="👋 Hi! Send me your location 📍 and I will send you a weather forecast every day.",
        help=(
            "I can:\n"
            "• 📍 Remember your location — just send it.\n"
            "• /settime HH:MM — change the daily forecast time.\n"
            "• /current — show the weather right now.\n"
            "• /settings — show your saved settings."
        ),
        share_location_button="📍 Share location",
        location_saved=(
            "✅ Location saved! The forecast will arrive at {time} by default.\n"
            "You can change the time with /settime HH:MM."
        ),
        location_required="❌ Send me your location 📍 first!",
        settime_usage="❌ Wrong format. Use /settime HH:MM",
        settime_invalid="❌ Invalid time. Use the HH:MM format (for example, /settime 07:30)",
        settime_done="✅ Forecast time changed to {time}",
        current_header="🌎 Current weather:",
        daily_header="🌎 Daily forecast:",
        weather_report="🌤 Weather: {condition}\n🌡 Temperature: {temperature}°C",
        weather_unavailable="⚠️ Could not fetch the weather, please try again later.",
        storage_failed="⚠️ Could not save your settings, please try again.",
        settings_template="📍 Coordinates: {latitude}, {longitude}\n⏰ Forecast time: {time}",
        unknown_command="⚠️ Unknown command!",
    ),
}


def get_text(language: str, key: str, **kwargs: str) -> str:
    texts = MESSAGES.get(language, MESSAGES["ru"])
    value = getattr(texts, key)
    if kwargs:
        return value.format(**kwargs)
    return value
