from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Any

from ..keyboards.reply import location_keyboard
from ..locales import get_text
from ..models.subscription import Subscription
from ..storage.base import StorageError
from ..utils.timeparse import parse_send_time
from .registry import SubscriptionRegistry
from .weather import WeatherClient, WeatherError

logger = logging.getLogger("weather_bot.services.commands")


class MessageKind(enum.Enum):
    START = "start"
    HELP = "help"
    LOCATION = "location"
    SET_TIME = "settime"
    CURRENT = "current"
    SETTINGS = "settings"
    UNKNOWN = "unknown"


_COMMANDS = {
    "/start": MessageKind.START,
    "/help": MessageKind.HELP,
    "/settime": MessageKind.SET_TIME,
    "/current": MessageKind.CURRENT,
    "/settings": MessageKind.SETTINGS,
}


def command_name(text: str | None) -> str:
    """Return the leading ``/command`` of ``text`` without any ``@botname``."""

    if not text or not text.startswith("/"):
        return ""
    head = text.split(maxsplit=1)[0]
    return head.split("@", 1)[0].lower()


def command_argument(text: str | None) -> str:
    if not text:
        return ""
    parts = text.split(maxsplit=1)
    return parts[1] if len(parts) > 1 else ""


def classify(text: str | None, has_location: bool = False) -> MessageKind:
    if has_location:
        return MessageKind.LOCATION
    return _COMMANDS.get(command_name(text), MessageKind.UNKNOWN)


@dataclass(frozen=True, slots=True)
class Reply:
    text: str
    reply_markup: Any = None


class CommandHandler:
    """Turns classified chat messages into registry changes and replies."""

    def __init__(
        self,
        *,
        registry: SubscriptionRegistry,
        weather: WeatherClient,
        language: str = "ru",
        default_send_time: str = "09:00",
    ) -> None:
        self._registry = registry
        self._weather = weather
        self._language = language
        self._default_send_time = default_send_time

    def _text(self, key: str, **kwargs: str) -> str:
        return get_text(self._language, key, **kwargs)

    async def _configured(self, chat_id: int) -> Subscription | None:
        subscription = await self._registry.get(chat_id)
        if subscription is None or not subscription.is_configured:
            return None
        return subscription

    async def start(self, chat_id: int) -> Reply:
        return Reply(self._text("start"), reply_markup=location_keyboard(self._language))

    async def help(self, chat_id: int) -> Reply:
        return Reply(self._text("help"))

    async def share_location(self, chat_id: int, latitude: float, longitude: float) -> Reply:
        # every share resets the delivery time to the default
        subscription = Subscription(
            chat_id=chat_id,
            latitude=float(latitude),
            longitude=float(longitude),
            send_time=self._default_send_time,
        )
        try:
            await self._registry.upsert(subscription)
        except StorageError:
            return Reply(self._text("storage_failed"))
        logger.info("location saved chat_id=%s", chat_id)
        return Reply(self._text("location_saved", time=subscription.send_time))

    async def set_time(self, chat_id: int, argument: str | None) -> Reply:
        subscription = await self._configured(chat_id)
        if subscription is None:
            return Reply(self._text("location_required"))
        tokens = (argument or "").split()
        if len(tokens) != 1:
            return Reply(self._text("settime_usage"))
        send_time = parse_send_time(tokens[0])
        if send_time is None:
            return Reply(self._text("settime_invalid"))

        def change(current: Subscription | None) -> Subscription | None:
            # re-read under the registry lock so a location shared meanwhile is kept
            if current is None or not current.is_configured:
                return None
            return current.with_send_time(send_time)

        try:
            updated = await self._registry.update(chat_id, change)
        except StorageError:
            return Reply(self._text("storage_failed"))
        if updated is None:
            return Reply(self._text("location_required"))
        logger.info("send time changed chat_id=%s time=%s", chat_id, send_time)
        return Reply(self._text("settime_done", time=send_time))

    async def current_weather(self, chat_id: int) -> Reply:
        subscription = await self._configured(chat_id)
        if subscription is None:
            return Reply(self._text("location_required"))
        try:
            report = await self._weather.fetch(subscription.latitude, subscription.longitude)
        except WeatherError as exc:
            logger.warning("on-demand weather failed chat_id=%s: %s", chat_id, exc)
            return Reply(self._text("weather_unavailable"))
        return Reply(f"{self._text('current_header')}\n{report}")

    async def settings(self, chat_id: int) -> Reply:
        subscription = await self._configured(chat_id)
        if subscription is None:
            return Reply(self._text("location_required"))
        return Reply(
            self._text(
                "settings_template",
                latitude=f"{subscription.latitude:.4f}",
                longitude=f"{subscription.longitude:.4f}",
                time=subscription.send_time,
            )
        )

    async def unknown(self, chat_id: int) -> Reply:
        if await self._configured(chat_id) is None:
            return Reply(self._text("location_required"))
        return Reply(self._text("unknown_command"))
