from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from zoneinfo import ZoneInfo

from ..locales import get_text
from ..models.subscription import Subscription
from ..utils.metrics import MetricsCollector
from ..utils.timeparse import format_slot, local_now, to_local
from .registry import SubscriptionRegistry
from .telegram import TelegramSender
from .weather import WeatherClient, WeatherError

logger = logging.getLogger("weather_bot.services.delivery")
audit_logger = logging.getLogger("weather_bot.audit")


class DeliveryService:
    """Sends the daily forecast to every subscription due in the current minute."""

    def __init__(
        self,
        *,
        registry: SubscriptionRegistry,
        weather: WeatherClient,
        sender: TelegramSender,
        metrics: MetricsCollector,
        language: str = "ru",
        timezone: ZoneInfo | None = None,
        concurrency: int = 8,
    ) -> None:
        self._registry = registry
        self._weather = weather
        self._sender = sender
        self._metrics = metrics
        self._language = language
        self._timezone = timezone
        self._semaphore = asyncio.Semaphore(max(1, concurrency))
        self._last_slot: tuple[str, str] | None = None

    def slot_for(self, moment: datetime) -> str:
        return format_slot(moment, self._timezone)

    async def tick(self, now: datetime | None = None) -> int:
        moment = to_local(now or local_now(self._timezone), self._timezone)
        slot = self.slot_for(moment)
        day = moment.date().isoformat()
        key = (day, slot)
        if key == self._last_slot:
            logger.debug("slot %s %s already dispatched", day, slot)
            return 0
        self._last_slot = key
        await self._metrics.set(subscriptions=len(self._registry))
        return await self.dispatch(slot, day=day)

    async def dispatch(self, slot: str, *, day: str | None = None) -> int:
        subscriptions = [item for item in await self._registry.all() if item.send_time == slot]
        if not subscriptions:
            return 0
        logger.info("dispatching %s forecasts for %s", len(subscriptions), slot)
        results = await asyncio.gather(
            *(self._deliver(item, slot, day) for item in subscriptions)
        )
        delivered = sum(1 for ok in results if ok)
        await self._metrics.incr(deliveries=delivered)
        return delivered

    async def _deliver(self, subscription: Subscription, slot: str, day: str | None) -> bool:
        async with self._semaphore:
            try:
                report = await self._weather.fetch(subscription.latitude, subscription.longitude)
            except WeatherError as exc:
                await self._metrics.incr(weather_failures=1)
                logger.warning("skipping chat_id=%s at %s: %s", subscription.chat_id, slot, exc)
                return False
            text = f"{get_text(self._language, 'daily_header')}\n{report}"
            op_id = f"daily:{subscription.chat_id}:{day or '-'}:{slot}"
            sent = await self._sender.send_text(op_id, subscription.chat_id, text)
        if sent:
            audit_logger.info(
                '{"event":"FORECAST_SENT","chat_id":%s,"slot":"%s"}', subscription.chat_id, slot
            )
        return sent
