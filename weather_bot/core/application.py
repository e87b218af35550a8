from __future__ import annotations

import logging
from contextlib import suppress

from aiogram import Bot

from ..config import Config
from ..jobs.scheduler import Scheduler
from ..services.commands import CommandHandler
from ..services.delivery import DeliveryService
from ..services.registry import SubscriptionRegistry
from ..services.telegram import TelegramSender
from ..services.weather import create_weather_client
from ..storage.factory import create_storage
from ..utils.metrics import MetricsCollector
from .dispatcher import create_dispatcher

logger = logging.getLogger("weather_bot.core.application")


class Application:
    def __init__(self, *, config: Config) -> None:
        self._config = config

        self._storage = create_storage(config)
        # raises StorageError when the store is unreachable
        self._storage.initialize()

        self._bot = Bot(token=config.bot.token)
        self._metrics = MetricsCollector()
        self._sender = TelegramSender(bot=self._bot, metrics=self._metrics)
        self._registry = SubscriptionRegistry(self._storage)
        self._weather = create_weather_client(
            config.weather.provider,
            language=config.bot.language,
            timeout=config.weather.timeout,
            api_key=config.weather.api_key,
        )
        self._commands = CommandHandler(
            registry=self._registry,
            weather=self._weather,
            language=config.bot.language,
            default_send_time=config.delivery.default_send_time,
        )
        self._delivery = DeliveryService(
            registry=self._registry,
            weather=self._weather,
            sender=self._sender,
            metrics=self._metrics,
            language=config.bot.language,
            timezone=config.delivery.timezone,
            concurrency=config.delivery.concurrency,
        )
        self._scheduler = Scheduler(
            settings=config.delivery,
            delivery_service=self._delivery,
            metrics=self._metrics,
        )
        self._dispatcher = create_dispatcher(self._commands, self._sender)

    async def run(self) -> None:
        await self._registry.load_all()
        await self._metrics.set(subscriptions=len(self._registry))
        await self._scheduler.start()
        try:
            await self._dispatcher.start_polling(self._bot)
        finally:
            with suppress(Exception):
                await self._scheduler.shutdown()
            await self._weather.close()
            await self._bot.session.close()
            logger.info("bot stopped")
