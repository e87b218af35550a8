from __future__ import annotations

import logging
from typing import Any

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from ..config import DeliverySettings
from ..services.delivery import DeliveryService
from ..utils.metrics import MetricsCollector

logger = logging.getLogger("weather_bot.jobs.scheduler")


class Scheduler:
    def __init__(
        self,
        *,
        settings: DeliverySettings,
        delivery_service: DeliveryService,
        metrics: MetricsCollector,
    ) -> None:
        options: dict[str, Any] = {}
        if settings.timezone is not None:
            options["timezone"] = settings.timezone
        self._scheduler = AsyncIOScheduler(**options)
        self._delivery = delivery_service
        self._metrics = metrics

    @property
    def running(self) -> bool:
        return self._scheduler.running

    async def start(self) -> None:
        self._scheduler.add_job(
            self._delivery_job,
            "cron",
            second=0,
            id="daily-delivery",
            max_instances=2,
            coalesce=True,
            misfire_grace_time=30,
            replace_existing=True,
        )
        self._scheduler.add_job(
            self._metrics_job,
            "interval",
            minutes=5,
            id="metrics-summary",
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )
        self._scheduler.start()
        logger.info("scheduler started")

    async def shutdown(self) -> None:
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
            logger.info("scheduler stopped")

    async def _delivery_job(self) -> None:
        try:
            await self._delivery.tick()
        except Exception:
            logger.exception("delivery tick failed")

    async def _metrics_job(self) -> None:
        await self._metrics.log_summary()
