from __future__ import annotations

import logging
import time
from typing import Any

from aiogram.exceptions import TelegramAPIError

from ..utils.metrics import MetricsCollector

logger = logging.getLogger("weather_bot.services.telegram")
audit_logger = logging.getLogger("weather_bot.audit")


class TelegramSender:
    """Single-attempt sender; a failed call is logged and reported as ``False``."""

    def __init__(self, *, bot, metrics: MetricsCollector) -> None:
        self._bot = bot
        self._metrics = metrics

    async def send_text(self, op_id: str, chat_id: int, text: str, **kwargs: Any) -> bool:
        started = time.monotonic()
        try:
            await self._bot.send_message(chat_id=chat_id, text=text, **kwargs)
        except TelegramAPIError as exc:
            await self._metrics.incr(send_failures=1)
            logger.warning("telegram call failed op_id=%s chat_id=%s error=%s", op_id, chat_id, exc)
            return False
        await self._metrics.incr(sends=1)
        await self._metrics.record_latency(time.monotonic() - started)
        audit_logger.info('{"event":"MESSAGE_SENT","op_id":"%s","chat_id":%s}', op_id, chat_id)
        return True
