from __future__ import annotations

import asyncio
import logging
import sys

from aiogram.exceptions import TelegramUnauthorizedError
from aiogram.utils.token import TokenValidationError
from dotenv import load_dotenv

from ..config import ConfigError
from ..storage.base import StorageError
from .startup import create_application

logger = logging.getLogger("weather_bot.core.main")


def run() -> None:
    """Entry point for launching the bot."""
    load_dotenv()
    try:
        asyncio.run(_async_run())
    except (ConfigError, StorageError, TokenValidationError, TelegramUnauthorizedError) as exc:
        logger.critical("startup failed: %s", exc)
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")


async def _async_run() -> None:
    app = create_application()
    await app.run()
