from __future__ import annotations

from aiogram import Dispatcher

from ..routers import fallback, location, settings, start, weather
from ..services.commands import CommandHandler
from ..services.telegram import TelegramSender


def create_dispatcher(commands: CommandHandler, sender: TelegramSender) -> Dispatcher:
    dp = Dispatcher()
    for module in (start, location, settings, weather):
        dp.include_router(module.create_router(commands, sender))
    # catch-all, must stay last
    dp.include_router(fallback.create_router(commands, sender))
    return dp
