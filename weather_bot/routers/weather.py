from __future__ import annotations

from aiogram import Router
from aiogram.types import Message

from ..services.commands import CommandHandler, MessageKind
from ..services.telegram import TelegramSender
from ._common import answer, kind_is


def create_router(commands: CommandHandler, sender: TelegramSender) -> Router:
    router = Router(name="weather")

    @router.message(kind_is(MessageKind.CURRENT))
    async def handle_current(message: Message) -> None:
        reply = await commands.current_weather(message.chat.id)
        await answer(sender, "current", message, reply)

    return router
