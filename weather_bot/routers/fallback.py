from __future__ import annotations

from aiogram import Router
from aiogram.types import Message

from ..services.commands import CommandHandler
from ..services.telegram import TelegramSender
from ._common import answer


def create_router(commands: CommandHandler, sender: TelegramSender) -> Router:
    router = Router(name="fallback")

    @router.message()
    async def handle_unknown(message: Message) -> None:
        reply = await commands.unknown(message.chat.id)
        await answer(sender, "unknown", message, reply)

    return router
