from __future__ import annotations

from aiogram import Router
from aiogram.types import Message

from ..services.commands import CommandHandler, MessageKind
from ..services.telegram import TelegramSender
from ._common import answer, kind_is


def create_router(commands: CommandHandler, sender: TelegramSender) -> Router:
    router = Router(name="location")

    @router.message(kind_is(MessageKind.LOCATION))
    async def handle_location(message: Message) -> None:
        location = message.location
        reply = await commands.share_location(message.chat.id, location.latitude, location.longitude)
        await answer(sender, "location", message, reply)

    return router
