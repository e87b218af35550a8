from __future__ import annotations

from aiogram import Router
from aiogram.types import Message

from ..services.commands import CommandHandler, MessageKind
from ..services.telegram import TelegramSender
from ._common import answer, kind_is


def create_router(commands: CommandHandler, sender: TelegramSender) -> Router:
    router = Router(name="start")

    @router.message(kind_is(MessageKind.START))
    async def handle_start(message: Message) -> None:
        reply = await commands.start(message.chat.id)
        await answer(sender, "start", message, reply)

    @router.message(kind_is(MessageKind.HELP))
    async def handle_help(message: Message) -> None:
        reply = await commands.help(message.chat.id)
        await answer(sender, "help", message, reply)

    return router
