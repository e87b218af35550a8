from __future__ import annotations

from aiogram import Router
from aiogram.types import Message

from ..services.commands import CommandHandler, MessageKind, command_argument
from ..services.telegram import TelegramSender
from ._common import answer, kind_is


def create_router(commands: CommandHandler, sender: TelegramSender) -> Router:
    router = Router(name="settings")

    @router.message(kind_is(MessageKind.SET_TIME))
    async def handle_settime(message: Message) -> None:
        reply = await commands.set_time(message.chat.id, command_argument(message.text))
        await answer(sender, "settime", message, reply)

    @router.message(kind_is(MessageKind.SETTINGS))
    async def handle_settings(message: Message) -> None:
        reply = await commands.settings(message.chat.id)
        await answer(sender, "settings", message, reply)

    return router
