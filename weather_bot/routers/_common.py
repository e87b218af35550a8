from __future__ import annotations

from typing import Callable

from aiogram.types import Message

from ..services.commands import MessageKind, Reply, classify
from ..services.telegram import TelegramSender


def kind_is(kind: MessageKind) -> Callable[[Message], bool]:
    def _check(message: Message) -> bool:
        return classify(message.text, message.location is not None) is kind

    return _check


async def answer(sender: TelegramSender, op: str, message: Message, reply: Reply) -> bool:
    return await sender.send_text(
        f"{op}:{message.chat.id}:{message.message_id}",
        message.chat.id,
        reply.text,
        reply_markup=reply.reply_markup,
    )
