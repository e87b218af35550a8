import asyncio
from types import SimpleNamespace

from fakes import FakeBot
from weather_bot.core.dispatcher import create_dispatcher
from weather_bot.routers._common import answer, kind_is
from weather_bot.services.commands import MessageKind, Reply
from weather_bot.services.telegram import TelegramSender
from weather_bot.utils.metrics import MetricsCollector


def _message(text=None, location=None, chat_id=10, message_id=1):
    return SimpleNamespace(
        text=text,
        location=location,
        chat=SimpleNamespace(id=chat_id),
        message_id=message_id,
    )


def test_kind_filters():
    assert kind_is(MessageKind.START)(_message("/start"))
    assert not kind_is(MessageKind.START)(_message("/current"))
    location = SimpleNamespace(latitude=55.75, longitude=37.62)
    assert kind_is(MessageKind.LOCATION)(_message(location=location))
    assert kind_is(MessageKind.SET_TIME)(_message("/settime@weather_bot 07:30"))


def test_answer_sends_to_message_chat():
    async def scenario():
        bot = FakeBot()
        sender = TelegramSender(bot=bot, metrics=MetricsCollector())
        ok = await answer(sender, "start", _message("/start", chat_id=77), Reply("hi"))
        assert ok
        assert bot.sent_messages == [{"chat_id": 77, "text": "hi", "reply_markup": None}]

    asyncio.run(scenario())


def test_failed_send_is_reported():
    async def scenario():
        metrics = MetricsCollector()
        sender = TelegramSender(bot=FakeBot(failing_chats={77}), metrics=metrics)
        assert not await sender.send_text("op", 77, "hi")
        assert (await metrics.snapshot()).send_failures == 1

    asyncio.run(scenario())


def test_dispatcher_keeps_fallback_last():
    sender = TelegramSender(bot=FakeBot(), metrics=MetricsCollector())
    commands = SimpleNamespace()
    dp = create_dispatcher(commands, sender)
    assert [router.name for router in dp.sub_routers] == [
        "start",
        "location",
        "settings",
        "weather",
        "fallback",
    ]
