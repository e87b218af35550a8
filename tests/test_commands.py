import asyncio

import pytest

from fakes import FakeWeather, GatedStorage, MemoryStorage
from weather_bot.models.subscription import Subscription
from weather_bot.services.commands import (
    CommandHandler,
    MessageKind,
    classify,
    command_argument,
)
from weather_bot.services.registry import SubscriptionRegistry


def _handler(storage=None, weather=None, language="ru"):
    registry = SubscriptionRegistry(storage or MemoryStorage())
    handler = CommandHandler(
        registry=registry,
        weather=weather or FakeWeather(),
        language=language,
        default_send_time="09:00",
    )
    return handler, registry


@pytest.mark.parametrize(
    "text, has_location, expected",
    [
        ("/start", False, MessageKind.START),
        ("/start@weather_bot", False, MessageKind.START),
        ("/help", False, MessageKind.HELP),
        (None, True, MessageKind.LOCATION),
        ("/settime 07:30", False, MessageKind.SET_TIME),
        ("/settime", False, MessageKind.SET_TIME),
        ("/current", False, MessageKind.CURRENT),
        ("/settings", False, MessageKind.SETTINGS),
        ("hello", False, MessageKind.UNKNOWN),
        ("/weather", False, MessageKind.UNKNOWN),
        (None, False, MessageKind.UNKNOWN),
    ],
)
def test_classify(text, has_location, expected):
    assert classify(text, has_location) is expected


def test_command_argument():
    assert command_argument("/settime 07:30") == "07:30"
    assert command_argument("/settime") == ""


def test_first_location_share_uses_default_time():
    async def scenario():
        handler, registry = _handler()
        reply = await handler.share_location(42, 55.75, 37.62)
        stored = await registry.get(42)
        assert stored == Subscription(chat_id=42, latitude=55.75, longitude=37.62, send_time="09:00")
        assert "09:00" in reply.text

    asyncio.run(scenario())


def test_location_reshare_resets_send_time():
    async def scenario():
        handler, registry = _handler()
        await handler.share_location(42, 55.75, 37.62)
        await handler.set_time(42, "07:30")
        await handler.share_location(42, 59.94, 30.31)
        stored = await registry.get(42)
        assert (stored.latitude, stored.longitude) == (59.94, 30.31)
        assert stored.send_time == "09:00"
        assert len(await registry.all()) == 1

    asyncio.run(scenario())


def test_settime_updates_only_the_time():
    async def scenario():
        handler, registry = _handler()
        await handler.share_location(42, 55.75, 37.62)
        reply = await handler.set_time(42, "23:59")
        stored = await registry.get(42)
        assert stored.send_time == "23:59"
        assert (stored.latitude, stored.longitude) == (55.75, 37.62)
        assert "23:59" in reply.text

    asyncio.run(scenario())


@pytest.mark.parametrize("argument", ["24:00", "12:60", "07.30", "ab:cd", "", "07:30 08:00"])
def test_settime_rejects_invalid_values(argument):
    async def scenario():
        storage = MemoryStorage()
        handler, registry = _handler(storage)
        await handler.share_location(42, 55.75, 37.62)
        writes = len(storage.writes)
        reply = await handler.set_time(42, argument)
        assert reply.text.startswith("❌")
        assert (await registry.get(42)).send_time == "09:00"
        assert len(storage.writes) == writes

    asyncio.run(scenario())


def test_settime_without_subscription_creates_nothing():
    async def scenario():
        storage = MemoryStorage()
        handler, registry = _handler(storage)
        reply = await handler.set_time(7, "07:30")
        assert reply.text == "❌ Сначала отправь мне свою геолокацию 📍!"
        assert await registry.get(7) is None
        assert storage.writes == []

    asyncio.run(scenario())


def test_current_weather_requires_location_and_reports():
    async def scenario():
        weather = FakeWeather()
        handler, _ = _handler(weather=weather, language="en")
        reply = await handler.current_weather(1)
        assert reply.text == "❌ Send me your location 📍 first!"
        assert weather.calls == []

        await handler.share_location(1, 55.75, 37.62)
        reply = await handler.current_weather(1)
        assert reply.text == "🌎 Current weather:\nweather at 55.75,37.62"

    asyncio.run(scenario())


def test_current_weather_failure_is_reported():
    async def scenario():
        handler, _ = _handler(weather=FakeWeather(failing_latitudes={55.75}), language="en")
        await handler.share_location(1, 55.75, 37.62)
        reply = await handler.current_weather(1)
        assert reply.text.startswith("⚠️ Could not fetch the weather")

    asyncio.run(scenario())


def test_unknown_command_depends_on_configuration():
    async def scenario():
        handler, _ = _handler(language="en")
        assert (await handler.unknown(5)).text == "❌ Send me your location 📍 first!"
        await handler.share_location(5, 10.0, 20.0)
        assert (await handler.unknown(5)).text == "⚠️ Unknown command!"

    asyncio.run(scenario())


def test_zero_coordinates_count_as_unconfigured():
    async def scenario():
        handler, registry = _handler(language="en")
        await registry.upsert(Subscription(chat_id=3, latitude=0.0, longitude=0.0))
        reply = await handler.set_time(3, "07:30")
        assert reply.text == "❌ Send me your location 📍 first!"
        assert (await registry.get(3)).send_time == "09:00"

    asyncio.run(scenario())


def test_storage_failure_is_reported_to_user():
    async def scenario():
        handler, registry = _handler(MemoryStorage(fail_writes=True), language="en")
        reply = await handler.share_location(1, 55.75, 37.62)
        assert reply.text.startswith("⚠️ Could not save")
        assert await registry.get(1) is None

    asyncio.run(scenario())


def test_start_offers_location_keyboard():
    async def scenario():
        handler, _ = _handler()
        reply = await handler.start(1)
        button = reply.reply_markup.keyboard[0][0]
        assert button.request_location is True

    asyncio.run(scenario())


def test_settings_shows_stored_values():
    async def scenario():
        handler, _ = _handler(language="en")
        await handler.share_location(1, 55.75, 37.62)
        reply = await handler.settings(1)
        assert "55.7500, 37.6200" in reply.text
        assert "09:00" in reply.text

    asyncio.run(scenario())


def test_failed_settime_keeps_previous_time():
    async def scenario():
        storage = MemoryStorage([Subscription(42, 55.75, 37.62, "09:00")])
        handler, registry = _handler(storage, language="en")
        await registry.load_all()
        storage.fail_writes = True

        reply = await handler.set_time(42, "07:30")

        assert reply.text.startswith("⚠️ Could not save")
        assert await registry.get(42) == Subscription(42, 55.75, 37.62, "09:00")
        assert storage.items[42].send_time == "09:00"
        assert [item for item in await registry.all() if item.send_time == "07:30"] == []

    asyncio.run(scenario())


def test_settime_keeps_location_shared_meanwhile():
    async def scenario():
        storage = GatedStorage([Subscription(42, 10.0, 10.0, "09:00")], gated_chats={1})
        handler, registry = _handler(storage)
        await registry.load_all()

        # another chat's write holds the registry lock until the gate opens
        holder = asyncio.create_task(registry.upsert(Subscription(1, 1.0, 1.0)))
        await asyncio.sleep(0)
        set_time = asyncio.create_task(handler.set_time(42, "07:30"))
        share = asyncio.create_task(handler.share_location(42, 55.75, 37.62))
        for _ in range(3):
            await asyncio.sleep(0)
        storage.gate.set()
        await asyncio.gather(holder, set_time, share)

        stored = await registry.get(42)
        assert (stored.latitude, stored.longitude) == (55.75, 37.62)
        assert stored.send_time in {"07:30", "09:00"}
        assert storage.items[42] == stored

    asyncio.run(scenario())
