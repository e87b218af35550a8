from __future__ import annotations

import asyncio
import logging
from typing import Callable, Dict

from ..models.subscription import Subscription
from ..storage.base import JsonStorage, SQLiteStorage, StorageError

logger = logging.getLogger("weather_bot.services.registry")
audit_logger = logging.getLogger("weather_bot.audit")


class SubscriptionRegistry:
    """In-memory view of every subscription, written through to the store.

    The lock serializes every read and write. A write updates memory first and
    then the durable store before the lock is released, so a concurrent reader
    never sees a write that is only half applied. If the store rejects the
    write, the previous record is put back before the error is raised.
    Records are immutable, which means a snapshot returned by :meth:`all`
    never changes under its reader.
    """

    def __init__(self, storage: JsonStorage | SQLiteStorage) -> None:
        self._storage = storage
        self._items: Dict[int, Subscription] = {}
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._items)

    async def load_all(self) -> Dict[int, Subscription]:
        try:
            loaded = await self._storage.load_all()
        except StorageError:
            logger.exception("failed to load subscriptions, starting with an empty registry")
            loaded = []
        async with self._lock:
            self._items = {item.chat_id: item for item in loaded}
            snapshot = dict(self._items)
        logger.info("loaded %s subscriptions", len(snapshot))
        return snapshot

    async def get(self, chat_id: int) -> Subscription | None:
        async with self._lock:
            return self._items.get(chat_id)

    async def upsert(self, subscription: Subscription) -> None:
        async with self._lock:
            await self._write(subscription)

    async def update(
        self,
        chat_id: int,
        change: Callable[[Subscription | None], Subscription | None],
    ) -> Subscription | None:
        """Apply ``change`` to the current record and save the result.

        The read, the change and the write happen under one lock acquisition.
        ``change`` returns ``None`` to leave the record untouched, in which case
        ``None`` is returned and nothing is written.
        """

        async with self._lock:
            updated = change(self._items.get(chat_id))
            if updated is None:
                return None
            await self._write(updated)
            return updated

    async def _write(self, subscription: Subscription) -> None:
        # caller holds the lock; memory is rolled back if the store rejects the write
        previous = self._items.get(subscription.chat_id)
        self._items[subscription.chat_id] = subscription
        try:
            await self._storage.upsert(subscription)
        except StorageError:
            if previous is None:
                self._items.pop(subscription.chat_id, None)
            else:
                self._items[subscription.chat_id] = previous
            logger.exception("failed to persist subscription chat_id=%s", subscription.chat_id)
            raise
        audit_logger.info(
            '{"event":"SUBSCRIPTION_SAVED","chat_id":%s,"send_time":"%s"}',
            subscription.chat_id,
            subscription.send_time,
        )

    async def all(self) -> list[Subscription]:
        async with self._lock:
            return list(self._items.values())
