from __future__ import annotations

import asyncio
import json
import logging
import sqlite3
from contextlib import closing
from pathlib import Path
from typing import Any

from ..models.subscription import Subscription

logger = logging.getLogger("weather_bot.storage")


class StorageError(RuntimeError):
    """Raised when the durable store cannot be read or written."""


class JsonStorage:
    """Keeps every subscription in a single JSON document."""

    def __init__(self, path: Path) -> None:
        self._path = path
        self._lock = asyncio.Lock()

    def initialize(self) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            if not self._path.exists():
                self._write([])
        except OSError as exc:
            raise StorageError(f"cannot prepare {self._path}: {exc}") from exc

    async def load_all(self) -> list[Subscription]:
        async with self._lock:
            try:
                items = await asyncio.to_thread(self._read)
            except (OSError, ValueError) as exc:
                raise StorageError(f"cannot read {self._path}: {exc}") from exc
        result: list[Subscription] = []
        for item in items:
            try:
                result.append(Subscription.from_dict(item))
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("skipping malformed subscription %r: %s", item, exc)
        return result

    async def upsert(self, subscription: Subscription) -> None:
        async with self._lock:
            try:
                await asyncio.to_thread(self._upsert_sync, subscription)
            except (OSError, ValueError) as exc:
                raise StorageError(f"cannot write {self._path}: {exc}") from exc

    def _upsert_sync(self, subscription: Subscription) -> None:
        items = [item for item in self._read() if item.get("chat_id") != subscription.chat_id]
        items.append(subscription.as_dict())
        self._write(items)

    def _read(self) -> list[dict[str, Any]]:
        if not self._path.exists():
            return []
        data = json.loads(self._path.read_text(encoding="utf-8"))
        if not isinstance(data, list):
            raise ValueError("subscriptions document must be a list")
        return data

    def _write(self, items: list[dict[str, Any]]) -> None:
        tmp = self._path.with_suffix(".tmp")
        tmp.write_text(json.dumps(items, ensure_ascii=False, indent=2), encoding="utf-8")
        tmp.replace(self._path)


class SQLiteStorage:
    """One row per chat in the ``subscriptions`` table."""

    def __init__(self, path: Path, table: str = "subscriptions") -> None:
        self._path = path
        self._table = table
        self._lock = asyncio.Lock()

    def initialize(self) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with closing(sqlite3.connect(self._path)) as conn, conn:
                conn.execute(
                    f"CREATE TABLE IF NOT EXISTS {self._table} (\n"
                    "    chat_id INTEGER PRIMARY KEY,\n"
                    "    latitude REAL NOT NULL,\n"
                    "    longitude REAL NOT NULL,\n"
                    "    send_time TEXT NOT NULL\n"
                    ")"
                )
        except (OSError, sqlite3.Error) as exc:
            raise StorageError(f"cannot open database {self._path}: {exc}") from exc

    async def load_all(self) -> list[Subscription]:
        async with self._lock:
            try:
                rows = await asyncio.to_thread(self._fetch_rows)
            except sqlite3.Error as exc:
                raise StorageError(f"cannot load subscriptions: {exc}") from exc
        result: list[Subscription] = []
        for row in rows:
            try:
                result.append(
                    Subscription(
                        chat_id=int(row[0]),
                        latitude=float(row[1]),
                        longitude=float(row[2]),
                        send_time=str(row[3]),
                    )
                )
            except (TypeError, ValueError) as exc:
                logger.warning("skipping malformed row %r: %s", row, exc)
        return result

    def _fetch_rows(self) -> list[tuple[Any, ...]]:
        with closing(sqlite3.connect(self._path)) as conn:
            cursor = conn.execute(
                f"SELECT chat_id, latitude, longitude, send_time FROM {self._table}"
            )
            return cursor.fetchall()

    async def upsert(self, subscription: Subscription) -> None:
        async with self._lock:
            try:
                await asyncio.to_thread(self._write_row, subscription)
            except sqlite3.Error as exc:
                raise StorageError(
                    f"cannot save subscription {subscription.chat_id}: {exc}"
                ) from exc

    def _write_row(self, subscription: Subscription) -> None:
        with closing(sqlite3.connect(self._path)) as conn, conn:
            conn.execute(
                f"INSERT INTO {self._table} (chat_id, latitude, longitude, send_time)\n"
                "VALUES (?, ?, ?, ?)\n"
                "ON CONFLICT(chat_id) DO UPDATE SET\n"
                "    latitude = excluded.latitude,\n"
                "    longitude = excluded.longitude,\n"
                "    send_time = excluded.send_time",
                (
                    subscription.chat_id,
                    subscription.latitude,
                    subscription.longitude,
                    subscription.send_time,
                ),
            )
