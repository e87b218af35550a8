from __future__ import annotations

from ..config import Config
from .base import JsonStorage, SQLiteStorage


def create_storage(config: Config) -> JsonStorage | SQLiteStorage:
    if config.storage_backend == "json":
        return JsonStorage(config.storage_path)
    return SQLiteStorage(config.storage_path)
