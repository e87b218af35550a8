from .base import JsonStorage, SQLiteStorage, StorageError
from .factory import create_storage

__all__ = ["JsonStorage", "SQLiteStorage", "StorageError", "create_storage"]
