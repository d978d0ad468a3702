"""Services package."""

from expense_tracker.services.storage import (
    InMemoryStorage,
    JsonFileStorage,
    KeyValueStorageInterface,
    StorageError,
    StorageKeys,
    StorageReadError,
    StorageUtils,
    StorageWriteError,
)

__all__ = [
    "InMemoryStorage",
    "JsonFileStorage",
    "KeyValueStorageInterface",
    "StorageError",
    "StorageKeys",
    "StorageReadError",
    "StorageUtils",
    "StorageWriteError",
]
