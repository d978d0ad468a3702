"""
Storage Services Package

Provides the key-value storage contract and its implementations.
The JSON file backend is the default, but the interface keeps it swappable.
"""

from expense_tracker.services.storage.interface import (
    KeyValueStorageInterface,
    StorageError,
    StorageReadError,
    StorageWriteError,
)
from expense_tracker.services.storage.json_file import JsonFileStorage
from expense_tracker.services.storage.memory import InMemoryStorage
from expense_tracker.services.storage.utils import StorageKeys, StorageUtils

__all__ = [
    # Interface
    "KeyValueStorageInterface",
    # Exceptions
    "StorageError",
    "StorageReadError",
    "StorageWriteError",
    # Implementations
    "InMemoryStorage",
    "JsonFileStorage",
    # Helpers
    "StorageKeys",
    "StorageUtils",
]
