"""
Abstract Storage Interface

DESIGN DECISION: The app persists everything through a narrow key-value
contract (the same shape as the mobile AsyncStorage API). This allows us to:
1. Swap the JSON file for a real database later
2. Use in-memory storage for testing
3. Keep stores and analytics decoupled from the storage medium

Values are opaque serialized strings. Backends raise StorageError on
failure; StorageUtils turns those into safe defaults for callers.
"""

from abc import ABC, abstractmethod
from typing import Optional


class KeyValueStorageInterface(ABC):
    """
    Abstract interface for key-value storage.

    Any storage implementation (JSON file, SQLite, etc.)
    must implement these methods.
    """

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """
        Read the serialized value stored under a key.

        Returns:
            The stored string, or None if the key is absent

        Raises:
            StorageError: If the backend cannot be read
        """
        pass

    @abstractmethod
    async def set(self, key: str, value: str) -> bool:
        """
        Store a serialized value under a key, replacing any previous value.

        Returns:
            True if stored successfully

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    async def remove(self, key: str) -> bool:
        """
        Remove a key. Removing an absent key is not an error.

        Returns:
            True if the backend is in the requested state
        """
        pass

    @abstractmethod
    async def list_keys(self) -> list[str]:
        """List all stored keys."""
        pass

    @abstractmethod
    async def clear(self) -> bool:
        """Remove every key."""
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class StorageReadError(StorageError):
    """Stored data could not be read or decoded."""
    pass


class StorageWriteError(StorageError):
    """Data could not be written."""
    pass
