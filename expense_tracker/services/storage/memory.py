"""In-memory storage backend, used for tests and throwaway sessions."""

from typing import Optional

from expense_tracker.services.storage.interface import KeyValueStorageInterface


class InMemoryStorage(KeyValueStorageInterface):
    """Key-value storage held in a plain dict. Nothing survives the process."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> bool:
        self._data[key] = value
        return True

    async def remove(self, key: str) -> bool:
        self._data.pop(key, None)
        return True

    async def list_keys(self) -> list[str]:
        return list(self._data)

    async def clear(self) -> bool:
        self._data.clear()
        return True
