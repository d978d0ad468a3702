"""
Storage Utilities

JSON helpers over the key-value contract. These NEVER raise: every
failure is logged and resolved to a safe default (None, False or an
empty list) so the UI always has something to render.
"""

import json
from typing import Any, Optional

import structlog

from expense_tracker.services.storage.interface import (
    KeyValueStorageInterface,
    StorageError,
)


logger = structlog.get_logger(__name__)


class StorageKeys:
    """Keys used by the app. Kept identical to the mobile app's keys."""
    EXPENSES = "financial_tracker_expenses"
    USER_PREFERENCES = "financial_tracker_preferences"
    APP_VERSION = "financial_tracker_app_version"
    AUDIT_LOG = "financial_tracker_audit_log"


class StorageUtils:
    """Safe JSON get/set wrapper around a key-value backend."""

    def __init__(self, storage: KeyValueStorageInterface):
        self._storage = storage

    @property
    def backend(self) -> KeyValueStorageInterface:
        return self._storage

    async def get_data(self, key: str) -> Optional[Any]:
        """Read and decode a JSON value; None if absent or unreadable."""
        try:
            raw = await self._storage.get(key)
        except StorageError as e:
            logger.error("storage_get_failed", key=key, error=str(e))
            return None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except (json.JSONDecodeError, TypeError) as e:
            logger.error("storage_decode_failed", key=key, error=str(e))
            return None

    async def set_data(self, key: str, value: Any) -> bool:
        """Encode and store a value; False on any failure."""
        try:
            payload = json.dumps(value, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            logger.error("storage_encode_failed", key=key, error=str(e))
            return False
        try:
            return await self._storage.set(key, payload)
        except StorageError as e:
            logger.error("storage_set_failed", key=key, error=str(e))
            return False

    async def remove_data(self, key: str) -> bool:
        try:
            return await self._storage.remove(key)
        except StorageError as e:
            logger.error("storage_remove_failed", key=key, error=str(e))
            return False

    async def clear_all_data(self) -> bool:
        try:
            return await self._storage.clear()
        except StorageError as e:
            logger.error("storage_clear_failed", error=str(e))
            return False

    async def get_all_keys(self) -> list[str]:
        try:
            return await self._storage.list_keys()
        except StorageError as e:
            logger.error("storage_list_keys_failed", error=str(e))
            return []

    async def key_exists(self, key: str) -> bool:
        return key in await self.get_all_keys()
