"""
Preferences Store

Persists UserPreferences under a single key. Mirrors the expense store:
explicit object, injected storage, one lock around each read-modify-write.
"""

import asyncio
from typing import Any, Optional, Union

import structlog
from pydantic import ValidationError

from expense_tracker.audit import AuditLogger
from expense_tracker.models.audit import AuditEventBuilder
from expense_tracker.models.preferences import (
    DEFAULT_USER_PREFERENCES,
    Theme,
    UserPreferences,
)
from expense_tracker.services.storage import StorageKeys, StorageUtils


logger = structlog.get_logger(__name__)


class PreferencesStore:
    """Load, update and reset the user's display preferences."""

    def __init__(
        self,
        storage: StorageUtils,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage
        self._audit = audit_logger
        self._preferences = DEFAULT_USER_PREFERENCES
        self._lock = asyncio.Lock()

    @property
    def preferences(self) -> UserPreferences:
        return self._preferences

    async def load(self) -> UserPreferences:
        """
        Load stored preferences.

        Missing, unreadable or invalid data loads the defaults. Valid
        stored keys are merged over the defaults; unknown keys are ignored.
        """
        async with self._lock:
            data = await self._storage.get_data(StorageKeys.USER_PREFERENCES)
            self._preferences = self._parse(data)
        return self._preferences

    def _parse(self, data: Any) -> UserPreferences:
        if not isinstance(data, dict):
            return DEFAULT_USER_PREFERENCES

        merged = DEFAULT_USER_PREFERENCES.model_dump()
        merged.update({k: v for k, v in data.items() if k in merged})
        try:
            return UserPreferences.model_validate(merged)
        except ValidationError as e:
            logger.warning("invalid_stored_preferences", errors=e.error_count())
            return DEFAULT_USER_PREFERENCES

    async def _save(self, preferences: UserPreferences, fields: list[str]) -> bool:
        saved = await self._storage.set_data(
            StorageKeys.USER_PREFERENCES,
            preferences.model_dump(mode="json"),
        )
        if saved:
            self._preferences = preferences
            if self._audit:
                await self._audit.log(AuditEventBuilder.preferences_updated(fields))
        elif self._audit:
            await self._audit.log_storage_failure(
                StorageKeys.USER_PREFERENCES,
                "save",
                "Storage backend rejected the write",
            )
        return saved

    async def update(self, **changes: Any) -> bool:
        """
        Merge changes into the current preferences and persist.

        Raises:
            ValidationError: If a changed value is invalid
        """
        async with self._lock:
            return await self._merge(changes)

    async def _merge(self, changes: dict[str, Any]) -> bool:
        updated = UserPreferences.model_validate({
            **self._preferences.model_dump(),
            **changes,
        })
        return await self._save(updated, sorted(changes))

    async def reset(self) -> bool:
        async with self._lock:
            return await self._save(DEFAULT_USER_PREFERENCES, [])

    async def update_currency(self, currency: str) -> bool:
        return await self.update(currency=currency)

    async def update_theme(self, theme: Union[Theme, str]) -> bool:
        return await self.update(theme=theme)

    async def toggle_notifications(self) -> bool:
        async with self._lock:
            return await self._merge({"notifications": not self._preferences.notifications})

    async def toggle_backup(self) -> bool:
        async with self._lock:
            return await self._merge({"backup": not self._preferences.backup})
