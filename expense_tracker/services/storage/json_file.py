"""
JSON File Storage Implementation

DESIGN DECISION: A single JSON document on disk is used as the default
storage backend because:
1. Zero setup for a personal, single-user app
2. The user can open and back up the file directly
3. Easy to export/migrate later

TRADEOFFS:
- Every write rewrites the whole document (fine at personal-finance volume)
- No multi-process locking (one app instance per data file)

Writes go to a temporary file first and are swapped in with os.replace,
so a crash mid-write never leaves a truncated document behind.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Optional, Union

from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from expense_tracker.config import get_settings
from expense_tracker.services.storage.interface import (
    KeyValueStorageInterface,
    StorageReadError,
    StorageWriteError,
)


class JsonFileStorage(KeyValueStorageInterface):
    """
    Key-value storage persisted as one JSON object of {key: serialized value}.
    """

    def __init__(self, path: Optional[Union[str, Path]] = None):
        self._path = Path(path or get_settings().storage.data_path)

    @property
    def path(self) -> Path:
        return self._path

    def _read_all(self) -> dict[str, str]:
        """Load the whole document. A missing file is an empty store."""
        if not self._path.exists():
            return {}
        try:
            with self._path.open("r", encoding="utf-8") as handle:
                data = json.load(handle)
        except (json.JSONDecodeError, OSError) as e:
            raise StorageReadError(f"Failed to read {self._path}: {e}")

        if not isinstance(data, dict):
            raise StorageReadError(f"Storage file {self._path} does not hold a JSON object")

        return {str(key): value for key, value in data.items() if isinstance(value, str)}

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.1, min=0.1, max=1),
        retry=retry_if_exception_type(OSError),
        reraise=True,
    )
    def _write_all(self, data: dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self._path.parent,
            prefix=f".{self._path.name}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(data, handle, indent=2, sort_keys=True, ensure_ascii=False)
            os.replace(tmp_name, self._path)
        except OSError:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    async def get(self, key: str) -> Optional[str]:
        return self._read_all().get(key)

    async def set(self, key: str, value: str) -> bool:
        data = self._read_all()
        data[key] = value
        try:
            self._write_all(data)
        except OSError as e:
            raise StorageWriteError(f"Failed to write {key}: {e}")
        return True

    async def remove(self, key: str) -> bool:
        data = self._read_all()
        if key not in data:
            return True
        del data[key]
        try:
            self._write_all(data)
        except OSError as e:
            raise StorageWriteError(f"Failed to remove {key}: {e}")
        return True

    async def list_keys(self) -> list[str]:
        return sorted(self._read_all())

    async def clear(self) -> bool:
        try:
            self._write_all({})
        except OSError as e:
            raise StorageWriteError(f"Failed to clear {self._path}: {e}")
        return True
