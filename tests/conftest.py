"""Shared fixtures for Expense Tracker tests."""

from datetime import datetime

import pytest

from expense_tracker.services.storage import InMemoryStorage, StorageUtils

from tests.factories import NOW


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def memory_storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def storage_utils(memory_storage) -> StorageUtils:
    return StorageUtils(memory_storage)
