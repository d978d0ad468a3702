"""Stateful stores over key-value storage."""

from expense_tracker.stores.expense_store import ExpenseStore, new_expense_id
from expense_tracker.stores.preferences_store import PreferencesStore

__all__ = ["ExpenseStore", "PreferencesStore", "new_expense_id"]
