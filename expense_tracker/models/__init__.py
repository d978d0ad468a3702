"""
Data Models Package

This package contains all Pydantic models used in the Expense Tracker.
All data flowing through the system must conform to these schemas.
"""

from expense_tracker.models.expense import (
    Expense,
    ExpenseCategory,
    ExpenseDraft,
    ExpenseUpdate,
)
from expense_tracker.models.analytics import (
    AnalyticsSnapshot,
    CategorySpending,
    DailySpending,
)
from expense_tracker.models.preferences import (
    DEFAULT_USER_PREFERENCES,
    Theme,
    UserPreferences,
)
from expense_tracker.models.receipt import (
    ReceiptEdits,
    ReceiptExtraction,
)
from expense_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Expense models
    "Expense",
    "ExpenseCategory",
    "ExpenseDraft",
    "ExpenseUpdate",
    # Analytics models
    "AnalyticsSnapshot",
    "CategorySpending",
    "DailySpending",
    # Preferences
    "DEFAULT_USER_PREFERENCES",
    "Theme",
    "UserPreferences",
    # Receipt scanning
    "ReceiptEdits",
    "ReceiptExtraction",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
