"""
Tests for Expense Tracker

Test strategy:
1. Unit tests for individual components (models, aggregator, catalog)
2. Store and flow tests over in-memory storage
3. No real API calls in tests (the Gemini model is faked)
"""

import math
from datetime import datetime

import pytest

from expense_tracker.catalog import get_category_by_id
from expense_tracker.models import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
    Expense,
    ExpenseDraft,
    ExpenseUpdate,
    Theme,
    UserPreferences,
)


class TestExpenseModels:
    """Tests for expense Pydantic models."""

    def test_draft_creation(self):
        """Test ExpenseDraft model creation."""
        draft = ExpenseDraft(
            amount=12.5,
            description="Coffee",
            category=get_category_by_id("food"),
            date="2025-03-01T09:00:00",
        )
        assert draft.amount == 12.5
        assert draft.category.id == "food"
        assert draft.image_uri is None

    def test_draft_strips_whitespace(self):
        """Test that whitespace is stripped from the description."""
        draft = ExpenseDraft(
            amount=1,
            description="  Bus ticket  ",
            category=get_category_by_id("transport"),
        )
        assert draft.description == "Bus ticket"

    def test_draft_defaults_date_to_now(self):
        draft = ExpenseDraft(amount=3, description="Snack", category=get_category_by_id("food"))
        parsed = datetime.fromisoformat(draft.date)
        assert parsed.tzinfo is not None

    def test_draft_accepts_datetime(self):
        draft = ExpenseDraft(
            amount=3,
            description="Snack",
            category=get_category_by_id("food"),
            date=datetime(2025, 1, 5, 10, 30),
        )
        assert draft.date == "2025-01-05T10:30:00"

    @pytest.mark.parametrize("amount", [0, -5, math.nan, math.inf])
    def test_draft_rejects_invalid_amounts(self, amount):
        """Amounts must be finite and positive."""
        with pytest.raises(ValueError):
            ExpenseDraft(
                amount=amount,
                description="Bad",
                category=get_category_by_id("other"),
            )

    def test_draft_rejects_blank_description(self):
        with pytest.raises(ValueError):
            ExpenseDraft(amount=1, description="   ", category=get_category_by_id("other"))

    def test_draft_rejects_oversize_description(self):
        with pytest.raises(ValueError):
            ExpenseDraft(amount=1, description="x" * 501, category=get_category_by_id("other"))

    def test_expense_storage_dict_uses_camel_case(self):
        """Persisted JSON keeps the mobile app's key names."""
        expense = Expense(
            id="abc",
            amount=20,
            description="Lunch",
            category=get_category_by_id("food"),
            date="2025-03-01T12:00:00",
            image_uri="file:///receipt.jpg",
            is_ai_generated=True,
        )
        data = expense.to_storage_dict()
        assert data["imageUri"] == "file:///receipt.jpg"
        assert data["isAIGenerated"] is True
        assert data["category"] == {
            "id": "food",
            "name": "Food & Dining",
            "icon": "🍽️",
            "color": "#FF6B6B",
        }

    def test_expense_storage_dict_omits_absent_optionals(self):
        expense = Expense(
            id="abc",
            amount=20,
            description="Lunch",
            category=get_category_by_id("food"),
            date="2025-03-01T12:00:00",
        )
        data = expense.to_storage_dict()
        assert "imageUri" not in data
        assert "isAIGenerated" not in data

    def test_expense_parses_camel_case(self):
        expense = Expense.model_validate({
            "id": "x1",
            "amount": 9.99,
            "description": "Movie",
            "category": {"id": "entertainment", "name": "Entertainment", "icon": "🎬", "color": "#96CEB4"},
            "date": "2025-03-02T20:00:00.000Z",
            "isAIGenerated": True,
        })
        assert expense.is_ai_generated is True
        assert expense.category.id == "entertainment"

    def test_category_is_immutable(self):
        category = get_category_by_id("food")
        with pytest.raises(ValueError):
            category.name = "Groceries"

    def test_update_reports_only_set_fields(self):
        update = ExpenseUpdate(amount=42.0, description="Dinner")
        assert update.changes() == {"amount": 42.0, "description": "Dinner"}

    def test_update_rejects_invalid_amount(self):
        with pytest.raises(ValueError):
            ExpenseUpdate(amount=-1)

    @pytest.mark.parametrize("field", ["amount", "description", "category", "date"])
    def test_update_rejects_clearing_required_field(self, field):
        with pytest.raises(ValueError, match=field):
            ExpenseUpdate.model_validate({field: None})

    def test_update_allows_clearing_optional_field(self):
        assert ExpenseUpdate(image_uri=None).changes() == {"image_uri": None}


class TestPreferenceModels:

    def test_defaults(self):
        preferences = UserPreferences()
        assert preferences.currency == "USD"
        assert preferences.language == "en"
        assert preferences.theme == Theme.SYSTEM
        assert preferences.notifications is True
        assert preferences.backup is True

    def test_unknown_keys_ignored(self):
        preferences = UserPreferences.model_validate({"currency": "EUR", "fontSize": 14})
        assert preferences.currency == "EUR"


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        event = AuditEvent(
            event_type=AuditEventType.EXPENSE_ADDED,
            description="Expense added",
        )
        assert event.event_type == AuditEventType.EXPENSE_ADDED
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_to_log_dict(self):
        event = AuditEventBuilder.expense_added(
            expense_id="e1",
            description="Coffee",
            amount=3.5,
        )
        log_dict = event.to_log_dict()
        assert "event_id" in log_dict
        assert log_dict["event_type"] == "expense_added"
        assert log_dict["entity_id"] == "e1"
        assert log_dict["details"]["amount"] == 3.5
        assert log_dict["is_user_action"] is True

    def test_storage_failure_event_type(self):
        load = AuditEventBuilder.storage_failed("k", "load", "boom")
        save = AuditEventBuilder.storage_failed("k", "save", "boom")
        assert load.event_type == AuditEventType.LOAD_FAILED
        assert save.event_type == AuditEventType.SAVE_FAILED
        assert save.severity == AuditSeverity.ERROR

    def test_import_rejected_is_warning(self):
        event = AuditEventBuilder.import_rejected("not a list")
        assert event.severity == AuditSeverity.WARNING
        assert event.error_message == "not a list"
