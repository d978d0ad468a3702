"""
Core Data Models for Expense Tracker

These models define the schemas for all expense data flowing through the system.
They are designed to:
1. Reject invalid amounts at the point of entry
2. Provide clear validation error messages
3. Serialize to the same JSON shape the mobile app persisted
4. Stay immutable once stored (updates replace, never mutate)

DESIGN DECISION: Persisted JSON keeps the camelCase keys written by the
mobile app (imageUri, isAIGenerated). Python code uses snake_case attributes;
aliases bridge the two.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)


DESCRIPTION_MAX_LENGTH = 500

_REQUIRED_FIELDS = ("amount", "description", "category", "date")


def _now_iso() -> str:
    return datetime.now().astimezone().isoformat()


def _coerce_timestamp(value: Any) -> Any:
    """Accept datetime objects wherever an ISO timestamp string is stored."""
    if isinstance(value, datetime):
        return value.isoformat()
    return value


# =============================================================================
# CATEGORY
# =============================================================================

class ExpenseCategory(BaseModel):
    """
    A category definition from the static catalog.

    Expenses embed the full category by value, so later catalog edits
    do not rewrite history.
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Stable category key")
    name: str = Field(..., description="Display name")
    icon: str = Field(..., description="Icon glyph")
    color: str = Field(..., description="Hex color used by charts")


# =============================================================================
# EXPENSE RECORDS
# =============================================================================

class ExpenseDraft(BaseModel):
    """
    An expense before the store has assigned it an id.

    This is what the add-expense form and the receipt scanner produce.
    Amount validation happens HERE, at ingestion; the analytics layer
    trusts what the store hands it.
    """
    model_config = ConfigDict(
        str_strip_whitespace=True,
        populate_by_name=True,
    )

    amount: float = Field(
        ...,
        gt=0,
        allow_inf_nan=False,
        description="Amount in currency units (not cents)"
    )
    description: str = Field(
        ...,
        min_length=1,
        max_length=DESCRIPTION_MAX_LENGTH,
        description="What the money was spent on"
    )
    category: ExpenseCategory
    date: str = Field(
        default_factory=_now_iso,
        min_length=1,
        description="ISO-8601 timestamp of when the expense occurred"
    )
    image_uri: Optional[str] = Field(
        default=None,
        alias="imageUri",
        description="Reference to the captured receipt image"
    )
    is_ai_generated: Optional[bool] = Field(
        default=None,
        alias="isAIGenerated",
        description="True when produced by receipt scanning"
    )

    @field_validator('date', mode='before')
    @classmethod
    def timestamp_to_iso(cls, v: Any) -> Any:
        return _coerce_timestamp(v)


class Expense(ExpenseDraft):
    """A persisted expense record."""

    id: str = Field(
        ...,
        min_length=1,
        description="Opaque unique id assigned by the store"
    )

    def to_storage_dict(self) -> dict:
        """Convert to the JSON-ready dict written to storage."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ExpenseUpdate(BaseModel):
    """
    Partial update for an existing expense.

    Only fields that are set are merged into the stored record.
    """
    model_config = ConfigDict(
        str_strip_whitespace=True,
        populate_by_name=True,
    )

    amount: Optional[float] = Field(default=None, gt=0, allow_inf_nan=False)
    description: Optional[str] = Field(
        default=None,
        min_length=1,
        max_length=DESCRIPTION_MAX_LENGTH,
    )
    category: Optional[ExpenseCategory] = None
    date: Optional[str] = Field(default=None, min_length=1)
    image_uri: Optional[str] = Field(default=None, alias="imageUri")
    is_ai_generated: Optional[bool] = Field(default=None, alias="isAIGenerated")

    @field_validator('date', mode='before')
    @classmethod
    def timestamp_to_iso(cls, v: Any) -> Any:
        return _coerce_timestamp(v)

    @model_validator(mode='after')
    def required_fields_not_cleared(self) -> 'ExpenseUpdate':
        cleared = sorted(
            name for name in _REQUIRED_FIELDS
            if name in self.model_fields_set and getattr(self, name) is None
        )
        if cleared:
            raise ValueError(f"Cannot clear required fields: {', '.join(cleared)}")
        return self

    def changes(self) -> dict[str, Any]:
        """Fields explicitly set on this update, keyed by attribute name."""
        return {
            name: getattr(self, name)
            for name in self.model_fields_set
        }
