"""
Expense Category Catalog

The fixed set of categories offered by the app. Loaded once at import,
never mutated at runtime.

DESIGN DECISION: Unknown ids resolve to the last entry ("other") instead
of raising. The receipt scanner relies on this when the model returns a
category string we do not know.
"""

from expense_tracker.models.expense import ExpenseCategory


EXPENSE_CATEGORIES: tuple[ExpenseCategory, ...] = (
    ExpenseCategory(id="food", name="Food & Dining", icon="🍽️", color="#FF6B6B"),
    ExpenseCategory(id="transport", name="Transportation", icon="🚗", color="#4ECDC4"),
    ExpenseCategory(id="shopping", name="Shopping", icon="🛍️", color="#45B7D1"),
    ExpenseCategory(id="entertainment", name="Entertainment", icon="🎬", color="#96CEB4"),
    ExpenseCategory(id="bills", name="Bills & Utilities", icon="⚡", color="#FFEAA7"),
    ExpenseCategory(id="health", name="Healthcare", icon="🏥", color="#DDA0DD"),
    ExpenseCategory(id="education", name="Education", icon="📚", color="#98D8C8"),
    ExpenseCategory(id="travel", name="Travel", icon="✈️", color="#F7DC6F"),
    ExpenseCategory(id="other", name="Other", icon="📝", color="#BDC3C7"),
)

FALLBACK_CATEGORY = EXPENSE_CATEGORIES[-1]

_CATEGORIES_BY_ID = {category.id: category for category in EXPENSE_CATEGORIES}


def get_category_by_id(category_id: str) -> ExpenseCategory:
    """Look up a category by exact id, falling back to "other"."""
    return _CATEGORIES_BY_ID.get(category_id, FALLBACK_CATEGORY)


def category_ids() -> list[str]:
    """Valid category ids in catalog order."""
    return [category.id for category in EXPENSE_CATEGORIES]
