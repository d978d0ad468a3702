"""
Receipt Extraction Models

CRITICAL: A ReceiptExtraction is PROPOSED data, NOT a saved expense.
The user reviews (and may edit) it before it becomes an ExpenseDraft.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

from expense_tracker.models.expense import DESCRIPTION_MAX_LENGTH, ExpenseCategory


class ReceiptExtraction(BaseModel):
    """
    Validated result of the AI receipt scan.

    Every field always holds a usable value: invalid model output is
    replaced with defaults rather than failing the scan.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    extraction_id: UUID = Field(
        default_factory=uuid4,
        description="Unique ID for this extraction attempt"
    )
    extracted_at: datetime = Field(
        default_factory=datetime.now,
        description="When extraction was performed"
    )
    amount: float = Field(..., gt=0, allow_inf_nan=False)
    description: str = Field(..., min_length=1, max_length=DESCRIPTION_MAX_LENGTH)
    category: ExpenseCategory
    parse_failed: bool = Field(
        default=False,
        description="True when the model response could not be parsed at all"
    )
    raw_response: Optional[str] = Field(
        default=None,
        description="Raw model text for debugging"
    )


class ReceiptEdits(BaseModel):
    """
    What the user changed on the review screen.

    Amount arrives as the raw text of the input box.
    """

    amount_text: Optional[str] = None
    description: Optional[str] = None
    category: Optional[ExpenseCategory] = None
