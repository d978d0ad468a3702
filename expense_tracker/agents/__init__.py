"""AI Agents package."""

from expense_tracker.agents.receipt_agent import (
    DEFAULT_AMOUNT,
    DEFAULT_CATEGORY_ID,
    DEFAULT_DESCRIPTION,
    PARSE_FAILED_DESCRIPTION,
    ReceiptScanAgent,
    ReceiptScanError,
    build_draft,
    build_extraction_prompt,
    normalize_extraction,
    parse_model_response,
)

__all__ = [
    "DEFAULT_AMOUNT",
    "DEFAULT_CATEGORY_ID",
    "DEFAULT_DESCRIPTION",
    "PARSE_FAILED_DESCRIPTION",
    "ReceiptScanAgent",
    "ReceiptScanError",
    "build_draft",
    "build_extraction_prompt",
    "normalize_extraction",
    "parse_model_response",
]
