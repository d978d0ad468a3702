"""
Receipt Scanning Agent

DESIGN DECISION: The LLM only READS the receipt. It proposes an amount,
a description and a category; the user reviews and confirms before
anything is stored.

CRITICAL BOUNDARY (validation/defaulting contract):
- amount must be a finite number > 0, otherwise 10.00
- category must be a catalog id, otherwise "other"
- description must be a non-empty string (trimmed), otherwise "Receipt expense";
  text beyond DESCRIPTION_MAX_LENGTH characters is cut off
- an unparseable response becomes a default extraction flagged parse_failed

Malformed model output never fails the scan. Only a transport failure
(the model could not be reached at all) raises ReceiptScanError.
"""

import json
import math
import re
from datetime import datetime
from typing import Any, Optional

import google.generativeai as genai
import structlog

from expense_tracker.catalog import category_ids, get_category_by_id
from expense_tracker.config import GeminiSettings, get_settings
from expense_tracker.models.expense import DESCRIPTION_MAX_LENGTH, ExpenseDraft
from expense_tracker.models.receipt import ReceiptEdits, ReceiptExtraction


logger = structlog.get_logger(__name__)

DEFAULT_AMOUNT = 10.00
DEFAULT_DESCRIPTION = "Receipt expense"
PARSE_FAILED_DESCRIPTION = "Receipt expense (AI parsing failed)"
DEFAULT_CATEGORY_ID = "other"

_CODE_FENCE = re.compile(r"```(?:json)?\s*", re.IGNORECASE)


class ReceiptScanError(Exception):
    """The model could not be reached or returned no content."""
    pass


def build_extraction_prompt() -> str:
    categories = ", ".join(category_ids())
    return f"""You read photos of receipts for a personal expense tracker.

Return ONLY a JSON object with exactly these keys:
{{"amount": <number>, "description": "<string>", "category": "<string>"}}

- amount: the total paid, as a plain number (25.99, not "$25.99")
- description: a short label for the purchase, e.g. "Groceries" or "Taxi ride"
- category: one of {categories}

If the image is unreadable use amount 10.00, description "{DEFAULT_DESCRIPTION}"
and category "{DEFAULT_CATEGORY_ID}". Do not add any other text."""


def parse_model_response(text: Optional[str]) -> Optional[dict]:
    """
    Pull the JSON object out of a model reply.

    Tolerates markdown code fences and chatter around the object.
    Returns None if no JSON object can be decoded.
    """
    if not text:
        return None

    cleaned = _CODE_FENCE.sub("", text).strip()
    start = cleaned.find("{")
    end = cleaned.rfind("}") + 1
    if start < 0 or end <= start:
        return None

    try:
        data = json.loads(cleaned[start:end])
    except json.JSONDecodeError:
        return None
    return data if isinstance(data, dict) else None


def _coerce_amount(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        amount = float(value)
    elif isinstance(value, str):
        try:
            amount = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(amount) or amount <= 0:
        return None
    return amount


def _clip_description(text: str) -> str:
    return text.strip()[:DESCRIPTION_MAX_LENGTH].rstrip()


def normalize_extraction(
    raw: Optional[dict],
    raw_response: Optional[str] = None,
) -> ReceiptExtraction:
    """Apply the per-field validation/defaulting contract to model output."""
    if raw is None:
        logger.warning("receipt_response_unparseable")
        return ReceiptExtraction(
            amount=DEFAULT_AMOUNT,
            description=PARSE_FAILED_DESCRIPTION,
            category=get_category_by_id(DEFAULT_CATEGORY_ID),
            parse_failed=True,
            raw_response=raw_response,
        )

    amount = _coerce_amount(raw.get("amount"))
    if amount is None:
        logger.warning("receipt_amount_invalid", value=repr(raw.get("amount")))
        amount = DEFAULT_AMOUNT

    category_id = raw.get("category")
    if isinstance(category_id, str):
        category_id = category_id.strip().lower()
    if category_id not in category_ids():
        category_id = DEFAULT_CATEGORY_ID

    description = raw.get("description")
    if not isinstance(description, str) or not description.strip():
        description = DEFAULT_DESCRIPTION

    return ReceiptExtraction(
        amount=amount,
        description=_clip_description(description),
        category=get_category_by_id(category_id),
        raw_response=raw_response,
    )


def build_draft(
    extraction: ReceiptExtraction,
    edits: Optional[ReceiptEdits] = None,
    image_uri: Optional[str] = None,
    occurred_at: Optional[datetime] = None,
) -> ExpenseDraft:
    """
    Turn a reviewed extraction into an expense draft.

    User edits win when they are usable: an edited amount must parse to a
    positive number, an edited description must not be blank.
    """
    edits = edits or ReceiptEdits()

    amount = _coerce_amount(edits.amount_text) if edits.amount_text else None
    description = _clip_description(edits.description or "") or extraction.description

    fields: dict[str, Any] = {
        "amount": amount if amount is not None else extraction.amount,
        "description": description,
        "category": edits.category or extraction.category,
        "image_uri": image_uri,
        "is_ai_generated": True,
    }
    if occurred_at is not None:
        fields["date"] = occurred_at
    return ExpenseDraft.model_validate(fields)


class ReceiptScanAgent:
    """
    Extracts expense fields from a receipt photo with Gemini.

    RESPONSIBILITIES:
    - Send the image with the extraction prompt
    - Validate and default every field of the reply

    BOUNDARIES:
    - NEVER persists data
    - ALWAYS defers to the user for confirmation
    """

    def __init__(
        self,
        settings: Optional[GeminiSettings] = None,
        model: Any = None,
    ):
        """
        Args:
            settings: Gemini settings; read from the environment if omitted
            model: Pre-built model exposing generate_content_async
                   (skips configuration; used by tests)
        """
        if model is not None:
            self._model = model
        else:
            self._settings = settings or get_settings().gemini
            self._configure_genai()

    def _configure_genai(self):
        """Configure Google Generative AI."""
        genai.configure(api_key=self._settings.api_key)
        self._model = genai.GenerativeModel(
            model_name=self._settings.model_name,
            generation_config={
                "temperature": self._settings.temperature,
                "max_output_tokens": self._settings.max_tokens,
            }
        )

    async def extract(
        self,
        image_bytes: bytes,
        mime_type: str = "image/jpeg",
    ) -> ReceiptExtraction:
        """
        Read a receipt image.

        Raises:
            ReceiptScanError: If the model call itself fails
        """
        try:
            response = await self._model.generate_content_async([
                build_extraction_prompt(),
                {"mime_type": mime_type, "data": image_bytes},
            ])
            text = response.text
        except Exception as e:
            logger.error("receipt_model_call_failed", error=str(e))
            raise ReceiptScanError(f"Failed to process receipt: {e}") from e

        return normalize_extraction(parse_model_response(text), raw_response=text)
