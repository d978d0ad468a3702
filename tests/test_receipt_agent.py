"""Tests for receipt scanning (no real API calls; the model is faked)."""

from datetime import datetime

import pytest

from expense_tracker.agents import (
    DEFAULT_AMOUNT,
    DEFAULT_DESCRIPTION,
    PARSE_FAILED_DESCRIPTION,
    ReceiptScanAgent,
    ReceiptScanError,
    build_draft,
    build_extraction_prompt,
    normalize_extraction,
    parse_model_response,
)
from expense_tracker.catalog import get_category_by_id
from expense_tracker.models.expense import DESCRIPTION_MAX_LENGTH
from expense_tracker.models.receipt import ReceiptEdits

from tests.factories import FakeModel


class TestParseModelResponse:

    def test_plain_json(self):
        assert parse_model_response('{"amount": 5}') == {"amount": 5}

    def test_code_fenced_json(self):
        text = '```json\n{"amount": 25.99, "category": "food"}\n```'
        assert parse_model_response(text) == {"amount": 25.99, "category": "food"}

    def test_json_surrounded_by_chatter(self):
        text = 'Sure! Here it is: {"description": "Taxi"} Hope that helps.'
        assert parse_model_response(text) == {"description": "Taxi"}

    @pytest.mark.parametrize("text", [None, "", "no json here", "{broken", "[1, 2]"])
    def test_unparseable(self, text):
        assert parse_model_response(text) is None


class TestNormalizeExtraction:

    def test_valid_fields_are_kept(self):
        extraction = normalize_extraction({
            "amount": 25.99,
            "description": " Groceries ",
            "category": "food",
        })
        assert extraction.amount == 25.99
        assert extraction.description == "Groceries"
        assert extraction.category.id == "food"
        assert extraction.parse_failed is False

    @pytest.mark.parametrize("amount", [0, -4, "abc", None, True, "nan", "inf", [5]])
    def test_invalid_amount_defaults(self, amount):
        extraction = normalize_extraction({"amount": amount, "description": "x", "category": "food"})
        assert extraction.amount == DEFAULT_AMOUNT

    def test_numeric_string_amount(self):
        assert normalize_extraction({"amount": " 7.50 "}).amount == 7.5

    @pytest.mark.parametrize("category", ["pets", None, 3, ""])
    def test_unknown_category_defaults_to_other(self, category):
        assert normalize_extraction({"category": category}).category.id == "other"

    def test_category_case_is_normalized(self):
        assert normalize_extraction({"category": " Transport "}).category.id == "transport"

    @pytest.mark.parametrize("description", ["", "   ", None, 12])
    def test_blank_description_defaults(self, description):
        assert normalize_extraction({"description": description}).description == DEFAULT_DESCRIPTION

    def test_long_description_is_clipped(self):
        extraction = normalize_extraction({"amount": 4, "description": "b" * 600})
        assert extraction.description == "b" * DESCRIPTION_MAX_LENGTH

    def test_unparseable_response_yields_flagged_default(self):
        extraction = normalize_extraction(None, raw_response="garbled")
        assert extraction.parse_failed is True
        assert extraction.amount == DEFAULT_AMOUNT
        assert extraction.description == PARSE_FAILED_DESCRIPTION
        assert extraction.category.id == "other"
        assert extraction.raw_response == "garbled"


class TestBuildDraft:

    def test_draft_from_extraction(self):
        extraction = normalize_extraction({"amount": 12, "description": "Pizza", "category": "food"})
        draft = build_draft(
            extraction,
            image_uri="file:///r.jpg",
            occurred_at=datetime(2025, 3, 20, 19, 0),
        )
        assert draft.amount == 12
        assert draft.description == "Pizza"
        assert draft.is_ai_generated is True
        assert draft.image_uri == "file:///r.jpg"
        assert draft.date == "2025-03-20T19:00:00"

    def test_user_edits_win(self):
        extraction = normalize_extraction({"amount": 12, "description": "Pizza", "category": "food"})
        draft = build_draft(extraction, ReceiptEdits(
            amount_text="15.25",
            description="Pizza night",
            category=get_category_by_id("entertainment"),
        ))
        assert draft.amount == 15.25
        assert draft.description == "Pizza night"
        assert draft.category.id == "entertainment"

    @pytest.mark.parametrize("amount_text", ["", "abc", "-3", "0"])
    def test_unusable_edited_amount_keeps_extracted(self, amount_text):
        extraction = normalize_extraction({"amount": 12})
        draft = build_draft(extraction, ReceiptEdits(amount_text=amount_text, description="  "))
        assert draft.amount == 12
        assert draft.description == DEFAULT_DESCRIPTION

    def test_long_edited_description_is_clipped(self):
        extraction = normalize_extraction({"amount": 12, "description": "Pizza"})
        draft = build_draft(extraction, ReceiptEdits(description="c" * 600))
        assert draft.description == "c" * DESCRIPTION_MAX_LENGTH


class TestReceiptScanAgent:

    @pytest.mark.asyncio
    async def test_extract_sends_prompt_and_image(self):
        model = FakeModel(text='{"amount": 8.4, "description": "Bus pass", "category": "transport"}')
        agent = ReceiptScanAgent(model=model)

        extraction = await agent.extract(b"jpeg-bytes", "image/png")

        assert extraction.amount == 8.4
        assert extraction.category.id == "transport"
        prompt, image = model.calls[0]
        assert prompt == build_extraction_prompt()
        assert image == {"mime_type": "image/png", "data": b"jpeg-bytes"}

    @pytest.mark.asyncio
    async def test_garbled_reply_is_not_an_error(self):
        agent = ReceiptScanAgent(model=FakeModel(text="I cannot read this receipt."))

        extraction = await agent.extract(b"x")

        assert extraction.parse_failed is True
        assert extraction.description == PARSE_FAILED_DESCRIPTION

    @pytest.mark.asyncio
    async def test_model_failure_raises_scan_error(self):
        agent = ReceiptScanAgent(model=FakeModel(error=RuntimeError("quota exceeded")))

        with pytest.raises(ReceiptScanError, match="quota exceeded"):
            await agent.extract(b"x")

    def test_prompt_lists_every_category(self):
        prompt = build_extraction_prompt()
        for category_id in ("food", "transport", "travel", "other"):
            assert category_id in prompt
