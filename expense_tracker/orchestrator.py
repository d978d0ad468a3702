"""
Main Orchestrator for Expense Tracker

This module ties the components together and defines the
end-to-end receipt flow:
    image → AI extraction → user review/edit → confirm → save

DESIGN DECISION: The orchestrator enforces the boundaries:
- Nothing scanned is persisted without human confirmation
- A broken AI service degrades to a clear message, never a crash
- Every step is audited
"""

from typing import NamedTuple, Optional
from uuid import UUID

import structlog
from pydantic import ValidationError

from expense_tracker import __version__
from expense_tracker.agents import (
    ReceiptScanAgent,
    ReceiptScanError,
    build_draft,
)
from expense_tracker.audit import AuditLogger, configure_logging, create_correlation_id
from expense_tracker.config import AppSettings, get_settings
from expense_tracker.models.audit import AuditEventBuilder
from expense_tracker.models.expense import Expense
from expense_tracker.models.receipt import ReceiptEdits, ReceiptExtraction
from expense_tracker.services.storage import (
    InMemoryStorage,
    JsonFileStorage,
    KeyValueStorageInterface,
    StorageKeys,
    StorageUtils,
)
from expense_tracker.stores import ExpenseStore, PreferencesStore


logger = structlog.get_logger(__name__)


class ReceiptScanFlow:
    """
    Orchestrates the receipt scanning flow.

    Flow:
    1. Check → image type and size are acceptable
    2. Extract → Gemini reads amount, description, category
    3. Review → Present to user (PAUSE - require confirmation)
    4. Confirm → User explicitly approves (optionally after editing)
    5. Save → Prepend to the expense store

    Human confirmation (step 4) is MANDATORY.
    """

    def __init__(
        self,
        expense_store: ExpenseStore,
        agent: Optional[ReceiptScanAgent] = None,
        audit_logger: Optional[AuditLogger] = None,
        app_settings: Optional[AppSettings] = None,
    ):
        self._store = expense_store
        self._agent = agent
        self._audit_logger = audit_logger
        self._app_settings = app_settings or get_settings().app

    def _get_agent(self) -> Optional[ReceiptScanAgent]:
        """Build the agent on first use so the app runs without an AI key."""
        if self._agent is None:
            try:
                self._agent = ReceiptScanAgent()
            except Exception as e:
                logger.warning("receipt_agent_unavailable", error=str(e))
                return None
        return self._agent

    def check_image(self, image_bytes: bytes, mime_type: str) -> tuple[bool, str]:
        """Validate an upload before spending a model call on it."""
        image_format = mime_type.lower().split("/")[-1]
        if not mime_type.lower().startswith("image/") or (
            image_format not in self._app_settings.supported_formats_list
        ):
            allowed = ", ".join(self._app_settings.supported_formats_list)
            return False, f"Unsupported image type: {mime_type}. Allowed: {allowed}"
        if not image_bytes:
            return False, "The image is empty. Please take the photo again."
        if len(image_bytes) > self._app_settings.max_upload_size_bytes:
            return False, (
                f"Image is larger than {self._app_settings.max_upload_size_mb} MB. "
                "Please use a smaller photo."
            )
        return True, "OK"

    async def scan(
        self,
        image_bytes: bytes,
        mime_type: str = "image/jpeg",
        correlation_id: Optional[UUID] = None,
    ) -> tuple[Optional[ReceiptExtraction], bool, str]:
        """
        Extract expense fields from a receipt photo.

        Returns:
            (extraction, can_proceed, message)

        If can_proceed is False, extraction is None and message says why.
        """
        correlation_id = correlation_id or create_correlation_id()

        ok, message = self.check_image(image_bytes, mime_type)
        if not ok:
            return None, False, message

        agent = self._get_agent()
        if agent is None:
            return None, False, (
                "Receipt scanning isn't configured. "
                "Set GEMINI_API_KEY or add the expense manually."
            )

        try:
            extraction = await agent.extract(image_bytes, mime_type)
        except ReceiptScanError as e:
            if self._audit_logger:
                await self._audit_logger.log_external_service_error(
                    service="gemini",
                    error_message=str(e),
                    correlation_id=correlation_id,
                )
            return None, False, "Failed to process receipt. Please try again."

        if self._audit_logger:
            if extraction.parse_failed:
                await self._audit_logger.log(AuditEventBuilder.receipt_parse_failed(
                    extraction_id=extraction.extraction_id,
                    correlation_id=correlation_id,
                ))
            else:
                await self._audit_logger.log(AuditEventBuilder.receipt_scanned(
                    extraction_id=extraction.extraction_id,
                    category=extraction.category.id,
                    amount=extraction.amount,
                    correlation_id=correlation_id,
                ))

        if extraction.parse_failed:
            return extraction, True, (
                "We couldn't read this receipt clearly. Please check every field."
            )
        return extraction, True, "Receipt read. Please review before saving."

    async def confirm(
        self,
        extraction: ReceiptExtraction,
        edits: Optional[ReceiptEdits] = None,
        image_uri: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> Optional[Expense]:
        """
        Save a reviewed extraction. Called ONLY after explicit user approval.

        Returns:
            The saved expense, or None if the reviewed values are invalid
            or saving failed
        """
        correlation_id = correlation_id or create_correlation_id()
        try:
            draft = build_draft(extraction, edits, image_uri=image_uri)
        except ValidationError as e:
            logger.warning(
                "receipt_draft_invalid",
                extraction_id=str(extraction.extraction_id),
                errors=e.error_count(),
            )
            return None
        expense = await self._store.add(draft)

        if expense and self._audit_logger:
            await self._audit_logger.log(AuditEventBuilder.user_confirmed(
                expense_id=expense.id,
                extraction_id=extraction.extraction_id,
                correlation_id=correlation_id,
            ))
        return expense


class AppComponents(NamedTuple):
    storage: StorageUtils
    expense_store: ExpenseStore
    preferences_store: PreferencesStore
    receipt_flow: ReceiptScanFlow
    audit_logger: AuditLogger


def create_storage(backend: Optional[str] = None) -> KeyValueStorageInterface:
    """Build the configured key-value backend."""
    storage_settings = get_settings().storage
    backend = backend or storage_settings.backend
    if backend == "memory":
        return InMemoryStorage()
    return JsonFileStorage(storage_settings.data_path)


def create_app_components(
    storage: Optional[KeyValueStorageInterface] = None,
    receipt_agent: Optional[ReceiptScanAgent] = None,
) -> AppComponents:
    """
    Factory function to create all application components.

    Args:
        storage: Key-value backend. Defaults to the configured one.
        receipt_agent: Pre-built agent. Defaults to building one lazily
                       from GEMINI_* settings on the first scan.

    Stores are returned unloaded; call `await initialize_components(...)`.
    """
    app_settings = get_settings().app
    configure_logging(app_settings.log_level)

    storage_utils = StorageUtils(storage or create_storage())
    audit_logger = AuditLogger(storage_utils, max_events=app_settings.audit_log_limit)

    expense_store = ExpenseStore(storage_utils, audit_logger)
    preferences_store = PreferencesStore(storage_utils, audit_logger)
    receipt_flow = ReceiptScanFlow(
        expense_store,
        agent=receipt_agent,
        audit_logger=audit_logger,
        app_settings=app_settings,
    )

    return AppComponents(
        storage=storage_utils,
        expense_store=expense_store,
        preferences_store=preferences_store,
        receipt_flow=receipt_flow,
        audit_logger=audit_logger,
    )


async def initialize_components(components: AppComponents) -> AppComponents:
    """Load persisted data into both stores and record the running version."""
    await components.expense_store.load()
    await components.preferences_store.load()

    stored_version = await components.storage.get_data(StorageKeys.APP_VERSION)
    if stored_version != __version__:
        logger.info("app_version_changed", previous=stored_version, current=__version__)
        await components.storage.set_data(StorageKeys.APP_VERSION, __version__)
    return components
