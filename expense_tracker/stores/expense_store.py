"""
Expense Store

Holds the user's ordered expense list and persists it through the
key-value storage contract.

DESIGN DECISION: The store is an explicit object handed to whoever
needs it (UI, orchestrator, tests). There is no module-level singleton.

CONCURRENCY: Every mutation runs "read current list → compute new list →
persist" while holding a single asyncio.Lock, so two rapid mutations can
never both start from the same stale list. In-memory state is replaced
only after the write succeeds; a failed write leaves it untouched.

Failures never raise to the caller: they resolve to None/False and are
logged (and audited when an AuditLogger is configured).
"""

import asyncio
import json
from typing import Any, Callable, Optional, Union
from uuid import uuid4

import structlog
from pydantic import ValidationError

from expense_tracker.audit import AuditLogger
from expense_tracker.models.audit import AuditEventBuilder
from expense_tracker.models.expense import Expense, ExpenseDraft, ExpenseUpdate
from expense_tracker.services.storage import StorageKeys, StorageUtils


logger = structlog.get_logger(__name__)


def new_expense_id() -> str:
    return uuid4().hex


class ExpenseStore:
    """
    Newest-first list of expenses backed by key-value storage.

    Newest-first is a convention of `add` (it prepends); imported lists
    keep whatever order they arrive in.
    """

    def __init__(
        self,
        storage: StorageUtils,
        audit_logger: Optional[AuditLogger] = None,
        id_factory: Callable[[], str] = new_expense_id,
    ):
        self._storage = storage
        self._audit = audit_logger
        self._id_factory = id_factory
        self._expenses: list[Expense] = []
        self._loaded = False
        self._lock = asyncio.Lock()

    @property
    def expenses(self) -> list[Expense]:
        """Snapshot of the current list (safe to hand to analytics)."""
        return list(self._expenses)

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    def get(self, expense_id: str) -> Optional[Expense]:
        for expense in self._expenses:
            if expense.id == expense_id:
                return expense
        return None

    # =========================================================================
    # LOADING
    # =========================================================================

    async def load(self) -> list[Expense]:
        """
        (Re)load the list from storage.

        Unreadable or non-list data yields an empty list. Individual
        malformed records are skipped so one bad row cannot hide the rest.
        """
        async with self._lock:
            await self._load_unlocked()
        return self.expenses

    async def _load_unlocked(self) -> None:
        data = await self._storage.get_data(StorageKeys.EXPENSES)
        self._expenses = self._parse_records(data)
        self._loaded = True

    async def _ensure_loaded(self) -> None:
        if not self._loaded:
            await self._load_unlocked()

    def _parse_records(self, data: Any) -> list[Expense]:
        if data is None:
            return []
        if not isinstance(data, list):
            logger.warning("stored_expenses_not_a_list", found=type(data).__name__)
            return []

        expenses = []
        for index, record in enumerate(data):
            try:
                expenses.append(Expense.model_validate(record))
            except ValidationError as e:
                logger.warning(
                    "skipping_malformed_expense",
                    index=index,
                    errors=e.error_count(),
                )
        return expenses

    async def _persist(self, expenses: list[Expense]) -> bool:
        """Write the full list; swap it into memory only if the write succeeded."""
        payload = [expense.to_storage_dict() for expense in expenses]
        saved = await self._storage.set_data(StorageKeys.EXPENSES, payload)
        if saved:
            self._expenses = expenses
        elif self._audit:
            await self._audit.log_storage_failure(
                StorageKeys.EXPENSES,
                "save",
                "Storage backend rejected the write",
            )
        return saved

    # =========================================================================
    # MUTATIONS
    # =========================================================================

    async def add(self, draft: ExpenseDraft) -> Optional[Expense]:
        """
        Assign an id, prepend, persist.

        Returns:
            The stored expense, or None if it could not be saved
        """
        expense = Expense.model_validate({
            **draft.model_dump(),
            "id": self._id_factory(),
        })

        async with self._lock:
            await self._ensure_loaded()
            saved = await self._persist([expense, *self._expenses])

        if not saved:
            return None
        if self._audit:
            await self._audit.log(AuditEventBuilder.expense_added(
                expense_id=expense.id,
                description=expense.description,
                amount=expense.amount,
            ))
        return expense

    async def update(
        self,
        expense_id: str,
        changes: Union[ExpenseUpdate, dict[str, Any]],
    ) -> bool:
        """
        Merge fields into the matching expense.

        Returns False (and writes nothing) if the id is unknown or the
        save fails.

        Raises:
            ValidationError: If `changes` holds invalid values (including
                an explicit None for amount, description, category or date)
        """
        if not isinstance(changes, ExpenseUpdate):
            changes = ExpenseUpdate.model_validate(changes)
        fields = changes.changes()

        async with self._lock:
            await self._ensure_loaded()
            index = self._index_of(expense_id)
            if index is None:
                return False
            updated = list(self._expenses)
            updated[index] = Expense.model_validate({
                **updated[index].model_dump(),
                **fields,
            })
            saved = await self._persist(updated)

        if saved and self._audit:
            await self._audit.log(AuditEventBuilder.expense_updated(expense_id, sorted(fields)))
        return saved

    async def delete(self, expense_id: str) -> bool:
        """Remove the matching expense. Unknown ids are a no-op returning False."""
        async with self._lock:
            await self._ensure_loaded()
            if self._index_of(expense_id) is None:
                return False
            saved = await self._persist([e for e in self._expenses if e.id != expense_id])

        if saved and self._audit:
            await self._audit.log(AuditEventBuilder.expense_deleted(expense_id))
        return saved

    async def clear_all(self) -> bool:
        """Empty the list."""
        async with self._lock:
            removed = len(self._expenses)
            saved = await self._persist([])
            if saved:
                self._loaded = True

        if saved and self._audit:
            await self._audit.log(AuditEventBuilder.expenses_cleared(removed))
        return saved

    async def import_list(self, records: Any) -> bool:
        """
        Replace the whole list with imported records.

        Accepts a list of records or the JSON text of one (as produced by
        export_list). Rejects anything else, any record that fails
        validation, and duplicate ids; existing data is left untouched.
        """
        parsed, reason = self._parse_import(records)
        if parsed is None:
            logger.warning("import_rejected", reason=reason)
            if self._audit:
                await self._audit.log(AuditEventBuilder.import_rejected(reason))
            return False

        async with self._lock:
            saved = await self._persist(parsed)
            if saved:
                self._loaded = True

        if saved and self._audit:
            await self._audit.log(AuditEventBuilder.expenses_imported(len(parsed)))
        return saved

    def _parse_import(self, records: Any) -> tuple[Optional[list[Expense]], str]:
        if isinstance(records, (str, bytes)):
            try:
                records = json.loads(records)
            except (json.JSONDecodeError, UnicodeDecodeError) as e:
                return None, f"Payload is not valid JSON: {e}"

        if not isinstance(records, list):
            return None, f"Expected a list of expenses, got {type(records).__name__}"

        try:
            parsed = [Expense.model_validate(record) for record in records]
        except ValidationError as e:
            return None, f"Invalid expense record: {e.error_count()} validation errors"

        ids = [expense.id for expense in parsed]
        if len(ids) != len(set(ids)):
            return None, "Duplicate expense ids in payload"

        return parsed, ""

    async def export_list(self) -> str:
        """Serialize the current list as JSON text (persisted key names)."""
        async with self._lock:
            await self._ensure_loaded()
            payload = [expense.to_storage_dict() for expense in self._expenses]

        if self._audit:
            await self._audit.log(AuditEventBuilder.expenses_exported(len(payload)))
        return json.dumps(payload, indent=2, ensure_ascii=False)

    def _index_of(self, expense_id: str) -> Optional[int]:
        for index, expense in enumerate(self._expenses):
            if expense.id == expense_id:
                return index
        return None
