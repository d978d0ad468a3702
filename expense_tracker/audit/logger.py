"""
Audit Trail for Expense Data

Stores and the receipt flow hand every AuditEvent to AuditLogger, which
writes it to the structlog stream and appends it to a capped list in the
same key-value storage the expenses live in.

An audit write that fails is logged and reported as False; it never
undoes or blocks the expense change that triggered it. Correlation ids
tie a receipt scan to the expense saved from it.
"""

import asyncio
import logging
from typing import Optional
from uuid import UUID, uuid4

import structlog

from expense_tracker.models.audit import AuditEvent, AuditEventBuilder
from expense_tracker.services.storage import StorageKeys, StorageUtils


def configure_logging(level: str = "INFO") -> None:
    """Configure structlog (and the stdlib root logger it writes through)."""
    logging.basicConfig(format="%(message)s")
    logging.getLogger().setLevel(getattr(logging, level, logging.INFO))
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer()
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


configure_logging()


class AuditLogger:
    """
    Writes audit events to structlog and, optionally, to storage under
    StorageKeys.AUDIT_LOG (newest last, capped at max_events).
    """

    def __init__(
        self,
        storage: Optional[StorageUtils] = None,
        max_events: int = 500,
    ):
        """
        Args:
            storage: Where the history list is kept; None keeps events
                     in the structlog stream only.
            max_events: Oldest events beyond this count are dropped.
        """
        self._storage = storage
        self._max_events = max_events
        self._lock = asyncio.Lock()
        self._logger = structlog.get_logger("expense_tracker.audit")

    async def log(self, event: AuditEvent) -> bool:
        """
        Record one event.

        Returns False only when the history list could not be saved.
        """
        log_dict = event.to_log_dict()

        if event.severity.value in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if not self._storage or self._max_events <= 0:
            return True

        async with self._lock:
            history = await self._storage.get_data(StorageKeys.AUDIT_LOG)
            if not isinstance(history, list):
                history = []
            history.append(log_dict)
            saved = await self._storage.set_data(
                StorageKeys.AUDIT_LOG,
                history[-self._max_events:],
            )

        if not saved:
            self._logger.error(
                "audit_storage_failed",
                event_id=str(event.event_id),
            )
        return saved

    async def recent_events(self, limit: int = 50) -> list[dict]:
        """Most recent persisted events, newest first."""
        if not self._storage:
            return []
        history = await self._storage.get_data(StorageKeys.AUDIT_LOG)
        if not isinstance(history, list):
            return []
        return list(reversed(history[-limit:]))

    async def log_storage_failure(
        self,
        key: str,
        operation: str,
        error_message: str,
    ) -> None:
        """Log a failed load or save."""
        await self.log(AuditEventBuilder.storage_failed(key, operation, error_message))

    async def log_external_service_error(
        self,
        service: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Record a failed call to Gemini or another remote service."""
        event = AuditEventBuilder.external_service_error(
            service=service,
            error_message=error_message,
            correlation_id=correlation_id,
        )
        await self.log(event)



def create_correlation_id() -> UUID:
    """
    New id linking the events of one receipt scan.

    Use this at the start of a receipt scan and pass it through to
    the confirmation step.
    """
    return uuid4()
