"""
Audit Models for Expense Tracker

Each add, edit, delete, import, export and receipt scan produces an
AuditEvent. The settings page shows the newest ones, and failed saves
leave an error event behind even though the UI only sees False.

DESIGN DECISION: Audit logs are append-only. We never modify them;
storage only trims the oldest entries once the configured cap is reached.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Expense mutations
    EXPENSE_ADDED = "expense_added"
    EXPENSE_UPDATED = "expense_updated"
    EXPENSE_DELETED = "expense_deleted"
    EXPENSES_CLEARED = "expenses_cleared"

    # Bulk data movement
    EXPENSES_IMPORTED = "expenses_imported"
    IMPORT_REJECTED = "import_rejected"
    EXPENSES_EXPORTED = "expenses_exported"

    # Persistence
    LOAD_FAILED = "load_failed"
    SAVE_FAILED = "save_failed"

    # Preferences
    PREFERENCES_UPDATED = "preferences_updated"

    # Receipt scanning
    RECEIPT_SCANNED = "receipt_scanned"
    RECEIPT_PARSE_FAILED = "receipt_parse_failed"
    USER_CONFIRMED = "user_confirmed"

    # System events
    EXTERNAL_SERVICE_ERROR = "external_service_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    One entry in the expense history.

    entity_id is the expense id (or storage key / extraction id) it concerns.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.now,
        description="When the event occurred (local time)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'expense', 'receipt', 'preferences')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one receipt scan and its confirmation)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Factory methods, one per thing the app records.

    Usage:
        event = AuditEventBuilder.expense_added(expense_id, description, amount)
        event = AuditEventBuilder.import_rejected("payload is not a list")
    """

    @staticmethod
    def expense_added(
        expense_id: str,
        description: str,
        amount: float,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_ADDED,
            entity_type="expense",
            entity_id=expense_id,
            correlation_id=correlation_id,
            description=f"Expense added: {description[:100]} - {amount:.2f}",
            details={
                "description": description,
                "amount": amount,
            },
            is_user_action=True,
        )

    @staticmethod
    def expense_updated(expense_id: str, fields: list[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_UPDATED,
            entity_type="expense",
            entity_id=expense_id,
            description=f"Expense updated: {', '.join(fields) or 'no fields'}",
            details={"fields": fields},
            is_user_action=True,
        )

    @staticmethod
    def expense_deleted(expense_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_DELETED,
            entity_type="expense",
            entity_id=expense_id,
            description="Expense deleted",
            is_user_action=True,
        )

    @staticmethod
    def expenses_cleared(count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSES_CLEARED,
            severity=AuditSeverity.WARNING,
            entity_type="expense",
            description=f"All expenses cleared ({count} removed)",
            details={"removed": count},
            is_user_action=True,
        )

    @staticmethod
    def expenses_imported(count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSES_IMPORTED,
            entity_type="expense",
            description=f"Imported {count} expenses",
            details={"count": count},
            is_user_action=True,
        )

    @staticmethod
    def import_rejected(reason: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.IMPORT_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="expense",
            description="Import rejected: existing data left untouched",
            error_message=reason,
            is_user_action=True,
        )

    @staticmethod
    def expenses_exported(count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSES_EXPORTED,
            entity_type="expense",
            description=f"Exported {count} expenses",
            details={"count": count},
            is_user_action=True,
        )

    @staticmethod
    def storage_failed(key: str, operation: str, error_message: str) -> AuditEvent:
        event_type = (
            AuditEventType.LOAD_FAILED
            if operation == "load"
            else AuditEventType.SAVE_FAILED
        )
        return AuditEvent(
            event_type=event_type,
            severity=AuditSeverity.ERROR,
            entity_type="storage",
            entity_id=key,
            description=f"Storage {operation} failed for {key}",
            error_message=error_message,
        )

    @staticmethod
    def preferences_updated(fields: list[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PREFERENCES_UPDATED,
            entity_type="preferences",
            description=f"Preferences updated: {', '.join(fields) or 'reset'}",
            details={"fields": fields},
            is_user_action=True,
        )

    @staticmethod
    def receipt_scanned(
        extraction_id: UUID,
        category: str,
        amount: float,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECEIPT_SCANNED,
            entity_type="receipt",
            entity_id=str(extraction_id),
            correlation_id=correlation_id,
            description=f"Receipt scanned: {category} - {amount:.2f}",
            details={
                "category": category,
                "amount": amount,
            },
        )

    @staticmethod
    def receipt_parse_failed(
        extraction_id: UUID,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECEIPT_PARSE_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="receipt",
            entity_id=str(extraction_id),
            correlation_id=correlation_id,
            description="Model response could not be parsed; defaults used",
        )

    @staticmethod
    def user_confirmed(
        expense_id: str,
        extraction_id: UUID,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_CONFIRMED,
            entity_type="expense",
            entity_id=expense_id,
            correlation_id=correlation_id,
            description="User confirmed scanned receipt",
            details={
                "extraction_id": str(extraction_id),
            },
            is_user_action=True,
        )

    @staticmethod
    def external_service_error(
        service: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXTERNAL_SERVICE_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"External service error: {service}",
            error_message=error_message,
            details={
                "service": service,
            },
            correlation_id=correlation_id,
        )
