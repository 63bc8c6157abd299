"""
Activity Models for LifeLedger

Every mutation of the ledger emits one structured event to the log stream.
This provides:
1. Debugging information when something goes wrong
2. A readable trace of what the user did in a session

Events are written to the log only. They are not stored next to the ledger
data and are never read back.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class ActivityEventType(str, Enum):
    """Types of events we log."""
    # Transactions
    TRANSACTION_ADDED = "transaction_added"
    TRANSACTION_UPDATED = "transaction_updated"
    TRANSACTION_DELETED = "transaction_deleted"
    TRANSACTION_REJECTED = "transaction_rejected"

    # Settings collections
    BUDGET_UPDATED = "budget_updated"
    CATEGORY_ADDED = "category_added"
    CATEGORY_DELETED = "category_deleted"
    TAG_ADDED = "tag_added"
    TAG_DELETED = "tag_deleted"

    # Persistence
    DATA_LOADED = "data_loaded"
    STORED_DATA_CORRUPT = "stored_data_corrupt"
    SAVE_FAILED = "save_failed"
    SNAPSHOT_EXPORTED = "snapshot_exported"
    SNAPSHOT_IMPORTED = "snapshot_imported"
    SNAPSHOT_IMPORT_FAILED = "snapshot_import_failed"
    DATA_CLEARED = "data_cleared"


class ActivitySeverity(str, Enum):
    """Severity level for activity events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class ActivityEvent(BaseModel):
    """A single activity event."""

    event_id: UUID = Field(default_factory=uuid4)
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )
    event_type: ActivityEventType
    severity: ActivitySeverity = ActivitySeverity.INFO

    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'transaction', 'category', 'store')"
    )
    entity_id: Optional[str] = None

    description: str = Field(..., max_length=500)
    details: dict[str, Any] = Field(default_factory=dict)
    error_message: Optional[str] = None

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
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class ActivityEventBuilder:
    """
    Helper class to build activity events with common patterns.

    Usage:
        event = ActivityEventBuilder.transaction_added(tx_id, kind, amount)
        event = ActivityEventBuilder.save_failed("transactions", error)
    """

    @staticmethod
    def transaction_added(transaction_id: str, kind: str, amount: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.TRANSACTION_ADDED,
            entity_type="transaction",
            entity_id=transaction_id,
            description=f"{kind.capitalize()} recorded: {amount}",
            details={"kind": kind, "amount": amount},
        )

    @staticmethod
    def transaction_updated(transaction_id: str, amount: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.TRANSACTION_UPDATED,
            entity_type="transaction",
            entity_id=transaction_id,
            description="Transaction replaced",
            details={"amount": amount},
        )

    @staticmethod
    def transaction_deleted(transaction_id: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.TRANSACTION_DELETED,
            entity_type="transaction",
            entity_id=transaction_id,
            description="Transaction deleted",
        )

    @staticmethod
    def transaction_rejected(issues: list[dict]) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.TRANSACTION_REJECTED,
            severity=ActivitySeverity.WARNING,
            entity_type="transaction",
            description=f"Transaction rejected with {len(issues)} issues",
            details={"issues": issues},
        )

    @staticmethod
    def budget_updated(daily: str, weekly: str, monthly: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.BUDGET_UPDATED,
            entity_type="budget",
            description="Budget settings updated",
            details={"daily": daily, "weekly": weekly, "monthly": monthly},
        )

    @staticmethod
    def label_added(entity_type: str, entity_id: str, name: str) -> ActivityEvent:
        event_type = (
            ActivityEventType.CATEGORY_ADDED
            if entity_type == "category"
            else ActivityEventType.TAG_ADDED
        )
        return ActivityEvent(
            event_type=event_type,
            entity_type=entity_type,
            entity_id=entity_id,
            description=f"{entity_type.capitalize()} added: {name[:100]}",
            details={"name": name},
        )

    @staticmethod
    def label_deleted(entity_type: str, entity_id: str) -> ActivityEvent:
        event_type = (
            ActivityEventType.CATEGORY_DELETED
            if entity_type == "category"
            else ActivityEventType.TAG_DELETED
        )
        return ActivityEvent(
            event_type=event_type,
            entity_type=entity_type,
            entity_id=entity_id,
            description=f"{entity_type.capitalize()} deleted",
        )

    @staticmethod
    def data_loaded(transaction_count: int) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.DATA_LOADED,
            entity_type="store",
            description=f"Loaded {transaction_count} transactions",
            details={"transaction_count": transaction_count},
        )

    @staticmethod
    def stored_data_corrupt(key: str, error_message: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.STORED_DATA_CORRUPT,
            severity=ActivitySeverity.WARNING,
            entity_type="store",
            entity_id=key,
            description=f"Stored data under {key} is unreadable, using defaults",
            error_message=error_message,
        )

    @staticmethod
    def save_failed(collection: str, error_message: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.SAVE_FAILED,
            severity=ActivitySeverity.ERROR,
            entity_type="store",
            entity_id=collection,
            description=f"Failed to save {collection}",
            error_message=error_message,
        )

    @staticmethod
    def snapshot_exported(size_bytes: int) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.SNAPSHOT_EXPORTED,
            entity_type="store",
            description="Backup exported",
            details={"size_bytes": size_bytes},
        )

    @staticmethod
    def snapshot_imported(keys: list[str]) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.SNAPSHOT_IMPORTED,
            entity_type="store",
            description=f"Backup imported ({', '.join(keys) or 'nothing'})",
            details={"keys": keys},
        )

    @staticmethod
    def snapshot_import_failed() -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.SNAPSHOT_IMPORT_FAILED,
            severity=ActivitySeverity.WARNING,
            entity_type="store",
            description="Backup rejected, nothing was changed",
        )

    @staticmethod
    def data_cleared() -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.DATA_CLEARED,
            severity=ActivitySeverity.WARNING,
            entity_type="store",
            description="All stored data removed",
        )
