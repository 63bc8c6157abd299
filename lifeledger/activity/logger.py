"""
Activity Logger

Every mutation of the ledger is logged as a structured event.
This provides:
1. Traceability of what happened in a session
2. Debugging capability when a save fails or stored data is corrupt

The activity logger:
- Writes to the structured log only (no stored trail)
- Keeps the most recent events in memory for the UI
"""

from typing import Optional

import structlog

from lifeledger.models.activity import (
    ActivityEvent,
    ActivityEventBuilder,
    ActivitySeverity,
)


# Configure structlog for local logging
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


class ActivityLogger:
    """
    Central activity logging service.

    Keeps the last events in memory as well, so the UI can show what just
    happened without parsing the log.
    """

    def __init__(self, history_size: int = 50, logger_name: str = "lifeledger"):
        self._logger = structlog.get_logger(logger_name)
        self._history_size = history_size
        self._recent: list[ActivityEvent] = []

    @property
    def recent_events(self) -> list[ActivityEvent]:
        """Most recent events, newest first."""
        return list(reversed(self._recent))

    def log(self, event: ActivityEvent) -> None:
        """Log an activity event at the level matching its severity."""
        self._recent.append(event)
        if len(self._recent) > self._history_size:
            del self._recent[0]

        log_dict = event.to_log_dict()

        if event.severity == ActivitySeverity.ERROR:
            self._logger.error("activity_event", **log_dict)
        elif event.severity == ActivitySeverity.WARNING:
            self._logger.warning("activity_event", **log_dict)
        elif event.severity == ActivitySeverity.DEBUG:
            self._logger.debug("activity_event", **log_dict)
        else:
            self._logger.info("activity_event", **log_dict)

    def log_transaction_added(self, transaction_id: str, kind: str, amount: str) -> None:
        self.log(ActivityEventBuilder.transaction_added(transaction_id, kind, amount))

    def log_transaction_updated(self, transaction_id: str, amount: str) -> None:
        self.log(ActivityEventBuilder.transaction_updated(transaction_id, amount))

    def log_transaction_deleted(self, transaction_id: str) -> None:
        self.log(ActivityEventBuilder.transaction_deleted(transaction_id))

    def log_transaction_rejected(self, issues: list[dict]) -> None:
        self.log(ActivityEventBuilder.transaction_rejected(issues))

    def log_budget_updated(self, daily: str, weekly: str, monthly: str) -> None:
        self.log(ActivityEventBuilder.budget_updated(daily, weekly, monthly))

    def log_label_added(self, entity_type: str, entity_id: str, name: str) -> None:
        self.log(ActivityEventBuilder.label_added(entity_type, entity_id, name))

    def log_label_deleted(self, entity_type: str, entity_id: str) -> None:
        self.log(ActivityEventBuilder.label_deleted(entity_type, entity_id))

    def log_data_loaded(self, transaction_count: int) -> None:
        self.log(ActivityEventBuilder.data_loaded(transaction_count))

    def log_stored_data_corrupt(self, key: str, error_message: str) -> None:
        """Log unreadable stored data that was replaced by a default."""
        self.log(ActivityEventBuilder.stored_data_corrupt(key, error_message))

    def log_save_failed(self, collection: str, error_message: str) -> None:
        self.log(ActivityEventBuilder.save_failed(collection, error_message))

    def log_snapshot_exported(self, size_bytes: int) -> None:
        self.log(ActivityEventBuilder.snapshot_exported(size_bytes))

    def log_snapshot_imported(self, keys: list[str]) -> None:
        self.log(ActivityEventBuilder.snapshot_imported(keys))

    def log_snapshot_import_failed(self, error_message: Optional[str] = None) -> None:
        event = ActivityEventBuilder.snapshot_import_failed()
        event.error_message = error_message
        self.log(event)

    def log_data_cleared(self) -> None:
        self.log(ActivityEventBuilder.data_cleared())
