"""
Audit Logger

Every read that falls back to a default, every write and every key
skipped during a scan is logged as a structured event. This is the only
trace left when corrupted data is silently replaced.
"""

from typing import Optional

import structlog

from pilaris.models.audit import (
    EventSeverity,
    StoreEvent,
    StoreEventBuilder,
    StoreEventType,
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


class AuditLogger:
    """
    Central audit logging service.

    Routes StoreEvents to the structured log at the level matching
    their severity. Events logged are also kept in `history` when
    `keep_history` is set (used by tests and diagnostics).
    """

    def __init__(self, keep_history: bool = False):
        self._logger = structlog.get_logger("pilaris")
        self._keep_history = keep_history
        self.history: list[StoreEvent] = []

    def log(self, event: StoreEvent) -> None:
        """Log an audit event."""
        if self._keep_history:
            self.history.append(event)

        log_dict = event.to_log_dict()
        if event.severity == EventSeverity.ERROR:
            self._logger.error("store_event", **log_dict)
        elif event.severity == EventSeverity.WARNING:
            self._logger.warning("store_event", **log_dict)
        elif event.severity == EventSeverity.DEBUG:
            self._logger.debug("store_event", **log_dict)
        else:
            self._logger.info("store_event", **log_dict)

    def log_record_loaded(self, key: str) -> None:
        self.log(StoreEventBuilder.record_loaded(key))

    def log_record_saved(self, key: str, kind: str, item_count: int) -> None:
        self.log(StoreEventBuilder.record_saved(key, kind, item_count))

    def log_record_deleted(self, key: str) -> None:
        self.log(StoreEventBuilder.record_deleted(key))

    def log_record_defaulted(self, key: str, kind: str, reason: str) -> None:
        self.log(StoreEventBuilder.record_defaulted(key, kind, reason))

    def log_decode_failed(self, key: str, error: str) -> None:
        """Log a stored value that could not be decoded."""
        self.log(StoreEventBuilder.decode_failed(key, error))

    def log_medium_failed(self, date: str, error: str) -> None:
        """Log a medium fault hit while loading a date."""
        self.log(StoreEventBuilder.medium_failed(date, error))

    def log_date_switched(self, date: str, degraded: bool) -> None:
        self.log(StoreEventBuilder.date_switched(date, degraded))

    def log_invariant_rejected(
        self,
        rule: str,
        details: Optional[dict] = None,
    ) -> None:
        """Log a caller change refused before reaching storage."""
        self.log(StoreEventBuilder.invariant_rejected(rule, details))

    def log_key_skipped(self, key: str, reason: str) -> None:
        self.log(StoreEventBuilder.key_skipped(key, reason))

    def log_summary_computed(
        self,
        year: int,
        schedule_days: int,
        expense_days: int,
    ) -> None:
        self.log(StoreEventBuilder.summary_computed(year, schedule_days, expense_days))

    def events_of_type(self, event_type: StoreEventType) -> list[StoreEvent]:
        """Return kept events of one type, oldest first."""
        return [event for event in self.history if event.event_type == event_type]
