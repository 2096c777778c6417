"""
Audit Models for Pilaris

Everything the record store and the aggregation engine do to persisted
data is described by a StoreEvent: records written, records regenerated
from defaults, values that failed to decode, keys skipped during a scan.

Events are emitted to the structured log; they are not persisted.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class StoreEventType(str, Enum):
    """Types of events we audit."""
    # Reads
    RECORD_LOADED = "record_loaded"
    RECORD_DEFAULTED = "record_defaulted"
    DECODE_FAILED = "decode_failed"
    MEDIUM_FAILED = "medium_failed"

    # Writes
    RECORD_SAVED = "record_saved"
    RECORD_DELETED = "record_deleted"

    # Session
    DATE_SWITCHED = "date_switched"
    INVARIANT_REJECTED = "invariant_rejected"

    # Aggregation
    KEY_SKIPPED = "key_skipped"
    SUMMARY_COMPUTED = "summary_computed"


class EventSeverity(str, Enum):
    """Severity level for store events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class StoreEvent(BaseModel):
    """A single audit event."""

    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )
    event_type: StoreEventType = Field(
        ...,
        description="Type of event"
    )
    severity: EventSeverity = Field(
        default=EventSeverity.INFO,
        description="Event severity"
    )

    # The medium key the event is about, when there is one
    key: Optional[str] = None
    date: Optional[str] = None

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

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "key": self.key,
            "date": self.date,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class StoreEventBuilder:
    """
    Helper class to build store events with common patterns.

    Usage:
        event = StoreEventBuilder.record_saved(key, kind="schedule")
        event = StoreEventBuilder.decode_failed(key, error)
    """

    @staticmethod
    def record_loaded(key: str) -> StoreEvent:
        return StoreEvent(
            event_type=StoreEventType.RECORD_LOADED,
            severity=EventSeverity.DEBUG,
            key=key,
            description="Loaded stored record",
        )

    @staticmethod
    def record_saved(key: str, kind: str, item_count: int) -> StoreEvent:
        return StoreEvent(
            event_type=StoreEventType.RECORD_SAVED,
            severity=EventSeverity.DEBUG,
            key=key,
            description=f"Saved {kind} record",
            details={"kind": kind, "item_count": item_count},
        )

    @staticmethod
    def record_deleted(key: str) -> StoreEvent:
        return StoreEvent(
            event_type=StoreEventType.RECORD_DELETED,
            key=key,
            description="Deleted record",
        )

    @staticmethod
    def record_defaulted(key: str, kind: str, reason: str) -> StoreEvent:
        return StoreEvent(
            event_type=StoreEventType.RECORD_DEFAULTED,
            severity=EventSeverity.DEBUG,
            key=key,
            description=f"Using default {kind} record ({reason})",
            details={"kind": kind, "reason": reason},
        )

    @staticmethod
    def decode_failed(key: str, error: str) -> StoreEvent:
        return StoreEvent(
            event_type=StoreEventType.DECODE_FAILED,
            severity=EventSeverity.WARNING,
            key=key,
            description="Stored value could not be decoded",
            error_message=error,
        )

    @staticmethod
    def medium_failed(date: str, error: str) -> StoreEvent:
        return StoreEvent(
            event_type=StoreEventType.MEDIUM_FAILED,
            severity=EventSeverity.ERROR,
            date=date,
            description="Medium failed while loading a date's records",
            error_message=error,
        )

    @staticmethod
    def date_switched(date: str, degraded: bool) -> StoreEvent:
        return StoreEvent(
            event_type=StoreEventType.DATE_SWITCHED,
            severity=EventSeverity.WARNING if degraded else EventSeverity.INFO,
            date=date,
            description=f"Switched to {date}",
            details={"degraded": degraded},
        )

    @staticmethod
    def invariant_rejected(rule: str, details: Optional[dict] = None) -> StoreEvent:
        return StoreEvent(
            event_type=StoreEventType.INVARIANT_REJECTED,
            severity=EventSeverity.WARNING,
            description=f"Change rejected: {rule}",
            details=details or {},
        )

    @staticmethod
    def key_skipped(key: str, reason: str) -> StoreEvent:
        return StoreEvent(
            event_type=StoreEventType.KEY_SKIPPED,
            severity=EventSeverity.DEBUG,
            key=key,
            description=f"Skipped key during scan: {reason}",
            details={"reason": reason},
        )

    @staticmethod
    def summary_computed(
        year: int,
        schedule_days: int,
        expense_days: int,
    ) -> StoreEvent:
        return StoreEvent(
            event_type=StoreEventType.SUMMARY_COMPUTED,
            description=f"Yearly summary computed for {year}",
            details={
                "year": year,
                "schedule_days": schedule_days,
                "expense_days": expense_days,
            },
        )
