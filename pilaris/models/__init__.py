"""
Data Models Package

This package contains all Pydantic models used in Pilaris.
Every record read from or written to storage goes through these schemas.
"""

from pilaris.models.schedule import (
    AttendanceStatus,
    DailySchedule,
    DailyScheduleAdapter,
    Student,
    StudentPatch,
    TimeSlot,
    TimeSlotPatch,
    generate_unique_id,
)
from pilaris.models.finance import (
    AppSettings,
    DailyReport,
    DayRecords,
    Expense,
    ExpenseListAdapter,
    MonthlyTotals,
    Service,
    StoreDefaults,
    YearlySummary,
)
from pilaris.models.audit import (
    EventSeverity,
    StoreEvent,
    StoreEventBuilder,
    StoreEventType,
)

__all__ = [
    # Schedule models
    "AttendanceStatus",
    "DailySchedule",
    "DailyScheduleAdapter",
    "Student",
    "StudentPatch",
    "TimeSlot",
    "TimeSlotPatch",
    "generate_unique_id",
    # Finance models
    "AppSettings",
    "DailyReport",
    "DayRecords",
    "Expense",
    "ExpenseListAdapter",
    "MonthlyTotals",
    "Service",
    "StoreDefaults",
    "YearlySummary",
    # Audit models
    "EventSeverity",
    "StoreEvent",
    "StoreEventBuilder",
    "StoreEventType",
]
