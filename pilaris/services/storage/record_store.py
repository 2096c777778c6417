"""
Partitioned Record Store

Simulates a small per-date database on top of a flat key/value medium.
Each date owns two records (its schedule and its expense list), each under
its own key; global settings live under a single fixed key.

Reads never fail on bad data: a value that is missing or cannot be
decoded is replaced by a well-defined default, and the decode failure is
logged. Writes always replace the whole record.
"""

from datetime import date as Date
from typing import Callable, Optional, TypeVar, Union

from pydantic import ValidationError

from pilaris.audit import AuditLogger
from pilaris.models.finance import (
    AppSettings,
    DayRecords,
    Expense,
    ExpenseListAdapter,
    Service,
    StoreDefaults,
)
from pilaris.models.schedule import DailySchedule, DailyScheduleAdapter
from pilaris.services.storage.interface import (
    InvariantViolationError,
    KeyValueMedium,
    StorageError,
)
from pilaris.services.storage.keys import (
    SETTINGS_KEY,
    RecordKind,
    normalize_date,
    record_key,
)


T = TypeVar("T")

DayLike = Union[Date, str]


class PartitionedRecordStore:
    """
    Date-scoped load/save/create-on-miss over a KeyValueMedium.

    Args:
        medium: The raw key/value medium
        defaults: Values used whenever a record is missing or unreadable
        audit_logger: Where decode failures and writes are reported
    """

    def __init__(
        self,
        medium: KeyValueMedium,
        defaults: StoreDefaults,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._medium = medium
        self._defaults = defaults
        self._audit = audit_logger or AuditLogger()

    @property
    def medium(self) -> KeyValueMedium:
        return self._medium

    @property
    def defaults(self) -> StoreDefaults:
        return self._defaults

    @property
    def audit_logger(self) -> AuditLogger:
        return self._audit

    # =========================================================================
    # Raw access
    # =========================================================================

    def keys(self) -> list[str]:
        """Enumerate every key of the medium."""
        return self._medium.keys()

    def _read(self, key: str, decode: Callable[[str], T]) -> tuple[Optional[T], bool]:
        """
        Read and decode one key.

        Returns:
            (value, corrupted): value is None when the key is absent or the
            stored text does not decode; corrupted is True only in the
            latter case.
        """
        raw = self._medium.get(key)
        if raw is None:
            return None, False
        try:
            value = decode(raw)
        except (ValidationError, ValueError) as e:
            self._audit.log_decode_failed(key, str(e))
            return None, True
        self._audit.log_record_loaded(key)
        return value, False

    def read_schedule_record(self, key: str) -> Optional[DailySchedule]:
        """Decode the schedule stored under an arbitrary key (None if unusable)."""
        schedule, _ = self._read(key, DailyScheduleAdapter.validate_json)
        return schedule

    def read_expenses_record(self, key: str) -> Optional[list[Expense]]:
        """Decode the expense list stored under an arbitrary key (None if unusable)."""
        expenses, _ = self._read(key, ExpenseListAdapter.validate_json)
        return expenses

    # =========================================================================
    # Settings
    # =========================================================================

    def load_settings(self) -> AppSettings:
        """Stored settings, or a fresh default record."""
        settings, corrupted = self._read(SETTINGS_KEY, AppSettings.model_validate_json)
        if settings is None:
            self._audit.log_record_defaulted(
                SETTINGS_KEY, "settings", "corrupted" if corrupted else "absent"
            )
            return self._defaults.app_settings()
        return settings

    def save_settings(self, settings: AppSettings) -> None:
        """
        Write the settings record.

        Raises:
            InvariantViolationError: if the catalog is empty
        """
        if not settings.services:
            self._audit.log_invariant_rejected("service catalog cannot be empty")
            raise InvariantViolationError("At least one service is required")
        self._medium.set(SETTINGS_KEY, settings.model_dump_json(by_alias=True))
        self._audit.log_record_saved(SETTINGS_KEY, "settings", len(settings.services))

    # =========================================================================
    # Schedule
    # =========================================================================

    def default_schedule(self, services: Optional[list[Service]] = None) -> DailySchedule:
        """A fresh schedule referencing the first service of the catalog."""
        if services is None:
            services = self.load_settings().services
        service_id = services[0].id if services else self._defaults.default_service.id
        return self._defaults.schedule(service_id)

    def _load_schedule(
        self,
        day: str,
        services: Optional[list[Service]],
    ) -> tuple[DailySchedule, bool]:
        key = record_key(day, RecordKind.SCHEDULE)
        schedule, corrupted = self._read(key, DailyScheduleAdapter.validate_json)
        if not schedule:
            reason = "corrupted" if corrupted else ("empty" if schedule == [] else "absent")
            self._audit.log_record_defaulted(key, RecordKind.SCHEDULE.value, reason)
            return self.default_schedule(services), corrupted
        return schedule, False

    def load_schedule(
        self,
        day: DayLike,
        services: Optional[list[Service]] = None,
    ) -> DailySchedule:
        """
        Load a date's schedule.

        An absent, empty or undecodable record yields the default schedule
        built from `services` (or the stored catalog when not given).
        """
        schedule, _ = self._load_schedule(normalize_date(day), services)
        return schedule

    def save_schedule(self, day: DayLike, schedule: DailySchedule) -> None:
        """Write a date's whole schedule."""
        key = record_key(day, RecordKind.SCHEDULE)
        payload = DailyScheduleAdapter.dump_json(schedule, by_alias=True)
        self._medium.set(key, payload.decode("utf-8"))
        self._audit.log_record_saved(key, RecordKind.SCHEDULE.value, len(schedule))

    # =========================================================================
    # Expenses
    # =========================================================================

    def _load_expenses(self, day: str) -> tuple[list[Expense], bool]:
        key = record_key(day, RecordKind.EXPENSES)
        expenses, corrupted = self._read(key, ExpenseListAdapter.validate_json)
        if expenses is None:
            self._audit.log_record_defaulted(
                key, RecordKind.EXPENSES.value, "corrupted" if corrupted else "absent"
            )
            return [], corrupted
        return expenses, False

    def load_expenses(self, day: DayLike) -> list[Expense]:
        """Load a date's expense list (empty when absent or undecodable)."""
        expenses, _ = self._load_expenses(normalize_date(day))
        return expenses

    def save_expenses(self, day: DayLike, expenses: list[Expense]) -> None:
        """Write a date's whole expense list."""
        key = record_key(day, RecordKind.EXPENSES)
        payload = ExpenseListAdapter.dump_json(expenses, by_alias=True)
        self._medium.set(key, payload.decode("utf-8"))
        self._audit.log_record_saved(key, RecordKind.EXPENSES.value, len(expenses))

    # =========================================================================
    # Day-level operations
    # =========================================================================

    def switch_date(
        self,
        day: DayLike,
        services: Optional[list[Service]] = None,
    ) -> DayRecords:
        """
        Load both records of a date as one step.

        If the medium fails while loading the settings or either record,
        both records fall back to their defaults together and the result is
        flagged `medium_failed`; the result never mixes a loaded record
        with a stale one. Such defaults must not be written back, since the
        stored records may still be intact.
        """
        day = normalize_date(day)
        medium_failed = False
        try:
            if services is None:
                services = self.load_settings().services
            schedule, schedule_corrupted = self._load_schedule(day, services)
            expenses, expenses_corrupted = self._load_expenses(day)
            degraded = schedule_corrupted or expenses_corrupted
        except StorageError as e:
            self._audit.log_medium_failed(day, str(e))
            if services is None:
                services = [self._defaults.default_service]
            schedule = self.default_schedule(services)
            expenses = []
            degraded = True
            medium_failed = True

        self._audit.log_date_switched(day, degraded)
        return DayRecords(
            date=day,
            schedule=schedule,
            expenses=expenses,
            degraded=degraded,
            medium_failed=medium_failed,
        )

    def delete_day(self, day: DayLike) -> None:
        """Remove both records of a date; the next load regenerates defaults."""
        for kind in RecordKind:
            key = record_key(day, kind)
            if self._medium.get(key) is not None:
                self._medium.delete(key)
                self._audit.log_record_deleted(key)
