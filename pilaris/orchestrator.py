"""
Studio Session

Ties the record store, the calculation rules and the aggregation engine
together into the state a front end works with: the current date, that
date's schedule and expenses, and the global settings.

Every mutation writes the whole containing record straight away (the
whole schedule, the whole expense list or the whole settings record);
nothing is batched. Invariant violations are rejected before anything
is written.
"""

from datetime import date as Date
from decimal import Decimal
from typing import Optional, Union

from pilaris.audit import AuditLogger
from pilaris.config import Settings, get_settings
from pilaris.finance import build_daily_report
from pilaris.models.finance import (
    AppSettings,
    DailyReport,
    DayRecords,
    Expense,
    Service,
    StoreDefaults,
    YearlySummary,
)
from pilaris.models.schedule import (
    AttendanceStatus,
    DailySchedule,
    Student,
    StudentPatch,
    TimeSlot,
    TimeSlotPatch,
)
from pilaris.queries import AnnualAggregator
from pilaris.services.storage import (
    InMemoryMedium,
    InvariantViolationError,
    JsonFileMedium,
    KeyValueMedium,
    PartitionedRecordStore,
)


NEW_SERVICE_NAME = "Novo Atendimento"
NEW_SERVICE_PRICE = Decimal("20.00")


class LastServiceError(InvariantViolationError):
    """Attempted to remove the only service of the catalog."""
    pass


class RecordNotFoundError(LookupError):
    """A time slot, student or service id does not exist."""
    pass


class StudioSession:
    """
    The active session over one studio's records.

    Attributes:
        current_date: ISO date whose records are loaded
        schedule: That date's schedule
        expenses: That date's expenses
        settings: Global settings (catalog and tags)
        degraded: True if the current date's stored data could not be
            decoded or read and defaults were substituted
    """

    def __init__(
        self,
        store: PartitionedRecordStore,
        aggregator: Optional[AnnualAggregator] = None,
        today: Optional[Date] = None,
    ):
        self._store = store
        self._aggregator = aggregator or AnnualAggregator(store)
        self._audit: AuditLogger = store.audit_logger

        # Persisting the settings right away pins the default service id
        # that new schedules reference.
        self.settings: AppSettings = store.load_settings()
        store.save_settings(self.settings)

        self.current_date: str = ""
        self.schedule: DailySchedule = []
        self.expenses: list[Expense] = []
        self.degraded = False
        self.change_date(today or Date.today())

    @property
    def store(self) -> PartitionedRecordStore:
        return self._store

    # =========================================================================
    # Date navigation
    # =========================================================================

    def change_date(self, day: Union[Date, str]) -> DayRecords:
        """
        Switch to another date.

        Schedule and expenses are replaced together; a date visited for
        the first time gets its default records written. Defaults that
        stand in for records the medium failed to read are kept in memory
        only.
        """
        records = self._store.switch_date(day, self.settings.services)
        self.current_date = records.date
        self.schedule = records.schedule
        self.expenses = records.expenses
        self.degraded = records.degraded

        if records.medium_failed:
            return records
        self._store.save_schedule(self.current_date, self.schedule)
        self._store.save_expenses(self.current_date, self.expenses)
        return records

    # =========================================================================
    # Schedule mutations
    # =========================================================================

    def _slot_index(self, time: str) -> int:
        for index, slot in enumerate(self.schedule):
            if slot.time == time:
                return index
        raise RecordNotFoundError(f"No time slot {time!r} on {self.current_date}")

    def _replace_slot(self, index: int, slot: TimeSlot) -> None:
        schedule = list(self.schedule)
        schedule[index] = slot
        self.schedule = schedule
        self._store.save_schedule(self.current_date, self.schedule)

    def update_student(self, time: str, student_id: str, patch: StudentPatch) -> Student:
        """Apply a partial update to one student of a slot."""
        index = self._slot_index(time)
        slot = self.schedule[index]
        student = slot.find_student(student_id)
        if student is None:
            raise RecordNotFoundError(f"No student {student_id!r} at {time}")

        updated = patch.apply(student)
        students = [updated if s.id == student_id else s for s in slot.students]
        self._replace_slot(index, slot.model_copy(update={"students": students}))
        return updated

    def add_student(self, time: str) -> Student:
        """Append a new seat to a slot; an added seat starts as PRESENTE."""
        index = self._slot_index(time)
        slot = self.schedule[index]
        student = Student(status=AttendanceStatus.PRESENTE)
        students = [*slot.students, student]
        self._replace_slot(index, slot.model_copy(update={"students": students}))
        return student

    def remove_student(self, time: str, student_id: str) -> None:
        """Remove a seat from a slot."""
        index = self._slot_index(time)
        slot = self.schedule[index]
        if slot.find_student(student_id) is None:
            raise RecordNotFoundError(f"No student {student_id!r} at {time}")
        students = [s for s in slot.students if s.id != student_id]
        self._replace_slot(index, slot.model_copy(update={"students": students}))

    def update_time_slot(self, time: str, patch: TimeSlotPatch) -> TimeSlot:
        """Apply a partial update (service, students) to a slot."""
        index = self._slot_index(time)
        updated = patch.apply(self.schedule[index])
        self._replace_slot(index, updated)
        return updated

    # =========================================================================
    # Expense mutations
    # =========================================================================

    def add_expense(self, description: str, amount: Union[Decimal, float, str]) -> Expense:
        """Record an expense on the current date."""
        expense = Expense(
            description=description,
            amount=Decimal(str(amount)),
            date=self.current_date,
        )
        self.expenses = [*self.expenses, expense]
        self._store.save_expenses(self.current_date, self.expenses)
        return expense

    def remove_expense(self, expense_id: str) -> bool:
        """
        Remove an expense of the current date.

        Returns:
            True if an expense was removed
        """
        remaining = [e for e in self.expenses if e.id != expense_id]
        if len(remaining) == len(self.expenses):
            return False
        self.expenses = remaining
        self._store.save_expenses(self.current_date, self.expenses)
        return True

    # =========================================================================
    # Settings mutations
    # =========================================================================

    def update_settings(self, settings: AppSettings) -> None:
        """Replace the whole settings record."""
        self._store.save_settings(settings)
        self.settings = settings

    def add_service(
        self,
        name: str = NEW_SERVICE_NAME,
        price: Union[Decimal, float, str] = NEW_SERVICE_PRICE,
    ) -> Service:
        service = Service(name=name, price=Decimal(str(price)))
        self.update_settings(
            self.settings.model_copy(update={"services": [*self.settings.services, service]})
        )
        return service

    def update_service(
        self,
        service_id: str,
        name: Optional[str] = None,
        price: Optional[Union[Decimal, float, str]] = None,
    ) -> Service:
        """Rename and/or reprice a service."""
        current = self.settings.find_service(service_id)
        if current is None:
            raise RecordNotFoundError(f"No service {service_id!r}")

        changes: dict = {}
        if name is not None:
            changes["name"] = name
        if price is not None:
            changes["price"] = Decimal(str(price))
        updated = Service.model_validate({**current.model_dump(), **changes})

        services = [updated if s.id == service_id else s for s in self.settings.services]
        self.update_settings(self.settings.model_copy(update={"services": services}))
        return updated

    def remove_service(self, service_id: str) -> None:
        """
        Remove a service from the catalog.

        Raises:
            LastServiceError: if it is the only service left; the catalog
                is left unchanged and nothing is written
            RecordNotFoundError: if no service has this id
        """
        if len(self.settings.services) <= 1:
            self._audit.log_invariant_rejected(
                "at least one service is required",
                {"service_id": service_id},
            )
            raise LastServiceError("At least one service is required")
        if self.settings.find_service(service_id) is None:
            raise RecordNotFoundError(f"No service {service_id!r}")

        services = [s for s in self.settings.services if s.id != service_id]
        self.update_settings(self.settings.model_copy(update={"services": services}))

    def add_tag(self, tag: str) -> bool:
        """
        Add a student tag.

        Returns:
            False if the tag is blank or already present
        """
        tag = tag.strip()
        if not tag or tag in self.settings.student_tags:
            return False
        self.update_settings(
            self.settings.model_copy(update={"student_tags": [*self.settings.student_tags, tag]})
        )
        return True

    def remove_tag(self, tag: str) -> bool:
        if tag not in self.settings.student_tags:
            return False
        tags = [t for t in self.settings.student_tags if t != tag]
        self.update_settings(self.settings.model_copy(update={"student_tags": tags}))
        return True

    # =========================================================================
    # Reports
    # =========================================================================

    def daily_report(self) -> DailyReport:
        """Financial report of the current date."""
        return build_daily_report(
            self.current_date,
            self.schedule,
            self.expenses,
            self.settings.services,
        )

    def yearly_summary(self, year: int) -> YearlySummary:
        """Summary of a year, priced with the current catalog."""
        return self._aggregator.summarize(year, self.settings.services)

    def years_with_data(self) -> list[int]:
        return self._aggregator.years_with_data()


def create_medium(settings: Settings) -> KeyValueMedium:
    """Build the configured key/value medium."""
    storage = settings.storage
    if storage.backend == "memory":
        return InMemoryMedium()
    return JsonFileMedium(storage.file_path)


def create_session(
    settings: Optional[Settings] = None,
    medium: Optional[KeyValueMedium] = None,
    audit_logger: Optional[AuditLogger] = None,
    today: Optional[Date] = None,
) -> StudioSession:
    """
    Factory function to create all session components.

    Args:
        settings: Configuration; read from the environment when None
        medium: Medium to use instead of the configured one
        audit_logger: Logger shared by store and aggregator
        today: Date opened first; defaults to the current date

    Returns:
        A StudioSession opened on `today`
    """
    settings = settings or get_settings()
    defaults = StoreDefaults.from_settings(settings.defaults)
    store = PartitionedRecordStore(
        medium if medium is not None else create_medium(settings),
        defaults,
        audit_logger=audit_logger,
    )
    return StudioSession(store, AnnualAggregator(store), today=today)
