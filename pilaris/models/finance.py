"""
Finance and Settings Models for Pilaris

Services (the priced catalog), expenses, the global settings record and
the derived report/summary values.

Money is held as Decimal in memory and written as a JSON number, which is
how existing stored records represent it.
"""

from decimal import Decimal
from typing import Annotated, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PlainSerializer,
    TypeAdapter,
    field_validator,
)

from pilaris.config import DefaultsSettings
from pilaris.models.schedule import (
    AttendanceStatus,
    DailySchedule,
    Student,
    TimeSlot,
    generate_unique_id,
)


# Non-negative amount, serialized as a JSON number.
Money = Annotated[
    Decimal,
    Field(ge=0),
    PlainSerializer(float, return_type=float, when_used="json"),
]

# Derived amount that may go negative (net profit).
SignedMoney = Annotated[
    Decimal,
    PlainSerializer(float, return_type=float, when_used="json"),
]


# =============================================================================
# PERSISTED RECORDS
# =============================================================================

class Service(BaseModel):
    """A priced service of the catalog."""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(
        default_factory=generate_unique_id,
        min_length=1,
        description="Unique service ID"
    )
    name: str = Field(
        ...,
        description="Display name (e.g. 'Pilates')"
    )
    price: Money = Field(
        ...,
        description="Unit price charged per attending student"
    )


class Expense(BaseModel):
    """An expense incurred on one date."""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(
        default_factory=generate_unique_id,
        min_length=1,
        description="Unique expense ID"
    )
    description: str = Field(
        default="",
        description="What the money was spent on"
    )
    amount: Money = Field(
        ...,
        description="Amount spent"
    )
    date: str = Field(
        ...,
        description="ISO date (YYYY-MM-DD) the expense belongs to"
    )


ExpenseListAdapter = TypeAdapter(list[Expense])


class AppSettings(BaseModel):
    """
    Global settings record, shared by every date.

    The catalog must never be empty: a schedule's default slots reference
    its first service.
    """
    model_config = ConfigDict(populate_by_name=True)

    services: list[Service] = Field(
        ...,
        min_length=1,
        description="Service catalog"
    )
    student_tags: list[str] = Field(
        default_factory=list,
        alias="studentTags",
        description="Valid student tags"
    )

    @field_validator('student_tags')
    @classmethod
    def dedupe_tags(cls, v: list[str]) -> list[str]:
        """Keep the first occurrence of every tag."""
        unique: list[str] = []
        for tag in v:
            if tag not in unique:
                unique.append(tag)
        return unique

    @property
    def default_service_id(self) -> str:
        return self.services[0].id

    def find_service(self, service_id: str) -> Optional[Service]:
        for service in self.services:
            if service.id == service_id:
                return service
        return None


# =============================================================================
# STORE DEFAULTS
# =============================================================================

class StoreDefaults(BaseModel):
    """
    Default configuration handed to the record store.

    Holds the values used whenever a record is missing: the default
    service and tags of a fresh settings record, and the shape of a fresh
    day's schedule.
    """

    default_service: Service
    student_tags: list[str] = Field(default_factory=list)
    time_slots: list[str] = Field(..., min_length=1)
    students_per_slot: int = Field(default=3, ge=1)

    @classmethod
    def from_settings(cls, defaults: DefaultsSettings) -> "StoreDefaults":
        """Build defaults from configuration; the default service gets a new id."""
        return cls(
            default_service=Service(
                name=defaults.service_name,
                price=Decimal(str(defaults.service_price)),
            ),
            student_tags=defaults.student_tags_list,
            time_slots=defaults.time_slots_list,
            students_per_slot=defaults.students_per_slot,
        )

    def app_settings(self) -> AppSettings:
        """A fresh default settings record."""
        return AppSettings(
            services=[self.default_service.model_copy()],
            student_tags=list(self.student_tags),
        )

    def schedule(self, service_id: str) -> DailySchedule:
        """A fresh schedule: every time label, each with blank open seats."""
        return [
            TimeSlot(
                time=time,
                service_id=service_id,
                students=[
                    Student(status=AttendanceStatus.VAGO)
                    for _ in range(self.students_per_slot)
                ],
            )
            for time in self.time_slots
        ]


class DayRecords(BaseModel):
    """
    Both per-date records of one day, loaded together.

    `degraded` is True when a default was substituted for a stored value,
    either because it could not be decoded or because the medium failed.
    `medium_failed` marks the latter: the stored records were not read at
    all and may still be intact.
    """

    date: str
    schedule: DailySchedule
    expenses: list[Expense] = Field(default_factory=list)
    degraded: bool = False
    medium_failed: bool = False


# =============================================================================
# DERIVED VALUES
# =============================================================================

class DailyReport(BaseModel):
    """Financial summary of a single day."""

    date: str
    revenue: Money
    expenses: Money
    net_profit: SignedMoney
    estimated_tax: Money
    attended_count: int = Field(ge=0)
    absent_count: int = Field(ge=0)


class MonthlyTotals(BaseModel):
    """Revenue and expenses of one month of a yearly summary."""

    revenue: Money = Decimal("0")
    expenses: Money = Decimal("0")

    @property
    def net_profit(self) -> Decimal:
        return self.revenue - self.expenses


class YearlySummary(BaseModel):
    """
    Financial summary of a year, recomputed on every request.

    The estimated tax is a flat-rate placeholder over gross revenue,
    not an actual tax computation.
    """

    year: int
    total_revenue: Money
    total_expenses: Money
    net_profit: SignedMoney
    estimated_tax: Money
    tax_rate: Decimal
    schedule_days: int = Field(default=0, ge=0)
    expense_days: int = Field(default=0, ge=0)
    months: dict[str, MonthlyTotals] = Field(
        default_factory=dict,
        description="Breakdown keyed by 'YYYY-MM'"
    )

    @property
    def has_data(self) -> bool:
        return bool(self.schedule_days or self.expense_days)
