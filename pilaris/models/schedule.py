"""
Schedule Models for Pilaris

A day's schedule is an ordered list of time slots, each slot holding the
students booked for it. These models are also the persisted wire format,
so field aliases match the stored JSON exactly (`serviceId`).

Partial updates are expressed with explicit patch models: a field left
unset means "keep the current value", a field that is set replaces it.
"""

from enum import Enum
from typing import Annotated, Optional
from uuid import uuid4

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
)


def generate_unique_id() -> str:
    """Return a collision-resistant identifier for a new record."""
    return str(uuid4())


# =============================================================================
# ENUMS
# =============================================================================

class AttendanceStatus(str, Enum):
    """
    Attendance of a student in a slot.

    Only PRESENTE counts toward revenue. The values are the persisted
    literals and must not change.
    """
    VAGO = "Vago"          # Open / unfilled seat
    PRESENTE = "Presente"  # Attended
    FALTOU = "Faltou"      # Absent


# =============================================================================
# SCHEDULE RECORDS
# =============================================================================

class Student(BaseModel):
    """One occupant of a time slot."""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(
        default_factory=generate_unique_id,
        min_length=1,
        description="Unique student entry ID"
    )
    name: str = Field(
        default="",
        description="Display name (blank for an open seat)"
    )
    status: AttendanceStatus = Field(
        default=AttendanceStatus.VAGO,
        description="Attendance status"
    )
    tag: str = Field(
        default="",
        description="Classification tag, drawn from the configured tag set"
    )
    notes: str = Field(
        default="",
        description="Free-text note"
    )

    @property
    def is_present(self) -> bool:
        return self.status == AttendanceStatus.PRESENTE


class TimeSlot(BaseModel):
    """
    A fixed point in the day's schedule.

    `time` is the slot's key within the day. `service_id` refers to a
    Service of the catalog; an id that no longer resolves earns nothing.
    """
    model_config = ConfigDict(populate_by_name=True)

    time: str = Field(
        ...,
        min_length=1,
        description="Time label, unique within a day (e.g. '08:00')"
    )
    service_id: str = Field(
        ...,
        alias="serviceId",
        description="ID of the service given in this slot"
    )
    students: list[Student] = Field(
        default_factory=list,
        description="Students in display order"
    )

    @property
    def present_count(self) -> int:
        return sum(1 for student in self.students if student.is_present)

    def find_student(self, student_id: str) -> Optional[Student]:
        for student in self.students:
            if student.id == student_id:
                return student
        return None


def _check_unique_times(slots: list[TimeSlot]) -> list[TimeSlot]:
    seen: set[str] = set()
    for slot in slots:
        if slot.time in seen:
            raise ValueError(f"Duplicate time slot: {slot.time}")
        seen.add(slot.time)
    return slots


# A day's schedule is a plain list; the adapter validates and serializes it.
DailySchedule = list[TimeSlot]

DailyScheduleAdapter = TypeAdapter(
    Annotated[list[TimeSlot], AfterValidator(_check_unique_times)]
)


# =============================================================================
# PATCHES
# =============================================================================

class StudentPatch(BaseModel):
    """
    Partial update of a Student.

    Only fields that were explicitly given are applied. The id is not
    patchable.
    """
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = None
    status: Optional[AttendanceStatus] = None
    tag: Optional[str] = None
    notes: Optional[str] = None

    def apply(self, student: Student) -> Student:
        """Return a new Student with the patched fields replaced."""
        changes = self.model_dump(exclude_unset=True)
        return Student.model_validate({**student.model_dump(), **changes})


class TimeSlotPatch(BaseModel):
    """Partial update of a TimeSlot (the time label is its key and stays)."""
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    service_id: Optional[str] = Field(default=None, alias="serviceId")
    students: Optional[list[Student]] = None

    def apply(self, slot: TimeSlot) -> TimeSlot:
        """Return a new TimeSlot with the patched fields replaced."""
        changes = self.model_dump(exclude_unset=True)
        return TimeSlot.model_validate({**slot.model_dump(), **changes})
