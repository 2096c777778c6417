"""Tests for the studio session flows."""

from datetime import date
from decimal import Decimal

import pytest

from pilaris.config import Settings
from pilaris.finance import ESTIMATED_TAX_RATE
from pilaris.models import (
    AttendanceStatus,
    StoreEventType,
    StudentPatch,
    TimeSlotPatch,
)
from pilaris.orchestrator import (
    LastServiceError,
    RecordNotFoundError,
    StudioSession,
    create_session,
)
from pilaris.services.storage import (
    SETTINGS_KEY,
    InMemoryMedium,
    MediumError,
    PartitionedRecordStore,
)


@pytest.fixture
def session(store) -> StudioSession:
    return StudioSession(store, today=date(2024, 3, 1))


def slot_at_of(schedule, time: str):
    return next(slot for slot in schedule if slot.time == time)


def slot_at(session: StudioSession, time: str):
    return slot_at_of(session.schedule, time)


class FlakyExpensesMedium(InMemoryMedium):
    """Medium whose expense reads fail while `failing` is set."""

    def __init__(self):
        super().__init__()
        self.failing = False

    def get(self, key):
        if self.failing and key.endswith("_expenses"):
            raise MediumError("disk unavailable")
        return super().get(key)


class TestOpeningAndNavigation:

    def test_opens_on_given_date(self, session):
        assert session.current_date == "2024-03-01"
        assert len(session.schedule) == 15
        assert session.expenses == []
        assert session.degraded is False

    def test_persists_settings_and_first_day(self, session, medium):
        """Visiting a date creates its records."""
        assert SETTINGS_KEY in medium.keys()
        assert "pilaris_control_2024-03-01_schedule" in medium.keys()
        assert "pilaris_control_2024-03-01_expenses" in medium.keys()

    def test_change_date_replaces_both_records(self, session):
        session.add_expense("Material", 15)
        student = slot_at(session, "08:00").students[0]
        session.update_student("08:00", student.id, StudentPatch(status=AttendanceStatus.PRESENTE))

        session.change_date("2024-03-02")
        assert session.current_date == "2024-03-02"
        assert session.expenses == []
        assert slot_at(session, "08:00").present_count == 0

        session.change_date(date(2024, 3, 1))
        assert [e.description for e in session.expenses] == ["Material"]
        assert slot_at(session, "08:00").present_count == 1

    def test_corrupted_day_opens_degraded(self, store, medium):
        medium.set("pilaris_control_2024-03-05_schedule", "garbage")
        session = StudioSession(store, today=date(2024, 3, 5))
        assert session.degraded is True
        assert len(session.schedule) == 15

    def test_unreadable_day_is_not_overwritten(self, defaults, audit_logger):
        """Defaults shown after a read failure never replace the stored records."""
        medium = FlakyExpensesMedium()
        store = PartitionedRecordStore(medium, defaults, audit_logger=audit_logger)
        session = StudioSession(store, today=date(2024, 3, 1))
        student = slot_at(session, "08:00").students[0]
        session.update_student(
            "08:00", student.id, StudentPatch(name="Ana", status=AttendanceStatus.PRESENTE)
        )
        session.add_expense("Material", 15)
        session.change_date("2024-03-02")
        stored_schedule = medium.get("pilaris_control_2024-03-01_schedule")
        stored_expenses = medium.get("pilaris_control_2024-03-01_expenses")

        medium.failing = True
        session.change_date("2024-03-01")
        assert session.degraded is True
        assert slot_at(session, "08:00").present_count == 0

        medium.failing = False
        assert medium.get("pilaris_control_2024-03-01_schedule") == stored_schedule
        assert medium.get("pilaris_control_2024-03-01_expenses") == stored_expenses
        stored = slot_at_of(store.load_schedule("2024-03-01"), "08:00")
        assert stored.students[0].name == "Ana"
        assert stored.students[0].status == AttendanceStatus.PRESENTE


class TestScheduleMutations:

    def test_update_student_writes_immediately(self, session, store):
        student = slot_at(session, "08:00").students[0]
        session.update_student(
            "08:00",
            student.id,
            StudentPatch(name="Ana", status=AttendanceStatus.PRESENTE, tag="Wellhub"),
        )
        stored = store.load_schedule("2024-03-01")
        updated = next(slot for slot in stored if slot.time == "08:00").students[0]
        assert updated.name == "Ana"
        assert updated.status == AttendanceStatus.PRESENTE
        assert updated.tag == "Wellhub"

    def test_add_student_starts_present(self, session, store):
        student = session.add_student("09:00")
        assert student.status == AttendanceStatus.PRESENTE
        assert len(slot_at(session, "09:00").students) == 4
        stored = next(slot for slot in store.load_schedule("2024-03-01") if slot.time == "09:00")
        assert stored.students[-1].id == student.id

    def test_remove_student(self, session):
        student = slot_at(session, "10:00").students[1]
        session.remove_student("10:00", student.id)
        assert student.id not in [s.id for s in slot_at(session, "10:00").students]

    def test_update_time_slot_service(self, session, store):
        service = session.add_service("Yoga", 40)
        session.update_time_slot("07:00", TimeSlotPatch(service_id=service.id))
        assert slot_at(session, "07:00").service_id == service.id
        stored = next(slot for slot in store.load_schedule("2024-03-01") if slot.time == "07:00")
        assert stored.service_id == service.id

    def test_unknown_slot_or_student(self, session):
        with pytest.raises(RecordNotFoundError):
            session.add_student("23:30")
        with pytest.raises(RecordNotFoundError):
            session.update_student("08:00", "nobody", StudentPatch(name="x"))
        with pytest.raises(RecordNotFoundError):
            session.remove_student("08:00", "nobody")


class TestExpenseMutations:

    def test_add_expense(self, session, store):
        expense = session.add_expense("Material", "15.00")
        assert expense.date == "2024-03-01"
        assert expense.amount == Decimal("15.00")
        assert store.load_expenses("2024-03-01") == [expense]

    def test_negative_amount_is_rejected(self, session):
        with pytest.raises(ValueError):
            session.add_expense("Estorno", -5)
        assert session.expenses == []

    def test_remove_expense(self, session, store):
        first = session.add_expense("Material", 15)
        second = session.add_expense("Luz", 80)
        assert session.remove_expense(first.id) is True
        assert session.remove_expense("missing") is False
        assert store.load_expenses("2024-03-01") == [second]


class TestSettingsMutations:

    def test_cannot_remove_last_service(self, session, medium, audit_logger):
        """Removing the sole service is rejected; nothing changes."""
        before = medium.get(SETTINGS_KEY)
        only = session.settings.services[0]
        with pytest.raises(LastServiceError):
            session.remove_service(only.id)
        assert session.settings.services == [only]
        assert medium.get(SETTINGS_KEY) == before
        assert audit_logger.events_of_type(StoreEventType.INVARIANT_REJECTED)

    def test_remove_service_when_others_remain(self, session, store):
        extra = session.add_service()
        assert extra.name == "Novo Atendimento"
        assert extra.price == Decimal("20.00")
        session.remove_service(extra.id)
        assert [s.id for s in store.load_settings().services] == ["svc-pilates"]

    def test_remove_unknown_service(self, session):
        session.add_service()
        with pytest.raises(RecordNotFoundError):
            session.remove_service("missing")

    def test_update_service(self, session, store):
        session.update_service("svc-pilates", price="30")
        assert store.load_settings().services[0].price == Decimal("30")
        assert store.load_settings().services[0].name == "Pilates"

    def test_tags(self, session, store):
        assert session.add_tag("  TotalPass ") is True
        assert session.add_tag("TotalPass") is False
        assert session.add_tag("   ") is False
        assert session.remove_tag("Gympass") is True
        assert session.remove_tag("Gympass") is False
        assert store.load_settings().student_tags == ["Estúdio", "Wellhub", "TotalPass"]

    def test_price_change_applies_to_reports(self, session):
        student = slot_at(session, "08:00").students[0]
        session.update_student("08:00", student.id, StudentPatch(status=AttendanceStatus.PRESENTE))
        session.update_service("svc-pilates", price=40)
        assert session.daily_report().revenue == Decimal("40")


class TestEndToEnd:

    def test_day_and_year(self):
        """Default settings, two attendances and one expense on 2024-03-01."""
        session = create_session(
            settings=Settings(),
            medium=InMemoryMedium(),
            today=date(2024, 3, 1),
        )
        assert session.settings.services[0].name == "Pilates"
        assert session.settings.services[0].price == Decimal("25")

        for student in slot_at(session, "08:00").students[:2]:
            session.update_student("08:00", student.id, StudentPatch(status=AttendanceStatus.PRESENTE))
        session.add_expense("Material", 15.00)

        report = session.daily_report()
        assert report.revenue == Decimal("50.00")
        assert report.expenses == Decimal("15.00")
        assert report.net_profit == Decimal("35.00")

        summary = session.yearly_summary(2024)
        assert summary.total_revenue >= Decimal("50.00")
        assert summary.total_expenses >= Decimal("15.00")
        assert summary.estimated_tax == summary.total_revenue * ESTIMATED_TAX_RATE
        assert session.years_with_data() == [2024]

    def test_json_file_backend(self, tmp_path, monkeypatch):
        """A session reopened on the same file sees earlier writes."""
        monkeypatch.setenv("PILARIS_STORAGE_BACKEND", "json_file")
        monkeypatch.setenv("PILARIS_STORAGE_FILE_PATH", str(tmp_path / "pilaris.json"))

        first = create_session(settings=Settings(), today=date(2024, 3, 1))
        first.add_expense("Material", 15)

        second = create_session(settings=Settings(), today=date(2024, 3, 1))
        assert [e.description for e in second.expenses] == ["Material"]
        assert second.settings.services[0].id == first.settings.services[0].id
