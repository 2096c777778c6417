"""Shared fixtures: an in-memory medium and a store with fixed defaults."""

from decimal import Decimal

import pytest

from pilaris.audit import AuditLogger
from pilaris.models.finance import Service, StoreDefaults
from pilaris.services.storage import InMemoryMedium, PartitionedRecordStore


TIME_SLOTS = [f"{hour:02d}:00" for hour in range(6, 21)]


@pytest.fixture
def pilates() -> Service:
    return Service(id="svc-pilates", name="Pilates", price=Decimal("25.00"))


@pytest.fixture
def defaults(pilates: Service) -> StoreDefaults:
    return StoreDefaults(
        default_service=pilates,
        student_tags=["Estúdio", "Wellhub", "Gympass"],
        time_slots=TIME_SLOTS,
        students_per_slot=3,
    )


@pytest.fixture
def medium() -> InMemoryMedium:
    return InMemoryMedium()


@pytest.fixture
def audit_logger() -> AuditLogger:
    return AuditLogger(keep_history=True)


@pytest.fixture
def store(
    medium: InMemoryMedium,
    defaults: StoreDefaults,
    audit_logger: AuditLogger,
) -> PartitionedRecordStore:
    return PartitionedRecordStore(medium, defaults, audit_logger=audit_logger)
