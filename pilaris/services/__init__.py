"""Services package."""

from pilaris.services.storage import (
    InMemoryMedium,
    InvariantViolationError,
    JsonFileMedium,
    KeyValueMedium,
    MediumError,
    PartitionedRecordStore,
    StorageError,
)

__all__ = [
    "InMemoryMedium",
    "InvariantViolationError",
    "JsonFileMedium",
    "KeyValueMedium",
    "MediumError",
    "PartitionedRecordStore",
    "StorageError",
]
