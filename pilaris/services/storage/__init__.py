"""
Storage Services Package

Provides the key/value medium interface, its implementations, the
partition key scheme and the record store built on top of them.
"""

from pilaris.services.storage.interface import (
    InvariantViolationError,
    KeyValueMedium,
    MediumError,
    StorageError,
)
from pilaris.services.storage.json_file import JsonFileMedium
from pilaris.services.storage.keys import (
    KEY_PREFIX,
    SETTINGS_KEY,
    PartitionKey,
    RecordKind,
    normalize_date,
    parse_record_key,
    record_key,
    year_prefix,
)
from pilaris.services.storage.memory import InMemoryMedium
from pilaris.services.storage.record_store import PartitionedRecordStore

__all__ = [
    # Interfaces
    "KeyValueMedium",
    # Exceptions
    "InvariantViolationError",
    "MediumError",
    "StorageError",
    # Media
    "InMemoryMedium",
    "JsonFileMedium",
    # Key scheme
    "KEY_PREFIX",
    "SETTINGS_KEY",
    "PartitionKey",
    "RecordKind",
    "normalize_date",
    "parse_record_key",
    "record_key",
    "year_prefix",
    # Record store
    "PartitionedRecordStore",
]
