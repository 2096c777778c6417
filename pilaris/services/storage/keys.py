"""
Partition Key Scheme

Per-date records live under `pilaris_control_<date>_<kind>`; global
settings live under one fixed key. Existing stored data depends on this
exact text, including the `schedule` / `expenses` literals.

Split on `_`, a per-date key has the date at index 2 and the kind at
index 3. The date is not escaped, so it must never contain `_`.
"""

from datetime import date as Date, datetime
from enum import Enum
from typing import NamedTuple, Optional, Union


KEY_PREFIX = "pilaris_control"
KEY_SEPARATOR = "_"
SETTINGS_KEY = f"{KEY_PREFIX}{KEY_SEPARATOR}settings"

DATE_SEGMENT = 2
KIND_SEGMENT = 3
MIN_SEGMENTS = 4


class RecordKind(str, Enum):
    """The two per-date record kinds."""
    SCHEDULE = "schedule"
    EXPENSES = "expenses"


class PartitionKey(NamedTuple):
    """The (date, kind) identity of a per-date record."""
    date: str
    kind: RecordKind


def normalize_date(value: Union[Date, str]) -> str:
    """
    Return the ISO text (YYYY-MM-DD) used in keys.

    Raises:
        ValueError: if a string is not an ISO calendar date
    """
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, Date):
        return value.isoformat()
    if KEY_SEPARATOR in value:
        raise ValueError(f"Date must not contain '{KEY_SEPARATOR}': {value!r}")
    return Date.fromisoformat(value).isoformat()


def record_key(day: Union[Date, str], kind: RecordKind) -> str:
    """Build the medium key of one date's record."""
    return KEY_SEPARATOR.join((KEY_PREFIX, normalize_date(day), RecordKind(kind).value))


def year_prefix(year: int) -> str:
    """
    Literal prefix shared by every per-date key of a year.

    Matching is textual: the four-digit year followed by '-' right after
    the common prefix.
    """
    return f"{KEY_PREFIX}{KEY_SEPARATOR}{year:04d}-"


def parse_record_key(key: str) -> Optional[PartitionKey]:
    """
    Split a per-date key into its (date, kind) identity.

    Returns None for keys with fewer than four segments or an unknown
    kind. The date segment is returned as stored, without parsing.
    """
    parts = key.split(KEY_SEPARATOR)
    if len(parts) < MIN_SEGMENTS:
        return None
    try:
        kind = RecordKind(parts[KIND_SEGMENT])
    except ValueError:
        return None
    return PartitionKey(date=parts[DATE_SEGMENT], kind=kind)
