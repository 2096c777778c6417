"""
Abstract Storage Interface

The record store sits on top of a flat key/value medium: a synchronous,
string-keyed, process-local persistent map. The medium has no querying
of its own; range-like reads are done by enumerating its keys.

Any medium (in-memory dict, JSON file, ...) must implement these methods.
"""

from abc import ABC, abstractmethod
from typing import Optional


class KeyValueMedium(ABC):
    """Abstract interface for the raw key/value medium."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """
        Read the value stored under a key.

        Args:
            key: The key to read

        Returns:
            The stored string, or None if the key is absent
        """
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """
        Store a value under a key, replacing any previous value.

        Raises:
            MediumError: If the write fails
        """
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove a key. Removing an absent key is not an error."""
        pass

    @abstractmethod
    def keys(self) -> list[str]:
        """
        Enumerate every key currently present.

        Returns:
            A snapshot list; the medium may be written while it is iterated
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class MediumError(StorageError):
    """The underlying medium could not be read or written."""
    pass


class InvariantViolationError(StorageError):
    """Attempted to persist a state that breaks a record invariant."""
    pass
