"""In-memory key/value medium, used for tests and throwaway sessions."""

from typing import Optional

from pilaris.services.storage.interface import KeyValueMedium


class InMemoryMedium(KeyValueMedium):
    """Dict-backed medium. Keys are enumerated in insertion order."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)

    def __len__(self) -> int:
        return len(self._data)
