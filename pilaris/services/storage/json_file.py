"""
JSON File Medium

Persists the whole key/value map as a single JSON object on disk: the
desktop equivalent of the browser storage the records were first kept in.

TRADEOFFS:
- Every write rewrites the file (records are small and bounded per day)
- Single process, single writer; no locking
- Writes go to a temp file first and are moved into place, so a crash
  mid-write leaves the previous file intact
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Optional, Union

from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from pilaris.services.storage.interface import KeyValueMedium, MediumError


class JsonFileMedium(KeyValueMedium):
    """
    File-backed medium.

    The file is read once on first access and kept in memory; each
    set/delete writes the full map back. The in-memory map only changes
    once the write has succeeded.
    """

    def __init__(self, path: Union[Path, str]):
        self._path = Path(path).expanduser()
        self._data: Optional[dict[str, str]] = None

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict[str, str]:
        """Read the backing file (a missing file is an empty map)."""
        if self._data is None:
            if not self._path.exists():
                self._data = {}
            else:
                try:
                    raw = json.loads(self._path.read_text(encoding="utf-8"))
                except (OSError, ValueError) as e:
                    raise MediumError(f"Failed to read {self._path}: {e}")
                if not isinstance(raw, dict) or not all(
                    isinstance(k, str) and isinstance(v, str) for k, v in raw.items()
                ):
                    raise MediumError(
                        f"{self._path} is not a string-to-string JSON object"
                    )
                self._data = raw
        return self._data

    @retry(
        retry=retry_if_exception_type(OSError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.1, min=0.1, max=1),
        reraise=True,
    )
    def _write_file(self, data: dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self._path.parent,
            prefix=f".{self._path.name}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh, ensure_ascii=False)
            os.replace(tmp_name, self._path)
        except OSError:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def _commit(self, data: dict[str, str]) -> None:
        """Write `data` to disk, then make it the cached map."""
        try:
            self._write_file(data)
        except OSError as e:
            raise MediumError(f"Failed to write {self._path}: {e}")
        self._data = data

    def get(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        self._commit({**self._load(), key: value})

    def delete(self, key: str) -> None:
        data = self._load()
        if key in data:
            self._commit({k: v for k, v in data.items() if k != key})

    def keys(self) -> list[str]:
        return list(self._load())
