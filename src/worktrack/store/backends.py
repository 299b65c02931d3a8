"""Storage backends: where serialized snapshots physically live."""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Protocol, runtime_checkable

from worktrack.errors import StorageReadError, StorageWriteError

logger = logging.getLogger(__name__)

_KEY_RE = re.compile(r"^[A-Za-z0-9_.-]+$")


@runtime_checkable
class StorageBackend(Protocol):
    """Protocol for a string key-value store, in the manner of web local storage."""

    def read(self, key: str) -> str | None:
        """Return the stored text, or None if the key is absent.

        Raises StorageReadError if the key exists but cannot be read.
        """
        ...

    def write(self, key: str, text: str) -> None:
        """Store ``text`` under ``key``. Raises StorageWriteError on failure."""
        ...

    def remove(self, key: str) -> None: ...


class FileBackend:
    """One ``<key>.json`` file per key under a data directory."""

    def __init__(self, root: Path) -> None:
        self.root = root

    def _path(self, key: str) -> Path:
        if not _KEY_RE.match(key):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self.root / f"{key}.json"

    def read(self, key: str) -> str | None:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise StorageReadError(key, str(e)) from e

    def write(self, key: str, text: str) -> None:
        path = self._path(key)
        tmp = path.with_suffix(".json.tmp")
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            tmp.write_text(text, encoding="utf-8")
            os.replace(tmp, path)
        except OSError as e:
            raise StorageWriteError(key, str(e)) from e

    def remove(self, key: str) -> None:
        path = self._path(key)
        if path.exists():
            path.unlink()


class MemoryBackend:
    """Process-local backend. ``quota`` caps total stored characters."""

    def __init__(self, quota: int | None = None) -> None:
        self.quota = quota
        self._data: dict[str, str] = {}

    def read(self, key: str) -> str | None:
        return self._data.get(key)

    def write(self, key: str, text: str) -> None:
        if self.quota is not None:
            used = sum(len(v) for k, v in self._data.items() if k != key)
            if used + len(text) > self.quota:
                raise StorageWriteError(
                    key, f"quota exceeded ({used + len(text)} > {self.quota})"
                )
        self._data[key] = text

    def remove(self, key: str) -> None:
        self._data.pop(key, None)
