"""Exception hierarchy for the storage layer.

Backends raise these; ``PersistentStore`` catches and logs them so that no
store operation ever throws to its caller.
"""

from __future__ import annotations


class WorktrackError(Exception):
    """Base class for worktrack errors."""


class StorageError(WorktrackError):
    """A persistent storage operation failed."""

    def __init__(self, key: str, message: str) -> None:
        super().__init__(f"{key}: {message}")
        self.key = key


class StorageReadError(StorageError):
    """Stored value under a key is unreadable or malformed."""


class StorageWriteError(StorageError):
    """Value could not be written (quota exceeded, unwritable directory...)."""
