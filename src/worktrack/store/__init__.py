"""Persistent key-value storage.

Layout on disk (``FileBackend``):
    ~/.worktrack/data/
    ├── projects.json      # ordered array of Project objects
    ├── clients.json       # ordered array of Client objects
    └── timer.json         # {isRunning, startTs, elapsedMs}
"""

from worktrack.store.backends import FileBackend, MemoryBackend, StorageBackend
from worktrack.store.persistent import PersistentStore

__all__ = ["FileBackend", "MemoryBackend", "PersistentStore", "StorageBackend"]
