"""Best-effort JSON load/save of named values.

Every mutation writes the whole collection again (full snapshot, no diffing),
which is fine at the data volumes of a single freelancer.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from worktrack.errors import StorageReadError, StorageWriteError
from worktrack.store.backends import StorageBackend

logger = logging.getLogger(__name__)

_MISSING = object()


class PersistentStore:
    """Load/save JSON-serializable values; never raises to the caller."""

    def __init__(self, backend: StorageBackend) -> None:
        self.backend = backend

    def load(self, key: str, default: Any = _MISSING) -> Any:
        """Return the parsed value under ``key``, or ``default`` (``[]`` if omitted).

        Missing keys and unreadable or malformed values both fall back to the
        default; the latter are logged as read errors.
        """
        if default is _MISSING:
            default = []
        try:
            text = self.backend.read(key)
            if text is None:
                logger.debug("No stored value for %r, using default", key)
                return default
            try:
                return json.loads(text)
            except ValueError as e:
                raise StorageReadError(key, f"malformed JSON: {e}") from e
        except StorageReadError as e:
            logger.warning("Storage read failed: %s", e)
            return default

    def load_collection(self, key: str) -> list[dict[str, Any]]:
        """Load an array of objects. Anything else yields an empty list."""
        value = self.load(key, [])
        if not isinstance(value, list):
            logger.warning(
                "Storage read failed: %s",
                StorageReadError(key, f"expected an array, got {type(value).__name__}"),
            )
            return []
        records = [item for item in value if isinstance(item, dict)]
        if len(records) != len(value):
            logger.warning("Dropped %d non-object entries from %r", len(value) - len(records), key)
        return records

    def save(self, key: str, value: Any) -> bool:
        """Serialize and write ``value``. Returns False if the write failed."""
        try:
            try:
                text = json.dumps(value, ensure_ascii=False)
            except (TypeError, ValueError) as e:
                raise StorageWriteError(key, f"not JSON-serializable: {e}") from e
            self.backend.write(key, text)
        except StorageWriteError as e:
            logger.warning("Storage write failed, keeping in-memory state: %s", e)
            return False
        return True
