"""In-memory entity collections backed by a PersistentStore.

Collections are ordered most-recent-first. Each repository rehydrates its
collection once, at construction, and writes the whole collection back after
every mutation.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Generic, TypeVar

from worktrack.models import Client, Project
from worktrack.store.persistent import PersistentStore

logger = logging.getLogger(__name__)

E = TypeVar("E", Project, Client)


class _Repository(Generic[E]):
    key: str
    entity_cls: type[E]

    def __init__(self, store: PersistentStore, lock: threading.RLock | None = None) -> None:
        self._store = store
        self._lock = lock or threading.RLock()
        self._items: list[E] = [
            self.entity_cls.from_dict(record) for record in store.load_collection(self.key)
        ]
        logger.debug("Loaded %d %s", len(self._items), self.key)

    def _persist(self) -> bool:
        return self._store.save(self.key, [item.to_dict() for item in self._items])

    def _index_of(self, entity_id: Any) -> int | None:
        for i, item in enumerate(self._items):
            if item.id == entity_id:
                return i
        return None

    def add(self, data: dict[str, Any]) -> E:
        """Create an entity from ``data``, prepend it and persist."""
        entity = self.entity_cls.from_dict(data)
        with self._lock:
            self._items.insert(0, entity)
            self._persist()
        logger.debug("Added %s %s", self.entity_cls.__name__.lower(), entity.id)
        return entity

    def update(self, entity_id: Any, fields: dict[str, Any]) -> E | None:
        """Merge ``fields`` into the entity with ``entity_id``. Unknown ids are ignored."""
        with self._lock:
            idx = self._index_of(entity_id)
            if idx is None:
                logger.debug("%s %s not found for update", self.entity_cls.__name__, entity_id)
                return None
            entity = self._items[idx]
            entity.apply(fields)
            self._persist()
            return entity

    def delete(self, entity_id: Any) -> bool:
        with self._lock:
            idx = self._index_of(entity_id)
            if idx is None:
                return False
            del self._items[idx]
            self._persist()
        logger.debug("Deleted %s %s", self.entity_cls.__name__.lower(), entity_id)
        return True

    def get(self, entity_id: Any) -> E | None:
        with self._lock:
            idx = self._index_of(entity_id)
            return None if idx is None else self._items[idx]

    def list(self) -> tuple[E, ...]:
        with self._lock:
            return tuple(self._items)

    def __len__(self) -> int:
        return len(self._items)


class ProjectRepository(_Repository[Project]):
    """Owns the Project collection."""

    key = "projects"
    entity_cls = Project


class ClientRepository(_Repository[Client]):
    """Owns the Client collection."""

    key = "clients"
    entity_cls = Client

    def find_by_name(self, name: str) -> Client | None:
        """Case-insensitive exact match on ``name``; first in collection order wins."""
        wanted = str(name or "").lower()
        with self._lock:
            matches = [c for c in self._items if str(c.name or "").lower() == wanted]
        if len(matches) > 1:
            logger.warning(
                "%d clients named %r (ids: %s); using the first",
                len(matches),
                name,
                ", ".join(str(c.id) for c in matches),
            )
        return matches[0] if matches else None
