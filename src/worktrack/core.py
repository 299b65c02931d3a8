"""Workspace — the store object constructed once per process.

Wires backend, persistent store, repositories, aggregation engine and timer
together. The presentation layer receives a Workspace and calls into it;
nothing in the package reaches for a module-level global.

Construction order matters: collections and the timer snapshot are
rehydrated from storage before any operation runs.
"""

from __future__ import annotations

import logging
import threading
from typing import Any

from worktrack.aggregation import AggregationEngine
from worktrack.config import WorktrackConfig
from worktrack.models import Project
from worktrack.repositories import ClientRepository, ProjectRepository
from worktrack.scheduler.timer import Clock, TimerService, wall_clock_ms
from worktrack.store.backends import FileBackend, StorageBackend
from worktrack.store.persistent import PersistentStore

logger = logging.getLogger(__name__)


class Workspace:
    """Owns every collection and service for one session."""

    def __init__(
        self,
        config: WorktrackConfig,
        backend: StorageBackend | None = None,
        clock: Clock = wall_clock_ms,
    ) -> None:
        self.config = config
        self.store = PersistentStore(backend or FileBackend(config.data_dir))
        # Shared by both repositories and the engine: one critical section.
        self._lock = threading.RLock()
        self.projects = ProjectRepository(self.store, self._lock)
        self.clients = ClientRepository(self.store, self._lock)
        self.aggregation = AggregationEngine(self.projects, self.clients, self._lock)
        self.timer = TimerService(
            self.store,
            tick_interval=config.timer.tick_interval,
            persist_on_tick=config.timer.persist_on_tick,
            clock=clock,
        )
        logger.info(
            "Workspace loaded: %d projects, %d clients, timer %s",
            len(self.projects),
            len(self.clients),
            "running" if self.timer.is_running else "stopped",
        )

    def add_project_and_update_client(self, data: dict[str, Any]) -> Project:
        return self.aggregation.add_project_and_update_client(data)

    def close(self) -> None:
        """Session teardown: cancel the timer tick."""
        self.timer.close()

    def __enter__(self) -> Workspace:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()
