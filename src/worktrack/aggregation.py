"""Project creation with client aggregate upkeep.

Client aggregates (``projects`` count and ``totalPaid``) are maintained
incrementally here, never recomputed from the project list. Projects added,
edited or deleted through the repositories directly will not be reflected;
``worktrack.stats.client_drift`` reports such mismatches.
"""

from __future__ import annotations

import logging
import threading
from typing import Any

from worktrack.models import ACTIVE, Client, Project
from worktrack.repositories import ClientRepository, ProjectRepository

logger = logging.getLogger(__name__)


class AggregationEngine:
    """Adds a project and reflects it on its client in one critical section."""

    def __init__(
        self,
        projects: ProjectRepository,
        clients: ClientRepository,
        lock: threading.RLock,
    ) -> None:
        self.projects = projects
        self.clients = clients
        self._lock = lock

    def add_project_and_update_client(self, data: dict[str, Any]) -> Project:
        client_name = str(data.get("client") or "")
        with self._lock:
            project = self.projects.add(data)
            client = self.clients.find_by_name(client_name)
            if client is not None:
                self._merge_into(client, project)
            else:
                client = self.clients.add(
                    {
                        "name": client_name,
                        "avatar": Client.avatar_for(client_name),
                        "projects": 1,
                        "totalPaid": project.budget,
                        "status": ACTIVE,
                    }
                )
                logger.info("New client %r from project %r", client.name, project.name)
        return project

    def _merge_into(self, client: Client, project: Project) -> None:
        self.clients.update(
            client.id,
            {
                "projects": client.projects + 1,
                "totalPaid": client.total_paid + project.budget,
                "status": ACTIVE,
            },
        )
        logger.debug(
            "Client %r now has %d projects, total %s",
            client.name,
            client.projects,
            client.total_paid,
        )
