"""Read-only dashboard figures computed from a snapshot of the collections."""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, timedelta
from typing import TYPE_CHECKING

from worktrack.models import ACTIVE, Client, Project

if TYPE_CHECKING:
    from worktrack.core import Workspace

logger = logging.getLogger(__name__)

STATUSES = ("planning", "in-progress", "completed")


@dataclass
class Summary:
    total_earnings: int | float
    active_clients: int
    tasks_due: int
    completion_rate: int


@dataclass
class ClientDrift:
    """Stored client aggregates versus the figures recomputed from projects."""

    client_id: str
    name: str
    stored_projects: int
    actual_projects: int
    stored_total: int | float
    actual_total: int | float


def total_earnings(projects: Iterable[Project]) -> int | float:
    return sum(p.budget for p in projects)


def active_client_count(clients: Iterable[Client]) -> int:
    return sum(1 for c in clients if c.status == ACTIVE)


def _parse_deadline(deadline: str) -> date | None:
    try:
        return date.fromisoformat(str(deadline)[:10])
    except ValueError:
        return None


def tasks_due(
    projects: Iterable[Project], within_days: int = 7, today: date | None = None
) -> int:
    """Projects whose deadline falls on or before ``today + within_days``.

    Overdue projects count; "TBD" and unparseable deadlines do not.
    """
    cutoff = (today or date.today()) + timedelta(days=within_days)
    count = 0
    for p in projects:
        deadline = _parse_deadline(p.deadline)
        if deadline is not None and deadline <= cutoff:
            count += 1
    return count


def completion_rate(projects: Iterable[Project]) -> int:
    """Mean progress rounded to an int; 0 when there are no projects."""
    progress = [p.progress for p in projects]
    if not progress:
        return 0
    return round(sum(progress) / len(progress))


def project_status(progress: int | float) -> str:
    if progress >= 100:
        return "completed"
    if progress > 0:
        return "in-progress"
    return "planning"


def filter_projects(
    projects: Iterable[Project], query: str = "", status: str = "all"
) -> list[Project]:
    """Substring search on name and client, combined with a status filter."""
    q = query.lower()
    result = []
    for p in projects:
        matches_search = q in str(p.name).lower() or q in str(p.client).lower()
        matches_status = status == "all" or project_status(p.progress) == status
        if matches_search and matches_status:
            result.append(p)
    return result


def client_drift(
    projects: Iterable[Project], clients: Iterable[Client]
) -> list[ClientDrift]:
    """Clients whose stored aggregates disagree with their projects.

    Nothing is repaired. Projects are attributed by case-insensitive name; a
    duplicated client name is attributed to its first client only, as the
    aggregation engine does.
    """
    counts: dict[str, int] = {}
    totals: dict[str, int | float] = {}
    for p in projects:
        key = str(p.client).lower()
        counts[key] = counts.get(key, 0) + 1
        totals[key] = totals.get(key, 0) + p.budget

    drift = []
    seen: set[str] = set()
    for c in clients:
        key = str(c.name).lower()
        if key in seen:
            continue
        seen.add(key)
        actual_projects = counts.get(key, 0)
        actual_total = totals.get(key, 0)
        if c.projects != actual_projects or not math.isclose(c.total_paid, actual_total):
            drift.append(
                ClientDrift(
                    client_id=c.id,
                    name=c.name,
                    stored_projects=c.projects,
                    actual_projects=actual_projects,
                    stored_total=c.total_paid,
                    actual_total=actual_total,
                )
            )
    if drift:
        logger.debug("%d clients with drifted aggregates", len(drift))
    return drift


def summarize(workspace: Workspace, today: date | None = None) -> Summary:
    projects = workspace.projects.list()
    clients = workspace.clients.list()
    return Summary(
        total_earnings=total_earnings(projects),
        active_clients=active_client_count(clients),
        tasks_due=tasks_due(
            projects, workspace.config.stats.due_within_days, today=today
        ),
        completion_rate=completion_rate(projects),
    )
