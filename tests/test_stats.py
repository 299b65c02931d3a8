"""Tests for the dashboard figures."""

from __future__ import annotations

from datetime import date

import pytest

from worktrack.models import Client, Project
from worktrack.stats import (
    active_client_count,
    client_drift,
    completion_rate,
    filter_projects,
    project_status,
    tasks_due,
    total_earnings,
)

TODAY = date(2026, 10, 19)


def make_project(**fields) -> Project:
    return Project.from_dict(fields)


@pytest.fixture
def projects() -> list[Project]:
    return [
        make_project(name="Landing page", client="Acme", budget=1200, deadline="2026-10-20", progress=100),
        make_project(name="API audit", client="Beta Ltd", budget=800, deadline="2026-10-26", progress=40),
        make_project(name="Logo", client="acme", budget=300, deadline="2026-10-27", progress=0),
        make_project(name="Overdue fix", client="Gamma", budget=0, deadline="2026-09-01", progress=10),
        make_project(name="Someday", client="Gamma", budget=50.5, deadline="TBD", progress=0),
    ]


class TestSummaries:
    def test_total_earnings(self, projects):
        assert total_earnings(projects) == 2350.5
        assert total_earnings([]) == 0

    def test_active_clients(self):
        clients = [
            Client.from_dict({"name": "A", "status": "active"}),
            Client.from_dict({"name": "B", "status": "inactive"}),
            Client.from_dict({"name": "C"}),
        ]
        assert active_client_count(clients) == 2

    def test_tasks_due_window(self, projects):
        # 2026-10-20, 2026-10-26 and the overdue one; 10-27 is outside, TBD never counts
        assert tasks_due(projects, within_days=7, today=TODAY) == 3
        assert tasks_due(projects, within_days=8, today=TODAY) == 4

    def test_tasks_due_accepts_datetime_strings(self):
        p = make_project(deadline="2026-10-19T18:00:00")
        assert tasks_due([p], today=TODAY) == 1

    def test_completion_rate(self, projects):
        assert completion_rate(projects) == 30
        assert completion_rate([]) == 0


class TestProjectStatus:
    @pytest.mark.parametrize(
        "progress, status",
        [(0, "planning"), (-5, "planning"), (1, "in-progress"), (99.5, "in-progress"), (100, "completed"), (140, "completed")],
    )
    def test_status(self, progress, status):
        assert project_status(progress) == status


class TestFilterProjects:
    def test_query_matches_name_or_client(self, projects):
        assert [p.name for p in filter_projects(projects, "ACME")] == ["Landing page", "Logo"]
        assert [p.name for p in filter_projects(projects, "audit")] == ["API audit"]

    def test_status_filter(self, projects):
        names = [p.name for p in filter_projects(projects, status="planning")]
        assert names == ["Logo", "Someday"]

    def test_combined(self, projects):
        assert [p.name for p in filter_projects(projects, "gamma", "in-progress")] == ["Overdue fix"]

    def test_no_filters(self, projects):
        assert filter_projects(projects) == projects


class TestClientDrift:
    def test_consistent(self):
        projects = [make_project(client="Acme", budget=100), make_project(client="ACME", budget=50)]
        clients = [Client.from_dict({"name": "acme", "projects": 2, "totalPaid": 150})]
        assert client_drift(projects, clients) == []

    def test_reports_deleted_project(self):
        projects = [make_project(client="Acme", budget=100)]
        clients = [Client.from_dict({"id": "c1", "name": "Acme", "projects": 2, "totalPaid": 300})]
        (drift,) = client_drift(projects, clients)
        assert drift.client_id == "c1"
        assert (drift.stored_projects, drift.actual_projects) == (2, 1)
        assert (drift.stored_total, drift.actual_total) == (300, 100)

    def test_duplicate_name_counts_first_only(self):
        projects = [make_project(client="Acme", budget=10)]
        clients = [
            Client.from_dict({"name": "Acme", "projects": 1, "totalPaid": 10}),
            Client.from_dict({"name": "acme", "projects": 0, "totalPaid": 0}),
        ]
        assert client_drift(projects, clients) == []

    def test_float_totals(self):
        projects = [make_project(client="A", budget=0.1), make_project(client="A", budget=0.2)]
        clients = [Client.from_dict({"name": "A", "projects": 2, "totalPaid": 0.3})]
        assert client_drift(projects, clients) == []
