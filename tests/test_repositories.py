"""Tests for the project and client repositories."""

from __future__ import annotations

import json
import logging

import pytest

from worktrack.repositories import ClientRepository, ProjectRepository
from worktrack.store import MemoryBackend, PersistentStore


@pytest.fixture
def backend() -> MemoryBackend:
    return MemoryBackend()


@pytest.fixture
def store(backend: MemoryBackend) -> PersistentStore:
    return PersistentStore(backend)


@pytest.fixture
def projects(store: PersistentStore) -> ProjectRepository:
    return ProjectRepository(store)


@pytest.fixture
def clients(store: PersistentStore) -> ClientRepository:
    return ClientRepository(store)


def stored(backend: MemoryBackend, key: str):
    return json.loads(backend.read(key))


class TestProjectAdd:
    def test_add_assigns_id_and_normalizes(self, projects: ProjectRepository):
        project = projects.add({"name": "Site", "client": "Acme", "budget": "1200", "progress": "x"})
        assert project.id
        assert project.budget == 1200
        assert project.progress == 0

    def test_add_keeps_given_id(self, projects: ProjectRepository):
        assert projects.add({"id": "p-1", "name": "Site"}).id == "p-1"

    def test_most_recent_first(self, projects: ProjectRepository):
        a = projects.add({"name": "A"})
        b = projects.add({"name": "B"})
        assert [p.id for p in projects.list()] == [b.id, a.id]

    def test_add_persists_full_snapshot(self, projects: ProjectRepository, backend: MemoryBackend):
        projects.add({"name": "A", "budget": 10})
        projects.add({"name": "B", "budget": 20})
        names = [p["name"] for p in stored(backend, "projects")]
        assert names == ["B", "A"]

    def test_list_is_read_only_view(self, projects: ProjectRepository):
        projects.add({"name": "A"})
        view = projects.list()
        assert isinstance(view, tuple)
        projects.add({"name": "B"})
        assert len(view) == 1


class TestProjectUpdateDelete:
    def test_update_merges(self, projects: ProjectRepository, backend: MemoryBackend):
        p = projects.add({"name": "A", "budget": 10, "progress": 0})
        updated = projects.update(p.id, {"progress": 50, "deadline": "2026-12-01"})
        assert updated is p
        assert p.progress == 50
        assert p.budget == 10
        assert stored(backend, "projects")[0]["deadline"] == "2026-12-01"

    def test_update_unknown_id_is_noop(self, projects: ProjectRepository):
        projects.add({"name": "A"})
        before = [p.to_dict() for p in projects.list()]
        assert projects.update("missing", {"name": "B"}) is None
        assert [p.to_dict() for p in projects.list()] == before

    def test_delete(self, projects: ProjectRepository, backend: MemoryBackend):
        a = projects.add({"name": "A"})
        projects.add({"name": "B"})
        assert projects.delete(a.id) is True
        assert projects.get(a.id) is None
        assert [p["name"] for p in stored(backend, "projects")] == ["B"]

    def test_delete_unknown(self, projects: ProjectRepository):
        assert projects.delete("missing") is False


class TestRehydration:
    def test_added_records_survive_reload(self, store: PersistentStore):
        ProjectRepository(store).add({"name": "Site", "client": "Acme", "budget": 10})
        ClientRepository(store).add({"name": "Acme", "totalPaid": 10})
        assert len(ProjectRepository(store)) == 1
        assert len(ClientRepository(store)) == 1

    def test_null_fields_rehydrate_as_text(self, backend: MemoryBackend, store: PersistentStore):
        backend.write("projects", json.dumps([{"id": "p", "name": None, "client": None}]))
        backend.write("clients", json.dumps([{"id": "c", "name": None, "avatar": None}]))
        (project,) = ProjectRepository(store).list()
        (client,) = ClientRepository(store).list()
        assert (project.name, project.client, project.deadline) == ("", "", "TBD")
        assert (client.name, client.avatar) == ("", "")

    def test_reload_equal(self, projects: ProjectRepository, store: PersistentStore):
        projects.add({"name": "A", "client": "Acme", "budget": 5, "extra_field": True})
        projects.add({"name": "B", "client": "Beta", "budget": 7.5})
        reloaded = ProjectRepository(store)
        assert [p.to_dict() for p in reloaded.list()] == [p.to_dict() for p in projects.list()]

    def test_legacy_records_get_ids(self, backend: MemoryBackend, store: PersistentStore):
        backend.write("projects", json.dumps([{"name": "Old"}, {"id": 1700000000000.42, "name": "Legacy"}]))
        repo = ProjectRepository(store)
        first, second = repo.list()
        assert first.id
        assert second.id == 1700000000000.42
        assert repo.update(1700000000000.42, {"progress": 10}) is second

    def test_malformed_storage_yields_empty(self, backend: MemoryBackend, store: PersistentStore):
        backend.write("projects", "[{broken")
        repo = ProjectRepository(store)
        assert repo.list() == ()
        repo.add({"name": "Fresh"})
        assert len(ProjectRepository(store)) == 1

    def test_write_failure_keeps_memory(self):
        backend = MemoryBackend(quota=0)
        repo = ProjectRepository(PersistentStore(backend))
        project = repo.add({"name": "A"})
        assert repo.get(project.id) is project
        assert backend.read("projects") is None


class TestClientRepository:
    def test_add_normalizes(self, clients: ClientRepository):
        client = clients.add({"name": "Acme", "projects": "3", "totalPaid": "bad"})
        assert client.projects == 3
        assert client.total_paid == 0

    def test_add_assigns_id(self, clients: ClientRepository):
        assert clients.add({"name": "Acme"}).id

    def test_update(self, clients: ClientRepository, backend: MemoryBackend):
        c = clients.add({"name": "Acme", "status": "active"})
        clients.update(c.id, {"status": "inactive", "totalPaid": 40})
        record = stored(backend, "clients")[0]
        assert record["status"] == "inactive"
        assert record["totalPaid"] == 40

    def test_find_by_name_case_insensitive(self, clients: ClientRepository):
        c = clients.add({"name": "Acme"})
        assert clients.find_by_name("ACME") is c
        assert clients.find_by_name("acme ") is None
        assert clients.find_by_name("Other") is None

    def test_find_by_name_first_match_wins(self, clients: ClientRepository, caplog):
        older = clients.add({"name": "acme"})
        newer = clients.add({"name": "Acme"})
        with caplog.at_level(logging.WARNING):
            assert clients.find_by_name("ACME") is newer
        assert older.id in caplog.text
