"""
Shared pytest fixtures for the welfaredesk test suite.

Provides:
    - FakeAdminApi: in-memory stand-in for the backend, records every call
    - ManualRequestRunner: queues API tasks so tests decide when they finish
    - api / runner / manual_runner fixtures
"""

from __future__ import annotations

import pytest

from welfaredesk.app.admin_models import (
    BeneficiaryRecord,
    HierarchyNode,
    ProjectRecord,
    SchemeRecord,
    StagesConfiguration,
    StatusUpdateRecord,
    TransactionRecord,
    UserRecord,
    sort_status_updates,
)
from welfaredesk.app.errors import ApiRequestError
from welfaredesk.app.request_runner import ImmediateRequestRunner


# ── Fakes ────────────────────────────────────────────────────────────────


class FakeAdminApi:
    def __init__(self) -> None:
        self.calls: list[tuple] = []
        self.nodes: dict[str, HierarchyNode] = {}
        self.projects: dict[str, ProjectRecord] = {}
        self.configurations: dict[str, StagesConfiguration] = {}
        self.schemes: dict[str, SchemeRecord] = {}
        self.beneficiaries: dict[str, BeneficiaryRecord] = {}
        self.users: dict[str, UserRecord] = {}
        self.transactions: list[TransactionRecord] = []
        self.failures: dict[str, Exception] = {}
        self._next_id = 0

    def fail(self, method: str, exc: Exception | None = None) -> None:
        self.failures[method] = exc or ApiRequestError("Server exploded", status_code=500)

    def _record(self, method: str, *args) -> None:
        self.calls.append((method, *args))
        exc = self.failures.get(method)
        if exc is not None:
            raise exc

    def calls_to(self, method: str) -> list[tuple]:
        return [call for call in self.calls if call[0] == method]

    def add_node(self, node_id: str, name: str, node_type: str, **fields) -> HierarchyNode:
        node = HierarchyNode(node_id=node_id, name=name, node_type=node_type, **fields)
        self.nodes[node_id] = node
        return node

    def list_by_type(self, node_type, *, active=True):
        self._record("list_by_type", node_type, active)
        return [
            node
            for node in self.nodes.values()
            if node.node_type == node_type and (node.is_active or not active)
        ]

    def get_location(self, node_id):
        self._record("get_location", node_id)
        if node_id not in self.nodes:
            raise ApiRequestError("Location not found", status_code=404)
        return self.nodes[node_id]

    def create_location(self, node):
        self._record("create_location", node)
        self._next_id += 1
        node_id = f"new-{self._next_id}"
        created = HierarchyNode(
            node_id=node_id,
            name=node.name,
            code=node.code,
            node_type=node.node_type,
            parent_id=node.parent_id,
        )
        self.nodes[node_id] = created
        return created

    def update_location(self, node_id, node):
        self._record("update_location", node_id, node)
        self.nodes[node_id] = node
        return node

    def delete_location(self, node_id):
        self._record("delete_location", node_id)
        self.nodes.pop(node_id, None)

    def list_projects(self):
        self._record("list_projects")
        return list(self.projects.values())

    def get_stage_configuration(self, project_id):
        self._record("get_stage_configuration", project_id)
        return self.configurations.get(project_id)

    def set_stage_configuration(self, project_id, configuration):
        self._record("set_stage_configuration", project_id, configuration)
        self.configurations[project_id] = configuration

    def list_status_updates(self, project_id):
        self._record("list_status_updates", project_id)
        return list(self.projects[project_id].status_updates)

    def add_status_update(self, project_id, update):
        self._record("add_status_update", project_id, update)
        project = self.projects[project_id]
        self._next_id += 1
        saved = StatusUpdateRecord(
            update_id=f"su-{self._next_id}",
            stage=update.stage,
            status=update.status,
            description=update.description,
            remarks=update.remarks,
            updated_at=f"2026-01-{self._next_id:02d}T10:00:00Z",
        )
        project.status_updates = sort_status_updates([*project.status_updates, saved])
        return list(project.status_updates)

    def update_status_update(self, project_id, update_id, update):
        self._record("update_status_update", project_id, update_id, update)
        project = self.projects[project_id]
        rows = []
        for row in project.status_updates:
            if row.update_id == update_id:
                row = StatusUpdateRecord(
                    update_id=update_id,
                    stage=update.stage,
                    status=update.status,
                    description=update.description,
                    remarks=update.remarks,
                    updated_at=row.updated_at,
                )
            rows.append(row)
        project.status_updates = rows
        return list(rows)

    def delete_status_update(self, project_id, update_id):
        self._record("delete_status_update", project_id, update_id)
        project = self.projects[project_id]
        project.status_updates = [row for row in project.status_updates if row.update_id != update_id]

    def get_scheme(self, scheme_id):
        self._record("get_scheme", scheme_id)
        if scheme_id not in self.schemes:
            raise ApiRequestError("Scheme not found", status_code=404)
        return self.schemes[scheme_id]

    def set_scheme_stages(self, scheme_id, stages):
        self._record("set_scheme_stages", scheme_id, stages)
        scheme = self.schemes.get(scheme_id)
        if scheme is not None:
            scheme.status_stages = list(stages)

    def list_beneficiaries(self):
        self._record("list_beneficiaries")
        return list(self.beneficiaries.values())

    def delete_beneficiary(self, beneficiary_id):
        self._record("delete_beneficiary", beneficiary_id)
        self.beneficiaries.pop(beneficiary_id, None)

    def list_users(self):
        self._record("list_users")
        return list(self.users.values())

    def delete_user(self, user_id):
        self._record("delete_user", user_id)
        self.users.pop(user_id, None)

    def list_transactions(self, *, limit=50):
        self._record("list_transactions", limit)
        return list(self.transactions[:limit])


class ManualRequestRunner:
    """Holds tasks until the test releases them, in any order."""

    def __init__(self) -> None:
        self.pending: list[tuple] = []

    def run(self, task, on_success, on_failure) -> None:
        self.pending.append((task, on_success, on_failure))

    def __len__(self) -> int:
        return len(self.pending)

    def __bool__(self) -> bool:
        # Defining __len__ would otherwise make an empty runner falsy.
        return True

    def complete(self, index: int = 0):
        task, on_success, on_failure = self.pending.pop(index)
        try:
            result = task()
        except Exception as exc:
            on_failure(exc)
            return exc
        on_success(result)
        return result

    def complete_all(self) -> None:
        while self.pending:
            self.complete(0)


# ── Fixtures ─────────────────────────────────────────────────────────────


@pytest.fixture
def api():
    fake = FakeAdminApi()
    fake.add_node("d1", "North District", "district", code="NORTH_DISTRICT")
    fake.add_node("d2", "East District", "district", code="EAST_DISTRICT")
    fake.add_node("d3", "Closed District", "district", code="CLOSED", is_active=False)
    fake.add_node("a1", "Riverside", "area", code="RIV", parent_id="d1")
    return fake


@pytest.fixture
def runner():
    return ImmediateRequestRunner()


@pytest.fixture
def manual_runner():
    return ManualRequestRunner()
