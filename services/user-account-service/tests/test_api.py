from __future__ import annotations

from datetime import timedelta

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from account_messages import (
    SendNotificationsResponse,
    UserAccountSnapshot,
    VerifyApproverResponse,
)
from account_messages.constants import (
    PERMISSION_GRANT_PERMISSIONS,
    PERMISSION_READ_FILES,
    SEND_NOTIFICATIONS_ACTIVITY,
    VERIFY_APPROVER_ACTIVITY,
)
from fakes import FakeHost
from user_account.api import routes
from user_account.domain.errors import UserAlreadyExistsError, UserNotFoundError
from user_account.domain.service import UserAccountService
from user_account.orchestration.control_loop import EntityControlLoop
from user_account.repository import UserAccountRecord


class FakeRepository:
    """In-memory repository running each entity's state machine on a fake host."""

    def __init__(self) -> None:
        self.hosts: dict[str, FakeHost] = {}
        self.loops: dict[str, EntityControlLoop] = {}

    async def start(self, username: str, snapshot: UserAccountSnapshot | None = None) -> None:
        existing = self.loops.get(username)
        if existing is not None and not existing.state.deleted:
            raise UserAlreadyExistsError(f"user {username} has already been created")
        host = FakeHost(
            entity_id=username,
            activities={
                VERIFY_APPROVER_ACTIVITY: self._verify_approver,
                SEND_NOTIFICATIONS_ACTIVITY: lambda request: SendNotificationsResponse(),
            },
        )
        self.hosts[username] = host
        self.loops[username] = EntityControlLoop(host, snapshot or UserAccountSnapshot())

    async def execute_command(self, username, name, request, result_type):
        return await self._host(username).update(name.value, request)

    async def query(self, username, name, result_type):
        return self._host(username).query(name.value)

    async def list_running(self, permission: str | None = None) -> list[UserAccountRecord]:
        records = []
        for username, loop in self.loops.items():
            account = loop.state.account
            if account.deleted:
                continue
            if permission and permission not in account.permissions_granted:
                continue
            records.append(
                UserAccountRecord(
                    username=username,
                    permissions=list(account.permissions_granted),
                    awaiting_approval=list(account.awaiting_approval),
                )
            )
        return records

    def _host(self, username: str) -> FakeHost:
        if username not in self.hosts:
            raise UserNotFoundError(f"user {username} not found")
        return self.hosts[username]

    def _verify_approver(self, request):
        approver = self._host(request.approver_id)
        granted = approver.query("granted").permissions
        return VerifyApproverResponse(verified=PERMISSION_GRANT_PERMISSIONS in granted)


@pytest.fixture
def api_client():
    """Provide a FastAPI test client with isolated state."""
    repository = FakeRepository()
    service = UserAccountService(repository)

    app = FastAPI()
    app.include_router(routes.router)
    app.state.user_account_service = service

    with TestClient(app) as client:
        yield client, repository


def create(client, username: str, permissions: list[str] | None = None):
    return client.post("/v1/users", json={"username": username, "permissions": permissions or []})


def test_create_user_returns_created(api_client):
    client, repository = api_client

    response = create(client, "alice")

    assert response.status_code == 201
    assert response.json() == {"username": "alice", "status": "accepted"}
    assert repository.loops["alice"].state.account.created


def test_create_user_twice_conflicts(api_client):
    client, _ = api_client
    create(client, "alice")

    response = create(client, "alice")

    assert response.status_code == 409
    assert "already been created" in response.json()["detail"]


def test_create_user_requires_username(api_client):
    client, _ = api_client

    response = client.post("/v1/users", json={"username": ""})

    assert response.status_code == 422


def test_request_and_approve_permission_flow(api_client):
    client, _ = api_client
    create(client, "bob", [PERMISSION_GRANT_PERMISSIONS])
    create(client, "alice")

    requested = client.post("/v1/users/alice/permissions", json={"permission": PERMISSION_READ_FILES})
    assert requested.status_code == 200
    assert client.get("/v1/users/alice").json()["awaiting_approval"] == [PERMISSION_READ_FILES]

    approved = client.post(
        "/v1/users/alice/permissions/approve",
        json={"approver_id": "bob", "permission": PERMISSION_READ_FILES},
    )
    assert approved.status_code == 200

    body = client.get("/v1/users/alice").json()
    assert body["permissions"] == [PERMISSION_READ_FILES]
    assert body["awaiting_approval"] == []


def test_approve_by_non_approver_is_forbidden(api_client):
    client, _ = api_client
    create(client, "bob")
    create(client, "alice")
    client.post("/v1/users/alice/permissions", json={"permission": PERMISSION_READ_FILES})

    response = client.post(
        "/v1/users/alice/permissions/approve",
        json={"approver_id": "bob", "permission": PERMISSION_READ_FILES},
    )

    assert response.status_code == 403
    assert response.json()["detail"] == "bob cannot grant permission read_files"


def test_approve_unrequested_permission_is_not_found(api_client):
    client, _ = api_client
    create(client, "bob", [PERMISSION_GRANT_PERMISSIONS])
    create(client, "alice")

    response = client.post(
        "/v1/users/alice/permissions/approve",
        json={"approver_id": "bob", "permission": PERMISSION_READ_FILES},
    )

    assert response.status_code == 404
    assert response.json()["detail"] == "permission not found"


def test_unknown_user_is_not_found(api_client):
    client, _ = api_client

    assert client.get("/v1/users/nobody").status_code == 404
    assert client.post("/v1/users/nobody/delete").status_code == 404


def test_delete_and_undo_delete(api_client):
    client, _ = api_client
    create(client, "alice")

    deleted = client.post("/v1/users/alice/delete")
    assert deleted.status_code == 200

    body = client.get("/v1/users/alice").json()
    assert body["deletion_requested"] is True
    assert body["deleted"] is False
    assert body["deletion_undo_window_seconds"] is not None

    locked = client.post("/v1/users/alice/permissions", json={"permission": PERMISSION_READ_FILES})
    assert locked.status_code == 409
    assert locked.json()["detail"] == "user deleted"

    restored = client.post("/v1/users/alice/undo-delete")
    assert restored.status_code == 200
    body = client.get("/v1/users/alice").json()
    assert body["deletion_requested"] is False
    assert body["deletion_undo_window_seconds"] is None


def test_list_users_reports_admin_and_filters_by_permission(api_client):
    client, _ = api_client
    create(client, "alice")
    create(client, "bob", [PERMISSION_GRANT_PERMISSIONS])
    client.post("/v1/users/alice/permissions", json={"permission": PERMISSION_READ_FILES})

    listing = client.get("/v1/users").json()
    assert listing["admin_username"] == "bob"
    assert {user["username"] for user in listing["users"]} == {"alice", "bob"}
    alice = next(user for user in listing["users"] if user["username"] == "alice")
    assert alice["awaiting_approval"] == [PERMISSION_READ_FILES]

    filtered = client.get("/v1/users", params={"permission": PERMISSION_GRANT_PERMISSIONS}).json()
    assert [user["username"] for user in filtered["users"]] == ["bob"]


def test_undo_window_remaining_counts_down(api_client):
    client, repository = api_client
    create(client, "alice")
    client.post("/v1/users/alice/delete")
    details = repository.loops["alice"].state.user_details()

    remaining = UserAccountService.undo_window_remaining(
        details, details.deletion_requested_at + timedelta(seconds=15)
    )
    assert remaining == 45.0
    assert UserAccountService.undo_window_remaining(
        details, details.deletion_scheduled_for + timedelta(seconds=5)
    ) == 0.0

    client.post("/v1/users/alice/undo-delete")
