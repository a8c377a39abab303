"""Tests for the approval activities."""

from __future__ import annotations

import pytest
from temporalio.testing import ActivityEnvironment

from account_messages import (
    PermissionsGrantedResponse,
    SendNotificationsRequest,
    SendNotificationsResponse,
    VerifyApproverRequest,
)
from account_messages.constants import PERMISSION_GRANT_PERMISSIONS, PERMISSION_READ_FILES
from user_account.activities import ApprovalActivities


class FakeHandle:
    def __init__(self, client: "FakeClient", workflow_id: str) -> None:
        self._client = client
        self._workflow_id = workflow_id

    async def query(self, name: str, result_type=None):
        self._client.queries.append((self._workflow_id, name))
        if self._workflow_id not in self._client.granted:
            raise RuntimeError(f"workflow {self._workflow_id} not found")
        return PermissionsGrantedResponse(permissions=self._client.granted[self._workflow_id])


class FakeClient:
    """Answers the granted-permissions query for a fixed set of accounts."""

    def __init__(self, granted: dict[str, list[str]]) -> None:
        self.granted = granted
        self.queries: list[tuple[str, str]] = []

    def get_workflow_handle(self, workflow_id: str) -> FakeHandle:
        return FakeHandle(self, workflow_id)


@pytest.fixture
def client() -> FakeClient:
    return FakeClient(
        {
            "bob": [PERMISSION_READ_FILES, PERMISSION_GRANT_PERMISSIONS],
            "carol": [PERMISSION_READ_FILES],
        }
    )


@pytest.mark.asyncio
async def test_verify_approver_accepts_account_holding_grant_permissions(client):
    activities = ApprovalActivities(client)

    response = await ActivityEnvironment().run(
        activities.verify_approver,
        VerifyApproverRequest(approver_id="bob", permission=PERMISSION_READ_FILES),
    )

    assert response.verified
    assert client.queries == [("bob", "granted")]


@pytest.mark.asyncio
async def test_verify_approver_rejects_account_without_grant_permissions(client):
    activities = ApprovalActivities(client)

    response = await ActivityEnvironment().run(
        activities.verify_approver,
        VerifyApproverRequest(approver_id="carol", permission=PERMISSION_READ_FILES),
    )

    assert not response.verified


@pytest.mark.asyncio
async def test_verify_approver_propagates_lookup_failures(client):
    activities = ApprovalActivities(client)

    with pytest.raises(RuntimeError, match="not found"):
        await ActivityEnvironment().run(
            activities.verify_approver,
            VerifyApproverRequest(approver_id="mallory", permission=PERMISSION_READ_FILES),
        )


@pytest.mark.asyncio
async def test_send_notifications_is_a_no_op(client):
    activities = ApprovalActivities(client)

    response = await ActivityEnvironment().run(
        activities.send_notifications,
        SendNotificationsRequest(approver_id="bob", permission_type=PERMISSION_READ_FILES, requester_id="alice"),
    )

    assert response == SendNotificationsResponse()
    assert client.queries == []


def test_activities_require_a_client():
    with pytest.raises(ValueError, match="client required"):
        ApprovalActivities(None)
