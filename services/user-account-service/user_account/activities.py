"""Activities the user account entity calls out to."""

from __future__ import annotations

from temporalio import activity
from temporalio.client import Client

from account_messages import (
    PermissionsGrantedResponse,
    QueryName,
    SendNotificationsRequest,
    SendNotificationsResponse,
    VerifyApproverRequest,
    VerifyApproverResponse,
)
from account_messages.constants import (
    PERMISSION_GRANT_PERMISSIONS,
    SEND_NOTIFICATIONS_ACTIVITY,
    VERIFY_APPROVER_ACTIVITY,
)


class ApprovalActivities:
    """Cross-entity lookups and side effects for permission approvals."""

    def __init__(self, client: Client) -> None:
        """Store the Temporal client used to reach other account entities."""
        if client is None:
            raise ValueError("client required and missing")
        self._client = client

    @activity.defn(name=VERIFY_APPROVER_ACTIVITY)
    async def verify_approver(self, request: VerifyApproverRequest) -> VerifyApproverResponse:
        """Return whether the approver's own account holds ``grant_permissions``.

        Lookup failures propagate so the approving command fails rather than
        treating an unreachable approver as unauthorised.
        """
        handle = self._client.get_workflow_handle(request.approver_id)
        granted = await handle.query(
            QueryName.permissions_granted.value, result_type=PermissionsGrantedResponse
        )
        verified = PERMISSION_GRANT_PERMISSIONS in granted.permissions
        activity.logger.info(
            "approver %s verified=%s for %s", request.approver_id, verified, request.permission
        )
        return VerifyApproverResponse(verified=verified)

    @activity.defn(name=SEND_NOTIFICATIONS_ACTIVITY)
    async def send_notifications(self, request: SendNotificationsRequest) -> SendNotificationsResponse:
        # placeholder hook: no delivery channel is wired up yet
        activity.logger.info(
            "sending notifications: %s granted %s to %s",
            request.approver_id,
            request.permission_type,
            request.requester_id,
        )
        return SendNotificationsResponse()
