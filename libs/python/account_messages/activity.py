"""Request/response contracts for the activities the entity calls out to."""

from __future__ import annotations

from pydantic import BaseModel


class VerifyApproverRequest(BaseModel):
    approver_id: str
    permission: str


class VerifyApproverResponse(BaseModel):
    verified: bool = False


class SendNotificationsRequest(BaseModel):
    approver_id: str
    permission_type: str
    requester_id: str


class SendNotificationsResponse(BaseModel):
    pass
