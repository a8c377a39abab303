"""Account snapshots and query projections shared across services."""

from __future__ import annotations

from datetime import datetime
from pydantic import BaseModel, Field


class UserAccountSnapshot(BaseModel):
    """State carried into a fresh entity instance, either on first start or across continue-as-new."""

    awaiting_approval: list[str] = Field(default_factory=list)
    permissions: list[str] = Field(default_factory=list)
    deletion_requested_at: datetime | None = None


class AwaitingApprovalResponse(BaseModel):
    permissions: list[str] = Field(default_factory=list)


class PermissionsGrantedResponse(BaseModel):
    permissions: list[str] = Field(default_factory=list)


class UserDetailsResponse(BaseModel):
    awaiting_approval: AwaitingApprovalResponse
    deletion_requested: bool = False
    deletion_requested_at: datetime | None = None
    deletion_scheduled_for: datetime | None = None
    permissions: PermissionsGrantedResponse
    deleted: bool = False
