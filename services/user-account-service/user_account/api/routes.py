"""HTTP route definitions for the user account service."""

from __future__ import annotations

import logging

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from pydantic import BaseModel, Field

from ..domain.errors import UserAccountError
from ..domain.service import UserAccountService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1")

_USERNAME_PATTERN = r"^[^\s\"]+$"


class CreateUserRequest(BaseModel):
    """Payload accepted when creating a user account entity."""

    username: str = Field(..., min_length=1, pattern=_USERNAME_PATTERN)
    permissions: list[str] = Field(default_factory=list)


class RequestPermissionRequest(BaseModel):
    permission: str = Field(..., min_length=1)


class ApprovePermissionRequest(BaseModel):
    """Approver identity plus the pending permission they are granting."""

    approver_id: str = Field(..., min_length=1)
    permission: str = Field(..., min_length=1)


class UserResponse(BaseModel):
    """Serialised user details, including time left to undo a pending deletion."""

    username: str
    permissions: list[str]
    awaiting_approval: list[str]
    deletion_requested: bool
    deletion_requested_at: datetime | None = None
    deletion_scheduled_for: datetime | None = None
    deletion_undo_window_seconds: float | None = None
    deleted: bool = False


class UserSummary(BaseModel):
    username: str
    permissions: list[str]
    awaiting_approval: list[str]


class UsersResponse(BaseModel):
    """Running users and the first one able to approve permissions."""

    users: list[UserSummary]
    admin_username: str | None = None


class CommandAccepted(BaseModel):
    username: str
    status: str = "accepted"


def get_service(request: Request) -> UserAccountService:
    """Resolve the `UserAccountService` stored on the FastAPI application state."""
    service: UserAccountService = request.app.state.user_account_service
    return service


@router.post("/users", response_model=CommandAccepted, status_code=status.HTTP_201_CREATED)
async def create_user(
    payload: CreateUserRequest,
    service: UserAccountService = Depends(get_service),
) -> CommandAccepted:
    """Start a user account entity and grant its initial permissions."""
    try:
        await service.create_user(payload.username, payload.permissions)
    except UserAccountError as exc:
        raise _http_error_from_account_error(exc) from exc
    logger.info("created user %s", payload.username)
    return CommandAccepted(username=payload.username)


@router.get("/users", response_model=UsersResponse)
async def list_users(
    permission: str | None = Query(default=None, min_length=1),
    service: UserAccountService = Depends(get_service),
) -> UsersResponse:
    """List running users, optionally only those holding ``permission``."""
    listing = await service.list_users(permission)
    return UsersResponse(
        users=[
            UserSummary(
                username=record.username,
                permissions=record.permissions,
                awaiting_approval=record.awaiting_approval,
            )
            for record in listing.users
        ],
        admin_username=listing.admin_username,
    )


@router.get("/users/{username}", response_model=UserResponse)
async def get_user(
    username: str,
    service: UserAccountService = Depends(get_service),
) -> UserResponse:
    try:
        details = await service.get_user(username)
    except UserAccountError as exc:
        raise _http_error_from_account_error(exc) from exc
    return UserResponse(
        username=username,
        permissions=details.permissions.permissions,
        awaiting_approval=details.awaiting_approval.permissions,
        deletion_requested=details.deletion_requested,
        deletion_requested_at=details.deletion_requested_at,
        deletion_scheduled_for=details.deletion_scheduled_for,
        deletion_undo_window_seconds=service.undo_window_remaining(
            details, datetime.now(timezone.utc)
        ),
        deleted=details.deleted,
    )


@router.post("/users/{username}/permissions", response_model=CommandAccepted)
async def request_permission(
    username: str,
    payload: RequestPermissionRequest,
    service: UserAccountService = Depends(get_service),
) -> CommandAccepted:
    try:
        await service.request_permission(username, payload.permission)
    except UserAccountError as exc:
        raise _http_error_from_account_error(exc) from exc
    return CommandAccepted(username=username)


@router.post("/users/{username}/permissions/approve", response_model=CommandAccepted)
async def approve_permission(
    username: str,
    payload: ApprovePermissionRequest,
    service: UserAccountService = Depends(get_service),
) -> CommandAccepted:
    """Grant a pending permission once the approver is verified."""
    try:
        await service.approve_permission(username, payload.approver_id, payload.permission)
    except UserAccountError as exc:
        raise _http_error_from_account_error(exc) from exc
    return CommandAccepted(username=username)


@router.post("/users/{username}/delete", response_model=CommandAccepted)
async def delete_user(
    username: str,
    service: UserAccountService = Depends(get_service),
) -> CommandAccepted:
    """Request deletion; the account can be restored until the undo window closes."""
    try:
        await service.delete_user(username)
    except UserAccountError as exc:
        raise _http_error_from_account_error(exc) from exc
    return CommandAccepted(username=username)


@router.post("/users/{username}/undo-delete", response_model=CommandAccepted)
async def undo_delete_user(
    username: str,
    service: UserAccountService = Depends(get_service),
) -> CommandAccepted:
    try:
        await service.undo_delete_user(username)
    except UserAccountError as exc:
        raise _http_error_from_account_error(exc) from exc
    return CommandAccepted(username=username)


_STATUS_BY_ERROR = {
    "UserNotFoundError": status.HTTP_404_NOT_FOUND,
    "PermissionNotFoundError": status.HTTP_404_NOT_FOUND,
    "ApproverUnauthorizedError": status.HTTP_403_FORBIDDEN,
}


def _http_error_from_account_error(exc: UserAccountError) -> HTTPException:
    kind = getattr(exc, "failure_type", None) or type(exc).__name__
    status_code = _STATUS_BY_ERROR.get(kind, status.HTTP_409_CONFLICT)
    return HTTPException(status_code=status_code, detail=str(exc))
