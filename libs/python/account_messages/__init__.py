"""Shared message exports for the user account entity."""

from .account import (
    AwaitingApprovalResponse,
    PermissionsGrantedResponse,
    UserAccountSnapshot,
    UserDetailsResponse,
)
from .activity import (
    SendNotificationsRequest,
    SendNotificationsResponse,
    VerifyApproverRequest,
    VerifyApproverResponse,
)
from .commands import (
    COMMAND_REQUESTS,
    COMMAND_RESPONSES,
    AddUserPermissionRequest,
    AddUserPermissionResponse,
    ApproveUserPermissionRequest,
    ApproveUserPermissionResponse,
    Command,
    CommandResponse,
    CreateUserAccountRequest,
    CreateUserAccountResponse,
    DeleteUserAccountRequest,
    DeleteUserAccountResponse,
    UndoDeleteUserAccountRequest,
    UndoDeleteUserAccountResponse,
)
from .constants import CommandName, QueryName

__all__ = [
    "AddUserPermissionRequest",
    "AddUserPermissionResponse",
    "ApproveUserPermissionRequest",
    "ApproveUserPermissionResponse",
    "AwaitingApprovalResponse",
    "COMMAND_REQUESTS",
    "COMMAND_RESPONSES",
    "Command",
    "CommandName",
    "CommandResponse",
    "CreateUserAccountRequest",
    "CreateUserAccountResponse",
    "DeleteUserAccountRequest",
    "DeleteUserAccountResponse",
    "PermissionsGrantedResponse",
    "QueryName",
    "SendNotificationsRequest",
    "SendNotificationsResponse",
    "UndoDeleteUserAccountRequest",
    "UndoDeleteUserAccountResponse",
    "UserAccountSnapshot",
    "UserDetailsResponse",
    "VerifyApproverRequest",
    "VerifyApproverResponse",
]
