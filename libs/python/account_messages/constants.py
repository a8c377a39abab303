"""Names shared by the entity workflow, its activities, and its callers."""

from __future__ import annotations

from enum import Enum

USER_ACCOUNT_WORKFLOW = "UserAccountOrchestration"
ENTITY_TASK_QUEUE = "entity"

PERMISSIONS_SEARCH_ATTRIBUTE = "permissions"
AWAITING_APPROVAL_SEARCH_ATTRIBUTE = "awaitingApproval"

VERIFY_APPROVER_ACTIVITY = "VerifyApprover"
SEND_NOTIFICATIONS_ACTIVITY = "SendNotifications"

PERMISSION_GRANT_PERMISSIONS = "grant_permissions"
PERMISSION_READ_FILES = "read_files"


class CommandName(str, Enum):
    create = "create"
    add_permission = "add_permission"
    approve_permission = "approve_permission"
    delete = "delete"
    undo_delete = "undo_delete"


class QueryName(str, Enum):
    awaiting_approval = "awaiting_approval"
    permissions_granted = "granted"
    user_details = "user_details"
