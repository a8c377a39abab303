"""User account service translating front-end actions into entity commands and queries."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING

from prometheus_client import Counter

from account_messages import (
    COMMAND_RESPONSES,
    AddUserPermissionRequest,
    ApproveUserPermissionRequest,
    CommandName,
    CreateUserAccountRequest,
    DeleteUserAccountRequest,
    QueryName,
    UndoDeleteUserAccountRequest,
    UserDetailsResponse,
)
from account_messages.constants import PERMISSION_GRANT_PERMISSIONS
from pydantic import BaseModel

from .errors import UserAccountError

if TYPE_CHECKING:
    from ..repository import UserAccountRecord, UserAccountRepository

COMMANDS_TOTAL = Counter(
    "user_account_commands_total",
    "Commands issued to user account entities.",
    ["command", "outcome"],
)


@dataclass(slots=True)
class UserListing:
    """Running accounts plus the first account able to approve permissions."""

    users: list[UserAccountRecord] = field(default_factory=list)
    admin_username: str | None = None


class UserAccountService:
    """Front-end operations over user account entities."""

    def __init__(self, repository: UserAccountRepository) -> None:
        """Store the repository used to reach running entities."""
        self._repository = repository

    async def create_user(self, username: str, permissions: list[str] | None = None) -> None:
        """Start the entity for ``username`` and apply its initial grants."""
        await self._repository.start(username)
        await self._command(
            username, CommandName.create, CreateUserAccountRequest(permissions=permissions or [])
        )

    async def request_permission(self, username: str, permission: str) -> None:
        await self._command(
            username, CommandName.add_permission, AddUserPermissionRequest(permission=permission)
        )

    async def approve_permission(self, username: str, approver_id: str, permission: str) -> None:
        await self._command(
            username,
            CommandName.approve_permission,
            ApproveUserPermissionRequest(approver_id=approver_id, permission=permission),
        )

    async def delete_user(self, username: str) -> None:
        await self._command(username, CommandName.delete, DeleteUserAccountRequest())

    async def undo_delete_user(self, username: str) -> None:
        await self._command(username, CommandName.undo_delete, UndoDeleteUserAccountRequest())

    async def get_user(self, username: str) -> UserDetailsResponse:
        return await self._repository.query(username, QueryName.user_details, UserDetailsResponse)

    async def list_users(self, permission: str | None = None) -> UserListing:
        """List running accounts, optionally filtered by a granted permission."""
        records = await self._repository.list_running(permission)
        admin = next(
            (record.username for record in records if PERMISSION_GRANT_PERMISSIONS in record.permissions),
            None,
        )
        return UserListing(users=records, admin_username=admin)

    @staticmethod
    def undo_window_remaining(details: UserDetailsResponse, now: datetime) -> float | None:
        """Seconds left before a pending deletion becomes permanent, or ``None`` if none is pending."""
        if not details.deletion_requested or details.deletion_scheduled_for is None:
            return None
        return max(0.0, (details.deletion_scheduled_for - now).total_seconds())

    async def _command(self, username: str, name: CommandName, request: BaseModel) -> BaseModel:
        try:
            response = await self._repository.execute_command(
                username, name, request, COMMAND_RESPONSES[name]
            )
        except UserAccountError:
            COMMANDS_TOTAL.labels(command=name.value, outcome="rejected").inc()
            raise
        COMMANDS_TOTAL.labels(command=name.value, outcome="accepted").inc()
        return response
