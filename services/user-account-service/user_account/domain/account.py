from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from account_messages import (
    AddUserPermissionRequest,
    AddUserPermissionResponse,
    ApproveUserPermissionRequest,
    ApproveUserPermissionResponse,
    AwaitingApprovalResponse,
    Command,
    CommandResponse,
    CreateUserAccountRequest,
    CreateUserAccountResponse,
    DeleteUserAccountRequest,
    DeleteUserAccountResponse,
    PermissionsGrantedResponse,
    QueryName,
    SendNotificationsRequest,
    SendNotificationsResponse,
    UndoDeleteUserAccountRequest,
    UndoDeleteUserAccountResponse,
    UserAccountSnapshot,
    UserDetailsResponse,
    VerifyApproverRequest,
    VerifyApproverResponse,
)
from account_messages.constants import (
    AWAITING_APPROVAL_SEARCH_ATTRIBUTE,
    PERMISSIONS_SEARCH_ATTRIBUTE,
    SEND_NOTIFICATIONS_ACTIVITY,
    VERIFY_APPROVER_ACTIVITY,
)
from pydantic import BaseModel

from .contracts import EntityHost
from .errors import (
    AlreadyDeletedError,
    ApproverUnauthorizedError,
    PermissionNotFoundError,
    UserDeletedError,
)

UNDO_DELETION_WINDOW = timedelta(seconds=60)
VERIFY_APPROVER_TIMEOUT = timedelta(minutes=1)
SEND_NOTIFICATIONS_TIMEOUT = timedelta(minutes=1)


@dataclass(slots=True)
class UserAccount:
    """Aggregate root for a single durable user account."""

    permissions_granted: list[str] = field(default_factory=list)
    awaiting_approval: list[str] = field(default_factory=list)
    created: bool = False
    deletion_requested: bool = False
    deletion_requested_at: datetime | None = None
    deletion_scheduled_for: datetime | None = None
    deleted: bool = False

    @property
    def locked(self) -> bool:
        return self.deleted or self.deletion_requested

    def is_pending(self, permission: str) -> bool:
        return permission in self.awaiting_approval


class UserAccountState:
    """Business rules for every command and query a user account accepts.

    The state owns a :class:`UserAccount` and mutates it only from its own
    handlers. It never awaits anything except host suspension points
    (:meth:`EntityHost.execute_activity` and :meth:`EntityHost.wait_condition`),
    so the code between two awaits is atomic with respect to every other
    handler running on the same instance.

    Permissions are kept exactly as requested: neither list is deduplicated.
    """

    def __init__(
        self,
        host: EntityHost,
        account: UserAccount | None = None,
        *,
        undo_window: timedelta = UNDO_DELETION_WINDOW,
        verify_timeout: timedelta = VERIFY_APPROVER_TIMEOUT,
    ) -> None:
        self._host = host
        self.account = account or UserAccount()
        self._undo_window = undo_window
        self._verify_timeout = verify_timeout
        self._deletion_generation = 0

    @classmethod
    def from_snapshot(
        cls, host: EntityHost, snapshot: UserAccountSnapshot, **options
    ) -> "UserAccountState":
        """Rehydrate state handed forward by a predecessor instance (or an empty snapshot)."""
        account = UserAccount(
            permissions_granted=list(snapshot.permissions),
            awaiting_approval=list(snapshot.awaiting_approval),
            deletion_requested_at=snapshot.deletion_requested_at,
        )
        return cls(host, account, **options)

    @property
    def deleted(self) -> bool:
        return self.account.deleted

    def snapshot(self) -> UserAccountSnapshot:
        """Capture what a successor instance needs to carry on.

        ``deletion_requested_at`` travels as it stands. Undo does not clear it,
        so the successor re-arms a deletion that was undone before the hand-off.
        """
        account = self.account
        return UserAccountSnapshot(
            awaiting_approval=list(account.awaiting_approval),
            permissions=list(account.permissions_granted),
            deletion_requested_at=account.deletion_requested_at,
        )

    async def handle(self, command: Command) -> CommandResponse:
        """Apply a single command and return its response model."""
        match command:
            case CreateUserAccountRequest():
                self.create_user(command)
                return CreateUserAccountResponse()
            case AddUserPermissionRequest():
                self.request_add_permission(command)
                return AddUserPermissionResponse()
            case ApproveUserPermissionRequest():
                await self.request_approve_permission(command)
                return ApproveUserPermissionResponse()
            case DeleteUserAccountRequest():
                self.request_deletion()
                return DeleteUserAccountResponse()
            case UndoDeleteUserAccountRequest():
                self.request_undo_deletion()
                return UndoDeleteUserAccountResponse()
        raise TypeError(f"unsupported command {type(command).__name__}")

    def query(self, name: QueryName) -> BaseModel:
        match name:
            case QueryName.awaiting_approval:
                return self.awaiting_approval()
            case QueryName.permissions_granted:
                return self.permissions()
            case QueryName.user_details:
                return self.user_details()
        raise ValueError(f"unsupported query {name!r}")

    def create_user(self, request: CreateUserAccountRequest) -> None:
        self._ensure_active()
        self.account.permissions_granted.extend(request.permissions)
        self.account.created = True
        self.publish()

    def request_add_permission(self, request: AddUserPermissionRequest) -> None:
        self._ensure_active()
        self.account.awaiting_approval.append(request.permission)
        self.publish()

    async def request_approve_permission(self, request: ApproveUserPermissionRequest) -> None:
        """Grant a pending permission once the approver is verified.

        Verification suspends this handler. Pending-ness is checked only before
        the call: commands handled while the verifier is outstanding may
        re-request, approve, or otherwise change ``awaiting_approval``, and a
        late ``verified`` response still grants the permission.
        """
        self._ensure_active()
        if not self.account.is_pending(request.permission):
            raise PermissionNotFoundError()

        response = await self._host.execute_activity(
            VERIFY_APPROVER_ACTIVITY,
            VerifyApproverRequest(approver_id=request.approver_id, permission=request.permission),
            result_type=VerifyApproverResponse,
            timeout=self._verify_timeout,
        )
        if not response.verified:
            raise ApproverUnauthorizedError(request.approver_id, request.permission)

        self.account.permissions_granted.append(request.permission)
        self.account.awaiting_approval = [
            pending for pending in self.account.awaiting_approval if pending != request.permission
        ]
        try:
            self.publish()
        except Exception:
            self._host.logger.exception("unable to refresh indexed attributes")
        self._host.start_background(
            self._send_notifications(request), name=f"notify-{request.permission}"
        )

    def request_deletion(self) -> None:
        """Open the undo window; the account is deleted unless undone before it closes.

        A request while a window is already open is accepted without moving
        the schedule or starting another watcher.
        """
        account = self.account
        if account.deletion_requested:
            self._host.logger.info(
                "deletion already requested for %s, scheduled for %s",
                self._host.entity_id,
                account.deletion_scheduled_for,
            )
            return
        account.deletion_requested = True
        account.deletion_requested_at = self._host.now()
        account.deletion_scheduled_for = account.deletion_requested_at + self._undo_window
        self._deletion_generation += 1
        self._host.start_background(
            self._await_undo(self._deletion_generation), name="undo-deletion-window"
        )

    def request_undo_deletion(self) -> None:
        if self.account.deleted:
            raise AlreadyDeletedError()
        self.account.deletion_requested = False

    def awaiting_approval(self) -> AwaitingApprovalResponse:
        return AwaitingApprovalResponse(permissions=list(self.account.awaiting_approval))

    def permissions(self) -> PermissionsGrantedResponse:
        return PermissionsGrantedResponse(permissions=list(self.account.permissions_granted))

    def user_details(self) -> UserDetailsResponse:
        account = self.account
        return UserDetailsResponse(
            awaiting_approval=self.awaiting_approval(),
            deletion_requested=account.deletion_requested,
            deletion_requested_at=account.deletion_requested_at,
            deletion_scheduled_for=account.deletion_scheduled_for,
            permissions=self.permissions(),
            deleted=account.deleted,
        )

    def publish(self) -> None:
        """Republish both indexed projections so listings reflect current state."""
        self._host.upsert_indexed_attributes(
            {
                PERMISSIONS_SEARCH_ATTRIBUTE: list(self.account.permissions_granted),
                AWAITING_APPROVAL_SEARCH_ATTRIBUTE: list(self.account.awaiting_approval),
            }
        )

    def _ensure_active(self) -> None:
        if self.account.locked:
            raise UserDeletedError()

    async def _await_undo(self, generation: int) -> None:
        try:
            undone = await self._host.wait_condition(
                lambda: not self.account.deletion_requested or self._deletion_generation != generation,
                timeout=self._undo_window,
            )
        except asyncio.CancelledError:
            # deletion_requested stays set and nothing re-arms it until the next continue-as-new
            self._host.logger.warning("undo deletion window cancelled for %s", self._host.entity_id)
            return
        if undone:
            self._host.logger.info("deletion undone for %s", self._host.entity_id)
            return
        self.account.deleted = True
        self._host.logger.info("user %s deleted", self._host.entity_id)

    async def _send_notifications(self, request: ApproveUserPermissionRequest) -> None:
        try:
            await self._host.execute_activity(
                SEND_NOTIFICATIONS_ACTIVITY,
                SendNotificationsRequest(
                    approver_id=request.approver_id,
                    permission_type=request.permission,
                    requester_id=self._host.entity_id,
                ),
                result_type=SendNotificationsResponse,
                timeout=SEND_NOTIFICATIONS_TIMEOUT,
            )
        except Exception as exc:
            self._host.logger.warning("unable to send notifications for %s: %s", request.permission, exc)
