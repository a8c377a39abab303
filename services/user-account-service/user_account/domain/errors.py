"""Exceptions raised by the user account entity and its front-end gateway."""

from __future__ import annotations


class UserAccountError(Exception):
    """Base class for every failure surfaced to a caller of the entity."""


class UserDeletedError(UserAccountError):
    """A mutating command arrived while the account is deleted or pending deletion."""

    def __init__(self) -> None:
        super().__init__("user deleted")


class AlreadyDeletedError(UserAccountError):
    def __init__(self) -> None:
        super().__init__("already deleted")


class PermissionNotFoundError(UserAccountError):
    def __init__(self) -> None:
        super().__init__("permission not found")


class ApproverUnauthorizedError(UserAccountError):
    def __init__(self, approver_id: str, permission: str) -> None:
        super().__init__(f"{approver_id} cannot grant permission {permission}")
        self.approver_id = approver_id
        self.permission = permission


class HandlerRegistrationError(UserAccountError):
    """Registering a command or query with the host failed; the instance cannot serve."""


class CommandRejectedError(UserAccountError):
    """The host reported that a command failed inside the entity.

    ``failure_type`` names the exception raised inside the entity (for example
    ``ApproverUnauthorizedError``) when the host reports one.
    """

    def __init__(self, message: str, failure_type: str | None = None) -> None:
        super().__init__(message)
        self.failure_type = failure_type


class UserNotFoundError(UserAccountError):
    pass


class UserAlreadyExistsError(UserAccountError):
    pass
