"""Command payloads accepted by a user account entity.

Every command has a fixed request and response shape. ``Command`` is the closed
set the entity dispatches over; ``COMMAND_REQUESTS`` maps each registered
command name to the request model its payload is decoded into.
"""

from __future__ import annotations

from typing import Union

from pydantic import BaseModel, Field

from .constants import CommandName


class CreateUserAccountRequest(BaseModel):
    permissions: list[str] = Field(default_factory=list)


class CreateUserAccountResponse(BaseModel):
    pass


class AddUserPermissionRequest(BaseModel):
    permission: str


class AddUserPermissionResponse(BaseModel):
    pass


class ApproveUserPermissionRequest(BaseModel):
    approver_id: str
    permission: str


class ApproveUserPermissionResponse(BaseModel):
    pass


class DeleteUserAccountRequest(BaseModel):
    pass


class DeleteUserAccountResponse(BaseModel):
    pass


class UndoDeleteUserAccountRequest(BaseModel):
    pass


class UndoDeleteUserAccountResponse(BaseModel):
    pass


Command = Union[
    CreateUserAccountRequest,
    AddUserPermissionRequest,
    ApproveUserPermissionRequest,
    DeleteUserAccountRequest,
    UndoDeleteUserAccountRequest,
]

CommandResponse = Union[
    CreateUserAccountResponse,
    AddUserPermissionResponse,
    ApproveUserPermissionResponse,
    DeleteUserAccountResponse,
    UndoDeleteUserAccountResponse,
]

COMMAND_REQUESTS: dict[CommandName, type[BaseModel]] = {
    CommandName.create: CreateUserAccountRequest,
    CommandName.add_permission: AddUserPermissionRequest,
    CommandName.approve_permission: ApproveUserPermissionRequest,
    CommandName.delete: DeleteUserAccountRequest,
    CommandName.undo_delete: UndoDeleteUserAccountRequest,
}

COMMAND_RESPONSES: dict[CommandName, type[BaseModel]] = {
    CommandName.create: CreateUserAccountResponse,
    CommandName.add_permission: AddUserPermissionResponse,
    CommandName.approve_permission: ApproveUserPermissionResponse,
    CommandName.delete: DeleteUserAccountResponse,
    CommandName.undo_delete: UndoDeleteUserAccountResponse,
}
