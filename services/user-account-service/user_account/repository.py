"""Temporal-backed access to user account entities for the front-end."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TypeVar

from pydantic import BaseModel
from temporalio.client import Client, WorkflowQueryFailedError, WorkflowUpdateFailedError
from temporalio.common import SearchAttributeKey
from temporalio.exceptions import WorkflowAlreadyStartedError
from temporalio.service import RPCError, RPCStatusCode

from account_messages import CommandName, QueryName, UserAccountSnapshot
from account_messages.constants import (
    AWAITING_APPROVAL_SEARCH_ATTRIBUTE,
    PERMISSIONS_SEARCH_ATTRIBUTE,
    USER_ACCOUNT_WORKFLOW,
)

from .domain.errors import CommandRejectedError, UserAlreadyExistsError, UserNotFoundError

ResponseT = TypeVar("ResponseT", bound=BaseModel)

_PERMISSIONS_KEY = SearchAttributeKey.for_keyword_list(PERMISSIONS_SEARCH_ATTRIBUTE)
_AWAITING_APPROVAL_KEY = SearchAttributeKey.for_keyword_list(AWAITING_APPROVAL_SEARCH_ATTRIBUTE)


@dataclass(slots=True)
class UserAccountRecord:
    """Listing projection built from an entity's published search attributes."""

    username: str
    permissions: list[str] = field(default_factory=list)
    awaiting_approval: list[str] = field(default_factory=list)


class UserAccountRepository:
    """Starts, commands, queries, and lists user account workflows."""

    def __init__(self, client: Client, *, task_queue: str) -> None:
        """Store the Temporal client and the task queue the worker polls."""
        self._client = client
        self._task_queue = task_queue

    async def start(self, username: str, snapshot: UserAccountSnapshot | None = None) -> None:
        """Start a fresh entity for ``username``; a deleted username may be reused."""
        try:
            await self._client.start_workflow(
                USER_ACCOUNT_WORKFLOW,
                snapshot or UserAccountSnapshot(),
                id=username,
                task_queue=self._task_queue,
            )
        except WorkflowAlreadyStartedError as exc:
            raise UserAlreadyExistsError(f"user {username} has already been created") from exc

    async def execute_command(
        self,
        username: str,
        name: CommandName,
        request: BaseModel,
        result_type: type[ResponseT],
    ) -> ResponseT:
        """Run a command against the entity and wait for its result."""
        handle = self._client.get_workflow_handle(username)
        try:
            return await handle.execute_update(name.value, request, result_type=result_type)
        except WorkflowUpdateFailedError as exc:
            raise _rejection(exc) from exc
        except RPCError as exc:
            if exc.status == RPCStatusCode.NOT_FOUND:
                raise UserNotFoundError(f"user {username} not found") from exc
            raise

    async def query(self, username: str, name: QueryName, result_type: type[ResponseT]) -> ResponseT:
        handle = self._client.get_workflow_handle(username)
        try:
            return await handle.query(name.value, result_type=result_type)
        except WorkflowQueryFailedError as exc:
            raise CommandRejectedError(str(exc)) from exc
        except RPCError as exc:
            if exc.status == RPCStatusCode.NOT_FOUND:
                raise UserNotFoundError(f"user {username} not found") from exc
            raise

    async def list_running(self, permission: str | None = None) -> list[UserAccountRecord]:
        """Return running entities, optionally only those already granted ``permission``."""
        query = f'WorkflowType = "{USER_ACCOUNT_WORKFLOW}" AND ExecutionStatus = "Running"'
        if permission:
            escaped = permission.replace("\\", "\\\\").replace('"', '\\"')
            query += f' AND {PERMISSIONS_SEARCH_ATTRIBUTE} = "{escaped}"'

        records: list[UserAccountRecord] = []
        async for execution in self._client.list_workflows(query):
            attributes = execution.typed_search_attributes
            records.append(
                UserAccountRecord(
                    username=execution.id,
                    permissions=list(attributes.get(_PERMISSIONS_KEY) or []),
                    awaiting_approval=list(attributes.get(_AWAITING_APPROVAL_KEY) or []),
                )
            )
        return records


def _rejection(exc: WorkflowUpdateFailedError) -> CommandRejectedError:
    """Build a rejection from the innermost failure cause of a failed update."""
    current: BaseException = exc
    while current.__cause__ is not None:
        current = current.__cause__
    message = getattr(current, "message", None) or str(current)
    return CommandRejectedError(message, failure_type=getattr(current, "type", None))

