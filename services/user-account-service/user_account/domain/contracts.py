"""Contracts between the user account entity and the durable-execution host."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any, Awaitable, Callable, Coroutine, Mapping, NoReturn, Protocol, Sequence, TypeVar

from pydantic import BaseModel

from account_messages import UserAccountSnapshot

ResponseT = TypeVar("ResponseT", bound=BaseModel)

CommandHandler = Callable[[Any], Awaitable[BaseModel]]
QueryHandler = Callable[[], BaseModel]


class EntityHost(Protocol):
    """Everything the entity may observe or do outside its own fields.

    The entity never reads the wall clock, sleeps, or performs I/O directly; it
    goes through a host so that a replaying executor reproduces the same
    decisions. Every ``await`` on a host method is a suspension point: other
    handlers may run and change entity state before it returns.
    """

    @property
    def entity_id(self) -> str:
        """Identity of the running instance (the username)."""

    @property
    def logger(self) -> logging.Logger | logging.LoggerAdapter:
        """Replay-safe logger."""

    def now(self) -> datetime:
        """Deterministic current time."""

    async def wait_condition(
        self, predicate: Callable[[], bool], *, timeout: timedelta | None = None
    ) -> bool:
        """Suspend until ``predicate`` holds; return ``False`` if ``timeout`` elapsed first."""

    async def execute_activity(
        self,
        name: str,
        request: BaseModel,
        *,
        result_type: type[ResponseT],
        timeout: timedelta,
    ) -> ResponseT:
        """Run a named activity and return its typed response, raising on failure or timeout."""

    def start_background(self, coro: Coroutine[Any, Any, None], *, name: str) -> None:
        """Run ``coro`` concurrently for the lifetime of the instance without awaiting it."""

    def upsert_indexed_attributes(self, attributes: Mapping[str, Sequence[str]]) -> None:
        """Publish keyword-list attributes used for external listing and search."""

    def set_command_handler(
        self, name: str, request_type: type[BaseModel], handler: CommandHandler
    ) -> None:
        ...

    def set_query_handler(self, name: str, handler: QueryHandler) -> None:
        ...

    def continue_as_new_suggested(self) -> bool:
        """Whether recorded history is large enough to warrant compaction."""

    def all_handlers_finished(self) -> bool:
        ...

    def continue_as_new(self, snapshot: UserAccountSnapshot) -> NoReturn:
        """Replace this instance with a fresh one of the same identity seeded from ``snapshot``."""
