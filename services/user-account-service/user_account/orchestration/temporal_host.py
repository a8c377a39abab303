"""``EntityHost`` implemented on top of the Temporal workflow runtime."""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta
from typing import Any, Callable, Coroutine, Mapping, NoReturn, Sequence

from pydantic import BaseModel
from temporalio import workflow
from temporalio.common import SearchAttributeKey

from account_messages import UserAccountSnapshot

from ..domain.contracts import CommandHandler, QueryHandler, ResponseT


class TemporalHost:
    """Must only be constructed and used from inside a running workflow."""

    def __init__(self) -> None:
        self._background: set[asyncio.Task] = set()

    @property
    def entity_id(self) -> str:
        return workflow.info().workflow_id

    @property
    def logger(self) -> workflow.LoggerAdapter:
        return workflow.logger

    def now(self) -> datetime:
        return workflow.now()

    async def wait_condition(
        self, predicate: Callable[[], bool], *, timeout: timedelta | None = None
    ) -> bool:
        try:
            await workflow.wait_condition(predicate, timeout=timeout)
        except asyncio.TimeoutError:
            return False
        return True

    async def execute_activity(
        self,
        name: str,
        request: BaseModel,
        *,
        result_type: type[ResponseT],
        timeout: timedelta,
    ) -> ResponseT:
        return await workflow.execute_activity(
            name,
            request,
            result_type=result_type,
            start_to_close_timeout=timeout,
        )

    def start_background(self, coro: Coroutine[Any, Any, None], *, name: str) -> None:
        task = asyncio.create_task(coro, name=name)
        # the workflow event loop only holds weak references to tasks
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    def upsert_indexed_attributes(self, attributes: Mapping[str, Sequence[str]]) -> None:
        workflow.upsert_search_attributes(
            [
                SearchAttributeKey.for_keyword_list(key).value_set(list(values))
                for key, values in attributes.items()
            ]
        )

    def set_command_handler(
        self, name: str, request_type: type[BaseModel], handler: CommandHandler
    ) -> None:
        # Payloads arrive untyped and are validated here, so one handler shape
        # serves every command model.
        async def handle(payload):
            return await handler(request_type.model_validate(payload))

        workflow.set_update_handler(name, handle)

    def set_query_handler(self, name: str, handler: QueryHandler) -> None:
        workflow.set_query_handler(name, handler)

    def continue_as_new_suggested(self) -> bool:
        return workflow.info().is_continue_as_new_suggested()

    def all_handlers_finished(self) -> bool:
        return workflow.all_handlers_finished()

    def continue_as_new(self, snapshot: UserAccountSnapshot) -> NoReturn:
        workflow.continue_as_new(snapshot)
