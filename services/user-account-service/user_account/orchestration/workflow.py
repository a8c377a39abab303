"""Temporal workflow definition for the user account entity."""

from __future__ import annotations

from temporalio import workflow

with workflow.unsafe.imports_passed_through():
    from account_messages import UserAccountSnapshot
    from account_messages.constants import USER_ACCOUNT_WORKFLOW

    from ..domain.errors import UserAccountError
    from .control_loop import EntityControlLoop
    from .temporal_host import TemporalHost


@workflow.defn(name=USER_ACCOUNT_WORKFLOW, failure_exception_types=[UserAccountError])
class UserAccountWorkflow:
    """One running instance per username; the workflow id is the username."""

    @workflow.init
    def __init__(self, snapshot: UserAccountSnapshot) -> None:
        self._loop = EntityControlLoop(TemporalHost(), snapshot)

    @workflow.run
    async def run(self, snapshot: UserAccountSnapshot) -> None:
        await self._loop.run()
