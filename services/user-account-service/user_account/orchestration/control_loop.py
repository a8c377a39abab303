"""Drives a user account entity from start to deletion or continue-as-new."""

from __future__ import annotations

from functools import partial

from account_messages import COMMAND_REQUESTS, QueryName, UserAccountSnapshot

from ..domain.account import UserAccountState
from ..domain.contracts import EntityHost
from ..domain.errors import HandlerRegistrationError


class EntityControlLoop:
    """Wires :class:`UserAccountState` into the host and decides when the instance ends.

    Handlers are registered at construction so that commands delivered
    together with the start of the instance find them in place.
    """

    def __init__(self, host: EntityHost, snapshot: UserAccountSnapshot, **state_options) -> None:
        self._host = host
        self._snapshot = snapshot
        self.state = UserAccountState.from_snapshot(host, snapshot, **state_options)
        self._register_handlers()

    def _register_handlers(self) -> None:
        for name, request_type in COMMAND_REQUESTS.items():
            try:
                self._host.set_command_handler(name.value, request_type, self.state.handle)
            except Exception as exc:
                raise HandlerRegistrationError(f"unable to set {name.value} command handler") from exc
        for query in QueryName:
            try:
                self._host.set_query_handler(query.value, partial(self.state.query, query))
            except Exception as exc:
                raise HandlerRegistrationError(f"unable to set {query.value} query handler") from exc

    async def run(self) -> None:
        """Serve commands until the account is deleted or history needs compacting.

        On compaction the instance waits for in-flight commands to finish and
        then hands its snapshot to a successor, so callers never observe a lost
        or repeated command across the boundary. A pending deletion restarts
        with a fresh undo window in the successor.
        """
        state = self.state
        if self._snapshot.permissions:
            state.publish()
        if self._snapshot.deletion_requested_at is not None:
            state.request_deletion()

        await self._host.wait_condition(
            lambda: state.deleted or self._host.continue_as_new_suggested()
        )
        if state.deleted:
            self._host.logger.info("user account %s reached terminal state", self._host.entity_id)
            return

        await self._host.wait_condition(self._host.all_handlers_finished)
        self._host.logger.info("continuing user account %s as new", self._host.entity_id)
        self._host.continue_as_new(state.snapshot())
