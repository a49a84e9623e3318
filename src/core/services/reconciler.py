"""Best-effort display-name synchronization after sign-up.

Account creation (identity provider) and profile naming (GraphQL backend) are
not atomic. After the account exists, the chosen display name is pushed with
`updateProfileDisplayName` until the backend answers without an error at that
path, waiting a fixed delay between attempts. After the attempt ceiling the
discrepancy is abandoned: this is not guaranteed delivery.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable

from core.config import AppSettings
from core.domain.operations import UPDATE_PROFILE_DISPLAY_NAME_FIELD, update_profile_display_name
from core.interfaces.graphql import OperationClient

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]


@dataclass
class RetryState:
    value: str
    attempt: int = 0
    succeeded: bool = False
    abandoned: bool = False

    @property
    def finished(self) -> bool:
        return self.succeeded or self.abandoned


class DisplayNameReconciler:
    def __init__(
        self,
        client: OperationClient,
        *,
        delay_seconds: float = 3.0,
        max_attempts: int = 10,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._client = client
        self._delay = delay_seconds
        self._max_attempts = max_attempts
        self._sleep = sleep
        self._tasks: set[asyncio.Task[RetryState]] = set()
        self.last_state: RetryState | None = None

    @classmethod
    def from_settings(cls, client: OperationClient, settings: AppSettings) -> "DisplayNameReconciler":
        return cls(
            client,
            delay_seconds=settings.profile_sync_delay_seconds,
            max_attempts=settings.profile_sync_max_attempts,
        )

    def start(self, value: str) -> asyncio.Task[RetryState]:
        """Schedule `reconcile` in the background; the caller is not blocked."""

        task = asyncio.create_task(self.reconcile(value))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def wait_idle(self) -> None:
        if self._tasks:
            await asyncio.gather(*list(self._tasks))

    async def reconcile(self, value: str, attempt: int = 0) -> RetryState:
        state = RetryState(value=value, attempt=attempt)
        self.last_state = state

        while state.attempt < self._max_attempts:
            if await self._push(state):
                state.succeeded = True
                return state
            state.attempt += 1
            if state.attempt >= self._max_attempts:
                break
            await self._sleep(self._delay)

        state.abandoned = True
        logger.warning(
            "Display name not acknowledged after %d attempts; giving up.", state.attempt
        )
        return state

    async def _push(self, state: RetryState) -> bool:
        result = await self._client.perform(update_profile_display_name(state.value))
        if not result.ok:
            logger.debug("Display name update attempt %d failed: %s", state.attempt, result.error)
            return False

        error = result.value.find_error_with(UPDATE_PROFILE_DISPLAY_NAME_FIELD)
        if error is not None:
            logger.debug(
                "Display name update attempt %d rejected (%s)", state.attempt, error.code or error.message
            )
            return False
        return True
