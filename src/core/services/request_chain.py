"""Request chain executor.

A `ChainExecution` is a one-shot run of an ordered list of interceptors for a
single operation. Each interceptor receives the execution (with the accreted
request/response state) plus a one-shot continuation. The executor enforces
the contract the interceptors rely on:

- a continuation can be called at most once;
- a stage runs at most once per pass (a pass restarts only through `rewind`);
- the execution completes exactly once.

Violations raise `ChainInvariantError` and are never turned into a `Result`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Sequence

from core.domain.errors import ChainInvariantError, ClientError
from core.domain.models import CachePolicy, GraphQLResponse, Operation, Result
from core.interfaces.interceptor import Continuation, Interceptor

logger = logging.getLogger(__name__)


@dataclass
class HTTPRequest:
    """Outgoing request, mutated by earlier stages (headers, body)."""

    url: str
    headers: dict[str, str] = field(default_factory=dict)
    body: dict[str, Any] = field(default_factory=dict)


@dataclass
class HTTPResponse:
    """Raw transport response as produced by the network stage."""

    status_code: int
    body: bytes = b""
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300


class ChainExecution:
    def __init__(
        self,
        *,
        operation: Operation,
        cache_policy: CachePolicy,
        interceptors: Sequence[Interceptor],
        request: HTTPRequest,
    ) -> None:
        if not interceptors:
            raise ChainInvariantError("A request chain needs at least one interceptor.")
        self.operation = operation
        self.cache_policy = cache_policy
        self.request = request
        self.http_response: HTTPResponse | None = None
        self.response: GraphQLResponse | None = None
        # Normalized records produced by parsing, consumed by the cache write.
        self.records: dict[str, dict[str, Any]] = {}
        # Per-execution flags for stages that must remember earlier passes.
        self.context: dict[str, Any] = {}
        self.trace: list[str] = []

        self._interceptors = list(interceptors)
        self._cursor = -1
        self._ran: set[int] = set()
        self._result: Result[GraphQLResponse] | None = None

    @property
    def completed(self) -> bool:
        return self._result is not None

    @property
    def result(self) -> Result[GraphQLResponse] | None:
        return self._result

    async def run(self) -> Result[GraphQLResponse]:
        if self._cursor != -1:
            raise ChainInvariantError("A chain execution can only run once.")
        try:
            await self._invoke(0)
        except ClientError as exc:
            if self.completed:
                raise
            logger.debug("Chain for %s failed: %s", self.operation.operation_name, exc)
            self.fail(exc)

        if self._result is None:
            raise ChainInvariantError(
                f"Chain for {self.operation.operation_name} returned without completing."
            )
        return self._result

    def complete(self, response: GraphQLResponse) -> None:
        self._finish(Result.success(response))

    def fail(self, error: ClientError) -> None:
        self._finish(Result.failure(error))

    def rewind(self, stage_name: str) -> Continuation:
        """Continuation that re-runs the chain starting at `stage_name`.

        Stages from that point on may run again; the request state is kept.
        """

        index = self._index_of(stage_name)
        self._ran = {i for i in self._ran if i < index}
        return self._continuation(index)

    def resume_after(self, interceptor: Interceptor) -> Continuation:
        """Continuation that re-runs every stage after `interceptor`."""

        index = self._index_of(interceptor.name) + 1
        self._ran = {i for i in self._ran if i < index}
        return self._continuation(index)

    def _finish(self, result: Result[GraphQLResponse]) -> None:
        if self._result is not None:
            raise ChainInvariantError(
                f"Chain for {self.operation.operation_name} completed more than once."
            )
        self._result = result

    def _index_of(self, stage_name: str) -> int:
        for index, interceptor in enumerate(self._interceptors):
            if interceptor.name == stage_name:
                return index
        raise ChainInvariantError(f"Unknown stage {stage_name!r}.")

    def _continuation(self, index: int) -> Continuation:
        called = False

        async def proceed() -> None:
            nonlocal called
            if called:
                raise ChainInvariantError(
                    f"Continuation into stage #{index} of {self.operation.operation_name} "
                    "was invoked more than once."
                )
            called = True
            await self._invoke(index)

        return proceed

    async def _invoke(self, index: int) -> None:
        if self.completed:
            raise ChainInvariantError(
                f"Chain for {self.operation.operation_name} advanced after completion."
            )

        if index >= len(self._interceptors):
            # Past the last stage: deliver whatever the chain accreted.
            if self.response is None:
                raise ChainInvariantError(
                    f"Chain for {self.operation.operation_name} ended without a response."
                )
            self.complete(self.response)
            return

        if index in self._ran:
            raise ChainInvariantError(
                f"Stage {self._interceptors[index].name!r} ran twice in one pass."
            )
        self._ran.add(index)
        self._cursor = index

        interceptor = self._interceptors[index]
        self.trace.append(interceptor.name)
        logger.debug("-> #%d %s [%s]", self._cursor, interceptor.name, self.operation.operation_name)
        await interceptor.intercept(self, self._continuation(index + 1))
