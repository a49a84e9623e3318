"""Contrato del cliente GraphQL visto desde los servicios del Core."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from core.domain.models import CachePolicy, GraphQLResponse, Operation, Result


@runtime_checkable
class OperationClient(Protocol):
    """`fetch` para queries, `perform` para mutations."""

    async def fetch(
        self,
        operation: Operation,
        cache_policy: CachePolicy = CachePolicy.RETURN_CACHE_DATA_ELSE_FETCH,
    ) -> Result[GraphQLResponse]:
        ...

    async def perform(self, operation: Operation) -> Result[GraphQLResponse]:
        ...
