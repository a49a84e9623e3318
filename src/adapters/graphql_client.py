"""GraphQL client facade.

Each `fetch`/`perform` call builds one `ChainExecution` and awaits its single
completion. Calls are independent: two identical operations in flight produce
two network exchanges (no deduplication).
"""

from __future__ import annotations

import logging
from types import TracebackType
from typing import Callable

import httpx

from adapters.http_client import build_async_client
from adapters.interceptors import DefaultInterceptorProvider
from core.config import AppSettings, load_settings
from core.domain.models import CachePolicy, GraphQLResponse, Operation, Result
from core.interfaces.identity import IdentityProvider
from core.interfaces.interceptor import InterceptorProvider
from core.services.cache_store import CacheStore
from core.services.request_chain import ChainExecution, HTTPRequest

logger = logging.getLogger(__name__)

Completion = Callable[[Result[GraphQLResponse]], None]


class GraphQLClient:
    def __init__(
        self,
        settings: AppSettings,
        *,
        identity_provider: IdentityProvider | None = None,
        store: CacheStore | None = None,
        http_client: httpx.AsyncClient | None = None,
        interceptor_provider: InterceptorProvider | None = None,
    ) -> None:
        self.settings = settings
        self.endpoint_url = settings.graphql_url
        self.store = store if store is not None else CacheStore()
        self._owns_http_client = http_client is None
        self._http_client = http_client or build_async_client(settings)
        self._interceptor_provider = interceptor_provider or DefaultInterceptorProvider(
            settings=settings,
            http_client=self._http_client,
            store=self.store,
            identity_provider=identity_provider,
        )
        self.last_execution: ChainExecution | None = None

    async def __aenter__(self) -> "GraphQLClient":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_http_client:
            await self._http_client.aclose()

    async def fetch(
        self,
        operation: Operation,
        cache_policy: CachePolicy = CachePolicy.RETURN_CACHE_DATA_ELSE_FETCH,
        completion: Completion | None = None,
    ) -> Result[GraphQLResponse]:
        """Run a query through the chain."""

        if operation.is_mutation:
            raise ValueError(f"{operation.operation_name} is a mutation; use perform().")
        return await self._execute(operation, cache_policy, completion)

    async def perform(
        self,
        operation: Operation,
        completion: Completion | None = None,
    ) -> Result[GraphQLResponse]:
        """Run a mutation: never read from cache, still written to it."""

        if not operation.is_mutation:
            raise ValueError(f"{operation.operation_name} is a query; use fetch().")
        return await self._execute(operation, CachePolicy.FETCH_IGNORING_CACHE_DATA, completion)

    def build_request(self, operation: Operation) -> HTTPRequest:
        body: dict[str, object] = {
            "operationName": operation.operation_name,
            "variables": dict(operation.variables),
        }
        if self.settings.persisted_queries_enabled:
            body["extensions"] = {
                "persistedQuery": {"version": 1, "sha256Hash": operation.document_hash},
            }
        else:
            body["query"] = operation.document
        return HTTPRequest(url=self.endpoint_url, headers={}, body=body)

    async def _execute(
        self,
        operation: Operation,
        cache_policy: CachePolicy,
        completion: Completion | None,
    ) -> Result[GraphQLResponse]:
        execution = ChainExecution(
            operation=operation,
            cache_policy=cache_policy,
            interceptors=self._interceptor_provider.interceptors(operation),
            request=self.build_request(operation),
        )
        self.last_execution = execution
        result = await execution.run()
        logger.debug(
            "%s finished (%s) via %s",
            operation.operation_name,
            "ok" if result.ok else f"error: {result.error}",
            " > ".join(execution.trace),
        )
        if completion is not None:
            completion(result)
        return result


def build_graphql_client(
    settings: AppSettings | None = None,
    *,
    identity_provider: IdentityProvider | None = None,
) -> GraphQLClient:
    """Cliente compartido para el endpoint configurado."""

    settings = settings or load_settings()
    return GraphQLClient(settings, identity_provider=identity_provider)
