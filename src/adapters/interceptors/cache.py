"""Stages 3 y 8: lectura y escritura de la caché normalizada."""

from __future__ import annotations

import logging

from pydantic import ValidationError

from core.domain.errors import CacheMissError
from core.domain.models import CachePolicy, GraphQLResponse, ResponseSource
from core.interfaces.interceptor import Continuation, Interceptor
from core.services.cache_store import CacheStore
from core.services.request_chain import ChainExecution

logger = logging.getLogger(__name__)


class CacheReadInterceptor(Interceptor):
    """Sirve la respuesta desde caché si la política lo permite y hay entrada."""

    name = "cache_read"

    def __init__(self, store: CacheStore) -> None:
        self._store = store

    async def intercept(self, execution: ChainExecution, proceed: Continuation) -> None:
        operation = execution.operation
        if operation.is_mutation or not execution.cache_policy.reads_cache:
            await proceed()
            return

        data = self._store.load(operation.cache_key)
        response = _cached_response(execution, data) if data is not None else None
        if response is not None:
            logger.debug("Cache hit for %s", operation.operation_name)
            execution.complete(response)
            return

        if execution.cache_policy is CachePolicy.RETURN_CACHE_DATA_DONT_FETCH:
            execution.fail(CacheMissError(f"No cached data for {operation.operation_name}."))
            return
        await proceed()


def _cached_response(execution: ChainExecution, data: dict) -> GraphQLResponse | None:
    typed = None
    model = execution.operation.response_model
    if model is not None:
        try:
            typed = model.model_validate(data)
        except ValidationError:
            # The cached records do not cover this shape: treat as a miss.
            return None
    return GraphQLResponse(data=data, source=ResponseSource.CACHE, typed_data=typed)


class CacheWriteInterceptor(Interceptor):
    """Mezcla en la caché los registros normalizados por el parseo."""

    name = "cache_write"

    def __init__(self, store: CacheStore) -> None:
        self._store = store

    async def intercept(self, execution: ChainExecution, proceed: Continuation) -> None:
        if execution.cache_policy.writes_cache and execution.records:
            changed = self._store.merge(execution.records)
            logger.debug(
                "Cache write for %s: %d records, %d changed",
                execution.operation.operation_name,
                len(execution.records),
                len(changed),
            )
        await proceed()
