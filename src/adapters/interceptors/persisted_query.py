"""Stage 7: fallback de persisted queries.

La primera petición lleva sólo el hash SHA-256 del documento. Si el servidor
no conoce el hash, se reenvía con el texto completo reiniciando la cadena en
el stage de red, como máximo una vez por ejecución.
"""

from __future__ import annotations

import logging

from core.domain.models import GraphQLResponse
from core.interfaces.interceptor import Continuation, Interceptor
from core.services.request_chain import ChainExecution

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGES = frozenset({"PersistedQueryNotFound", "PersistedQueryNotSupported"})
NOT_FOUND_CODES = frozenset({"PERSISTED_QUERY_NOT_FOUND", "PERSISTED_QUERY_NOT_SUPPORTED"})

_RETRIED_FLAG = "persisted_query_retried"


def is_persisted_query_miss(response: GraphQLResponse | None) -> bool:
    if response is None:
        return False
    return any(e.message in NOT_FOUND_MESSAGES or e.code in NOT_FOUND_CODES for e in response.errors)


class PersistedQueryInterceptor(Interceptor):
    name = "persisted_query"

    def __init__(self, *, network_stage: str = "network") -> None:
        self._network_stage = network_stage

    async def intercept(self, execution: ChainExecution, proceed: Continuation) -> None:
        if execution.context.get(_RETRIED_FLAG) or not is_persisted_query_miss(execution.response):
            await proceed()
            return

        execution.context[_RETRIED_FLAG] = True
        execution.request.body["query"] = execution.operation.document
        logger.debug(
            "%s: persisted query miss, resending full document", execution.operation.operation_name
        )
        await execution.rewind(self._network_stage)()
