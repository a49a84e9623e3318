"""Stage 4: intercambio HTTP con el backend GraphQL.

Los fallos de transporte (timeout, conexión rechazada, DNS) se convierten en
`RetryableTransportError`, que consume el stage de reintentos. El resto de
errores de request de httpx (redirecciones en bucle, cuerpo mal codificado)
acaban como `TransportError` sin reintento.
"""

from __future__ import annotations

import logging

import httpx

from core.domain.errors import RetryableTransportError, TransportError
from core.interfaces.interceptor import Continuation, Interceptor
from core.services.request_chain import ChainExecution, HTTPResponse

logger = logging.getLogger(__name__)


class NetworkFetchInterceptor(Interceptor):
    name = "network"

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def intercept(self, execution: ChainExecution, proceed: Continuation) -> None:
        request = execution.request
        try:
            response = await self._client.post(request.url, json=request.body, headers=request.headers)
        except httpx.TransportError as exc:
            raise RetryableTransportError(
                f"{execution.operation.operation_name}: {exc.__class__.__name__}: {exc}"
            ) from exc
        except httpx.RequestError as exc:
            raise TransportError(
                f"{execution.operation.operation_name}: {exc.__class__.__name__}: {exc}"
            ) from exc

        logger.debug(
            "%s -> HTTP %s (%d bytes)",
            execution.operation.operation_name,
            response.status_code,
            len(response.content),
        )
        execution.http_response = HTTPResponse(
            status_code=response.status_code,
            body=response.content,
            headers=dict(response.headers),
        )
        execution.response = None
        execution.records = {}
        await proceed()
