"""Stages 5 y 6: validación del status HTTP y parseo del payload GraphQL.

Los errores GraphQL embebidos en una respuesta 2xx NO son fallos: viajan
dentro de `GraphQLResponse.errors`.
"""

from __future__ import annotations

import json

from pydantic import ValidationError

from core.domain.errors import ChainInvariantError, ParseError, TransportError
from core.domain.models import GraphQLResponse
from core.interfaces.interceptor import Continuation, Interceptor
from core.services.cache_store import normalize
from core.services.request_chain import ChainExecution, HTTPResponse


def _require_http_response(execution: ChainExecution) -> HTTPResponse:
    if execution.http_response is None:
        raise ChainInvariantError("Response stages need the network stage to run first.")
    return execution.http_response


class ResponseCodeInterceptor(Interceptor):
    name = "response_code"

    async def intercept(self, execution: ChainExecution, proceed: Continuation) -> None:
        http_response = _require_http_response(execution)
        if not http_response.is_success:
            execution.fail(
                TransportError(
                    f"{execution.operation.operation_name}: server answered HTTP {http_response.status_code}",
                    status_code=http_response.status_code,
                )
            )
            return
        await proceed()


class ParsingInterceptor(Interceptor):
    """Deserializa el cuerpo y normaliza entidades para la caché."""

    name = "parsing"

    async def intercept(self, execution: ChainExecution, proceed: Continuation) -> None:
        http_response = _require_http_response(execution)
        operation = execution.operation

        try:
            payload = json.loads(http_response.body or b"")
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            execution.fail(ParseError(f"{operation.operation_name}: response is not valid JSON ({exc})"))
            return
        if not isinstance(payload, dict) or not ("data" in payload or "errors" in payload):
            execution.fail(ParseError(f"{operation.operation_name}: response is not a GraphQL payload"))
            return

        try:
            response = GraphQLResponse.model_validate(payload)
            if response.data is not None and operation.response_model is not None:
                response.typed_data = operation.response_model.model_validate(response.data)
        except ValidationError as exc:
            execution.fail(ParseError(f"{operation.operation_name}: unexpected response shape ({exc})"))
            return

        execution.response = response
        execution.records = normalize(operation.cache_key, response.data) if response.data else {}
        await proceed()
