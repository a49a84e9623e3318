"""Stage 2: reintentos ante fallos de transporte.

Envuelve el resto de la cadena: si un stage posterior lanza
`RetryableTransportError`, los stages siguientes se re-ejecutan con el mismo
request (sin reconstruirlo) hasta `max_retries` veces.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

from core.domain.errors import RetryableTransportError
from core.interfaces.interceptor import Continuation, Interceptor
from core.services.request_chain import ChainExecution

logger = logging.getLogger(__name__)


class RetryInterceptor(Interceptor):
    name = "retry"

    def __init__(
        self,
        *,
        max_retries: int = 3,
        backoff_seconds: float = 0.5,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._max_retries = max_retries
        self._backoff_seconds = backoff_seconds
        self._sleep = sleep

    async def intercept(self, execution: ChainExecution, proceed: Continuation) -> None:
        attempt = 0
        resume = proceed
        while True:
            try:
                await resume()
                return
            except RetryableTransportError as exc:
                if attempt >= self._max_retries:
                    logger.info(
                        "%s: giving up after %d retries: %s",
                        execution.operation.operation_name,
                        attempt,
                        exc,
                    )
                    execution.fail(exc)
                    return
                attempt += 1
                logger.debug(
                    "%s: transport failure (%s), retry %d/%d",
                    execution.operation.operation_name,
                    exc,
                    attempt,
                    self._max_retries,
                )
                if self._backoff_seconds:
                    await self._sleep(self._backoff_seconds * attempt)
                resume = execution.resume_after(self)
