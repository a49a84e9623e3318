"""Contrato de un stage de la cadena de interceptores.

Por qué Protocol:
- Define un contrato estructural sin herencia rígida; los stages concretos
  viven en `adapters.interceptors` y son intercambiables en tests.

Reglas de diseño:
- `intercept` es asíncrono porque un stage puede suspenderse (token, red).
- Por cada invocación, el stage hace exactamente una de dos cosas: llama a
  `proceed()` una vez, o termina la ejecución con `execution.complete(...)` /
  `execution.fail(...)`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Awaitable, Callable, Protocol, Sequence, runtime_checkable

if TYPE_CHECKING:
    from core.domain.models import Operation
    from core.services.request_chain import ChainExecution

Continuation = Callable[[], Awaitable[None]]


@runtime_checkable
class Interceptor(Protocol):
    """Stage nombrado de la cadena."""

    name: str

    async def intercept(self, execution: "ChainExecution", proceed: Continuation) -> None:
        ...


@runtime_checkable
class InterceptorProvider(Protocol):
    """Construye la lista ordenada de stages para una operación."""

    def interceptors(self, operation: "Operation") -> Sequence[Interceptor]:
        ...
