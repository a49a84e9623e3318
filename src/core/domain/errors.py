"""Taxonomía de errores del cliente.

Regla principal:
- Todo lo que hereda de `ClientError` viaja como `Result.failure`.
- Los errores de programación (`ChainInvariantError`, `InvalidTransitionError`)
  nunca se convierten en resultados: se propagan.
- Los errores GraphQL por path NO son excepciones; llegan como datos dentro de
  una respuesta exitosa.
"""

from __future__ import annotations

from enum import Enum


class ClientError(Exception):
    """Base de los fallos que el cliente entrega como `Result.failure`."""


class TransportError(ClientError):
    """Fallo de conectividad o respuesta HTTP no exitosa."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class RetryableTransportError(TransportError):
    """Señal del stage de red: timeout, conexión rechazada, DNS.

    La consume el stage de reintentos; si se agotan, se entrega tal cual.
    """


class ParseError(ClientError):
    """El cuerpo de la respuesta no es un payload GraphQL válido."""


class CacheMissError(ClientError):
    """La política exige caché y no hay entrada para la operación."""


class ChainInvariantError(RuntimeError):
    """Violación del contrato de la cadena de interceptores."""


class ConfigurationError(RuntimeError):
    """Falta configuración obligatoria; condición fatal de arranque."""


class InvalidTransitionError(RuntimeError):
    """Acción del flujo de login invocada desde un estado que no la admite."""


class IdentityErrorCode(str, Enum):
    """Categorías de error del proveedor de identidad."""

    WRONG_PASSWORD = "wrong_password"
    USER_NOT_FOUND = "user_not_found"
    EMAIL_ALREADY_IN_USE = "email_already_in_use"
    WEAK_PASSWORD = "weak_password"
    TOO_MANY_REQUESTS = "too_many_requests"
    NETWORK = "network"
    UNKNOWN = "unknown"


class IdentityProviderError(Exception):
    """Error devuelto por el proveedor de identidad externo."""

    def __init__(self, code: IdentityErrorCode, message: str = "") -> None:
        super().__init__(message or code.value)
        self.code = code


class AuthorizationError(Exception):
    """Fallo de la autorización externa (p.ej. Sign in with Apple)."""


class AuthorizationCanceledError(AuthorizationError):
    """El usuario canceló la autorización externa."""
