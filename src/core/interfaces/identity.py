"""Contratos del proveedor de identidad externo.

El Core nunca muta la sesión: sólo pregunta por la identidad actual, pide
tokens de corta duración y se suscribe a cambios de identidad.
"""

from __future__ import annotations

from typing import Callable, Protocol, runtime_checkable

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


class Identity(BaseModel):
    """Identidad autenticada según el proveedor."""

    model_config = ConfigDict(frozen=True)

    uid: str = Field(..., min_length=1)
    email: str | None = None


class ExternalCredential(BaseModel):
    """Credencial devuelta por una autorización externa (Apple)."""

    model_config = ConfigDict(frozen=True)

    identity_token: str = Field(..., min_length=1)


IdentityListener = Callable[[Identity | None], None]
Unsubscribe = Callable[[], None]


@runtime_checkable
class IdentityProvider(Protocol):
    """Operaciones consumidas del proveedor (p.ej. Firebase Auth).

    Los métodos asíncronos lanzan `IdentityProviderError` ante fallo.
    """

    def current_identity(self) -> Identity | None:
        ...

    async def mint_token(self, identity: Identity) -> str:
        ...

    async def sign_in(self, email: str, password: str) -> Identity:
        ...

    async def create_account(self, email: str, password: str) -> Identity:
        ...

    async def sign_in_with_external_credential(self, id_token: str, nonce: str) -> Identity:
        ...

    def on_identity_changed(self, listener: IdentityListener) -> Unsubscribe:
        ...


@runtime_checkable
class ExternalAuthorizer(Protocol):
    """Petición de autorización externa (Sign in with Apple).

    Lanza `AuthorizationCanceledError` si el usuario cancela.
    """

    async def authorize(self, hashed_nonce: str) -> ExternalCredential:
        ...
