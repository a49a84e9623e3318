"""Stage 1: bearer token del proveedor de identidad.

Si hay identidad, se pide un token de corta duración y se adjunta como header.
Sin identidad, o si el token falla, la petición sigue sin autenticar: este
stage nunca hace fallar la cadena.
"""

from __future__ import annotations

import logging

from core.domain.errors import IdentityProviderError
from core.interfaces.identity import IdentityProvider
from core.interfaces.interceptor import Continuation, Interceptor
from core.services.request_chain import ChainExecution

logger = logging.getLogger(__name__)


class AuthorizationInterceptor(Interceptor):
    name = "authorization"

    def __init__(self, identity_provider: IdentityProvider | None) -> None:
        self._identity_provider = identity_provider

    async def intercept(self, execution: ChainExecution, proceed: Continuation) -> None:
        if self._identity_provider is None:
            await proceed()
            return

        identity = self._identity_provider.current_identity()
        if identity is None:
            await proceed()
            return

        try:
            token = await self._identity_provider.mint_token(identity)
        except IdentityProviderError as exc:
            logger.warning("Could not mint a token for %s, sending unauthenticated: %s", identity.uid, exc)
        else:
            execution.request.headers["Authorization"] = f"Bearer {token}"

        await proceed()
