"""Orden declarado de la cadena de interceptores."""

from __future__ import annotations

from typing import Sequence

import httpx

from core.config import AppSettings
from core.domain.models import Operation
from core.interfaces.identity import IdentityProvider
from core.interfaces.interceptor import Interceptor, InterceptorProvider
from core.services.cache_store import CacheStore

from adapters.interceptors.authorization import AuthorizationInterceptor
from adapters.interceptors.cache import CacheReadInterceptor, CacheWriteInterceptor
from adapters.interceptors.network import NetworkFetchInterceptor
from adapters.interceptors.persisted_query import PersistedQueryInterceptor
from adapters.interceptors.response import ParsingInterceptor, ResponseCodeInterceptor
from adapters.interceptors.retry import RetryInterceptor


class DefaultInterceptorProvider(InterceptorProvider):
    """Stages compartidos entre ejecuciones; no guardan estado por ejecución."""

    def __init__(
        self,
        *,
        settings: AppSettings,
        http_client: httpx.AsyncClient,
        store: CacheStore,
        identity_provider: IdentityProvider | None = None,
    ) -> None:
        self._interceptors: tuple[Interceptor, ...] = (
            AuthorizationInterceptor(identity_provider),
            RetryInterceptor(
                max_retries=settings.http_max_retries,
                backoff_seconds=settings.http_retry_backoff_seconds,
            ),
            CacheReadInterceptor(store),
            NetworkFetchInterceptor(http_client),
            ResponseCodeInterceptor(),
            ParsingInterceptor(),
            PersistedQueryInterceptor(),
            CacheWriteInterceptor(store),
        )

    def interceptors(self, operation: Operation) -> Sequence[Interceptor]:
        return self._interceptors
