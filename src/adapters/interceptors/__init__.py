"""Stages de la cadena de requests GraphQL.

Por qué un paquete:
- Un módulo por responsabilidad (auth, reintentos, caché, red, parseo...).
- Cada stage implementa `core.interfaces.interceptor.Interceptor`.
"""

from adapters.interceptors.authorization import AuthorizationInterceptor
from adapters.interceptors.cache import CacheReadInterceptor, CacheWriteInterceptor
from adapters.interceptors.network import NetworkFetchInterceptor
from adapters.interceptors.persisted_query import PersistedQueryInterceptor
from adapters.interceptors.provider import DefaultInterceptorProvider
from adapters.interceptors.response import ParsingInterceptor, ResponseCodeInterceptor
from adapters.interceptors.retry import RetryInterceptor

__all__ = [
	"AuthorizationInterceptor",
	"CacheReadInterceptor",
	"CacheWriteInterceptor",
	"DefaultInterceptorProvider",
	"NetworkFetchInterceptor",
	"ParsingInterceptor",
	"PersistedQueryInterceptor",
	"ResponseCodeInterceptor",
	"RetryInterceptor",
]
