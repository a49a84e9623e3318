"""Modelos del dominio (Pydantic v2).

Por qué Pydantic en el dominio:
- Nos da validación estricta y documentación autocontenida (Field) sin acoplar
  el Core a librerías de I/O.
- El payload GraphQL que llega del servidor se valida en el borde y se
  transforma en estructuras tipadas.

Nota:
- Estos modelos describen *qué* es una operación o una respuesta, no *cómo*
  viaja por la red.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field, field_validator
from pydantic.config import ConfigDict

from core.domain.errors import ClientError

T = TypeVar("T")


class OperationKind(str, Enum):
    QUERY = "query"
    MUTATION = "mutation"


class CachePolicy(str, Enum):
    """Regla del llamador sobre si la caché puede satisfacer la operación."""

    RETURN_CACHE_DATA_ELSE_FETCH = "return_cache_data_else_fetch"
    FETCH_IGNORING_CACHE_DATA = "fetch_ignoring_cache_data"
    FETCH_IGNORING_CACHE_COMPLETELY = "fetch_ignoring_cache_completely"
    RETURN_CACHE_DATA_DONT_FETCH = "return_cache_data_dont_fetch"

    @classmethod
    def default(cls) -> "CachePolicy":
        return cls.RETURN_CACHE_DATA_ELSE_FETCH

    @property
    def reads_cache(self) -> bool:
        return self in (
            CachePolicy.RETURN_CACHE_DATA_ELSE_FETCH,
            CachePolicy.RETURN_CACHE_DATA_DONT_FETCH,
        )

    @property
    def writes_cache(self) -> bool:
        return self is not CachePolicy.FETCH_IGNORING_CACHE_COMPLETELY


class ResponseSource(str, Enum):
    SERVER = "server"
    CACHE = "cache"


def _sha256(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


class Operation(BaseModel):
    """Descriptor inmutable de una query o mutation.

    Por qué inmutable:
    - La cadena de interceptores acumula estado en el request HTTP, nunca en
      la operación; así dos ejecuciones de la misma operación son independientes.
    """

    model_config = ConfigDict(frozen=True)

    operation_name: str = Field(
        ...,
        min_length=1,
        description="Nombre de la operación GraphQL (p.ej. 'CheckEmailReserved').",
    )
    document: str = Field(
        ...,
        min_length=1,
        description="Texto completo de la query/mutation.",
    )
    variables: dict[str, Any] = Field(
        default_factory=dict,
        description="Variables de la operación.",
    )
    kind: OperationKind = Field(
        default=OperationKind.QUERY,
        description="Query (lectura) o mutation.",
    )
    response_model: type[BaseModel] | None = Field(
        default=None,
        description="Forma esperada del campo `data` de la respuesta.",
    )

    @property
    def is_mutation(self) -> bool:
        return self.kind is OperationKind.MUTATION

    @property
    def document_hash(self) -> str:
        """SHA-256 del documento; identifica la persisted query."""

        return _sha256(self.document)

    @property
    def cache_key(self) -> str:
        """Discriminador de caché: nombre + hash(documento + variables)."""

        canonical = json.dumps(self.variables, sort_keys=True, separators=(",", ":"), default=str)
        return f"{self.operation_name}:{_sha256(self.document + canonical)}"


class GraphQLError(BaseModel):
    """Error GraphQL asociado a un path lógico del resultado."""

    model_config = ConfigDict(extra="allow")

    message: str = Field(default="", description="Mensaje legible del servidor.")
    path: list[str | int] | None = Field(
        default=None,
        description="Path del campo afectado (p.ej. ['updateProfileDisplayName']).",
    )
    extensions: dict[str, Any] | None = Field(
        default=None,
        description="Extensiones del error; `code` lleva el código de aplicación.",
    )

    @property
    def code(self) -> str | None:
        if not self.extensions:
            return None
        value = self.extensions.get("code")
        return value if isinstance(value, str) else None


class GraphQLResponse(BaseModel):
    """Respuesta GraphQL ya parseada.

    Los `errors` por path forman parte de una respuesta exitosa: el llamador
    debe inspeccionarlos con `find_error_with`.
    """

    model_config = ConfigDict(extra="ignore")

    data: dict[str, Any] | None = None
    errors: list[GraphQLError] = Field(default_factory=list)
    extensions: dict[str, Any] = Field(default_factory=dict)
    source: ResponseSource = ResponseSource.SERVER
    typed_data: Any = Field(
        default=None,
        exclude=True,
        description="`data` validado contra `Operation.response_model` (si existe).",
    )

    @field_validator("errors", "extensions", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any, info: Any) -> Any:
        if value is None:
            return [] if info.field_name == "errors" else {}
        return value

    def find_error_with(self, path: str) -> GraphQLError | None:
        """Primer error cuyo path contiene el segmento `path`."""

        return next((e for e in self.errors if e.path and path in e.path), None)


@dataclass(frozen=True)
class Result(Generic[T]):
    """Resultado único de una ejecución: éxito con valor o fallo con error."""

    value: T | None = None
    error: ClientError | None = None

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: ClientError) -> "Result[T]":
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]
