"""Configuración del Core.

Por qué aquí:
- Centraliza variables de entorno (pydantic-settings) sin contaminar la CLI.
- El host y el esquema del servidor GraphQL se resuelven una sola vez al
  arrancar; si faltan, la aplicación no puede funcionar y se aborta.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Any, Literal

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.domain.errors import ConfigurationError


def get_user_config_dir() -> Path:
    """Directorio de configuración por usuario (cross-platform, sin dependencias)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "heartbeat-live"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "heartbeat-live"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "heartbeat-live"
    return Path.home() / ".config" / "heartbeat-live"


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


class AppSettings(BaseSettings):
    """Configuración central del cliente.

    Por qué pydantic-settings:
    - Tipado + validación en el borde (env vars) sin ensuciar el Core con lógica.
    - `server_host` y `server_scheme` no tienen default: su ausencia es un error
      de arranque, no de runtime.
    """

    model_config = SettingsConfigDict(
        env_prefix="HBL_",
        extra="ignore",
        case_sensitive=False,
        # Orden: proyecto primero (dev), luego config global de usuario.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    server_host: str = Field(
        ...,
        min_length=1,
        description="Host (y puerto) del backend GraphQL, p.ej. 'localhost:8080'.",
    )
    server_scheme: str = Field(
        ...,
        pattern=r"^https?$",
        description="Esquema del backend GraphQL ('http' o 'https').",
    )
    graphql_path: str = Field(
        default="/graphql",
        min_length=1,
        description="Ruta del endpoint GraphQL.",
    )

    http_timeout_seconds: float = Field(
        default=20.0,
        gt=0,
        description="Timeout por request (segundos).",
    )
    user_agent: str = Field(
        default="heartbeat-live/0.1",
        min_length=1,
        description="User-Agent enviado al backend.",
    )
    http_max_retries: int = Field(
        default=3,
        ge=0,
        le=10,
        description="Reintentos máximos ante fallos de transporte (timeout, conexión, DNS).",
    )
    http_retry_backoff_seconds: float = Field(
        default=0.5,
        ge=0,
        description="Espera entre reintentos de transporte (segundos).",
    )
    persisted_queries_enabled: bool = Field(
        default=True,
        description="Enviar primero el hash de la query (persisted queries).",
    )

    profile_sync_delay_seconds: float = Field(
        default=3.0,
        ge=0,
        description="Espera entre intentos de sincronizar el nombre de perfil.",
    )
    profile_sync_max_attempts: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Intentos máximos para sincronizar el nombre de perfil.",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="WARNING",
        description="Nivel de logging para la CLI (`--verbose` lo sube a DEBUG).",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value

    @property
    def graphql_url(self) -> str:
        path = self.graphql_path if self.graphql_path.startswith("/") else f"/{self.graphql_path}"
        return f"{self.server_scheme}://{self.server_host}{path}"


def load_settings(**overrides: Any) -> AppSettings:
    """Carga la configuración o aborta con `ConfigurationError`."""

    try:
        return AppSettings(**overrides)
    except ValidationError as exc:
        missing = [".".join(str(p) for p in err["loc"]) for err in exc.errors()]
        raise ConfigurationError(
            f"Invalid or missing configuration values: {', '.join(missing)}"
        ) from exc
