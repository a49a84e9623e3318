"""Estados y presentación del flujo de login.

`LoginFlowState` es una unión discriminada por `kind`: exactamente una variante
está activa y sólo `LoginFlow` la reemplaza.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


class EmailPrompt(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["email_prompt"] = "email_prompt"


class PasswordPrompt(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["password_prompt"] = "password_prompt"
    email: str


class RegistrationPrompt(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["registration_prompt"] = "registration_prompt"
    email: str


class PasswordRecoveryPrompt(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["password_recovery_prompt"] = "password_recovery_prompt"
    email: str


LoginFlowState = Annotated[
    Union[EmailPrompt, PasswordPrompt, RegistrationPrompt, PasswordRecoveryPrompt],
    Field(discriminator="kind"),
]


class FormField(str, Enum):
    EMAIL = "email"
    PASSWORD = "password"
    PASSWORD_CONFIRMATION = "password_confirmation"
    DISPLAY_NAME = "display_name"


class FormFeedback(BaseModel):
    """Estado visible del formulario activo (mensaje, campos inválidos, carga)."""

    model_config = ConfigDict(frozen=True)

    error_message: str = ""
    invalid_fields: frozenset[FormField] = Field(default_factory=frozenset)
    loading: bool = False

    @property
    def has_error(self) -> bool:
        return bool(self.error_message)


class Severity(str, Enum):
    INFO = "info"
    DANGER = "danger"


class RecoveryPresentation(BaseModel):
    """Resultado visible del envío del email de recuperación."""

    model_config = ConfigDict(frozen=True)

    message: str = Field(..., min_length=1)
    severity: Severity
    can_retry: bool = False
