"""Catálogo de operaciones GraphQL que usa el cliente.

Cada builder devuelve un `Operation` inmutable con su documento, variables y
la forma esperada de `data`.
"""

from __future__ import annotations

from pydantic import BaseModel
from pydantic.config import ConfigDict

from core.domain.models import Operation, OperationKind

CHECK_EMAIL_RESERVED_FIELD = "checkEmailReserved"
SEND_RESET_PASSWORD_EMAIL_FIELD = "sendResetPasswordEmail"
UPDATE_PROFILE_DISPLAY_NAME_FIELD = "updateProfileDisplayName"

USER_NOT_FOUND_BY_EMAIL_CODE = "user.not_found_by_email"
RESET_PASSWORD_ALREADY_REQUESTED_CODE = "user.reset_password_request.already_made"

_CHECK_EMAIL_RESERVED_DOCUMENT = """\
query CheckEmailReserved($email: String!) {
  checkEmailReserved(email: $email)
}"""

_SEND_RESET_PASSWORD_EMAIL_DOCUMENT = """\
mutation SendResetPasswordEmail($email: String!) {
  sendResetPasswordEmail(email: $email)
}"""

_UPDATE_PROFILE_DISPLAY_NAME_DOCUMENT = """\
mutation UpdateProfileDisplayName($displayName: String!) {
  updateProfileDisplayName(displayName: $displayName) {
    __typename
    id
    displayName
  }
}"""


class CheckEmailReservedData(BaseModel):
    model_config = ConfigDict(extra="ignore")

    # Opcional: una respuesta sin el campo no es un error de parseo.
    checkEmailReserved: bool | None = None


class SendResetPasswordEmailData(BaseModel):
    model_config = ConfigDict(extra="ignore")

    sendResetPasswordEmail: bool | None = None


class UserProfile(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    displayName: str | None = None


class UpdateProfileDisplayNameData(BaseModel):
    model_config = ConfigDict(extra="ignore")

    updateProfileDisplayName: UserProfile | None = None


def check_email_reserved(email: str) -> Operation:
    return Operation(
        operation_name="CheckEmailReserved",
        document=_CHECK_EMAIL_RESERVED_DOCUMENT,
        variables={"email": email},
        kind=OperationKind.QUERY,
        response_model=CheckEmailReservedData,
    )


def send_reset_password_email(email: str) -> Operation:
    return Operation(
        operation_name="SendResetPasswordEmail",
        document=_SEND_RESET_PASSWORD_EMAIL_DOCUMENT,
        variables={"email": email},
        kind=OperationKind.MUTATION,
        response_model=SendResetPasswordEmailData,
    )


def update_profile_display_name(display_name: str) -> Operation:
    return Operation(
        operation_name="UpdateProfileDisplayName",
        document=_UPDATE_PROFILE_DISPLAY_NAME_DOCUMENT,
        variables={"displayName": display_name},
        kind=OperationKind.MUTATION,
        response_model=UpdateProfileDisplayNameData,
    )
