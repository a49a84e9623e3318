"""Client-side validation of the login forms.

Every check runs before any network call. A violation is returned as a
`FormFeedback` naming the offending fields; `None` means the input is valid.
"""

from __future__ import annotations

import re

from core.domain.login import FormFeedback, FormField

EMAIL_MAX_LENGTH = 200
PASSWORD_MIN_LENGTH = 8
DISPLAY_NAME_MIN_LENGTH = 3

_EMAIL_RE = re.compile(r"^[\w\-.]+@([\w-]+\.)+[\w-]{2,4}$")

EMAIL_REQUIRED_MESSAGE = "Please, specify your email address."
EMAIL_TOO_LONG_MESSAGE = "Your email address is too long."
PASSWORD_TOO_SHORT_MESSAGE = f"Password must contain at least {PASSWORD_MIN_LENGTH} characters."
DISPLAY_NAME_TOO_SHORT_MESSAGE = "Please, specify your name (at least 3 characters)."
PASSWORDS_MISMATCH_MESSAGE = "Passwords don't match."


def _invalid(message: str, *fields: FormField) -> FormFeedback:
    return FormFeedback(error_message=message, invalid_fields=frozenset(fields))


def validate_email(email: str) -> FormFeedback | None:
    feedback = None
    if not email or not _EMAIL_RE.fullmatch(email):
        feedback = _invalid(EMAIL_REQUIRED_MESSAGE, FormField.EMAIL)
    # The length message wins over the format one.
    if len(email) > EMAIL_MAX_LENGTH:
        feedback = _invalid(EMAIL_TOO_LONG_MESSAGE, FormField.EMAIL)
    return feedback


def validate_password(password: str) -> FormFeedback | None:
    if len(password) < PASSWORD_MIN_LENGTH:
        return _invalid(PASSWORD_TOO_SHORT_MESSAGE, FormField.PASSWORD)
    return None


def validate_registration(
    display_name: str,
    password: str,
    password_confirmation: str,
) -> FormFeedback | None:
    if len(display_name.strip()) < DISPLAY_NAME_MIN_LENGTH:
        return _invalid(DISPLAY_NAME_TOO_SHORT_MESSAGE, FormField.DISPLAY_NAME)
    feedback = validate_password(password)
    if feedback:
        return feedback
    if password != password_confirmation:
        return _invalid(
            PASSWORDS_MISMATCH_MESSAGE,
            FormField.PASSWORD,
            FormField.PASSWORD_CONFIRMATION,
        )
    return None
