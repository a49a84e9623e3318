"""Authentication flow state machine.

The flow owns the active `LoginFlowState` and is its only writer: every
change goes through `_transition`, which notifies subscribers. Network and
identity-provider outcomes are translated into `FormFeedback` (field errors
and messages) or `RecoveryPresentation`; no failure leaves the form loading.

Successful sign-in does not move the state: the flow ends when the identity
provider reports a non-empty identity, observed through `on_authenticated`.
"""

from __future__ import annotations

import logging
from typing import Callable

from core.config import AppSettings, load_settings
from core.domain.errors import (
    AuthorizationCanceledError,
    AuthorizationError,
    IdentityErrorCode,
    IdentityProviderError,
    InvalidTransitionError,
)
from core.domain.login import (
    EmailPrompt,
    FormFeedback,
    FormField,
    LoginFlowState,
    PasswordPrompt,
    PasswordRecoveryPrompt,
    RecoveryPresentation,
    RegistrationPrompt,
    Severity,
)
from core.domain.models import CachePolicy, GraphQLResponse, Result
from core.domain.operations import (
    CHECK_EMAIL_RESERVED_FIELD,
    RESET_PASSWORD_ALREADY_REQUESTED_CODE,
    SEND_RESET_PASSWORD_EMAIL_FIELD,
    USER_NOT_FOUND_BY_EMAIL_CODE,
    check_email_reserved,
    send_reset_password_email,
)
from core.interfaces.graphql import OperationClient
from core.interfaces.identity import ExternalAuthorizer, Identity, IdentityProvider
from core.services.nonce import generate_nonce, sha256_hex
from core.services.reconciler import DisplayNameReconciler
from core.services.validation import validate_email, validate_password, validate_registration

logger = logging.getLogger(__name__)

CONNECTIVITY_MESSAGE = (
    "An exception happened while making request. "
    "Please, make sure that you have stable internet connection."
)
TRY_AGAIN_MESSAGE = "An error happened while checking if account exists. Please, try again later."
WRONG_PASSWORD_MESSAGE = "Wrong password. Please, try again."
AUTH_FAILED_MESSAGE = "Authentication failed. Please, try again later."
EMAIL_IN_USE_MESSAGE = "Account with this email address already exists."
WEAK_PASSWORD_MESSAGE = "Your password is too weak."
TOO_MANY_REQUESTS_MESSAGE = "Too many attempts. Please, try again later."

RESET_EMAIL_SENT_MESSAGE = "We have sent password reset instructions to {email}."
USER_NOT_FOUND_MESSAGE = "User with email {email} was not found."
RESET_ALREADY_REQUESTED_MESSAGE = (
    "Password reset was already requested recently. Please, check your inbox or try again later."
)
RESET_FAILED_MESSAGE = "Failed to send password reset email. Please, try again."

StateListener = Callable[[LoginFlowState], None]
AuthenticatedListener = Callable[[Identity], None]


class LoginFlow:
    def __init__(
        self,
        *,
        client: OperationClient,
        identity_provider: IdentityProvider,
        reconciler: DisplayNameReconciler | None = None,
        settings: AppSettings | None = None,
    ) -> None:
        self._client = client
        self._identity_provider = identity_provider
        self._reconciler = reconciler or DisplayNameReconciler.from_settings(
            client, settings or load_settings()
        )

        self._state: LoginFlowState = EmailPrompt()
        self._feedback = FormFeedback()
        self._recovery: RecoveryPresentation | None = None
        self._reset_requested = False
        self._identity: Identity | None = None

        self._listeners: list[StateListener] = []
        self._authenticated_listeners: list[AuthenticatedListener] = []
        self._unsubscribe_identity = identity_provider.on_identity_changed(self._on_identity_changed)

    # --- observable state -------------------------------------------------

    @property
    def state(self) -> LoginFlowState:
        return self._state

    @property
    def feedback(self) -> FormFeedback:
        return self._feedback

    @property
    def recovery(self) -> RecoveryPresentation | None:
        return self._recovery

    @property
    def authenticated(self) -> bool:
        return self._identity is not None

    @property
    def reconciler(self) -> DisplayNameReconciler:
        return self._reconciler

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def on_authenticated(self, listener: AuthenticatedListener) -> Callable[[], None]:
        self._authenticated_listeners.append(listener)
        return lambda: self._authenticated_listeners.remove(listener)

    def close(self) -> None:
        self._unsubscribe_identity()
        self._listeners.clear()
        self._authenticated_listeners.clear()

    # --- transitions -----------------------------------------------------

    def _transition(self, state: LoginFlowState) -> None:
        logger.debug("Login flow: %s -> %s", self._state.kind, state.kind)
        self._state = state
        self._feedback = FormFeedback()
        self._recovery = None
        self._reset_requested = False
        for listener in list(self._listeners):
            listener(state)

    def _require(self, *kinds: type) -> None:
        if not isinstance(self._state, kinds):
            allowed = ", ".join(k.__name__ for k in kinds)
            raise InvalidTransitionError(
                f"Action not allowed from {type(self._state).__name__} (expected {allowed})."
            )

    def go_back(self) -> None:
        self._require(PasswordPrompt, RegistrationPrompt, PasswordRecoveryPrompt)
        self._transition(EmailPrompt())

    # --- email step -------------------------------------------------------

    async def submit_email(self, email: str) -> FormFeedback:
        self._require(EmailPrompt)
        invalid = validate_email(email)
        if invalid:
            self._feedback = invalid
            return invalid

        self._feedback = FormFeedback(loading=True)
        # Reservation status is time-sensitive: never served from cache.
        result = await self._client.fetch(
            check_email_reserved(email),
            cache_policy=CachePolicy.FETCH_IGNORING_CACHE_COMPLETELY,
        )
        if not result.ok:
            logger.info("Email reservation check failed: %s", result.error)
            self._feedback = FormFeedback(error_message=CONNECTIVITY_MESSAGE)
            return self._feedback

        data = result.value.data or {}
        reserved = data.get(CHECK_EMAIL_RESERVED_FIELD)
        if not isinstance(reserved, bool):
            self._feedback = FormFeedback(error_message=TRY_AGAIN_MESSAGE)
            return self._feedback

        if reserved:
            self._transition(PasswordPrompt(email=email))
        else:
            self._transition(RegistrationPrompt(email=email))
        return self._feedback

    # --- password step ----------------------------------------------------

    async def submit_password(self, password: str) -> FormFeedback:
        self._require(PasswordPrompt)
        invalid = validate_password(password)
        if invalid:
            self._feedback = invalid
            return invalid

        self._feedback = FormFeedback(loading=True)
        try:
            await self._identity_provider.sign_in(self._state.email, password)
        except IdentityProviderError as exc:
            if exc.code is IdentityErrorCode.WRONG_PASSWORD:
                self._feedback = FormFeedback(
                    error_message=WRONG_PASSWORD_MESSAGE,
                    invalid_fields=frozenset({FormField.PASSWORD}),
                )
            else:
                self._feedback = FormFeedback(error_message=_provider_message(exc))
            return self._feedback

        self._feedback = FormFeedback()
        return self._feedback

    async def forgot_password(self) -> RecoveryPresentation | None:
        """Enter recovery; the reset email is sent right away, once."""

        self._require(PasswordPrompt)
        self._transition(PasswordRecoveryPrompt(email=self._state.email))
        return await self.request_password_reset()

    # --- registration step ------------------------------------------------

    async def submit_registration(
        self,
        display_name: str,
        password: str,
        password_confirmation: str,
    ) -> FormFeedback:
        self._require(RegistrationPrompt)
        invalid = validate_registration(display_name, password, password_confirmation)
        if invalid:
            self._feedback = invalid
            return invalid

        self._feedback = FormFeedback(loading=True)
        try:
            await self._identity_provider.create_account(self._state.email, password)
        except IdentityProviderError as exc:
            fields: frozenset[FormField] = frozenset()
            if exc.code is IdentityErrorCode.EMAIL_ALREADY_IN_USE:
                fields = frozenset({FormField.EMAIL})
            elif exc.code is IdentityErrorCode.WEAK_PASSWORD:
                fields = frozenset({FormField.PASSWORD})
            self._feedback = FormFeedback(error_message=_provider_message(exc), invalid_fields=fields)
            return self._feedback

        # Not awaited: the name is pushed in the background.
        self._reconciler.start(display_name.strip())
        self._feedback = FormFeedback()
        return self._feedback

    # --- password recovery step -------------------------------------------

    async def request_password_reset(self) -> RecoveryPresentation | None:
        """Send the reset email unless it was already sent for this entry."""

        self._require(PasswordRecoveryPrompt)
        if self._reset_requested:
            return self._recovery
        self._reset_requested = True

        email = self._state.email
        result = await self._client.perform(send_reset_password_email(email))
        self._recovery = recovery_presentation(result, email)
        return self._recovery

    async def retry_password_reset(self) -> RecoveryPresentation | None:
        self._require(PasswordRecoveryPrompt)
        self._reset_requested = False
        return await self.request_password_reset()

    # --- Sign in with Apple -----------------------------------------------

    async def sign_in_with_apple(self, authorizer: ExternalAuthorizer) -> FormFeedback:
        nonce = generate_nonce()
        try:
            credential = await authorizer.authorize(sha256_hex(nonce))
            self._feedback = FormFeedback(loading=True)
            await self._identity_provider.sign_in_with_external_credential(
                credential.identity_token, nonce
            )
        except AuthorizationCanceledError:
            logger.debug("Apple authorization cancelled by the user.")
            self._feedback = FormFeedback()
            return self._feedback
        except (AuthorizationError, IdentityProviderError) as exc:
            logger.info("Apple sign-in rejected: %s", exc)
            self._feedback = FormFeedback(error_message=AUTH_FAILED_MESSAGE)
            return self._feedback

        self._feedback = FormFeedback()
        return self._feedback

    # --- identity provider notifications ----------------------------------

    def _on_identity_changed(self, identity: Identity | None) -> None:
        self._identity = identity
        if identity is None:
            return
        for listener in list(self._authenticated_listeners):
            listener(identity)


_PROVIDER_MESSAGES: dict[IdentityErrorCode, str] = {
    IdentityErrorCode.WRONG_PASSWORD: WRONG_PASSWORD_MESSAGE,
    IdentityErrorCode.EMAIL_ALREADY_IN_USE: EMAIL_IN_USE_MESSAGE,
    IdentityErrorCode.WEAK_PASSWORD: WEAK_PASSWORD_MESSAGE,
    IdentityErrorCode.TOO_MANY_REQUESTS: TOO_MANY_REQUESTS_MESSAGE,
    IdentityErrorCode.NETWORK: CONNECTIVITY_MESSAGE,
}


def _provider_message(exc: IdentityProviderError) -> str:
    return _PROVIDER_MESSAGES.get(exc.code, AUTH_FAILED_MESSAGE)


def recovery_presentation(result: Result[GraphQLResponse], email: str) -> RecoveryPresentation:
    if not result.ok:
        return RecoveryPresentation(message=RESET_FAILED_MESSAGE, severity=Severity.DANGER, can_retry=True)

    response = result.value
    error = response.find_error_with(SEND_RESET_PASSWORD_EMAIL_FIELD)
    if error is not None:
        if error.code == USER_NOT_FOUND_BY_EMAIL_CODE:
            reported = (error.extensions or {}).get("email")
            address = reported if isinstance(reported, str) and reported else email
            return RecoveryPresentation(
                message=USER_NOT_FOUND_MESSAGE.format(email=address),
                severity=Severity.DANGER,
            )
        if error.code == RESET_PASSWORD_ALREADY_REQUESTED_CODE:
            return RecoveryPresentation(
                message=RESET_ALREADY_REQUESTED_MESSAGE,
                severity=Severity.INFO,
                can_retry=True,
            )
        return RecoveryPresentation(message=RESET_FAILED_MESSAGE, severity=Severity.DANGER, can_retry=True)

    if (response.data or {}).get(SEND_RESET_PASSWORD_EMAIL_FIELD) is True:
        return RecoveryPresentation(message=RESET_EMAIL_SENT_MESSAGE.format(email=email), severity=Severity.INFO)
    return RecoveryPresentation(message=RESET_FAILED_MESSAGE, severity=Severity.DANGER, can_retry=True)
