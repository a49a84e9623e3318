"""Fakes shared by the test modules."""

from __future__ import annotations

import json
from typing import Any

import httpx

from core.domain.errors import ClientError
from core.domain.models import GraphQLResponse, Operation, Result
from core.interfaces.identity import ExternalCredential, Identity


def ok(data: dict[str, Any] | None = None, errors: list[dict[str, Any]] | None = None) -> Result[GraphQLResponse]:
    return Result.success(GraphQLResponse.model_validate({"data": data, "errors": errors}))


def failed(error: ClientError) -> Result[GraphQLResponse]:
    return Result.failure(error)


class ScriptedServer:
    """`httpx.MockTransport` handler answering from a script.

    Items: a dict (200 JSON), a `(status, payload)` tuple where payload is a
    dict/list or raw bytes, or an exception to raise. The last item repeats.
    """

    def __init__(self, *script: Any) -> None:
        self.script = list(script)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        item = self.script.pop(0) if len(self.script) > 1 else self.script[0]
        if isinstance(item, Exception):
            raise item
        status, payload = item if isinstance(item, tuple) else (200, item)
        if isinstance(payload, bytes):
            return httpx.Response(status, content=payload)
        return httpx.Response(status, json=payload)

    @property
    def bodies(self) -> list[dict[str, Any]]:
        return [json.loads(r.content) for r in self.requests]


class FakeOperationClient:
    """Scripted `OperationClient`; the last result repeats."""

    def __init__(self, *results: Any) -> None:
        self.results = list(results)
        self.calls: list[tuple[str, Operation, Any]] = []

    async def fetch(self, operation, cache_policy=None):
        self.calls.append(("fetch", operation, cache_policy))
        return self._next(operation)

    async def perform(self, operation):
        self.calls.append(("perform", operation, None))
        return self._next(operation)

    def _next(self, operation: Operation) -> Result[GraphQLResponse]:
        item = self.results.pop(0) if len(self.results) > 1 else self.results[0]
        return item(operation) if callable(item) else item


class FakeIdentityProvider:
    def __init__(
        self,
        *,
        identity: Identity | None = None,
        token: str = "token-1",
        mint_error: Exception | None = None,
        sign_in_error: Exception | None = None,
        create_error: Exception | None = None,
        external_error: Exception | None = None,
    ) -> None:
        self.identity = identity
        self.token = token
        self.mint_error = mint_error
        self.sign_in_error = sign_in_error
        self.create_error = create_error
        self.external_error = external_error
        self.calls: list[tuple[Any, ...]] = []
        self.listeners: list[Any] = []

    def current_identity(self) -> Identity | None:
        return self.identity

    async def mint_token(self, identity: Identity) -> str:
        self.calls.append(("mint_token", identity.uid))
        if self.mint_error:
            raise self.mint_error
        return self.token

    async def sign_in(self, email: str, password: str) -> Identity:
        self.calls.append(("sign_in", email, password))
        if self.sign_in_error:
            raise self.sign_in_error
        return self._signed_in(email)

    async def create_account(self, email: str, password: str) -> Identity:
        self.calls.append(("create_account", email, password))
        if self.create_error:
            raise self.create_error
        return self._signed_in(email)

    async def sign_in_with_external_credential(self, id_token: str, nonce: str) -> Identity:
        self.calls.append(("external", id_token, nonce))
        if self.external_error:
            raise self.external_error
        return self._signed_in(None)

    def on_identity_changed(self, listener):
        self.listeners.append(listener)
        return lambda: self.listeners.remove(listener)

    def emit(self, identity: Identity | None) -> None:
        for listener in list(self.listeners):
            listener(identity)

    def _signed_in(self, email: str | None) -> Identity:
        self.identity = Identity(uid="uid-1", email=email)
        self.emit(self.identity)
        return self.identity


class FakeAuthorizer:
    def __init__(self, *, identity_token: str = "apple-id-token", error: Exception | None = None) -> None:
        self.identity_token = identity_token
        self.error = error
        self.hashed_nonces: list[str] = []

    async def authorize(self, hashed_nonce: str) -> ExternalCredential:
        self.hashed_nonces.append(hashed_nonce)
        if self.error:
            raise self.error
        return ExternalCredential(identity_token=self.identity_token)
