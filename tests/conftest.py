from __future__ import annotations

import asyncio

import httpx
import pytest

from adapters.graphql_client import GraphQLClient
from adapters.http_client import build_async_client
from core.config import AppSettings


@pytest.fixture
def settings() -> AppSettings:
    return AppSettings(
        server_host="localhost:8080",
        server_scheme="http",
        http_max_retries=3,
        http_retry_backoff_seconds=0,
        _env_file=None,
    )


@pytest.fixture
def run_client(settings):
    """Run `scenario(client)` against a `GraphQLClient` backed by `handler`."""

    def _run(handler, scenario, *, client_settings: AppSettings | None = None, **client_kwargs):
        active = client_settings or settings

        async def main():
            transport = httpx.MockTransport(handler)
            async with build_async_client(active, transport=transport) as http:
                client = GraphQLClient(active, http_client=http, **client_kwargs)
                return await scenario(client)

        return asyncio.run(main())

    return _run
