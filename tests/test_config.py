from __future__ import annotations

import asyncio

import pytest

from adapters.graphql_client import build_graphql_client
from core.config import AppSettings, load_settings
from core.domain.errors import ConfigurationError


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in ("HBL_SERVER_HOST", "HBL_SERVER_SCHEME", "HBL_GRAPHQL_PATH"):
        monkeypatch.delenv(name, raising=False)


def test_graphql_url_from_host_and_scheme():
    settings = AppSettings(server_host="localhost:8080", server_scheme="http", _env_file=None)

    assert settings.graphql_url == "http://localhost:8080/graphql"


def test_graphql_path_without_leading_slash():
    settings = AppSettings(
        server_host="api.example.com", server_scheme="https", graphql_path="gql", _env_file=None
    )

    assert settings.graphql_url == "https://api.example.com/gql"


def test_values_read_from_prefixed_environment(monkeypatch):
    monkeypatch.setenv("HBL_SERVER_HOST", "api.example.com")
    monkeypatch.setenv("HBL_SERVER_SCHEME", "https")

    settings = load_settings(_env_file=None)

    assert settings.graphql_url == "https://api.example.com/graphql"
    assert settings.http_max_retries == 3
    assert settings.persisted_queries_enabled is True


def test_missing_server_host_is_fatal():
    with pytest.raises(ConfigurationError) as excinfo:
        load_settings(_env_file=None, server_scheme="http")

    assert "server_host" in str(excinfo.value)


def test_missing_server_scheme_is_fatal():
    with pytest.raises(ConfigurationError) as excinfo:
        load_settings(_env_file=None, server_host="localhost")

    assert "server_scheme" in str(excinfo.value)


def test_unsupported_scheme_is_rejected():
    with pytest.raises(ConfigurationError):
        load_settings(_env_file=None, server_host="localhost", server_scheme="ftp")


def test_shared_client_targets_configured_endpoint(settings):
    client = build_graphql_client(settings)
    try:
        assert client.endpoint_url == "http://localhost:8080/graphql"
    finally:
        asyncio.run(client.aclose())


def test_log_level_is_case_insensitive():
    settings = AppSettings(server_host="localhost", server_scheme="http", log_level="info", _env_file=None)

    assert settings.log_level == "INFO"


def test_unknown_log_level_is_rejected():
    with pytest.raises(ConfigurationError):
        load_settings(_env_file=None, server_host="localhost", server_scheme="http", log_level="loud")
