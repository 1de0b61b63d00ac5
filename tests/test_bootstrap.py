"""Tests for configuration, store connection setup, CORS and the HTTPS redirect."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient
from pydantic import ValidationError
from sqlalchemy.pool import StaticPool

from fintracker.config import DEFAULT_CORS_ORIGINS, Settings
from fintracker.db import Database, _connect_args, _normalize_database_url, build_engine
from fintracker.main import create_app

from .conftest import TEST_SECRET, make_settings


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("postgres://u:p@db:5432/app", "postgresql+psycopg://u:p@db:5432/app"),
        ("postgresql://u:p@db/app", "postgresql+psycopg://u:p@db/app"),
        ("postgresql+psycopg2://u:p@db/app", "postgresql+psycopg2://u:p@db/app"),
        ("sqlite:///./local.db", "sqlite:///./local.db"),
    ],
)
def test_database_url_normalisation(raw, expected) -> None:
    assert _normalize_database_url(raw) == expected


def test_production_postgres_verifies_certificates() -> None:
    settings = make_settings(environment="production", database_sslrootcert="system")

    args = _connect_args("postgresql+psycopg://u:p@db/app", settings)

    assert args["sslmode"] == "verify-full"
    assert args["sslrootcert"] == "system"
    assert args["connect_timeout"] == settings.database_connect_timeout
    assert "statement_timeout" in args["options"]


def test_development_postgres_does_not_force_ssl() -> None:
    args = _connect_args("postgresql+psycopg://u:p@db/app", make_settings())

    assert "sslmode" not in args


def test_memory_sqlite_shares_one_connection() -> None:
    engine = build_engine(make_settings())

    assert isinstance(engine.pool, StaticPool)
    engine.dispose()


def test_production_requires_a_real_secret(monkeypatch) -> None:
    monkeypatch.delenv("JWT_SECRET", raising=False)
    monkeypatch.delenv("NODE_ENV", raising=False)

    with pytest.raises(ValidationError):
        Settings(_env_file=None, environment="production")


def test_settings_read_from_environment(monkeypatch) -> None:
    monkeypatch.delenv("ENVIRONMENT", raising=False)
    monkeypatch.setenv("NODE_ENV", "Production")
    monkeypatch.setenv("JWT_SECRET", TEST_SECRET)
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.setenv("CORS_ORIGINS", "https://a.example, https://b.example,")

    settings = Settings(_env_file=None)

    assert settings.is_production
    assert settings.port == 8080
    assert settings.cors_origin_list == ["https://a.example", "https://b.example"]


def test_default_cors_origins() -> None:
    settings = make_settings()

    assert settings.cors_origins == DEFAULT_CORS_ORIGINS
    assert "https://fintracker-frontend.vercel.app" in settings.cors_origin_list
    assert settings.port == 5000


@pytest.fixture
def production_client():
    settings = make_settings(environment="production")
    database = Database.from_settings(settings)
    with TestClient(create_app(settings, database)) as test_client:
        yield test_client
    database.dispose()


def test_plain_http_is_redirected_in_production(production_client) -> None:
    response = production_client.get(
        "/income",
        params={"userId": 1},
        headers={"x-forwarded-proto": "http", "host": "api.example.com"},
        follow_redirects=False,
    )

    assert response.status_code == 302
    assert response.headers["location"] == "https://api.example.com/income?userId=1"


def test_redirect_keeps_encoded_path(production_client) -> None:
    response = production_client.get(
        "/files/a%2Fb",
        params={"q": "1"},
        headers={"x-forwarded-proto": "http", "host": "api.example.com"},
        follow_redirects=False,
    )

    assert response.status_code == 302
    assert response.headers["location"] == "https://api.example.com/files/a%2Fb?q=1"


def test_forwarded_https_passes_through(production_client) -> None:
    response = production_client.get(
        "/income", params={"userId": 1}, headers={"x-forwarded-proto": "https"}
    )

    assert response.status_code == 200
    assert response.json() == []


def test_health_is_not_redirected(production_client) -> None:
    response = production_client.get("/health", follow_redirects=False)

    assert response.status_code == 200


def test_no_redirect_outside_production(client) -> None:
    response = client.get("/income", params={"userId": 1}, follow_redirects=False)

    assert response.status_code == 200


def test_cors_preflight_for_allowed_origin(production_client) -> None:
    response = production_client.options(
        "/login",
        headers={
            "Origin": "http://localhost:5173",
            "Access-Control-Request-Method": "POST",
        },
        follow_redirects=False,
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "http://localhost:5173"
    assert response.headers["access-control-allow-credentials"] == "true"


def test_cors_ignores_unknown_origin(client) -> None:
    response = client.get("/health", headers={"Origin": "https://evil.example"})

    assert "access-control-allow-origin" not in response.headers
