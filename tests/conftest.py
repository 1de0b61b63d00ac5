"""Shared fixtures: an app wired to an in-memory SQLite store."""

import pytest
from fastapi.testclient import TestClient

from fintracker.config import Settings
from fintracker.db import Database
from fintracker.main import create_app

TEST_SECRET = "test-secret-that-is-long-enough-for-hs256-signing"


def make_settings(**overrides) -> Settings:
    values = {
        "database_url": "sqlite://",
        "jwt_secret": TEST_SECRET,
        "environment": "development",
        "bcrypt_rounds": 4,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def database(settings):
    database = Database.from_settings(settings)
    yield database
    database.dispose()


@pytest.fixture
def client(settings, database):
    app = create_app(settings, database)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def register(client):
    def _register(username="alice", password="secret123", email=None):
        response = client.post(
            "/register", json={"username": username, "password": password, "email": email}
        )
        assert response.status_code == 200, response.text
        return response.json()

    return _register
