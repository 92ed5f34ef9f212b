"""
Pytest configuration and shared fixtures.

Every test gets its own SQLite file under tmp_path, so tests never share state.
"""

import os

# Set test environment variables BEFORE importing the app so the module-level
# default config never points at a real database.
os.environ.setdefault("C4KNIVES_DB_PATH", os.path.join(os.path.dirname(__file__), ".pytest-default.sqlite"))
os.environ.setdefault("AUTH_JWT_SECRET", "test_secret_key_at_least_32_characters_long")

import pytest
from fastapi.testclient import TestClient

from c4knives.api.server import create_app
from c4knives.config import Config
from c4knives.db import connect, init_db


ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "admin123"


@pytest.fixture
def cfg(tmp_path):
    """Config pointing at a fresh SQLite file."""
    return Config(
        DB_DSN=str(tmp_path / "c4knives-test.sqlite"),
        AUTH_JWT_SECRET="test_secret_key_at_least_32_characters_long",
        AUTH_BOOTSTRAP_ADMIN_USERNAME=ADMIN_USERNAME,
        AUTH_BOOTSTRAP_ADMIN_PASSWORD=ADMIN_PASSWORD,
        API_PREFIX="/api",
        ADMIN_API_ROUTE="",
        CORS_ALLOW_ORIGINS="http://localhost:3000",
    )


@pytest.fixture
def conn(cfg):
    """An open connection on an initialized (empty) database."""
    init_db(cfg.DB_DSN)
    with connect(cfg.DB_DSN) as c:
        yield c


@pytest.fixture
def client(cfg):
    """TestClient with startup hooks run (schema + admin bootstrap)."""
    with TestClient(create_app(cfg)) as c:
        yield c


@pytest.fixture
def token(client):
    """A valid admin token for the bootstrapped account."""
    response = client.post(
        "/api/admin/login",
        json={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD},
    )
    assert response.status_code == 200
    return response.json()["token"]


@pytest.fixture
def auth_headers(token):
    return {"x-auth-token": token}
