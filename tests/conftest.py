"""Pytest configuration and fixtures."""

from collections.abc import Iterator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from user_api.config import Settings, get_settings
from user_api.main import create_app
from user_store.services.user_store import JsonFileUserStore

API_TOKEN = "test-token"


@pytest.fixture
def users_file(tmp_path: Path) -> Path:
    """Path of a fresh backing file for the user store."""
    return tmp_path / "data" / "users.json"


@pytest.fixture
def settings(users_file: Path) -> Settings:
    """Test settings pointing at a temporary users file."""
    return Settings(
        _env_file=None,
        environment="test",
        users_file=str(users_file),
        api_token=API_TOKEN,
    )


@pytest.fixture
def store(users_file: Path) -> JsonFileUserStore:
    """A JSON file user store on a temporary file."""
    return JsonFileUserStore(users_file)


@pytest.fixture
def auth_headers() -> dict[str, str]:
    """Authorization header carrying the test API token."""
    return {"Authorization": f"Bearer {API_TOKEN}"}


@pytest.fixture
def client(settings: Settings, auth_headers: dict[str, str]) -> Iterator[TestClient]:
    """Create a FastAPI test client that sends the API token."""
    app = create_app(settings)
    app.dependency_overrides[get_settings] = lambda: settings

    with TestClient(app, headers=auth_headers) as test_client:
        yield test_client


@pytest.fixture
def anonymous_client(settings: Settings) -> Iterator[TestClient]:
    """Create a FastAPI test client without credentials."""
    app = create_app(settings)
    app.dependency_overrides[get_settings] = lambda: settings

    with TestClient(app) as test_client:
        yield test_client
