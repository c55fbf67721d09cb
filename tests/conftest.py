"""Pytest configuration and fixtures."""
from collections.abc import Generator
from pathlib import Path

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.api.main import create_app
from src.core.config import Settings
from src.storage.local import LocalStorage


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Test settings with safe defaults."""
    return Settings(
        environment="development",
        debug=True,
        storage_path=tmp_path / "storage",
    )


@pytest.fixture
async def storage(tmp_path: Path) -> LocalStorage:
    """Initialized storage rooted in a temporary directory."""
    store = LocalStorage(tmp_path / "storage")
    await store.init()
    return store


@pytest.fixture
def app(tmp_path: Path) -> FastAPI:
    """Application whose file store lives in a temporary directory."""
    application = create_app()
    application.state.file_store = LocalStorage(tmp_path / "storage")
    return application


@pytest.fixture
def client(app: FastAPI) -> Generator[TestClient, None, None]:
    """Synchronous test client."""
    with TestClient(app) as c:
        yield c


@pytest.fixture
def file_store(app: FastAPI, client: TestClient) -> LocalStorage:
    """The store backing ``client``, for arranging and inspecting disk state."""
    return app.state.file_store
