"""Dependency injection for FastAPI routes."""
from typing import Annotated

from fastapi import Depends, Request

from src.core.config import Settings, get_settings
from src.storage.local import LocalStorage


# Settings dependency
def get_settings_dep() -> Settings:
    """Get application settings."""
    return get_settings()


SettingsDep = Annotated[Settings, Depends(get_settings_dep)]


# File store dependency
def get_file_store(request: Request) -> LocalStorage:
    """Get the storage backend created during startup."""
    store = getattr(request.app.state, "file_store", None)
    if store is None:
        raise RuntimeError("File store not initialized")
    return store


FileStoreDep = Annotated[LocalStorage, Depends(get_file_store)]
