"""Core module - shared kernel for the file store."""
from src.core.config import settings
from src.core.exceptions import FileStoreError

__all__ = ["settings", "FileStoreError"]
