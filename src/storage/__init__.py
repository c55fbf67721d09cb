"""Storage module - File and metadata storage abstraction."""
from src.storage.base import StorageBackend
from src.storage.local import LocalStorage
from src.storage.metadata import MetadataStore

__all__ = ["StorageBackend", "LocalStorage", "MetadataStore"]
