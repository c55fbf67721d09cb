"""Domain exceptions for the file store."""
from typing import Any


class FileStoreError(Exception):
    """Base exception for all file store errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)


# Storage errors
class StorageError(FileStoreError):
    """Error in storage operations."""

    pass


class StorageInitError(StorageError):
    """Storage directories could not be created."""

    pass


class ObjectNotFoundError(StorageError):
    """No stored object for the given key."""

    pass


# Validation errors
class ValidationError(FileStoreError):
    """Caller-supplied input is malformed."""

    pass


class InvalidKeyError(ValidationError):
    """Key is not a safe single path segment."""

    def __init__(self, key: Any) -> None:
        super().__init__(message="Invalid key", details={"key": repr(key)})
        self.key = key


class InvalidRequestError(ValidationError):
    """Malformed request body."""

    pass


class UploadTooLargeError(ValidationError):
    """Upload exceeds the configured size limit."""

    def __init__(self, size_bytes: int, max_bytes: int) -> None:
        super().__init__(
            message=f"File exceeds {max_bytes // (1024 * 1024)}MB limit",
            details={"size_bytes": size_bytes, "max_bytes": max_bytes},
        )
