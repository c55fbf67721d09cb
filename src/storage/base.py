"""Abstract storage backend interface."""
from abc import ABC, abstractmethod
from pathlib import Path

from src.core.models import StoredObject


class StorageBackend(ABC):
    """Abstract base class for object storage backends.

    Operations report failure through sentinels (``None``, ``False``, empty
    lists) rather than exceptions; the HTTP layer decides what a failure
    means for the client. Only ``init`` and key validation raise.
    """

    @abstractmethod
    async def init(self) -> None:
        """Prepare backing storage.

        Raises:
            StorageInitError: If storage cannot be prepared
        """
        ...

    @abstractmethod
    async def save_file(
        self,
        filename: str,
        content: bytes,
        content_type: str | None = None,
    ) -> str | None:
        """Store file bytes under a freshly generated key.

        Args:
            filename: Name supplied by the client
            content: Raw file bytes
            content_type: MIME type

        Returns:
            Generated key, or None if the write failed
        """
        ...

    @abstractmethod
    async def save_metadata(
        self,
        key: str,
        original_name: str,
        content_type: str,
        size: int,
        uploaded_at: str | None = None,
    ) -> bool:
        """Write the metadata record for a key.

        Args:
            uploaded_at: ISO-8601 upload time, now if omitted

        Returns:
            True if written
        """
        ...

    @abstractmethod
    async def list_files(self) -> list[StoredObject]:
        """List stored objects, newest first."""
        ...

    @abstractmethod
    async def get_file_info(self, key: str) -> StoredObject | None:
        """Describe a stored object.

        Returns:
            StoredObject, or None if the key has no regular file
        """
        ...

    @abstractmethod
    async def read_file(self, key: str) -> bytes | None:
        """Read the full content of a stored object.

        Returns:
            Raw bytes, or None if missing or unreadable
        """
        ...

    @abstractmethod
    def get_file_path(self, key: str) -> Path:
        """Get the on-disk path for a key. No I/O."""
        ...

    @abstractmethod
    async def delete_file(self, key: str) -> bool:
        """Delete a stored object and its metadata.

        Returns:
            True if the file itself was removed
        """
        ...
