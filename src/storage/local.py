"""Local filesystem storage backend."""
import os
import stat
from datetime import datetime, timezone
from pathlib import Path

import aiofiles

from src.core.config import settings
from src.core.exceptions import InvalidKeyError, StorageInitError
from src.core.models import DEFAULT_CONTENT_TYPE, StoredObject
from src.storage.base import StorageBackend
from src.storage.keys import generate_key, validate_key
from src.storage.metadata import MetadataStore


class LocalStorage(StorageBackend):
    """Local filesystem storage backend.

    Layout under ``base_path``::

        files/<key>             raw bytes
        metadata/<key>.json     sidecar, see MetadataStore

    There is no locking between requests. A listing may name an object that
    is deleted before it is read, and same-millisecond uploads of the same
    filename overwrite each other.

    Example:
        storage = LocalStorage(Path("./storage"))
        await storage.init()

        key = await storage.save_file("report.pdf", pdf_bytes, "application/pdf")
        await storage.save_metadata(key, "report.pdf", "application/pdf", len(pdf_bytes))
        data = await storage.read_file(key)
    """

    def __init__(self, base_path: Path | None = None) -> None:
        self.base_path = base_path or settings.storage_path
        self.files_path = self.base_path / "files"
        self.metadata = MetadataStore(self.base_path / "metadata")

    async def init(self) -> None:
        """Create the files and metadata directories."""
        try:
            self.files_path.mkdir(parents=True, exist_ok=True)
            self.metadata.base_path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageInitError(
                f"Failed to initialize storage at {self.base_path}: {e}",
                details={"path": str(self.base_path)},
            ) from e

    def get_file_path(self, key: str) -> Path:
        """Resolve key to its file path."""
        return self.files_path / validate_key(key)

    async def save_file(
        self,
        filename: str,
        content: bytes,
        content_type: str | None = None,
    ) -> str | None:
        """Write bytes verbatim to ``files/<ms-epoch>-<filename>``."""
        key = generate_key(filename)
        path = self.get_file_path(key)

        try:
            async with aiofiles.open(path, "wb") as f:
                written = await f.write(content)
        except OSError:
            return None

        return key if written == len(content) else None

    async def save_metadata(
        self,
        key: str,
        original_name: str,
        content_type: str,
        size: int,
        uploaded_at: str | None = None,
    ) -> bool:
        """Write the metadata sidecar for a key."""
        return await self.metadata.save(
            key, original_name, content_type, size, uploaded_at
        )

    async def list_files(self) -> list[StoredObject]:
        """List regular, non-hidden files, newest first."""
        try:
            entries = list(os.scandir(self.files_path))
        except OSError:
            return []

        objects = []
        for entry in entries:
            if entry.name.startswith("."):
                continue
            try:
                validate_key(entry.name)
                st = entry.stat()
            except (InvalidKeyError, OSError):
                continue
            if not stat.S_ISREG(st.st_mode):
                continue

            objects.append(await self._describe(entry.name, st))

        # list.sort is stable, so equal mtimes keep directory order
        objects.sort(key=lambda obj: obj.last_modified, reverse=True)
        return objects

    async def get_file_info(self, key: str) -> StoredObject | None:
        """Describe one object, or None if it has no regular file."""
        path = self.get_file_path(key)

        try:
            st = path.stat()
        except OSError:
            return None
        if not stat.S_ISREG(st.st_mode):
            return None

        return await self._describe(key, st)

    async def read_file(self, key: str) -> bytes | None:
        """Read the whole file into memory."""
        path = self.get_file_path(key)

        try:
            async with aiofiles.open(path, "rb") as f:
                return await f.read()
        except OSError:
            return None

    async def delete_file(self, key: str) -> bool:
        """Remove the file, then its sidecar.

        Only the file removal decides the result.
        """
        path = self.get_file_path(key)

        try:
            path.unlink()
            deleted = True
        except OSError:
            deleted = False

        await self.metadata.delete(key)
        return deleted

    async def _describe(self, key: str, st: os.stat_result) -> StoredObject:
        """Build a StoredObject from stat data and the optional sidecar."""
        metadata = await self.metadata.load(key)
        original_name = metadata.get("originalName")
        content_type = metadata.get("contentType")

        return StoredObject(
            key=key,
            size=st.st_size,
            last_modified=datetime.fromtimestamp(st.st_mtime, tz=timezone.utc),
            content_type=content_type
            if isinstance(content_type, str) and content_type
            else DEFAULT_CONTENT_TYPE,
            original_name=original_name
            if isinstance(original_name, str) and original_name
            else key,
        )
