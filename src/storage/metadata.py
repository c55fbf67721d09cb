"""Metadata sidecar storage: one JSON document per object key."""
import contextlib
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import aiofiles

from src.core.models import ObjectMetadata
from src.storage.keys import validate_key


def utc_timestamp() -> str:
    """ISO-8601 UTC timestamp with millisecond precision, ``Z`` suffixed."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class MetadataStore:
    """Reads and writes ``<base_path>/<key>.json`` sidecars.

    Sidecars hold exactly four fields: ``originalName``, ``contentType``,
    ``size`` and ``uploadedAt``. Reading never fails: a missing, unreadable
    or malformed sidecar comes back as an empty dict.

    Example:
        store = MetadataStore(Path("storage/metadata"))

        await store.save("1700000000000-a.txt", "a.txt", "text/plain", 3)
        meta = await store.load("1700000000000-a.txt")
    """

    def __init__(self, base_path: Path) -> None:
        self.base_path = base_path

    def get_path(self, key: str) -> Path:
        """Resolve key to its sidecar path."""
        return self.base_path / f"{validate_key(key)}.json"

    async def save(
        self,
        key: str,
        original_name: str,
        content_type: str,
        size: int,
        uploaded_at: str | None = None,
    ) -> bool:
        """Write (or overwrite) the sidecar for a key.

        ``uploaded_at`` defaults to the current time.
        """
        path = self.get_path(key)
        record = ObjectMetadata(
            original_name=original_name,
            content_type=content_type,
            size=size,
            uploaded_at=uploaded_at or utc_timestamp(),
        )
        payload = json.dumps(record.model_dump(by_alias=True), indent=2)

        try:
            async with aiofiles.open(path, "w", encoding="utf-8") as f:
                await f.write(payload)
        except OSError:
            return False
        return True

    async def load(self, key: str) -> dict[str, Any]:
        """Load the sidecar for a key, or ``{}`` if there is no usable one."""
        path = self.get_path(key)

        try:
            async with aiofiles.open(path, "r", encoding="utf-8") as f:
                data = json.loads(await f.read())
        except (OSError, UnicodeDecodeError, json.JSONDecodeError):
            return {}

        return data if isinstance(data, dict) else {}

    async def delete(self, key: str) -> None:
        """Remove the sidecar if present. Failures are ignored."""
        path = self.get_path(key)
        with contextlib.suppress(OSError):
            path.unlink()
