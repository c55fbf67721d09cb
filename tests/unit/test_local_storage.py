"""Tests for the local filesystem storage backend."""
import os
import re
from pathlib import Path
from unittest.mock import patch

import pytest

from src.core.exceptions import InvalidKeyError, StorageInitError
from src.core.models import DEFAULT_CONTENT_TYPE
from src.storage.local import LocalStorage


def set_mtime(path: Path, timestamp: float) -> None:
    os.utime(path, (timestamp, timestamp))


class TestInit:
    """Test cases for LocalStorage.init."""

    async def test_creates_directories(self, tmp_path: Path) -> None:
        store = LocalStorage(tmp_path / "deep" / "storage")
        await store.init()

        assert (tmp_path / "deep" / "storage" / "files").is_dir()
        assert (tmp_path / "deep" / "storage" / "metadata").is_dir()

    async def test_idempotent(self, storage: LocalStorage) -> None:
        await storage.init()
        await storage.init()
        assert storage.files_path.is_dir()

    async def test_fails_when_path_is_a_file(self, tmp_path: Path) -> None:
        """Test that an unusable storage root raises StorageInitError."""
        blocker = tmp_path / "storage"
        blocker.write_text("not a directory")

        with pytest.raises(StorageInitError):
            await LocalStorage(blocker).init()


class TestSaveAndRead:
    """Test cases for saving and reading object bytes."""

    async def test_round_trip(self, storage: LocalStorage) -> None:
        content = bytes(range(256)) * 4
        key = await storage.save_file("blob.bin", content)

        assert key is not None
        assert await storage.read_file(key) == content

    async def test_empty_file(self, storage: LocalStorage) -> None:
        key = await storage.save_file("empty.txt", b"", "text/plain")

        assert key is not None
        assert await storage.read_file(key) == b""

    async def test_report_scenario(self, storage: LocalStorage) -> None:
        """Test upload of a 12-byte PDF with metadata."""
        content = b"%PDF-1.7\n%\xe2\xe3"
        assert len(content) == 12

        key = await storage.save_file("report.pdf", content, "application/pdf")
        assert key is not None
        assert re.fullmatch(r"\d+-report\.pdf", key)
        assert await storage.save_metadata(key, "report.pdf", "application/pdf", 12)

        info = await storage.get_file_info(key)
        assert info is not None
        assert info.content_type == "application/pdf"
        assert info.original_name == "report.pdf"
        assert info.size == 12
        assert await storage.read_file(key) == content

    async def test_save_fails_without_files_directory(self, storage: LocalStorage) -> None:
        storage.files_path.rmdir()
        assert await storage.save_file("a.txt", b"abc") is None

    async def test_save_sanitizes_filename(self, storage: LocalStorage) -> None:
        """Test that traversal in the filename cannot escape files/."""
        key = await storage.save_file("../../evil.sh", b"x")

        assert key is not None
        assert key.endswith("-__evil.sh")
        assert storage.get_file_path(key).parent == storage.files_path

    async def test_same_millisecond_uploads_overwrite(self, storage: LocalStorage) -> None:
        """Test the documented key collision: the later write wins."""
        with patch("src.storage.keys.time.time", return_value=1700000000.5):
            first = await storage.save_file("a.txt", b"first")
            second = await storage.save_file("a.txt", b"second")

        assert first == second == "1700000000500-a.txt"
        assert await storage.read_file(first) == b"second"

    async def test_read_missing(self, storage: LocalStorage) -> None:
        assert await storage.read_file("1-missing.txt") is None

    async def test_read_invalid_key(self, storage: LocalStorage) -> None:
        with pytest.raises(InvalidKeyError):
            await storage.read_file("../storage/files")


class TestFileInfo:
    """Test cases for get_file_info."""

    async def test_defaults_without_metadata(self, storage: LocalStorage) -> None:
        key = await storage.save_file("a.txt", b"abc", "text/plain")
        assert key is not None

        info = await storage.get_file_info(key)
        assert info is not None
        assert info.original_name == key
        assert info.content_type == DEFAULT_CONTENT_TYPE
        assert info.size == 3

    async def test_defaults_with_malformed_metadata(self, storage: LocalStorage) -> None:
        key = await storage.save_file("a.txt", b"abc")
        assert key is not None
        storage.metadata.get_path(key).write_text('{"originalName": 42, "contentType": ')

        info = await storage.get_file_info(key)
        assert info is not None
        assert info.original_name == key
        assert info.content_type == DEFAULT_CONTENT_TYPE

    async def test_partial_metadata(self, storage: LocalStorage) -> None:
        """Test that missing fields fall back individually."""
        key = await storage.save_file("a.txt", b"abc")
        assert key is not None
        storage.metadata.get_path(key).write_text('{"originalName": "a.txt"}')

        info = await storage.get_file_info(key)
        assert info is not None
        assert info.original_name == "a.txt"
        assert info.content_type == DEFAULT_CONTENT_TYPE

    async def test_missing(self, storage: LocalStorage) -> None:
        assert await storage.get_file_info("1-missing.txt") is None

    async def test_directory_is_not_a_file(self, storage: LocalStorage) -> None:
        (storage.files_path / "1-dir").mkdir()
        assert await storage.get_file_info("1-dir") is None

    async def test_get_file_path(self, storage: LocalStorage) -> None:
        assert storage.get_file_path("1-a.txt") == storage.files_path / "1-a.txt"


class TestListFiles:
    """Test cases for list_files."""

    async def test_empty(self, storage: LocalStorage) -> None:
        assert await storage.list_files() == []

    async def test_missing_directory(self, tmp_path: Path) -> None:
        """Test that listing an uninitialized store is not an error."""
        assert await LocalStorage(tmp_path / "nowhere").list_files() == []

    async def test_skips_hidden_and_directories(self, storage: LocalStorage) -> None:
        key = await storage.save_file("visible.txt", b"v")
        (storage.files_path / ".hidden").write_bytes(b"h")
        (storage.files_path / "1-subdir").mkdir()

        keys = [obj.key for obj in await storage.list_files()]
        assert keys == [key]

    async def test_newest_first(self, storage: LocalStorage) -> None:
        for name, mtime in [("1-old.txt", 1_000_000), ("2-new.txt", 3_000_000), ("3-mid.txt", 2_000_000)]:
            path = storage.files_path / name
            path.write_bytes(name.encode())
            set_mtime(path, mtime)

        objects = await storage.list_files()
        assert [obj.key for obj in objects] == ["2-new.txt", "3-mid.txt", "1-old.txt"]
        for earlier, later in zip(objects, objects[1:]):
            assert earlier.last_modified >= later.last_modified

    async def test_equal_mtimes_keep_directory_order(self, storage: LocalStorage) -> None:
        """Test that ties are broken by directory iteration order."""
        for index in range(6):
            path = storage.files_path / f"{index}-same.txt"
            path.write_bytes(b"x")
            set_mtime(path, 2_000_000)

        directory_order = [entry.name for entry in os.scandir(storage.files_path)]

        objects = await storage.list_files()
        assert [obj.key for obj in objects] == directory_order

    async def test_enriches_with_metadata(self, storage: LocalStorage) -> None:
        with_meta = await storage.save_file("a.csv", b"1,2", "text/csv")
        assert with_meta is not None
        await storage.save_metadata(with_meta, "a.csv", "text/csv", 3)
        (storage.files_path / "9-bare.bin").write_bytes(b"\x00")

        by_key = {obj.key: obj for obj in await storage.list_files()}
        assert by_key[with_meta].content_type == "text/csv"
        assert by_key[with_meta].original_name == "a.csv"
        assert by_key["9-bare.bin"].content_type == DEFAULT_CONTENT_TYPE
        assert by_key["9-bare.bin"].original_name == "9-bare.bin"


class TestDeleteFile:
    """Test cases for delete_file."""

    async def test_removes_file_and_metadata(self, storage: LocalStorage) -> None:
        key = await storage.save_file("a.txt", b"abc")
        assert key is not None
        await storage.save_metadata(key, "a.txt", "text/plain", 3)

        assert await storage.delete_file(key) is True
        assert await storage.get_file_info(key) is None
        assert key not in [obj.key for obj in await storage.list_files()]
        assert not storage.metadata.get_path(key).exists()

    async def test_succeeds_without_metadata(self, storage: LocalStorage) -> None:
        key = await storage.save_file("a.txt", b"abc")
        assert key is not None
        assert await storage.delete_file(key) is True

    async def test_missing_key_fails(self, storage: LocalStorage) -> None:
        """Test that deleting a never-uploaded key fails without side effects."""
        kept = await storage.save_file("keep.txt", b"k")

        assert await storage.delete_file("1-never-uploaded.txt") is False
        assert [obj.key for obj in await storage.list_files()] == [kept]

    async def test_batch_counts_only_existing(self, storage: LocalStorage) -> None:
        existing = []
        for index in range(3):
            key = await storage.save_file(f"f{index}.txt", b"x")
            assert key is not None
            existing.append(key)
        missing = ["1-ghost.txt", "2-ghost.txt"]

        results = [await storage.delete_file(key) for key in existing + missing]
        assert sum(results) == len(existing)
