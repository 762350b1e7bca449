"""Unit tests for the storage abstraction layer."""

import os
import time
from unittest.mock import patch

import pytest

from note_mcp.exceptions import BackupFailedError
from note_mcp.exceptions import ResourceNotFoundError
from note_mcp.exceptions import UnsafePathError
from note_mcp.exceptions import WriteDeniedError
from note_mcp.storage import LocalStorageBackend
from note_mcp.storage import get_storage
from note_mcp.storage import reset_storage
from note_mcp.storage.factory import create_storage_backend
from note_mcp.storage.factory import get_storage_info

DAY = 24 * 60 * 60


def _age(path, days):
    old = time.time() - days * DAY
    os.utime(path, (old, old))


class TestLocalStorageBackend:
    """Tests for local filesystem storage backend."""

    @pytest.mark.asyncio
    async def test_backend_type(self, storage, notes_root):
        assert storage.backend_type == "local"
        assert storage.root_path == str(notes_root.resolve())

    @pytest.mark.asyncio
    async def test_write_and_read_file(self, storage, notes_root):
        await storage.write_file("notes/a.md", "# Hello World")

        assert (notes_root / "notes" / "a.md").read_text(encoding="utf-8") == "# Hello World"
        assert await storage.read_file("notes/a.md") == "# Hello World"

    @pytest.mark.asyncio
    async def test_read_preserves_line_endings(self, storage, note_factory):
        note_factory("crlf.md", "line one\r\nline two\r\n")

        assert await storage.read_file("crlf.md") == "line one\r\nline two\r\n"

    @pytest.mark.asyncio
    async def test_write_leaves_no_temp_files(self, storage, notes_root):
        await storage.write_file("a.md", "one")
        await storage.write_file("a.md", "two")

        assert sorted(p.name for p in notes_root.iterdir()) == ["a.md"]

    @pytest.mark.asyncio
    async def test_file_exists(self, storage, note_factory):
        note_factory("a.md", "x")

        assert await storage.file_exists("a.md") is True
        assert await storage.file_exists("missing.md") is False

    @pytest.mark.asyncio
    async def test_file_exists_is_false_for_directories(self, storage, notes_root):
        (notes_root / "folder").mkdir()

        assert await storage.file_exists("folder") is False

    @pytest.mark.asyncio
    async def test_read_missing_file_raises(self, storage):
        with pytest.raises(ResourceNotFoundError) as exc_info:
            await storage.read_file("missing.md")

        assert exc_info.value.error_code == "FILE_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_paths_escaping_root_are_refused(self, storage):
        with pytest.raises(UnsafePathError):
            await storage.read_file("../outside.md")
        with pytest.raises(UnsafePathError):
            await storage.write_file("../outside.md", "x")
        assert await storage.file_exists("../outside.md") is False

    @pytest.mark.asyncio
    async def test_write_failure_raises_write_denied(self, storage):
        with patch("note_mcp.storage.local._write_text_atomic", side_effect=PermissionError("denied")):
            with pytest.raises(WriteDeniedError) as exc_info:
                await storage.write_file("a.md", "x")

        assert exc_info.value.error_code == "PERMISSION_DENIED"


class TestBackups:
    """Tests for backup creation and pruning."""

    @pytest.mark.asyncio
    async def test_backup_copies_bytes_beside_source(self, storage, note_factory, notes_root):
        note_factory("notes/a.md", "---\ntitle: A\n---\nHello\r\n")

        record = await storage.backup_file("notes/a.md")

        assert record.original_path == "notes/a.md"
        assert record.backup_path == f"notes/a.backup-{record.timestamp_millis}.md"
        assert record.size_bytes == len("---\ntitle: A\n---\nHello\r\n")
        backup = notes_root / record.backup_path
        assert backup.read_bytes() == (notes_root / "notes" / "a.md").read_bytes()
        assert (notes_root / "notes" / "a.md").read_bytes() == b"---\ntitle: A\n---\nHello\r\n"

    @pytest.mark.asyncio
    async def test_backup_timestamp_iso(self, storage, note_factory):
        note_factory("a.md", "x")

        record = await storage.backup_file("a.md")

        assert record.timestamp_iso.endswith("Z")
        assert abs(record.timestamp_millis / 1000 - time.time()) < 60

    @pytest.mark.asyncio
    async def test_backups_in_same_millisecond_do_not_collide(self, storage, note_factory):
        note_factory("a.md", "x")

        with patch("note_mcp.storage.local.time.time", return_value=1_700_000_000.0):
            first = await storage.backup_file("a.md")
            second = await storage.backup_file("a.md")

        assert first.backup_path == "a.backup-1700000000000.md"
        assert second.backup_path == "a.backup-1700000000001.md"

    @pytest.mark.asyncio
    async def test_backup_of_missing_file_raises(self, storage, notes_root):
        with pytest.raises(BackupFailedError) as exc_info:
            await storage.backup_file("missing.md")

        assert exc_info.value.error_code == "BACKUP_FAILED"
        assert list(notes_root.iterdir()) == []

    @pytest.mark.asyncio
    async def test_prune_removes_only_expired_backups(self, storage, note_factory):
        old = note_factory("notes/a.backup-1.md", "old")
        fresh = note_factory("notes/a.backup-2.md", "fresh")
        note = note_factory("notes/a.md", "note")
        _age(old, 31)
        _age(fresh, 29)
        _age(note, 365)

        removed = await storage.prune_backups("notes")

        assert removed == ["notes/a.backup-1.md"]
        assert not old.exists()
        assert fresh.exists()
        assert note.exists()

    @pytest.mark.asyncio
    async def test_prune_respects_explicit_retention(self, storage, note_factory):
        backup = note_factory("a.backup-1.md", "old")
        _age(backup, 3)

        assert await storage.prune_backups("", retention_days=7) == []
        assert await storage.prune_backups("", retention_days=2) == ["a.backup-1.md"]

    @pytest.mark.asyncio
    async def test_prune_missing_directory_never_raises(self, storage):
        with patch("note_mcp.storage.local.log_structured_error") as mock_log:
            assert await storage.prune_backups("does/not/exist") == []

        mock_log.assert_called_once()

    @pytest.mark.asyncio
    async def test_prune_continues_after_delete_failure(self, storage, note_factory):
        first = note_factory("a.backup-1.md", "old")
        second = note_factory("b.backup-1.md", "old")
        _age(first, 40)
        _age(second, 40)

        original_unlink = type(first).unlink

        def flaky_unlink(path, *args, **kwargs):
            if path.name.startswith("a."):
                raise PermissionError("locked")
            return original_unlink(path, *args, **kwargs)

        with patch("pathlib.Path.unlink", flaky_unlink), patch(
            "note_mcp.storage.local.log_structured_error"
        ) as mock_log:
            removed = await storage.prune_backups("")

        assert removed == ["b.backup-1.md"]
        assert first.exists()
        mock_log.assert_called_once()


class TestDiscovery:
    """Tests for search_files and list_notes."""

    @pytest.mark.asyncio
    async def test_search_is_case_insensitive(self, storage, note_factory):
        note_factory("a.md", "Hello World")
        note_factory("b.md", "Goodbye")
        note_factory("sub/c.md", "HELLO again")

        found = [path async for path in storage.search_files("hello")]

        assert found == ["a.md", "sub/c.md"]

    @pytest.mark.asyncio
    async def test_backups_hidden_and_non_markdown_are_skipped(self, storage, note_factory):
        note_factory("a.md", "x")
        note_factory("a.backup-1.md", "x")
        note_factory(".obsidian/workspace.md", "x")
        note_factory(".hidden.md", "x")
        note_factory("image.png", "x")

        assert await storage.list_notes() == ["a.md"]

    @pytest.mark.asyncio
    async def test_search_within_directory(self, storage, note_factory):
        note_factory("a.md", "term")
        note_factory("sub/b.md", "term")

        assert [p async for p in storage.search_files("term", "sub")] == ["sub/b.md"]
        assert [p async for p in storage.search_files("term", "missing")] == []


class TestStorageFactory:
    """Tests for the storage factory singleton."""

    def test_create_from_settings(self, note_env, monkeypatch):
        monkeypatch.setenv("BACKUP_RETENTION_DAYS", "7")

        backend = create_storage_backend()

        assert isinstance(backend, LocalStorageBackend)
        assert backend.root_path == str(note_env.resolve())
        assert backend.backup_retention_days == 7

    def test_get_storage_is_singleton(self, note_env):
        assert get_storage() is get_storage()

        first = get_storage()
        reset_storage()
        assert get_storage() is not first

    def test_storage_info(self, note_env):
        info = get_storage_info()

        assert info["backend_type"] == "local"
        assert info["collection"] == "Main"
        assert info["backup_retention_days"] == 30
