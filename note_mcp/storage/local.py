"""Local Filesystem Storage Backend.

Implements the StorageBackend interface on a directory of Markdown notes.
File I/O runs inline on the event loop; no worker threads are started.
"""

from __future__ import annotations

import logging
import os
import time
import uuid
from collections.abc import AsyncIterator
from pathlib import Path
from pathlib import PurePosixPath

from ..exceptions import BackupFailedError
from ..exceptions import ResourceNotFoundError
from ..exceptions import UnsafePathError
from ..exceptions import WriteDeniedError
from ..logger_config import ErrorCategory
from ..logger_config import log_structured_error
from ..models import BackupRecord
from .base import BACKUP_MARKER
from .base import StorageBackend

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 24 * 60 * 60


def _read_text(path: Path) -> str:
    # newline="" keeps line endings exactly as stored
    with open(path, encoding="utf-8", newline="") as f:
        return f.read()


def _write_text_atomic(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_name(f".{path.name}.tmp-{uuid.uuid4().hex}")
    try:
        with open(tmp_path, "w", encoding="utf-8", newline="") as f:
            f.write(content)
        os.replace(tmp_path, path)
    finally:
        if tmp_path.exists():
            tmp_path.unlink()


class LocalStorageBackend(StorageBackend):
    """Storage backend using the local filesystem.

    Args:
        root_dir: Root directory of the note collection.
        backup_retention_days: Default age after which backups are pruned.
    """

    def __init__(self, root_dir: str | Path, backup_retention_days: int = 30):
        self._root = Path(root_dir).expanduser().resolve()
        self.backup_retention_days = backup_retention_days

    @property
    def backend_type(self) -> str:
        return "local"

    @property
    def root_path(self) -> str:
        return str(self._root)

    def _full_path(self, path: str) -> Path:
        """Join a relative path to the root, refusing anything that escapes it."""
        full_path = (self._root / path).resolve()
        if full_path != self._root and not full_path.is_relative_to(self._root):
            raise UnsafePathError(path, "Path resolves outside the collection root")
        return full_path

    def _relative(self, full_path: Path) -> str:
        return full_path.relative_to(self._root).as_posix()

    # === File Operations ===

    async def file_exists(self, path: str) -> bool:
        try:
            full_path = self._full_path(path)
            return full_path.is_file()
        except (OSError, UnsafePathError):
            return False

    async def read_file(self, path: str) -> str:
        full_path = self._full_path(path)
        try:
            return _read_text(full_path)
        except (OSError, UnicodeDecodeError) as e:
            raise ResourceNotFoundError(path, str(e)) from e

    async def write_file(self, path: str, content: str) -> None:
        full_path = self._full_path(path)
        try:
            _write_text_atomic(full_path, content)
        except OSError as e:
            raise WriteDeniedError(path, str(e)) from e
        logger.debug("Wrote %d characters to %s", len(content), path)

    # === Backups ===

    def _copy_to_backup(self, path: str) -> BackupRecord:
        source = self._full_path(path)
        data = source.read_bytes()

        relative = PurePosixPath(path)
        timestamp = int(time.time() * 1000)
        while True:
            backup_relative = relative.with_name(f"{relative.stem}{BACKUP_MARKER}{timestamp}{relative.suffix}")
            backup_full = self._full_path(str(backup_relative))
            try:
                # "x" never clobbers a backup taken within the same millisecond
                with open(backup_full, "xb") as f:
                    f.write(data)
                break
            except FileExistsError:
                timestamp += 1

        return BackupRecord(
            original_path=path,
            backup_path=str(backup_relative),
            timestamp_millis=timestamp,
            size_bytes=len(data),
        )

    async def backup_file(self, path: str) -> BackupRecord:
        try:
            record = self._copy_to_backup(path)
        except (OSError, UnsafePathError) as e:
            raise BackupFailedError(path, str(e)) from e
        logger.info("Created backup %s (%d bytes)", record.backup_path, record.size_bytes)
        return record

    def _delete_expired(self, directory: str, retention_days: int) -> list[str]:
        dir_path = self._full_path(directory)
        cutoff = time.time() - retention_days * SECONDS_PER_DAY
        removed = []

        for entry in dir_path.iterdir():
            if BACKUP_MARKER not in entry.name:
                continue
            try:
                if entry.is_file() and entry.stat().st_mtime < cutoff:
                    entry.unlink()
                    removed.append(self._relative(entry))
            except OSError as e:
                log_structured_error(
                    category=ErrorCategory.WARNING,
                    message=f"Failed to delete expired backup '{entry.name}'",
                    exception=e,
                    context={"directory": directory, "file_name": entry.name},
                    operation="prune_backups",
                )
        return removed

    async def prune_backups(self, directory: str = "", retention_days: int | None = None) -> list[str]:
        days = self.backup_retention_days if retention_days is None else retention_days
        try:
            removed = self._delete_expired(directory, days)
        except (OSError, UnsafePathError) as e:
            log_structured_error(
                category=ErrorCategory.WARNING,
                message=f"Failed to cleanup old backups in '{directory}'",
                exception=e,
                context={"directory": directory, "retention_days": days},
                operation="prune_backups",
            )
            return []

        if removed:
            logger.info("Pruned %d expired backup(s) in '%s'", len(removed), directory or "/")
        return removed

    # === Discovery ===

    def _markdown_files(self, dir_path: Path) -> list[Path]:
        """Notes under ``dir_path``, skipping hidden entries and backups."""
        files: list[Path] = []
        try:
            entries = sorted(dir_path.iterdir())
        except OSError as e:
            logger.warning("Cannot list directory %s: %s", dir_path, e)
            return files

        for entry in entries:
            if entry.name.startswith("."):
                continue
            if entry.is_dir():
                files.extend(self._markdown_files(entry))
            elif entry.is_file() and entry.name.endswith(".md") and BACKUP_MARKER not in entry.name:
                files.append(entry)
        return files

    async def search_files(self, term: str, directory: str = "") -> AsyncIterator[str]:
        dir_path = self._full_path(directory)
        if not dir_path.is_dir():
            return

        needle = term.lower()
        for file_path in self._markdown_files(dir_path):
            if not needle:
                yield self._relative(file_path)
                continue
            try:
                content = _read_text(file_path)
            except (OSError, UnicodeDecodeError) as e:
                logger.warning("Skipping unreadable note %s: %s", file_path, e)
                continue
            if needle in content.lower():
                yield self._relative(file_path)
