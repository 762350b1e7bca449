"""Abstract Base Class for Storage Backends.

Defines the interface the translation pipeline and note tools use to reach
the note collection. Every path is relative to the backend's root.
"""
from __future__ import annotations

from abc import ABC
from abc import abstractmethod
from collections.abc import AsyncIterator

from ..models import BackupRecord

BACKUP_MARKER = ".backup-"


class StorageBackend(ABC):
    """Abstract base class for storage backends.

    The backend owns every filesystem side effect of the system; no other
    component reads or writes notes directly.
    """

    @property
    @abstractmethod
    def backend_type(self) -> str:
        """Return the backend type identifier (e.g., 'local')."""
        pass

    @property
    @abstractmethod
    def root_path(self) -> str:
        """Return the root directory of the collection."""
        pass

    # === File Operations ===

    @abstractmethod
    async def file_exists(self, path: str) -> bool:
        """Check if a note exists.

        Never raises; any error is reported as "does not exist".
        """
        pass

    @abstractmethod
    async def read_file(self, path: str) -> str:
        """Read note content as text.

        Raises:
            ResourceNotFoundError: If the note is absent or unreadable
        """
        pass

    @abstractmethod
    async def write_file(self, path: str, content: str) -> None:
        """Replace the note's content, creating parent directories as needed.

        Raises:
            WriteDeniedError: On permission or I/O failure
        """
        pass

    # === Backups ===

    @abstractmethod
    async def backup_file(self, path: str) -> BackupRecord:
        """Copy the note to ``<base>.backup-<unixMillis><ext>`` beside it.

        Raises:
            BackupFailedError: If the source cannot be read or the copy cannot
                be written. The source is never modified.
        """
        pass

    @abstractmethod
    async def prune_backups(self, directory: str = "", retention_days: int | None = None) -> list[str]:
        """Delete expired backups in ``directory``; best-effort, never raises.

        Returns:
            Paths of the backups that were removed
        """
        pass

    # === Discovery ===

    @abstractmethod
    def search_files(self, term: str, directory: str = "") -> AsyncIterator[str]:
        """Yield notes under ``directory`` whose content contains ``term``.

        Matching is case-insensitive; an empty term matches every note.
        """
        pass

    async def list_notes(self, directory: str = "") -> list[str]:
        """Return every note under ``directory``."""
        return [path async for path in self.search_files("", directory)]
