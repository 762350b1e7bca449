"""Storage layer for Note MCP.

All filesystem access of the system goes through a ``StorageBackend``.

Usage:
    from note_mcp.storage import get_storage

    storage = get_storage()
    content = await storage.read_file("notes/meeting.md")
    record = await storage.backup_file("notes/meeting.md")
"""

from .base import BACKUP_MARKER
from .base import StorageBackend
from .factory import get_storage
from .factory import reset_storage
from .local import LocalStorageBackend

__all__ = ["BACKUP_MARKER", "LocalStorageBackend", "StorageBackend", "get_storage", "reset_storage"]
