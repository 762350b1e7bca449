"""Storage Backend Factory.

Builds the process-wide storage backend from ``Settings``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..config import get_settings

if TYPE_CHECKING:
    from .base import StorageBackend


def create_storage_backend(
    root_dir: str | None = None,
    backup_retention_days: int | None = None,
) -> StorageBackend:
    """Create a storage backend instance.

    Args:
        root_dir: Collection root; defaults to ``Settings.notes_root_dir``
        backup_retention_days: Defaults to ``Settings.backup_retention_days``

    Returns:
        Configured StorageBackend instance
    """
    from .local import LocalStorageBackend

    settings = get_settings()
    return LocalStorageBackend(
        root_dir=root_dir or settings.notes_root_path,
        backup_retention_days=(
            settings.backup_retention_days if backup_retention_days is None else backup_retention_days
        ),
    )


# Singleton instance for the application
_storage_instance: StorageBackend | None = None


def get_storage(**kwargs) -> StorageBackend:
    """Get the global storage backend instance.

    Creates the instance on first call; later calls return the same one.

    Args:
        **kwargs: Backend configuration (only used on first call)
    """
    global _storage_instance

    if _storage_instance is None:
        _storage_instance = create_storage_backend(**kwargs)

    return _storage_instance


def reset_storage() -> None:
    """Reset the global storage instance (for testing)."""
    global _storage_instance
    _storage_instance = None


def get_storage_info() -> dict:
    """Get information about the current storage configuration."""
    storage = get_storage()
    settings = get_settings()
    return {
        "backend_type": storage.backend_type,
        "root_path": storage.root_path,
        "collection": settings.configured_collection,
        "backup_retention_days": settings.backup_retention_days,
    }
