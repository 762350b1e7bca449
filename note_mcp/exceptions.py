"""Exception hierarchy for the Note MCP system.

Every error raised by the translation pipeline derives from ``NoteMCPError``
and carries a stable ``error_code``, structured ``details`` and a
``user_message`` suitable for returning to an MCP client.

Client errors (``is_client_error = True``) describe bad input and are always
raised before any side effect. The remaining errors describe failures of the
store or of the external translation call.
"""

from __future__ import annotations

from typing import Any


class NoteMCPError(Exception):
    """Base exception for all Note MCP errors."""

    error_code_default = "UNKNOWN_ERROR"
    is_client_error = False

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
        user_message: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.error_code_default
        self.details = details or {}
        self.user_message = user_message or message

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a dictionary for API responses."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "user_message": self.user_message,
            "details": self.details,
        }


# === Validation errors (raised before any I/O) ===


class MalformedAddressError(NoteMCPError):
    """The note URL does not use the supported scheme, action or parameters."""

    error_code_default = "INVALID_NOTE_URL"
    is_client_error = True

    def __init__(self, url: str, reason: str, details: dict[str, Any] | None = None):
        merged = {"url": url, "reason": reason}
        merged.update(details or {})
        super().__init__(
            message=f"Invalid note URL '{url}': {reason}",
            details=merged,
            user_message=f"The note URL is not valid: {reason}",
        )


class CollectionMismatchError(NoteMCPError):
    """The URL targets a collection other than the configured one."""

    error_code_default = "COLLECTION_MISMATCH"
    is_client_error = True

    def __init__(self, requested: str, configured: str):
        super().__init__(
            message=(
                f"Requested collection '{requested}' does not match "
                f"configured collection '{configured}'"
            ),
            details={"requested": requested, "configured": configured},
            user_message=f"This server only serves the collection '{configured}'.",
        )


class UnsafePathError(NoteMCPError):
    """The note path could escape the sandbox or touch hidden files."""

    error_code_default = "INVALID_PATH"
    is_client_error = True

    def __init__(self, path: str, reason: str):
        super().__init__(
            message=f"Unsafe path '{path}': {reason}",
            details={"path": path, "reason": reason},
            user_message=f"The path '{path}' is not allowed: {reason}",
        )

    @property
    def reason(self) -> str:
        return self.details["reason"]


class InvalidModeError(NoteMCPError):
    """An unknown translation mode was requested."""

    error_code_default = "INVALID_MODE"
    is_client_error = True

    def __init__(self, mode: str, valid_modes: list[str]):
        super().__init__(
            message=f"Invalid mode '{mode}'. Must be one of: {', '.join(valid_modes)}",
            details={"mode": mode, "valid_modes": valid_modes},
        )


# === Store errors ===


class ResourceNotFoundError(NoteMCPError):
    """The note does not exist or cannot be read."""

    error_code_default = "FILE_NOT_FOUND"
    is_client_error = True

    def __init__(self, path: str, reason: str | None = None):
        details = {"path": path}
        if reason:
            details["reason"] = reason
        super().__init__(
            message=f"Cannot read note '{path}'" + (f": {reason}" if reason else ""),
            details=details,
            user_message=f"Note '{path}' does not exist.",
        )


class WriteDeniedError(NoteMCPError):
    """The note could not be written."""

    error_code_default = "PERMISSION_DENIED"

    def __init__(self, path: str, reason: str):
        super().__init__(
            message=f"Cannot write note '{path}': {reason}",
            details={"path": path, "reason": reason},
            user_message=f"Writing to '{path}' failed.",
        )


class BackupFailedError(NoteMCPError):
    """The backup copy could not be created; the source was not modified."""

    error_code_default = "BACKUP_FAILED"

    def __init__(self, path: str, reason: str):
        super().__init__(
            message=f"Cannot create backup for '{path}': {reason}",
            details={"path": path, "reason": reason},
            user_message=f"Backup of '{path}' failed; the note was left unchanged.",
        )


# === External generation errors ===


class TranslationFailedError(NoteMCPError):
    """The external generation call failed or timed out."""

    error_code_default = "TRANSLATION_FAILED"

    def __init__(self, reason: str, model: str | None = None, details: dict[str, Any] | None = None):
        merged: dict[str, Any] = {"failure_reason": reason}
        if model:
            merged["model"] = model
        merged.update(details or {})
        super().__init__(
            message=f"Translation failed: {reason}",
            details=merged,
            user_message=f"Translation failed: {reason}",
        )
