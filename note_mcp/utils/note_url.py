"""Note URL parsing and path safety checks.

Notes are addressed with Obsidian-style URLs:

    obsidian://open?vault=<collection>&file=<percent-encoded path>

Parsing is pure: nothing here touches the filesystem. The validators raise
before any I/O happens so a rejected request never has side effects.
"""

import re
from urllib.parse import parse_qs
from urllib.parse import quote
from urllib.parse import urlsplit

from ..exceptions import CollectionMismatchError
from ..exceptions import MalformedAddressError
from ..exceptions import UnsafePathError
from ..models import ResourceAddress

NOTE_URL_SCHEME = "obsidian"
SUPPORTED_ACTION = "open"
COLLECTION_PARAM = "vault"
PATH_PARAM = "file"

_DRIVE_LETTER_PATTERN = re.compile(r"^[A-Za-z]:")


def parse_note_url(url: str) -> ResourceAddress:
    """Parse a note URL into a ``ResourceAddress``.

    Raises:
        MalformedAddressError: wrong scheme, unsupported action, or a missing
            collection/path parameter.
    """
    if not isinstance(url, str) or not url.startswith(f"{NOTE_URL_SCHEME}://"):
        raise MalformedAddressError(str(url), f"URL must start with '{NOTE_URL_SCHEME}://'")

    try:
        parts = urlsplit(url)
        query = parse_qs(parts.query, keep_blank_values=True)
    except ValueError as e:
        raise MalformedAddressError(url, f"Failed to parse URL: {e}") from e

    # "obsidian://open?..." carries the action as the host, "obsidian:///open?..." as the path
    action = parts.netloc or parts.path.strip("/")
    if action != SUPPORTED_ACTION:
        raise MalformedAddressError(url, f"Only '{SUPPORTED_ACTION}' action is supported")

    collection = (query.get(COLLECTION_PARAM) or [""])[0]
    if not collection:
        raise MalformedAddressError(url, f"Missing '{COLLECTION_PARAM}' parameter")

    file_param = (query.get(PATH_PARAM) or [""])[0]
    if not file_param:
        raise MalformedAddressError(url, f"Missing '{PATH_PARAM}' parameter")

    return ResourceAddress(collection=collection, path=file_param.replace("\\", "/"))


def build_note_url(collection: str, path: str) -> str:
    """Build the URL that ``parse_note_url`` turns back into ``(collection, path)``."""
    return (
        f"{NOTE_URL_SCHEME}://{SUPPORTED_ACTION}?{COLLECTION_PARAM}={quote(collection, safe='')}"
        f"&{PATH_PARAM}={quote(path, safe='')}"
    )


def validate_collection(requested: str, configured: str) -> None:
    """Require an exact, case-sensitive collection match."""
    if requested != configured:
        raise CollectionMismatchError(requested, configured)


def validate_path(path: str) -> None:
    """Reject paths that could leave the collection root or expose hidden files.

    Checks run in a fixed order and the first violation is reported:
    traversal/home references, then absolute paths, then hidden segments.
    """
    if ".." in path or "~" in path:
        raise UnsafePathError(path, "Path contains illegal characters")

    if path.startswith("/") or path.startswith("\\") or _DRIVE_LETTER_PATTERN.match(path):
        raise UnsafePathError(path, "Absolute paths are not allowed")

    if any(part.startswith(".") for part in path.replace("\\", "/").split("/")):
        raise UnsafePathError(path, "Hidden files are not allowed")


def resolve_note_address(url: str, configured_collection: str) -> ResourceAddress:
    """Parse a note URL and run every validation on it."""
    address = parse_note_url(url)
    validate_collection(address.collection, configured_collection)
    validate_path(address.path)
    return address
