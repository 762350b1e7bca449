"""Note access MCP tools.

Read-only tools for looking at the collection: read one note by URL,
full-text search, and search by front matter tags. None of them modify
the store.
"""

from __future__ import annotations

import logging
from pathlib import PurePosixPath
from typing import Any

from ..config import get_settings
from ..error_handler import handle_tool_errors
from ..exceptions import InvalidModeError
from ..exceptions import ResourceNotFoundError
from ..logger_config import log_mcp_call
from ..models import NoteContent
from ..models import SearchResult
from ..storage import StorageBackend
from ..storage import get_storage
from ..utils.frontmatter import extract_document
from ..utils.note_url import build_note_url
from ..utils.note_url import resolve_note_address
from ..utils.note_url import validate_path

logger = logging.getLogger(__name__)

EXCERPT_CONTEXT = 50
TAG_EXCERPT_LENGTH = 150
TAG_MATCH_MODES = ["any", "all"]


def note_title(path: str, front_matter: dict[str, Any]) -> str:
    """``title`` from the front matter, else the file name without extension."""
    title = front_matter.get("title")
    if title:
        return str(title)
    return PurePosixPath(path).stem or "Untitled"


def count_matches(text: str, query: str) -> int:
    """Case-insensitive, non-overlapping occurrences of ``query``."""
    if not query:
        return 0
    return text.lower().count(query.lower())


def extract_excerpt(content: str, query: str, context: int = EXCERPT_CONTEXT) -> str:
    """Text around the first occurrence of ``query``; the leading text if absent."""
    index = content.lower().find(query.lower()) if query else -1
    if index == -1:
        head = content[: context * 2].strip()
        return head + "..." if len(content) > context * 2 else head

    start = max(0, index - context)
    end = min(len(content), index + len(query) + context)
    excerpt = content[start:end].strip()
    if start > 0:
        excerpt = "..." + excerpt
    if end < len(content):
        excerpt += "..."
    return excerpt


def note_tags(front_matter: dict[str, Any]) -> list[str]:
    """Tags of a note; accepts a YAML list or a comma/space separated string."""
    raw = front_matter.get("tags") or []
    if isinstance(raw, str):
        raw = raw.replace(",", " ").split()
    elif not isinstance(raw, list):
        raw = [raw]
    return [str(tag).lstrip("#") for tag in raw if tag is not None]


def match_tags(tags: list[str], wanted: list[str], match_mode: str = "any") -> bool:
    if not wanted:
        return False
    if match_mode == "all":
        return all(tag in tags for tag in wanted)
    return any(tag in tags for tag in wanted)


async def find_notes(
    storage: StorageBackend,
    collection: str,
    query: str,
    directory: str = "",
    max_results: int = 10,
    include_content: bool = True,
) -> list[SearchResult]:
    """Notes containing ``query``, most matches first."""
    if directory:
        validate_path(directory)

    results: list[SearchResult] = []
    async for path in storage.search_files(query, directory):
        try:
            document = extract_document(await storage.read_file(path))
        except ResourceNotFoundError as e:
            logger.warning("Skipping note %s: %s", path, e.message)
            continue

        title = note_title(path, document.front_matter)
        results.append(
            SearchResult(
                path=path,
                url=build_note_url(collection, path),
                title=title,
                excerpt=extract_excerpt(document.body, query) if include_content else "",
                matches=count_matches(title, query) + count_matches(document.body, query),
            )
        )

    results.sort(key=lambda result: result.matches, reverse=True)
    return results[:max_results]


async def find_notes_by_tags(
    storage: StorageBackend,
    collection: str,
    tags: list[str],
    match_mode: str = "any",
    max_results: int = 10,
) -> list[SearchResult]:
    """Notes whose front matter ``tags`` match ``tags``, most shared tags first."""
    if match_mode not in TAG_MATCH_MODES:
        raise InvalidModeError(match_mode, TAG_MATCH_MODES)

    wanted = [tag.lstrip("#") for tag in tags]
    results: list[SearchResult] = []
    for path in await storage.list_notes():
        try:
            document = extract_document(await storage.read_file(path))
        except ResourceNotFoundError as e:
            logger.warning("Skipping note %s: %s", path, e.message)
            continue

        found = note_tags(document.front_matter)
        if not match_tags(found, wanted, match_mode):
            continue

        results.append(
            SearchResult(
                path=path,
                url=build_note_url(collection, path),
                title=note_title(path, document.front_matter),
                excerpt=extract_excerpt(document.body, "", TAG_EXCERPT_LENGTH // 2),
                matches=sum(1 for tag in found if tag in wanted),
            )
        )

    results.sort(key=lambda result: result.matches, reverse=True)
    return results[:max_results]


def register_note_tools(mcp_server):
    """Register all note access tools with the MCP server."""

    @mcp_server.tool()
    @handle_tool_errors
    @log_mcp_call
    async def read_note(url: str) -> NoteContent:
        """Read a note's front matter and body.

        Parameters:
            url (str): Note URL, e.g. ``obsidian://open?vault=MyVault&file=notes/idea.md``

        Returns:
            NoteContent: The note's path, parsed front matter and body text
        """
        settings = get_settings()
        storage = get_storage()
        address = resolve_note_address(url, settings.configured_collection)
        if not await storage.file_exists(address.path):
            raise ResourceNotFoundError(address.path, "File not found")

        document = extract_document(await storage.read_file(address.path))
        return NoteContent(
            url=url,
            path=address.path,
            front_matter=document.front_matter,
            body=document.body,
        )

    @mcp_server.tool()
    @handle_tool_errors
    @log_mcp_call
    async def search_notes(
        query: str,
        directory: str = "",
        max_results: int = 10,
        include_content: bool = True,
    ) -> list[SearchResult]:
        """Search notes by content, case-insensitively.

        Parameters:
            query (str): Text to look for in titles and bodies
            directory (str): Sub-directory to search, relative to the root (default: all)
            max_results (int): Maximum number of results (default: 10)
            include_content (bool): Include an excerpt around the first match

        Returns:
            List[SearchResult]: Matching notes, most matches first
        """
        return await find_notes(
            get_storage(),
            get_settings().configured_collection,
            query,
            directory=directory,
            max_results=max_results,
            include_content=include_content,
        )

    @mcp_server.tool()
    @handle_tool_errors
    @log_mcp_call
    async def search_notes_by_tags(
        tags: list[str],
        match_mode: str = "any",
        max_results: int = 10,
    ) -> list[SearchResult]:
        """Search notes by the ``tags`` list in their front matter.

        Parameters:
            tags (List[str]): Tags to look for (a leading ``#`` is ignored)
            match_mode (str): "any" (default) or "all"
            max_results (int): Maximum number of results (default: 10)

        Returns:
            List[SearchResult]: Matching notes, most shared tags first
        """
        return await find_notes_by_tags(
            get_storage(),
            get_settings().configured_collection,
            tags,
            match_mode=match_mode,
            max_results=max_results,
        )
