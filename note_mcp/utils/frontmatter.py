"""YAML frontmatter parsing and writing utilities.

Frontmatter format:
---
title: Meeting notes
tags: [work, weekly]
---

# Note content here...

``extract_document`` and ``compose_document`` are inverses: a document that
is extracted and composed again without changes comes back byte-for-byte.
"""

import re
from typing import Any

import yaml  # type: ignore[import-untyped]

from ..models import Document

# Regex pattern for YAML frontmatter (--- delimited block at start of file).
# The block content is optional so that "---\n---\n" is an empty block.
FRONTMATTER_PATTERN = re.compile(r"^---[ \t]*\r?\n(?:(.*?)\r?\n)??---[ \t]*(?:\r?\n|\Z)", re.DOTALL)


def _match_frontmatter(content: str) -> tuple[dict[str, Any], re.Match] | None:
    if not content or not content.startswith("---"):
        return None

    match = FRONTMATTER_PATTERN.match(content)
    if not match:
        return None

    try:
        metadata = yaml.safe_load(match.group(1) or "")
    except yaml.YAMLError:
        return None

    if metadata is None:
        metadata = {}
    if not isinstance(metadata, dict):
        # A scalar or list at the top level is not key-value metadata
        return None

    return {str(key): value for key, value in metadata.items()}, match


def parse_frontmatter(content: str) -> tuple[dict[str, Any], str]:
    """Parse YAML frontmatter from Markdown content.

    Args:
        content: Full file content that may contain frontmatter

    Returns:
        Tuple of (metadata dict, content without frontmatter)
        Returns empty dict and the full content if no valid frontmatter is present
    """
    parsed = _match_frontmatter(content)
    if parsed is None:
        return {}, content
    metadata, match = parsed
    return metadata, content[match.end() :]


def has_frontmatter(content: str) -> bool:
    """Check if content has a parseable YAML frontmatter block."""
    return _match_frontmatter(content) is not None


def extract_document(content: str) -> Document:
    """Split raw note text into a ``Document``."""
    parsed = _match_frontmatter(content)
    if parsed is None:
        return Document(front_matter={}, body=content, raw_front_matter=None)

    metadata, match = parsed
    return Document(
        front_matter=metadata,
        body=content[match.end() :],
        raw_front_matter=content[: match.end()],
    )


def dump_frontmatter(metadata: dict[str, Any]) -> str:
    """Serialize metadata as a delimited YAML block."""
    yaml_str = yaml.safe_dump(metadata, default_flow_style=False, allow_unicode=True, sort_keys=False)
    return f"---\n{yaml_str}---\n"


def compose_document(document: Document) -> str:
    """Serialize a ``Document`` into the on-disk note format.

    The original block is reused verbatim while the metadata still matches
    it; changed metadata is re-serialized.
    """
    if document.raw_front_matter is not None:
        original, _ = parse_frontmatter(document.raw_front_matter)
        if original == document.front_matter:
            return document.raw_front_matter + document.body

    if not document.front_matter:
        return document.body

    return f"{dump_frontmatter(document.front_matter)}\n{document.body.lstrip()}"
