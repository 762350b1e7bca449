"""Pydantic models for the Note MCP system.

This module contains the data models shared by the translation pipeline:
note addresses, parsed documents, guarded spans, backup records and the
outcome returned to MCP callers.
"""

import datetime
from enum import Enum
from typing import Any
from typing import Union

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field

# === Front Matter Values ===

# Closed set of value shapes YAML front matter can produce. Sequences and
# nested mappings are kept as-is so unknown keys round-trip unchanged.
FrontMatterScalar = Union[str, bool, int, float, datetime.datetime, datetime.date, None]
FrontMatterValue = Union[FrontMatterScalar, list[Any], dict[Any, Any]]


class TranslationMode(str, Enum):
    """How a translated note is written back."""

    REPLACE = "replace"
    APPEND = "append"
    PARALLEL = "parallel"

    @classmethod
    def values(cls) -> list[str]:
        return [mode.value for mode in cls]


class SpanKind(str, Enum):
    """Kind of text protected from translation."""

    INLINE_CODE = "inline-code"
    FENCED_BLOCK = "fenced-block"


# === Core Models ===


class ResourceAddress(BaseModel):
    """A validated-on-use pointer to one note inside the collection."""

    model_config = ConfigDict(frozen=True)

    collection: str
    path: str  # Forward-slash separated, relative to the collection root


class Document(BaseModel):
    """A note split into its front matter and body.

    ``raw_front_matter`` holds the exact on-disk block (delimiters and the
    trailing newline included) so an untouched document composes back to
    the same bytes.
    """

    model_config = ConfigDict(frozen=True)

    front_matter: dict[str, FrontMatterValue] = Field(default_factory=dict)
    body: str = ""
    raw_front_matter: str | None = None


class GuardedSpan(BaseModel):
    """A substring swapped for a placeholder during one translation call."""

    model_config = ConfigDict(frozen=True)

    placeholder: str
    original: str
    kind: SpanKind
    start: int  # Offset of ``original`` in the unguarded body
    end: int


class BackupRecord(BaseModel):
    """Metadata about a backup copy written before a destructive operation."""

    model_config = ConfigDict(frozen=True)

    original_path: str
    backup_path: str
    timestamp_millis: int
    size_bytes: int

    @property
    def timestamp_iso(self) -> str:
        """Backup time as an ISO-8601 UTC string with millisecond precision."""
        moment = datetime.datetime.fromtimestamp(self.timestamp_millis / 1000, tz=datetime.timezone.utc)
        return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class TranslationOutcome(BaseModel):
    """Terminal result of one successful translation pipeline run."""

    original_content: str
    translated_content: str
    backup_path: str
    timestamp_iso: str
    target_path: str
    mode: TranslationMode
    target_language: str
    warnings: list[str] = []


# === Note Access Models ===


class NoteContent(BaseModel):
    """A note as returned by the read tool."""

    url: str
    path: str
    front_matter: dict[str, Any]
    body: str


class SearchResult(BaseModel):
    """One note matched by a content or tag search."""

    path: str
    url: str
    title: str
    excerpt: str
    matches: int
