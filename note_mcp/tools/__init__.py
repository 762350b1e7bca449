"""Tool category modules for the Note MCP system.

This package contains MCP tools organized by functional categories:
- translate_tools: Note translation (translate_note, translate_notes_batch)
- note_tools: Read-only note access (read_note, search_notes, search_notes_by_tags)
"""

from .note_tools import register_note_tools
from .translate_tools import register_translate_tools

__all__ = [
    "register_translate_tools",
    "register_note_tools",
]
