"""Translation MCP tools.

This module exposes the translation pipeline: one note at a time, or a
list of notes processed a few at a time.
"""

from ..batch import BatchTranslationResult
from ..error_handler import handle_tool_errors
from ..logger_config import log_mcp_call
from ..models import TranslationOutcome
from ..pipeline import get_pipeline

PREVIEW_LENGTH = 500


def format_translation_summary(url: str, outcome: TranslationOutcome) -> str:
    """Human-readable report of a finished translation."""
    preview = outcome.translated_content[:PREVIEW_LENGTH]
    if len(outcome.translated_content) > PREVIEW_LENGTH:
        preview += "..."

    lines = [
        "Translation completed",
        "",
        f"Note: {url}",
        f"Target language: {outcome.target_language}",
        f"Mode: {outcome.mode.value}",
        f"Written to: {outcome.target_path}",
        f"Backup: {outcome.backup_path}",
        f"Timestamp: {outcome.timestamp_iso}",
    ]
    lines.extend(f"Warning: {warning}" for warning in outcome.warnings)
    lines.extend(["", "Translated content:", preview])
    return "\n".join(lines)


def register_translate_tools(mcp_server):
    """Register all translation tools with the MCP server."""

    @mcp_server.tool()
    @handle_tool_errors
    @log_mcp_call
    async def translate_note(
        url: str,
        target_language: str | None = None,
        mode: str = "replace",
    ) -> str:
        """Translate a note and write the result back to the collection.

        A timestamped backup of the note is always written next to it before
        anything is modified. Inline code and fenced code blocks are left
        untouched, and the front matter gains a ``translated`` record.

        Parameters:
            url (str): Note URL, e.g. ``obsidian://open?vault=MyVault&file=notes/idea.md``
            target_language (Optional[str]): Language to translate into
                (default: the server's configured language)
            mode (str): How to apply the translation:
                - "replace": overwrite the note (default)
                - "append": keep the original and add the translation below it
                - "parallel": write ``<name>.<lang>.md`` beside the note

        Returns:
            str: Summary with the backup path, target path and a preview

        Example Usage:
            ```json
            {
                "name": "translate_note",
                "arguments": {
                    "url": "obsidian://open?vault=MyVault&file=notes/idea.md",
                    "target_language": "French",
                    "mode": "parallel"
                }
            }
            ```
        """
        outcome = await get_pipeline().run(url, target_language, mode)
        return format_translation_summary(url, outcome)

    @mcp_server.tool()
    @handle_tool_errors
    @log_mcp_call
    async def translate_notes_batch(
        urls: list[str],
        target_language: str | None = None,
        mode: str = "replace",
    ) -> BatchTranslationResult:
        """Translate several notes, a few at a time.

        A failure on one note does not stop the others; every URL gets its
        own entry in ``results``, in the order given.

        Parameters:
            urls (List[str]): Note URLs to translate
            target_language (Optional[str]): Language to translate into
            mode (str): "replace", "append" or "parallel" (applied to every note)

        Returns:
            BatchTranslationResult: Counts, a summary and per-note results
        """
        return await get_pipeline().run_batch(urls, target_language, mode)
