"""Prompt construction for note translation."""

from ..utils.guard import PLACEHOLDER_PREFIX

TRANSLATION_PROMPT_TEMPLATE = """Translate the following Markdown text into {target_language}.

Rules:
1. Copy every token of the form {placeholder_prefix}<n>_<id>@@ exactly as it appears. These tokens stand for code and must not be translated, reordered or removed.
2. Keep WikiLinks ([[link]]) and Markdown links ([text](url)) structurally intact. Translate the visible text of a Markdown link if it reads as prose, but never change a URL or a WikiLink target.
3. Keep the heading hierarchy (#, ##, ...) exactly as it is.
4. Keep bullet and numbered list markers and their nesting.
5. Write natural, readable {target_language}.
6. Technical terms may stay in their original language when that is clearer.

Text to translate:
{content}

Output only the translated text. Do not add explanations or comments."""


def build_translation_prompt(content: str, target_language: str) -> str:
    """Build the user message sent to the generation model."""
    return TRANSLATION_PROMPT_TEMPLATE.format(
        target_language=target_language,
        placeholder_prefix=PLACEHOLDER_PREFIX,
        content=content,
    )
