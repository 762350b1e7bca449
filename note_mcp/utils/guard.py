"""Protection of code regions during translation.

Fenced code blocks and inline code spans are swapped for placeholder tokens
before the body is sent for translation and swapped back afterwards. Link
targets are not substituted because their visible text may need translating;
the translation prompt asks for their syntax to be kept instead.
"""

import re
import secrets

from ..models import GuardedSpan
from ..models import SpanKind

# Fenced blocks are listed first so that, at any position, a fence wins over
# an inline span and inline spans inside a fence are never matched twice.
GUARD_PATTERN = re.compile(r"(?P<fence>```.*?```)|(?P<inline>`[^`]+`)", re.DOTALL)

PLACEHOLDER_PREFIX = "@@PROTECTED_"


def _new_nonce(body: str) -> str:
    nonce = secrets.token_hex(4)
    while f"_{nonce}@@" in body:
        nonce = secrets.token_hex(4)
    return nonce


def protect(body: str) -> tuple[str, list[GuardedSpan]]:
    """Replace code regions with unique placeholders.

    Returns:
        Tuple of (guarded body, spans in source order)
    """
    spans: list[GuardedSpan] = []
    if "`" not in body:
        return body, spans

    nonce = _new_nonce(body)

    def _substitute(match: re.Match) -> str:
        kind = SpanKind.FENCED_BLOCK if match.group("fence") is not None else SpanKind.INLINE_CODE
        placeholder = f"{PLACEHOLDER_PREFIX}{len(spans)}_{nonce}@@"
        spans.append(
            GuardedSpan(
                placeholder=placeholder,
                original=match.group(0),
                kind=kind,
                start=match.start(),
                end=match.end(),
            )
        )
        return placeholder

    return GUARD_PATTERN.sub(_substitute, body), spans


def restore(text: str, spans: list[GuardedSpan]) -> str:
    """Put protected regions back in place of their placeholders.

    A placeholder that is missing from ``text`` is skipped; use
    ``missing_placeholders`` to detect that case.
    """
    for span in spans:
        text = text.replace(span.placeholder, span.original)
    return text


def missing_placeholders(text: str, spans: list[GuardedSpan]) -> list[GuardedSpan]:
    """Spans whose placeholder no longer appears in ``text``."""
    return [span for span in spans if span.placeholder not in text]
