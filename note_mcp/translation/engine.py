"""Translation of parsed notes through the Anthropic Messages API.

The engine is a pure function from ``Document`` to ``Document``: it never
touches storage. Code regions are guarded before the call and restored
afterwards, and a ``translated`` record is merged into the front matter.
"""

from __future__ import annotations

import asyncio
import datetime
import logging
from dataclasses import dataclass
from dataclasses import field
from typing import Any

from anthropic import APIError
from anthropic import AsyncAnthropic

from ..exceptions import TranslationFailedError
from ..logger_config import ErrorCategory
from ..logger_config import log_structured_error
from ..models import Document
from ..utils.guard import missing_placeholders
from ..utils.guard import protect
from ..utils.guard import restore
from .prompts import build_translation_prompt

logger = logging.getLogger(__name__)

TRANSLATION_RECORD_KEY = "translated"


@dataclass(frozen=True)
class TranslatedDocument:
    """A translated document plus any non-fatal problems found on the way."""

    document: Document
    warnings: list[str] = field(default_factory=list)


def first_text_block(response: Any) -> str | None:
    """Text of the first ``text`` content block of a Messages API response."""
    for block in getattr(response, "content", None) or []:
        if getattr(block, "type", None) == "text":
            return block.text
    return None


class TranslationEngine:
    """Translate note bodies while keeping code and metadata intact.

    Args:
        client: An ``AsyncAnthropic`` (or compatible) client
        model: Model identifier sent with every request
        max_output_tokens: Output length limit per request
        timeout: Seconds to wait for a response before giving up
    """

    def __init__(
        self,
        client: AsyncAnthropic,
        model: str,
        max_output_tokens: int = 4000,
        timeout: float | None = 120.0,
    ):
        self._client = client
        self.model = model
        self.max_output_tokens = max_output_tokens
        self.timeout = timeout

    async def _generate(self, prompt: str) -> Any:
        try:
            return await asyncio.wait_for(
                self._client.messages.create(
                    model=self.model,
                    max_tokens=self.max_output_tokens,
                    messages=[{"role": "user", "content": prompt}],
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            raise TranslationFailedError(
                f"No response within {self.timeout:g} seconds", model=self.model
            ) from e
        except APIError as e:
            raise TranslationFailedError(
                str(e), model=self.model, details={"api_error": type(e).__name__}
            ) from e
        except Exception as e:
            # Compatible clients raise their own transport errors
            raise TranslationFailedError(
                str(e) or type(e).__name__, model=self.model, details={"error_type": type(e).__name__}
            ) from e

    async def translate(self, document: Document, target_language: str) -> TranslatedDocument:
        """Translate ``document.body`` into ``target_language``.

        Documents without body text are returned unchanged and no request
        is made.

        Raises:
            TranslationFailedError: If the external call errors or times out
        """
        if not document.body.strip():
            return TranslatedDocument(document=document)

        guarded_body, spans = protect(document.body)
        logger.info(
            "Translating %d characters into %s (%d protected span(s))",
            len(guarded_body),
            target_language,
            len(spans),
        )

        response = await self._generate(build_translation_prompt(guarded_body, target_language))
        translated = first_text_block(response)
        if translated is None:
            # No text block: keep the source text rather than writing nothing
            translated = guarded_body

        warnings = []
        lost = missing_placeholders(translated, spans)
        if lost:
            warning = (
                f"{len(lost)} protected region(s) were dropped by the model and could not be restored"
            )
            warnings.append(warning)
            log_structured_error(
                category=ErrorCategory.WARNING,
                message=warning,
                context={
                    "target_language": target_language,
                    "missing_placeholders": [span.placeholder for span in lost],
                },
                operation="restore_protected_spans",
            )

        front_matter = dict(document.front_matter)
        front_matter[TRANSLATION_RECORD_KEY] = {
            "date": datetime.datetime.now(datetime.timezone.utc).isoformat(),
            "target_language": target_language,
            "model": self.model,
        }

        return TranslatedDocument(
            document=document.model_copy(
                update={"front_matter": front_matter, "body": restore(translated, spans)}
            ),
            warnings=warnings,
        )


def create_translation_engine(settings) -> TranslationEngine:
    """Build an engine from ``Settings``."""
    return TranslationEngine(
        client=AsyncAnthropic(api_key=settings.anthropic_api_key),
        model=settings.translation_model,
        max_output_tokens=settings.max_output_tokens,
        timeout=settings.translation_timeout,
    )
