"""Batch execution engine for note translations.

URLs are processed in consecutive chunks; the pipelines inside a chunk run
concurrently and the next chunk starts only when the current one has
settled. One failing note never aborts the rest of the batch.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING

from ..exceptions import NoteMCPError
from ..logger_config import ErrorCategory
from ..logger_config import log_structured_error
from ..models import TranslationMode
from ..models import TranslationOutcome
from .models import BatchItemResult
from .models import BatchTranslationResult

if TYPE_CHECKING:
    from ..pipeline import TranslationPipeline

logger = logging.getLogger(__name__)


class BatchTranslationExecutor:
    """Run the translation pipeline over many notes with bounded concurrency."""

    def __init__(self, pipeline: TranslationPipeline, concurrency: int = 3):
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self.pipeline = pipeline
        self.concurrency = concurrency

    async def execute(
        self,
        urls: list[str],
        target_language: str | None = None,
        mode: TranslationMode | str | None = TranslationMode.REPLACE,
    ) -> BatchTranslationResult:
        """Translate every URL and report per-note results in input order.

        Raises:
            InvalidModeError: If ``mode`` is unknown; no note is touched
        """
        from ..pipeline import coerce_mode

        translation_mode = coerce_mode(mode)
        start_time = time.time()
        results: list[BatchItemResult] = []

        for chunk_start in range(0, len(urls), self.concurrency):
            chunk = urls[chunk_start : chunk_start + self.concurrency]
            settled = await asyncio.gather(
                *(self.pipeline.run(url, target_language, translation_mode) for url in chunk),
                return_exceptions=True,
            )
            for offset, (url, result) in enumerate(zip(chunk, settled)):
                results.append(self._item_result(chunk_start + offset, url, result))

        successful = sum(1 for item in results if item.success)
        failed = len(results) - successful
        execution_time = (time.time() - start_time) * 1000
        logger.info("Batch translated %d/%d notes in %.0f ms", successful, len(urls), execution_time)

        return BatchTranslationResult(
            success=failed == 0,
            total_operations=len(urls),
            successful_operations=successful,
            failed_operations=failed,
            execution_time_ms=execution_time,
            results=results,
            summary=f"Translated {successful}/{len(urls)} notes successfully",
            error_summary=f"Batch incomplete: {failed} note(s) failed" if failed else None,
        )

    def _item_result(
        self, index: int, url: str, result: TranslationOutcome | BaseException
    ) -> BatchItemResult:
        if isinstance(result, TranslationOutcome):
            return BatchItemResult(index=index, url=url, success=True, outcome=result)

        if isinstance(result, NoteMCPError):
            return BatchItemResult(
                index=index,
                url=url,
                success=False,
                error_code=result.error_code,
                error=result.message,
            )

        if isinstance(result, Exception):
            # The pipeline already logs its own errors; anything else is unexpected
            log_structured_error(
                category=ErrorCategory.ERROR,
                message=f"Unexpected error translating '{url}'",
                exception=result,
                context={"url": url, "index": index},
                operation="translate_notes_batch",
            )
            return BatchItemResult(
                index=index,
                url=url,
                success=False,
                error_code="INTERNAL_ERROR",
                error=str(result) or type(result).__name__,
            )

        raise result
