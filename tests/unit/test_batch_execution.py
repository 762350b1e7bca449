"""Unit tests for batch translation execution.

The pipeline is replaced by a mock so that ordering, chunking and error
capture can be checked without touching storage.
"""

import asyncio
from unittest.mock import AsyncMock
from unittest.mock import Mock

import pytest

from note_mcp.batch import BatchItemResult
from note_mcp.batch import BatchTranslationExecutor
from note_mcp.batch import BatchTranslationResult
from note_mcp.exceptions import InvalidModeError
from note_mcp.exceptions import ResourceNotFoundError
from note_mcp.models import TranslationMode
from note_mcp.models import TranslationOutcome


def _outcome(url: str) -> TranslationOutcome:
    return TranslationOutcome(
        original_content="Hello",
        translated_content=f"translated {url}",
        backup_path="a.backup-1.md",
        timestamp_iso="2024-01-01T00:00:00.000Z",
        target_path="a.md",
        mode=TranslationMode.REPLACE,
        target_language="French",
    )


class TestBatchModels:
    """Tests for the batch result models."""

    def test_item_result_defaults(self):
        item = BatchItemResult(index=0, url="u", success=False, error_code="FILE_NOT_FOUND", error="x")

        assert item.outcome is None
        assert item.timestamp

    def test_batch_result_defaults(self):
        result = BatchTranslationResult(success=True, total_operations=0)

        assert result.results == []
        assert result.error_summary is None


class TestBatchTranslationExecutor:
    """Tests for the BatchTranslationExecutor class."""

    def setup_method(self):
        """Set up a pipeline mock that echoes the URL into the outcome."""
        self.pipeline = Mock()
        self.pipeline.run = AsyncMock(side_effect=lambda url, language, mode: _outcome(url))

    def test_concurrency_must_be_positive(self):
        with pytest.raises(ValueError):
            BatchTranslationExecutor(self.pipeline, concurrency=0)

    @pytest.mark.asyncio
    async def test_all_success(self):
        executor = BatchTranslationExecutor(self.pipeline, concurrency=3)

        result = await executor.execute(["u1", "u2"], "French", "replace")

        assert result.success is True
        assert result.total_operations == 2
        assert result.successful_operations == 2
        assert result.failed_operations == 0
        assert [item.outcome.translated_content for item in result.results] == ["translated u1", "translated u2"]
        assert result.summary == "Translated 2/2 notes successfully"
        assert result.error_summary is None

    @pytest.mark.asyncio
    async def test_one_failure_does_not_abort_siblings(self):
        async def _run(url, language, mode):
            if url == "u2":
                raise ResourceNotFoundError("missing.md", "File not found")
            return _outcome(url)

        self.pipeline.run = AsyncMock(side_effect=_run)
        executor = BatchTranslationExecutor(self.pipeline, concurrency=3)

        result = await executor.execute(["u1", "u2", "u3"], "French")

        assert len(result.results) == 3
        assert [item.success for item in result.results] == [True, False, True]
        assert result.results[1].error_code == "FILE_NOT_FOUND"
        assert result.results[1].outcome is None
        assert result.failed_operations == 1
        assert result.success is False
        assert result.error_summary == "Batch incomplete: 1 note(s) failed"

    @pytest.mark.asyncio
    async def test_unexpected_errors_are_captured(self):
        self.pipeline.run = AsyncMock(side_effect=RuntimeError("boom"))
        executor = BatchTranslationExecutor(self.pipeline)

        result = await executor.execute(["u1"])

        assert result.results[0].error_code == "INTERNAL_ERROR"
        assert result.results[0].error == "boom"

    @pytest.mark.asyncio
    async def test_results_keep_input_order(self):
        delays = {"u1": 0.03, "u2": 0.0, "u3": 0.01, "u4": 0.0}

        async def _run(url, language, mode):
            await asyncio.sleep(delays[url])
            return _outcome(url)

        self.pipeline.run = AsyncMock(side_effect=_run)
        executor = BatchTranslationExecutor(self.pipeline, concurrency=2)

        result = await executor.execute(list(delays))

        assert [item.url for item in result.results] == ["u1", "u2", "u3", "u4"]
        assert [item.index for item in result.results] == [0, 1, 2, 3]

    @pytest.mark.asyncio
    async def test_at_most_concurrency_pipelines_in_flight(self):
        in_flight = 0
        peak = 0

        async def _run(url, language, mode):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return _outcome(url)

        self.pipeline.run = AsyncMock(side_effect=_run)
        executor = BatchTranslationExecutor(self.pipeline, concurrency=3)

        result = await executor.execute([f"u{i}" for i in range(7)])

        assert peak == 3
        assert result.successful_operations == 7

    @pytest.mark.asyncio
    async def test_mode_is_validated_once_up_front(self):
        executor = BatchTranslationExecutor(self.pipeline)

        with pytest.raises(InvalidModeError):
            await executor.execute(["u1", "u2"], mode="bogus")

        self.pipeline.run.assert_not_called()

    @pytest.mark.asyncio
    async def test_mode_and_language_are_passed_through(self):
        executor = BatchTranslationExecutor(self.pipeline)

        await executor.execute(["u1"], "German", "parallel")

        self.pipeline.run.assert_awaited_once_with("u1", "German", TranslationMode.PARALLEL)

    @pytest.mark.asyncio
    async def test_empty_batch(self):
        result = await BatchTranslationExecutor(self.pipeline).execute([])

        assert result.success is True
        assert result.total_operations == 0
        assert result.results == []
