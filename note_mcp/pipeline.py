"""Note translation pipeline.

Runs one note through the fixed sequence

    VALIDATING -> LOCATING_SOURCE -> BACKING_UP -> TRANSLATING
        -> APPLYING -> PRUNING -> DONE

with FAILED reachable from every state before PRUNING. The pipeline is the
only component that asks the storage backend to modify notes, and it never
writes before a backup of the source exists.
"""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import PurePosixPath
from typing import TYPE_CHECKING

from .exceptions import InvalidModeError
from .exceptions import NoteMCPError
from .exceptions import ResourceNotFoundError
from .logger_config import ErrorCategory
from .logger_config import log_structured_error
from .metrics_config import record_translation
from .models import TranslationMode
from .models import TranslationOutcome
from .storage.base import StorageBackend
from .translation.engine import TranslationEngine
from .translation.languages import language_suffix
from .utils.frontmatter import compose_document
from .utils.frontmatter import extract_document
from .utils.note_url import resolve_note_address

if TYPE_CHECKING:
    from .batch.models import BatchTranslationResult

logger = logging.getLogger(__name__)

DEFAULT_BATCH_CONCURRENCY = 3


class PipelineState(str, Enum):
    """Stages of a single translation run."""

    VALIDATING = "validating"
    LOCATING_SOURCE = "locating_source"
    BACKING_UP = "backing_up"
    TRANSLATING = "translating"
    APPLYING = "applying"
    PRUNING = "pruning"
    DONE = "done"
    FAILED = "failed"


def coerce_mode(mode: TranslationMode | str | None) -> TranslationMode:
    """Turn a caller-supplied mode into a ``TranslationMode``."""
    if mode is None:
        return TranslationMode.REPLACE
    if isinstance(mode, TranslationMode):
        return mode
    try:
        return TranslationMode(mode)
    except ValueError:
        raise InvalidModeError(str(mode), TranslationMode.values()) from None


def parallel_path(path: str, target_language: str) -> str:
    """``notes/a.md`` -> ``notes/a.<lang>.md``."""
    source = PurePosixPath(path)
    return str(source.with_name(f"{source.stem}.{language_suffix(target_language)}{source.suffix}"))


def append_separator(target_language: str) -> str:
    """Text placed between the original and the translation in append mode."""
    return f"\n\n---\n\n# Translation ({target_language})\n\n"


def containing_directory(path: str) -> str:
    parent = str(PurePosixPath(path).parent)
    return "" if parent == "." else parent


class TranslationPipeline:
    """Translate notes addressed by URL and write the result back.

    Args:
        storage: Backend that owns every filesystem side effect
        engine: Translation engine used for the external call
        collection: The only collection name accepted in note URLs
        default_target_language: Used when a call does not name a language
        retention_days: Backup age used when pruning; backend default if None
        batch_concurrency: Pipelines run at once by ``run_batch``
    """

    def __init__(
        self,
        storage: StorageBackend,
        engine: TranslationEngine,
        collection: str,
        default_target_language: str = "Japanese",
        retention_days: int | None = None,
        batch_concurrency: int = DEFAULT_BATCH_CONCURRENCY,
    ):
        self.storage = storage
        self.engine = engine
        self.collection = collection
        self.default_target_language = default_target_language
        self.retention_days = retention_days
        self.batch_concurrency = batch_concurrency

    def _enter(self, url: str, state: PipelineState) -> PipelineState:
        logger.debug("[%s] %s", url, state.value)
        return state

    async def run(
        self,
        url: str,
        target_language: str | None = None,
        mode: TranslationMode | str | None = TranslationMode.REPLACE,
    ) -> TranslationOutcome:
        """Translate the note at ``url`` and apply the result according to ``mode``.

        Raises:
            InvalidModeError: ``mode`` is not one of replace/append/parallel
            MalformedAddressError, CollectionMismatchError, UnsafePathError:
                the URL was rejected; nothing was read or written
            ResourceNotFoundError: the note does not exist; nothing was written
            BackupFailedError: the backup could not be made; the note is unchanged
            TranslationFailedError: the external call failed; a backup exists
                and the note is unchanged
            WriteDeniedError: the result could not be written; a backup exists
        """
        language = target_language or self.default_target_language
        state = self._enter(url, PipelineState.VALIDATING)
        mode_value = str(mode.value if isinstance(mode, TranslationMode) else mode)

        try:
            translation_mode = coerce_mode(mode)
            mode_value = translation_mode.value
            address = resolve_note_address(url, self.collection)
            path = address.path

            state = self._enter(url, PipelineState.LOCATING_SOURCE)
            if not await self.storage.file_exists(path):
                raise ResourceNotFoundError(path, "File not found")
            original_content = await self.storage.read_file(path)

            state = self._enter(url, PipelineState.BACKING_UP)
            backup = await self.storage.backup_file(path)

            state = self._enter(url, PipelineState.TRANSLATING)
            translated = await self.engine.translate(extract_document(original_content), language)
            translated_content = compose_document(translated.document)

            state = self._enter(url, PipelineState.APPLYING)
            target_path = await self._apply(path, original_content, translated_content, translation_mode, language)
        except NoteMCPError as e:
            record_translation(mode_value, PipelineState.FAILED.value)
            log_structured_error(
                category=ErrorCategory.WARNING if e.is_client_error else ErrorCategory.ERROR,
                message=f"Translation pipeline failed while {state.value}: {e.message}",
                exception=e,
                context={"url": url, "state": state.value, "mode": mode_value},
                operation="translate_note",
            )
            raise

        self._enter(url, PipelineState.PRUNING)
        await self._prune(url, containing_directory(path))

        self._enter(url, PipelineState.DONE)
        record_translation(translation_mode.value, PipelineState.DONE.value)
        logger.info(
            "Translated %s into %s (%s mode), backup at %s",
            path,
            language,
            translation_mode.value,
            backup.backup_path,
        )

        return TranslationOutcome(
            original_content=original_content,
            translated_content=translated_content,
            backup_path=backup.backup_path,
            timestamp_iso=backup.timestamp_iso,
            target_path=target_path,
            mode=translation_mode,
            target_language=language,
            warnings=translated.warnings,
        )

    async def _prune(self, url: str, directory: str) -> None:
        """Remove expired backups; a failure here never fails the run."""
        try:
            await self.storage.prune_backups(directory, self.retention_days)
        except Exception as e:
            log_structured_error(
                category=ErrorCategory.WARNING,
                message=f"Backup pruning failed after translating '{url}'",
                exception=e,
                context={"url": url, "directory": directory},
                operation="prune_backups",
            )

    async def _apply(
        self,
        path: str,
        original_content: str,
        translated_content: str,
        mode: TranslationMode,
        target_language: str,
    ) -> str:
        """Write the translation and return the path that received it."""
        if mode is TranslationMode.REPLACE:
            await self.storage.write_file(path, translated_content)
            return path

        if mode is TranslationMode.APPEND:
            await self.storage.write_file(
                path, original_content + append_separator(target_language) + translated_content
            )
            return path

        if mode is TranslationMode.PARALLEL:
            target_path = parallel_path(path, target_language)
            await self.storage.write_file(target_path, translated_content)
            return target_path

        raise InvalidModeError(str(mode), TranslationMode.values())

    async def run_batch(
        self,
        urls: list[str],
        target_language: str | None = None,
        mode: TranslationMode | str | None = TranslationMode.REPLACE,
    ) -> BatchTranslationResult:
        """Translate several notes, at most ``batch_concurrency`` at a time."""
        from .batch.executor import BatchTranslationExecutor

        executor = BatchTranslationExecutor(self, concurrency=self.batch_concurrency)
        return await executor.execute(urls, target_language=target_language, mode=mode)


def create_pipeline(settings, storage: StorageBackend, engine: TranslationEngine) -> TranslationPipeline:
    """Build a pipeline from ``Settings``."""
    return TranslationPipeline(
        storage=storage,
        engine=engine,
        collection=settings.configured_collection,
        default_target_language=settings.default_target_language,
        retention_days=settings.backup_retention_days,
        batch_concurrency=settings.batch_concurrency,
    )


# Singleton instance for the server process
_pipeline_instance: TranslationPipeline | None = None


def get_pipeline() -> TranslationPipeline:
    """Get the process-wide pipeline, building it from settings on first use."""
    global _pipeline_instance

    if _pipeline_instance is None:
        from .config import get_settings
        from .storage import get_storage
        from .translation import create_translation_engine

        settings = get_settings()
        _pipeline_instance = create_pipeline(settings, get_storage(), create_translation_engine(settings))

    return _pipeline_instance


def reset_pipeline() -> None:
    """Reset the global pipeline instance (for testing)."""
    global _pipeline_instance
    _pipeline_instance = None
