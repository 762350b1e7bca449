"""Batch translation of several notes in one call.

Key Components:
- BatchTranslationExecutor: chunked concurrent execution of the pipeline
- BatchItemResult / BatchTranslationResult: per-note and overall results
"""

from .executor import BatchTranslationExecutor
from .models import BatchItemResult
from .models import BatchTranslationResult

__all__ = [
    "BatchItemResult",
    "BatchTranslationResult",
    "BatchTranslationExecutor",
]
