"""Batch translation models.

Result structures returned when several notes are translated in one call.
"""

import time

from pydantic import BaseModel
from pydantic import Field

from ..models import TranslationOutcome


class BatchItemResult(BaseModel):
    """Result of translating one note within a batch.

    Exactly one of ``outcome`` and ``error`` is set.
    """

    index: int = Field(..., description="Position of the URL in the request")
    url: str = Field(..., description="Note URL as supplied by the caller")
    success: bool = Field(..., description="Whether the note was translated")
    outcome: TranslationOutcome | None = Field(default=None, description="Pipeline outcome on success")
    error_code: str | None = Field(default=None, description="Stable error code on failure")
    error: str | None = Field(default=None, description="Error message if failed")
    timestamp: str = Field(default_factory=lambda: time.strftime("%Y-%m-%d %H:%M:%S"))


class BatchTranslationResult(BaseModel):
    """Complete result of a batch translation, one entry per input URL in input order."""

    success: bool = Field(..., description="Whether every note was translated")
    total_operations: int = Field(..., description="Number of URLs in the request")
    successful_operations: int = Field(default=0, description="Number of translated notes")
    failed_operations: int = Field(default=0, description="Number of failed notes")
    execution_time_ms: float = Field(default=0.0, description="Total execution time")
    results: list[BatchItemResult] = Field(default_factory=list, description="Per-note results")
    summary: str = Field(default="", description="Human-readable execution summary")
    error_summary: str | None = Field(default=None, description="Error summary if any note failed")
