"""Note translation: prompt construction, language suffixes and the engine."""

from .engine import TranslatedDocument
from .engine import TranslationEngine
from .engine import create_translation_engine
from .languages import language_suffix

__all__ = ["TranslatedDocument", "TranslationEngine", "create_translation_engine", "language_suffix"]
