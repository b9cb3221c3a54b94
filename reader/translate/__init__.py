"""Translation package."""

from reader.translate.backends import GoogleTranslateBackend, TranslationBackend
from reader.translate.translator import ChapterTranslator, build_default_translator

__all__ = [
    "TranslationBackend",
    "GoogleTranslateBackend",
    "ChapterTranslator",
    "build_default_translator",
]
