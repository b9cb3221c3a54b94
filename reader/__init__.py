"""Chapter reader — fetch, extract and translate web-fiction chapters."""

from reader.cache import DocumentCache
from reader.errors import ExtractionError, FetchExhaustedError, ReaderError, ValidationError
from reader.pipeline import ReaderPipeline, build_pipeline

__all__ = [
    "DocumentCache",
    "ReaderPipeline",
    "build_pipeline",
    "ReaderError",
    "ValidationError",
    "FetchExhaustedError",
    "ExtractionError",
]
