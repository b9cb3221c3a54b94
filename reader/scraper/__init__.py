"""Scraper package — fetch chain, content extraction, title and next-link resolution."""

from reader.scraper.extractor import extract_content
from reader.scraper.fetcher import FetchChain, build_default_chain
from reader.scraper.models import ExtractedContent, NormalizedDocument, RawPage
from reader.scraper.navigation import resolve_next_link
from reader.scraper.title import resolve_title

__all__ = [
    "FetchChain",
    "build_default_chain",
    "extract_content",
    "resolve_title",
    "resolve_next_link",
    "RawPage",
    "ExtractedContent",
    "NormalizedDocument",
]
