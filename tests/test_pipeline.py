"""Tests for the end-to-end reading pipeline.

The fetch chain is a counting stub, translation goes through an in-memory
backend and extraction runs in ``selectors`` mode on real HTML, so the whole
fetch → extract → title/next → translate → cache path is exercised offline.
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from reader.cache import DocumentCache
from reader.errors import ExtractionError, FetchExhaustedError, ValidationError
from reader.pipeline import ReaderPipeline, collect_paragraphs, validate_url
from reader.scraper.fetcher import FetchChain, FetchStrategy
from reader.scraper.models import NormalizedDocument, RawPage
from reader.translate.backends import TranslationBackend
from reader.translate.translator import ChapterTranslator


# ---------------------------------------------------------------------------
# Fixtures / constants
# ---------------------------------------------------------------------------

_URL = "https://novel.example/book/chapter-12"

_CHAPTER_HTML = """\
<html><head><title>Book</title></head><body>
  <div class="nav"><a href="/book/chapter-11">Prev</a><a href="/book">Daftar</a></div>
  <div class="chapter-content">
    <h3>Chapter 12</h3>
    <p>The rain kept falling.</p>
    <p></p>
    <p>She waited.</p>
    <p>poison</p>
  </div>
  <div class="nav"><a href="/book/chapter-13">Next Chapter &gt;&gt;</a></div>
</body></html>
"""


class CountingStrategy(FetchStrategy):
    def __init__(self, html: str = _CHAPTER_HTML) -> None:
        self.html = html
        self.calls = 0

    @property
    def name(self) -> str:
        return "direct"

    def fetch(self, url: str) -> RawPage:
        self.calls += 1
        return RawPage(url=url, html=self.html, status_code=200, strategy=self.name)


class PrefixBackend(TranslationBackend):
    @property
    def name(self) -> str:
        return "Prefix"

    def translate_text(self, text: str) -> str:
        return f"ID:{text}"

    def translate_batch(self, texts: list[str]) -> list[str]:
        if "poison" in texts:
            raise RuntimeError("chunk failed")
        return [f"ID:{t}" for t in texts]


@pytest.fixture()
def strategy() -> CountingStrategy:
    return CountingStrategy()


@pytest.fixture()
def pipeline(strategy: CountingStrategy) -> ReaderPipeline:
    return ReaderPipeline(
        cache=DocumentCache(ttl=600, max_entries=10),
        fetcher=FetchChain([strategy]),
        translator=ChapterTranslator(PrefixBackend(), chunk_size=1, max_concurrency=2, timeout=5),
        extraction_mode="selectors",
    )


# ---------------------------------------------------------------------------
# validate_url
# ---------------------------------------------------------------------------

class TestValidateUrl:
    @pytest.mark.parametrize(
        "url", [None, "", "   ", "not-a-url", "ftp://novel.example/x", "https://", "/relative/path"]
    )
    def test_rejects(self, url) -> None:
        with pytest.raises(ValidationError):
            validate_url(url)

    def test_accepts_and_strips(self) -> None:
        assert validate_url("  https://novel.example/c1 ") == "https://novel.example/c1"


def test_invalid_url_makes_no_network_call() -> None:
    fetcher = MagicMock(spec=FetchChain)
    pipeline = ReaderPipeline(
        cache=DocumentCache(ttl=60, max_entries=2),
        fetcher=fetcher,
        translator=MagicMock(spec=ChapterTranslator),
        extraction_mode="selectors",
    )

    with pytest.raises(ValidationError):
        pipeline.process("not-a-url")

    fetcher.fetch.assert_not_called()


# ---------------------------------------------------------------------------
# Successful runs
# ---------------------------------------------------------------------------

class TestProcess:
    def test_returns_normalized_document(self, pipeline: ReaderPipeline) -> None:
        doc = pipeline.process(_URL)

        assert isinstance(doc, NormalizedDocument)
        assert doc.title == "ID:Chapter 12"
        assert doc.current_url == _URL
        assert doc.next_url == "https://novel.example/book/chapter-13"
        assert doc.is_translated is True

    def test_title_removed_from_content(self, pipeline: ReaderPipeline) -> None:
        doc = pipeline.process(_URL)
        assert "Chapter 12" not in doc.content

    def test_failed_chunk_keeps_original_others_translated(self, pipeline: ReaderPipeline) -> None:
        doc = pipeline.process(_URL)

        assert "<p>ID:The rain kept falling.</p>" in doc.content
        assert "<p>ID:She waited.</p>" in doc.content
        assert "<p>poison</p>" in doc.content
        assert doc.is_translated is True

    def test_paragraph_order_preserved(self, pipeline: ReaderPipeline) -> None:
        doc = pipeline.process(_URL)
        assert doc.content.index("The rain") < doc.content.index("She waited") < doc.content.index("poison")

    def test_second_call_served_from_cache(
        self, pipeline: ReaderPipeline, strategy: CountingStrategy
    ) -> None:
        first = pipeline.process(_URL)
        second = pipeline.process(_URL)

        assert strategy.calls == 1
        assert second == first

    def test_to_dict_shape(self, pipeline: ReaderPipeline) -> None:
        payload = pipeline.process(_URL).to_dict()
        assert set(payload) == {"title", "content", "nextUrl", "currentUrl", "isTranslated"}

    def test_no_heading_uses_site_title(self, strategy: CountingStrategy, pipeline: ReaderPipeline) -> None:
        strategy.html = (
            "<html><body><h1 class='chapter-title'>The Gate</h1>"
            "<div id='chapter-content'><p>Prose only.</p></div></body></html>"
        )
        doc = pipeline.process(_URL)

        assert doc.title == "ID:The Gate"
        assert doc.next_url is None


# ---------------------------------------------------------------------------
# Fatal failures
# ---------------------------------------------------------------------------

class TestFailures:
    def test_fetch_exhaustion_propagates_without_cache_write(self) -> None:
        class Failing(FetchStrategy):
            @property
            def name(self) -> str:
                return "direct"

            def fetch(self, url: str) -> RawPage:
                raise RuntimeError("blocked")

        cache = DocumentCache(ttl=60, max_entries=2)
        pipeline = ReaderPipeline(
            cache=cache,
            fetcher=FetchChain([Failing()]),
            translator=ChapterTranslator(PrefixBackend(), chunk_size=40, max_concurrency=2, timeout=5),
            extraction_mode="selectors",
        )

        with pytest.raises(FetchExhaustedError):
            pipeline.process(_URL)
        assert len(cache) == 0

    def test_extraction_failure_propagates_without_cache_write(self, strategy: CountingStrategy) -> None:
        strategy.html = "<html><body><span>nothing here</span></body></html>"
        cache = DocumentCache(ttl=60, max_entries=2)
        pipeline = ReaderPipeline(
            cache=cache,
            fetcher=FetchChain([strategy]),
            translator=ChapterTranslator(PrefixBackend(), chunk_size=40, max_concurrency=2, timeout=5),
            extraction_mode="selectors",
        )

        with pytest.raises(ExtractionError):
            pipeline.process(_URL)
        assert len(cache) == 0


def test_collect_paragraphs_skips_empty() -> None:
    from bs4 import BeautifulSoup

    soup = BeautifulSoup("<p>a</p><p>  </p><div><p>b</p></div>", "html.parser")
    assert [text for _, text in collect_paragraphs(soup)] == ["a", "b"]
