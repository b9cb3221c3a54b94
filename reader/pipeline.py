"""Chapter reading pipeline.

:class:`ReaderPipeline` turns one chapter URL into a translated
:class:`~reader.scraper.models.NormalizedDocument`:

    validate → cache lookup → fetch → extract → title + next link
    → translate → assemble → cache insert

Validation, fetch and extraction failures abort the run with no cache
write.  Translation failures never abort it.
"""

from __future__ import annotations

from urllib.parse import urlparse

from bs4 import BeautifulSoup, Tag

from reader.cache import DocumentCache
from reader.config import settings
from reader.errors import ValidationError
from reader.scraper.extractor import extract_content
from reader.scraper.fetcher import FetchChain, build_default_chain
from reader.scraper.models import NormalizedDocument
from reader.scraper.navigation import resolve_next_link
from reader.scraper.title import resolve_title
from reader.translate.translator import ChapterTranslator, build_default_translator


def validate_url(url: str | None) -> str:
    """Return *url* stripped, or raise :class:`ValidationError`.

    Only absolute ``http``/``https`` URLs with a host are accepted.
    """
    if url is None or not url.strip():
        raise ValidationError("URL is required")
    url = url.strip()
    try:
        parsed = urlparse(url)
    except ValueError as exc:
        raise ValidationError(f"Invalid URL: {url!r}") from exc
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValidationError(f"Invalid URL: {url!r}")
    return url


def collect_paragraphs(soup: BeautifulSoup) -> list[tuple[Tag, str]]:
    """Return ``(element, text)`` for every non-empty ``<p>`` in reading order."""
    paragraphs: list[tuple[Tag, str]] = []
    for p in soup.find_all("p"):
        text = p.get_text().strip()
        if text:
            paragraphs.append((p, text))
    return paragraphs


class ReaderPipeline:
    """Fetch, extract, translate and cache chapters.

    Args:
        cache: Shared response cache, owned by the caller.
        fetcher: Fetch strategy chain.
        translator: Chapter translator.
        extraction_mode: ``"readability"`` or ``"selectors"``; defaults to
            ``settings.extraction_mode``.
    """

    def __init__(
        self,
        cache: DocumentCache,
        fetcher: FetchChain,
        translator: ChapterTranslator,
        extraction_mode: str | None = None,
    ) -> None:
        self.cache = cache
        self.fetcher = fetcher
        self.translator = translator
        self.extraction_mode = (
            settings.extraction_mode if extraction_mode is None else extraction_mode
        )

    def process(self, url: str | None) -> NormalizedDocument:
        """Return the translated chapter at *url*.

        Raises:
            ValidationError: *url* is missing or malformed.
            FetchExhaustedError: No fetch strategy produced the page.
            ExtractionError: The page had no readable content.
        """
        url = validate_url(url)

        cached = self.cache.get(url)
        if cached is not None:
            print(f"[PIPELINE] Cache hit for {url}")
            return cached

        # ------------------------------------------------------------------
        # 1 & 2 — Fetch and extract
        # ------------------------------------------------------------------
        raw = self.fetcher.fetch(url)
        extracted = extract_content(raw, url=url, mode=self.extraction_mode)

        # ------------------------------------------------------------------
        # 3 — Title and next link (next link from the unmodified parse)
        # ------------------------------------------------------------------
        next_url = resolve_next_link(extracted.document, url)
        title, fragment = resolve_title(extracted.fragment, fallback=extracted.page_title)

        # ------------------------------------------------------------------
        # 4 — Translate title and paragraphs, write back by position
        # ------------------------------------------------------------------
        content = BeautifulSoup(fragment, "html.parser")
        paragraphs = collect_paragraphs(content)
        translated_title, translated_texts = self.translator.translate(
            title, [text for _, text in paragraphs]
        )
        for (element, _), text in zip(paragraphs, translated_texts):
            element.string = text

        document = NormalizedDocument(
            title=translated_title,
            content=str(content),
            next_url=next_url,
            current_url=url,
            is_translated=True,
        )

        # ------------------------------------------------------------------
        # 5 — Cache
        # ------------------------------------------------------------------
        self.cache.set(url, document)
        print(
            f"[PIPELINE] ✓ {url} via {raw.strategy}: {len(paragraphs)} paragraph(s), "
            f"next={next_url or 'none'}"
        )
        return document


def build_pipeline(cache: DocumentCache | None = None) -> ReaderPipeline:
    """Assemble a pipeline from ``settings``.

    A new cache is created unless one is passed in.
    """
    if cache is None:
        cache = DocumentCache(ttl=settings.cache_ttl, max_entries=settings.cache_max_entries)
    return ReaderPipeline(
        cache=cache,
        fetcher=build_default_chain(),
        translator=build_default_translator(),
    )
