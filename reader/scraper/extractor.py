"""Content extraction: turns a :class:`RawPage` into :class:`ExtractedContent`.

Two modes, chosen per deployment via ``settings.extraction_mode``:

``readability``
    ``trafilatura`` scores the page's nodes by text density and returns the
    best container as HTML.

``selectors``
    Known chapter-container selectors first, then a paragraph-density scan
    over every block container.  Ads, scripts and page chrome are stripped
    from a copy of the chosen container.

Either way the full original parse is returned untouched alongside the
fragment so the next-link resolver can still see the navigation.
"""

from __future__ import annotations

import copy

import trafilatura
from bs4 import BeautifulSoup, Tag

from reader.config import settings
from reader.errors import ExtractionError
from reader.scraper.models import ExtractedContent, RawPage

READABILITY = "readability"
SELECTORS = "selectors"
EXTRACTION_MODES = (READABILITY, SELECTORS)

# Site-specific chapter containers, most specific first.
_CONTENT_SELECTORS = [
    "#chr-content",
    "#chapter-content",
    ".chapter-content",
    ".reading-content .text-left",
    ".reading-content",
    ".entry-content",
    "#content",
    "article",
]

_TITLE_SELECTORS = [".chapter-title", ".chr-title", "h1.entry-title", "h1"]

_BLOCK_CONTAINERS = ["div", "article", "section", "main"]

_NOISE_TAGS = ["script", "style", "noscript", "iframe", "ins", "nav", "header", "footer"]
_NOISE_SELECTORS = [".ads", ".adsbygoogle", ".ad-container", '[class*="advert"]']


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _parse(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def _inner_html(soup: BeautifulSoup) -> str:
    """Serialise the children of ``<body>`` (or the whole tree if there is none)."""
    root = soup.body or soup
    return "".join(str(child) for child in root.contents).strip()


def _has_text(fragment: str) -> bool:
    return bool(fragment) and bool(_parse(fragment).get_text(strip=True))


def _densest_container(document: BeautifulSoup) -> Tag | None:
    """Return the block container with the most ``<p>`` descendants.

    Ties go to the container found first in document order.  Containers
    without any paragraph are never chosen.
    """
    best: Tag | None = None
    best_count = 0
    for container in document.find_all(_BLOCK_CONTAINERS):
        count = len(container.find_all("p"))
        if count > best_count:
            best, best_count = container, count
    return best


def _strip_noise(container: Tag) -> Tag:
    """Return a detached copy of *container* without scripts, ads and chrome."""
    cleaned = copy.copy(container)
    for tag in cleaned.find_all(_NOISE_TAGS):
        tag.decompose()
    for selector in _NOISE_SELECTORS:
        for tag in cleaned.select(selector):
            tag.decompose()
    return cleaned


def _site_title(document: BeautifulSoup) -> str | None:
    for selector in _TITLE_SELECTORS:
        el = document.select_one(selector)
        if el is not None:
            text = el.get_text(" ", strip=True)
            if text:
                return text
    return None


# ---------------------------------------------------------------------------
# Extraction modes
# ---------------------------------------------------------------------------

def _extract_readability(raw: RawPage, url: str) -> str:
    html: str | None = trafilatura.extract(
        raw.html,
        output_format="html",
        include_formatting=True,
        include_links=False,
        include_images=False,
        include_tables=True,
        favor_recall=True,
        url=url,
    )
    if not html:
        return ""
    return _inner_html(_parse(html))


def _extract_selectors(document: BeautifulSoup) -> str:
    container: Tag | None = None
    for selector in _CONTENT_SELECTORS:
        container = document.select_one(selector)
        if container is not None:
            print(f"[EXTRACT] Matched content selector {selector!r}.")
            break

    if container is None:
        container = _densest_container(document)
        if container is None:
            return ""
        print("[EXTRACT] No content selector matched; using densest container.")

    cleaned = _strip_noise(container)
    return "".join(str(child) for child in cleaned.contents).strip()


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def extract_content(raw: RawPage, url: str | None = None, mode: str | None = None) -> ExtractedContent:
    """Cut the main readable content out of *raw*.

    Args:
        raw: The fetched page.
        url: Source URL, used by the readability scorer.  Defaults to
            ``raw.url``.
        mode: ``"readability"`` or ``"selectors"``.  Defaults to
            ``settings.extraction_mode``.

    Raises:
        ExtractionError: If the chosen mode finds no non-empty content.
        ValueError: If *mode* is not a known extraction mode.
    """
    url = raw.url if url is None else url
    mode = settings.extraction_mode if mode is None else mode
    if mode not in EXTRACTION_MODES:
        raise ValueError(
            f"Unknown extraction mode {mode!r}. Use: {' | '.join(EXTRACTION_MODES)}"
        )

    document = _parse(raw.html)
    page_title: str | None = None

    if mode == READABILITY:
        fragment = _extract_readability(raw, url)
    else:
        fragment = _extract_selectors(document)
        page_title = _site_title(document)

    if not _has_text(fragment):
        raise ExtractionError(f"No readable content found on {url}")

    return ExtractedContent(
        document=document,
        fragment=fragment,
        mode=mode,
        page_title=page_title,
    )
