"""Chapter-heading detection.

:func:`resolve_title` looks for the first paragraph or heading that reads
like a chapter number ("Chapter 12", "Bab 5", "Ch.3", "第7章") and lifts it out
of the fragment so it is not shown twice once the caller renders the title.
"""

from __future__ import annotations

import re

from bs4 import BeautifulSoup

from reader.config import settings

_CHAPTER_PATTERNS = [
    re.compile(r"^(chapter|bab|ch\.?)\s*\d+", re.IGNORECASE),
    re.compile(r"第\d+章"),
]

_TITLE_CANDIDATES = ["p", "h1", "h2", "h3", "h4"]


def is_chapter_heading(text: str) -> bool:
    """Return ``True`` if *text* looks like a chapter-numbering heading."""
    text = text.strip()
    return any(pattern.search(text) for pattern in _CHAPTER_PATTERNS)


def resolve_title(fragment: str, fallback: str | None = None) -> tuple[str, str]:
    """Find the chapter title in *fragment* and remove it.

    *fragment* itself is left untouched; a new serialisation is returned.

    Args:
        fragment: Main-content HTML.
        fallback: Title to use when no heading matches (e.g. a site-level
            title element).  ``settings.untitled_placeholder`` is used when
            this is empty too.

    Returns:
        ``(title, fragment_without_title)``.  When nothing matches the
        original fragment is returned as-is.
    """
    soup = BeautifulSoup(fragment, "html.parser")
    for el in soup.find_all(_TITLE_CANDIDATES):
        text = el.get_text().strip()
        if is_chapter_heading(text):
            el.decompose()
            return text, str(soup)

    return (fallback or settings.untitled_placeholder), fragment
