"""Next-chapter link resolution.

Runs over the *original* page parse, before extraction stripped any
navigation.  Known "next" controls of common novel-site templates are tried
first; failing that, every anchor is checked against multilingual "next"
keywords minus a set of exclusion keywords.
"""

from __future__ import annotations

from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

_NEXT_SELECTORS = [
    "#next_chap",
    ".btn-next",
    ".next_page",
    'a[rel="next"]',
    ".next-chap",
    ".nextchap",
    "a.next",
    ".nav-next a",
]

_NEXT_KEYWORDS = ["next", "lanjut", "berikutnya", ">>", "selanjutnya", "下一章"]
_EXCLUDE_KEYWORDS = ["comment", "daftar", "list", "prev", "back"]


def _usable_href(el: Tag) -> str | None:
    href = (el.get("href") or "").strip()
    if not href or href.startswith("#") or href.lower().startswith("javascript:"):
        return None
    return href


def is_next_label(text: str) -> bool:
    """Return ``True`` if anchor *text* reads like a "next chapter" control."""
    text = text.lower().strip()
    if not any(k in text for k in _NEXT_KEYWORDS):
        return False
    return not any(k in text for k in _EXCLUDE_KEYWORDS)


def resolve_next_link(document: BeautifulSoup, base_url: str) -> str | None:
    """Return the absolute URL of the next chapter, or ``None``.

    ``None`` is a normal outcome: the last published chapter has no next
    link.
    """
    for selector in _NEXT_SELECTORS:
        for el in document.select(selector):
            href = _usable_href(el)
            if href:
                return urljoin(base_url, href)

    for link in document.find_all("a"):
        href = _usable_href(link)
        if href and is_next_label(link.get_text()):
            return urljoin(base_url, href)

    return None
