"""Data models for the reading pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from bs4 import BeautifulSoup


@dataclass
class RawPage:
    """The HTML obtained for a single URL, tagged with the strategy that produced it."""

    url: str
    html: str
    status_code: int
    strategy: str = "direct"


@dataclass
class ExtractedContent:
    """Main-content fragment plus the untouched parse it was cut from.

    ``document`` is the full original page and is never mutated by
    extraction, so navigation chrome is still available for next-link
    resolution.
    """

    document: BeautifulSoup
    fragment: str
    mode: str
    page_title: str | None = None


@dataclass(frozen=True)
class NormalizedDocument:
    """The unit returned to callers and stored in the response cache."""

    title: str
    content: str
    next_url: str | None
    current_url: str
    is_translated: bool = True

    def to_dict(self) -> dict[str, Any]:
        """Serialise with the camelCase keys the presentation layer expects."""
        return {
            "title": self.title,
            "content": self.content,
            "nextUrl": self.next_url,
            "currentUrl": self.current_url,
            "isTranslated": self.is_translated,
        }
