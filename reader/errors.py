"""Typed failures raised by the reading pipeline.

Only validation, fetch and extraction problems are fatal.  Translation
problems never surface here: the translator keeps the original text instead.
"""

from __future__ import annotations


class ReaderError(Exception):
    """Base class for every failure the pipeline reports to its caller."""


class ValidationError(ReaderError):
    """The requested URL is missing or malformed.  Raised before any I/O."""


class FetchExhaustedError(ReaderError):
    """Every configured fetch strategy failed for a URL.

    Attributes:
        url: The URL that could not be fetched.
        failures: ``(strategy name, exception)`` pairs in the order tried.
    """

    def __init__(self, url: str, failures: list[tuple[str, Exception]]) -> None:
        self.url = url
        self.failures = failures
        if failures:
            name, cause = failures[-1]
            detail = f"last strategy {name!r} failed: {cause}"
        else:
            detail = "no fetch strategies configured"
        super().__init__(f"Could not fetch {url} ({detail})")

    @property
    def cause(self) -> Exception | None:
        return self.failures[-1][1] if self.failures else None


class ExtractionError(ReaderError):
    """No usable main-content container was found in the fetched page."""
