"""Translation backends.

All backends share a common interface: ``translate_text(text) -> str`` and
``translate_batch(texts) -> list[str]``.  Backends raise on failure; the
chapter translator decides what to fall back to.

``google`` (default)
    Google Translate through ``deep-translator``.  Source language is
    auto-detected; the target comes from ``TRANSLATE_TARGET``.  A batch is
    sent as newline-joined requests of fewer than 5000 characters, so a
    40-paragraph chunk usually costs one HTTP round trip.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from deep_translator import GoogleTranslator

from reader.config import settings

# deep-translator rejects Google payloads of 5000 characters or more.
_MAX_REQUEST_CHARS = 4999
_SEPARATOR = "\n"


class TranslationBackend(ABC):
    """Abstract base class for a text-in/text-out translation service."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable backend name."""

    @abstractmethod
    def translate_text(self, text: str) -> str:
        """Translate a single string."""

    @abstractmethod
    def translate_batch(self, texts: list[str]) -> list[str]:
        """Translate *texts*, returning one result per input in the same order."""


# ---------------------------------------------------------------------------
# Request packing
# ---------------------------------------------------------------------------

def _flatten(text: str) -> str:
    """Collapse whitespace so the text cannot contain the separator."""
    return " ".join(text.split())


def _split_long(text: str, limit: int) -> list[str]:
    """Cut *text* into pieces of at most *limit* characters, on spaces where possible."""
    pieces: list[str] = []
    current = ""
    for word in text.split(" "):
        while len(word) > limit:
            if current:
                pieces.append(current)
                current = ""
            pieces.append(word[:limit])
            word = word[limit:]
        if not current:
            current = word
        elif len(current) + 1 + len(word) <= limit:
            current = f"{current} {word}"
        else:
            pieces.append(current)
            current = word
    if current:
        pieces.append(current)
    return pieces


def pack_requests(texts: list[str], limit: int = _MAX_REQUEST_CHARS) -> list[list[int]]:
    """Group the indices of non-blank *texts* into requests under *limit* characters.

    Texts are joined with a newline inside a request, so each group's joined
    length stays within *limit*.  A text longer than *limit* on its own gets a
    group to itself; the caller splits it further.
    """
    groups: list[list[int]] = []
    current: list[int] = []
    size = 0
    for index, text in enumerate(texts):
        if not text:
            continue
        if len(text) > limit:
            if current:
                groups.append(current)
                current, size = [], 0
            groups.append([index])
            continue
        extra = len(text) if not current else len(text) + len(_SEPARATOR)
        if current and size + extra > limit:
            groups.append(current)
            current, size = [], 0
            extra = len(text)
        current.append(index)
        size += extra
    if current:
        groups.append(current)
    return groups


# ---------------------------------------------------------------------------
# Google
# ---------------------------------------------------------------------------

class GoogleTranslateBackend(TranslationBackend):
    """``deep_translator.GoogleTranslator`` bound to one fixed target language.

    ``GoogleTranslator`` keeps the query of its last request on the instance,
    so a new one is built for every call and the backend can be shared
    between threads.
    """

    def __init__(
        self,
        target: str | None = None,
        source: str | None = None,
        max_request_chars: int = _MAX_REQUEST_CHARS,
    ) -> None:
        self.target = settings.translate_target if target is None else target
        self.source = settings.translate_source if source is None else source
        self.max_request_chars = max_request_chars

    @property
    def name(self) -> str:
        return "Google"

    def _translate(self, text: str) -> str:
        translated = GoogleTranslator(source=self.source, target=self.target).translate(text)
        return text if translated is None else translated

    def translate_text(self, text: str) -> str:
        text = _flatten(text)
        if len(text) <= self.max_request_chars:
            return self._translate(text)
        return " ".join(self._translate(piece) for piece in _split_long(text, self.max_request_chars))

    def translate_batch(self, texts: list[str]) -> list[str]:
        flat = [_flatten(text) for text in texts]
        results = list(texts)
        for group in pack_requests(flat, self.max_request_chars):
            if len(group) == 1:
                results[group[0]] = self.translate_text(flat[group[0]])
                continue
            lines = self._translate(_SEPARATOR.join(flat[i] for i in group)).split(_SEPARATOR)
            if len(lines) != len(group):
                raise ValueError(
                    f"Google returned {len(lines)} line(s) for {len(group)} paragraph(s)"
                )
            for index, line in zip(group, lines):
                results[index] = line.strip()
        return results
