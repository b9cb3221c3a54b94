"""Chunked, bounded-concurrency chapter translation.

The title and the paragraph batch are translated **in parallel** and joined
before returning.  Paragraphs are split into fixed-size chunks and sent at
most ``max_concurrency`` chunks at a time so a rate-limited upstream is not
flooded.

Translation is best effort.  A failed title keeps its original text; a
failed chunk keeps the original text of its own paragraphs and nothing
else.  Nothing here raises to the caller.
"""

from __future__ import annotations

import time
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait

from reader.config import settings
from reader.translate.backends import GoogleTranslateBackend, TranslationBackend


def chunk_ranges(total: int, chunk_size: int) -> list[tuple[int, int]]:
    """Split ``range(total)`` into ``(start, end)`` slices of *chunk_size*."""
    if chunk_size < 1:
        raise ValueError("chunk_size must be at least 1")
    return [(start, min(start + chunk_size, total)) for start in range(0, total, chunk_size)]


def _label(start: int, end: int) -> str:
    return f"paragraphs {start + 1}-{end}"


def _report_timeout(start: int, end: int) -> None:
    print(f"[TRANSLATE] Chunk {_label(start, end)} timed out; keeping original text.")


class ChapterTranslator:
    """Translate a chapter title and its paragraphs through a backend.

    Args:
        backend: The translation service to call.
        chunk_size: Paragraphs per backend request.
        max_concurrency: Chunks in flight at once.
        timeout: Seconds to wait for the title or for one running chunk.
            A call still running after that counts as failed.  The whole
            paragraph pass ends after one timeout per wave of chunks.
    """

    def __init__(
        self,
        backend: TranslationBackend,
        chunk_size: int | None = None,
        max_concurrency: int | None = None,
        timeout: float | None = None,
    ) -> None:
        self.backend = backend
        self.chunk_size = settings.translate_chunk_size if chunk_size is None else chunk_size
        self.max_concurrency = (
            settings.translate_max_concurrency if max_concurrency is None else max_concurrency
        )
        self.timeout = settings.translate_timeout if timeout is None else timeout

    # ------------------------------------------------------------------
    # Title
    # ------------------------------------------------------------------
    def translate_title(self, title: str) -> str:
        """Return the translated *title*, or *title* itself on any failure."""
        if not title or not title.strip():
            return title

        pool = ThreadPoolExecutor(max_workers=1)
        try:
            translated = pool.submit(self.backend.translate_text, title).result(
                timeout=self.timeout
            )
        except Exception as exc:
            print(f"[TRANSLATE] Title translation failed ({exc!r:.120}); keeping original.")
            return title
        finally:
            pool.shutdown(wait=False, cancel_futures=True)

        return translated or title

    # ------------------------------------------------------------------
    # Paragraphs
    # ------------------------------------------------------------------
    def translate_paragraphs(self, texts: list[str]) -> list[str]:
        """Translate *texts* chunk by chunk, preserving order and length.

        The result always has ``len(texts)`` items.  Each position holds
        either its translation or, if its chunk failed, the original text.
        """
        results = list(texts)
        if not texts:
            return results

        chunks = chunk_ranges(len(texts), self.chunk_size)
        waves = -(-len(chunks) // self.max_concurrency)
        deadline = time.monotonic() + self.timeout * waves
        failed = 0

        # One pool for the whole pass: a hung call keeps its worker, so no
        # more than max_concurrency chunks ever run at once.
        pool = ThreadPoolExecutor(max_workers=self.max_concurrency)
        pending: dict[Future, tuple[int, int, list[float]]] = {}
        try:
            for start, end in chunks:
                started: list[float] = []
                future = pool.submit(self._run_chunk, texts[start:end], started)
                pending[future] = (start, end, started)

            while pending:
                now = time.monotonic()
                if now >= deadline:
                    break
                for future, (start, end, started) in list(pending.items()):
                    if started and now - started[0] >= self.timeout and not future.done():
                        _report_timeout(start, end)
                        failed += 1
                        del pending[future]
                if not pending:
                    break

                wake = min(
                    [deadline]
                    + [(started[0] if started else now) + self.timeout
                       for _, _, started in pending.values()]
                )
                done, _ = wait(
                    list(pending), timeout=max(wake - now, 0), return_when=FIRST_COMPLETED
                )
                for future in done:
                    start, end, _ = pending.pop(future)
                    if not self._apply_chunk(results, start, end, future):
                        failed += 1
        finally:
            for start, end, _ in pending.values():
                _report_timeout(start, end)
                failed += 1
            pool.shutdown(wait=False, cancel_futures=True)

        print(
            f"[TRANSLATE] {len(chunks) - failed}/{len(chunks)} chunk(s) translated "
            f"({len(texts)} paragraph(s))."
        )
        return results

    def _run_chunk(self, batch: list[str], started: list[float]) -> list[str]:
        started.append(time.monotonic())
        return self.backend.translate_batch(batch)

    def _apply_chunk(
        self,
        results: list[str],
        start: int,
        end: int,
        future: Future,
    ) -> bool:
        """Write one chunk's translations into *results*; return success."""
        label = _label(start, end)
        try:
            translated = future.result()
        except Exception as exc:
            print(f"[TRANSLATE] Chunk {label} failed ({exc!r:.120}); keeping original text.")
            return False
        if len(translated) != end - start:
            print(
                f"[TRANSLATE] Chunk {label} returned {len(translated)} result(s) "
                f"for {end - start} input(s); keeping original text."
            )
            return False

        for offset, text in enumerate(translated):
            if text:
                results[start + offset] = text
        return True

    # ------------------------------------------------------------------
    # Both
    # ------------------------------------------------------------------
    def translate(self, title: str, texts: list[str]) -> tuple[str, list[str]]:
        """Translate *title* and *texts* concurrently and join both.

        Returns:
            ``(translated_title, translated_texts)``.
        """
        with ThreadPoolExecutor(max_workers=2) as pool:
            title_future = pool.submit(self.translate_title, title)
            texts_future = pool.submit(self.translate_paragraphs, texts)
            return title_future.result(), texts_future.result()


def build_default_translator() -> ChapterTranslator:
    """Google Translate backend with chunking and timeouts from ``settings``."""
    return ChapterTranslator(GoogleTranslateBackend())
