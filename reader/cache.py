"""Bounded, time-expiring response cache keyed by source URL.

One :class:`DocumentCache` is constructed at process start and handed to the
pipeline.  Entries expire ``ttl`` seconds after insertion; when the cache is
full the oldest *inserted* entry is evicted (reads do not refresh an entry).
"""

from __future__ import annotations

import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable

from reader.scraper.models import NormalizedDocument


@dataclass
class CacheEntry:
    key: str
    value: NormalizedDocument
    inserted_at: float


class DocumentCache:
    """Insertion-ordered cache of :class:`NormalizedDocument` objects.

    Args:
        ttl: Seconds an entry stays valid after insertion.
        max_entries: Maximum number of entries held at once.
        clock: Zero-argument callable returning the current time in seconds.
            Defaults to :func:`time.monotonic`; tests pass a fake clock.
    """

    def __init__(
        self,
        ttl: float,
        max_entries: int,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.ttl = ttl
        self.max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def get(self, key: str) -> NormalizedDocument | None:
        """Return the cached document for *key*, or ``None`` if absent or expired.

        Expired entries are dropped as a side effect of the lookup.
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._clock() - entry.inserted_at < self.ttl:
                return entry.value
            del self._entries[key]
            return None

    def set(self, key: str, value: NormalizedDocument) -> None:
        """Insert *value* under *key*, evicting the oldest entries if full."""
        with self._lock:
            # Re-inserting a key moves it to the back of the insertion order.
            self._entries.pop(key, None)
            while len(self._entries) >= self.max_entries:
                evicted, _ = self._entries.popitem(last=False)
                print(f"[CACHE] Evicted {evicted}")
            self._entries[key] = CacheEntry(key=key, value=value, inserted_at=self._clock())

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
