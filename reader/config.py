"""Runtime settings for the chapter reader.

Every knob the fetch chain, extractor, translator and cache read lives on the
``Settings`` dataclass below.  Each field falls back to an environment
variable, and a ``.env`` beside the ``reader`` package is read on import
without overriding variables that are already set.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Repository root .env; real environment variables win.
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_env_path, override=False)


def _split_csv(value: str) -> list[str]:
    return [part.strip().lower() for part in value.split(",") if part.strip()]


@dataclass
class Settings:
    # ------------------------------------------------------------------
    # Fetch chain
    # ------------------------------------------------------------------
    fetch_strategies: list[str] = field(
        default_factory=lambda: _split_csv(
            os.environ.get("FETCH_STRATEGIES", "direct,browser")
        )
    )
    direct_fetch_timeout: float = field(
        default_factory=lambda: float(os.environ.get("DIRECT_FETCH_TIMEOUT", "10.0"))
    )
    min_content_length: int = field(
        default_factory=lambda: int(os.environ.get("MIN_CONTENT_LENGTH", "500"))
    )
    browser_nav_timeout: float = field(
        default_factory=lambda: float(os.environ.get("BROWSER_NAV_TIMEOUT", "30.0"))
    )
    browser_settle_delay: float = field(
        default_factory=lambda: float(os.environ.get("BROWSER_SETTLE_DELAY", "2.0"))
    )

    # ------------------------------------------------------------------
    # Rendering proxy (alternate deployment)
    # ------------------------------------------------------------------
    render_proxy_url: str = field(
        default_factory=lambda: os.environ.get(
            "RENDER_PROXY_URL", "https://app.scrapingbee.com/api/v1/"
        )
    )
    render_proxy_api_key: str = field(
        default_factory=lambda: os.environ.get("RENDER_PROXY_API_KEY", "")
    )
    proxy_fetch_timeout: float = field(
        default_factory=lambda: float(os.environ.get("PROXY_FETCH_TIMEOUT", "60.0"))
    )

    # ------------------------------------------------------------------
    # Extraction
    # ------------------------------------------------------------------
    extraction_mode: str = field(
        default_factory=lambda: os.environ.get("EXTRACTION_MODE", "readability").lower()
    )
    untitled_placeholder: str = field(
        default_factory=lambda: os.environ.get("UNTITLED_PLACEHOLDER", "Untitled")
    )

    # ------------------------------------------------------------------
    # Translation
    # ------------------------------------------------------------------
    translate_source: str = field(
        default_factory=lambda: os.environ.get("TRANSLATE_SOURCE", "auto")
    )
    translate_target: str = field(
        default_factory=lambda: os.environ.get("TRANSLATE_TARGET", "id")
    )
    translate_chunk_size: int = field(
        default_factory=lambda: int(os.environ.get("TRANSLATE_CHUNK_SIZE", "40"))
    )
    translate_max_concurrency: int = field(
        default_factory=lambda: int(os.environ.get("TRANSLATE_MAX_CONCURRENCY", "2"))
    )
    translate_timeout: float = field(
        default_factory=lambda: float(os.environ.get("TRANSLATE_TIMEOUT", "30.0"))
    )

    # ------------------------------------------------------------------
    # Response cache
    # ------------------------------------------------------------------
    cache_ttl: float = field(
        default_factory=lambda: float(os.environ.get("CACHE_TTL", "1800"))
    )
    cache_max_entries: int = field(
        default_factory=lambda: int(os.environ.get("CACHE_MAX_ENTRIES", "100"))
    )


# Module-level singleton — import this everywhere:
#   from reader.config import settings
settings = Settings()
