"""FastAPI application factory.

Lifespan
--------
On startup the app builds one response cache and one reading pipeline
(shared across all requests via ``request.app.state.pipeline``).  The cache
lives exactly as long as the app.

Routers
-------
    /api/read  — translated chapter for a URL
    /health    — liveness and cache size
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from reader.api.routers import read as read_router
from reader.cache import DocumentCache
from reader.config import settings
from reader.pipeline import build_pipeline


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Build the cache and pipeline on startup; drop the cache on shutdown."""
    cache = DocumentCache(ttl=settings.cache_ttl, max_entries=settings.cache_max_entries)
    app.state.pipeline = build_pipeline(cache)
    try:
        yield
    finally:
        cache.clear()


def create_app() -> FastAPI:
    """Return a fully-configured FastAPI application instance."""
    app = FastAPI(
        title="Chapter Reader API",
        description=(
            "Fetches a web-fiction chapter, extracts its readable content, "
            "finds the next-chapter link and returns a translated document."
        ),
        version="0.1.0",
        lifespan=lifespan,
    )

    # The reading UI is served from a different origin.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(read_router.router, prefix="/api/read", tags=["read"])

    @app.get("/health", tags=["health"])
    def health(request: Request) -> dict[str, Any]:
        return {"status": "ok", "cache_entries": len(request.app.state.pipeline.cache)}

    return app


# Module-level instance used by uvicorn:
#   uvicorn reader.api.app:app --reload
app = create_app()
