"""Chapter reading endpoint.

Routes
------
GET /api/read?url=<chapter url>   → translated chapter document
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from reader.errors import ReaderError, ValidationError

router = APIRouter()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


# ---------------------------------------------------------------------------
# Endpoint
# ---------------------------------------------------------------------------

@router.get("", response_model=None)
def read_chapter(request: Request, url: str | None = None) -> dict[str, Any] | JSONResponse:
    """Fetch, extract and translate the chapter at *url*.

    Returns ``{title, content, nextUrl, currentUrl, isTranslated}``.  A
    missing or malformed URL is a 400; fetch or extraction failure is a 500.
    Both carry ``{"error": "..."}``.
    """
    pipeline = request.app.state.pipeline
    try:
        document = pipeline.process(url)
    except ValidationError as exc:
        return _error(400, str(exc))
    except ReaderError as exc:
        print(f"[API] {exc}")
        return _error(500, str(exc))
    except Exception as exc:
        print(f"[API] Unexpected failure for {url}: {exc!r}")
        return _error(500, str(exc) or "Failed to load or translate the chapter")
    return document.to_dict()
