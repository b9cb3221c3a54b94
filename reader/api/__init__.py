"""FastAPI HTTP layer package.

Public re-export so callers can write::

    from reader.api import app

    uvicorn reader.api:app --reload
"""

from reader.api.app import app

__all__ = ["app"]
