"""Chapter reader CLI — entry-point for reading chapters from the terminal.

Usage:
    python cli/main.py --help

Commands:
    read    → fetch, extract and translate one chapter
    follow  → read a chapter and keep following its next-chapter links
    serve   → run the HTTP API with uvicorn
"""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure the project root is on sys.path so that `from reader.xxx import ...`
# works when the CLI is invoked as `python cli/main.py` from any directory.
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import json

import typer
from bs4 import BeautifulSoup

from reader.errors import ReaderError
from reader.pipeline import build_pipeline
from reader.scraper.models import NormalizedDocument

app = typer.Typer(
    name="reader",
    help="Read and translate web-fiction chapters.",
    no_args_is_help=True,
)


def _echo_document(doc: NormalizedDocument, as_json: bool) -> None:
    if as_json:
        typer.echo(json.dumps(doc.to_dict(), ensure_ascii=False, indent=2))
        return
    text = BeautifulSoup(doc.content, "html.parser").get_text("\n", strip=True)
    typer.echo(f"# {doc.title}")
    typer.echo("")
    typer.echo(text)
    typer.echo("")
    typer.echo(f"[read] Next: {doc.next_url or '(none)'}")


@app.command("read")
def read(
    url: str = typer.Argument(..., help="Chapter URL."),
    as_json: bool = typer.Option(False, "--json", help="Print the raw document as JSON."),
) -> None:
    """Fetch one chapter, translate it and print it."""
    pipeline = build_pipeline()
    try:
        doc = pipeline.process(url)
    except ReaderError as exc:
        typer.echo(f"[read] Error: {exc}", err=True)
        raise typer.Exit(code=1)
    _echo_document(doc, as_json)


@app.command("follow")
def follow(
    url: str = typer.Argument(..., help="URL of the first chapter."),
    chapters: int = typer.Option(3, "--chapters", "-n", min=1, help="Maximum chapters to read."),
    as_json: bool = typer.Option(False, "--json", help="Print each document as JSON."),
) -> None:
    """Read a chapter, then follow next-chapter links up to --chapters times."""
    pipeline = build_pipeline()
    seen: set[str] = set()
    current: str | None = url

    for index in range(chapters):
        if current is None or current in seen:
            break
        seen.add(current)
        typer.echo(f"[follow] Chapter {index + 1}/{chapters}: {current}")
        try:
            doc = pipeline.process(current)
        except ReaderError as exc:
            typer.echo(f"[follow] Error: {exc}", err=True)
            raise typer.Exit(code=1)
        _echo_document(doc, as_json)
        current = doc.next_url

    if current is None:
        typer.echo("[follow] No further chapters.")


@app.command("serve")
def serve(
    host: str = typer.Option("127.0.0.1", help="Interface to bind."),
    port: int = typer.Option(8000, help="Port to listen on."),
    reload: bool = typer.Option(False, help="Reload on code changes."),
) -> None:
    """Run the HTTP API (GET /api/read?url=...)."""
    import uvicorn  # noqa: PLC0415

    typer.echo(f"[serve] Listening on http://{host}:{port}")
    uvicorn.run("reader.api.app:app", host=host, port=port, reload=reload)


# ---------------------------------------------------------------------------
# Entry-point
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    app()
