"""Tests for the reader CLI commands."""

import json
from unittest.mock import MagicMock, patch

from typer.testing import CliRunner

from cli.main import app
from reader.errors import FetchExhaustedError
from reader.scraper.models import NormalizedDocument

runner = CliRunner()


def _doc(url, title, next_url=None):
    return NormalizedDocument(
        title=title,
        content=f"<p>Isi {title}.</p>",
        next_url=next_url,
        current_url=url,
    )


def test_read_prints_title_and_text():
    pipeline = MagicMock()
    pipeline.process.return_value = _doc("https://n.example/1", "Bab 1", "https://n.example/2")

    with patch("cli.main.build_pipeline", return_value=pipeline):
        result = runner.invoke(app, ["read", "https://n.example/1"])

    assert result.exit_code == 0
    assert "# Bab 1" in result.stdout
    assert "Isi Bab 1." in result.stdout
    assert "https://n.example/2" in result.stdout


def test_read_json():
    pipeline = MagicMock()
    pipeline.process.return_value = _doc("https://n.example/1", "Bab 1")

    with patch("cli.main.build_pipeline", return_value=pipeline):
        result = runner.invoke(app, ["read", "https://n.example/1", "--json"])

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["title"] == "Bab 1"
    assert payload["nextUrl"] is None


def test_read_error_exits_nonzero():
    pipeline = MagicMock()
    pipeline.process.side_effect = FetchExhaustedError("https://n.example/1", [])

    with patch("cli.main.build_pipeline", return_value=pipeline):
        result = runner.invoke(app, ["read", "https://n.example/1"])

    assert result.exit_code == 1


def test_follow_walks_next_links():
    docs = {
        "https://n.example/1": _doc("https://n.example/1", "Bab 1", "https://n.example/2"),
        "https://n.example/2": _doc("https://n.example/2", "Bab 2", "https://n.example/3"),
        "https://n.example/3": _doc("https://n.example/3", "Bab 3"),
    }
    pipeline = MagicMock()
    pipeline.process.side_effect = lambda url: docs[url]

    with patch("cli.main.build_pipeline", return_value=pipeline):
        result = runner.invoke(app, ["follow", "https://n.example/1", "--chapters", "5"])

    assert result.exit_code == 0
    assert pipeline.process.call_count == 3
    assert "Bab 3" in result.stdout
    assert "No further chapters" in result.stdout


def test_follow_respects_chapter_limit():
    pipeline = MagicMock()
    pipeline.process.side_effect = lambda url: _doc(url, "Bab", url + "/next")

    with patch("cli.main.build_pipeline", return_value=pipeline):
        result = runner.invoke(app, ["follow", "https://n.example/1", "-n", "2"])

    assert result.exit_code == 0
    assert pipeline.process.call_count == 2


def test_follow_stops_on_link_cycle():
    pipeline = MagicMock()
    pipeline.process.side_effect = lambda url: _doc(url, "Bab", "https://n.example/1")

    with patch("cli.main.build_pipeline", return_value=pipeline):
        result = runner.invoke(app, ["follow", "https://n.example/1", "-n", "5"])

    assert result.exit_code == 0
    assert pipeline.process.call_count == 1
