"""Tests for chapter-heading detection and removal."""

from __future__ import annotations

import pytest
from bs4 import BeautifulSoup

from reader.scraper.title import is_chapter_heading, resolve_title


def _paragraph_texts(fragment: str) -> list[str]:
    soup = BeautifulSoup(fragment, "html.parser")
    return [el.get_text().strip() for el in soup.find_all(["p", "h1", "h2", "h3", "h4"])]


@pytest.mark.parametrize(
    "heading",
    ["Chapter 12", "Bab 5", "Ch.3", "Ch. 3", "第7章", "CHAPTER 1: Awakening", "第12章 风起"],
)
def test_heading_extracted_and_removed(heading: str) -> None:
    fragment = f"<h3>{heading}</h3><p>She opened the door.</p><p>It was dark.</p>"

    title, content = resolve_title(fragment)

    assert title == heading
    assert heading not in content
    assert _paragraph_texts(content) == ["She opened the door.", "It was dark."]


def test_first_match_wins_and_only_one_removed() -> None:
    fragment = "<p>Chapter 1</p><p>Text.</p><p>Chapter 2</p>"

    title, content = resolve_title(fragment)

    assert title == "Chapter 1"
    assert _paragraph_texts(content) == ["Text.", "Chapter 2"]


def test_heading_must_lead_the_text() -> None:
    fragment = "<p>He read chapter 5 twice.</p><p>Bab 5</p>"

    title, content = resolve_title(fragment)

    assert title == "Bab 5"
    assert "He read chapter 5 twice." in content


def test_title_is_not_duplicated() -> None:
    fragment = "<h2>Chapter 12</h2><p>Rain.</p>"

    title, content = resolve_title(fragment)
    rendered = f"<h1>{title}</h1>{content}"

    assert rendered.count("Chapter 12") == 1


def test_input_fragment_not_modified() -> None:
    fragment = "<p>Chapter 4</p><p>Body.</p>"
    original = str(fragment)

    resolve_title(fragment)

    assert fragment == original


def test_fallback_used_when_no_match() -> None:
    fragment = "<p>Just prose.</p>"

    title, content = resolve_title(fragment, fallback="The Gate")

    assert title == "The Gate"
    assert content == fragment


def test_placeholder_when_no_match_and_no_fallback(monkeypatch) -> None:
    monkeypatch.setattr("reader.scraper.title.settings.untitled_placeholder", "Untitled")

    title, content = resolve_title("<p>Just prose.</p>")

    assert title == "Untitled"


@pytest.mark.parametrize("text", ["Chapters are fun", "The chapter 3", "Bab", "第章"])
def test_non_headings(text: str) -> None:
    assert is_chapter_heading(text) is False
