"""Tests for front matter, titles and page dates."""

from __future__ import annotations

import datetime as dt
from pathlib import Path

import pytest

from gdsite import content
from gdsite.content import extract_title, page_dates, parse_front_matter, parse_meta_date, slugify

GIT_CREATED = dt.datetime(2022, 1, 1, tzinfo=dt.timezone.utc)
GIT_MODIFIED = dt.datetime(2024, 6, 1, tzinfo=dt.timezone.utc)


@pytest.fixture
def fake_git(monkeypatch: pytest.MonkeyPatch) -> list[tuple[Path, str]]:
    calls: list[tuple[Path, str]] = []

    def fake_git_date(path: Path, mode: str = "created") -> dt.datetime:
        calls.append((path, mode))
        return GIT_CREATED if mode == "created" else GIT_MODIFIED

    monkeypatch.setattr(content, "git_date", fake_git_date)
    return calls


class TestFrontMatter:
    def test_parses_keys(self) -> None:
        meta, body = parse_front_matter(
            "---\nTitle: Signals\ndate: 2024-03-01\ndescription: 'Connecting nodes'\n---\nBody"
        )
        assert meta == {
            "title": "Signals",
            "date": "2024-03-01",
            "description": "Connecting nodes",
        }
        assert body == "Body"

    def test_without_front_matter(self) -> None:
        assert parse_front_matter("Just text") == ({}, "Just text")

    def test_unterminated_front_matter(self) -> None:
        text = "---\ntitle: x\nBody"
        assert parse_front_matter(text) == ({}, text)

    def test_byte_order_mark(self) -> None:
        meta, _ = parse_front_matter("\ufeff---\ntitle: BOM\n---\n")
        assert meta == {"title": "BOM"}


class TestExtractTitle:
    def test_meta_title_wins(self) -> None:
        assert extract_title({"title": "Meta"}, "# Heading\nBody") == ("Meta", "# Heading\nBody")

    def test_first_heading(self) -> None:
        assert extract_title({}, "\n# Heading\n\nBody") == ("Heading", "Body")

    def test_untitled(self) -> None:
        assert extract_title({}, "Body first\n# Late") == ("Untitled", "Body first\n# Late")


class TestDates:
    def test_parse_meta_date_variants(self) -> None:
        assert parse_meta_date("2024-02-03") == dt.datetime(2024, 2, 3)
        assert parse_meta_date("2024-02-03T10:20:00") == dt.datetime(2024, 2, 3, 10, 20)
        assert parse_meta_date("") is None
        assert parse_meta_date(None) is None
        assert parse_meta_date("soon") is None

    def test_front_matter_date_is_published(self, fake_git: list, tmp_path: Path) -> None:
        published, updated = page_dates({"date": "2020-05-06"}, tmp_path / "page.md")
        assert published == dt.datetime(2020, 5, 6)
        assert updated == GIT_MODIFIED
        assert fake_git == [(tmp_path / "page.md", "modified")]

    def test_git_dates_without_front_matter(self, fake_git: list, tmp_path: Path) -> None:
        assert page_dates({}, tmp_path / "page.md") == (GIT_CREATED, GIT_MODIFIED)


@pytest.mark.parametrize(
    ("text", "expected"),
    [("Hello World", "hello-world"), ("snake_case_name", "snake-case-name"), ("!!!", "page")],
)
def test_slugify(text: str, expected: str) -> None:
    assert slugify(text) == expected
