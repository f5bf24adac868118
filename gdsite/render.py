from __future__ import annotations

import re
from pathlib import Path

import markdown

from .markdown_ext import CodeFenceExtension
from .references import DEFAULT_BASE_URL, ReferenceExtension
from .utils import parse_bool

TAG_RE = re.compile(r"<[^>]+>")
SUMMARY_LENGTH = 200


def build_markdown(args: object) -> markdown.Markdown:
    base_url = getattr(args, "class_reference_url", "") or DEFAULT_BASE_URL
    line_numbers = parse_bool(getattr(args, "line_numbers", True))
    return markdown.Markdown(
        extensions=[
            "tables",
            "toc",
            CodeFenceExtension(line_numbers=line_numbers),
            ReferenceExtension(base_url=base_url),
        ]
    )


def render_markdown(text: str, args: object) -> str:
    md = build_markdown(args)
    return md.convert(text)


def strip_tags(html_text: str) -> str:
    return TAG_RE.sub("", html_text)


def summarize(html_text: str) -> str:
    summary = strip_tags(html_text).strip().replace("\n", " ")
    return summary[:SUMMARY_LENGTH] + ("..." if len(summary) > SUMMARY_LENGTH else "")


def write_text(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
