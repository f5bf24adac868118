from __future__ import annotations

import html
import re
import sys
import xml.etree.ElementTree as etree
from typing import Union

from markdown.extensions import Extension
from markdown.preprocessors import Preprocessor
from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.util import ClassNotFound

from .lexers import get_lexer
from .linenumbers import (
    CAPTION_CLASS,
    NO_HIGHLIGHT,
    AnnotatedBlock,
    CodeBlock,
    InvalidRangeSpec,
    Sentinel,
    annotate,
    container_attributes,
    parse_start,
    reorder_caption,
)

# ```gdscript:player.gd {data-start=10 data-highlight="10-11 15"}
FENCE_BLOCK_RE = re.compile(
    r"""
    (?P<fence>^(?:~{3,}|`{3,}))[ ]*
    (?P<lang>[\w#.+-]*)
    (?::(?P<filename>[^\s{]+))?[ ]*
    (?:\{(?P<attrs>[^}\n]*)\}[ ]*)?\n
    (?P<code>.*?)(?<=\n)
    (?P=fence)[ ]*$
    """,
    re.MULTILINE | re.DOTALL | re.VERBOSE,
)
ATTR_RE = re.compile(r'(?P<key>[\w-]+)=(?:"(?P<quoted>[^"]*)"|(?P<value>[^\s"]+))')
NO_HIGHLIGHT_NAMES = {"", "none"}
# Stands in for the highlighted markup until the container is serialized.
CODE_PLACEHOLDER = "\x02gd-code\x03"


def parse_fence_attrs(text: str) -> dict[str, str]:
    attrs = {}
    for match in ATTR_RE.finditer(text):
        value = match.group("quoted")
        if value is None:
            value = match.group("value")
        attrs[match.group("key").lower()] = value
    return attrs


def fence_language(name: str) -> Union[str, Sentinel]:
    name = name.strip().lower()
    if name in NO_HIGHLIGHT_NAMES:
        return NO_HIGHLIGHT
    return name


def highlight_code(source: str, language: Union[str, Sentinel]) -> str:
    if language is NO_HIGHLIGHT:
        return html.escape(source, quote=False)
    try:
        lexer = get_lexer(language, stripnl=False)
    except ClassNotFound:
        return html.escape(source, quote=False)
    return highlight(source, lexer, HtmlFormatter(nowrap=True))


def build_container(
    block: AnnotatedBlock,
    language: Union[str, Sentinel],
    attrs: dict[str, str],
    filename: str = "",
) -> etree.Element:
    lang_name = language.value if isinstance(language, Sentinel) else language
    lang_class = f"language-{lang_name}"

    pre = etree.Element("pre")
    pre.set("class", lang_class)
    code = etree.SubElement(pre, "code")
    code.set("class", lang_class)
    code.text = CODE_PLACEHOLDER
    for key in ("data-start", "data-highlight"):
        if key in attrs:
            code.set(key, attrs[key])
    if filename:
        # Upstream puts the caption after the code; reorder_caption moves it.
        caption = etree.SubElement(pre, "span")
        caption.set("class", CAPTION_CLASS)
        caption.text = filename

    for key, value in container_attributes(block).items():
        if key == "class":
            value = f"{pre.get('class')} {value}"
        pre.set(key, value)
    return reorder_caption(pre)


def render_fence(
    source: str,
    lang: str,
    attrs: dict[str, str],
    filename: str = "",
    line_numbers: bool = True,
) -> str:
    language = fence_language(lang)
    markup = highlight_code(source, language)
    if markup.endswith("\n"):
        markup = markup[:-1]
    try:
        block = CodeBlock.from_attributes(markup, language, attrs)
    except InvalidRangeSpec as exc:
        print(f"Warning: {exc}; line numbers skipped for this block.", file=sys.stderr)
        annotated = AnnotatedBlock.unannotated(markup, parse_start(attrs.get("data-start", attrs.get("start"))))
    else:
        annotated = annotate(block) if line_numbers else AnnotatedBlock.unannotated(markup, block.start)
    container = build_container(annotated, language, attrs, filename)
    shell = etree.tostring(container, encoding="unicode", method="html")
    # The code body is the last text in the container.
    head, _, tail = shell.rpartition(CODE_PLACEHOLDER)
    return f"{head}{annotated.markup}{tail}"


class CodeFenceProcessor(Preprocessor):
    def __init__(self, md, line_numbers: bool = True):
        super().__init__(md)
        self.line_numbers = line_numbers

    def run(self, lines):
        text = "\n".join(lines)
        while True:
            m = FENCE_BLOCK_RE.search(text)
            if not m:
                break
            rendered = render_fence(
                m.group("code"),
                m.group("lang") or "",
                parse_fence_attrs(m.group("attrs") or ""),
                filename=m.group("filename") or "",
                line_numbers=self.line_numbers,
            )
            placeholder = self.md.htmlStash.store(rendered)
            text = f"{text[:m.start()]}\n{placeholder}\n{text[m.end():]}"
        return text.split("\n")


class CodeFenceExtension(Extension):
    def __init__(self, line_numbers: bool = True, **kwargs):
        super().__init__(**kwargs)
        self.line_numbers = line_numbers

    def extendMarkdown(self, md):
        md.preprocessors.register(
            CodeFenceProcessor(md, self.line_numbers),
            "gd_fenced_code",
            25,
        )
