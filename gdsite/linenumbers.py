"""Line numbers and line-range highlighting for highlighted code blocks.

The highlighter hands over one block of markup per code fence, one source
line per ``\\n``.  :func:`annotate` prefixes every physical line with an empty
``<span class="line">`` marker that the stylesheet turns into a counter cell,
and flags the markers selected by a ``data-highlight`` spec with ``hl``.
"""

from __future__ import annotations

import copy
import re
import xml.etree.ElementTree as etree
from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional, Union

from .utils import parse_int

LINE_MARKER = '<span class="line"></span>'
HIGHLIGHTED_LINE_MARKER = '<span class="line hl"></span>'
CAPTION_CLASS = "named-fence-filename"
RANGE_RE = re.compile(r"^(?P<start>\d+)(?:-(?P<end>\d+))?$")


class Sentinel(Enum):
    NO_HIGHLIGHT = "none"


NO_HIGHLIGHT = Sentinel.NO_HIGHLIGHT

Range = tuple[int, int]
Language = Union[str, Sentinel]


class InvalidRangeSpec(ValueError):
    """A ``data-highlight`` token that is not ``N`` or ``A-B``."""

    def __init__(self, token: str) -> None:
        super().__init__(f"Invalid line range in data-highlight: {token!r}")
        self.token = token


def parse_highlight_spec(value: Optional[str]) -> tuple[Range, ...]:
    """Parse a space separated list of ``N`` / ``A-B`` tokens.

    Reversed ranges collapse onto their first value, so ``"3-1"`` selects
    line 3 only.
    """
    if value is None:
        return ()
    ranges = []
    for token in value.split():
        match = RANGE_RE.match(token)
        if not match:
            raise InvalidRangeSpec(token)
        start = int(match.group("start"))
        end = int(match.group("end")) if match.group("end") else start
        ranges.append((start, max(start, end)))
    return tuple(ranges)


def parse_start(value: object) -> int:
    start = parse_int(value, 1)
    return start if start >= 1 else 1


def split_lines(markup: str) -> list[str]:
    lines = markup.split("\n")
    # One newline between lines; a trailing one does not open a new line.
    if len(lines) > 1 and lines[-1] == "":
        lines.pop()
    return lines


def flag_lines(ranges: tuple[Range, ...], start: int, line_count: int) -> frozenset[int]:
    flagged: set[int] = set()
    for first, last in ranges:
        low = max(0, first - start)
        high = min(line_count - 1, last - start)
        if low > high:
            continue
        flagged.update(range(low, high + 1))
    return frozenset(flagged)


@dataclass(frozen=True)
class CodeBlock:
    markup: str
    language: Language = NO_HIGHLIGHT
    start: int = 1
    highlight: tuple[Range, ...] = ()

    @classmethod
    def from_attributes(cls, markup: str, language: Language, attrs: Mapping[str, str]) -> "CodeBlock":
        start_value = attrs.get("data-start", attrs.get("start"))
        spec_value = attrs.get("data-highlight", attrs.get("highlight"))
        return cls(
            markup=markup,
            language=language,
            start=parse_start(start_value),
            highlight=parse_highlight_spec(spec_value),
        )


@dataclass(frozen=True)
class AnnotatedBlock:
    markup: str
    line_count: int
    start: int = 1
    flagged: frozenset[int] = frozenset()
    annotated: bool = True

    @classmethod
    def unannotated(cls, markup: str, start: int = 1) -> "AnnotatedBlock":
        return cls(markup=markup, line_count=0, start=start, annotated=False)

    @property
    def start_counter_value(self) -> int:
        return self.start - 1


def annotate(block: CodeBlock) -> AnnotatedBlock:
    if block.language is NO_HIGHLIGHT:
        return AnnotatedBlock.unannotated(block.markup, block.start)

    lines = split_lines(block.markup)
    flagged = flag_lines(block.highlight, block.start, len(lines))
    out = []
    for index, line in enumerate(lines):
        marker = HIGHLIGHTED_LINE_MARKER if index in flagged else LINE_MARKER
        out.append(marker + line)
    markup = "\n".join(out)
    if block.markup.endswith("\n"):
        markup += "\n"
    return AnnotatedBlock(
        markup=markup,
        line_count=len(lines),
        start=block.start,
        flagged=flagged,
    )


def container_attributes(block: AnnotatedBlock) -> dict[str, str]:
    """Attributes the ``<pre>`` around an annotated block needs."""
    if not block.annotated:
        return {}
    return {
        "class": "line-numbers",
        "style": f"counter-reset: linenumber {block.start_counter_value};",
    }


def _has_class(element: etree.Element, name: str) -> bool:
    return name in (element.get("class") or "").split()


def reorder_caption(container: etree.Element) -> etree.Element:
    """Return a copy of ``container`` with the filename caption as first child."""
    result = copy.deepcopy(container)
    parents = {child: parent for parent in result.iter() for child in parent}
    for element in result.iter():
        if element is result or not _has_class(element, CAPTION_CLASS):
            continue
        parent = parents[element]
        index = list(parent).index(element)
        if element.tail:
            if index:
                previous = parent[index - 1]
                previous.tail = (previous.tail or "") + element.tail
            else:
                parent.text = (parent.text or "") + element.tail
            element.tail = None
        parent.remove(element)
        # Leading text of the container would otherwise render before the caption.
        element.tail, result.text = result.text, None
        result.insert(0, element)
        break
    return result


def line_numbers_css(selector: str = "pre.line-numbers") -> str:
    return "\n".join(
        [
            f"{selector} {{ counter-reset: linenumber; }}",
            f"{selector} .line::before {{",
            "  counter-increment: linenumber;",
            "  content: counter(linenumber);",
            "  display: inline-block;",
            "  width: 3ch;",
            "  margin-right: 1ch;",
            "  text-align: right;",
            "  opacity: 0.5;",
            "  user-select: none;",
            "}",
            f"{selector} .line.hl::before {{ opacity: 1; background: rgba(255, 220, 0, 0.25); }}",
            f"{selector} .{CAPTION_CLASS} {{ display: block; font-size: 0.85em; opacity: 0.75; }}",
            "",
        ]
    )
