from __future__ import annotations

import html
import re
import xml.etree.ElementTree as etree
from dataclasses import dataclass
from typing import Optional

from markdown.extensions import Extension
from markdown.inlinepatterns import InlineProcessor
from markdown.util import AtomicString

from .utils import join_url

DEFAULT_BASE_URL = "https://docs.godotengine.org/en/stable/classes/"
RE_GD_REF = r"\[gd:\s*(?P<ref>[^\]\n]+)\]"
KIND_RE = re.compile(r"^[a-z]+(?:-[a-z]+)*$")


class MalformedReference(ValueError):
    def __init__(self, token: str, reason: str) -> None:
        super().__init__(f"Malformed class reference {token!r}: {reason}")
        self.token = token
        self.reason = reason


@dataclass(frozen=True)
class Reference:
    kind: str
    name: str
    member: Optional[str] = None

    @property
    def is_private(self) -> bool:
        return self.kind == "method" and bool(self.member) and self.member.startswith("_")


def parse_reference(token: str) -> Reference:
    """Parse ``"<kind> <Name>.<Member>"`` or a bare ``"<Name>"``.

    A bare token is a class reference.  Class references ignore any member.
    """
    parts = token.split()
    if len(parts) == 1:
        kind, target = "class", parts[0]
    elif len(parts) == 2:
        kind, target = parts
    else:
        raise MalformedReference(token, "expected '<kind> <Name>.<Member>' or '<Name>'")
    if not KIND_RE.match(kind):
        raise MalformedReference(token, f"invalid kind {kind!r}")

    name, separator, member = target.partition(".")
    if not name:
        raise MalformedReference(token, "missing class name")
    if separator and not member:
        raise MalformedReference(token, "empty member name")
    if kind != "class" and not member:
        raise MalformedReference(token, f"a {kind} reference needs '<Name>.<Member>'")
    return Reference(kind=kind, name=name, member=member or None)


def reference_url(ref: Reference, base_url: str = DEFAULT_BASE_URL) -> str:
    name = ref.name.lower()
    href = join_url(base_url, f"class_{name}.html")
    if ref.kind == "class":
        return href
    kind = "private-method" if ref.is_private else ref.kind
    member = ref.member.replace("_", "-")
    if member.startswith("-"):
        member = member[1:]
    return f"{href}#class-{name}-{kind}-{member}"


def reference_text(ref: Reference) -> str:
    if ref.kind == "class":
        return ref.name
    text = f"{ref.name}.{ref.member}"
    if ref.kind == "method":
        text += "()"
    return text


def render_reference(token: str, base_url: str = DEFAULT_BASE_URL) -> str:
    ref = parse_reference(token)
    href = html.escape(reference_url(ref, base_url))
    text = html.escape(reference_text(ref))
    return f'<a class="gd-link" href="{href}" target="_blank"><code>{text}</code></a>'


class ReferenceProcessor(InlineProcessor):
    def __init__(self, pattern, md, base_url: str):
        super().__init__(pattern, md)
        self.base_url = base_url

    def handleMatch(self, m, data):
        token = m.group("ref").strip()
        try:
            ref = parse_reference(token)
        except MalformedReference:
            el = etree.Element("span")
            el.set("class", "gd-link-error")
            el.text = AtomicString(token)
            return el, m.start(0), m.end(0)

        el = etree.Element("a")
        el.set("class", "gd-link")
        el.set("href", reference_url(ref, self.base_url))
        el.set("target", "_blank")
        code = etree.SubElement(el, "code")
        code.text = AtomicString(reference_text(ref))
        return el, m.start(0), m.end(0)


class ReferenceExtension(Extension):
    def __init__(self, base_url: str = DEFAULT_BASE_URL, **kwargs):
        super().__init__(**kwargs)
        self.base_url = base_url

    def extendMarkdown(self, md):
        md.inlinePatterns.register(
            ReferenceProcessor(RE_GD_REF, md, self.base_url),
            "gd_reference",
            175,
        )
