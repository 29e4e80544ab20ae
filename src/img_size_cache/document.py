"""Find image references in markdown/HTML text and render annotated tags.

Markdown images (``![alt](src "title")``) that receive a size are rewritten
as ``<img>`` tags carrying ``width``/``height``; existing ``<img>`` tags get
the attributes set in place. Images inside fenced or inline code are left
alone, as are images that could not be sized.
"""

from __future__ import annotations

import html
import re
from enum import StrEnum

from pydantic import BaseModel, Field

from img_size_cache.types import ImageNode

_MD_IMAGE = re.compile(
    r"!\[(?P<alt>[^\]]*)\]\(\s*"
    r"(?:<(?P<src_angle>[^>]*)>|(?P<src>[^)\s]+))"
    r"(?:\s+(?:\"(?P<title_dq>[^\"]*)\"|'(?P<title_sq>[^']*)'))?"
    r"\s*\)"
)
_HTML_IMG = re.compile(r"<img\b(?P<attrs>[^>]*?)\s*(?P<close>/?)>", re.IGNORECASE)
_HTML_ATTR = re.compile(
    r"(?P<name>[^\s\"'>/=]+)(?:\s*=\s*(?:\"(?P<dq>[^\"]*)\"|'(?P<sq>[^']*)'|(?P<bare>[^\s\"'=<>`]+)))?"
)
_FENCED_CODE = re.compile(r"^(?P<fence>`{3,}|~{3,}).*?^(?P=fence)[ \t]*$", re.MULTILINE | re.DOTALL)
_INLINE_CODE = re.compile(r"(?<!`)(?P<ticks>`+)(?!`).+?(?<!`)(?P=ticks)(?!`)", re.DOTALL)


class ImageSyntax(StrEnum):
    MARKDOWN = "markdown"
    HTML = "html"


class ImageMatch(BaseModel):
    """One image occurrence in the source text."""

    start: int
    end: int
    syntax: ImageSyntax
    node: ImageNode
    # Attribute order of an <img> tag as written, minus width/height
    attrs: list[tuple[str, str | None]] = Field(default_factory=list)
    self_closing: bool = False


def find_images(text: str) -> list[ImageMatch]:
    """Return image occurrences in document order, skipping code regions."""
    code_spans = _code_spans(text)
    matches: list[ImageMatch] = []

    for m in _MD_IMAGE.finditer(text):
        if _inside(m.start(), code_spans):
            continue
        src = m.group("src_angle") if m.group("src_angle") is not None else m.group("src")
        title = m.group("title_dq") if m.group("title_dq") is not None else m.group("title_sq")
        matches.append(
            ImageMatch(
                start=m.start(),
                end=m.end(),
                syntax=ImageSyntax.MARKDOWN,
                node=ImageNode(src=src.strip(), alt=m.group("alt"), title=title),
            )
        )

    for m in _HTML_IMG.finditer(text):
        if _inside(m.start(), code_spans):
            continue
        attrs = _parse_attrs(m.group("attrs"))
        values = {name.lower(): value for name, value in attrs}
        src = values.get("src")
        if not src:
            continue
        matches.append(
            ImageMatch(
                start=m.start(),
                end=m.end(),
                syntax=ImageSyntax.HTML,
                node=ImageNode(src=src, alt=values.get("alt") or "", title=values.get("title")),
                attrs=[(n, v) for n, v in attrs if n.lower() not in ("width", "height")],
                self_closing=bool(m.group("close")),
            )
        )

    matches.sort(key=lambda match: match.start)

    # An image nested in another (markdown inside an alt attribute, or a tag
    # inside markdown alt text) belongs to the outer one
    accepted: list[ImageMatch] = []
    for match in matches:
        if accepted and match.start < accepted[-1].end:
            continue
        accepted.append(match)
    return accepted


def render_images(text: str, matches: list[ImageMatch]) -> str:
    """Substitute annotated tags for every sized match; others are kept verbatim."""
    pieces: list[str] = []
    cursor = 0
    for match in matches:
        if not match.node.annotated or match.start < cursor:
            continue
        pieces.append(text[cursor : match.start])
        pieces.append(render_tag(match))
        cursor = match.end
    pieces.append(text[cursor:])
    return "".join(pieces)


def render_tag(match: ImageMatch) -> str:
    node = match.node
    if match.syntax == ImageSyntax.HTML:
        attrs = list(match.attrs)
    else:
        attrs = [("src", node.src), ("alt", node.alt)]
        if node.title is not None:
            attrs.append(("title", node.title))
    if node.annotated:
        attrs.extend([("width", str(node.width)), ("height", str(node.height))])

    rendered = " ".join(
        name if value is None else f'{name}="{html.escape(value, quote=True)}"'
        for name, value in attrs
    )
    return f"<img {rendered}{' /' if match.self_closing else ''}>"


def _parse_attrs(raw: str) -> list[tuple[str, str | None]]:
    attrs: list[tuple[str, str | None]] = []
    for m in _HTML_ATTR.finditer(raw):
        value = next(
            (m.group(g) for g in ("dq", "sq", "bare") if m.group(g) is not None),
            None,
        )
        attrs.append((m.group("name"), html.unescape(value) if value is not None else None))
    return attrs


def _code_spans(text: str) -> list[tuple[int, int]]:
    spans = [(m.start(), m.end()) for m in _FENCED_CODE.finditer(text)]
    for m in _INLINE_CODE.finditer(text):
        if not _inside(m.start(), spans):
            spans.append((m.start(), m.end()))
    return spans


def _inside(pos: int, spans: list[tuple[int, int]]) -> bool:
    return any(start <= pos < end for start, end in spans)
