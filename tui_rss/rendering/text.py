"""HTML to terminal text conversion.

Shared by the summary and webpage render modes. Block elements become
separate runs of lines, inline content is whitespace-collapsed and wrapped,
and anything a terminal cannot show (images, media, scripts) is dropped.
"""

import re
import textwrap
from typing import Iterable, List, Optional

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import PreformattedString

from tui_rss.services.entities import decode_entities

WRAP_WIDTH = 80

# Narrowest column a deeply nested list item is allowed to wrap to
MIN_WRAP_WIDTH = 20

BULLET_PREFIX = "  • "
ORDERED_PREFIX = "  "
QUOTE_PREFIX = "> "

SKIPPED_TAGS = frozenset({
    "area", "audio", "canvas", "embed", "head", "img", "link", "map", "meta",
    "noscript", "object", "picture", "script", "source", "style", "svg",
    "template", "title", "track", "video",
})

HEADING_TAGS = frozenset({"h1", "h2", "h3", "h4", "h5", "h6"})

# Block elements that start a new line but add no blank line around them
LINE_TAGS = frozenset({
    "address", "article", "aside", "center", "dd", "details", "div", "dl",
    "dt", "fieldset", "figcaption", "figure", "footer", "form", "header",
    "main", "nav", "section", "summary",
})

_WHITESPACE_RE = re.compile(r"\s+")


def parse_html(html: str) -> BeautifulSoup:
    """Parse an HTML document or fragment."""
    return BeautifulSoup(html, "lxml")


def html_to_text(nodes: Iterable[Tag], width: int = WRAP_WIDTH) -> str:
    """Convert HTML elements to wrapped plain text.

    Args:
        nodes: Elements to render, in order
        width: Column to wrap at

    Returns:
        Text with trailing whitespace removed from every line
    """
    builder = _TextBuilder(width)
    for node in nodes:
        builder.render(node)
    return builder.result()


class _TextBuilder:
    """Accumulates output lines while walking the element tree.

    Inline text is buffered until a block boundary flushes it. Blank lines
    between blocks are requested with a gap; adjacent requests merge to the
    larger one, and a gap before the first line is dropped.
    """

    def __init__(self, width: int):
        self.width = width
        self.lines: List[str] = []
        self._inline: List[str] = []
        self._gap = 0
        self._indent: List[str] = []
        self._marker: Optional[str] = None
        self._uppercase = 0
        self._list_depth = 0

    def render(self, node: Tag) -> None:
        self._element(node)
        self._flush()

    def result(self) -> str:
        return "\n".join(self.lines).rstrip()

    # Tree walking

    def _children(self, node: Tag) -> None:
        for child in node.children:
            if isinstance(child, Tag):
                self._element(child)
            elif isinstance(child, PreformattedString):
                # comments, doctypes, CDATA, processing instructions
                continue
            elif isinstance(child, NavigableString):
                self._inline.append(decode_entities(str(child)))

    def _element(self, tag: Tag) -> None:
        name = tag.name

        if name in SKIPPED_TAGS:
            return
        if name == "br":
            self._inline.append("\n")
        elif name == "hr":
            self._open(1)
            self._close(1)
        elif name == "p":
            self._open(1)
            self._children(tag)
            self._close(1)
        elif name in HEADING_TAGS:
            self._heading(tag)
        elif name in ("ul", "ol"):
            self._list(tag, ordered=name == "ol")
        elif name == "li":
            # stray item outside a list
            self._item(tag, BULLET_PREFIX)
        elif name == "pre":
            self._pre(tag)
        elif name == "blockquote":
            self._open(1)
            self._indent.append(QUOTE_PREFIX)
            self._children(tag)
            self._flush()
            self._indent.pop()
            self._close(1)
        elif name == "table":
            self._open(1)
            self._children(tag)
            self._close(1)
        elif name == "tr":
            self._row(tag)
        elif name in LINE_TAGS:
            self._open(0)
            self._children(tag)
            self._close(0)
        else:
            self._children(tag)

    def _heading(self, tag: Tag) -> None:
        self._open(1)
        upper = tag.name == "h1"
        if upper:
            self._uppercase += 1
        self._children(tag)
        self._flush()
        if upper:
            self._uppercase -= 1
        self._close(1)

    def _list(self, tag: Tag, ordered: bool) -> None:
        gap = 0 if self._list_depth else 1
        self._open(gap)
        self._list_depth += 1

        try:
            index = int(tag.get("start", 1))
        except (TypeError, ValueError):
            index = 1

        for child in tag.children:
            if isinstance(child, Tag) and child.name == "li":
                marker = f"{ORDERED_PREFIX}{index}. " if ordered else BULLET_PREFIX
                index += 1
                self._item(child, marker)
            elif isinstance(child, Tag):
                self._element(child)
            elif isinstance(child, NavigableString) and not isinstance(child, PreformattedString):
                if child.strip():
                    self._inline.append(decode_entities(str(child)))

        self._list_depth -= 1
        self._close(gap)

    def _item(self, tag: Tag, marker: str) -> None:
        self._flush()
        self._indent.append(" " * len(marker))
        self._marker = marker
        self._children(tag)
        self._flush()
        self._indent.pop()
        self._marker = None

    def _row(self, tag: Tag) -> None:
        self._open(0)
        first = True
        for child in tag.children:
            if isinstance(child, Tag) and child.name in ("td", "th"):
                if not first:
                    self._inline.append(" | ")
                first = False
                self._children(child)
            elif isinstance(child, Tag):
                self._element(child)
        self._close(0)

    def _pre(self, tag: Tag) -> None:
        self._open(1)
        lines = [line.rstrip().expandtabs(4) for line in tag.get_text().split("\n")]
        while lines and not lines[0]:
            lines.pop(0)
        while lines and not lines[-1]:
            lines.pop()
        if lines:
            self._emit(lines)
        self._close(1)

    # Line output

    def _open(self, gap: int) -> None:
        self._flush()
        self._gap = max(self._gap, gap)

    def _close(self, gap: int) -> None:
        self._flush()
        self._gap = max(self._gap, gap)

    def _flush(self) -> None:
        raw = "".join(self._inline)
        self._inline = []

        segments = [_WHITESPACE_RE.sub(" ", seg).strip() for seg in raw.split("\n")]
        while segments and not segments[0]:
            segments.pop(0)
        while segments and not segments[-1]:
            segments.pop()
        if not segments:
            return

        if self._uppercase:
            segments = [seg.upper() for seg in segments]

        available = max(MIN_WRAP_WIDTH, self.width - len("".join(self._indent)))
        lines: List[str] = []
        for seg in segments:
            if not seg:
                lines.append("")
                continue
            lines.extend(textwrap.wrap(
                seg,
                width=available,
                break_long_words=False,
                break_on_hyphens=False,
            ))
        self._emit(lines)

    def _emit(self, lines: List[str]) -> None:
        indent = "".join(self._indent)
        first = indent
        if self._marker is not None:
            first = indent[: len(indent) - len(self._marker)] + self._marker
            self._marker = None

        if self.lines:
            self.lines.extend([""] * self._gap)
        self._gap = 0

        for i, line in enumerate(lines):
            prefix = first if i == 0 else indent
            self.lines.append((prefix + line).rstrip())
