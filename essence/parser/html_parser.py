"""HTML parsing and text rendering for essence.

The generic fallback turns a page into something a terminal pager can show:

* chrome is removed first – ``nav``, ``script``, ``style`` and friends, plus
  anything marked ``role="navigation"``, ``aria-hidden="true"`` or ``hidden``;
* the article root is the single ``main`` / ``article`` / ``div[role=main]``
  element when the page has exactly one, else ``body``;
* visible text is concatenated in document order, whitespace collapsed inside
  each block, blocks separated by a blank line;
* ``<pre>`` is kept verbatim, ``<br>`` breaks the line, ``<li>`` gets a bullet;
* every line is wrapped to the configured width.
"""
from __future__ import annotations

import textwrap
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Optional, Union

from bs4 import BeautifulSoup
from bs4.element import NavigableString, PageElement, Tag

from essence.models import FetchedResource

__all__: Sequence[str] = (
    "ParsedArticle",
    "parse_html",
    "select_single",
    "strip_chrome",
    "squeeze_whitespace",
    "render_text",
    "extract_article",
)

STRIP_TAGS: tuple[str, ...] = ("nav", "script", "style", "noscript", "template", "iframe", "svg")
STRIP_SELECTORS: tuple[str, ...] = ('[role="navigation"]', '[aria-hidden="true"]', "[hidden]")
ARTICLE_SELECTORS: tuple[str, ...] = ("main", "article", 'div[role="main"]')

_BLOCK_TAGS = frozenset(
    {
        "address", "article", "aside", "blockquote", "dd", "details", "dialog", "div", "dl",
        "dt", "fieldset", "figcaption", "figure", "footer", "form", "h1", "h2", "h3", "h4",
        "h5", "h6", "header", "hr", "main", "ol", "p", "section", "summary", "table",
        "tr", "ul",
    }
)
_CELL_TAGS = frozenset({"td", "th"})
_ZERO_WIDTH_SPACE = "\u200b"
_INVISIBLE_TAGS = frozenset({"head", "title", "meta", "link", "base"})


@dataclass(slots=True)
class ParsedArticle:
    """Title and rendered body text of a page."""

    title: Optional[str]
    text: str


def parse_html(source: Union[FetchedResource, bytes, str]) -> BeautifulSoup:
    """Parse a fetched resource (honouring its charset), raw bytes or markup."""
    if isinstance(source, FetchedResource):
        return BeautifulSoup(source.body, "html.parser", from_encoding=source.charset)
    return BeautifulSoup(source, "html.parser")


def select_single(root: Union[BeautifulSoup, Tag], selector: str) -> Optional[Tag]:
    """Element matched by *selector*, or ``None`` on zero or several matches."""
    matches = root.select(selector, limit=2)
    if len(matches) == 1:
        return matches[0]
    return None


def strip_chrome(soup: BeautifulSoup) -> None:
    """Remove navigation, scripts, styles and hidden subtrees in place."""
    doomed = list(soup.find_all(list(STRIP_TAGS)))
    for selector in STRIP_SELECTORS:
        doomed.extend(soup.select(selector))
    for element in doomed:
        # a nested match may already be gone with its ancestor
        if not element.decomposed:
            element.decompose()


def squeeze_whitespace(text: str) -> str:
    """Collapse runs of whitespace (zero-width space included) into one space."""
    return " ".join(text.replace(_ZERO_WIDTH_SPACE, " ").split())


class _TextCollector:
    """Accumulates blocks of lines while walking the tree."""

    def __init__(self) -> None:
        # (preformatted, lines)
        self.blocks: list[tuple[bool, list[str]]] = []
        self._lines: list[str] = [""]

    def text(self, value: str) -> None:
        self._lines[-1] += value

    def line_break(self) -> None:
        self._lines.append("")

    def block_break(self) -> None:
        lines = [squeeze_whitespace(line) for line in self._lines]
        lines = [line for line in lines if line]
        if lines:
            self.blocks.append((False, lines))
        self._lines = [""]

    def preformatted(self, value: str) -> None:
        self.block_break()
        value = value.strip("\n")
        if value.strip():
            self.blocks.append((True, value.splitlines()))

    def walk(self, node: PageElement) -> None:
        if isinstance(node, NavigableString):
            # comments, doctypes, CDATA etc. are NavigableString subclasses
            if type(node) is NavigableString:
                self.text(str(node))
            return
        if not isinstance(node, Tag):
            return

        name = node.name
        if name in _INVISIBLE_TAGS:
            return
        if name == "br":
            self.line_break()
            return
        if name == "pre":
            self.preformatted(node.get_text())
            return
        if name in _BLOCK_TAGS:
            self.block_break()
        elif name == "li":
            self.line_break()
            self.text("* ")
        for child in node.children:
            self.walk(child)
        if name in _BLOCK_TAGS:
            self.block_break()
        elif name == "li":
            self.line_break()
        elif name in _CELL_TAGS:
            self.text(" ")


def _wrap(line: str, width: int) -> str:
    if width <= 0 or len(line) <= width:
        return line
    return textwrap.fill(line, width=width, break_on_hyphens=False)


def render_text(root: Union[BeautifulSoup, Tag], width: int = 80) -> str:
    """Visible text of *root* as wrapped paragraphs separated by blank lines."""
    collector = _TextCollector()
    collector.walk(root)
    collector.block_break()

    rendered: list[str] = []
    for preformatted, lines in collector.blocks:
        if preformatted:
            rendered.append("\n".join(lines))
        else:
            rendered.append("\n".join(_wrap(line, width) for line in lines))
    return "\n\n".join(rendered)


def _title(soup: BeautifulSoup) -> Optional[str]:
    # some pages carry a second <title> outside <head>
    for selector in ("title", "head > title"):
        element = select_single(soup, selector)
        if element is not None:
            return squeeze_whitespace(element.get_text()) or None
    return None


def extract_article(soup: BeautifulSoup, width: int = 80) -> ParsedArticle:
    """Generic HTML fallback: title plus the rendered text of the article root."""
    title = _title(soup)
    strip_chrome(soup)

    root: Union[BeautifulSoup, Tag] = soup
    for selector in (*ARTICLE_SELECTORS, "body"):
        element = select_single(soup, selector)
        if element is not None:
            root = element
            break

    return ParsedArticle(title=title, text=render_text(root, width))
