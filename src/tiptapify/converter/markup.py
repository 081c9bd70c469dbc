"""HTML parsing front end for the importer.

Wraps BeautifulSoup's ``html.parser`` backend, which is permissive:
unclosed and misnested tags are repaired into a tree the builders can walk.
The one thing it rejects is a ``<![...]>`` marked section with an unknown
keyword; such sections are removed and the markup is parsed again.  Node
classification helpers live here too, so the builders never touch bs4 types
directly.
"""

from __future__ import annotations

import html as _html
import re
import warnings

from bs4 import BeautifulSoup, MarkupResemblesLocatorWarning, ParserRejectedMarkup
from bs4.element import NavigableString, PageElement, PreformattedString, Tag

# ---------------------------------------------------------------------------
# Tag classes
# ---------------------------------------------------------------------------

SKIPPED_TAGS: frozenset[str] = frozenset({
    "head", "script", "style", "template", "title", "meta", "link",
    "noscript",
})
"""Elements whose subtree never contributes content."""

TRANSPARENT_TAGS: frozenset[str] = frozenset({
    "html", "body", "thead", "tbody", "tfoot",
})
"""Structural wrappers whose children are spliced in block context."""

INLINE_TAGS: frozenset[str] = frozenset({
    "strong", "b", "em", "i", "s", "strike", "del", "u", "code", "a",
    "span", "img", "br",
})
"""Elements the inline builder converts (everything else is flattened)."""

BLOCK_TAGS: frozenset[str] = frozenset({
    "h1", "h2", "h3", "h4", "h5", "h6", "p", "div", "ul", "ol", "li",
    "blockquote", "pre", "table", "tr", "td", "th", "hr",
}) | TRANSPARENT_TAGS
"""Elements with block-level meaning."""


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

_MARKED_SECTION_RE = re.compile(r"<!\[(?!CDATA\[)[^>]*>?")
_TAG_RE = re.compile(r"<[^>]*>?")
_WHITESPACE_RE = re.compile(r"\s+")


def decode_markup(markup: str | bytes) -> str:
    """Decode bytes as UTF-8; undecodable sequences become U+FFFD."""
    if isinstance(markup, (bytes, bytearray)):
        return bytes(markup).decode("utf-8", errors="replace")
    return markup


def parse_markup(markup: str | bytes) -> BeautifulSoup:
    """Parse *markup* into a BeautifulSoup tree.

    Raises
    ------
    ParserRejectedMarkup
        If the markup is still rejected after marked sections are removed.
    """
    markup = decode_markup(markup)
    try:
        return _parse(markup)
    except ParserRejectedMarkup:
        repaired = _MARKED_SECTION_RE.sub("", markup)
        if repaired == markup:
            raise
        return _parse(repaired)


def _parse(markup: str) -> BeautifulSoup:
    with warnings.catch_warnings():
        # Short inputs like "index.html" are legitimate note bodies here.
        warnings.simplefilter("ignore", MarkupResemblesLocatorWarning)
        return BeautifulSoup(markup, "html.parser")


def strip_tags(markup: str | bytes) -> str:
    """Return the text of *markup* without parsing it.

    Used only for markup the parser rejects.  Tags are dropped, entities
    unescaped and whitespace collapsed.
    """
    text = _html.unescape(_TAG_RE.sub(" ", decode_markup(markup)))
    return _WHITESPACE_RE.sub(" ", text).strip()


_EMPTY_STYLE_RE = re.compile(r'\s+style=""')


def clean_html(html: str) -> str:
    """Remove empty ``style`` attributes and collapse whitespace runs.

    Applied to exported note bodies before conversion.  Collapsing is
    unconditional, including inside ``<pre>``, which matches how the
    exporting application itself renders note bodies.
    """
    html = _EMPTY_STYLE_RE.sub("", html)
    return _WHITESPACE_RE.sub(" ", html)


# ---------------------------------------------------------------------------
# Node classification
# ---------------------------------------------------------------------------

def is_text(node: PageElement) -> bool:
    """Return ``True`` for character data (not comments or declarations)."""
    return isinstance(node, NavigableString) and not isinstance(node, PreformattedString)


def is_element(node: PageElement) -> bool:
    return isinstance(node, Tag)


def tag_name(node: Tag) -> str:
    return (node.name or "").lower()


def get_attr(node: Tag, name: str) -> str:
    """Return attribute *name* of *node* as a string (``""`` when absent).

    Multi-valued attributes such as ``class`` come back from bs4 as lists;
    they are joined with single spaces.
    """
    value = node.get(name)
    if value is None:
        return ""
    if isinstance(value, list):
        return " ".join(value)
    return str(value)


def text_content(node: PageElement) -> str:
    """Return the concatenated text of *node* and all its descendants."""
    if isinstance(node, Tag):
        return node.get_text()
    if is_text(node):
        return str(node)
    return ""


def contains_block(node: Tag) -> bool:
    """Return ``True`` if any descendant of *node* is a block-level element."""
    return node.find(lambda tag: tag_name(tag) in BLOCK_TAGS) is not None
