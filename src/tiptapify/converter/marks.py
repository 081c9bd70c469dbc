"""Inline mark vocabulary and accumulation helpers.

A mark is a dict such as ``{"type": "bold"}`` or
``{"type": "link", "attrs": {"href": "https://..."}}`` attached to the
``marks`` list of a text (or image) node.

Marks are threaded down the inline recursion as an immutable tuple.  Each
wrapping element produces a *new* tuple via :func:`add_mark`, so sibling
subtrees never observe each other's marks.  Accumulation is outer-to-inner
and a mark type is recorded at most once; the outermost occurrence wins.
"""

from __future__ import annotations

import re

BOLD = "bold"
ITALIC = "italic"
STRIKE = "strike"
CODE = "code"
LINK = "link"
HIGHLIGHT = "highlight"

MARK_TYPES: frozenset[str] = frozenset({BOLD, ITALIC, STRIKE, CODE, LINK, HIGHLIGHT})

IMAGE_MARK_TYPES: frozenset[str] = frozenset({LINK})
"""Mark types that images carry; every other mark applies to text only."""

Marks = tuple[dict, ...]

NO_MARKS: Marks = ()


def make_mark(mark_type: str, **attrs: str) -> dict:
    """Create a mark dict, with ``attrs`` only when any are given."""
    mark: dict = {"type": mark_type}
    if attrs:
        mark["attrs"] = dict(attrs)
    return mark


def add_mark(marks: Marks, mark: dict) -> Marks:
    """Return *marks* extended by *mark* unless its type is already present."""
    if any(existing["type"] == mark["type"] for existing in marks):
        return marks
    return (*marks, mark)


def marks_for_image(marks: Marks) -> Marks:
    """Filter *marks* down to the ones an image node may carry."""
    return tuple(mark for mark in marks if mark["type"] in IMAGE_MARK_TYPES)


# ---------------------------------------------------------------------------
# Highlight detection
# ---------------------------------------------------------------------------

_DECLARATION_RE = re.compile(r"\s*([-\w]+)\s*:\s*([^;]*)")


def parse_style(style: str) -> dict[str, str]:
    """Parse an inline ``style`` attribute into ``{property: value}``.

    Property names are lower-cased; values are stripped and lower-cased.
    Later declarations override earlier ones, as in CSS.
    """
    declarations: dict[str, str] = {}
    for chunk in style.split(";"):
        match = _DECLARATION_RE.match(chunk)
        if match is None:
            continue
        declarations[match.group(1).lower()] = match.group(2).strip().lower()
    return declarations


def is_highlighted(style: str) -> bool:
    """Return ``True`` if *style* sets a non-transparent background colour.

    Only ``background-color`` is considered.  The ``background`` shorthand
    also carries images and ``none``, so it is ignored.  Colour, weight and
    decoration set through ``style`` have no counterpart in the document
    model.
    """
    if not style:
        return False
    value = parse_style(style).get("background-color")
    return bool(value) and not value.startswith("transparent")
