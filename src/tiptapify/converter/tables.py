"""Table conversion: ``<table>`` element to a ``table`` node.

Row discovery follows the direct structure of the element:

- ``<tr>`` children of ``<thead>`` are header rows; every cell in them
  becomes a ``tableHeader``.
- ``<tr>`` children of ``<tbody>`` / ``<tfoot>`` and ``<tr>`` elements
  directly under ``<table>`` are body rows.
- Outside a header row, ``<th>`` becomes ``tableHeader`` and ``<td>``
  becomes ``tableCell``.

The resulting node::

    {
        "type": "table",
        "content": [
            {"type": "tableRow", "content": [
                {"type": "tableHeader", "content": [{"type": "paragraph", ...}]},
                ...
            ]},
            ...
        ]
    }

Rows without cells are omitted.  A table with no rows at all still
produces one row holding one empty cell, so the node stays well-formed.
"""

from __future__ import annotations

from collections.abc import Callable as _Callable
from collections.abc import Iterable

from bs4.element import PageElement, Tag

from tiptapify.converter.context import BuildContext
from tiptapify.converter.markup import tag_name
from tiptapify.converter.nodes import (
    TABLE,
    TABLE_CELL,
    TABLE_HEADER,
    TABLE_ROW,
    empty_paragraph,
)

CellContentBuilder = _Callable[[Iterable[PageElement], BuildContext, int], list[dict]]
"""Converts the children of a cell into block content (container rules)."""

_SECTION_TAGS: frozenset[str] = frozenset({"thead", "tbody", "tfoot"})
_CELL_TAGS: frozenset[str] = frozenset({"td", "th"})


def build_table(
    element: Tag,
    ctx: BuildContext,
    depth: int,
    cell_content: CellContentBuilder,
) -> list[dict]:
    """Convert a ``<table>`` element.

    Parameters
    ----------
    element:
        The ``<table>`` element.
    ctx:
        Active build context.
    depth:
        Element depth of *element*.
    cell_content:
        Callable converting a cell's children to block content.

    Returns
    -------
    list[dict]
        A single-element list holding the ``table`` node.
    """
    rows: list[dict] = []
    for child in _child_elements(element):
        name = tag_name(child)
        if name in _SECTION_TAGS:
            is_header = name == "thead"
            for tr in _child_elements(child):
                if tag_name(tr) != "tr":
                    continue
                row = _build_row(tr, is_header, ctx, depth + 2, cell_content)
                if row is not None:
                    rows.append(row)
        elif name == "tr":
            row = _build_row(child, False, ctx, depth + 1, cell_content)
            if row is not None:
                rows.append(row)

    if not rows:
        rows = [{
            "type": TABLE_ROW,
            "content": [{"type": TABLE_CELL, "content": [empty_paragraph()]}],
        }]
    return [{"type": TABLE, "content": rows}]


def _build_row(
    tr: Tag,
    is_header: bool,
    ctx: BuildContext,
    depth: int,
    cell_content: CellContentBuilder,
) -> dict | None:
    cells: list[dict] = []
    for cell in _child_elements(tr):
        name = tag_name(cell)
        if name not in _CELL_TAGS:
            continue
        cell_type = TABLE_HEADER if is_header or name == "th" else TABLE_CELL
        content = cell_content(cell.contents, ctx, depth + 2)
        cells.append({"type": cell_type, "content": content or [empty_paragraph()]})
    if not cells:
        return None
    return {"type": TABLE_ROW, "content": cells}


def _child_elements(element: Tag) -> list[Tag]:
    return [child for child in element.children if isinstance(child, Tag)]
