"""Document node vocabulary and constructors.

A document is a tree of plain dicts in the TipTap / ProseMirror JSON shape::

    {
        "type": "doc",
        "content": [
            {"type": "heading", "attrs": {"level": 1},
             "content": [{"type": "text", "text": "Title"}]},
            {"type": "paragraph",
             "content": [{"type": "text", "text": "bold",
                          "marks": [{"type": "bold"}]}]},
        ],
    }

Nodes are built fresh by the helpers below and never shared between two
places in a tree, so callers may mutate a returned document freely.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

# ---------------------------------------------------------------------------
# Node types
# ---------------------------------------------------------------------------

DOC = "doc"
PARAGRAPH = "paragraph"
HEADING = "heading"
TEXT = "text"
BULLET_LIST = "bulletList"
ORDERED_LIST = "orderedList"
LIST_ITEM = "listItem"
BLOCKQUOTE = "blockquote"
CODE_BLOCK = "codeBlock"
IMAGE = "image"
HARD_BREAK = "hardBreak"
HORIZONTAL_RULE = "horizontalRule"
TABLE = "table"
TABLE_ROW = "tableRow"
TABLE_CELL = "tableCell"
TABLE_HEADER = "tableHeader"

NODE_TYPES: frozenset[str] = frozenset({
    DOC, PARAGRAPH, HEADING, TEXT, BULLET_LIST, ORDERED_LIST, LIST_ITEM,
    BLOCKQUOTE, CODE_BLOCK, IMAGE, HARD_BREAK, HORIZONTAL_RULE, TABLE,
    TABLE_ROW, TABLE_CELL, TABLE_HEADER,
})

INLINE_TYPES: frozenset[str] = frozenset({TEXT, IMAGE, HARD_BREAK})
"""Node types that may appear inside a paragraph / heading text run."""

LEAF_TYPES: frozenset[str] = frozenset({TEXT, IMAGE, HARD_BREAK, HORIZONTAL_RULE})
"""Node types that never carry ``content``."""


# ---------------------------------------------------------------------------
# Constructors
# ---------------------------------------------------------------------------

def empty_paragraph() -> dict:
    """Return the synthetic empty paragraph used to fill containers."""
    return {"type": PARAGRAPH}


def empty_document() -> dict:
    """Return the minimal well-formed document."""
    return {"type": DOC, "content": [empty_paragraph()]}


def text_node(text: str, marks: Sequence[dict] = ()) -> dict:
    """Create a ``text`` node carrying copies of *marks*."""
    node: dict = {"type": TEXT, "text": text}
    if marks:
        node["marks"] = copy_marks(marks)
    return node


def hard_break() -> dict:
    return {"type": HARD_BREAK}


def horizontal_rule() -> dict:
    return {"type": HORIZONTAL_RULE}


def paragraph(content: list[dict]) -> dict:
    return {"type": PARAGRAPH, "content": content}


def image_node(src: str, alt: str, marks: Sequence[dict] = ()) -> dict:
    node: dict = {"type": IMAGE, "attrs": {"src": src, "alt": alt}}
    if marks:
        node["marks"] = copy_marks(marks)
    return node


def copy_marks(marks: Iterable[dict]) -> list[dict]:
    """Return fresh copies of *marks* so no two nodes share a mark dict."""
    copied: list[dict] = []
    for mark in marks:
        new_mark: dict = {"type": mark["type"]}
        if "attrs" in mark:
            new_mark["attrs"] = dict(mark["attrs"])
        copied.append(new_mark)
    return copied


# ---------------------------------------------------------------------------
# Inspection helpers
# ---------------------------------------------------------------------------

def is_inline(node: dict) -> bool:
    """Return ``True`` if *node* belongs in a text run rather than a block list."""
    return node.get("type") in INLINE_TYPES


def is_blank_run(nodes: Sequence[dict]) -> bool:
    """Return ``True`` if *nodes* holds only whitespace text."""
    return all(
        node.get("type") == TEXT and not node.get("text", "").strip()
        for node in nodes
    )


def wrap_inline_runs(nodes: Iterable[dict]) -> list[dict]:
    """Group consecutive inline nodes into synthetic paragraphs.

    Block nodes pass through unchanged.  Runs consisting only of
    whitespace text are dropped rather than wrapped.
    """
    result: list[dict] = []
    run: list[dict] = []
    for node in nodes:
        if is_inline(node):
            run.append(node)
            continue
        if run and not is_blank_run(run):
            result.append(paragraph(run))
        run = []
        result.append(node)
    if run and not is_blank_run(run):
        result.append(paragraph(run))
    return result


def children(node: object) -> list[dict]:
    """Return the child nodes of *node*, or ``[]`` if it has none.

    Tolerates malformed trees: a missing, ``None`` or non-list ``content``
    and non-dict children are all treated as absent.
    """
    if not isinstance(node, dict):
        return []
    content = node.get("content")
    if not isinstance(content, list):
        return []
    return [child for child in content if isinstance(child, dict)]


def plain_text(node: dict) -> str:
    """Recursively extract the plain text of *node*."""
    if node.get("type") == TEXT:
        text = node.get("text")
        return text if isinstance(text, str) else ""
    if node.get("type") == HARD_BREAK:
        return "\n"
    return "".join(plain_text(child) for child in children(node))
