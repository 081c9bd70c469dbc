"""Inline-context conversion: HTML children to text / image / hardBreak nodes.

Inline conversion produces only inline nodes.  Marks are inherited: each
formatting element extends the tuple of marks passed to its children, and
every text node created underneath carries that tuple.  Block-level
elements met in inline context are flattened by recursing into their
children, so a ``<p>`` inside a ``<span>`` contributes its text and nothing
else.

Mark application per element:

- ``strong`` / ``b`` -> bold
- ``em`` / ``i`` -> italic
- ``s`` / ``strike`` / ``del`` -> strike
- ``code`` -> one text node with the element's full text, code-marked
- ``a`` -> link (``attrs.href``), applied to text and image descendants
- ``span`` with a non-transparent background -> highlight
- ``u`` -> no mark; children pass through
"""

from __future__ import annotations

from collections.abc import Callable as _Callable
from collections.abc import Iterable

from bs4.element import PageElement, Tag

from tiptapify.converter import marks as _marks
from tiptapify.converter.context import BuildContext
from tiptapify.converter.markup import (
    BLOCK_TAGS,
    SKIPPED_TAGS,
    contains_block,
    get_attr,
    is_text,
    tag_name,
    text_content,
)
from tiptapify.converter.nodes import hard_break, image_node, text_node


def build_inline(
    nodes: Iterable[PageElement],
    ctx: BuildContext,
    marks: _marks.Marks = _marks.NO_MARKS,
    depth: int = 0,
) -> list[dict]:
    """Convert a sequence of DOM nodes to inline document nodes.

    Parameters
    ----------
    nodes:
        Sibling DOM nodes (elements, text, comments) in document order.
    ctx:
        The active build context; receives warnings.
    marks:
        Marks inherited from enclosing formatting elements.
    depth:
        Element depth of *nodes* below the document root.

    Returns
    -------
    list[dict]
        ``text``, ``image`` and ``hardBreak`` nodes.  Text nodes keep their
        whitespace exactly; adjacent text nodes are not merged.
    """
    produced: list[dict] = []
    for node in nodes:
        produced.extend(convert_inline(node, ctx, marks, depth))
    return produced


def convert_inline(
    node: PageElement,
    ctx: BuildContext,
    marks: _marks.Marks = _marks.NO_MARKS,
    depth: int = 0,
) -> list[dict]:
    """Convert a single DOM node in inline context."""
    if is_text(node):
        text = str(node)
        return [text_node(text, marks)] if text else []
    if not isinstance(node, Tag):
        # Comments, doctypes, processing instructions.
        return []

    name = tag_name(node)
    if name in SKIPPED_TAGS:
        return []
    if depth >= ctx.max_depth:
        return _flatten(node, ctx, marks, depth)

    handler = _INLINE_HANDLERS.get(name)
    if handler is not None:
        return handler(node, ctx, marks, depth)
    if name in BLOCK_TAGS or ctx.fallback_to_paragraph:
        return build_inline(node.contents, ctx, marks, depth + 1)

    ctx.add_warning(
        "ELEMENT_DROPPED",
        f"Unsupported element <{name}> was dropped.",
        tag=name,
    )
    return []


def is_inline_source(node: PageElement) -> bool:
    """Return ``True`` if *node* belongs in an inline run of a container.

    Text, inline formatting elements and unknown wrappers without any
    block-level descendant all flow into the surrounding paragraph.
    """
    if not isinstance(node, Tag):
        # Text; comments are inert and may sit in either kind of run.
        return True
    name = tag_name(node)
    if name in BLOCK_TAGS or name in SKIPPED_TAGS:
        return False
    if name in _INLINE_HANDLERS:
        return True
    return not contains_block(node)


# ---------------------------------------------------------------------------
# Element handlers
# ---------------------------------------------------------------------------

def _mark_handler(mark_type: str) -> _InlineHandler:
    def handle(node: Tag, ctx: BuildContext, marks: _marks.Marks, depth: int) -> list[dict]:
        inner = _marks.add_mark(marks, _marks.make_mark(mark_type))
        return build_inline(node.contents, ctx, inner, depth + 1)

    handle.__name__ = f"_build_{mark_type}"
    return handle


def _build_passthrough(
    node: Tag, ctx: BuildContext, marks: _marks.Marks, depth: int,
) -> list[dict]:
    return build_inline(node.contents, ctx, marks, depth + 1)


def _build_code(
    node: Tag, ctx: BuildContext, marks: _marks.Marks, depth: int,
) -> list[dict]:
    text = text_content(node)
    if not text:
        return []
    return [text_node(text, _marks.add_mark(marks, _marks.make_mark(_marks.CODE)))]


def _build_link(
    node: Tag, ctx: BuildContext, marks: _marks.Marks, depth: int,
) -> list[dict]:
    href = get_attr(node, "href").strip()
    inner = marks
    if href:
        inner = _marks.add_mark(marks, _marks.make_mark(_marks.LINK, href=href))
    return build_inline(node.contents, ctx, inner, depth + 1)


def _build_span(
    node: Tag, ctx: BuildContext, marks: _marks.Marks, depth: int,
) -> list[dict]:
    inner = marks
    if _marks.is_highlighted(get_attr(node, "style")):
        inner = _marks.add_mark(marks, _marks.make_mark(_marks.HIGHLIGHT))
    return build_inline(node.contents, ctx, inner, depth + 1)


def _build_image(
    node: Tag, ctx: BuildContext, marks: _marks.Marks, depth: int,
) -> list[dict]:
    return build_image(node, ctx, marks)


def _build_hard_break(
    node: Tag, ctx: BuildContext, marks: _marks.Marks, depth: int,
) -> list[dict]:
    return [hard_break()]


def build_image(
    node: Tag, ctx: BuildContext, marks: _marks.Marks = _marks.NO_MARKS,
) -> list[dict]:
    """Build an ``image`` node from an ``<img>`` element.

    The source is resolved through the context's image reference map.
    Images without a usable source are dropped with an ``IMAGE_DROPPED``
    warning.
    """
    ref = get_attr(node, "ref")
    raw_src = get_attr(node, "src")
    src = ctx.resolve_image_source(ref, raw_src)
    if src is None:
        ctx.add_warning(
            "IMAGE_DROPPED",
            "Image without a resolvable source was dropped.",
            src=raw_src,
            ref=ref,
        )
        return []
    return [image_node(src, get_attr(node, "alt"), _marks.marks_for_image(marks))]


def _flatten(
    node: Tag, ctx: BuildContext, marks: _marks.Marks, depth: int,
) -> list[dict]:
    ctx.add_warning(
        "NESTING_DEPTH_EXCEEDED",
        f"Element <{tag_name(node)}> exceeds the maximum nesting depth "
        f"({ctx.max_depth}); its content was flattened to text.",
        tag=tag_name(node),
        depth=depth,
    )
    text = text_content(node)
    return [text_node(text, marks)] if text else []


# ---------------------------------------------------------------------------
# Dispatch table
# ---------------------------------------------------------------------------

_InlineHandler = _Callable[[Tag, BuildContext, _marks.Marks, int], list[dict]]

_INLINE_HANDLERS: dict[str, _InlineHandler] = {
    "strong": _mark_handler(_marks.BOLD),
    "b": _mark_handler(_marks.BOLD),
    "em": _mark_handler(_marks.ITALIC),
    "i": _mark_handler(_marks.ITALIC),
    "s": _mark_handler(_marks.STRIKE),
    "strike": _mark_handler(_marks.STRIKE),
    "del": _mark_handler(_marks.STRIKE),
    "u": _build_passthrough,
    "code": _build_code,
    "a": _build_link,
    "span": _build_span,
    "img": _build_image,
    "br": _build_hard_break,
}
