"""Block-context conversion: HTML elements to document block nodes.

Dispatch is by lower-cased tag name:

- ``h1``..``h6`` -> heading (``attrs.level``)
- ``p`` / ``div`` -> paragraph from the inline content (omitted when empty)
- ``ul`` / ``ol`` -> bulletList / orderedList of listItem nodes
- ``li`` -> listItem (also when found outside a list)
- ``blockquote`` -> blockquote
- ``pre`` -> codeBlock holding the element's full text
- ``table`` -> delegate to :mod:`tiptapify.converter.tables`
- ``br`` -> hardBreak, ``hr`` -> horizontalRule
- inline formatting tags and ``img`` -> delegate to the inline builder
- ``html`` / ``body`` / ``thead`` / ``tbody`` / ``tfoot`` / ``u`` -> transparent
- ``head`` / ``script`` / ``style`` and friends, comments -> nothing
- anything else -> transparent when ``fallback_to_paragraph`` is on,
  otherwise dropped with an ``ELEMENT_DROPPED`` warning

At the document root, text and inline nodes are kept as they are.  Inside
list items, table cells and blockquotes, consecutive inline content is
always wrapped in a paragraph (see :func:`build_container_content`).
"""

from __future__ import annotations

from collections.abc import Callable as _Callable
from collections.abc import Iterable

from bs4.element import PageElement, Tag

from tiptapify.converter import nodes as _nodes
from tiptapify.converter.context import BuildContext
from tiptapify.converter.inline_builder import (
    build_image,
    build_inline,
    convert_inline,
    is_inline_source,
)
from tiptapify.converter.markup import (
    SKIPPED_TAGS,
    TRANSPARENT_TAGS,
    is_text,
    parse_markup,
    strip_tags,
    tag_name,
    text_content,
)
from tiptapify.converter.tables import build_table


def build_markup(markup: str | bytes, ctx: BuildContext) -> list[dict]:
    """Parse *markup* and convert it in block context.

    Markup the parser rejects is recorded as a ``PARSE_FAILED`` warning and
    its text is kept as a single paragraph.
    """
    try:
        soup = parse_markup(markup)
    except Exception as exc:
        ctx.add_warning(
            "PARSE_FAILED",
            f"Markup could not be parsed: {exc}",
            error=type(exc).__name__,
        )
        text = strip_tags(markup)
        return [_nodes.paragraph([_nodes.text_node(text)])] if text else []
    return build_blocks(soup.contents, ctx)


def build_blocks(
    nodes: Iterable[PageElement],
    ctx: BuildContext,
    depth: int = 0,
) -> list[dict]:
    """Convert a sequence of sibling DOM nodes in block context.

    Parameters
    ----------
    nodes:
        DOM nodes in document order.
    ctx:
        Active build context.
    depth:
        Element depth of *nodes* below the document root.

    Returns
    -------
    list[dict]
        Block nodes, possibly interleaved with inline nodes when called at
        the document root.
    """
    produced: list[dict] = []
    for node in nodes:
        produced.extend(convert_block(node, ctx, depth))
    return produced


def convert_block(node: PageElement, ctx: BuildContext, depth: int = 0) -> list[dict]:
    """Convert a single DOM node in block context."""
    if is_text(node):
        text = str(node)
        if not text.strip():
            return []
        return [_nodes.text_node(text)]
    if not isinstance(node, Tag):
        return []

    name = tag_name(node)
    if name in SKIPPED_TAGS:
        return []
    if depth >= ctx.max_depth:
        return _flatten(node, ctx, depth)

    handler = _BLOCK_HANDLERS.get(name)
    if handler is not None:
        return handler(node, ctx, depth)
    if name in TRANSPARENT_TAGS or ctx.fallback_to_paragraph:
        return build_blocks(node.contents, ctx, depth + 1)

    ctx.add_warning(
        "ELEMENT_DROPPED",
        f"Unsupported element <{name}> was dropped.",
        tag=name,
    )
    return []


def build_container_content(
    nodes: Iterable[PageElement],
    ctx: BuildContext,
    depth: int,
) -> list[dict]:
    """Convert the children of a list item, table cell or blockquote.

    Children are partitioned into runs.  Each maximal run of inline sources
    (text, inline formatting elements, wrappers with no block descendant)
    is converted by the inline builder and becomes one paragraph, unless
    the run yields nothing or only whitespace.  Every other child is
    converted in block context; any bare inline nodes it yields are
    wrapped as well, so the returned list never holds inline nodes.
    """
    content: list[dict] = []
    run: list[PageElement] = []
    for node in nodes:
        if is_inline_source(node):
            run.append(node)
            continue
        content.extend(_flush_run(run, ctx, depth))
        run = []
        content.extend(_nodes.wrap_inline_runs(convert_block(node, ctx, depth)))
    content.extend(_flush_run(run, ctx, depth))
    return content


def _flush_run(run: list[PageElement], ctx: BuildContext, depth: int) -> list[dict]:
    if not run:
        return []
    inline = build_inline(run, ctx, depth=depth)
    if not inline or _nodes.is_blank_run(inline):
        return []
    return [_nodes.paragraph(inline)]


# ---------------------------------------------------------------------------
# Block builders
# ---------------------------------------------------------------------------

def _build_heading(node: Tag, ctx: BuildContext, depth: int) -> list[dict]:
    level = int(tag_name(node)[1])
    content = build_inline(node.contents, ctx, depth=depth + 1)
    if not content:
        content = [_nodes.text_node("")]
    return [{"type": _nodes.HEADING, "attrs": {"level": level}, "content": content}]


def _build_paragraph(node: Tag, ctx: BuildContext, depth: int) -> list[dict]:
    content = build_inline(node.contents, ctx, depth=depth + 1)
    if not content:
        return []
    return [_nodes.paragraph(content)]


def _build_list(node: Tag, ctx: BuildContext, depth: int) -> list[dict]:
    list_type = _nodes.ORDERED_LIST if tag_name(node) == "ol" else _nodes.BULLET_LIST
    items: list[dict] = []
    for child in node.children:
        if isinstance(child, Tag) and tag_name(child) == "li":
            item = _list_item(child, ctx, depth + 1)
            if item is not None:
                items.append(item)
    if not items:
        return []
    return [{"type": list_type, "content": items}]


def _build_list_item(node: Tag, ctx: BuildContext, depth: int) -> list[dict]:
    item = _list_item(node, ctx, depth)
    return [item] if item is not None else []


def _list_item(node: Tag, ctx: BuildContext, depth: int) -> dict | None:
    content = build_container_content(node.contents, ctx, depth + 1)
    if not content:
        return None
    return {"type": _nodes.LIST_ITEM, "content": content}


def _build_blockquote(node: Tag, ctx: BuildContext, depth: int) -> list[dict]:
    content = build_container_content(node.contents, ctx, depth + 1)
    return [{
        "type": _nodes.BLOCKQUOTE,
        "content": content or [_nodes.empty_paragraph()],
    }]


def _build_code_block(node: Tag, ctx: BuildContext, depth: int) -> list[dict]:
    return [{
        "type": _nodes.CODE_BLOCK,
        "content": [_nodes.text_node(text_content(node))],
    }]


def _build_table(node: Tag, ctx: BuildContext, depth: int) -> list[dict]:
    return build_table(node, ctx, depth, build_container_content)


def _build_hard_break(node: Tag, ctx: BuildContext, depth: int) -> list[dict]:
    return [_nodes.hard_break()]


def _build_horizontal_rule(node: Tag, ctx: BuildContext, depth: int) -> list[dict]:
    return [_nodes.horizontal_rule()]


def _build_image(node: Tag, ctx: BuildContext, depth: int) -> list[dict]:
    return build_image(node, ctx)


def _build_inline_element(node: Tag, ctx: BuildContext, depth: int) -> list[dict]:
    return convert_inline(node, ctx, depth=depth)


def _build_transparent(node: Tag, ctx: BuildContext, depth: int) -> list[dict]:
    return build_blocks(node.contents, ctx, depth + 1)


def _flatten(node: Tag, ctx: BuildContext, depth: int) -> list[dict]:
    ctx.add_warning(
        "NESTING_DEPTH_EXCEEDED",
        f"Element <{tag_name(node)}> exceeds the maximum nesting depth "
        f"({ctx.max_depth}); its content was flattened to text.",
        tag=tag_name(node),
        depth=depth,
    )
    text = text_content(node)
    if not text.strip():
        return []
    return [_nodes.paragraph([_nodes.text_node(text)])]


# ---------------------------------------------------------------------------
# Dispatch table
# ---------------------------------------------------------------------------

_BlockHandler = _Callable[[Tag, BuildContext, int], list[dict]]

_BLOCK_HANDLERS: dict[str, _BlockHandler] = {
    "h1": _build_heading,
    "h2": _build_heading,
    "h3": _build_heading,
    "h4": _build_heading,
    "h5": _build_heading,
    "h6": _build_heading,
    "p": _build_paragraph,
    "div": _build_paragraph,
    "ul": _build_list,
    "ol": _build_list,
    "li": _build_list_item,
    "blockquote": _build_blockquote,
    "pre": _build_code_block,
    "table": _build_table,
    "br": _build_hard_break,
    "hr": _build_horizontal_rule,
    "img": _build_image,
    "u": _build_transparent,
    "strong": _build_inline_element,
    "b": _build_inline_element,
    "em": _build_inline_element,
    "i": _build_inline_element,
    "s": _build_inline_element,
    "strike": _build_inline_element,
    "del": _build_inline_element,
    "code": _build_inline_element,
    "a": _build_inline_element,
    "span": _build_inline_element,
}
