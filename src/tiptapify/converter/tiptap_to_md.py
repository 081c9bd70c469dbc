"""Document to Markdown body renderer.

Renders the top-level nodes of a ``doc`` into Markdown text.  The walk is
deliberately shallow and covers three node types:

- ``paragraph`` -> the concatenated ``text`` of its children, then a blank
  line
- ``heading`` -> ``#`` repeated ``attrs.level`` times, a space, the text,
  then a blank line
- ``bulletList`` -> one ``- `` line per item, built from the text of the
  item's first child, then a blank line

Marks are not rendered.  Other node types go through the unsupported-node
policy.

Usage::

    from tiptapify.converter.tiptap_to_md import TiptapToMarkdownRenderer

    renderer = TiptapToMarkdownRenderer()
    md = renderer.render_document(document)
"""

from __future__ import annotations

from collections.abc import Callable as _Callable

from tiptapify.config import TiptapifyConfig
from tiptapify.converter.nodes import (
    BULLET_LIST,
    HEADING,
    PARAGRAPH,
    TEXT,
    children,
    plain_text,
)
from tiptapify.models import ConversionWarning


class TiptapToMarkdownRenderer:
    """Stateful renderer that converts a document body to Markdown.

    The renderer accumulates :class:`ConversionWarning` instances in
    :attr:`warnings` during a :meth:`render_document` call so that callers
    can inspect skipped nodes after rendering completes.

    Parameters
    ----------
    config:
        Controls ``unsupported_node_policy``.  Defaults to
        ``TiptapifyConfig()``.
    """

    def __init__(self, config: TiptapifyConfig | None = None) -> None:
        self._config = config if config is not None else TiptapifyConfig()
        self.warnings: list[ConversionWarning] = []

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def render_document(self, document: object) -> str:
        """Render the top-level content of *document* to Markdown.

        Never raises: a non-dict document, or one without a ``content``
        list, renders as the empty string.

        Returns
        -------
        str
            The rendered body with leading and trailing whitespace removed.
        """
        self.warnings = []
        parts = [self._dispatch(node) for node in children(document)]
        return "".join(parts).strip()

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _dispatch(self, node: dict) -> str:
        node_type = node.get("type")
        renderer = _NODE_RENDERERS.get(node_type) if isinstance(node_type, str) else None
        if renderer is not None:
            return renderer(self, node)
        return self._render_unsupported(node)

    def _render_paragraph(self, node: dict) -> str:
        return f"{_join_text(node)}\n\n"

    def _render_heading(self, node: dict) -> str:
        return f"{'#' * _heading_level(node)} {_join_text(node)}\n\n"

    def _render_bullet_list(self, node: dict) -> str:
        lines: list[str] = []
        for item in children(node):
            item_children = children(item)
            text = _join_text(item_children[0]) if item_children else ""
            lines.append(f"- {text}\n")
        return "".join(lines) + "\n"

    def _render_unsupported(self, node: dict) -> str:
        """Handle node types outside the minimal set.

        Behaviour is governed by ``config.unsupported_node_policy``:

        * ``"skip"`` -- omit the node.
        * ``"text"`` -- emit its plain text as a paragraph.

        Either way an ``UNSUPPORTED_NODE`` warning is recorded.
        """
        node_type = node.get("type")
        if not isinstance(node_type, str):
            node_type = "unknown"
        self.warnings.append(ConversionWarning(
            code="UNSUPPORTED_NODE",
            message=f"Node type '{node_type}' has no Markdown rendering.",
            context={"node_type": node_type},
        ))
        if self._config.unsupported_node_policy == "skip":
            return ""
        text = plain_text(node).strip()
        return f"{text}\n\n" if text else ""


# ------------------------------------------------------------------
# Node renderer dispatch table
# ------------------------------------------------------------------

_NodeRenderer = _Callable[["TiptapToMarkdownRenderer", dict], str]

_NODE_RENDERERS: dict[str, _NodeRenderer] = {
    PARAGRAPH: TiptapToMarkdownRenderer._render_paragraph,
    HEADING: TiptapToMarkdownRenderer._render_heading,
    BULLET_LIST: TiptapToMarkdownRenderer._render_bullet_list,
}

# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------


def _join_text(node: dict) -> str:
    """Concatenate the ``text`` of the direct text children of *node*."""
    parts: list[str] = []
    for child in children(node):
        if child.get("type") != TEXT:
            continue
        text = child.get("text")
        if isinstance(text, str):
            parts.append(text)
    return "".join(parts)


def _heading_level(node: dict) -> int:
    attrs = node.get("attrs")
    level = attrs.get("level") if isinstance(attrs, dict) else None
    if isinstance(level, bool) or not isinstance(level, int) or level < 1:
        return 1
    return level
