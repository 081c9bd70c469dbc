"""Markdown-to-document conversion pipeline.

:class:`MarkdownToTiptapConverter` runs three stages:

1. **Parse**: Mistune parses raw Markdown into an AST.
2. **Normalize**: :class:`ASTNormalizer` maps token types to canonical names.
3. **Build**: the token handlers below produce document nodes using the
   same node / mark model and container rules as the HTML importer.  Raw
   HTML blocks are routed through the HTML block builder.

:func:`import_markdown_note` turns a whole ``.md`` file into an
:class:`ImportedNote`: the first line is the title, the rest the body.
"""

from __future__ import annotations

import json
import re
import sys
import time
from collections.abc import Callable as _Callable
from collections.abc import Mapping

from tiptapify.config import TiptapifyConfig
from tiptapify.converter import marks as _marks
from tiptapify.converter import nodes as _nodes
from tiptapify.converter.ast_normalizer import ASTNormalizer
from tiptapify.converter.block_builder import build_markup
from tiptapify.converter.context import BuildContext, record_conversion_metrics
from tiptapify.errors import TiptapifyValidationError
from tiptapify.models import ConversionResult, ImportedNote, ValidationResult
from tiptapify.observability import resolve_metrics


class MarkdownToTiptapConverter:
    """Convert Markdown text to a TipTap / ProseMirror JSON document.

    Parameters
    ----------
    config:
        Conversion settings.  Defaults to ``TiptapifyConfig()``.

    Examples
    --------
    >>> converter = MarkdownToTiptapConverter()
    >>> result = converter.convert("# Hello\\n\\n- one\\n- two")
    >>> [node["type"] for node in result.document["content"]]
    ['heading', 'bulletList']
    """

    def __init__(self, config: TiptapifyConfig | None = None) -> None:
        self._config = config if config is not None else TiptapifyConfig()
        self._normalizer = ASTNormalizer()
        self._metrics = resolve_metrics(self._config.metrics)

    def convert(
        self,
        markdown: str,
        image_ref_map: Mapping[str, str] | None = None,
    ) -> ConversionResult:
        """Full pipeline: parse -> normalize -> build nodes.

        Parameters
        ----------
        markdown:
            Raw Markdown text.
        image_ref_map:
            Maps an image URL as written in the Markdown to the URL of an
            uploaded attachment.

        Returns
        -------
        ConversionResult
            The ``doc`` node and any warnings.
        """
        start = time.monotonic()
        ctx = BuildContext(self._config, image_ref_map)

        tokens = self._normalizer.parse(markdown) if markdown else []
        content = _build_blocks(tokens, ctx)
        document = {"type": _nodes.DOC, "content": content or [_nodes.empty_paragraph()]}

        if self._config.debug_dump_document:
            print(
                "[tiptapify] Converted document:",
                json.dumps(document, indent=2, ensure_ascii=False),
                file=sys.stderr,
            )

        record_conversion_metrics(self._metrics, ctx, "markdown", start)
        return ConversionResult(document=document, warnings=ctx.warnings)


# ---------------------------------------------------------------------------
# Block tokens
# ---------------------------------------------------------------------------

def _build_blocks(tokens: list[dict], ctx: BuildContext) -> list[dict]:
    produced: list[dict] = []
    for token in tokens:
        handler = _BLOCK_HANDLERS.get(token.get("type", ""))
        if handler is not None:
            produced.extend(handler(token, ctx))
        elif token.get("type"):
            ctx.add_warning(
                "ELEMENT_DROPPED",
                f"Unsupported Markdown token '{token['type']}' was dropped.",
                token=token["type"],
            )
    return produced


def _container_content(token: dict, ctx: BuildContext) -> list[dict]:
    return _nodes.wrap_inline_runs(_build_blocks(token.get("children", []), ctx))


def _build_heading(token: dict, ctx: BuildContext) -> list[dict]:
    level = token.get("attrs", {}).get("level", 1)
    level = min(max(int(level), 1), 6)
    content = _build_inline(token.get("children", []), ctx)
    if not content:
        content = [_nodes.text_node("")]
    return [{"type": _nodes.HEADING, "attrs": {"level": level}, "content": content}]


def _build_paragraph(token: dict, ctx: BuildContext) -> list[dict]:
    content = _build_inline(token.get("children", []), ctx)
    if not content:
        return []
    return [_nodes.paragraph(content)]


def _build_block_quote(token: dict, ctx: BuildContext) -> list[dict]:
    content = _container_content(token, ctx)
    return [{
        "type": _nodes.BLOCKQUOTE,
        "content": content or [_nodes.empty_paragraph()],
    }]


def _build_list(token: dict, ctx: BuildContext) -> list[dict]:
    attrs = token.get("attrs", {})
    items: list[dict] = []
    for child in token.get("children", []):
        if child.get("type") != "list_item":
            continue
        content = _container_content(child, ctx)
        if content:
            items.append({"type": _nodes.LIST_ITEM, "content": content})
    if not items:
        return []

    if not attrs.get("ordered"):
        return [{"type": _nodes.BULLET_LIST, "content": items}]
    node: dict = {"type": _nodes.ORDERED_LIST, "content": items}
    start = attrs.get("start")
    if start is not None and start != 1:
        node["attrs"] = {"start": start}
    return [node]


def _build_code_block(token: dict, ctx: BuildContext) -> list[dict]:
    node: dict = {
        "type": _nodes.CODE_BLOCK,
        "content": [_nodes.text_node(token.get("raw", ""))],
    }
    info = (token.get("attrs", {}).get("info") or "").strip()
    if info:
        node["attrs"] = {"language": info.split()[0]}
    return [node]


def _build_thematic_break(token: dict, ctx: BuildContext) -> list[dict]:
    return [_nodes.horizontal_rule()]


def _build_table(token: dict, ctx: BuildContext) -> list[dict]:
    rows: list[dict] = []
    for section in token.get("children", []):
        section_type = section.get("type")
        if section_type == "table_head":
            # The head section holds its cells directly
            row = _build_table_row(section.get("children", []), ctx, header=True)
            if row is not None:
                rows.append(row)
        elif section_type == "table_body":
            for tr in section.get("children", []):
                row = _build_table_row(tr.get("children", []), ctx, header=False)
                if row is not None:
                    rows.append(row)
    if not rows:
        return []
    return [{"type": _nodes.TABLE, "content": rows}]


def _build_table_row(cells: list[dict], ctx: BuildContext, *, header: bool) -> dict | None:
    row: list[dict] = []
    for cell in cells:
        if cell.get("type") != "table_cell":
            continue
        is_header = header or bool(cell.get("attrs", {}).get("head"))
        inline = _build_inline(cell.get("children", []), ctx)
        content = [_nodes.paragraph(inline)] if inline else [_nodes.empty_paragraph()]
        row.append({
            "type": _nodes.TABLE_HEADER if is_header else _nodes.TABLE_CELL,
            "content": content,
        })
    if not row:
        return None
    return {"type": _nodes.TABLE_ROW, "content": row}


def _build_html_block(token: dict, ctx: BuildContext) -> list[dict]:
    raw = token.get("raw", "")
    if not raw.strip():
        return []
    return build_markup(raw, ctx)


_BlockHandler = _Callable[[dict, BuildContext], list[dict]]

_BLOCK_HANDLERS: dict[str, _BlockHandler] = {
    "heading": _build_heading,
    "paragraph": _build_paragraph,
    "block_quote": _build_block_quote,
    "list": _build_list,
    "block_code": _build_code_block,
    "thematic_break": _build_thematic_break,
    "table": _build_table,
    "html_block": _build_html_block,
}


# ---------------------------------------------------------------------------
# Inline tokens
# ---------------------------------------------------------------------------

_MARK_TOKENS: dict[str, str] = {
    "strong": _marks.BOLD,
    "emphasis": _marks.ITALIC,
    "strikethrough": _marks.STRIKE,
}

_BR_RE = re.compile(r"^<br\s*/?>$", re.IGNORECASE)


def _build_inline(
    tokens: list[dict],
    ctx: BuildContext,
    marks: _marks.Marks = _marks.NO_MARKS,
) -> list[dict]:
    """Convert normalized inline tokens, threading inherited *marks*."""
    produced: list[dict] = []
    for token in tokens:
        token_type = token.get("type", "")

        if token_type == "text":
            raw = token.get("raw", "")
            if raw:
                produced.append(_nodes.text_node(raw, marks))

        elif token_type in _MARK_TOKENS:
            inner = _marks.add_mark(marks, _marks.make_mark(_MARK_TOKENS[token_type]))
            produced.extend(_build_inline(token.get("children", []), ctx, inner))

        elif token_type == "codespan":
            raw = token.get("raw", "")
            if raw:
                inner = _marks.add_mark(marks, _marks.make_mark(_marks.CODE))
                produced.append(_nodes.text_node(raw, inner))

        elif token_type == "link":
            url = token.get("attrs", {}).get("url", "")
            inner = marks
            if url:
                inner = _marks.add_mark(marks, _marks.make_mark(_marks.LINK, href=url))
            produced.extend(_build_inline(token.get("children", []), ctx, inner))

        elif token_type == "image":
            produced.extend(_build_image(token, ctx, marks))

        elif token_type == "softbreak":
            # Soft break in markdown = single newline, usually rendered as space
            produced.append(_nodes.text_node(" ", marks))

        elif token_type == "linebreak":
            produced.append(_nodes.hard_break())

        elif token_type == "html_inline":
            raw = token.get("raw", "")
            if _BR_RE.match(raw.strip()):
                produced.append(_nodes.hard_break())
            elif raw:
                # Render raw HTML as plain text
                produced.append(_nodes.text_node(raw, marks))

    return produced


def _build_image(token: dict, ctx: BuildContext, marks: _marks.Marks) -> list[dict]:
    url = token.get("attrs", {}).get("url", "")
    src = ctx.resolve_image_source(url, url)
    if src is None:
        ctx.add_warning(
            "IMAGE_DROPPED",
            "Image without a resolvable source was dropped.",
            src=url,
        )
        return []
    alt = "".join(
        _nodes.plain_text(node) for node in _build_inline(token.get("children", []), ctx)
    )
    return [_nodes.image_node(src, alt, _marks.marks_for_image(marks))]


# ---------------------------------------------------------------------------
# Whole-file import
# ---------------------------------------------------------------------------

_TITLE_MARKER_RE = re.compile(r"^#+\s*")


def _decode(data: str | bytes) -> str:
    if isinstance(data, (bytes, bytearray)):
        return bytes(data).decode("utf-8")
    return data


def validate_markdown(data: str | bytes) -> ValidationResult:
    """Check that *data* is a non-empty UTF-8 Markdown payload."""
    try:
        text = _decode(data)
    except UnicodeDecodeError as exc:
        return ValidationResult(valid=False, errors=[f"File is not valid UTF-8: {exc.reason}"])
    if not text.strip():
        return ValidationResult(valid=False, errors=["Empty markdown file"])
    return ValidationResult(valid=True)


def import_markdown_note(
    data: str | bytes,
    config: TiptapifyConfig | None = None,
    *,
    source: str = "",
) -> ImportedNote:
    """Import one Markdown file as a note.

    The first line, with any leading ``#`` markers removed, becomes the
    title; the remaining lines are converted as the body.

    Raises
    ------
    TiptapifyValidationError
        If *data* is empty, whitespace-only or not UTF-8.
    """
    config = config if config is not None else TiptapifyConfig()
    validation = validate_markdown(data)
    if not validation.valid:
        raise TiptapifyValidationError(
            validation.errors[0],
            context={"format": "markdown", "reason": validation.errors[0], "source": source},
        )

    text = _decode(data).lstrip("\ufeff").replace("\r\n", "\n")
    first_line, _, body = text.partition("\n")
    title = _TITLE_MARKER_RE.sub("", first_line).strip() or config.default_title

    result = MarkdownToTiptapConverter(config).convert(body.strip())
    return ImportedNote(
        title=title,
        content=result.document,
        warnings=result.warnings,
        source=source,
    )
