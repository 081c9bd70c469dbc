"""Parse Markdown and normalize to canonical AST tokens.

This module wraps mistune v3's AST renderer and normalises the raw token
stream into a well-defined set of canonical types used by the Markdown
importer.

Canonical block tokens:
    heading, paragraph, block_quote, list, list_item, block_code, table,
    thematic_break, html_block

Canonical inline tokens:
    text, strong, emphasis, codespan, strikethrough, link, image,
    softbreak, linebreak, html_inline
"""

from __future__ import annotations

import mistune

# ---------------------------------------------------------------------------
# Mistune-to-canonical type mapping
# ---------------------------------------------------------------------------

_BLOCK_TYPE_MAP: dict[str, str] = {
    "heading": "heading",
    "paragraph": "paragraph",
    "block_quote": "block_quote",
    "list": "list",
    "list_item": "list_item",
    "block_code": "block_code",
    "table": "table",
    "thematic_break": "thematic_break",
    "block_html": "html_block",
    # Tight list items wrap their text in block_text
    "block_text": "paragraph",
}

_INLINE_TYPE_MAP: dict[str, str] = {
    "text": "text",
    "strong": "strong",
    "emphasis": "emphasis",
    "codespan": "codespan",
    "strikethrough": "strikethrough",
    "link": "link",
    "image": "image",
    "softbreak": "softbreak",
    "linebreak": "linebreak",
    "inline_html": "html_inline",
}

_TABLE_PART_TYPES: frozenset[str] = frozenset({
    "table_head", "table_body", "table_row", "table_cell",
})

# Types that carry their payload in ``raw`` and have no children
_RAW_TYPES: frozenset[str] = frozenset({
    "text", "codespan", "html_inline", "html_block",
})

_SKIP_TYPES: frozenset[str] = frozenset({
    "blank_line",
})

PLUGINS: tuple[str, ...] = ("strikethrough", "table", "url")


class ASTNormalizer:
    """Parse Markdown and normalize to canonical AST tokens."""

    def __init__(self) -> None:
        self._parser = mistune.create_markdown(
            renderer="ast",
            plugins=list(PLUGINS),
        )

    def parse(self, markdown: str) -> list[dict]:
        """Parse markdown and return normalized AST token list."""
        raw_tokens = self._parser(markdown)
        if isinstance(raw_tokens, str):
            return []
        return self._normalize_tokens(raw_tokens)

    def _normalize_tokens(self, tokens: list[dict]) -> list[dict]:
        result: list[dict] = []
        for token in tokens:
            normalized = self._normalize_token(token)
            if normalized is not None:
                result.append(normalized)
        return result

    def _normalize_token(self, token: dict) -> dict | None:
        """Normalize a single token, returning None if it should be skipped."""
        raw_type = token.get("type", "")
        if raw_type in _SKIP_TYPES:
            return None

        if raw_type in _BLOCK_TYPE_MAP:
            canonical = _BLOCK_TYPE_MAP[raw_type]
        elif raw_type in _INLINE_TYPE_MAP:
            canonical = _INLINE_TYPE_MAP[raw_type]
        elif raw_type in _TABLE_PART_TYPES:
            canonical = raw_type
        elif raw_type == "raw":
            # Used by mistune inside some code-bearing tokens
            return {"type": "text", "raw": token.get("raw", "")}
        else:
            return None

        result: dict = {"type": canonical}
        attrs = token.get("attrs")
        if attrs:
            result["attrs"] = dict(attrs)

        if canonical in _RAW_TYPES:
            result["raw"] = token.get("raw", "")
            return result

        if canonical == "block_code":
            raw_code = token.get("raw", "")
            # Strip trailing newline added by mistune
            if raw_code.endswith("\n"):
                raw_code = raw_code[:-1]
            result["raw"] = raw_code
            return result

        children = token.get("children")
        if children:
            result["children"] = self._normalize_tokens(children)
        return result
