"""HTML / Markdown ↔ TipTap document conversion pipeline.

Public API:

- :class:`HtmlToTiptapConverter`: HTML → document.
- :func:`html_to_tiptap`: HTML → document, returning only the ``doc`` node.
- :class:`MarkdownToTiptapConverter`: Markdown → document.
- :class:`TiptapToMarkdownRenderer`: document → Markdown body.
- :class:`ASTNormalizer`: parse and normalize Markdown to canonical AST.
- :func:`build_blocks`: convert a parsed HTML tree to document nodes.
- :func:`parse_markup` / :func:`clean_html`: HTML front end helpers.
"""

from tiptapify.converter.ast_normalizer import ASTNormalizer
from tiptapify.converter.block_builder import build_blocks
from tiptapify.converter.html_to_tiptap import HtmlToTiptapConverter, html_to_tiptap
from tiptapify.converter.markup import clean_html, parse_markup
from tiptapify.converter.md_to_tiptap import (
    MarkdownToTiptapConverter,
    import_markdown_note,
    validate_markdown,
)
from tiptapify.converter.tiptap_to_md import TiptapToMarkdownRenderer

__all__ = [
    "ASTNormalizer",
    "HtmlToTiptapConverter",
    "MarkdownToTiptapConverter",
    "TiptapToMarkdownRenderer",
    "build_blocks",
    "clean_html",
    "html_to_tiptap",
    "import_markdown_note",
    "parse_markup",
    "validate_markdown",
]
