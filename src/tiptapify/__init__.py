"""tiptapify: HTML / Markdown to TipTap document conversion and Markdown export.

Public re-exports
-----------------

* **Importers:** :class:`HtmlToTiptapConverter`, :func:`html_to_tiptap`,
  :class:`MarkdownToTiptapConverter`, :func:`import_markdown_note`,
  :class:`SynologyImporter`
* **Exporter:** :class:`MarkdownExporter`, :func:`export_one`,
  :func:`export_notes`, :func:`sanitize_filename`
* **Configuration:** :class:`TiptapifyConfig`
* **Errors:** Every :class:`TiptapifyError` subclass and :class:`ErrorCode`
* **Models:** All result dataclasses and supporting types

Usage::

    from tiptapify import html_to_tiptap, export_one

    doc = html_to_tiptap("<h1>Hello</h1><p><b>World</b></p>")
    md = export_one("Hello", created, updated, [], doc, [])
"""

from __future__ import annotations

# ── Configuration ───────────────────────────────────────────────────────
from tiptapify.config import DEFAULT_PLACEHOLDER_PATTERNS, TiptapifyConfig

# ── Importers ───────────────────────────────────────────────────────────
from tiptapify.converter import (
    HtmlToTiptapConverter,
    MarkdownToTiptapConverter,
    TiptapToMarkdownRenderer,
    html_to_tiptap,
    import_markdown_note,
    validate_markdown,
)

# ── Errors ──────────────────────────────────────────────────────────────
from tiptapify.errors import (
    ErrorCode,
    TiptapifyArchiveError,
    TiptapifyAttachmentError,
    TiptapifyError,
    TiptapifyExportError,
    TiptapifyNoteError,
    TiptapifyValidationError,
)

# ── Exporter ────────────────────────────────────────────────────────────
from tiptapify.exporter import MarkdownExporter, export_notes, export_one

# ── Models ──────────────────────────────────────────────────────────────
from tiptapify.models import (
    ArchiveAttachment,
    Attachment,
    ConversionResult,
    ConversionWarning,
    ExportOptions,
    ImportedNote,
    ImportFailure,
    ImportResult,
    NoteExport,
    ValidationResult,
)
from tiptapify.synology import SynologyImporter, decode_filename
from tiptapify.utils.filename import sanitize_filename

__version__ = "0.1.0"

# ── Public surface ──────────────────────────────────────────────────────

__all__ = [
    # Importers
    "HtmlToTiptapConverter",
    "html_to_tiptap",
    "MarkdownToTiptapConverter",
    "import_markdown_note",
    "validate_markdown",
    "SynologyImporter",
    "decode_filename",
    # Exporter
    "TiptapToMarkdownRenderer",
    "MarkdownExporter",
    "export_one",
    "export_notes",
    "sanitize_filename",
    # Configuration
    "TiptapifyConfig",
    "DEFAULT_PLACEHOLDER_PATTERNS",
    # Error base + code enum
    "TiptapifyError",
    "ErrorCode",
    # Import errors
    "TiptapifyValidationError",
    "TiptapifyArchiveError",
    "TiptapifyNoteError",
    "TiptapifyAttachmentError",
    # Export errors
    "TiptapifyExportError",
    # Models: results
    "ConversionResult",
    "ConversionWarning",
    "ImportResult",
    "ImportedNote",
    "ImportFailure",
    "ValidationResult",
    # Models: export inputs
    "ExportOptions",
    "NoteExport",
    "Attachment",
    "ArchiveAttachment",
]
