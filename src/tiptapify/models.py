"""Public data models for tiptapify.

This module contains every result type, warning type, option type and
supporting dataclass referenced by the public API surface.  Documents
themselves are not modelled here: a document is a plain JSON-compatible
``dict`` (see :mod:`tiptapify.converter.nodes`).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal

# ---------------------------------------------------------------------------
# Conversion warnings
# ---------------------------------------------------------------------------

@dataclass
class ConversionWarning:
    """A non-fatal issue encountered during import or export.

    Warnings are accumulated in result objects so callers can inspect
    them after the operation completes.

    Attributes
    ----------
    code:
        A machine-readable warning code (e.g. ``"IMAGE_DROPPED"``).
    message:
        A human-readable description of the issue.
    context:
        Arbitrary structured data for diagnostics.
    """

    code: str
    message: str
    context: dict = field(default_factory=dict)


@dataclass
class ConversionResult:
    """Output of an import conversion.

    Attributes
    ----------
    document:
        The ``doc`` root node.  Always well-formed; at minimum
        ``{"type": "doc", "content": [{"type": "paragraph"}]}``.
    warnings:
        Non-fatal issues discovered during conversion (dropped images,
        dropped elements, flattened subtrees).
    """

    document: dict
    warnings: list[ConversionWarning] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Export types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Attachment:
    """A file attached to a note, as listed in an export.

    Attributes
    ----------
    filename:
        Display name of the file.
    path:
        Storage-relative path or URL of the file.
    """

    filename: str
    path: str


@dataclass
class ExportOptions:
    """Options controlling the Markdown export.

    Attributes
    ----------
    include_metadata:
        Emit a ``---`` delimited front-matter block with timestamps and tags.
    include_attachments:
        Append an ``## Attachments`` section listing the note's files.
    format:
        Only ``"zip"`` forces an archive for a single note.  With ``"single"``
        or ``"folder"`` one note is exported as plain Markdown bytes; several
        notes always produce an archive.
    preserve_structure:
        Place archive entries under their note's folder name.
    """

    include_metadata: bool = False
    include_attachments: bool = False
    format: Literal["single", "zip", "folder"] = "single"
    preserve_structure: bool = False


@dataclass
class NoteExport:
    """Everything the exporter needs to know about one note."""

    title: str
    created_at: datetime
    updated_at: datetime
    content: dict
    tags: list[str] = field(default_factory=list)
    attachments: list[Attachment] = field(default_factory=list)
    folder: str | None = None


# ---------------------------------------------------------------------------
# Import types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ArchiveAttachment:
    """An attachment entry from a NoteStation note.

    Attributes
    ----------
    name:
        Original file name.
    md5:
        Content hash; the file is stored as ``file_<md5>`` in the archive.
    ref:
        Opaque reference token used by ``<img ref="...">`` in the note HTML.
    mime_type:
        MIME type declared by the archive.
    size:
        Size in bytes declared by the archive.
    """

    name: str
    md5: str
    ref: str
    mime_type: str = "application/octet-stream"
    size: int = 0

    @property
    def is_image(self) -> bool:
        return self.mime_type.startswith("image/")


@dataclass
class ImportedNote:
    """A note produced by one of the importers, ready to be persisted.

    Attributes
    ----------
    title:
        Note title (never empty; falls back to the configured default).
    content:
        The converted ``doc`` document.
    folder:
        Title of the notebook the note belongs to, if any.
    tags:
        Tag names in source order.
    created_at / updated_at:
        Source timestamps, set only when timestamps are preserved.
    attachments:
        Non-image attachments that were uploaded for this note.  Images are
        referenced inline by the document and not listed here.
    warnings:
        Non-fatal issues from conversion and attachment upload.
    source:
        Archive member (or other origin) the note was read from.
    """

    title: str
    content: dict
    folder: str | None = None
    tags: list[str] = field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None
    attachments: list[Attachment] = field(default_factory=list)
    warnings: list[ConversionWarning] = field(default_factory=list)
    source: str = ""


@dataclass
class ImportFailure:
    """A per-item failure recorded during a batch import."""

    file: str
    error: str


@dataclass
class ImportResult:
    """Result of :meth:`SynologyImporter.import_archive`.

    Attributes
    ----------
    success:
        ``True`` when the archive itself could be processed, even if some
        individual notes failed (see :attr:`errors`).
    notes:
        Successfully converted notes, in archive order.
    folders:
        Notebook titles keyed by their archive id.
    attachments_imported:
        Number of attachments handed to the uploader successfully.
    errors:
        Per-item failures.
    """

    success: bool = False
    notes: list[ImportedNote] = field(default_factory=list)
    folders: dict[str, str] = field(default_factory=dict)
    attachments_imported: int = 0
    errors: list[ImportFailure] = field(default_factory=list)

    @property
    def notes_created(self) -> int:
        return len(self.notes)

    @property
    def folders_created(self) -> int:
        return len(self.folders)


@dataclass
class ValidationResult:
    """Outcome of validating an import payload before conversion."""

    valid: bool
    errors: list[str] = field(default_factory=list)
