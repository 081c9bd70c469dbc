"""Markdown export of notes.

A single note exports as Markdown text::

    # Title

    ---
    created: 2024-01-02T03:04:05.000Z
    updated: 2024-01-03T00:00:00.000Z
    tags: work, ideas
    ---

    <body rendered from the document>

    ## Attachments

    - [report.pdf](attachments/report.pdf)

The front matter and the attachments section are optional (see
:class:`ExportOptions`).  Several notes, or any request for the ``zip``
format, produce a ZIP archive with one ``.md`` entry per note.
"""

from __future__ import annotations

import io
import zipfile
from collections.abc import Iterable, Sequence
from datetime import datetime

from tiptapify.config import TiptapifyConfig
from tiptapify.converter.tiptap_to_md import TiptapToMarkdownRenderer
from tiptapify.errors import TiptapifyExportError
from tiptapify.models import Attachment, ConversionWarning, ExportOptions, NoteExport
from tiptapify.observability import get_logger, resolve_metrics
from tiptapify.utils.filename import sanitize_filename, unique_name
from tiptapify.utils.timestamps import format_timestamp

log = get_logger("tiptapify.exporter")

FRONT_MATTER_DELIMITER = "---"
MARKDOWN_EXTENSION = ".md"


class MarkdownExporter:
    """Render notes to Markdown and package them for download.

    Parameters
    ----------
    config:
        Controls the unsupported-node policy of the body renderer and the
        filename length.  Defaults to ``TiptapifyConfig()``.

    Attributes
    ----------
    warnings:
        Warnings from the most recent :meth:`export_one` or
        :meth:`export_notes` call.
    """

    def __init__(self, config: TiptapifyConfig | None = None) -> None:
        self._config = config if config is not None else TiptapifyConfig()
        self._renderer = TiptapToMarkdownRenderer(self._config)
        self._metrics = resolve_metrics(self._config.metrics)
        self.warnings: list[ConversionWarning] = []

    def export_one(
        self,
        title: str,
        created_at: datetime | str,
        updated_at: datetime | str,
        tags: Sequence[str],
        document: dict,
        attachments: Sequence[Attachment],
        options: ExportOptions | None = None,
    ) -> str:
        """Render one note to Markdown text.

        Parameters
        ----------
        title:
            Note title, emitted as the level-1 heading.
        created_at / updated_at:
            Timestamps for the front matter.
        tags:
            Tag names; the ``tags`` line is omitted when empty.
        document:
            The note's ``doc`` node.
        attachments:
            Files listed in the attachments section.
        options:
            Export options.  Defaults to ``ExportOptions()``.

        Returns
        -------
        str
            The Markdown text with trailing whitespace removed.
        """
        options = options if options is not None else ExportOptions()
        self.warnings = []
        return self._render(
            title, created_at, updated_at, tags, document, attachments, options,
        )

    def export_notes(
        self,
        notes: Sequence[NoteExport],
        options: ExportOptions | None = None,
    ) -> bytes:
        """Export *notes* as Markdown bytes or as a ZIP archive.

        One note with a format other than ``"zip"`` yields its Markdown
        encoded as UTF-8.  Otherwise every note becomes an entry named after
        its sanitized title, placed under its sanitized folder when
        ``options.preserve_structure`` is set.  Clashing entry names get a
        ``_2``, ``_3``... suffix.

        Raises
        ------
        TiptapifyExportError
            If *notes* is empty.
        """
        options = options if options is not None else ExportOptions()
        if not notes:
            raise TiptapifyExportError(
                "No notes to export.",
                context={"note_count": 0, "format": options.format},
            )

        self.warnings = []
        if len(notes) == 1 and options.format != "zip":
            note = notes[0]
            payload = self._render_note(note, options).encode("utf-8")
            self._metrics.increment(
                "tiptapify.notes_exported_total", tags={"format": "single"},
            )
            self._metrics.gauge(
                "tiptapify.export_size_bytes", len(payload), tags={"format": "single"},
            )
            return payload

        buffer = io.BytesIO()
        taken: set[str] = set()
        with zipfile.ZipFile(
            buffer, "w", compression=zipfile.ZIP_DEFLATED, compresslevel=9,
        ) as archive:
            for note in notes:
                entry = unique_name(self._entry_name(note, options), taken)
                archive.writestr(entry, self._render_note(note, options).encode("utf-8"))

        log.info(
            "notes exported",
            extra={"extra_fields": {
                "op": "export_notes",
                "notes": len(notes),
                "format": "zip",
                "warnings": len(self.warnings),
            }},
        )
        payload = buffer.getvalue()
        self._metrics.increment(
            "tiptapify.notes_exported_total", value=len(notes), tags={"format": "zip"},
        )
        self._metrics.gauge(
            "tiptapify.export_size_bytes", len(payload), tags={"format": "zip"},
        )
        return payload

    def entry_filename(self, title: str) -> str:
        """Return the ``.md`` filename used for a note called *title*."""
        stem = sanitize_filename(title, self._config.filename_max_length)
        if not stem:
            stem = sanitize_filename(
                self._config.default_title, self._config.filename_max_length,
            ) or "untitled"
        return stem + MARKDOWN_EXTENSION

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _render_note(self, note: NoteExport, options: ExportOptions) -> str:
        return self._render(
            note.title, note.created_at, note.updated_at, note.tags,
            note.content, note.attachments, options,
        )

    def _render(
        self,
        title: str,
        created_at: datetime | str,
        updated_at: datetime | str,
        tags: Iterable[str],
        document: dict,
        attachments: Sequence[Attachment],
        options: ExportOptions,
    ) -> str:
        parts = [f"# {title}\n\n"]

        if options.include_metadata:
            parts.append(_front_matter(created_at, updated_at, tags))

        parts.append(self._renderer.render_document(document))
        self.warnings.extend(self._renderer.warnings)

        if options.include_attachments and attachments:
            parts.append("\n\n## Attachments\n\n")
            parts.extend(f"- [{item.filename}]({item.path})\n" for item in attachments)

        return "".join(parts).rstrip()

    def _entry_name(self, note: NoteExport, options: ExportOptions) -> str:
        filename = self.entry_filename(note.title)
        if not (options.preserve_structure and note.folder):
            return filename
        # A folder made only of dots would escape the archive root
        folder = sanitize_filename(note.folder, self._config.filename_max_length).strip(".")
        if not folder:
            return filename
        return f"{folder}/{filename}"


def _front_matter(
    created_at: datetime | str,
    updated_at: datetime | str,
    tags: Iterable[str],
) -> str:
    lines = [
        FRONT_MATTER_DELIMITER,
        f"created: {format_timestamp(created_at)}",
        f"updated: {format_timestamp(updated_at)}",
    ]
    tag_names = [str(tag) for tag in tags]
    if tag_names:
        lines.append(f"tags: {', '.join(tag_names)}")
    lines.append(FRONT_MATTER_DELIMITER)
    return "\n".join(lines) + "\n\n"


# ---------------------------------------------------------------------------
# Convenience functions
# ---------------------------------------------------------------------------

def export_one(
    title: str,
    created_at: datetime | str,
    updated_at: datetime | str,
    tags: Sequence[str],
    document: dict,
    attachments: Sequence[Attachment],
    options: ExportOptions | None = None,
    config: TiptapifyConfig | None = None,
) -> str:
    """Render one note to Markdown text.  See :meth:`MarkdownExporter.export_one`."""
    return MarkdownExporter(config).export_one(
        title, created_at, updated_at, tags, document, attachments, options,
    )


def export_notes(
    notes: Sequence[NoteExport],
    options: ExportOptions | None = None,
    config: TiptapifyConfig | None = None,
) -> bytes:
    """Export notes as Markdown or ZIP bytes.  See :meth:`MarkdownExporter.export_notes`."""
    return MarkdownExporter(config).export_notes(notes, options)
