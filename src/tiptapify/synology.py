"""Synology NoteStation (``.nsx``) archive importer.

An ``.nsx`` export is a ZIP archive laid out as::

    config.json          {"note": [<note ids>], "notebook": [<notebook ids>], ...}
    <notebook id>        JSON: title, ctime, mtime, stack
    <note id>            JSON: title, parent_id, content (HTML), tag,
                         attachment, ctime, mtime, encrypt
    file_<md5>           raw bytes of an attachment

:class:`SynologyImporter` reads the archive in memory, hands every
attachment to a caller-supplied *uploader* and converts each note body
with :class:`~tiptapify.converter.HtmlToTiptapConverter`, rewriting
``<img ref="...">`` references to the uploaded URLs.  Persisting the
resulting :class:`ImportedNote` values is left to the caller.

Usage::

    from tiptapify.synology import SynologyImporter

    def upload(data: bytes, attachment: ArchiveAttachment) -> str:
        return storage.save(attachment.name, data)

    result = SynologyImporter().import_archive("backup.nsx", upload)
    for note in result.notes:
        ...
"""

from __future__ import annotations

import base64
import binascii
import io
import json
import os
import re
import zipfile
from collections.abc import Callable, Mapping
from typing import NoReturn

from tiptapify.config import TiptapifyConfig
from tiptapify.converter.html_to_tiptap import HtmlToTiptapConverter
from tiptapify.converter.markup import clean_html
from tiptapify.errors import (
    TiptapifyArchiveError,
    TiptapifyAttachmentError,
    TiptapifyNoteError,
)
from tiptapify.models import (
    ArchiveAttachment,
    Attachment,
    ConversionWarning,
    ImportedNote,
    ImportFailure,
    ImportResult,
)
from tiptapify.observability import get_logger, resolve_metrics
from tiptapify.utils.hashing import md5_hash
from tiptapify.utils.timestamps import from_epoch_seconds

log = get_logger("tiptapify.synology")

CONFIG_MEMBER = "config.json"
ROOT_NOTEBOOK_ID = "1031_#00000000"
"""Parent id NoteStation gives notes that live outside any notebook."""

Uploader = Callable[[bytes, ArchiveAttachment], str]
"""Stores one attachment and returns the URL the document should use."""

# Failures that mean a single archive member is unusable
_MEMBER_ERRORS = (
    KeyError,
    ValueError,
    TypeError,
    OSError,
    zipfile.BadZipFile,
    TiptapifyNoteError,
)


class SynologyImporter:
    """Import notes and notebooks from a NoteStation archive.

    Parameters
    ----------
    config:
        Conversion settings, also used for the default note title and the
        metrics backend.  Defaults to ``TiptapifyConfig()``.
    """

    def __init__(self, config: TiptapifyConfig | None = None) -> None:
        self._config = config if config is not None else TiptapifyConfig()
        self._converter = HtmlToTiptapConverter(self._config)
        self._metrics = resolve_metrics(self._config.metrics)

    def import_archive(
        self,
        source: str | os.PathLike[str] | bytes,
        uploader: Uploader | None = None,
        *,
        preserve_timestamps: bool = False,
        skip_errors: bool = True,
    ) -> ImportResult:
        """Import every notebook and note in the archive at *source*.

        Parameters
        ----------
        source:
            Path to the ``.nsx`` file, or its raw bytes.
        uploader:
            Called as ``uploader(data, attachment)`` for every attachment
            present in the archive; must return the URL to reference it by.
            When ``None``, attachments are not imported and images that
            depend on them are dropped.
        preserve_timestamps:
            Copy ``ctime`` / ``mtime`` onto the imported notes.
        skip_errors:
            Record per-note failures in :attr:`ImportResult.errors` and carry
            on.  When ``False`` the first failure is raised.

        Returns
        -------
        ImportResult

        Raises
        ------
        TiptapifyArchiveError
            If *source* is not a readable ZIP archive or has no valid
            ``config.json``.
        TiptapifyNoteError
            If a note or notebook fails and *skip_errors* is ``False``.
        """
        result = ImportResult()
        label = source if isinstance(source, (str, os.PathLike)) else "<bytes>"
        try:
            archive = zipfile.ZipFile(
                io.BytesIO(source) if isinstance(source, (bytes, bytearray)) else source,
            )
        except (OSError, zipfile.BadZipFile) as exc:
            raise TiptapifyArchiveError(
                f"Cannot open NoteStation archive: {exc}",
                context={"source": str(label)},
                cause=exc,
            ) from exc

        with archive:
            index = self._load_index(archive, str(label))
            self._import_notebooks(archive, index["notebook"], result, skip_errors)
            for note_id in index["note"]:
                try:
                    note = self._import_note(
                        archive, note_id, result, uploader, preserve_timestamps,
                    )
                except _MEMBER_ERRORS as exc:
                    self._record_failure(result, note_id, "note", exc)
                    if not skip_errors:
                        _reraise(note_id, "note", exc)
                    continue
                result.notes.append(note)
                self._metrics.increment("tiptapify.notes_imported_total")

        result.success = True
        log.info(
            "archive imported",
            extra={"extra_fields": {
                "op": "import_archive",
                "source": str(label),
                "notes": result.notes_created,
                "folders": result.folders_created,
                "attachments": result.attachments_imported,
                "errors": len(result.errors),
            }},
        )
        return result

    # ------------------------------------------------------------------
    # Archive members
    # ------------------------------------------------------------------

    def _load_index(self, archive: zipfile.ZipFile, label: str) -> dict[str, list[str]]:
        try:
            data = _read_json(archive, CONFIG_MEMBER)
        except (KeyError, ValueError, OSError, zipfile.BadZipFile) as exc:
            raise TiptapifyArchiveError(
                f"Archive has no readable {CONFIG_MEMBER}: {exc}",
                context={"source": label, "member": CONFIG_MEMBER},
                cause=exc,
            ) from exc
        index: dict[str, list[str]] = {}
        for key in ("note", "notebook"):
            ids = data.get(key) or []
            if not isinstance(ids, list):
                raise TiptapifyArchiveError(
                    f"{CONFIG_MEMBER} field '{key}' must be a list.",
                    context={"source": label, "member": CONFIG_MEMBER},
                )
            index[key] = [str(item) for item in ids]
        return index

    def _import_notebooks(
        self,
        archive: zipfile.ZipFile,
        notebook_ids: list[str],
        result: ImportResult,
        skip_errors: bool,
    ) -> None:
        for notebook_id in notebook_ids:
            try:
                data = _read_json(archive, notebook_id)
                title = str(data.get("title") or "").strip() or decode_filename(notebook_id)
            except _MEMBER_ERRORS as exc:
                self._record_failure(result, notebook_id, "notebook", exc)
                if not skip_errors:
                    _reraise(notebook_id, "notebook", exc)
                continue
            result.folders[notebook_id] = title

    def _import_note(
        self,
        archive: zipfile.ZipFile,
        note_id: str,
        result: ImportResult,
        uploader: Uploader | None,
        preserve_timestamps: bool,
    ) -> ImportedNote:
        data = _read_json(archive, note_id)
        if data.get("encrypt"):
            raise TiptapifyNoteError(
                "Note is encrypted and cannot be imported.",
                context={"file": note_id, "kind": "note"},
            )

        attachments = parse_attachments(data.get("attachment"))
        warnings: list[ConversionWarning] = []
        ref_map: dict[str, str] = {}
        listed: list[Attachment] = []
        if uploader is not None:
            for attachment in attachments:
                url = self._upload(archive, attachment, uploader, warnings)
                if url is None:
                    continue
                result.attachments_imported += 1
                self._metrics.increment("tiptapify.attachments_imported_total")
                if attachment.ref:
                    ref_map[attachment.ref] = url
                if not attachment.is_image:
                    listed.append(Attachment(filename=attachment.name, path=url))

        content = data.get("content")
        conversion = self._converter.convert(
            clean_html(content if isinstance(content, str) else ""),
            ref_map,
        )
        warnings.extend(conversion.warnings)

        parent_id = data.get("parent_id")
        tags = data.get("tag") or []
        note = ImportedNote(
            title=str(data.get("title") or "").strip() or self._config.default_title,
            content=conversion.document,
            folder=result.folders.get(parent_id) if parent_id != ROOT_NOTEBOOK_ID else None,
            tags=[str(tag) for tag in tags if tag] if isinstance(tags, list) else [],
            attachments=listed,
            warnings=warnings,
            source=note_id,
        )
        if preserve_timestamps:
            note.created_at = from_epoch_seconds(data.get("ctime"))
            note.updated_at = from_epoch_seconds(data.get("mtime"))
        return note

    def _upload(
        self,
        archive: zipfile.ZipFile,
        attachment: ArchiveAttachment,
        uploader: Uploader,
        warnings: list[ConversionWarning],
    ) -> str | None:
        member = f"file_{attachment.md5}"
        try:
            data = archive.read(member)
        except KeyError:
            warnings.append(ConversionWarning(
                code="ATTACHMENT_MISSING",
                message=f"Attachment '{attachment.name}' is not in the archive.",
                context={"name": attachment.name, "member": member},
            ))
            return None

        if attachment.md5 and md5_hash(data) != attachment.md5.lower():
            warnings.append(ConversionWarning(
                code="ATTACHMENT_CHECKSUM_MISMATCH",
                message=f"Attachment '{attachment.name}' does not match its MD5.",
                context={"name": attachment.name, "md5": attachment.md5},
            ))

        try:
            return uploader(data, attachment)
        except Exception as exc:
            error = TiptapifyAttachmentError(
                f"Upload of '{attachment.name}' failed: {exc}",
                context={"name": attachment.name, "ref": attachment.ref, "md5": attachment.md5},
                cause=exc,
            )
            log.warning(
                "attachment upload failed",
                extra={"extra_fields": {
                    "op": "upload_attachment",
                    "error_code": error.code,
                    **error.context,
                    "error": str(exc),
                }},
            )
            warnings.append(ConversionWarning(
                code="ATTACHMENT_UPLOAD_FAILED",
                message=error.message,
                context=dict(error.context),
            ))
            return None

    def _record_failure(
        self, result: ImportResult, member: str, kind: str, exc: Exception,
    ) -> None:
        message = exc.message if isinstance(exc, TiptapifyNoteError) else str(exc)
        result.errors.append(ImportFailure(file=member, error=message or type(exc).__name__))
        self._metrics.increment("tiptapify.import_errors_total", tags={"kind": kind})
        log.warning(
            f"{kind} import failed",
            extra={"extra_fields": {
                "op": f"import_{kind}",
                "file": member,
                "error_type": type(exc).__name__,
                "error": message,
            }},
        )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def parse_attachments(raw: object) -> list[ArchiveAttachment]:
    """Parse a note's ``attachment`` map into :class:`ArchiveAttachment` values.

    Entries without an ``md5`` cannot be located in the archive and are
    skipped.
    """
    if not isinstance(raw, Mapping):
        return []
    attachments: list[ArchiveAttachment] = []
    for entry in raw.values():
        if not isinstance(entry, Mapping) or not entry.get("md5"):
            continue
        try:
            size = int(entry.get("size") or 0)
        except (TypeError, ValueError):
            size = 0
        attachments.append(ArchiveAttachment(
            name=str(entry.get("name") or entry["md5"]),
            md5=str(entry["md5"]),
            ref=str(entry.get("ref") or ""),
            mime_type=str(entry.get("type") or "application/octet-stream"),
            size=size,
        ))
    return attachments


_ID_PREFIX_RE = re.compile(r"^(note_|nb_)")


def decode_filename(name: str) -> str:
    """Decode a NoteStation member id back to its original name.

    Ids are the base64 of the original name behind a ``note_`` or ``nb_``
    prefix.  Returns *name* unchanged when it does not decode to UTF-8.
    """
    encoded = _ID_PREFIX_RE.sub("", name)
    encoded = encoded.replace("-", "+").replace("_", "/")
    encoded += "=" * (-len(encoded) % 4)
    try:
        return base64.b64decode(encoded, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return name


def _read_json(archive: zipfile.ZipFile, member: str) -> dict:
    data = json.loads(archive.read(member).decode("utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"{member} does not hold a JSON object")
    return data


def _reraise(member: str, kind: str, exc: Exception) -> NoReturn:
    if isinstance(exc, TiptapifyNoteError):
        raise exc
    raise TiptapifyNoteError(
        f"Failed to import {kind} '{member}': {exc}",
        context={"file": member, "kind": kind},
        cause=exc,
    ) from exc
