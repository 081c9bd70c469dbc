"""Tests for the NoteStation archive importer (synology.py).

Archives are assembled in memory with :mod:`zipfile`.
"""

from __future__ import annotations

import base64
import io
import json
import zipfile
from datetime import datetime, timezone

import pytest

from tiptapify.config import TiptapifyConfig
from tiptapify.errors import (
    ErrorCode,
    TiptapifyArchiveError,
    TiptapifyNoteError,
)
from tiptapify.models import ArchiveAttachment, Attachment
from tiptapify.synology import (
    ROOT_NOTEBOOK_ID,
    SynologyImporter,
    decode_filename,
    parse_attachments,
)
from tiptapify.utils.hashing import md5_hash

PHOTO = b"\x89PNG fake image bytes"
REPORT = b"%PDF fake report"


def _archive(
    notes: dict[str, dict] | None = None,
    notebooks: dict[str, dict] | None = None,
    files: dict[str, bytes] | None = None,
    config: object | None = None,
) -> bytes:
    notes = notes or {}
    notebooks = notebooks or {}
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        index = config if config is not None else {
            "note": list(notes), "notebook": list(notebooks),
        }
        archive.writestr("config.json", json.dumps(index))
        for member, data in {**notebooks, **notes}.items():
            archive.writestr(member, json.dumps(data))
        for member, payload in (files or {}).items():
            archive.writestr(member, payload)
    return buffer.getvalue()


def _attachment_entry(name: str, data: bytes, ref: str, mime: str) -> dict:
    return {"name": name, "md5": md5_hash(data), "ref": ref, "type": mime, "size": len(data)}


class RecordingUploader:
    """Uploader that stores payloads in memory and returns fake URLs."""

    def __init__(self, fail_for: set[str] | None = None) -> None:
        self.uploaded: list[tuple[bytes, ArchiveAttachment]] = []
        self.fail_for = fail_for or set()

    def __call__(self, data: bytes, attachment: ArchiveAttachment) -> str:
        if attachment.name in self.fail_for:
            raise RuntimeError("storage unavailable")
        self.uploaded.append((data, attachment))
        return f"/files/{attachment.name}"


@pytest.fixture
def importer() -> SynologyImporter:
    return SynologyImporter()


class TestArchiveLevel:
    def test_empty_archive(self, importer):
        result = importer.import_archive(_archive())
        assert result.success is True
        assert result.notes == []
        assert result.notes_created == 0
        assert result.errors == []

    def test_not_a_zip(self, importer):
        with pytest.raises(TiptapifyArchiveError) as exc_info:
            importer.import_archive(b"definitely not a zip")
        assert exc_info.value.code == ErrorCode.ARCHIVE_ERROR
        assert exc_info.value.context["source"] == "<bytes>"

    def test_missing_path(self, importer, tmp_path):
        with pytest.raises(TiptapifyArchiveError):
            importer.import_archive(tmp_path / "missing.nsx")

    def test_reads_from_path(self, importer, tmp_path):
        path = tmp_path / "backup.nsx"
        path.write_bytes(_archive(notes={"note_1": {"title": "From disk", "content": "<p>x</p>"}}))
        result = importer.import_archive(str(path))
        assert [n.title for n in result.notes] == ["From disk"]

    def test_missing_config(self, importer):
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w") as archive:
            archive.writestr("note_1", "{}")
        with pytest.raises(TiptapifyArchiveError) as exc_info:
            importer.import_archive(buffer.getvalue())
        assert exc_info.value.context["member"] == "config.json"

    @pytest.mark.parametrize("config", [[1, 2], {"note": "note_1"}, {"notebook": 5}])
    def test_invalid_config(self, importer, config):
        with pytest.raises(TiptapifyArchiveError):
            importer.import_archive(_archive(config=config))

    def test_config_without_lists_is_empty(self, importer):
        result = importer.import_archive(_archive(config={}))
        assert result.success is True
        assert result.notes == []


class TestNotebooks:
    def test_notebooks_become_folders(self, importer):
        data = _archive(
            notebooks={"nb_1": {"title": "Work"}},
            notes={"note_1": {"title": "N", "parent_id": "nb_1", "content": "<p>x</p>"}},
        )
        result = importer.import_archive(data)
        assert result.folders == {"nb_1": "Work"}
        assert result.folders_created == 1
        assert result.notes[0].folder == "Work"

    def test_untitled_notebook_uses_decoded_id(self, importer):
        notebook_id = "nb_" + base64.b64encode(b"Recipes").decode().rstrip("=")
        result = importer.import_archive(_archive(notebooks={notebook_id: {"title": ""}}))
        assert result.folders[notebook_id] == "Recipes"

    def test_root_parent_has_no_folder(self, importer):
        data = _archive(notes={"note_1": {"title": "N", "parent_id": ROOT_NOTEBOOK_ID}})
        assert importer.import_archive(data).notes[0].folder is None

    def test_unknown_parent_has_no_folder(self, importer):
        data = _archive(notes={"note_1": {"title": "N", "parent_id": "nb_gone"}})
        assert importer.import_archive(data).notes[0].folder is None

    def test_broken_notebook_recorded(self, importer):
        data = _archive(config={"note": [], "notebook": ["nb_missing"]})
        result = importer.import_archive(data)
        assert result.folders == {}
        assert [e.file for e in result.errors] == ["nb_missing"]


class TestNotes:
    def test_note_fields(self, importer):
        data = _archive(notes={"note_1": {
            "title": "  Meeting  ",
            "content": '<div>Agenda   <b>items</b></div><div style="">next</div>',
            "tag": ["work", "", "q1"],
            "ctime": 1700000000,
            "mtime": 1700000600,
        }})
        note = importer.import_archive(data).notes[0]
        assert note.title == "Meeting"
        assert note.tags == ["work", "q1"]
        assert note.source == "note_1"
        assert note.created_at is None
        assert note.content["content"][0]["content"] == [
            {"type": "text", "text": "Agenda "},
            {"type": "text", "text": "items", "marks": [{"type": "bold"}]},
        ]

    def test_timestamps_preserved_on_request(self, importer):
        data = _archive(notes={"note_1": {"title": "N", "ctime": 1700000000, "mtime": "bad"}})
        note = importer.import_archive(data, preserve_timestamps=True).notes[0]
        assert note.created_at == datetime.fromtimestamp(1700000000, tz=timezone.utc)
        assert note.updated_at is None

    def test_untitled_note_uses_default_title(self):
        importer = SynologyImporter(TiptapifyConfig(default_title="Nameless"))
        note = importer.import_archive(_archive(notes={"note_1": {"content": "x"}})).notes[0]
        assert note.title == "Nameless"

    def test_missing_content_yields_fallback_document(self, importer):
        note = importer.import_archive(_archive(notes={"note_1": {"title": "N"}})).notes[0]
        assert note.content == {"type": "doc", "content": [{"type": "paragraph"}]}

    def test_non_list_tags_ignored(self, importer):
        data = _archive(notes={"note_1": {"title": "N", "tag": "oops"}})
        assert importer.import_archive(data).notes[0].tags == []

    def test_notes_in_index_order(self, importer):
        data = _archive(notes={
            "note_b": {"title": "B"}, "note_a": {"title": "A"},
        })
        assert [n.title for n in importer.import_archive(data).notes] == ["B", "A"]


class TestFailures:
    def test_encrypted_note_skipped(self, importer):
        data = _archive(notes={
            "note_1": {"title": "Secret", "encrypt": True},
            "note_2": {"title": "Plain"},
        })
        result = importer.import_archive(data)
        assert [n.title for n in result.notes] == ["Plain"]
        assert result.errors[0].file == "note_1"
        assert "encrypted" in result.errors[0].error

    def test_encrypted_note_raises_without_skip(self, importer):
        data = _archive(notes={"note_1": {"title": "Secret", "encrypt": True}})
        with pytest.raises(TiptapifyNoteError) as exc_info:
            importer.import_archive(data, skip_errors=False)
        assert exc_info.value.context == {"file": "note_1", "kind": "note"}

    def test_missing_note_member_recorded(self, importer):
        result = importer.import_archive(_archive(config={"note": ["note_gone"]}))
        assert result.success is True
        assert [e.file for e in result.errors] == ["note_gone"]

    def test_missing_note_member_raises_wrapped(self, importer):
        with pytest.raises(TiptapifyNoteError) as exc_info:
            importer.import_archive(_archive(config={"note": ["note_gone"]}), skip_errors=False)
        assert isinstance(exc_info.value.__cause__, KeyError)
        assert exc_info.value.code == ErrorCode.NOTE_ERROR

    def test_invalid_json_note_recorded(self, importer):
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w") as archive:
            archive.writestr("config.json", json.dumps({"note": ["note_1", "note_2"]}))
            archive.writestr("note_1", "{not json")
            archive.writestr("note_2", json.dumps(["a", "list"]))
        result = importer.import_archive(buffer.getvalue())
        assert [e.file for e in result.errors] == ["note_1", "note_2"]


class TestAttachments:
    def _note_with_attachments(self) -> bytes:
        content = (
            '<div>Photo: <img ref="R1" src="webman/3rdparty/NoteStation/images/transparent.gif"></div>'
        )
        return _archive(
            notes={"note_1": {
                "title": "With files",
                "content": content,
                "attachment": {
                    "a1": _attachment_entry("photo.png", PHOTO, "R1", "image/png"),
                    "a2": _attachment_entry("report.pdf", REPORT, "R2", "application/pdf"),
                },
            }},
            files={f"file_{md5_hash(PHOTO)}": PHOTO, f"file_{md5_hash(REPORT)}": REPORT},
        )

    def test_images_resolved_and_files_listed(self, importer):
        uploader = RecordingUploader()
        result = importer.import_archive(self._note_with_attachments(), uploader)
        note = result.notes[0]
        assert result.attachments_imported == 2
        assert [payload for payload, _ in uploader.uploaded] == [PHOTO, REPORT]
        assert note.content["content"][0]["content"] == [
            {"type": "text", "text": "Photo: "},
            {"type": "image", "attrs": {"src": "/files/photo.png", "alt": ""}},
        ]
        assert note.attachments == [Attachment(filename="report.pdf", path="/files/report.pdf")]
        assert note.warnings == []

    def test_without_uploader_placeholder_dropped(self, importer):
        result = importer.import_archive(self._note_with_attachments())
        note = result.notes[0]
        assert result.attachments_imported == 0
        assert note.attachments == []
        assert note.content["content"][0]["content"] == [{"type": "text", "text": "Photo: "}]
        assert [w.code for w in note.warnings] == ["IMAGE_DROPPED"]

    def test_missing_attachment_file_warns(self, importer):
        data = _archive(notes={"note_1": {
            "title": "N",
            "attachment": {"a": _attachment_entry("gone.pdf", b"x", "R", "application/pdf")},
        }})
        note = importer.import_archive(data, RecordingUploader()).notes[0]
        assert [w.code for w in note.warnings] == ["ATTACHMENT_MISSING"]

    def test_checksum_mismatch_warns_but_uploads(self, importer):
        entry = _attachment_entry("a.pdf", REPORT, "R", "application/pdf")
        data = _archive(
            notes={"note_1": {"title": "N", "attachment": {"a": entry}}},
            files={f"file_{entry['md5']}": b"tampered"},
        )
        uploader = RecordingUploader()
        result = importer.import_archive(data, uploader)
        assert [w.code for w in result.notes[0].warnings] == ["ATTACHMENT_CHECKSUM_MISMATCH"]
        assert result.attachments_imported == 1

    def test_upload_failure_becomes_warning(self, importer):
        uploader = RecordingUploader(fail_for={"photo.png"})
        result = importer.import_archive(self._note_with_attachments(), uploader)
        note = result.notes[0]
        assert result.attachments_imported == 1
        codes = [w.code for w in note.warnings]
        assert codes[0] == "ATTACHMENT_UPLOAD_FAILED"
        assert "IMAGE_DROPPED" in codes
        assert note.warnings[0].context["name"] == "photo.png"


class TestParseAttachments:
    def test_entries_without_md5_skipped(self):
        parsed = parse_attachments({
            "a": {"name": "x", "md5": "abc", "ref": "R", "type": "image/png", "size": "12"},
            "b": {"name": "y"},
            "c": "garbage",
        })
        assert parsed == [ArchiveAttachment("x", "abc", "R", "image/png", 12)]
        assert parsed[0].is_image is True

    @pytest.mark.parametrize("raw", [None, [], "x", 3])
    def test_non_mapping(self, raw):
        assert parse_attachments(raw) == []

    def test_defaults(self):
        parsed = parse_attachments({"a": {"md5": "abc", "size": "big"}})
        assert parsed == [ArchiveAttachment("abc", "abc", "", "application/octet-stream", 0)]
        assert parsed[0].is_image is False


class TestDecodeFilename:
    def test_decodes_prefixed_base64(self):
        encoded = base64.b64encode("Über notes".encode()).decode()
        assert decode_filename("note_" + encoded) == "Über notes"

    def test_url_safe_alphabet(self):
        encoded = base64.urlsafe_b64encode(b"a?>b").decode().rstrip("=")
        assert decode_filename("nb_" + encoded) == "a?>b"

    @pytest.mark.parametrize("name", ["nb_!!!", "note_/w==", "plain name"])
    def test_undecodable_returned_unchanged(self, name):
        assert decode_filename(name) == name
