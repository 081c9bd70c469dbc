"""Golden fixture tests.

A NoteStation-style note body is converted to a document and compared with
the stored JSON; the document is then exported and compared with the
stored Markdown.  Fixtures live in ``fixtures/`` next to this file.
"""
from __future__ import annotations

import io
import json
import zipfile
from datetime import datetime, timezone
from pathlib import Path

import pytest

from tiptapify.converter.html_to_tiptap import HtmlToTiptapConverter
from tiptapify.converter.markup import clean_html
from tiptapify.exporter import export_one
from tiptapify.models import ArchiveAttachment, Attachment, ExportOptions
from tiptapify.synology import SynologyImporter

FIXTURES_DIR = Path(__file__).parent / "fixtures"

IMAGE_REFS = {"REF1": "/files/photo.png"}
CREATED = datetime(2024, 3, 1, 9, 30, tzinfo=timezone.utc)
UPDATED = datetime(2024, 3, 1, 10, 0, 0, 250000, tzinfo=timezone.utc)


def _load(name: str) -> str:
    return (FIXTURES_DIR / name).read_text(encoding="utf-8")


@pytest.fixture
def expected_document() -> dict:
    return json.loads(_load("meeting_note.json"))


class TestGoldenImport:
    def test_html_matches_golden_document(self, expected_document):
        result = HtmlToTiptapConverter().convert(_load("meeting_note.html"), IMAGE_REFS)
        assert result.document == expected_document
        assert result.warnings == []

    def test_cleaned_html_gives_same_document(self, expected_document):
        result = HtmlToTiptapConverter().convert(
            clean_html(_load("meeting_note.html")), IMAGE_REFS,
        )
        assert result.document == expected_document

    def test_archive_import_matches_golden_document(self, expected_document):
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w") as archive:
            archive.writestr("config.json", json.dumps({"note": ["note_1"], "notebook": []}))
            archive.writestr("note_1", json.dumps({
                "title": "Meeting",
                "content": _load("meeting_note.html"),
                "attachment": {"a": {
                    "name": "photo.png", "md5": "0" * 32, "ref": "REF1", "type": "image/png",
                }},
            }))
            archive.writestr("file_" + "0" * 32, b"png")

        def upload(data: bytes, attachment: ArchiveAttachment) -> str:
            return f"/files/{attachment.name}"

        note = SynologyImporter().import_archive(buffer.getvalue(), upload).notes[0]
        assert note.content == expected_document
        assert [w.code for w in note.warnings] == ["ATTACHMENT_CHECKSUM_MISMATCH"]


class TestGoldenExport:
    def test_export_matches_golden_markdown(self, expected_document):
        md = export_one(
            "Meeting",
            CREATED,
            UPDATED,
            ["work"],
            expected_document,
            [Attachment(filename="agenda.pdf", path="/files/agenda.pdf")],
            ExportOptions(include_metadata=True, include_attachments=True),
        )
        assert md == _load("meeting_note.md").rstrip("\n")

    def test_export_without_options_is_title_and_body(self, expected_document):
        md = export_one("Meeting", CREATED, UPDATED, ["work"], expected_document, [])
        golden = _load("meeting_note.md")
        body = golden.split("---\n\n", 1)[1].split("\n\n## Attachments", 1)[0]
        assert md == "# Meeting\n\n" + body
