"""Tests for table conversion (tables.py)."""

from __future__ import annotations

from tiptapify.converter.html_to_tiptap import html_to_tiptap

EMPTY_CELL = {"type": "tableCell", "content": [{"type": "paragraph"}]}


def _table(markup: str) -> dict:
    content = html_to_tiptap(markup)["content"]
    assert len(content) == 1
    assert content[0]["type"] == "table"
    return content[0]


def _cell(cell_type: str, text: str) -> dict:
    return {
        "type": cell_type,
        "content": [{"type": "paragraph", "content": [{"type": "text", "text": text}]}],
    }


def _row_types(table: dict) -> list[list[str]]:
    return [[cell["type"] for cell in row["content"]] for row in table["content"]]


class TestTableStructure:
    def test_thead_cells_are_headers(self):
        table = _table(
            "<table><thead><tr><td>H</td></tr></thead>"
            "<tbody><tr><td>V</td></tr></tbody></table>"
        )
        assert table["content"] == [
            {"type": "tableRow", "content": [_cell("tableHeader", "H")]},
            {"type": "tableRow", "content": [_cell("tableCell", "V")]},
        ]

    def test_th_in_body_is_header(self):
        table = _table("<table><tr><th>K</th><td>V</td></tr></table>")
        assert _row_types(table) == [["tableHeader", "tableCell"]]

    def test_tfoot_rows_are_body_rows(self):
        table = _table(
            "<table><tbody><tr><td>a</td></tr></tbody>"
            "<tfoot><tr><td>sum</td></tr></tfoot></table>"
        )
        assert _row_types(table) == [["tableCell"], ["tableCell"]]

    def test_direct_rows_and_sections_in_order(self):
        table = _table(
            "<table><thead><tr><th>h</th></tr></thead>"
            "<tr><td>direct</td></tr>"
            "<tbody><tr><td>body</td></tr></tbody></table>"
        )
        texts = [
            row["content"][0]["content"][0]["content"][0]["text"]
            for row in table["content"]
        ]
        assert texts == ["h", "direct", "body"]

    def test_row_without_cells_omitted(self):
        table = _table("<table><tr></tr><tr><td>x</td></tr></table>")
        assert len(table["content"]) == 1

    def test_non_cell_children_ignored(self):
        table = _table("<table><tr><span>junk</span><td>x</td></tr></table>")
        assert table["content"][0]["content"] == [_cell("tableCell", "x")]


class TestEmptyCellsAndTables:
    def test_empty_cell_gets_empty_paragraph(self):
        table = _table("<table><tr><td></td><td> </td></tr></table>")
        assert table["content"][0]["content"] == [EMPTY_CELL, EMPTY_CELL]

    def test_empty_table_is_well_formed(self):
        table = _table("<table></table>")
        assert table == {
            "type": "table",
            "content": [{"type": "tableRow", "content": [EMPTY_CELL]}],
        }

    def test_table_of_empty_rows(self):
        table = _table("<table><tbody><tr></tr></tbody></table>")
        assert table["content"] == [{"type": "tableRow", "content": [EMPTY_CELL]}]


class TestCellContent:
    def test_cell_with_marks(self):
        table = _table("<table><tr><td><b>bold</b> text</td></tr></table>")
        paragraph = table["content"][0]["content"][0]["content"][0]
        assert paragraph["content"] == [
            {"type": "text", "text": "bold", "marks": [{"type": "bold"}]},
            {"type": "text", "text": " text"},
        ]

    def test_cell_with_blocks(self):
        table = _table("<table><tr><td><p>a</p><ul><li>b</li></ul></td></tr></table>")
        cell = table["content"][0]["content"][0]
        assert [node["type"] for node in cell["content"]] == ["paragraph", "bulletList"]

    def test_nested_table(self):
        table = _table(
            "<table><tr><td><table><tr><td>inner</td></tr></table></td></tr></table>"
        )
        cell = table["content"][0]["content"][0]
        assert cell["content"][0]["type"] == "table"
