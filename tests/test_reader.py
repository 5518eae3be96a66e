"""Tests for the workbook reader (package, worksheet and style layers)."""

import pytest

from xlcompare.core.errors import DocumentOpenError, MalformedStructureError
from xlcompare.engine.reader import NumberFormatResolver, open_workbook, parse_worksheet
from tests.ooxml import MAIN_NS, shared_strings_xml, worksheet_xml


STYLES_XML = (
    f'<?xml version="1.0" encoding="UTF-8"?><styleSheet xmlns="{MAIN_NS}">'
    '<numFmts count="1"><numFmt numFmtId="164" formatCode="0.000"/></numFmts>'
    '<cellXfs count="5">'
    '<xf numFmtId="0"/><xf numFmtId="164"/><xf numFmtId="2"/><xf numFmtId="200"/><xf/>'
    '</cellXfs></styleSheet>'
)


class TestOpenWorkbook:
    """Tests for opening workbook packages."""

    def test_missing_file(self, tmp_path):
        """A path that does not exist cannot be opened."""
        with pytest.raises(DocumentOpenError) as exc_info:
            open_workbook(tmp_path / "nope.xlsx")
        assert "nope.xlsx" in str(exc_info.value)

    def test_directory(self, tmp_path):
        with pytest.raises(DocumentOpenError):
            open_workbook(tmp_path)

    def test_not_a_zip(self, tmp_path):
        """A plain text file is not a workbook container."""
        path = tmp_path / "notes.xlsx"
        path.write_text("just some text")
        with pytest.raises(DocumentOpenError):
            open_workbook(path)

    def test_zip_without_manifest(self, tmp_path):
        import zipfile

        path = tmp_path / "empty.xlsx"
        with zipfile.ZipFile(path, "w") as archive:
            archive.writestr("hello.txt", "hi")
        with pytest.raises(DocumentOpenError):
            open_workbook(path)

    def test_workbook_without_sheet_list(self, build_package):
        """A workbook part without <sheets> is malformed."""
        path = build_package(
            {},
            workbook_xml=f'<?xml version="1.0" encoding="UTF-8"?><workbook xmlns="{MAIN_NS}"/>',
        )
        with pytest.raises(MalformedStructureError):
            open_workbook(path)

    def test_workbook_part_not_xml(self, build_package):
        path = build_package({}, workbook_xml="this is not xml <")
        with pytest.raises(MalformedStructureError):
            open_workbook(path)

    def test_sheet_descriptors(self, build_workbook):
        """Sheets are listed in workbook order with their visibility."""
        def setup(wb):
            wb["Hidden"].sheet_state = "hidden"
            wb["Secret"].sheet_state = "veryHidden"

        path = build_workbook({"Data": {"A1": 1}, "Hidden": {}, "Secret": {}}, setup=setup)

        with open_workbook(path) as workbook:
            assert workbook.sheet_order == ["Data", "Hidden", "Secret"]

            data = workbook.get_sheet("Data")
            assert data.position == 0
            assert not data.is_hidden

            hidden = workbook.get_sheet("Hidden")
            assert hidden.hidden and not hidden.very_hidden
            assert hidden.is_hidden

            secret = workbook.get_sheet("Secret")
            assert secret.very_hidden
            assert secret.is_hidden

    def test_sheet_lookup_is_case_insensitive(self, build_workbook):
        path = build_workbook({"Summary": {}})
        with open_workbook(path) as workbook:
            assert workbook.get_sheet("summary").name == "Summary"
            assert workbook.get_sheet("SUMMARY").name == "Summary"
            assert workbook.get_sheet("Other") is None

    def test_expanding_case_fold_keeps_sheets_apart(self, build_workbook):
        path = build_workbook({"Straße": {}, "STRASSE": {}})
        with open_workbook(path) as workbook:
            assert workbook.get_sheet("straße").name == "Straße"
            assert workbook.get_sheet("strasse").name == "STRASSE"
            assert len(workbook.sheets_by_key) == 2

    def test_missing_relationships_read_as_empty(self, build_package):
        """Without workbook relationships every sheet reads as empty."""
        path = build_package(
            {"Data": worksheet_xml('<sheetData><row r="1"><c r="A1"><v>1</v></c></row></sheetData>')},
            include_rels=False,
        )
        with open_workbook(path) as workbook:
            worksheet = workbook.read_worksheet(workbook.get_sheet("Data"))
            assert worksheet.raw_cells == []
            assert worksheet.used_range() == ""

    def test_unparsable_sheet_reads_as_empty(self, build_package):
        path = build_package({"Data": "<worksheet"})
        with open_workbook(path) as workbook:
            worksheet = workbook.read_worksheet(workbook.get_sheet("Data"))
            assert worksheet.raw_cells == []


class TestSharedStrings:
    """Tests for shared-string resolution."""

    def _sheet(self):
        return worksheet_xml(
            '<sheetData><row r="1">'
            '<c r="A1" t="s"><v>0</v></c>'
            '<c r="B1" t="s"><v>1</v></c>'
            '<c r="C1" t="s"><v>7</v></c>'
            '<c r="D1" t="s"><v>oops</v></c>'
            '</row></sheetData>'
        )

    def test_resolves_through_table(self, build_package):
        path = build_package({"Data": self._sheet()}, shared_strings=shared_strings_xml("alpha", "beta"))
        with open_workbook(path) as workbook:
            cells = {c.address: c for c in workbook.read_worksheet(workbook.get_sheet("Data")).raw_cells}

        assert cells["A1"].value_text == "alpha"
        assert cells["B1"].value_text == "beta"

    def test_bad_index_keeps_raw_text(self, build_package):
        """Out-of-range and non-numeric indices fall back to the raw text."""
        path = build_package({"Data": self._sheet()}, shared_strings=shared_strings_xml("alpha", "beta"))
        with open_workbook(path) as workbook:
            cells = {c.address: c for c in workbook.read_worksheet(workbook.get_sheet("Data")).raw_cells}

        assert cells["C1"].value_text == "7"
        assert cells["D1"].value_text == "oops"

    def test_no_table_keeps_raw_index(self, build_package):
        path = build_package({"Data": self._sheet()})
        with open_workbook(path) as workbook:
            assert workbook.shared_strings is None
            cells = {c.address: c for c in workbook.read_worksheet(workbook.get_sheet("Data")).raw_cells}

        assert cells["A1"].value_text == "0"


class TestParseWorksheet:
    """Tests for worksheet part parsing."""

    def test_values_and_formulas(self):
        xml = worksheet_xml(
            '<sheetData><row r="1">'
            '<c r="A1"><v>5</v></c>'
            '<c r="B1"><f>SUM(A1:A3)</f><v>12</v></c>'
            '<c r="C1"><f/></c>'
            '<c r="D1"><v/></c>'
            '<c r="E1" s="3"/>'
            '</row></sheetData>',
            dimension="A1:E1",
        ).encode()

        cells = {c.address: c for c in parse_worksheet(xml).raw_cells}

        assert cells["A1"].value_text == "5"
        assert cells["A1"].formula_text is None
        assert cells["B1"].formula_text == "SUM(A1:A3)"
        assert cells["B1"].value_text == "12"
        assert cells["C1"].formula_text == ""
        assert cells["C1"].value_text is None
        assert cells["D1"].value_text == ""
        assert cells["E1"].value_text is None
        assert cells["E1"].style_index == 3

    def test_inline_string(self):
        xml = worksheet_xml(
            '<sheetData><row r="1"><c r="A1" t="inlineStr"><is><t>hello</t></is></c></row></sheetData>'
        ).encode()
        (cell,) = parse_worksheet(xml).raw_cells
        assert cell.value_text == "hello"
        assert cell.data_type == "inlineStr"

    def test_addresses_are_upper_cased(self):
        xml = worksheet_xml('<sheetData><row r="2"><c r="b2"><v>1</v></c></row></sheetData>').encode()
        (cell,) = parse_worksheet(xml).raw_cells
        assert cell.address == "B2"

    def test_invalid_address_is_skipped(self):
        xml = worksheet_xml(
            '<sheetData><row r="1"><c r="NOT-A-CELL"><v>1</v></c><c><v>2</v></c><c r="A1"><v>3</v></c></row></sheetData>'
        ).encode()
        cells = parse_worksheet(xml).raw_cells
        assert [c.address for c in cells] == ["A1"]

    def test_declared_dimension_wins(self):
        xml = worksheet_xml('<sheetData><row r="1"><c r="A1"><v>1</v></c></row></sheetData>', dimension="A1:Z99")
        assert parse_worksheet(xml.encode()).used_range() == "A1:Z99"

    def test_used_range_computed_without_dimension(self):
        """Without a dimension the range spans the highest row and column seen."""
        xml = worksheet_xml(
            '<sheetData>'
            '<row r="2"><c r="C2"><v>1</v></c></row>'
            '<row r="4"><c r="B4"><v>1</v></c></row>'
            '</sheetData>'
        )
        assert parse_worksheet(xml.encode()).used_range() == "A1:C4"

    def test_used_range_of_empty_sheet(self):
        assert parse_worksheet(worksheet_xml("<sheetData/>").encode()).used_range() == ""

    def test_validation_summary(self):
        xml = worksheet_xml(
            '<sheetData/>'
            '<dataValidations count="2">'
            '<dataValidation type="whole" operator="between" sqref="A1:A10">'
            '<formula1>1</formula1><formula2>10</formula2></dataValidation>'
            '<dataValidation type="list" sqref="B1"><formula1>"x,y"</formula1></dataValidation>'
            '</dataValidations>'
        )
        summary = parse_worksheet(xml.encode()).validation_summary()
        assert summary == '[A1:A10; whole between; 1 10][B1; list ; "x,y" ]'

    def test_hidden_rows_and_columns(self):
        xml = worksheet_xml(
            '<cols><col min="2" max="3" hidden="1"/><col min="5" max="5" width="9"/></cols>'
            '<sheetData>'
            '<row r="7" hidden="true"/>'
            '<row r="3" hidden="1"/>'
            '<row r="4"/>'
            '</sheetData>'
        )
        worksheet = parse_worksheet(xml.encode())
        assert worksheet.hidden_columns() == ["2-3"]
        assert worksheet.hidden_rows() == [3, 7]

    def test_conditional_formatting_blocks(self):
        xml = worksheet_xml(
            '<sheetData/>'
            '<conditionalFormatting sqref="A1:A5">'
            '<cfRule type="cellIs" priority="1" operator="greaterThan"><formula>3</formula></cfRule>'
            '</conditionalFormatting>'
        )
        (block,) = parse_worksheet(xml.encode()).conditional_format_blocks()
        assert "A1:A5" in block
        assert "greaterThan" in block


class TestNumberFormatResolver:
    """Tests for style index -> number format resolution."""

    def test_custom_format(self):
        resolver = NumberFormatResolver.from_xml(STYLES_XML.encode())
        assert resolver.resolve(1) == "0.000"

    def test_builtin_format(self):
        resolver = NumberFormatResolver.from_xml(STYLES_XML.encode())
        assert resolver.resolve(0) == "General"
        assert resolver.resolve(2) == "0.00"

    def test_unknown_builtin_yields_id(self):
        resolver = NumberFormatResolver.from_xml(STYLES_XML.encode())
        assert resolver.resolve(3) == "200"

    def test_unresolvable(self):
        """Missing numFmtId, out-of-range and absent indices resolve to None."""
        resolver = NumberFormatResolver.from_xml(STYLES_XML.encode())
        assert resolver.resolve(4) is None
        assert resolver.resolve(99) is None
        assert resolver.resolve(-1) is None
        assert resolver.resolve(None) is None

    def test_repeated_lookups_agree(self):
        resolver = NumberFormatResolver.from_xml(STYLES_XML.encode())
        assert resolver.resolve(1) == resolver.resolve(1) == "0.000"

    def test_workbook_without_styles(self, build_package):
        path = build_package({"Data": worksheet_xml("<sheetData/>")})
        with open_workbook(path) as workbook:
            assert workbook.number_formats.resolve(0) is None

    def test_workbook_with_styles(self, build_package):
        path = build_package({"Data": worksheet_xml("<sheetData/>")}, styles=STYLES_XML)
        with open_workbook(path) as workbook:
            assert workbook.number_formats.resolve(1) == "0.000"

    def test_styles_part_found_through_manifest(self, build_package):
        path = build_package(
            {"Data": worksheet_xml("<sheetData/>")},
            styles=STYLES_XML,
            styles_part="xl/theme/custom-styles.xml",
        )
        with open_workbook(path) as workbook:
            assert workbook.number_formats.resolve(1) == "0.000"
