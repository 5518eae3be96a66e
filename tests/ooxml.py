"""Hand-built spreadsheet packages for reader edge cases."""

import zipfile
from pathlib import Path
from typing import Dict, Optional


CONTENT_TYPES_NS = "http://schemas.openxmlformats.org/package/2006/content-types"
RELS_NS = "http://schemas.openxmlformats.org/package/2006/relationships"
MAIN_NS = "http://schemas.openxmlformats.org/spreadsheetml/2006/main"
DOC_RELS_NS = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"

WORKBOOK_CT = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet.main+xml"
WORKSHEET_CT = "application/vnd.openxmlformats-officedocument.spreadsheetml.worksheet+xml"
SHARED_STRINGS_CT = "application/vnd.openxmlformats-officedocument.spreadsheetml.sharedStrings+xml"
STYLES_CT = "application/vnd.openxmlformats-officedocument.spreadsheetml.styles+xml"
WORKSHEET_REL = "http://schemas.openxmlformats.org/officeDocument/2006/relationships/worksheet"


def worksheet_xml(body: str, dimension: Optional[str] = None) -> str:
    """Wrap sheet content (sheetData and friends) in a worksheet element."""
    dim = f'<dimension ref="{dimension}"/>' if dimension else ""
    return f'<?xml version="1.0" encoding="UTF-8"?><worksheet xmlns="{MAIN_NS}">{dim}{body}</worksheet>'


def shared_strings_xml(*strings: str) -> str:
    items = "".join(f"<si><t>{s}</t></si>" for s in strings)
    return (
        f'<?xml version="1.0" encoding="UTF-8"?>'
        f'<sst xmlns="{MAIN_NS}" count="{len(strings)}" uniqueCount="{len(strings)}">{items}</sst>'
    )


def write_package(
    path: Path,
    sheets: Dict[str, str],
    shared_strings: Optional[str] = None,
    styles: Optional[str] = None,
    workbook_xml: Optional[str] = None,
    states: Optional[Dict[str, str]] = None,
    include_rels: bool = True,
    styles_part: str = "xl/styles.xml",
) -> Path:
    """
    Write a minimal spreadsheet package by hand.

    Args:
        path: Output file
        sheets: Sheet name -> worksheet XML, in workbook order
        shared_strings: Optional sharedStrings.xml content
        styles: Optional styles.xml content
        workbook_xml: Replaces the generated workbook part
        states: Sheet name -> state attribute (hidden / veryHidden)
        include_rels: Write xl/_rels/workbook.xml.rels
        styles_part: Archive path of the styles part
    """
    states = states or {}

    overrides = [f'<Override PartName="/xl/workbook.xml" ContentType="{WORKBOOK_CT}"/>']
    sheet_entries = []
    rels = []
    for index, name in enumerate(sheets, start=1):
        overrides.append(f'<Override PartName="/xl/worksheets/sheet{index}.xml" ContentType="{WORKSHEET_CT}"/>')
        state = f' state="{states[name]}"' if name in states else ""
        sheet_entries.append(f'<sheet name="{name}" sheetId="{index}"{state} r:id="rId{index}"/>')
        rels.append(f'<Relationship Id="rId{index}" Type="{WORKSHEET_REL}" Target="worksheets/sheet{index}.xml"/>')
    if shared_strings is not None:
        overrides.append(f'<Override PartName="/xl/sharedStrings.xml" ContentType="{SHARED_STRINGS_CT}"/>')
    if styles is not None:
        overrides.append(f'<Override PartName="/{styles_part}" ContentType="{STYLES_CT}"/>')

    content_types = (
        f'<?xml version="1.0" encoding="UTF-8"?><Types xmlns="{CONTENT_TYPES_NS}">'
        f'<Default Extension="rels" ContentType="application/vnd.openxmlformats-package.relationships+xml"/>'
        f'<Default Extension="xml" ContentType="application/xml"/>'
        f'{"".join(overrides)}</Types>'
    )

    if workbook_xml is None:
        workbook_xml = (
            f'<?xml version="1.0" encoding="UTF-8"?>'
            f'<workbook xmlns="{MAIN_NS}" xmlns:r="{DOC_RELS_NS}">'
            f'<sheets>{"".join(sheet_entries)}</sheets></workbook>'
        )

    with zipfile.ZipFile(path, "w") as archive:
        archive.writestr("[Content_Types].xml", content_types)
        archive.writestr("xl/workbook.xml", workbook_xml)
        if include_rels:
            archive.writestr(
                "xl/_rels/workbook.xml.rels",
                f'<?xml version="1.0" encoding="UTF-8"?><Relationships xmlns="{RELS_NS}">{"".join(rels)}</Relationships>',
            )
        for index, xml in enumerate(sheets.values(), start=1):
            archive.writestr(f"xl/worksheets/sheet{index}.xml", xml)
        if shared_strings is not None:
            archive.writestr("xl/sharedStrings.xml", shared_strings)
        if styles is not None:
            archive.writestr(styles_part, styles)

    return path


