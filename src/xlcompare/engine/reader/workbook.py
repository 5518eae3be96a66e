"""
Workbook snapshot: the read-only view of one opened spreadsheet package.

The package is opened as a ZIP archive and read through openpyxl's package
layer (content types, workbook part, relationships, shared strings). Sheet
content is only parsed when the comparison asks for it.
"""
import logging
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Union

from openpyxl.packaging.manifest import Manifest
from openpyxl.packaging.relationship import get_dependents, get_rels_path
from openpyxl.packaging.workbook import WorkbookPackage
from openpyxl.reader.strings import read_string_table
from openpyxl.xml.constants import (
    ARC_CONTENT_TYPES,
    ARC_STYLE,
    ARC_WORKBOOK,
    SHARED_STRINGS,
    SHEET_MAIN_NS,
    STYLES_TYPE,
    XLSM,
    XLSX,
    XLTM,
    XLTX,
)
from openpyxl.xml.functions import fromstring

from xlcompare.core.errors import DocumentOpenError, MalformedStructureError
from xlcompare.engine.reader.number_formats import NumberFormatResolver
from xlcompare.engine.reader.worksheet import WorksheetSnapshot, parse_worksheet

logger = logging.getLogger(__name__)

WORKBOOK_CONTENT_TYPES = [XLSX, XLSM, XLTX, XLTM]
SHEETS_TAG = f"{{{SHEET_MAIN_NS}}}sheets"


def sheet_key(name: str) -> str:
    """
    Case-insensitive identity (and sort key) of a sheet name.

    Characters are upper-cased one at a time; a character whose upper case
    expands (such as "ß" to "SS") is kept as is, so "Straße" and "STRASSE"
    stay distinct sheets.
    """
    return "".join(_upper_char(c) for c in name)


def _upper_char(c: str) -> str:
    upper = c.upper()
    return upper if len(upper) == 1 else c


@dataclass(frozen=True)
class SheetDescriptor:
    """One entry of the workbook's sheet list."""
    name: str
    stable_id: str
    relationship_handle: str
    hidden: bool
    very_hidden: bool
    position: int

    @property
    def is_hidden(self) -> bool:
        """True for both hidden and very hidden sheets."""
        return self.hidden or self.very_hidden


class WorkbookSnapshot:
    """
    Normalized, read-only model of an opened workbook.

    Owns the open archive; use as a context manager or call close().
    Not shared between comparisons.
    """

    def __init__(
        self,
        path: Path,
        archive: zipfile.ZipFile,
        sheets: List[SheetDescriptor],
        sheet_targets: Dict[str, str],
        shared_strings_part: Optional[str],
        styles_part: str = ARC_STYLE,
    ):
        self.path = path
        self._archive = archive
        self.sheets = sheets
        self._sheet_targets = sheet_targets
        self._shared_strings_part = shared_strings_part
        self._styles_part = styles_part
        self._shared_strings: Optional[List[str]] = None
        self._shared_strings_loaded = False
        self._number_formats: Optional[NumberFormatResolver] = None

        self._sheets_by_key: Dict[str, SheetDescriptor] = {}
        for sheet in sheets:
            self._sheets_by_key[sheet_key(sheet.name)] = sheet

    def __enter__(self) -> "WorkbookSnapshot":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    def close(self) -> None:
        self._archive.close()

    @property
    def sheet_order(self) -> List[str]:
        """Sheet names in native workbook order."""
        return [sheet.name for sheet in self.sheets]

    @property
    def sheets_by_key(self) -> Dict[str, SheetDescriptor]:
        """Sheets keyed by case-insensitive name."""
        return dict(self._sheets_by_key)

    def get_sheet(self, name: str) -> Optional[SheetDescriptor]:
        return self._sheets_by_key.get(sheet_key(name))

    @property
    def shared_strings(self) -> Optional[List[str]]:
        """The shared-string table, or None if the workbook has none."""
        if not self._shared_strings_loaded:
            self._shared_strings = self._read_shared_strings()
            self._shared_strings_loaded = True
        return self._shared_strings

    @property
    def number_formats(self) -> NumberFormatResolver:
        """Number-format resolver for this workbook (built on first use)."""
        if self._number_formats is None:
            self._number_formats = NumberFormatResolver.from_archive(self._archive, self._styles_part)
        return self._number_formats

    def read_worksheet(self, sheet: SheetDescriptor) -> WorksheetSnapshot:
        """
        Parse the content of one sheet.

        A sheet whose part is missing or unreadable is returned as an empty
        snapshot rather than failing the comparison.
        """
        target = self._sheet_targets.get(sheet.relationship_handle)
        if target is None:
            logger.warning(f"Sheet '{sheet.name}' has no resolvable part in {self.path.name}")
            return WorksheetSnapshot()

        try:
            xml = self._archive.read(target)
        except KeyError:
            logger.warning(f"Sheet part {target} for '{sheet.name}' is missing from {self.path.name}")
            return WorksheetSnapshot()

        try:
            return parse_worksheet(xml, self.shared_strings)
        except Exception as e:
            logger.warning(f"Failed to parse sheet '{sheet.name}' in {self.path.name}: {e}")
            return WorksheetSnapshot()

    def _read_shared_strings(self) -> Optional[List[str]]:
        if self._shared_strings_part is None:
            return None

        try:
            with self._archive.open(self._shared_strings_part) as src:
                return read_string_table(src)
        except KeyError:
            logger.warning(f"Shared strings part missing from {self.path.name}")
            return None
        except Exception as e:
            logger.warning(f"Failed to read shared strings from {self.path.name}: {e}")
            return None


def open_workbook(path: Union[str, Path]) -> WorkbookSnapshot:
    """
    Open a workbook package and read its sheet list.

    Args:
        path: Path to an .xlsx/.xlsm/.xltx/.xltm file

    Returns:
        WorkbookSnapshot (caller closes it)

    Raises:
        DocumentOpenError: Path missing, unreadable or not a workbook package
        MalformedStructureError: The workbook part has no usable sheet list
    """
    path = Path(path)

    if not path.exists():
        raise DocumentOpenError(path, "file not found")
    if not path.is_file():
        raise DocumentOpenError(path, "not a file")

    try:
        archive = zipfile.ZipFile(path, "r")
    except zipfile.BadZipFile:
        raise DocumentOpenError(path, "not a valid workbook container (bad ZIP archive)")
    except OSError as e:
        raise DocumentOpenError(path, str(e))

    try:
        return _read_workbook(path, archive)
    except Exception:
        archive.close()
        raise


def _read_workbook(path: Path, archive: zipfile.ZipFile) -> WorkbookSnapshot:
    # Step 1: Package manifest
    try:
        manifest = Manifest.from_tree(fromstring(archive.read(ARC_CONTENT_TYPES)))
    except KeyError:
        raise DocumentOpenError(path, f"not a valid workbook container (no {ARC_CONTENT_TYPES})")
    except Exception as e:
        raise DocumentOpenError(path, f"unreadable package manifest: {e}")

    # Step 2: Locate and parse the workbook part
    workbook_part = _find_workbook_part(manifest)
    if workbook_part is None:
        raise DocumentOpenError(path, "not a valid workbook container (no workbook part)")

    try:
        node = fromstring(archive.read(workbook_part))
    except KeyError:
        raise MalformedStructureError(path, f"workbook part {workbook_part} is missing")
    except Exception as e:
        raise MalformedStructureError(path, f"workbook part is not valid XML: {e}")

    if node.find(SHEETS_TAG) is None:
        raise MalformedStructureError(path, "workbook has no sheet list")

    try:
        package = WorkbookPackage.from_tree(node)
    except Exception as e:
        raise MalformedStructureError(path, f"workbook part could not be read: {e}")

    # Step 3: Relationships from sheet entries to sheet parts
    sheet_targets: Dict[str, str] = {}
    try:
        rels = get_dependents(archive, get_rels_path(workbook_part))
        for rel in rels:
            if rel.Id:
                sheet_targets[rel.Id] = rel.target
    except KeyError:
        logger.warning(f"Workbook relationships missing from {path.name}; sheets will read as empty")

    # Step 4: Sheet descriptors
    sheets = []
    for position, child in enumerate(package.sheets):
        name = child.name if child.name is not None else "(unnamed)"
        sheets.append(SheetDescriptor(
            name=name,
            stable_id=str(child.sheetId) if child.sheetId is not None else "",
            relationship_handle=child.id or "",
            hidden=child.state == "hidden",
            very_hidden=child.state == "veryHidden",
            position=position,
        ))

    shared_strings = manifest.find(SHARED_STRINGS)
    shared_strings_part = shared_strings.PartName[1:] if shared_strings is not None else None

    styles = manifest.find(STYLES_TYPE)
    styles_part = styles.PartName[1:] if styles is not None else ARC_STYLE

    logger.debug(f"Opened {path.name}: {len(sheets)} sheet(s)")

    return WorkbookSnapshot(
        path=path,
        archive=archive,
        sheets=sheets,
        sheet_targets=sheet_targets,
        shared_strings_part=shared_strings_part,
        styles_part=styles_part,
    )


def _find_workbook_part(manifest: Manifest) -> Optional[str]:
    for content_type in WORKBOOK_CONTENT_TYPES:
        part = manifest.find(content_type)
        if part is not None:
            return part.PartName.lstrip("/")

    # Some writers rely on the default content type instead of an override
    defaults = {default.ContentType for default in manifest.Default}
    if defaults & set(WORKBOOK_CONTENT_TYPES):
        return ARC_WORKBOOK

    return None
