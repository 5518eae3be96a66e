"""
Number-format resolution from the workbook style table.

A cell points at an entry of cellXfs through its style index; that entry
points at a number format id, which is either a custom format declared in
numFmts or one of Excel's built-in formats.
"""
import logging
import zipfile
from typing import Dict, List, Optional

from openpyxl.styles.numbers import BUILTIN_FORMATS
from openpyxl.xml.constants import ARC_STYLE, SHEET_MAIN_NS
from openpyxl.xml.functions import fromstring

logger = logging.getLogger(__name__)

CELL_XFS_TAG = f"{{{SHEET_MAIN_NS}}}cellXfs"
XF_TAG = f"{{{SHEET_MAIN_NS}}}xf"
NUM_FMTS_TAG = f"{{{SHEET_MAIN_NS}}}numFmts"
NUM_FMT_TAG = f"{{{SHEET_MAIN_NS}}}numFmt"


class NumberFormatResolver:
    """
    Resolves a style index to its number-format code.

    Lookups never raise: anything that cannot be resolved yields None.
    Results are cached per style index, so the style table is only walked
    once per distinct index. One resolver belongs to one opened workbook.
    """

    def __init__(
        self,
        xf_format_ids: List[Optional[int]],
        custom_formats: Dict[int, Optional[str]],
    ):
        """
        Args:
            xf_format_ids: numFmtId of each cellXfs entry (None when absent)
            custom_formats: Custom format code by numFmtId
        """
        self._xf_format_ids = xf_format_ids
        self._custom_formats = custom_formats
        self._cache: Dict[int, Optional[str]] = {}

    @classmethod
    def empty(cls) -> "NumberFormatResolver":
        return cls([], {})

    @classmethod
    def from_xml(cls, xml: bytes) -> "NumberFormatResolver":
        """Build a resolver from the raw styles part."""
        root = fromstring(xml)

        custom_formats: Dict[int, Optional[str]] = {}
        num_fmts = root.find(NUM_FMTS_TAG)
        if num_fmts is not None:
            for num_fmt in num_fmts.iter(NUM_FMT_TAG):
                fmt_id = _parse_int(num_fmt.get("numFmtId"))
                if fmt_id is None:
                    continue
                custom_formats[fmt_id] = num_fmt.get("formatCode")

        xf_format_ids: List[Optional[int]] = []
        cell_xfs = root.find(CELL_XFS_TAG)
        if cell_xfs is not None:
            for xf in cell_xfs.iter(XF_TAG):
                xf_format_ids.append(_parse_int(xf.get("numFmtId")))

        logger.debug(
            f"Loaded style table: {len(xf_format_ids)} cell formats, "
            f"{len(custom_formats)} custom number formats"
        )
        return cls(xf_format_ids, custom_formats)

    @classmethod
    def from_archive(cls, archive: zipfile.ZipFile, part: str = ARC_STYLE) -> "NumberFormatResolver":
        """
        Build a resolver from the styles part of an opened package.

        A missing or unreadable stylesheet gives a resolver that resolves
        everything to None.

        Args:
            archive: The opened package
            part: Archive path of the styles part
        """
        try:
            xml = archive.read(part)
        except KeyError:
            logger.debug(f"Workbook has no stylesheet at {part}")
            return cls.empty()

        try:
            return cls.from_xml(xml)
        except Exception as e:
            logger.warning(f"Failed to parse stylesheet, number formats unavailable: {e}")
            return cls.empty()

    def resolve(self, style_index: Optional[int]) -> Optional[str]:
        """
        Resolve the number-format code for a style index.

        Args:
            style_index: Index into cellXfs (None for unstyled cells)

        Returns:
            The custom format code, the built-in format code, the bare format
            id for unknown built-ins, or None if unresolvable
        """
        if style_index is None:
            return None

        if style_index in self._cache:
            return self._cache[style_index]

        code = self._lookup(style_index)
        self._cache[style_index] = code
        return code

    def _lookup(self, style_index: int) -> Optional[str]:
        if style_index < 0 or style_index >= len(self._xf_format_ids):
            return None

        fmt_id = self._xf_format_ids[style_index]
        if fmt_id is None:
            return None

        if fmt_id in self._custom_formats:
            return self._custom_formats[fmt_id]

        if fmt_id in BUILTIN_FORMATS:
            return BUILTIN_FORMATS[fmt_id]

        return str(fmt_id)


def _parse_int(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None
