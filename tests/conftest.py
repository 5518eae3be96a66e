"""Shared fixtures: workbooks built with openpyxl and hand-built packages."""

import itertools
from pathlib import Path
from typing import Callable, Dict, Optional

import pytest
from openpyxl import Workbook

from tests.ooxml import write_package


@pytest.fixture
def build_workbook(tmp_path) -> Callable[..., Path]:
    """
    Factory saving an openpyxl workbook to tmp_path.

    Usage:
        path = build_workbook({"Data": {"A1": 5}}, setup=lambda wb: ...)
    """
    counter = itertools.count()

    def _build(
        sheets: Optional[Dict[str, Dict[str, object]]] = None,
        setup: Optional[Callable[[Workbook], None]] = None,
        name: Optional[str] = None,
    ) -> Path:
        sheets = sheets if sheets is not None else {"Sheet1": {}}
        wb = Workbook()
        wb.remove(wb.active)
        for sheet_name, cells in sheets.items():
            ws = wb.create_sheet(sheet_name)
            for address, value in cells.items():
                ws[address] = value
        if setup is not None:
            setup(wb)
        path = tmp_path / (name or f"workbook_{next(counter)}.xlsx")
        wb.save(path)
        return path

    return _build


@pytest.fixture
def build_package(tmp_path) -> Callable[..., Path]:
    """Factory writing a hand-built package to tmp_path (see write_package)."""
    counter = itertools.count()

    def _build(sheets: Dict[str, str], **kwargs) -> Path:
        return write_package(tmp_path / f"package_{next(counter)}.xlsx", sheets, **kwargs)

    return _build
