"""
Diff output model.

A comparison produces an ordered, immutable sequence of DiffRecord values.
Grouping and filtering are pure reductions over that sequence.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple


class DiffKind(str, Enum):
    """Kind of difference."""
    ADDED = "Added"
    REMOVED = "Removed"
    MODIFIED = "Modified"


# Categories (the comparison dimension that produced a record)
CATEGORY_SHEET = "Sheet"
CATEGORY_SHEET_VISIBILITY = "SheetVisibility"
CATEGORY_SHEET_ORDER = "SheetOrderIndex"
CATEGORY_CELL = "Cell"
CATEGORY_VALUE = "Value"
CATEGORY_FORMULA = "Formula"
CATEGORY_STYLE_INDEX = "StyleIndex"
CATEGORY_NUMBER_FORMAT = "NumberFormat"
CATEGORY_USED_RANGE = "UsedRange"
CATEGORY_DATA_VALIDATION = "DataValidation"
CATEGORY_CONDITIONAL_FORMATTING = "ConditionalFormatting"
CATEGORY_HIDDEN_COLUMNS = "HiddenColumns"
CATEGORY_HIDDEN_ROWS = "HiddenRows"


@dataclass(frozen=True)
class DiffRecord:
    """
    A single semantic difference.

    sheet is empty for workbook-level records, address is empty for
    anything that is not about one cell.
    """
    sheet: str
    address: str
    kind: DiffKind
    category: str
    before: Optional[str] = None
    after: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sheet": self.sheet,
            "address": self.address,
            "kind": self.kind.value,
            "category": self.category,
            "before": self.before,
            "after": self.after,
        }


@dataclass(frozen=True)
class SheetSummary:
    """Counts of differences for one sheet."""
    sheet: str
    added: int = 0
    removed: int = 0
    modified: int = 0

    @property
    def total(self) -> int:
        return self.added + self.removed + self.modified

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sheet": self.sheet,
            "added": self.added,
            "removed": self.removed,
            "modified": self.modified,
        }


@dataclass(frozen=True)
class ComparisonResult:
    """Ordered result of one comparison run."""
    diffs: Tuple[DiffRecord, ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.diffs)

    def __iter__(self) -> Iterator[DiffRecord]:
        return iter(self.diffs)

    @property
    def is_empty(self) -> bool:
        return not self.diffs

    def summary(self) -> List[SheetSummary]:
        return summarize_by_sheet(self.diffs)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": len(self.diffs),
            "diffs": [d.to_dict() for d in self.diffs],
            "summary": [s.to_dict() for s in self.summary()],
        }


def summarize_by_sheet(diffs: Iterable[DiffRecord]) -> List[SheetSummary]:
    """
    Group differences by sheet name and count them by kind.

    Args:
        diffs: Diff records in any order

    Returns:
        One SheetSummary per sheet name, ordered by sheet name
    """
    counts: Dict[str, Dict[DiffKind, int]] = {}
    for diff in diffs:
        per_kind = counts.setdefault(diff.sheet, {kind: 0 for kind in DiffKind})
        per_kind[diff.kind] += 1

    return [
        SheetSummary(
            sheet=sheet,
            added=per_kind[DiffKind.ADDED],
            removed=per_kind[DiffKind.REMOVED],
            modified=per_kind[DiffKind.MODIFIED],
        )
        for sheet, per_kind in sorted(counts.items())
    ]


def filter_diffs(diffs: Iterable[DiffRecord], query: Optional[str]) -> List[DiffRecord]:
    """
    Keep records where any field contains the query (case-insensitive).

    A blank query keeps everything.
    """
    diffs = list(diffs)
    if query is None or not query.strip():
        return diffs

    needle = query.strip().lower()

    def matches(diff: DiffRecord) -> bool:
        fields = (diff.sheet, diff.address, diff.kind.value, diff.category, diff.before, diff.after)
        return any(value is not None and needle in value.lower() for value in fields)

    return [d for d in diffs if matches(d)]
