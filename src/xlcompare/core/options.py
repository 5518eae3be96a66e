"""
Comparison options.

A flat, immutable set of independent toggles. No flag implies another and
every combination is legal. Sheet presence and visibility are always
compared, whatever the flags say.
"""

import dataclasses
from dataclasses import dataclass, asdict, fields
from typing import Any, Dict, Mapping


@dataclass(frozen=True)
class ComparisonOptions:
    """Which comparison dimensions run."""

    compare_values: bool = True
    compare_formulas: bool = True
    include_hidden_sheets: bool = True

    # Workbook level
    compare_sheet_order: bool = True

    # Worksheet level
    compare_used_range: bool = True
    compare_validations: bool = True
    compare_conditional_formats: bool = False
    compare_hidden_rows_cols: bool = False

    # Cell level (style index + number format)
    compare_cell_format: bool = False

    @property
    def compares_cells(self) -> bool:
        """True when at least one cell-level dimension is enabled."""
        return self.compare_values or self.compare_formulas or self.compare_cell_format

    def replace(self, **changes: Any) -> "ComparisonOptions":
        """Return a copy with the given flags changed."""
        return dataclasses.replace(self, **changes)

    def to_dict(self) -> Dict[str, bool]:
        return asdict(self)

    @classmethod
    def field_names(cls):
        return [f.name for f in fields(cls)]

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ComparisonOptions":
        """
        Build options from a mapping of flag name to value.

        Args:
            data: Mapping with a subset of the flag names

        Returns:
            ComparisonOptions with defaults for missing flags

        Raises:
            ValueError: If an unknown flag is given or a value is not a bool
        """
        known = set(cls.field_names())
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown comparison option(s): {', '.join(unknown)}")

        for key, value in data.items():
            if not isinstance(value, bool):
                raise ValueError(f"Comparison option '{key}' must be true or false, got {value!r}")

        return cls(**dict(data))
