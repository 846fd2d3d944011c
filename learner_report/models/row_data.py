from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any

from ..services.matching import resolve

"""RowData model for the tabular row source.

RowData is one decoded spreadsheet row: an ordered, loosely-typed mapping from
header name to cell value. Keys and arity are not fixed across rows, so the
model stays an opaque container and field lookup goes through
``services.matching.resolve`` (header-normalized access).
"""

__all__ = [
    "RowData",
]


@dataclass(frozen=True)
class RowData(Mapping[str, Any]):
    """Single decoded row (immutable once produced by the reader).

    The row_number is the 1-based data-row ordinal within the source sheet
    (header row excluded, blank rows not counted).
    """
    row_number: int  # 1-based data row ordinal
    values: dict[str, Any] = field(default_factory=dict)  # header -> value (insertion order = column order)

    def __getitem__(self, key: str) -> Any:
        return self.values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self.values)

    def __len__(self) -> int:
        return len(self.values)

    def resolve(self, target: str) -> Any:
        """Header-normalized lookup (see services.matching.resolve)."""
        return resolve(self.values, target)
