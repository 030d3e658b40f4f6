"""Tabular step argument.

A ``DataTable`` wraps the rows of a Gherkin table as lists of strings. The
first row is the header for :meth:`DataTable.hashes` and
:meth:`DataTable.to_frame`.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Iterator, List, Sequence

import pandas as pd


class DataTable:
    def __init__(self, rows: Iterable[Sequence[Any]]) -> None:
        self._rows: List[List[str]] = [[str(cell) for cell in row] for row in rows]
        widths = {len(row) for row in self._rows}
        if len(widths) > 1:
            raise ValueError(f"All table rows must have the same width, got {sorted(widths)}")

    def raw(self) -> List[List[str]]:
        """Return a copy of every row, header included."""
        return [list(row) for row in self._rows]

    def rows(self) -> List[List[str]]:
        """Return the rows without the header."""
        return [list(row) for row in self._rows[1:]]

    def hashes(self) -> List[Dict[str, str]]:
        """Return one dict per body row keyed by the header cells."""
        if not self._rows:
            return []
        header = self._rows[0]
        return [dict(zip(header, row)) for row in self._rows[1:]]

    def rows_hash(self) -> Dict[str, str]:
        """Map the first column to the second for a two-column table."""
        if self._rows and len(self._rows[0]) != 2:
            raise ValueError("rows_hash can only be called on a table with exactly two columns")
        return {key: value for key, value in self._rows}

    def transpose(self) -> "DataTable":
        return DataTable(zip(*self._rows))

    def to_frame(self) -> pd.DataFrame:
        """Return the body rows as a DataFrame with the header as columns."""
        if not self._rows:
            return pd.DataFrame()
        return pd.DataFrame(self.rows(), columns=self._rows[0])

    def __len__(self) -> int:
        return len(self._rows)

    def __iter__(self) -> Iterator[List[str]]:
        return iter(self.raw())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DataTable):
            return NotImplemented
        return self._rows == other._rows

    def __repr__(self) -> str:
        return f"DataTable({self._rows!r})"
