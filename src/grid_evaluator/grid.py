from dataclasses import dataclass, field
from typing import Iterator, Sequence

import pandas as pd
from openpyxl.utils import get_column_letter

from grid_evaluator.addressing import decode, encode
from grid_evaluator.errors import ErrorKind


@dataclass(eq=False)
class Cell:
    address: str
    expression: str
    # Transitive references, excluding the cell itself. None until analyzed.
    dependency_set: frozenset[str] | None = None
    has_error: bool = False
    errors: set[ErrorKind] = field(default_factory=set)
    # Computed decimal string or the error marker. None until evaluated.
    value: str | None = None

    @property
    def analyzed(self) -> bool:
        return self.dependency_set is not None

    def flag(self, kind: ErrorKind) -> None:
        self.has_error = True
        self.errors.add(kind)

    def record(self, kind: ErrorKind) -> None:
        """Note an error found while evaluating, leaving the analysis result as is."""
        self.errors.add(kind)


class Grid:
    """Rows of cells addressed by 0-based (column, row) positions.

    Rows normally share the same width. A ragged grid is accepted, in which case
    bounds are checked against the length of the referenced row.
    """

    def __init__(self, rows: list[list[Cell]]):
        self.rows = rows

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[str]]) -> "Grid":
        return cls(
            [
                [Cell(encode(col, row), expression) for col, expression in enumerate(line)]
                for row, line in enumerate(rows)
            ]
        )

    @property
    def height(self) -> int:
        return len(self.rows)

    @property
    def width(self) -> int:
        return max((len(row) for row in self.rows), default=0)

    def __len__(self):
        return sum(len(row) for row in self.rows)

    def __iter__(self) -> Iterator[Cell]:
        """Iterate over cells in row-major order."""
        for row in self.rows:
            yield from row

    def contains(self, col: int, row: int) -> bool:
        return 0 <= row < len(self.rows) and 0 <= col < len(self.rows[row])

    def cell(self, col: int, row: int) -> Cell:
        return self.rows[row][col]

    def get(self, address: str) -> Cell:
        """Look up a cell by address. Raises InvalidAddressError if it is not in the grid."""
        return self.cell(*decode(address, self))

    def expressions(self) -> list[list[str]]:
        return [[cell.expression for cell in row] for row in self.rows]

    def values(self) -> list[list[str | None]]:
        return [[cell.value for cell in row] for row in self.rows]

    def copy_raw(self) -> "Grid":
        """A fresh, unanalyzed grid holding the same expressions."""
        return Grid.from_rows(self.expressions())

    def to_dataframe(self) -> pd.DataFrame:
        """Computed values as a DataFrame, labelled like a spreadsheet."""
        df = pd.DataFrame(
            self.values(),
            columns=[get_column_letter(i + 1) for i in range(self.width)],
        )
        df.index = pd.RangeIndex(1, self.height + 1)
        return df
