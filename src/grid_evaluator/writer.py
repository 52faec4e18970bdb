import sys
from pathlib import Path
from typing import IO

import pandas as pd
from openpyxl.utils import get_column_letter

from grid_evaluator.config import DEFAULT_DELIMITER, ERROR_MARKER
from grid_evaluator.errors import GridStateError
from grid_evaluator.grid import Grid


def format_grid(grid: Grid, delimiter: str = DEFAULT_DELIMITER) -> str:
    """Render computed values with the input's shape, one line per row."""
    lines = []
    for row in grid.rows:
        values = []
        for cell in row:
            if cell.value is None:
                raise GridStateError(f"Cell {cell.address} has not been evaluated")
            values.append(cell.value)
        lines.append(delimiter.join(values) + "\n")
    return "".join(lines)


def write_grid(
    grid: Grid,
    destination: str | Path | IO[str] | None = None,
    delimiter: str = DEFAULT_DELIMITER,
) -> None:
    """Write computed values to a path or text stream (stdout by default)."""
    output = format_grid(grid, delimiter)
    if destination is None:
        destination = sys.stdout
    if isinstance(destination, (str, Path)):
        Path(destination).write_text(output, encoding="utf-8")
    else:
        destination.write(output)


def parse_number(val: str) -> int | float:
    is_float = "." in val
    return float(val) if is_float else int(val)


def _export_value(value, error_marker: str) -> int | float | str | None:
    # Ragged grids leave missing cells in the frame
    if not isinstance(value, str) or value == error_marker:
        return value
    return parse_number(value)


def write_workbook(
    grid: Grid,
    path: str | Path,
    sheet_name: str = "Results",
    error_marker: str = ERROR_MARKER,
    max_width: float = 50,
) -> None:
    """Export computed values to an .xlsx file.

    Numbers are stored as numbers and errors as text. Columns are sized to their
    content.
    """
    df = grid.to_dataframe().map(lambda value: _export_value(value, error_marker))
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name=sheet_name, index=False, header=False)

        ws = writer.sheets[sheet_name]
        # 1-based indexing
        for i, col in enumerate(df.columns, start=1):
            col_size = df[col].astype(str).str.len().max()
            if pd.isna(col_size):
                col_size = 0
            ws.column_dimensions[get_column_letter(i)].width = float(
                min(col_size + 2, max_width)
            )
