import re
from pathlib import Path
from zipfile import BadZipFile

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from grid_evaluator.config import DEFAULT_DELIMITER
from grid_evaluator.errors import GridInputError
from grid_evaluator.grid import Grid

LINE_BREAK_REGEX = re.compile(r"\r\n|\r|\n")


def read_text(text: str, delimiter: str = DEFAULT_DELIMITER) -> Grid:
    """Build a grid from delimited text, one row per line.

    The delimiter cannot be escaped. Rows end at LF, CR or CRLF only. A final
    line break does not add an empty row.
    """
    lines = LINE_BREAK_REGEX.split(text)
    if lines[-1] == "":
        lines.pop()
    return Grid.from_rows([line.split(delimiter) for line in lines])


def load_grid(path: str | Path, delimiter: str = DEFAULT_DELIMITER) -> Grid:
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise GridInputError(f"Cannot read grid from {path}: {e}") from e
    return read_text(text, delimiter)


def _cell_to_expression(value) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return str(value).upper()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def load_workbook_grid(path: str | Path, sheet: str | None = None) -> Grid:
    """Build a grid from the used range of an .xlsx worksheet.

    Every cell is read as text and treated as a postfix expression, so `3 4 +`
    must be stored as a string in the workbook. Numbers are converted without a
    trailing `.0`.
    """
    try:
        wb = load_workbook(path)
    except (OSError, BadZipFile, InvalidFileException) as e:
        raise GridInputError(f"Cannot open workbook {path}: {e}") from e
    if sheet is None:
        ws = wb.worksheets[0]
    elif sheet in wb.sheetnames:
        ws = wb[sheet]
    else:
        raise GridInputError(f'Worksheet "{sheet}" not found in {path}')
    # iter_rows starts at A1, keeping positions aligned with addresses
    rows = [
        [_cell_to_expression(value) for value in row]
        for row in ws.iter_rows(values_only=True)
    ]
    return Grid.from_rows(rows)
