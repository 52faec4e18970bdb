import re
from typing import TYPE_CHECKING

from openpyxl.utils import column_index_from_string, get_column_letter

from grid_evaluator.errors import InvalidAddressError

if TYPE_CHECKING:
    from grid_evaluator.grid import Grid

CELL_ADDRESS_REGEX = re.compile(r"^([A-Za-z]+)([0-9]+)$")


def is_address(token: str) -> bool:
    """Return True if the token has the shape of a cell address (e.g. `b12`)."""
    return CELL_ADDRESS_REGEX.match(token) is not None


def encode(col: int, row: int) -> str:
    """Map a 0-based (column, row) pair to its address, e.g. (27, 4) -> "AB5"."""
    if col < 0 or row < 0:
        raise InvalidAddressError(f"Negative position: ({col}, {row})")
    try:
        # openpyxl columns are 1-based
        letters = get_column_letter(col + 1)
    except ValueError as e:
        raise InvalidAddressError(f"Column {col} is out of range") from e
    return f"{letters}{row + 1}"


def decode(address: str, grid: "Grid | None" = None) -> tuple[int, int]:
    """Map an address back to its 0-based (column, row) pair.

    Letters are case-insensitive. If a grid is given, the position must also
    lie inside it.
    """
    match = CELL_ADDRESS_REGEX.match(address)
    if match is None:
        raise InvalidAddressError(f"Invalid cell address: {address!r}")
    letters, digits = match.groups()
    try:
        col = column_index_from_string(letters.upper()) - 1
    except ValueError as e:
        raise InvalidAddressError(f"Column out of range in address {address!r}") from e
    row = int(digits) - 1
    if row < 0:
        raise InvalidAddressError(f"Row numbers start at 1: {address!r}")
    if grid is not None and not grid.contains(col, row):
        raise InvalidAddressError(f"Address {address!r} is outside the grid")
    return col, row


def normalize(address: str) -> str:
    """Canonical form of an address: `a01` -> `A1`."""
    return encode(*decode(address))
