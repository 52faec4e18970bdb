from typing import Iterable, List

from grid_evaluator.errors import GridStateError
from grid_evaluator.grid import Cell


def schedule(cells: Iterable[Cell]) -> List[Cell]:
    """Order analyzed cells so that every cell comes after the cells it references.

    Sorting by dependency-set size is enough: an acyclic cell's set contains the
    set of each cell it references plus that cell's own address, so it is
    strictly larger. Cells caught in a cycle break this, but they are already
    flagged as errors and never read another cell's value.
    """
    cells = list(cells)
    for cell in cells:
        if cell.dependency_set is None:
            raise GridStateError(f"Cell {cell.address} has not been analyzed")
    # sorted() is stable, equal sizes keep their completion order
    return sorted(cells, key=lambda cell: len(cell.dependency_set or ()))
