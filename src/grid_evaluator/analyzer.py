import logging
from enum import Enum, auto
from typing import List

from grid_evaluator.addressing import decode
from grid_evaluator.errors import ErrorKind, GridStateError, InvalidAddressError
from grid_evaluator.grid import Cell, Grid
from grid_evaluator.tokenizer import Token, TokenType, tokenize


class VisitState(Enum):
    UNVISITED = auto()
    IN_PROGRESS = auto()
    DONE = auto()


class _Frame:
    """A cell whose token scan is suspended while one of its references is analyzed."""

    __slots__ = ("cell", "tokens", "index", "dependencies", "pending")

    def __init__(self, cell: Cell):
        self.cell = cell
        self.tokens: List[Token] = tokenize(cell.expression)
        self.index = 0
        self.dependencies: set[str] = set()
        # Referenced cell being analyzed on our behalf
        self.pending: Cell | None = None


class DependencyAnalyzer:
    """Annotates every cell of a grid with its dependency set and error flag.

    The walk is a depth-first traversal with an explicit stack of frames. Cell
    state lives in `self.state`, local to this analyzer, rather than on the
    cells. `completion_order` lists cells in the order their analysis finished.
    """

    def __init__(self, grid: Grid):
        self.grid = grid
        self.state: dict[str, VisitState] = {}
        self.completion_order: List[Cell] = []

    def analyze(self) -> List[Cell]:
        if any(cell.analyzed for cell in self.grid):
            raise GridStateError(
                "Grid has already been analyzed, use Grid.copy_raw() to run again"
            )
        for cell in self.grid:
            if self._state(cell) is VisitState.UNVISITED:
                self._walk(cell)
        return self.completion_order

    def _state(self, cell: Cell) -> VisitState:
        return self.state.get(cell.address, VisitState.UNVISITED)

    def _walk(self, root: Cell) -> None:
        stack = [self._enter(root)]
        while stack:
            frame = stack[-1]
            if frame.pending is not None:
                self._absorb(frame, frame.pending)
                frame.pending = None

            child = self._scan(frame)
            if child is not None:
                frame.pending = child
                stack.append(self._enter(child))
                continue

            self._finish(frame)
            stack.pop()

    def _enter(self, cell: Cell) -> _Frame:
        self.state[cell.address] = VisitState.IN_PROGRESS
        return _Frame(cell)

    def _scan(self, frame: _Frame) -> Cell | None:
        """Resume the token scan of a frame.

        Returns the next referenced cell that needs analyzing first, or None
        once the scan is complete.
        """
        cell = frame.cell
        while frame.index < len(frame.tokens):
            token = frame.tokens[frame.index]
            frame.index += 1

            if token.type is TokenType.INVALID:
                self._flag(cell, ErrorKind.INVALID_TOKEN, token.value)
                continue
            if token.type is not TokenType.CELL_REF:
                continue

            try:
                target = self.grid.cell(*decode(token.value, self.grid))
            except InvalidAddressError:
                self._flag(cell, ErrorKind.OUT_OF_BOUNDS, token.value)
                continue

            if target is cell:
                self._flag(cell, ErrorKind.SELF_REFERENCE, token.value)
                continue

            state = self._state(target)
            if state is VisitState.IN_PROGRESS:
                self._flag(cell, ErrorKind.CYCLE, token.value)
                # A cycle ends the scan of this cell
                frame.index = len(frame.tokens)
                break
            if state is VisitState.DONE:
                self._absorb(frame, target)
                continue
            return target
        return None

    def _absorb(self, frame: _Frame, target: Cell) -> None:
        assert target.dependency_set is not None, (
            f"Cell {target.address} absorbed before its analysis completed"
        )
        frame.dependencies.add(target.address)
        frame.dependencies.update(target.dependency_set)
        if target.has_error:
            frame.cell.flag(ErrorKind.DEPENDENCY)

    def _finish(self, frame: _Frame) -> None:
        cell = frame.cell
        frame.dependencies.discard(cell.address)
        cell.dependency_set = frozenset(frame.dependencies)
        self.state[cell.address] = VisitState.DONE
        self.completion_order.append(cell)

    def _flag(self, cell: Cell, kind: ErrorKind, token: str) -> None:
        logging.debug(f"{cell.address}: {kind.name.lower()} ({token!r})")
        cell.flag(kind)


def analyze(grid: Grid) -> List[Cell]:
    """Annotate the grid in place and return cells in completion order."""
    return DependencyAnalyzer(grid).analyze()
