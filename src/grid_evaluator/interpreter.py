import logging
from typing import List, Sequence

from grid_evaluator.analyzer import DependencyAnalyzer
from grid_evaluator.config import EvaluatorConfig
from grid_evaluator.errors import GridStateError
from grid_evaluator.evaluator import PostfixEvaluator
from grid_evaluator.grid import Cell, Grid
from grid_evaluator.scheduler import schedule


class EvaluationContext:
    """State owned by a single run: the grid being evaluated and the order in
    which its cells finished dependency analysis."""

    def __init__(self, grid: Grid, config: EvaluatorConfig | None = None):
        self.grid = grid
        self.config = config or EvaluatorConfig()
        self.completion_order: List[Cell] = []
        self.evaluation_order: List[Cell] = []


class GridInterpreter:
    def __init__(self, grid: Grid, config: EvaluatorConfig | None = None):
        self.source = grid
        self.config = config or EvaluatorConfig()
        self.context = EvaluationContext(grid.copy_raw(), self.config)

    @property
    def grid(self) -> Grid:
        return self.context.grid

    def analyze(self) -> List[Cell]:
        self.context.completion_order = DependencyAnalyzer(self.grid).analyze()
        return self.context.completion_order

    def schedule(self) -> List[Cell]:
        if len(self.context.completion_order) != len(self.grid):
            raise GridStateError("Dependencies must be analyzed before scheduling")
        self.context.evaluation_order = schedule(self.context.completion_order)
        return self.context.evaluation_order

    def evaluate(self) -> Grid:
        if len(self.context.evaluation_order) != len(self.grid):
            raise GridStateError("Cells must be scheduled before evaluation")
        PostfixEvaluator(self.grid, self.config).evaluate(self.context.evaluation_order)
        return self.grid

    def run(self) -> Grid:
        """Analyze, schedule and evaluate a fresh copy of the source grid.

        The source grid is never modified, so running twice yields the same result.
        """
        if self.context.completion_order:
            self.context = EvaluationContext(self.source.copy_raw(), self.config)
        self.analyze()
        self.schedule()
        grid = self.evaluate()
        errors = sum(cell.value == self.config.error_marker for cell in grid)
        logging.debug(
            f"Evaluated {len(grid)} cells in {grid.height} rows ({errors} errors)"
        )
        return grid


def evaluate_grid(grid: Grid, config: EvaluatorConfig | None = None) -> Grid:
    """Helper function to evaluate a grid, returning an evaluated copy."""
    return GridInterpreter(grid, config).run()


def evaluate_rows(
    rows: Sequence[Sequence[str]], config: EvaluatorConfig | None = None
) -> list[list[str | None]]:
    """Evaluate raw expression rows and return the computed values."""
    return evaluate_grid(Grid.from_rows(rows), config).values()
