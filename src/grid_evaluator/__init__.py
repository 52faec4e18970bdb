"""Evaluate grids of postfix expressions that reference each other by address."""

from grid_evaluator.addressing import decode, encode
from grid_evaluator.config import ERROR_MARKER, EvaluatorConfig
from grid_evaluator.grid import Cell, Grid
from grid_evaluator.interpreter import GridInterpreter, evaluate_grid, evaluate_rows
from grid_evaluator.reader import load_grid, load_workbook_grid, read_text
from grid_evaluator.writer import format_grid, write_grid, write_workbook

__all__ = [
    "ERROR_MARKER",
    "Cell",
    "EvaluatorConfig",
    "Grid",
    "GridInterpreter",
    "decode",
    "encode",
    "evaluate_grid",
    "evaluate_rows",
    "format_grid",
    "load_grid",
    "load_workbook_grid",
    "read_text",
    "write_grid",
    "write_workbook",
]
