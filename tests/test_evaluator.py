from decimal import Decimal

import pytest
from grid_evaluator.analyzer import analyze
from grid_evaluator.config import ERROR_MARKER, EvaluatorConfig
from grid_evaluator.errors import ErrorKind, GridStateError
from grid_evaluator.evaluator import PostfixEvaluator
from grid_evaluator.grid import Grid
from grid_evaluator.interpreter import evaluate_rows
from grid_evaluator.scheduler import schedule


def evaluate(expression: str, config: EvaluatorConfig | None = None) -> str:
    """Helper function to evaluate a single-cell grid."""
    return evaluate_rows([[expression]], config)[0][0]


def evaluated(rows: list[list[str]]) -> Grid:
    grid = Grid.from_rows(rows)
    PostfixEvaluator(grid).evaluate(schedule(analyze(grid)))
    return grid


class TestArithmetic:
    def test_basic_operators(self):
        assert evaluate("3 4 +") == "7"
        assert evaluate("10 4 /") == "2.5"
        assert evaluate("2 3 -") == "-1"
        assert evaluate("6 7 *") == "42"

    def test_operand_order(self):
        assert evaluate("10 2 -") == "8"
        assert evaluate("2 10 /") == "0.2"

    def test_longer_expressions(self):
        assert evaluate("1 2 + 3 4 + *") == "21"
        assert evaluate("5 1 2 + 4 * + 3 -") == "14"

    def test_single_value(self):
        assert evaluate("5") == "5"
        assert evaluate("-5") == "-5"
        assert evaluate("1.50") == "1.5"
        assert evaluate("  42  ") == "42"

    def test_negative_operands(self):
        assert evaluate("-3 -4 *") == "12"
        assert evaluate("3 -4 +") == "-1"


class TestFormatting:
    def test_one_fractional_digit(self):
        assert evaluate("1 3 /") == "0.3"
        assert evaluate("2 3 /") == "0.7"
        assert evaluate("1.25 2 *") == "2.5"

    def test_half_even_rounding(self):
        assert evaluate("0.25 1 *") == "0.2"
        assert evaluate("0.35 1 *") == "0.4"

    def test_trailing_zeros_trimmed(self):
        assert evaluate("2.5 2 *") == "5"
        assert evaluate("0.04 1 *") == "0"

    def test_negative_zero(self):
        assert evaluate("-0.04 1 *") == "0"
        assert evaluate("0 -1 *") == "0"

    def test_large_values(self):
        assert evaluate("1000000000000000000000000000000 2 *") == (
            "2000000000000000000000000000000"
        )

    def test_configurable_digits(self):
        assert evaluate("1 3 /", EvaluatorConfig(fractional_digits=2)) == "0.33"
        assert evaluate("5 2 /", EvaluatorConfig(fractional_digits=0)) == "2"
        assert evaluate("7 2 /", EvaluatorConfig(fractional_digits=0)) == "4"

    def test_format_value(self):
        evaluator = PostfixEvaluator(Grid.from_rows([]))
        assert evaluator.format_value(Decimal("1E+2")) == "100"
        assert evaluator.format_value(Decimal("3.14159")) == "3.1"


class TestMalformedExpressions:
    @pytest.mark.parametrize(
        "expression",
        ["3 4", "+", "1 +", "1 2 + +", "", "   "],
    )
    def test_stack_imbalance(self, expression):
        assert evaluate(expression) == ERROR_MARKER

    def test_invalid_tokens(self):
        assert evaluate("1 Q +") == ERROR_MARKER
        assert evaluate("1e3") == ERROR_MARKER
        assert evaluate("3 4 ^") == ERROR_MARKER

    def test_non_ascii_digits(self):
        assert evaluate("1\u0661 1 +") == ERROR_MARKER
        assert evaluate_rows([["1", "A\u0661 1 +"]]) == [["1", ERROR_MARKER]]

    def test_error_kind_is_recorded(self):
        grid = evaluated([["3 4"]])
        assert grid.get("A1").errors == {ErrorKind.MALFORMED_EXPRESSION}


class TestDivisionByZero:
    def test_division_by_zero(self):
        assert evaluate("1 0 /") == ERROR_MARKER
        assert evaluate("0 0 /") == ERROR_MARKER
        assert evaluate("1 0.0 /") == ERROR_MARKER

    def test_division_by_computed_zero(self):
        assert evaluate("1 2 2 - /") == ERROR_MARKER

    def test_error_kind_is_recorded(self):
        grid = evaluated([["1 0 /"]])
        assert grid.get("A1").errors == {ErrorKind.ARITHMETIC}

    def test_analysis_flag_is_unchanged_by_evaluation(self):
        grid = Grid.from_rows([["3 4", "1 0 /"]])
        order = schedule(analyze(grid))
        assert [cell.has_error for cell in grid] == [False, False]
        PostfixEvaluator(grid).evaluate(order)
        assert [cell.has_error for cell in grid] == [False, False]
        assert grid.values() == [[ERROR_MARKER, ERROR_MARKER]]


class TestCellReferences:
    def test_reference_values(self):
        grid = evaluated([["5", "A1 2 *", "A1 B1 +"]])
        assert grid.values() == [["5", "10", "15"]]

    def test_rounded_values_are_reused(self):
        # Dependents read the formatted value of the cells they reference
        grid = evaluated([["1 3 /", "A1 3 *"]])
        assert grid.values() == [["0.3", "0.9"]]

    def test_errors_found_during_evaluation_propagate(self):
        grid = evaluated([["1 0 /", "A1 1 +", "5"]])
        assert grid.values() == [[ERROR_MARKER, ERROR_MARKER, "5"]]
        assert grid.get("B1").errors == {ErrorKind.DEPENDENCY}

    def test_flagged_cells_are_not_evaluated(self):
        grid = Grid.from_rows([["1 2 +"]])
        cell = grid.get("A1")
        cell.has_error = True
        PostfixEvaluator(grid).evaluate_cell(cell)
        assert cell.value == ERROR_MARKER

    def test_custom_error_marker(self):
        config = EvaluatorConfig(error_marker="#BAD")
        assert evaluate_rows([["A1", "3 4 +"]], config) == [["#BAD", "7"]]

    def test_unevaluated_reference(self):
        grid = Grid.from_rows([["5", "A1"]])
        analyze(grid)
        with pytest.raises(GridStateError):
            PostfixEvaluator(grid).evaluate_cell(grid.get("B1"))
