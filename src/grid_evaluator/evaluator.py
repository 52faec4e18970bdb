import logging
from decimal import ROUND_HALF_EVEN, Context, Decimal, DecimalException
from typing import Iterable

from grid_evaluator.config import EvaluatorConfig
from grid_evaluator.errors import (
    ArithmeticEvaluationError,
    DependencyError,
    DivisionByZeroError,
    EvaluationError,
    GridStateError,
    InvalidAddressError,
    MalformedExpressionError,
    OutOfBoundsReferenceError,
    StackUnderflowError,
)
from grid_evaluator.grid import Cell, Grid
from grid_evaluator.tokenizer import Token, TokenType, tokenize


class OperandStack:
    def __init__(self):
        self.stack: list[Decimal] = []

    def __len__(self):
        return len(self.stack)

    def push(self, value: Decimal) -> None:
        self.stack.append(value)

    def pop_pair(self) -> tuple[Decimal, Decimal]:
        """Pop the right operand, then the left one."""
        if len(self.stack) < 2:
            raise StackUnderflowError(
                f"Operator needs 2 operands, {len(self.stack)} available"
            )
        right = self.stack.pop()
        left = self.stack.pop()
        return left, right

    def result(self) -> Decimal:
        if len(self.stack) != 1:
            raise MalformedExpressionError(
                f"Expression left {len(self.stack)} values on the stack"
            )
        return self.stack[0]


class PostfixEvaluator:
    """Evaluates cell expressions with a decimal operand stack.

    Cells must be evaluated in an order where referenced cells come first, see
    `grid_evaluator.scheduler.schedule`.
    """

    def __init__(self, grid: Grid, config: EvaluatorConfig | None = None):
        self.grid = grid
        self.config = config or EvaluatorConfig()
        # Per-evaluator arithmetic context, the thread-wide decimal context is left alone
        self.context = Context()

    def evaluate(self, cells: Iterable[Cell]) -> None:
        for cell in cells:
            self.evaluate_cell(cell)

    def evaluate_cell(self, cell: Cell) -> str:
        if cell.has_error:
            cell.value = self.config.error_marker
            return cell.value
        try:
            result = self._evaluate_tokens(cell, tokenize(cell.expression))
            cell.value = self.format_value(result)
        except EvaluationError as e:
            logging.debug(f"{cell.address}: {e}")
            cell.record(e.kind)
            cell.value = self.config.error_marker
        return cell.value

    def _evaluate_tokens(self, cell: Cell, tokens: list[Token]) -> Decimal:
        stack = OperandStack()
        for token in tokens:
            match token.type:
                case TokenType.NUMBER:
                    stack.push(Decimal(token.value))
                case TokenType.CELL_REF:
                    stack.push(self._read_reference(token.value))
                case TokenType.OPERATOR:
                    left, right = stack.pop_pair()
                    stack.push(self._apply(token.value, left, right))
                case _:
                    # Only reachable for cells that skipped dependency analysis
                    raise MalformedExpressionError(
                        f"Invalid token {token.value!r} in {cell.address}"
                    )
        return stack.result()

    def _read_reference(self, address: str) -> Decimal:
        try:
            value = self.grid.get(address).value
        except InvalidAddressError as e:
            raise OutOfBoundsReferenceError(str(e)) from e
        if value is None:
            raise GridStateError(f"Cell {address} was read before being evaluated")
        if value == self.config.error_marker:
            raise DependencyError(f"Referenced cell {address} is an error")
        return Decimal(value)

    def _apply(self, operator: str, left: Decimal, right: Decimal) -> Decimal:
        try:
            match operator:
                case "+":
                    return self.context.add(left, right)
                case "-":
                    return self.context.subtract(left, right)
                case "*":
                    return self.context.multiply(left, right)
                case "/":
                    if right == 0:
                        raise DivisionByZeroError(f"Division of {left} by zero")
                    return self.context.divide(left, right)
                case _:
                    raise ValueError(f"Unknown operator: {operator}")
        except DecimalException as e:
            raise ArithmeticEvaluationError(f"{left} {operator} {right}: {e!r}") from e

    def format_value(self, value: Decimal) -> str:
        """Round to `fractional_digits` places (half-even) and trim trailing zeros."""
        exponent = Decimal(1).scaleb(-self.config.fractional_digits)
        # Enough precision for the integer part, otherwise quantize() fails on large values
        precision = max(
            self.context.prec, value.adjusted() + self.config.fractional_digits + 2
        )
        rounded = value.quantize(
            exponent, rounding=ROUND_HALF_EVEN, context=Context(prec=precision)
        )
        text = f"{rounded:f}"
        if "." in text:
            text = text.rstrip("0").rstrip(".")
        if text == "-0":
            text = "0"
        return text
