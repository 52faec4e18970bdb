from enum import Enum, auto


class ErrorKind(Enum):
    INVALID_TOKEN = auto()
    SELF_REFERENCE = auto()
    OUT_OF_BOUNDS = auto()
    CYCLE = auto()
    # Stack underflow or leftover operands
    MALFORMED_EXPRESSION = auto()
    # A referenced cell is itself erroneous
    DEPENDENCY = auto()
    # Division by zero, overflow
    ARITHMETIC = auto()


class GridError(Exception):
    pass


class InvalidAddressError(GridError):
    pass


class GridStateError(GridError):
    """Raised when a pipeline stage runs before the stage it depends on."""


class GridInputError(GridError):
    pass


class EvaluationError(GridError):
    kind: ErrorKind = ErrorKind.MALFORMED_EXPRESSION


class StackUnderflowError(EvaluationError):
    kind = ErrorKind.MALFORMED_EXPRESSION


class MalformedExpressionError(EvaluationError):
    kind = ErrorKind.MALFORMED_EXPRESSION


class DependencyError(EvaluationError):
    kind = ErrorKind.DEPENDENCY


class ArithmeticEvaluationError(EvaluationError):
    kind = ErrorKind.ARITHMETIC


class DivisionByZeroError(ArithmeticEvaluationError):
    pass


class OutOfBoundsReferenceError(EvaluationError):
    kind = ErrorKind.OUT_OF_BOUNDS
