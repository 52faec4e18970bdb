from dataclasses import dataclass

ERROR_MARKER = "#ERR"
DEFAULT_DELIMITER = ","
OPERATORS = ("+", "-", "*", "/")


@dataclass(frozen=True)
class EvaluatorConfig:
    """Settings for a single evaluation run.

    Every run receives its own config through `EvaluationContext`; nothing here
    is read from process-wide state.
    """

    delimiter: str = DEFAULT_DELIMITER
    error_marker: str = ERROR_MARKER
    # Number of fractional digits kept when formatting results
    fractional_digits: int = 1

    def __post_init__(self):
        if len(self.delimiter) != 1:
            raise ValueError(
                f"Delimiter must be a single character, received: {self.delimiter!r}"
            )
        if self.fractional_digits < 0:
            raise ValueError(
                f"fractional_digits must be >= 0, received: {self.fractional_digits}"
            )
