import argparse
import logging
import sys

from grid_evaluator.config import DEFAULT_DELIMITER, EvaluatorConfig
from grid_evaluator.errors import GridInputError
from grid_evaluator.interpreter import evaluate_grid
from grid_evaluator.reader import load_grid, load_workbook_grid
from grid_evaluator.writer import write_grid, write_workbook


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="grid-eval",
        description="Evaluate a grid of postfix expressions that reference each other",
    )
    parser.add_argument("input", help="Path to the delimited text (or .xlsx) grid")
    parser.add_argument(
        "-d",
        "--delimiter",
        default=DEFAULT_DELIMITER,
        help="Cell delimiter for text input and output (default: %(default)r)",
    )
    parser.add_argument(
        "-o", "--output", help="Write results to this file instead of stdout"
    )
    parser.add_argument("--xlsx", help="Also export results to an .xlsx workbook")
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Log analysis and evaluation errors"
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    # argparse exits with status 2 when the input path is missing
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(message)s",
    )

    try:
        config = EvaluatorConfig(delimiter=args.delimiter)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    try:
        if args.input.lower().endswith(".xlsx"):
            grid = load_workbook_grid(args.input)
        else:
            grid = load_grid(args.input, config.delimiter)
    except GridInputError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    result = evaluate_grid(grid, config)
    write_grid(result, args.output, config.delimiter)
    if args.xlsx:
        write_workbook(result, args.xlsx, error_marker=config.error_marker)
    return 0


if __name__ == "__main__":
    sys.exit(main())
