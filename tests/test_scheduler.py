import pytest
from grid_evaluator.analyzer import analyze
from grid_evaluator.errors import GridStateError
from grid_evaluator.grid import Grid
from grid_evaluator.scheduler import schedule
from grid_evaluator.tokenizer import TokenType, tokenize


def assert_references_come_first(order):
    seen = set()
    for cell in order:
        if not cell.has_error:
            for token in tokenize(cell.expression):
                if token.type is TokenType.CELL_REF:
                    assert token.value in seen, (
                        f"{cell.address} scheduled before its reference {token.value}"
                    )
        seen.add(cell.address)


class TestSchedule:
    def test_orders_by_dependency_count(self):
        grid = Grid.from_rows([["B1 C1 +", "C1 2 *", "1"]])
        order = schedule(analyze(grid))
        assert [cell.address for cell in order] == ["C1", "B1", "A1"]

    def test_references_come_first(self):
        grid = Grid.from_rows(
            [
                ["B2 C3 +", "A3 1 -", "7"],
                ["C1 A3 *", "A2 C1 /", "B1 B2 +"],
                ["2", "A2 C2 -", "B3 4 *"],
            ]
        )
        order = schedule(analyze(grid))
        assert len(order) == 9
        assert not any(cell.has_error for cell in order)
        assert_references_come_first(order)

    def test_ties_keep_completion_order(self):
        grid = Grid.from_rows([["1", "2", "3"]])
        order = schedule(analyze(grid))
        assert [cell.address for cell in order] == ["A1", "B1", "C1"]

    def test_unanalyzed_cells_are_rejected(self):
        grid = Grid.from_rows([["1"]])
        with pytest.raises(GridStateError):
            schedule(list(grid))
