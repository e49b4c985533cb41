"""Tests for attack targeting strategies."""

import pytest

from boarddefence.targeting import (
    all_direction_targets,
    forward_targets,
    get_target_cells,
    strategy_for,
)
from models.enums import AttackDirection
from models.primitives import Cell


def cells(*pairs):
    return [Cell(column=c, row=r) for c, r in pairs]


class TestForward:
    """Forward strategy scans toward row 0, nearest first."""

    def test_range_four(self):
        result = get_target_cells(AttackDirection.FORWARD, Cell(column=1, row=6), 4)
        assert result == cells((1, 5), (1, 4), (1, 3), (1, 2))

    def test_stays_in_column(self):
        result = forward_targets(Cell(column=2, row=7), 7)
        assert all(c.column == 2 for c in result)

    def test_may_leave_board(self):
        """Off-board cells are returned; callers filter them."""
        result = forward_targets(Cell(column=0, row=1), 3)
        assert result == cells((0, 0), (0, -1), (0, -2))

    def test_zero_range(self):
        assert forward_targets(Cell(column=0, row=5), 0) == []


class TestAllDirections:
    """All-directions strategy: forward, backward, left, right rays."""

    def test_range_one(self):
        result = get_target_cells(AttackDirection.ALL, Cell(column=1, row=6), 1)
        assert result == cells((1, 5), (1, 7), (0, 6), (2, 6))

    def test_range_two_grouped_by_direction(self):
        result = all_direction_targets(Cell(column=1, row=5), 2)
        assert result == cells(
            (1, 4), (1, 3),
            (1, 6), (1, 7),
            (0, 5), (-1, 5),
            (2, 5), (3, 5),
        )

    def test_contains_forward_set(self):
        origin = Cell(column=2, row=6)
        assert set(forward_targets(origin, 3)) <= set(all_direction_targets(origin, 3))

    def test_never_includes_origin(self):
        origin = Cell(column=2, row=6)
        assert origin not in all_direction_targets(origin, 5)


class TestStrategyLookup:
    """strategy_for maps direction modes to pure functions."""

    @pytest.mark.parametrize("direction, expected", [
        (AttackDirection.FORWARD, forward_targets),
        (AttackDirection.ALL, all_direction_targets),
    ])
    def test_lookup(self, direction, expected):
        assert strategy_for(direction) is expected

    def test_deterministic(self):
        origin = Cell(column=3, row=4)
        first = get_target_cells(AttackDirection.ALL, origin, 3)
        assert all(get_target_cells(AttackDirection.ALL, origin, 3) == first for _ in range(5))
