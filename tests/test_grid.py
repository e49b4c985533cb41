"""Tests for the board grid and layout conversion."""

import random

import pytest

from boarddefence.errors import ConfigError, PlacementError
from boarddefence.grid import BoardLayout, Grid
from models.enums import PlacementFailure
from models.primitives import Cell, Point2D


@pytest.fixture
def grid():
    return Grid(4, 8, 4)


class TestGridInit:
    """Tests for grid construction."""

    def test_all_cells_start_empty(self, grid):
        assert grid.occupied() == {}
        assert all(grid.occupant(c) is None for c in grid.cells())

    @pytest.mark.parametrize("row_start", [-1, 9])
    def test_placement_row_out_of_range(self, row_start):
        with pytest.raises(ConfigError):
            Grid(4, 8, row_start)

    @pytest.mark.parametrize("row_start", [0, 8])
    def test_placement_row_bounds_inclusive(self, row_start):
        Grid(4, 8, row_start)

    def test_empty_board_rejected(self):
        with pytest.raises(ConfigError):
            Grid(0, 8, 4)

    def test_no_placement_zone_when_start_equals_height(self):
        grid = Grid(4, 8, 8)
        assert not any(grid.is_placeable(c) for c in grid.cells())


class TestGridQueries:
    """Tests for is_valid / is_placeable / cells."""

    def test_is_valid_bounds(self, grid):
        assert grid.is_valid(Cell(column=0, row=0))
        assert grid.is_valid(Cell(column=3, row=7))
        assert not grid.is_valid(Cell(column=4, row=0))
        assert not grid.is_valid(Cell(column=0, row=8))
        assert not grid.is_valid(Cell(column=-1, row=3))

    def test_placement_zone_rows(self, grid):
        assert not grid.is_placeable(Cell(column=1, row=3))
        assert grid.is_placeable(Cell(column=1, row=4))
        assert grid.is_placeable(Cell(column=1, row=7))
        assert not grid.is_placeable(Cell(column=1, row=8))

    def test_cells_row_major(self, grid):
        cells = list(grid.cells())
        assert len(cells) == 32
        assert cells[0] == Cell(column=0, row=0)
        assert cells[1] == Cell(column=1, row=0)
        assert cells[-1] == Cell(column=3, row=7)


class TestGridPlacement:
    """Tests for try_place / remove / clear."""

    def test_place_sets_occupant(self, grid):
        cell = Cell(column=1, row=6)
        grid.try_place(cell, 7)
        assert grid.occupant(cell) == 7
        assert grid.is_occupied(cell)

    def test_place_outside_zone(self, grid):
        with pytest.raises(PlacementError) as exc:
            grid.try_place(Cell(column=1, row=2), 1)
        assert exc.value.reason == PlacementFailure.NOT_PLACEABLE
        assert grid.occupied() == {}

    def test_place_off_board(self, grid):
        with pytest.raises(PlacementError) as exc:
            grid.try_place(Cell(column=9, row=6), 1)
        assert exc.value.reason == PlacementFailure.NOT_PLACEABLE

    def test_place_occupied(self, grid):
        cell = Cell(column=2, row=5)
        grid.try_place(cell, 1)
        with pytest.raises(PlacementError) as exc:
            grid.try_place(cell, 2)
        assert exc.value.reason == PlacementFailure.OCCUPIED
        assert exc.value.cell == cell
        assert grid.occupant(cell) == 1

    def test_remove_returns_previous(self, grid):
        cell = Cell(column=0, row=4)
        grid.try_place(cell, 3)
        assert grid.remove(cell) == 3
        assert grid.remove(cell) is None
        assert grid.occupant(cell) is None

    def test_remove_off_board(self, grid):
        assert grid.remove(Cell(column=-1, row=-1)) is None

    def test_clear_keeps_zone(self, grid):
        grid.try_place(Cell(column=0, row=4), 1)
        grid.try_place(Cell(column=3, row=7), 2)
        grid.clear()
        assert grid.occupied() == {}
        assert grid.is_placeable(Cell(column=0, row=4))
        assert not grid.is_placeable(Cell(column=0, row=3))

    def test_random_operations_keep_invariant(self, grid):
        """No sequence of place/remove puts two occupants in a cell or one outside the zone."""
        rng = random.Random(7)
        model = {}
        next_id = 1
        for _ in range(500):
            cell = Cell(column=rng.randrange(-1, 5), row=rng.randrange(-1, 9))
            if rng.random() < 0.6:
                try:
                    grid.try_place(cell, next_id)
                except PlacementError:
                    assert cell in model or not grid.is_placeable(cell)
                else:
                    assert cell not in model
                    assert grid.is_placeable(cell)
                    model[cell] = next_id
                next_id += 1
            else:
                assert grid.remove(cell) == model.pop(cell, None)

            assert grid.occupied() == model
            assert all(grid.is_placeable(c) for c in grid.occupied())


class TestBoardLayout:
    """Tests for cell <-> layout space conversion."""

    def test_board_centred_on_origin(self):
        layout = BoardLayout(4, 8, cell_size=1.0, cell_spacing=0.1)
        first = layout.to_space(Cell(column=0, row=0))
        last = layout.to_space(Cell(column=3, row=7))
        assert first.x == pytest.approx(-1.65)
        assert first.y == pytest.approx(-3.85)
        assert last.x == pytest.approx(1.65)
        assert last.y == pytest.approx(3.85)

    def test_pitch(self):
        assert BoardLayout(4, 8, cell_size=2.0, cell_spacing=0.5).pitch == pytest.approx(2.5)

    def test_inverse_for_every_cell(self):
        grid = Grid(5, 7, 3, cell_size=1.0, cell_spacing=0.25)
        for cell in grid.cells():
            assert grid.layout.from_space(grid.layout.to_space(cell)) == cell

    def test_rounds_to_nearest_cell(self):
        layout = BoardLayout(4, 8)
        centre = layout.to_space(Cell(column=1, row=5))
        nudged = Point2D(x=centre.x + 0.4, y=centre.y - 0.4)
        assert layout.from_space(nudged) == Cell(column=1, row=5)

    def test_clamps_to_board(self):
        layout = BoardLayout(4, 8)
        assert layout.from_space(Point2D(x=100.0, y=-100.0)) == Cell(column=3, row=0)
        assert layout.from_space(Point2D(x=-100.0, y=100.0)) == Cell(column=0, row=7)

    def test_locate_fractional_row(self):
        layout = BoardLayout(4, 8, cell_size=1.0, cell_spacing=0.1)
        point = layout.locate(1, 5.5)
        lower = layout.to_space(Cell(column=1, row=5))
        upper = layout.to_space(Cell(column=1, row=6))
        assert point.x == pytest.approx(lower.x)
        assert point.y == pytest.approx((lower.y + upper.y) / 2)
        assert point.distance_to(lower) == pytest.approx(0.55)
