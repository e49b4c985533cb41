"""
Board grid: cell matrix with a placement zone and per-cell occupancy.

The grid owns occupancy exclusively. Defenders are referenced by id only;
the grid never holds the defender objects themselves.
"""

import math
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional

from boarddefence.errors import ConfigError, PlacementError
from boarddefence.logging import get_logger
from models.enums import PlacementFailure
from models.primitives import Cell, Point2D

log = get_logger('grid')


@dataclass(frozen=True)
class BoardLayout:
    """Stateless conversion between cells and continuous layout space.

    The board is centred on the origin. One cell step is
    `cell_size + cell_spacing` layout units on each axis.
    """
    width: int
    height: int
    cell_size: float = 1.0
    cell_spacing: float = 0.1

    @property
    def pitch(self) -> float:
        """Distance between neighbouring cell centres."""
        return self.cell_size + self.cell_spacing

    def to_space(self, cell: Cell) -> Point2D:
        """Centre of `cell` in layout space."""
        return self.locate(cell.column, cell.row)

    def locate(self, column: float, row: float) -> Point2D:
        """Layout position of a fractional grid coordinate."""
        return Point2D(
            x=self._axis_to_space(column, self.width),
            y=self._axis_to_space(row, self.height),
        )

    def from_space(self, point: Point2D) -> Cell:
        """Nearest cell to `point`, clamped to the board."""
        return Cell(
            column=self._axis_from_space(point.x, self.width),
            row=self._axis_from_space(point.y, self.height),
        )

    def _axis_to_space(self, index: float, dimension: int) -> float:
        return index * self.pitch - (dimension - 1) * self.pitch / 2

    def _axis_from_space(self, value: float, dimension: int) -> int:
        index = math.floor((value + (dimension - 1) * self.pitch / 2) / self.pitch + 0.5)
        return max(0, min(dimension - 1, index))


class Grid:
    """Fixed-size board of cells.

    Rows at or beyond `placement_row_start` form the placement zone. A cell
    holds at most one defender id, and only placement-zone cells ever do.

    Args:
        width: Number of columns (>= 1)
        height: Number of rows (>= 1)
        placement_row_start: First placement row, in [0, height]
        cell_size: Layout size of one cell
        cell_spacing: Layout gap between cells

    Raises:
        ConfigError: If the dimensions are invalid
    """

    def __init__(
        self,
        width: int,
        height: int,
        placement_row_start: int,
        cell_size: float = 1.0,
        cell_spacing: float = 0.1,
    ):
        if width < 1 or height < 1:
            raise ConfigError(f"Grid must be at least 1x1, got {width}x{height}")
        if not 0 <= placement_row_start <= height:
            raise ConfigError(
                f"placement_row_start must be in [0, {height}], got {placement_row_start}"
            )

        self.width = width
        self.height = height
        self.placement_row_start = placement_row_start
        self.layout = BoardLayout(width, height, cell_size, cell_spacing)
        self._occupants: List[List[Optional[int]]] = [
            [None] * width for _ in range(height)
        ]

        log.debug(
            "Initialized %dx%d grid, placement rows %d-%d",
            width, height, placement_row_start, height - 1,
        )

    def is_valid(self, cell: Cell) -> bool:
        """Check that `cell` lies on the board."""
        return 0 <= cell.column < self.width and 0 <= cell.row < self.height

    def is_placeable(self, cell: Cell) -> bool:
        """Check that `cell` is on the board and inside the placement zone."""
        return self.is_valid(cell) and cell.row >= self.placement_row_start

    def occupant(self, cell: Cell) -> Optional[int]:
        """Defender id occupying `cell`, or None."""
        if not self.is_valid(cell):
            return None
        return self._occupants[cell.row][cell.column]

    def is_occupied(self, cell: Cell) -> bool:
        return self.occupant(cell) is not None

    def try_place(self, cell: Cell, defender_id: int) -> None:
        """Mark `cell` as occupied by `defender_id`.

        Raises:
            PlacementError: NOT_PLACEABLE outside the placement zone,
                OCCUPIED if the cell already has an occupant
        """
        if not self.is_placeable(cell):
            raise PlacementError(PlacementFailure.NOT_PLACEABLE, cell)
        if self._occupants[cell.row][cell.column] is not None:
            raise PlacementError(PlacementFailure.OCCUPIED, cell)
        self._occupants[cell.row][cell.column] = defender_id

    def remove(self, cell: Cell) -> Optional[int]:
        """Clear `cell` and return the previous occupant (None if empty)."""
        if not self.is_valid(cell):
            return None
        previous = self._occupants[cell.row][cell.column]
        self._occupants[cell.row][cell.column] = None
        return previous

    def clear(self) -> None:
        """Reset all occupancy; the placement zone is unchanged."""
        for row in self._occupants:
            for column in range(self.width):
                row[column] = None

    def cells(self) -> Iterator[Cell]:
        """Iterate every cell, row by row."""
        for row in range(self.height):
            for column in range(self.width):
                yield Cell(column=column, row=row)

    def occupied(self) -> Dict[Cell, int]:
        """Snapshot of occupied cells to defender ids."""
        return {
            cell: self._occupants[cell.row][cell.column]
            for cell in self.cells()
            if self._occupants[cell.row][cell.column] is not None
        }
