"""
Shared primitive data types for the simulation.

Provides the discrete grid address (Cell) and the continuous layout
coordinate (Point2D) used by the board, targeting and presentation layers.
"""

import math

from pydantic import BaseModel, ConfigDict


class Point2D(BaseModel):
    """Immutable 2D point in continuous layout space.

    Attributes:
        x: X coordinate (horizontal)
        y: Y coordinate (vertical)

    Examples:
        >>> Point2D(x=0.0, y=3.0).distance_to(Point2D(x=4.0, y=0.0))
        5.0
    """
    x: float
    y: float

    model_config = ConfigDict(frozen=True)

    def distance_to(self, other: "Point2D") -> float:
        """Euclidean distance to another point."""
        return math.hypot(self.x - other.x, self.y - other.y)

    def __str__(self) -> str:
        """String representation for debugging."""
        return f"Point2D(x={self.x:.2f}, y={self.y:.2f})"


class Cell(BaseModel):
    """Immutable discrete grid address.

    Row 0 is the enemy entry edge; increasing row moves toward the
    player's base edge. Cells are hashable and can be used as dict keys.

    Attributes:
        column: Column index, 0-based
        row: Row index, 0-based

    Examples:
        >>> Cell(column=1, row=6).offset(0, -1)
        Cell(column=1, row=5)
    """
    column: int
    row: int

    model_config = ConfigDict(frozen=True)

    def offset(self, d_column: int, d_row: int) -> "Cell":
        """Return the cell displaced by (d_column, d_row)."""
        return Cell(column=self.column + d_column, row=self.row + d_row)

    def __repr__(self) -> str:
        return f"Cell(column={self.column}, row={self.row})"

    def __str__(self) -> str:
        return f"({self.column}, {self.row})"
