"""
Attack targeting strategies.

A strategy maps (origin cell, range) to the ordered list of cells a
defender scans for enemies. Strategies are pure: no board access, no side
effects, and the same inputs always give the same list. Cells may fall
off the board; callers filter them.
"""

from typing import Callable, Dict, List, Tuple

from models.enums import AttackDirection
from models.primitives import Cell

# (d_column, d_row) unit steps
FORWARD: Tuple[int, int] = (0, -1)      # Toward row 0
BACKWARD: Tuple[int, int] = (0, 1)
LEFT: Tuple[int, int] = (-1, 0)
RIGHT: Tuple[int, int] = (1, 0)

DIRECTIONS: Dict[AttackDirection, Tuple[Tuple[int, int], ...]] = {
    AttackDirection.FORWARD: (FORWARD,),
    AttackDirection.ALL: (FORWARD, BACKWARD, LEFT, RIGHT),
}

Strategy = Callable[[Cell, int], List[Cell]]


def _ray(origin: Cell, step: Tuple[int, int], reach: int) -> List[Cell]:
    """Cells along one direction, nearest first, excluding the origin."""
    d_column, d_row = step
    return [origin.offset(d_column * i, d_row * i) for i in range(1, reach + 1)]


def forward_targets(origin: Cell, reach: int) -> List[Cell]:
    """The `reach` cells toward row 0, nearest first."""
    return _ray(origin, FORWARD, reach)


def all_direction_targets(origin: Cell, reach: int) -> List[Cell]:
    """Forward, backward, left then right rays, each nearest first."""
    cells: List[Cell] = []
    for step in DIRECTIONS[AttackDirection.ALL]:
        cells.extend(_ray(origin, step, reach))
    return cells


_STRATEGIES: Dict[AttackDirection, Strategy] = {
    AttackDirection.FORWARD: forward_targets,
    AttackDirection.ALL: all_direction_targets,
}


def strategy_for(direction: AttackDirection) -> Strategy:
    """Look up the strategy function for a direction mode."""
    return _STRATEGIES[direction]


def get_target_cells(direction: AttackDirection, origin: Cell, reach: int) -> List[Cell]:
    """Ordered candidate cells for a defender at `origin`.

    Args:
        direction: Direction mode of the defender
        origin: Defender cell
        reach: Range in cells (values below 1 yield no cells)

    Returns:
        Candidate cells in scan order
    """
    return strategy_for(direction)(origin, reach)
