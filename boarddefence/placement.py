"""
Placement controller: player placement and removal of defenders.

Mediates requests against the grid and the level's defender inventory,
and owns the set of live defenders. Rejected requests raise PlacementError
and leave grid, inventory and defenders unchanged.
"""

from typing import Dict, List, Mapping, Optional

from boarddefence.context import SimulationContext
from boarddefence.defender import Defender
from boarddefence.errors import PlacementError
from boarddefence.events import DefenderPlaced, DefenderRemoved
from boarddefence.logging import get_logger
from models.enums import DefenderType, PlacementFailure
from models.level import LevelManifest
from models.primitives import Cell
from models.stats import DEFAULT_DEFENDER_STATS, DefenderStats

log = get_logger('placement')


class PlacementController:
    """Places and removes defenders during preparation.

    Args:
        context: Shared simulation context
        stats: Stat table per defender type (defaults to the standard table)
    """

    def __init__(
        self,
        context: SimulationContext,
        stats: Optional[Mapping[DefenderType, DefenderStats]] = None,
    ):
        self._context = context
        self._stats: Dict[DefenderType, DefenderStats] = dict(DEFAULT_DEFENDER_STATS)
        if stats:
            self._stats.update(stats)

        self._inventory: Dict[DefenderType, int] = {t: 0 for t in DefenderType}
        self._defenders: Dict[Cell, Defender] = {}
        self._selected: Optional[DefenderType] = None
        self._next_id = 1
        self.placement_enabled = False

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def defenders(self) -> Dict[Cell, Defender]:
        """Live defenders by cell, in placement order."""
        return dict(self._defenders)

    @property
    def selected_type(self) -> Optional[DefenderType]:
        return self._selected

    def available(self, defender_type: DefenderType) -> int:
        """Remaining placements of `defender_type` this level."""
        return self._inventory.get(defender_type, 0)

    def inventory(self) -> Dict[DefenderType, int]:
        return dict(self._inventory)

    def stats_for(self, defender_type: DefenderType) -> DefenderStats:
        return self._stats[defender_type]

    # -------------------------------------------------------------------------
    # Level setup
    # -------------------------------------------------------------------------

    def load_level(self, manifest: LevelManifest) -> None:
        """Reset the inventory from the manifest and enable placement.

        Existing defenders are not touched; call clear_all() first when
        switching boards.
        """
        self._inventory = {t: manifest.defender_count(t) for t in DefenderType}
        self._selected = None
        self.placement_enabled = True
        log.debug(
            "Inventory for level %d: %s",
            manifest.level_number,
            {t.value: n for t, n in self._inventory.items()},
        )

    # -------------------------------------------------------------------------
    # Selection
    # -------------------------------------------------------------------------

    def select_defender_type(self, defender_type: DefenderType) -> bool:
        """Select a type for place_selected(). Fails if none remain."""
        if self.available(defender_type) <= 0:
            return False
        self._selected = defender_type
        return True

    def deselect_defender_type(self) -> None:
        self._selected = None

    # -------------------------------------------------------------------------
    # Placement
    # -------------------------------------------------------------------------

    def place_defender(self, defender_type: DefenderType, cell: Cell) -> Optional[Defender]:
        """Place a defender of `defender_type` at `cell`.

        Returns:
            The new defender, or None when placement is locked

        Raises:
            PlacementError: INSUFFICIENT_INVENTORY, NOT_PLACEABLE or OCCUPIED
        """
        if not self.placement_enabled:
            log.debug("Placement locked; ignoring request at %s", cell)
            return None

        if self.available(defender_type) <= 0:
            log.debug("No more %s defenders available", defender_type.value)
            raise PlacementError(PlacementFailure.INSUFFICIENT_INVENTORY, cell)

        defender_id = self._next_id
        try:
            self._context.grid.try_place(cell, defender_id)
        except PlacementError as e:
            log.debug("Rejected placement at %s: %s", cell, e.reason.value)
            raise

        self._next_id += 1
        defender = Defender(
            defender_id, defender_type, self._stats[defender_type], cell, self._context
        )
        self._defenders[cell] = defender
        self._inventory[defender_type] -= 1
        if self._selected == defender_type and self._inventory[defender_type] == 0:
            self._selected = None

        self._context.events.publish(DefenderPlaced(
            cell=cell, defender_type=defender_type, defender_id=defender_id
        ))
        return defender

    def place_selected(self, cell: Cell) -> Optional[Defender]:
        """Place the selected type at `cell`. None if nothing is selected."""
        if self._selected is None:
            return None
        return self.place_defender(self._selected, cell)

    def remove_defender(self, cell: Cell) -> Optional[Defender]:
        """Remove the defender at `cell` and refund its inventory slot.

        Returns:
            The removed defender, or None if locked or the cell is empty
        """
        if not self.placement_enabled:
            log.debug("Placement locked; ignoring removal at %s", cell)
            return None
        return self._remove(cell)

    def _remove(self, cell: Cell) -> Optional[Defender]:
        defender = self._defenders.pop(cell, None)
        if defender is None:
            return None

        defender.stop_attacking()
        self._context.grid.remove(cell)
        self._inventory[defender.defender_type] += 1
        self._context.events.publish(DefenderRemoved(cell=cell, defender_id=defender.id))
        return defender

    # -------------------------------------------------------------------------
    # Battle control
    # -------------------------------------------------------------------------

    def start_all(self) -> None:
        """Lock placement and start every defender attacking."""
        self.placement_enabled = False
        self._selected = None
        for defender in self._defenders.values():
            defender.start_attacking()

    def stop_all(self) -> None:
        for defender in self._defenders.values():
            defender.stop_attacking()

    def clear_all(self) -> List[Defender]:
        """Remove every defender regardless of the placement lock."""
        removed = []
        for cell in list(self._defenders):
            defender = self._remove(cell)
            if defender is not None:
                removed.append(defender)
        self._context.grid.clear()
        return removed

    def update(self, dt: float) -> None:
        """Advance every defender's attack timer, in placement order."""
        for defender in list(self._defenders.values()):
            defender.update(dt)
