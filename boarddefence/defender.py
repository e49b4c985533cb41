"""
Defenders: placed units that periodically attack enemies in range.

A defender scans its strategy's candidate cells in order and engages the
first live enemy it finds, applying damage immediately. Projectile travel
is a presentation concern and has no simulation-level delay.
"""

from typing import Optional

from boarddefence.context import SimulationContext
from boarddefence.enemy import Enemy
from boarddefence.events import AttackPerformed
from boarddefence.logging import get_logger
from boarddefence.targeting import get_target_cells
from models.enums import AttackDirection, DefenderState, DefenderType
from models.primitives import Cell
from models.stats import DefenderStats

log = get_logger('defender')


class Defender:
    """A defender placed on one cell.

    Starts IDLE. While ATTACKING, `attack_timer` accumulates simulation time
    and an attack fires each time it reaches `attack_interval`. The timer is
    primed on start so the first attack fires on the next update.

    Args:
        defender_id: Unique id (referenced from the grid)
        defender_type: Type of this defender
        stats: Immutable stats for the type
        cell: Cell the defender occupies
        context: Shared simulation context
    """

    def __init__(
        self,
        defender_id: int,
        defender_type: DefenderType,
        stats: DefenderStats,
        cell: Cell,
        context: SimulationContext,
    ):
        self.id = defender_id
        self.defender_type = defender_type
        self.stats = stats
        self.cell = cell
        self._context = context

        self.state = DefenderState.IDLE
        self.attack_timer = 0.0
        self.attacks_fired = 0

    @property
    def is_attacking(self) -> bool:
        return self.state == DefenderState.ATTACKING

    def start_attacking(self) -> None:
        """Begin the attack loop. No-op if already attacking."""
        if self.is_attacking:
            return
        self.state = DefenderState.ATTACKING
        self.attack_timer = self.stats.attack_interval

    def stop_attacking(self) -> None:
        """Cancel the attack loop and return to IDLE."""
        self.state = DefenderState.IDLE
        self.attack_timer = 0.0

    def update(self, dt: float) -> int:
        """Advance the attack timer, firing every elapsed interval.

        Returns:
            Number of attack ticks that fired (including ones with no target)
        """
        if not self.is_attacking:
            return 0

        self.attack_timer += dt
        fired = 0
        while self.is_attacking and self.attack_timer >= self.stats.attack_interval:
            self.attack_timer -= self.stats.attack_interval
            self.perform_attack()
            fired += 1
        return fired

    def find_target(self) -> Optional[Enemy]:
        """First eligible enemy in strategy order, or None.

        Forward defenders only engage enemies in their own column.
        """
        grid = self._context.grid
        tolerance = self._context.settings.target_tolerance
        column = self.cell.column if self.stats.direction == AttackDirection.FORWARD else None

        for candidate in get_target_cells(self.stats.direction, self.cell, self.stats.range):
            if not grid.is_valid(candidate):
                continue
            enemy = self._context.enemies.nearest(candidate, tolerance, column=column)
            if enemy is not None:
                return enemy
        return None

    def perform_attack(self) -> Optional[Enemy]:
        """Fire one attack at the selected target.

        Returns:
            The enemy attacked, or None if nothing was in range
        """
        target = self.find_target()
        if target is None:
            log.trace("Defender %d at %s found no target", self.id, self.cell)
            return None

        self.attacks_fired += 1
        log.debug(
            "Defender %d at %s hits enemy %d for %d",
            self.id, self.cell, target.id, self.stats.damage,
        )
        self._context.events.publish(AttackPerformed(
            cell=self.cell,
            damage=self.stats.damage,
            defender_id=self.id,
            target_id=target.id,
            target_cell=target.cell,
        ))
        target.take_damage(self.stats.damage)
        return target

    def __repr__(self) -> str:
        return (
            f"Defender(id={self.id}, type={self.defender_type.value}, cell={self.cell}, "
            f"state={self.state.value})"
        )
