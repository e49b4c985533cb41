"""
Enemies and the enemy pool.

Enemies walk one lane from row 0 toward the base edge. The pool owns
every enemy instance: it hands them out for spawning, answers targeting
queries over the live set, and recycles dead or escaped instances.
"""

from collections import deque
from typing import Deque, Dict, List, Mapping, Optional

from boarddefence.errors import PoolExhausted
from boarddefence.events import (
    EnemyDamaged,
    EnemyDied,
    EnemyReachedBase,
    EnemySpawned,
    EventBus,
)
from boarddefence.grid import BoardLayout
from boarddefence.logging import get_logger
from models.enums import EnemyState, EnemyType
from models.primitives import Cell, Point2D
from models.stats import DEFAULT_ENEMY_STATS, EnemyStats

log = get_logger('enemy')


class Enemy:
    """A pooled enemy instance.

    Health only ever decreases while the instance is live. DEAD and ESCAPED
    are terminal; a terminal enemy ignores damage and movement until the
    pool recycles it.
    """

    def __init__(self, enemy_id: int, enemy_type: EnemyType, stats: EnemyStats, events: EventBus):
        self.id = enemy_id
        self.enemy_type = enemy_type
        self.stats = stats
        self._events = events

        self.current_health = stats.max_health
        self.cell = Cell(column=0, row=0)
        self.progress = 0.0  # Fraction of the way to the next row
        self.state = EnemyState.ALIVE
        self.active = False
        self.spawn_serial = 0

    @property
    def max_health(self) -> int:
        return self.stats.max_health

    @property
    def is_dead(self) -> bool:
        return self.current_health <= 0

    @property
    def is_alive(self) -> bool:
        """Live, not yet dead or escaped."""
        return self.active and self.state == EnemyState.ALIVE

    @property
    def position(self) -> Point2D:
        """Continuous position in grid units (column, row + progress)."""
        return Point2D(x=float(self.cell.column), y=self.cell.row + self.progress)

    def reset(self) -> None:
        """Restore full health and clear position and lifecycle state."""
        self.current_health = self.stats.max_health
        self.cell = Cell(column=0, row=0)
        self.progress = 0.0
        self.state = EnemyState.ALIVE

    def spawn(self, cell: Cell) -> None:
        """Place the enemy on the board at `cell` and announce it."""
        self.reset()
        self.cell = cell
        self._events.publish(EnemySpawned(cell=cell, enemy_type=self.enemy_type, enemy_id=self.id))

    def take_damage(self, amount: int) -> bool:
        """Apply damage.

        Args:
            amount: Damage to apply; non-positive amounts are ignored

        Returns:
            True if this hit killed the enemy
        """
        if not self.is_alive or amount <= 0:
            return False

        self.current_health = max(0, self.current_health - amount)
        self._events.publish(EnemyDamaged(
            cell=self.cell,
            amount=amount,
            enemy_id=self.id,
            remaining_health=self.current_health,
        ))

        if self.is_dead:
            self.state = EnemyState.DEAD
            log.debug("Enemy %d (%s) died at %s", self.id, self.enemy_type.value, self.cell)
            self._events.publish(EnemyDied(cell=self.cell, enemy_id=self.id))
            return True
        return False

    def advance(self, dt: float, lane_length: int) -> bool:
        """Move toward the base edge.

        Each time progress crosses a cell boundary the row increments. Moving
        past the last row escapes the enemy.

        Args:
            dt: Simulation seconds elapsed
            lane_length: Number of rows on the board

        Returns:
            True if the enemy escaped during this step
        """
        if not self.is_alive:
            return False

        self.progress += self.stats.speed * dt
        while self.progress >= 1.0:
            self.progress -= 1.0
            next_row = self.cell.row + 1
            if next_row >= lane_length:
                self.state = EnemyState.ESCAPED
                self.progress = 0.0
                log.debug("Enemy %d reached the base in column %d", self.id, self.cell.column)
                self._events.publish(EnemyReachedBase(enemy_id=self.id, column=self.cell.column))
                return True
            self.cell = self.cell.offset(0, 1)
        return False

    def __repr__(self) -> str:
        return (
            f"Enemy(id={self.id}, type={self.enemy_type.value}, hp={self.current_health}/"
            f"{self.max_health}, cell={self.cell}, state={self.state.value})"
        )


class EnemyPool:
    """Arena of enemy instances with per-type free lists.

    Enemy ids are arena slot indices and stay with the instance for its
    lifetime. The active set preserves acquisition order.

    Args:
        events: Bus the enemies publish to
        stats: Stat table per enemy type (defaults to the standard table)
        initial_size: Instances pre-created per enemy type
        expandable: Create new instances when a free list is empty
        layout: Board layout that targeting distances are measured in
            (default: one layout unit per cell)
    """

    def __init__(
        self,
        events: EventBus,
        stats: Optional[Mapping[EnemyType, EnemyStats]] = None,
        initial_size: int = 0,
        expandable: bool = True,
        layout: Optional[BoardLayout] = None,
    ):
        self._events = events
        self.layout = layout or BoardLayout(1, 1, cell_size=1.0, cell_spacing=0.0)
        self._stats: Dict[EnemyType, EnemyStats] = dict(DEFAULT_ENEMY_STATS)
        if stats:
            self._stats.update(stats)
        self.expandable = expandable

        self._slots: List[Enemy] = []
        self._free: Dict[EnemyType, Deque[Enemy]] = {t: deque() for t in EnemyType}
        self._active: Dict[int, Enemy] = {}
        self._next_serial = 0

        for enemy_type in EnemyType:
            for _ in range(initial_size):
                self._free[enemy_type].append(self._create(enemy_type))

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def allocated_count(self) -> int:
        """Total instances ever created."""
        return len(self._slots)

    @property
    def active_count(self) -> int:
        return len(self._active)

    def free_count(self, enemy_type: EnemyType) -> int:
        return len(self._free[enemy_type])

    def stats_for(self, enemy_type: EnemyType) -> EnemyStats:
        return self._stats[enemy_type]

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def _create(self, enemy_type: EnemyType) -> Enemy:
        enemy = Enemy(len(self._slots), enemy_type, self._stats[enemy_type], self._events)
        self._slots.append(enemy)
        return enemy

    def acquire(self, enemy_type: EnemyType) -> Enemy:
        """Take a ready instance of `enemy_type` and mark it active.

        Raises:
            PoolExhausted: If no free instance exists and the pool is not expandable
        """
        if self._free[enemy_type]:
            enemy = self._free[enemy_type].popleft()
        elif self.expandable:
            enemy = self._create(enemy_type)
        else:
            log.warning("Enemy pool for %s is exhausted and not expandable", enemy_type.value)
            raise PoolExhausted(enemy_type)

        enemy.reset()
        enemy.active = True
        self._next_serial += 1
        enemy.spawn_serial = self._next_serial
        self._active[enemy.id] = enemy
        return enemy

    def spawn(self, enemy_type: EnemyType, cell: Cell) -> Enemy:
        """Acquire an instance and place it at `cell`."""
        enemy = self.acquire(enemy_type)
        enemy.spawn(cell)
        return enemy

    def release(self, enemy: Enemy) -> bool:
        """Return an instance to its free list.

        Returns:
            False if the instance was not active (already released)
        """
        if self._active.pop(enemy.id, None) is None:
            return False
        enemy.active = False
        enemy.reset()
        self._free[enemy.enemy_type].append(enemy)
        return True

    def release_all(self) -> int:
        """Force-retire every active instance. Returns how many were released."""
        released = 0
        for enemy in list(self._active.values()):
            if self.release(enemy):
                released += 1
        if released:
            log.debug("Released %d active enemies", released)
        return released

    def retire_terminal(self) -> List[Enemy]:
        """Release every active enemy that is dead or escaped."""
        retired = [e for e in self._active.values() if e.state != EnemyState.ALIVE]
        for enemy in retired:
            self.release(enemy)
        return retired

    # -------------------------------------------------------------------------
    # Simulation
    # -------------------------------------------------------------------------

    def advance(self, dt: float, lane_length: int) -> List[Enemy]:
        """Move every live enemy. Returns the enemies that escaped."""
        escaped = []
        for enemy in list(self._active.values()):
            # A handler may have released enemies earlier in this loop
            if enemy.id not in self._active:
                continue
            if enemy.advance(dt, lane_length):
                escaped.append(enemy)
        return escaped

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def get(self, enemy_id: int) -> Optional[Enemy]:
        """Active enemy by id, or None."""
        return self._active.get(enemy_id)

    def active_enemies(self) -> List[Enemy]:
        """Active enemies in acquisition order."""
        return list(self._active.values())

    def enemies_at_or_near(
        self,
        cell: Cell,
        tolerance: float,
        column: Optional[int] = None,
    ) -> List[Enemy]:
        """Live enemies within `tolerance` layout units of `cell`'s centre.

        Args:
            cell: Candidate cell
            tolerance: Maximum distance in layout units (inclusive)
            column: If given, only enemies in this column are eligible

        Returns:
            Enemies ordered nearest first, ties broken by spawn order
        """
        target = self.layout.to_space(cell)
        candidates = []
        for enemy in self._active.values():
            if not enemy.is_alive:
                continue
            if column is not None and enemy.cell.column != column:
                continue
            position = enemy.position
            distance = self.layout.locate(position.x, position.y).distance_to(target)
            if distance <= tolerance:
                candidates.append((distance, enemy.spawn_serial, enemy))
        candidates.sort(key=lambda c: (c[0], c[1]))
        return [enemy for _, _, enemy in candidates]

    def nearest(
        self,
        cell: Cell,
        tolerance: float,
        column: Optional[int] = None,
    ) -> Optional[Enemy]:
        """The enemy enemies_at_or_near() ranks first, or None."""
        candidates = self.enemies_at_or_near(cell, tolerance, column)
        return candidates[0] if candidates else None
