"""
Wave scheduler: spawns a level's enemies on a timer and detects completion.

Spawn pacing is a countdown checked on every advance() rather than a
suspended loop. The sequence waits the level's initial delay, then spawns
each manifest entry one enemy at a time, waiting the entry's delay after
every spawn. Spawning ends once the wait after the final spawn elapses.
"""

from typing import List, Optional, Set, Tuple

from boarddefence.context import SimulationContext
from boarddefence.errors import PoolExhausted
from boarddefence.events import (
    AllEnemiesDefeated,
    EnemyDied,
    EnemyReachedBase,
    LevelCompleted,
    WaveCompleted,
    WaveStarted,
)
from boarddefence.logging import get_logger
from models.enums import EnemyType
from models.level import LevelManifest
from models.primitives import Cell

log = get_logger('waves')


class WaveScheduler:
    """Drives one level's spawn sequence and tracks how its enemies resolve.

    Only enemies spawned by this scheduler count toward defeated/escaped.

    Args:
        context: Shared simulation context
    """

    def __init__(self, context: SimulationContext):
        self._context = context
        self._manifest: Optional[LevelManifest] = None
        self._plan: List[Tuple[EnemyType, float]] = []
        self._next_index = 0
        self._countdown = 0.0

        self._spawning = False
        self._started = False
        self._completed = False

        self._tracked: Set[int] = set()
        self._total_spawned = 0
        self._defeated = 0
        self._escaped = 0
        self._dropped = 0

        self._unsubscribe = [
            context.events.subscribe(EnemyDied, self._on_enemy_died),
            context.events.subscribe(EnemyReachedBase, self._on_enemy_reached_base),
        ]

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def manifest(self) -> Optional[LevelManifest]:
        return self._manifest

    @property
    def current_level(self) -> int:
        """Level number of the loaded manifest (0 if none)."""
        return self._manifest.level_number if self._manifest else 0

    @property
    def is_spawning(self) -> bool:
        return self._spawning

    @property
    def is_complete(self) -> bool:
        return self._completed

    @property
    def total_planned(self) -> int:
        return len(self._plan)

    @property
    def total_spawned(self) -> int:
        """Enemies actually spawned; spawns dropped on pool exhaustion excluded."""
        return self._total_spawned

    @property
    def defeated(self) -> int:
        return self._defeated

    @property
    def escaped(self) -> int:
        return self._escaped

    @property
    def dropped(self) -> int:
        """Spawns skipped because the enemy pool was exhausted."""
        return self._dropped

    @property
    def remaining_enemies(self) -> int:
        """Planned enemies not yet defeated, escaped or dropped."""
        return max(0, self.total_planned - self._dropped - self._defeated - self._escaped)

    # -------------------------------------------------------------------------
    # Control
    # -------------------------------------------------------------------------

    def load(self, manifest: LevelManifest) -> None:
        """Reset counters and build the spawn plan for `manifest`.

        Cancels any sequence in progress.
        """
        self._manifest = manifest
        self._plan = [
            (entry.enemy_type, manifest.delay_for(entry))
            for entry in manifest.enemy_spawns
            for _ in range(entry.count)
        ]
        self._next_index = 0
        self._countdown = 0.0
        self._spawning = False
        self._started = False
        self._completed = False
        self._tracked.clear()
        self._total_spawned = 0
        self._defeated = 0
        self._escaped = 0
        self._dropped = 0
        log.debug("Loaded level %d with %d planned spawns", manifest.level_number, len(self._plan))

    def start_spawning(self) -> bool:
        """Begin the spawn sequence. No-op if already spawning or nothing is loaded."""
        if self._spawning:
            return False
        if self._manifest is None:
            log.warning("start_spawning() called with no level loaded")
            return False

        self._spawning = True
        self._started = True
        self._next_index = 0
        self._countdown = self._manifest.initial_spawn_delay
        self._context.events.publish(WaveStarted(level=self.current_level))
        return True

    def stop_spawning(self) -> None:
        """Cancel the sequence. Spawned enemies are unaffected."""
        if self._spawning:
            log.debug("Spawning stopped after %d of %d", self._next_index, len(self._plan))
        self._spawning = False

    def advance(self, dt: float) -> List[Cell]:
        """Run the spawn countdown forward by `dt` seconds.

        Returns:
            Cells where enemies were spawned during this step
        """
        spawned: List[Cell] = []
        if not self._spawning:
            return spawned

        self._countdown -= dt
        while self._spawning and self._countdown <= 0:
            if self._next_index >= len(self._plan):
                self._spawning = False
                log.info("Wave for level %d finished spawning", self.current_level)
                self._context.events.publish(WaveCompleted(level=self.current_level))
                break

            enemy_type, delay = self._plan[self._next_index]
            self._next_index += 1
            self._countdown += delay
            cell = self._spawn(enemy_type)
            if cell is not None:
                spawned.append(cell)
        return spawned

    def _spawn(self, enemy_type: EnemyType) -> Optional[Cell]:
        grid = self._context.grid
        cell = Cell(column=self._context.rng.randrange(grid.width), row=0)
        try:
            enemy = self._context.enemies.acquire(enemy_type)
        except PoolExhausted:
            self._dropped += 1
            log.warning("Dropped %s spawn: enemy pool exhausted", enemy_type.value)
            return None

        self._tracked.add(enemy.id)
        self._total_spawned += 1
        enemy.spawn(cell)
        log.trace("Spawned %s enemy %d at %s", enemy_type.value, enemy.id, cell)
        return cell

    # -------------------------------------------------------------------------
    # Completion
    # -------------------------------------------------------------------------

    def check_completion(self) -> bool:
        """Fire LevelCompleted once every spawned enemy has resolved.

        Requires that spawning has started and finished, that every spawned
        enemy was defeated or escaped, and that no enemy is still active.

        Returns:
            True only on the call that fired LevelCompleted
        """
        if self._completed or not self._started or self._spawning:
            return False
        if self._defeated + self._escaped < self._total_spawned:
            return False
        if self._context.enemies.active_count != 0:
            return False

        self._completed = True
        log.info(
            "Level %d complete: %d defeated, %d escaped",
            self.current_level, self._defeated, self._escaped,
        )
        self._context.events.publish(AllEnemiesDefeated(level=self.current_level))
        self._context.events.publish(LevelCompleted(level=self.current_level))
        return True

    def detach(self) -> None:
        """Unsubscribe from the event bus."""
        for unsubscribe in self._unsubscribe:
            unsubscribe()
        self._unsubscribe = []

    def _on_enemy_died(self, event: EnemyDied) -> None:
        if event.enemy_id in self._tracked:
            self._tracked.discard(event.enemy_id)
            self._defeated += 1

    def _on_enemy_reached_base(self, event: EnemyReachedBase) -> None:
        if event.enemy_id in self._tracked:
            self._tracked.discard(event.enemy_id)
            self._escaped += 1
