"""
Simulation context: the shared state every component is handed.

Replaces a global game manager. The context is created once per game
and passed explicitly; nothing in the simulation reaches for ambient state.
"""

import random
from dataclasses import dataclass, field
from typing import Optional

from boarddefence.config import SimulationSettings
from boarddefence.enemy import EnemyPool
from boarddefence.events import EventBus
from boarddefence.grid import Grid
from models.enums import EnemyType


@dataclass
class SimulationContext:
    """Board, enemy pool, event bus, settings and random source."""
    grid: Grid
    enemies: EnemyPool
    events: EventBus
    settings: SimulationSettings
    rng: random.Random = field(default_factory=random.Random)

    @classmethod
    def create(
        cls,
        settings: Optional[SimulationSettings] = None,
        seed: Optional[int] = None,
        events: Optional[EventBus] = None,
    ) -> 'SimulationContext':
        """Build a context from settings.

        Args:
            settings: Simulation parameters (defaults from config)
            seed: Seed for spawn column selection (None = nondeterministic)
            events: Existing bus to share (a new one is created otherwise)

        Raises:
            ConfigError: If the board dimensions are invalid
        """
        settings = settings or SimulationSettings()
        events = events or EventBus()
        grid = Grid(
            settings.board_width,
            settings.board_height,
            settings.placeable_row_start,
            cell_size=settings.cell_size,
            cell_spacing=settings.cell_spacing,
        )
        enemies = EnemyPool(
            events,
            initial_size=settings.enemy_pool_size // len(EnemyType),
            expandable=settings.enemy_pool_expandable,
            layout=grid.layout,
        )
        return cls(
            grid=grid,
            enemies=enemies,
            events=events,
            settings=settings,
            rng=random.Random(seed),
        )
