"""Shared fixtures for the simulation tests."""
import pytest

from boarddefence.config import SimulationSettings
from boarddefence.context import SimulationContext
from boarddefence.events import GameEvent
from models.enums import DefenderType, EnemyType
from models.level import DefenderAllocation, LevelManifest, SpawnEntry


@pytest.fixture
def settings():
    """Standard 4x8 board with placement rows 4-7 and three lives."""
    return SimulationSettings(
        board_width=4,
        board_height=8,
        placeable_row_start=4,
        cell_size=1.0,
        cell_spacing=0.1,
        player_lives=3,
        auto_start_battle=False,
        enemy_pool_size=0,
        enemy_pool_expandable=True,
        target_tolerance=0.75,
    )


@pytest.fixture
def context(settings):
    """Seeded simulation context."""
    return SimulationContext.create(settings, seed=1234)


class EventRecorder:
    """Collects every event published on a bus."""

    def __init__(self):
        self.events = []

    def __call__(self, event: GameEvent) -> None:
        self.events.append(event)

    def of_type(self, event_type):
        return [e for e in self.events if isinstance(e, event_type)]

    def names(self):
        return [e.name for e in self.events]

    def clear(self):
        self.events.clear()


@pytest.fixture
def recorder(context):
    """Recorder subscribed to every event on the context bus."""
    rec = EventRecorder()
    context.events.subscribe_all(rec)
    return rec


def make_manifest(
    level_number=1,
    defenders=None,
    enemies=None,
    **kwargs,
):
    """Build a manifest from {type: count} and [(type, count)] shorthands."""
    defenders = defenders if defenders is not None else {DefenderType.TYPE3: 1}
    enemies = enemies if enemies is not None else [(EnemyType.TYPE1, 1)]
    return LevelManifest(
        level_number=level_number,
        defender_allocations=[
            DefenderAllocation(defender_type=t, count=n) for t, n in defenders.items()
        ],
        enemy_spawns=[
            SpawnEntry(enemy_type=t, count=n) for t, n in enemies
        ],
        **kwargs,
    )


@pytest.fixture
def manifest_factory():
    return make_manifest
