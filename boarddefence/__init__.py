"""
Board Defence

Grid tower-defence simulation engine: a board with a placement zone and an
enemy lane, defenders that attack on their own timers, a wave scheduler and
the state machine that sequences preparation, battle, victory and defeat.

Rendering, input and audio are left to collaborators, which drive the
GameStateMachine commands and subscribe to its EventBus.
"""

from boarddefence.config import SimulationSettings
from boarddefence.context import SimulationContext
from boarddefence.errors import ConfigError, LevelSchemaError, PlacementError, PoolExhausted
from boarddefence.events import EventBus, GameEvent
from boarddefence.game import GameStateMachine
from boarddefence.grid import BoardLayout, Grid
from boarddefence.levels import ManifestLoader

__all__ = [
    'BoardLayout',
    'ConfigError',
    'EventBus',
    'GameEvent',
    'GameStateMachine',
    'Grid',
    'LevelSchemaError',
    'ManifestLoader',
    'PlacementError',
    'PoolExhausted',
    'SimulationContext',
    'SimulationSettings',
]
