"""
Data models for the Board Defence simulation.

This package provides all Pydantic data models and enums used across the system:
- Primitives: Cell (grid address) and Point2D (layout coordinate)
- Enums: game states, unit types, attack directions, lifecycle states
- Stats: immutable per-type defender and enemy stats plus default tables
- Level: level manifests (spawns, allocations, timing)

Usage:
    >>> from models import Cell, DefenderType, LevelManifest
    >>> from models.stats import DEFAULT_DEFENDER_STATS
"""

# ============================================================================
# Primitives
# ============================================================================
from .primitives import Cell, Point2D

# ============================================================================
# Enums
# ============================================================================
from .enums import (
    AttackDirection,
    DefenderState,
    DefenderType,
    EnemyState,
    EnemyType,
    GameState,
    PlacementFailure,
)

# ============================================================================
# Stats and levels
# ============================================================================
from .stats import (
    DEFAULT_DEFENDER_STATS,
    DEFAULT_ENEMY_STATS,
    DefenderStats,
    EnemyStats,
)
from .level import DefenderAllocation, LevelManifest, SpawnEntry

__all__ = [
    # Primitives
    "Cell",
    "Point2D",
    # Enums
    "AttackDirection",
    "DefenderState",
    "DefenderType",
    "EnemyState",
    "EnemyType",
    "GameState",
    "PlacementFailure",
    # Stats
    "DEFAULT_DEFENDER_STATS",
    "DEFAULT_ENEMY_STATS",
    "DefenderStats",
    "EnemyStats",
    # Levels
    "DefenderAllocation",
    "LevelManifest",
    "SpawnEntry",
]
