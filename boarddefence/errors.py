"""
Exception types raised by the simulation.

ConfigError is fatal at load time. PlacementError and PoolExhausted are
recoverable: the rejected request leaves all state unchanged.
"""

from typing import Optional

from models.enums import EnemyType, PlacementFailure
from models.primitives import Cell


class ConfigError(Exception):
    """Raised when level or grid configuration is malformed."""
    pass


class LevelSchemaError(ConfigError):
    """Raised when level data fails schema validation."""
    pass


class PlacementError(Exception):
    """Raised when a placement request is rejected.

    Attributes:
        reason: Why the placement was rejected
        cell: The requested cell, when one was given
    """

    def __init__(self, reason: PlacementFailure, cell: Optional[Cell] = None):
        self.reason = reason
        self.cell = cell
        where = f" at {cell}" if cell is not None else ""
        super().__init__(f"Placement rejected{where}: {reason.value}")


class PoolExhausted(Exception):
    """Raised when a non-expandable enemy pool has no free instance."""

    def __init__(self, enemy_type: EnemyType):
        self.enemy_type = enemy_type
        super().__init__(
            f"Enemy pool for {enemy_type.value} is exhausted and not expandable"
        )
