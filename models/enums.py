"""
Board Defence enumerations.

These enums define the closed variant sets used across the simulation:
game states, unit types, attack directions and lifecycle states.
"""

from enum import Enum


class GameState(str, Enum):
    """Top-level game states.

    Exactly one state is active at a time. Transitions between them are the
    only way placement, spawning and attacking are switched on or off.

    Attributes:
        NONE: Not initialized
        MAIN_MENU: Waiting for the player to start
        PREPARATION: Player is placing defenders
        BATTLE: Enemies spawn, move and are attacked
        PAUSED: Simulation clock frozen
        VICTORY: Last level completed
        DEFEAT: Lives exhausted
    """
    NONE = "none"
    MAIN_MENU = "main_menu"
    PREPARATION = "preparation"
    BATTLE = "battle"
    PAUSED = "paused"
    VICTORY = "victory"
    DEFEAT = "defeat"


class DefenderType(str, Enum):
    """Placeable defender types."""
    TYPE1 = "type1"
    TYPE2 = "type2"
    TYPE3 = "type3"


class EnemyType(str, Enum):
    """Enemy types spawned by waves."""
    TYPE1 = "type1"
    TYPE2 = "type2"
    TYPE3 = "type3"


class AttackDirection(str, Enum):
    """Which directions a defender scans for targets.

    Attributes:
        FORWARD: Only toward row 0 (the enemy entry edge)
        ALL: All four axis directions
    """
    FORWARD = "forward"
    ALL = "all"


class EnemyState(str, Enum):
    """Enemy lifecycle states. DEAD and ESCAPED are terminal."""
    ALIVE = "alive"
    DEAD = "dead"
    ESCAPED = "escaped"


class DefenderState(str, Enum):
    """Defender attack loop state."""
    IDLE = "idle"
    ATTACKING = "attacking"


class PlacementFailure(str, Enum):
    """Reasons a placement request is rejected."""
    NOT_PLACEABLE = "not_placeable"
    OCCUPIED = "occupied"
    INSUFFICIENT_INVENTORY = "insufficient_inventory"
