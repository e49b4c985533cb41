"""
Unit stat models and the default stat tables.

Stats are immutable per type; instances read them but never modify them.
"""

from typing import Dict

from pydantic import BaseModel, Field

from .enums import AttackDirection, DefenderType, EnemyType


class DefenderStats(BaseModel):
    """
    Base stats for a defender type.

    Attributes:
        damage: Damage applied per attack (> 0)
        range: Reach in cells (>= 1)
        attack_interval: Seconds between attacks (> 0)
        direction: Which directions are scanned for targets
    """
    model_config = {"frozen": True}

    damage: int = Field(gt=0, description="Damage dealt per attack")
    range: int = Field(ge=1, description="Attack reach in cells")
    attack_interval: float = Field(gt=0.0, description="Seconds between attacks")
    direction: AttackDirection = Field(
        default=AttackDirection.FORWARD,
        description="Target scan directions: 'forward' or 'all'"
    )


class EnemyStats(BaseModel):
    """
    Base stats for an enemy type.

    Attributes:
        max_health: Health on spawn (> 0)
        speed: Movement speed in cells per second (> 0)
    """
    model_config = {"frozen": True}

    max_health: int = Field(gt=0, description="Health on spawn")
    speed: float = Field(gt=0.0, description="Cells per second")


DEFAULT_DEFENDER_STATS: Dict[DefenderType, DefenderStats] = {
    DefenderType.TYPE1: DefenderStats(
        damage=3, range=4, attack_interval=3.0, direction=AttackDirection.FORWARD
    ),
    DefenderType.TYPE2: DefenderStats(
        damage=5, range=2, attack_interval=4.0, direction=AttackDirection.FORWARD
    ),
    DefenderType.TYPE3: DefenderStats(
        damage=10, range=1, attack_interval=5.0, direction=AttackDirection.ALL
    ),
}

DEFAULT_ENEMY_STATS: Dict[EnemyType, EnemyStats] = {
    EnemyType.TYPE1: EnemyStats(max_health=3, speed=1.0),
    EnemyType.TYPE2: EnemyStats(max_health=10, speed=0.25),
    EnemyType.TYPE3: EnemyStats(max_health=5, speed=0.5),
}
