"""
Pydantic v2 models for level manifests.

A manifest describes one level: which defenders the player may place,
which enemies spawn and in what order, and the wave timing.
"""

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from .enums import DefenderType, EnemyType


class SpawnEntry(BaseModel):
    """
    One run of identical enemies in the spawn sequence.

    `spawn_delay` spaces the enemies of this entry. When it is None the
    manifest's `time_between_spawns` is used.
    """
    model_config = {"frozen": True}

    enemy_type: EnemyType
    count: int = Field(default=1, ge=1, description="Number of enemies to spawn")
    spawn_delay: Optional[float] = Field(
        default=None,
        ge=0.0,
        description="Seconds after each spawn of this entry (None = level default)"
    )


class DefenderAllocation(BaseModel):
    """Number of defenders of one type available for placement."""
    model_config = {"frozen": True}

    defender_type: DefenderType
    count: int = Field(default=1, ge=1)


class LevelManifest(BaseModel):
    """
    Complete level configuration.

    Consumed read-only by the wave scheduler and the placement controller.

    Examples:
        >>> manifest = LevelManifest(
        ...     level_number=1,
        ...     enemy_spawns=[SpawnEntry(enemy_type=EnemyType.TYPE1, count=3)],
        ... )
        >>> manifest.total_enemy_count()
        3
    """
    model_config = {"frozen": True}

    level_number: int = Field(ge=1)
    name: str = "Untitled"
    description: str = ""
    defender_allocations: List[DefenderAllocation] = Field(default_factory=list)
    enemy_spawns: List[SpawnEntry] = Field(default_factory=list)
    preparation_time: float = Field(default=30.0, ge=0.0)
    time_between_spawns: float = Field(default=2.0, ge=0.0)
    initial_spawn_delay: float = Field(default=3.0, ge=0.0)

    @field_validator("defender_allocations")
    @classmethod
    def validate_unique_allocations(
        cls, v: List[DefenderAllocation]
    ) -> List[DefenderAllocation]:
        """Each defender type may be allocated at most once."""
        seen = set()
        for allocation in v:
            if allocation.defender_type in seen:
                raise ValueError(
                    f"Duplicate allocation for {allocation.defender_type.value}"
                )
            seen.add(allocation.defender_type)
        return v

    def total_enemy_count(self) -> int:
        """Total number of enemies the manifest spawns."""
        return sum(entry.count for entry in self.enemy_spawns)

    def defender_count(self, defender_type: DefenderType) -> int:
        """Allocated placement count for a defender type (0 if absent)."""
        for allocation in self.defender_allocations:
            if allocation.defender_type == defender_type:
                return allocation.count
        return 0

    def enemy_count(self, enemy_type: EnemyType) -> int:
        """Total spawns of one enemy type across all entries."""
        return sum(
            entry.count for entry in self.enemy_spawns
            if entry.enemy_type == enemy_type
        )

    def delay_for(self, entry: SpawnEntry) -> float:
        """Seconds to wait after each spawn of `entry`."""
        if entry.spawn_delay is not None:
            return entry.spawn_delay
        return self.time_between_spawns
