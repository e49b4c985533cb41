"""Tests for the pydantic data models."""

import pytest
from pydantic import ValidationError

from models import (
    DEFAULT_DEFENDER_STATS,
    DEFAULT_ENEMY_STATS,
    AttackDirection,
    Cell,
    DefenderAllocation,
    DefenderStats,
    DefenderType,
    EnemyStats,
    EnemyType,
    LevelManifest,
    Point2D,
    SpawnEntry,
)


class TestPrimitives:
    """Cell and Point2D behaviour."""

    def test_cell_is_hashable(self):
        cells = {Cell(column=1, row=2), Cell(column=1, row=2), Cell(column=2, row=1)}
        assert len(cells) == 2

    def test_cell_offset(self):
        assert Cell(column=1, row=6).offset(0, -1) == Cell(column=1, row=5)
        assert Cell(column=0, row=0).offset(-1, 0) == Cell(column=-1, row=0)

    def test_cell_is_frozen(self):
        cell = Cell(column=0, row=0)
        with pytest.raises(ValidationError):
            cell.row = 3

    def test_cell_str(self):
        assert str(Cell(column=3, row=7)) == "(3, 7)"

    def test_point_distance(self):
        assert Point2D(x=0.0, y=3.0).distance_to(Point2D(x=4.0, y=0.0)) == pytest.approx(5.0)


class TestStats:
    """Stat validation and the default tables."""

    def test_default_tables_cover_every_type(self):
        assert set(DEFAULT_DEFENDER_STATS) == set(DefenderType)
        assert set(DEFAULT_ENEMY_STATS) == set(EnemyType)

    def test_default_directions(self):
        assert DEFAULT_DEFENDER_STATS[DefenderType.TYPE1].direction == AttackDirection.FORWARD
        assert DEFAULT_DEFENDER_STATS[DefenderType.TYPE3].direction == AttackDirection.ALL

    @pytest.mark.parametrize("kwargs", [
        {'damage': 0, 'range': 1, 'attack_interval': 1.0},
        {'damage': 1, 'range': 0, 'attack_interval': 1.0},
        {'damage': 1, 'range': 1, 'attack_interval': 0.0},
    ])
    def test_invalid_defender_stats(self, kwargs):
        with pytest.raises(ValidationError):
            DefenderStats(**kwargs)

    def test_invalid_enemy_stats(self):
        with pytest.raises(ValidationError):
            EnemyStats(max_health=0, speed=1.0)
        with pytest.raises(ValidationError):
            EnemyStats(max_health=5, speed=0.0)

    def test_direction_from_string(self):
        stats = DefenderStats(damage=1, range=1, attack_interval=1.0, direction='all')
        assert stats.direction == AttackDirection.ALL


class TestLevelManifest:
    """Counts, delays and validation of level manifests."""

    @pytest.fixture
    def manifest(self):
        return LevelManifest(
            level_number=3,
            defender_allocations=[
                DefenderAllocation(defender_type=DefenderType.TYPE1, count=2),
                DefenderAllocation(defender_type=DefenderType.TYPE3, count=1),
            ],
            enemy_spawns=[
                SpawnEntry(enemy_type=EnemyType.TYPE1, count=3),
                SpawnEntry(enemy_type=EnemyType.TYPE2, count=1, spawn_delay=0.25),
                SpawnEntry(enemy_type=EnemyType.TYPE1, count=2),
            ],
            time_between_spawns=1.5,
        )

    def test_counts(self, manifest):
        assert manifest.total_enemy_count() == 6
        assert manifest.enemy_count(EnemyType.TYPE1) == 5
        assert manifest.enemy_count(EnemyType.TYPE3) == 0
        assert manifest.defender_count(DefenderType.TYPE1) == 2
        assert manifest.defender_count(DefenderType.TYPE2) == 0

    def test_delay_for(self, manifest):
        default, custom, _ = manifest.enemy_spawns
        assert manifest.delay_for(default) == 1.5
        assert manifest.delay_for(custom) == 0.25

    def test_defaults(self):
        manifest = LevelManifest(level_number=1)
        assert manifest.preparation_time == 30.0
        assert manifest.time_between_spawns == 2.0
        assert manifest.initial_spawn_delay == 3.0
        assert manifest.total_enemy_count() == 0

    def test_duplicate_allocation_rejected(self):
        with pytest.raises(ValidationError):
            LevelManifest(
                level_number=1,
                defender_allocations=[
                    DefenderAllocation(defender_type=DefenderType.TYPE2, count=1),
                    DefenderAllocation(defender_type=DefenderType.TYPE2, count=2),
                ],
            )

    @pytest.mark.parametrize("kwargs", [
        {'level_number': 0},
        {'level_number': 1, 'time_between_spawns': -1.0},
        {'level_number': 1, 'initial_spawn_delay': -0.5},
        {'level_number': 1, 'preparation_time': -2.0},
    ])
    def test_invalid_manifest(self, kwargs):
        with pytest.raises(ValidationError):
            LevelManifest(**kwargs)

    def test_invalid_spawn_entry(self):
        with pytest.raises(ValidationError):
            SpawnEntry(enemy_type=EnemyType.TYPE1, count=0)
        with pytest.raises(ValidationError):
            SpawnEntry(enemy_type='type7')
