"""Tests for defender attack timing and target selection."""

import dataclasses
import random

import pytest

from boarddefence.context import SimulationContext
from boarddefence.defender import Defender
from boarddefence.events import AttackPerformed, EnemyDied
from models.enums import AttackDirection, DefenderState, DefenderType, EnemyType
from models.primitives import Cell
from models.stats import DEFAULT_DEFENDER_STATS, DefenderStats


def make_defender(context, defender_type, column, row, stats=None):
    return Defender(
        defender_id=1,
        defender_type=defender_type,
        stats=stats or DEFAULT_DEFENDER_STATS[defender_type],
        cell=Cell(column=column, row=row),
        context=context,
    )


class TestAttackLoop:
    """Idle/Attacking state and the attack timer."""

    def test_starts_idle(self, context):
        defender = make_defender(context, DefenderType.TYPE1, 0, 6)
        assert defender.state == DefenderState.IDLE
        assert defender.update(10.0) == 0

    def test_first_attack_on_next_update(self, context):
        defender = make_defender(context, DefenderType.TYPE3, 1, 6)
        defender.start_attacking()
        assert defender.is_attacking
        assert defender.update(0.016) == 1

    def test_interval_spacing(self, context):
        defender = make_defender(context, DefenderType.TYPE3, 1, 6)  # 5s interval
        defender.start_attacking()
        defender.update(0.016)
        assert defender.update(1.0) == 0
        assert defender.update(4.0) == 1
        assert defender.update(10.0) == 2

    def test_start_is_idempotent(self, context):
        defender = make_defender(context, DefenderType.TYPE1, 0, 6)
        defender.start_attacking()
        defender.update(0.5)
        timer = defender.attack_timer
        defender.start_attacking()
        assert defender.attack_timer == timer

    def test_stop_attacking(self, context):
        defender = make_defender(context, DefenderType.TYPE1, 0, 6)
        defender.start_attacking()
        defender.stop_attacking()
        assert defender.state == DefenderState.IDLE
        assert defender.update(100.0) == 0

    def test_no_target_is_not_an_error(self, context, recorder):
        defender = make_defender(context, DefenderType.TYPE1, 0, 6)
        assert defender.perform_attack() is None
        assert recorder.of_type(AttackPerformed) == []
        assert defender.attacks_fired == 0


class TestTargetSelection:
    """Strategy order, range and tie-breaks."""

    def test_adjacent_kill_scenario(self, context, recorder):
        """All-directions defender kills an enemy that walks into the adjacent cell."""
        defender = make_defender(context, DefenderType.TYPE3, 1, 6)
        enemy = context.enemies.spawn(EnemyType.TYPE3, Cell(column=1, row=0))
        assert defender.perform_attack() is None

        context.enemies.advance(10.0, 8)  # speed 0.5 -> five rows
        assert enemy.cell == Cell(column=1, row=5)

        assert defender.perform_attack() is enemy
        attacks = recorder.of_type(AttackPerformed)
        assert len(attacks) == 1
        assert attacks[0].damage == 10
        assert attacks[0].target_id == enemy.id
        assert enemy.is_dead

        names = recorder.names()
        assert names.index('AttackPerformed') < names.index('EnemyDied')
        assert len(recorder.of_type(EnemyDied)) == 1

    def test_forward_ignores_adjacent_lane(self, context, recorder):
        """A forward defender at column 0 never attacks an enemy in column 1."""
        defender = make_defender(context, DefenderType.TYPE1, 0, 6)  # range 4
        enemy = context.enemies.spawn(EnemyType.TYPE1, Cell(column=1, row=3))
        defender.start_attacking()
        for _ in range(200):
            defender.update(0.5)
        assert recorder.of_type(AttackPerformed) == []
        assert enemy.current_health == enemy.max_health

    def test_forward_column_lock_with_wide_tolerance(self, settings):
        """The column lock holds even when tolerance reaches into the next lane."""
        wide = SimulationContext.create(dataclasses.replace(settings, target_tolerance=1.5), seed=1)
        defender = make_defender(wide, DefenderType.TYPE1, 0, 6)
        wide.enemies.spawn(EnemyType.TYPE1, Cell(column=1, row=4))
        assert defender.find_target() is None

    def test_all_directions_not_column_locked(self, settings):
        wide = SimulationContext.create(dataclasses.replace(settings, target_tolerance=1.5), seed=1)
        defender = make_defender(wide, DefenderType.TYPE3, 0, 6)
        enemy = wide.enemies.spawn(EnemyType.TYPE1, Cell(column=1, row=5))
        assert defender.find_target() is enemy

    def test_forward_hits_own_column(self, context):
        defender = make_defender(context, DefenderType.TYPE1, 0, 6)
        enemy = context.enemies.spawn(EnemyType.TYPE2, Cell(column=0, row=3))
        assert defender.perform_attack() is enemy
        assert enemy.current_health == 10 - 3

    def test_tolerance_measured_in_layout_units(self, context):
        """0.75 layout units at a 1.1 pitch: 0.7 cells short misses, 0.65 hits."""
        stats = DefenderStats(damage=1, range=1, attack_interval=1.0, direction=AttackDirection.FORWARD)
        defender = make_defender(context, DefenderType.TYPE1, 0, 7, stats=stats)
        enemy = context.enemies.spawn(EnemyType.TYPE2, Cell(column=0, row=5))
        enemy.progress = 0.3
        assert defender.find_target() is None
        enemy.progress = 0.35
        assert defender.find_target() is enemy

    def test_forward_ignores_enemies_behind(self, context):
        defender = make_defender(context, DefenderType.TYPE1, 0, 6)
        context.enemies.spawn(EnemyType.TYPE1, Cell(column=0, row=7))
        assert defender.find_target() is None

    def test_out_of_range(self, context):
        defender = make_defender(context, DefenderType.TYPE2, 2, 6)  # range 2
        context.enemies.spawn(EnemyType.TYPE1, Cell(column=2, row=3))
        assert defender.find_target() is None

    def test_nearest_candidate_cell_wins(self, context):
        defender = make_defender(context, DefenderType.TYPE1, 0, 6)
        far = context.enemies.spawn(EnemyType.TYPE1, Cell(column=0, row=2))
        near = context.enemies.spawn(EnemyType.TYPE1, Cell(column=0, row=4))
        assert defender.find_target() is near
        assert defender.find_target() is not far

    def test_forward_ray_scanned_first(self, context):
        defender = make_defender(context, DefenderType.TYPE3, 1, 5)
        behind = context.enemies.spawn(EnemyType.TYPE1, Cell(column=1, row=6))
        ahead = context.enemies.spawn(EnemyType.TYPE1, Cell(column=1, row=4))
        assert defender.find_target() is ahead
        ahead.take_damage(10)
        assert defender.find_target() is behind

    def test_off_board_candidates_skipped(self, context):
        defender = make_defender(context, DefenderType.TYPE3, 0, 4)
        enemy = context.enemies.spawn(EnemyType.TYPE1, Cell(column=1, row=4))
        assert defender.find_target() is enemy

    def test_selection_is_deterministic(self, context):
        defender = make_defender(context, DefenderType.TYPE3, 1, 6)
        for column in (0, 1, 2):
            context.enemies.spawn(EnemyType.TYPE2, Cell(column=column, row=5))
        first = defender.find_target()
        assert all(defender.find_target() is first for _ in range(10))
        assert first.cell == Cell(column=1, row=5)

    def test_one_target_per_attack(self, context, recorder):
        defender = make_defender(context, DefenderType.TYPE3, 1, 6)
        context.enemies.spawn(EnemyType.TYPE2, Cell(column=1, row=5))
        context.enemies.spawn(EnemyType.TYPE2, Cell(column=1, row=7))
        defender.perform_attack()
        assert len(recorder.of_type(AttackPerformed)) == 1


@pytest.mark.parametrize("reach", [1, 2, 4, 7])
def test_forward_column_isolation(settings, reach):
    """Forward defenders never damage enemies outside their column."""
    rng = random.Random(reach)
    context = SimulationContext.create(dataclasses.replace(settings, target_tolerance=2.0), seed=reach)
    stats = DefenderStats(damage=1, range=reach, attack_interval=1.0, direction=AttackDirection.FORWARD)
    defender = make_defender(context, DefenderType.TYPE1, 2, 7, stats=stats)
    for _ in range(20):
        column = rng.choice([0, 1, 3])
        enemy = context.enemies.spawn(EnemyType.TYPE2, Cell(column=column, row=rng.randrange(8)))
        enemy.progress = rng.random()
    assert defender.find_target() is None
