"""
Game state machine: the root of the simulation.

Sequences MainMenu -> Preparation -> Battle -> Victory/Defeat (with Paused
in between) and gates which subsystems run. The owner drives it by calling
tick(dt) once per frame; the simulation clock only advances in Battle,
except for the preparation countdown.

Usage:
    game = GameStateMachine.from_level_group('campaign', seed=1)
    game.events.subscribe(GameStateChanged, on_state_changed)
    game.start_game()
    game.place_defender(DefenderType.TYPE3, Cell(column=1, row=6))
    game.start_battle()
    while game.state == GameState.BATTLE:
        game.tick(1 / 60)
"""

from typing import List, Mapping, Optional, Sequence

from boarddefence.config import SimulationSettings
from boarddefence.context import SimulationContext
from boarddefence.defender import Defender
from boarddefence.errors import ConfigError
from boarddefence.events import (
    BoardCleared,
    EnemyReachedBase,
    EventBus,
    GameOver,
    GamePaused,
    GameResumed,
    GameStarted,
    GameStateChanged,
    LevelCompleted,
    LevelStarted,
    Victory,
)
from boarddefence.logging import get_logger, mark_tick
from boarddefence.placement import PlacementController
from boarddefence.waves import WaveScheduler
from models.enums import DefenderType, GameState
from models.level import LevelManifest
from models.primitives import Cell
from models.stats import DefenderStats

log = get_logger('game')


class GameStateMachine:
    """Coordinates placement, waves, defenders and enemies for a campaign.

    Commands issued in a state that does not accept them are ignored and
    return False (or None). Every state change publishes exactly one
    GameStateChanged.

    Args:
        levels: Ordered level manifests; play starts at the first
        settings: Simulation parameters (defaults from config)
        seed: Seed for the context's random source
        context: Pre-built context (overrides settings and seed)
        defender_stats: Overrides for the default defender stat table

    Raises:
        ConfigError: If `levels` is empty
    """

    def __init__(
        self,
        levels: Sequence[LevelManifest],
        settings: Optional[SimulationSettings] = None,
        seed: Optional[int] = None,
        context: Optional[SimulationContext] = None,
        defender_stats: Optional[Mapping[DefenderType, DefenderStats]] = None,
    ):
        if not levels:
            raise ConfigError("A game needs at least one level")

        self._levels: List[LevelManifest] = list(levels)
        self.context = context or SimulationContext.create(settings, seed)
        self.settings = self.context.settings
        self.placement = PlacementController(self.context, defender_stats)
        self.waves = WaveScheduler(self.context)

        self._state = GameState.MAIN_MENU
        self._paused_from: Optional[GameState] = None
        self._level_index = 0
        self._lives = self.settings.player_lives
        self._preparation_remaining = 0.0
        self._time_scale = 1.0
        self.sim_time = 0.0
        self.battle_ticks = 0

        self.events.subscribe(EnemyReachedBase, self._on_enemy_reached_base)
        self.events.subscribe(LevelCompleted, self._on_level_completed)

    @classmethod
    def from_level_group(
        cls,
        group: Optional[str] = None,
        settings: Optional[SimulationSettings] = None,
        seed: Optional[int] = None,
    ) -> 'GameStateMachine':
        """Build a game from a level group on disk.

        Args:
            group: Group slug (defaults to settings.level_group)
            settings: Simulation parameters (defaults from config)
            seed: Seed for the context's random source

        Raises:
            ConfigError: If the group or any of its levels is malformed
        """
        from boarddefence.levels import ManifestLoader

        settings = settings or SimulationSettings()
        loader = ManifestLoader(settings.levels_dir)
        levels = loader.load_campaign(group or settings.level_group)
        return cls(levels, settings=settings, seed=seed)

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def events(self) -> EventBus:
        return self.context.events

    @property
    def state(self) -> GameState:
        return self._state

    @property
    def lives(self) -> int:
        return self._lives

    @property
    def levels(self) -> List[LevelManifest]:
        return list(self._levels)

    @property
    def current_manifest(self) -> LevelManifest:
        return self._levels[self._level_index]

    @property
    def current_level(self) -> int:
        """Level number being played."""
        return self.current_manifest.level_number

    @property
    def has_next_level(self) -> bool:
        return self._level_index + 1 < len(self._levels)

    @property
    def preparation_remaining(self) -> float:
        """Seconds left in the preparation countdown."""
        return self._preparation_remaining

    @property
    def time_scale(self) -> float:
        return self._time_scale

    @time_scale.setter
    def time_scale(self, value: float) -> None:
        if value < 0:
            raise ValueError(f"time_scale must be >= 0, got {value}")
        self._time_scale = value

    @property
    def defenders(self):
        return self.placement.defenders

    # -------------------------------------------------------------------------
    # Commands
    # -------------------------------------------------------------------------

    def start_game(self) -> bool:
        """MainMenu -> Preparation on the first level."""
        if not self._accepts('start_game', GameState.MAIN_MENU):
            return False

        self._lives = self.settings.player_lives
        self._load_level(self._level_index)
        self._set_state(GameState.PREPARATION)
        self.events.publish(GameStarted())
        return True

    def start_battle(self) -> bool:
        """Preparation -> Battle: lock placement, arm defenders, start the wave."""
        if not self._accepts('start_battle', GameState.PREPARATION):
            return False

        self._begin_battle()
        return True

    def pause(self) -> bool:
        """Freeze the simulation clock from Battle or Preparation."""
        if not self._accepts('pause', GameState.BATTLE, GameState.PREPARATION):
            return False

        self._paused_from = self._state
        self._set_state(GameState.PAUSED)
        self.events.publish(GamePaused())
        return True

    def resume(self) -> bool:
        """Paused -> Battle. Timers continue, not restart.

        A pause taken during Preparation resumes straight into a started
        battle: placement locks, defenders arm and the wave begins.
        """
        if not self._accepts('resume', GameState.PAUSED):
            return False

        paused_from, self._paused_from = self._paused_from, None
        if paused_from == GameState.PREPARATION:
            self._begin_battle()
        else:
            self._set_state(GameState.BATTLE)
        self.events.publish(GameResumed())
        return True

    def restart(self) -> bool:
        """Victory/Defeat -> Preparation on the current level with a clean board."""
        if not self._accepts('restart', GameState.VICTORY, GameState.DEFEAT):
            return False

        self.waves.stop_spawning()
        self.context.enemies.release_all()
        self._clear_board()
        self._lives = self.settings.player_lives
        self._load_level(self._level_index)
        self._set_state(GameState.PREPARATION)
        return True

    def select_defender_type(self, defender_type: DefenderType) -> bool:
        if not self._accepts('select_defender_type', GameState.PREPARATION):
            return False
        return self.placement.select_defender_type(defender_type)

    def deselect_defender_type(self) -> None:
        self.placement.deselect_defender_type()

    def place_defender(self, defender_type: DefenderType, cell: Cell) -> Optional[Defender]:
        """Place a defender during Preparation.

        Raises:
            PlacementError: If the placement is rejected
        """
        if not self._accepts('place_defender', GameState.PREPARATION):
            return None
        return self.placement.place_defender(defender_type, cell)

    def place_selected(self, cell: Cell) -> Optional[Defender]:
        if not self._accepts('place_selected', GameState.PREPARATION):
            return None
        return self.placement.place_selected(cell)

    def remove_defender(self, cell: Cell) -> Optional[Defender]:
        if not self._accepts('remove_defender', GameState.PREPARATION):
            return None
        return self.placement.remove_defender(cell)

    # -------------------------------------------------------------------------
    # Simulation
    # -------------------------------------------------------------------------

    def tick(self, dt: float) -> None:
        """Advance the simulation by `dt` seconds of wall time.

        Battle order: enemy movement, wave spawning, defender attacks,
        retiring dead and escaped enemies, then the completion check. Later
        phases are skipped once a phase ends the battle.
        """
        scaled = dt * self._time_scale
        if scaled <= 0:
            return

        if self._state == GameState.PREPARATION:
            self._tick_preparation(scaled)
        elif self._state == GameState.BATTLE:
            self._tick_battle(scaled)

    def _tick_preparation(self, dt: float) -> None:
        if not self.settings.auto_start_battle:
            return
        self._preparation_remaining = max(0.0, self._preparation_remaining - dt)
        if self._preparation_remaining == 0.0:
            log.info("Preparation time elapsed, starting battle")
            self.start_battle()

    def _tick_battle(self, dt: float) -> None:
        self.sim_time += dt
        self.battle_ticks += 1
        mark_tick(self.battle_ticks, self.sim_time)
        enemies = self.context.enemies

        enemies.advance(dt, self.context.grid.height)
        if self._state != GameState.BATTLE:
            return

        self.waves.advance(dt)
        self.placement.update(dt)
        enemies.retire_terminal()
        if self._state != GameState.BATTLE:
            return

        self.waves.check_completion()

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    def _begin_battle(self) -> None:
        self._preparation_remaining = 0.0
        self._set_state(GameState.BATTLE)
        self.waves.start_spawning()
        self.placement.start_all()

    def _accepts(self, command: str, *states: GameState) -> bool:
        if self._state in states:
            return True
        log.debug("Ignoring %s() in state %s", command, self._state.value)
        return False

    def _set_state(self, new_state: GameState) -> bool:
        if new_state == self._state:
            return False
        previous = self._state
        self._state = new_state
        log.info("State %s -> %s", previous.value, new_state.value)
        self.events.publish(GameStateChanged(new_state=new_state, previous_state=previous))
        return True

    def _load_level(self, index: int) -> None:
        manifest = self._levels[index]
        self._level_index = index
        self.waves.load(manifest)
        self.placement.load_level(manifest)
        self._preparation_remaining = manifest.preparation_time
        log.info("Loaded level %d (%s)", manifest.level_number, manifest.name or 'unnamed')
        self.events.publish(LevelStarted(level=manifest.level_number))

    def _clear_board(self) -> None:
        self.placement.clear_all()
        self.events.publish(BoardCleared())

    def _on_enemy_reached_base(self, event: EnemyReachedBase) -> None:
        if self._state != GameState.BATTLE:
            return

        self._lives -= 1
        log.info("Enemy reached the base in column %d, %d lives left", event.column, self._lives)
        if self._lives <= 0:
            self._defeat()

    def _on_level_completed(self, event: LevelCompleted) -> None:
        if self._state != GameState.BATTLE:
            return

        if self.has_next_level:
            self.placement.stop_all()
            self._clear_board()
            self._lives = self.settings.player_lives
            self._load_level(self._level_index + 1)
            self._set_state(GameState.PREPARATION)
        else:
            self._victory()

    def _victory(self) -> None:
        self._set_state(GameState.VICTORY)
        self.placement.stop_all()
        log.info("Victory on level %d", self.current_level)
        self.events.publish(Victory())

    def _defeat(self) -> None:
        self._set_state(GameState.DEFEAT)
        self.placement.stop_all()
        self.waves.stop_spawning()
        self.context.enemies.release_all()
        log.info("Defeat on level %d", self.current_level)
        self.events.publish(GameOver())
