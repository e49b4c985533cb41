#!/usr/bin/env python3
"""
Development Mode Board Defence Viewer

Simple pygame front end for playing the simulation with mouse and keyboard.
The viewer only draws and forwards commands; all rules live in the
boarddefence package.

Usage:
    # List available levels and groups
    python dev_game.py --list

    # Play the campaign
    python dev_game.py

    # Play another level group at double speed
    python dev_game.py --group my_group --speed 2

    # With custom resolution
    python dev_game.py --resolution 1920x1080
"""

import argparse
import os
import sys

import pygame

# Ensure project root is on path
_project_root = os.path.dirname(os.path.abspath(__file__))
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

from boarddefence.config import SimulationSettings
from boarddefence.errors import ConfigError, PlacementError
from boarddefence.events import (
    AttackPerformed,
    EnemyReachedBase,
    GameStateChanged,
    LevelCompleted,
)
from boarddefence.game import GameStateMachine
from boarddefence.levels import ManifestLoader
from boarddefence.logging import (
    close_all_sinks,
    configure_logging,
    create_sink_for_environment,
    get_logger,
    register_sink,
)
from models.enums import DefenderType, EnemyType, GameState
from models.primitives import Point2D

log = get_logger('dev_game')

BACKGROUND = (20, 22, 28)
LANE_CELL = (52, 56, 66)
PLACEMENT_CELL = (44, 74, 58)
HOVER_CELL = (90, 120, 100)
TEXT = (230, 230, 230)
SHOT = (255, 240, 120)

DEFENDER_COLORS = {
    DefenderType.TYPE1: (80, 160, 255),
    DefenderType.TYPE2: (160, 110, 255),
    DefenderType.TYPE3: (255, 150, 60),
}

ENEMY_COLORS = {
    EnemyType.TYPE1: (230, 70, 70),
    EnemyType.TYPE2: (150, 40, 40),
    EnemyType.TYPE3: (240, 120, 160),
}

SELECT_KEYS = {
    pygame.K_1: DefenderType.TYPE1,
    pygame.K_2: DefenderType.TYPE2,
    pygame.K_3: DefenderType.TYPE3,
}


class BoardView:
    """Maps layout space to screen pixels and draws the board."""

    def __init__(self, game: GameStateMachine, width: int, height: int):
        self.game = game
        self.layout = game.context.grid.layout
        grid = game.context.grid

        # Fit the board (plus a margin of one cell) into the window
        span_x = grid.width * self.layout.pitch + self.layout.pitch
        span_y = grid.height * self.layout.pitch + self.layout.pitch
        self.scale = min(width / span_x, (height - 80) / span_y)
        self.origin = (width / 2, (height + 80) / 2)
        self.flashes = []  # (from_point, to_point, seconds_left)

    def to_screen(self, point: Point2D):
        return (
            int(self.origin[0] + point.x * self.scale),
            int(self.origin[1] + point.y * self.scale),
        )

    def to_layout(self, pos) -> Point2D:
        return Point2D(
            x=(pos[0] - self.origin[0]) / self.scale,
            y=(pos[1] - self.origin[1]) / self.scale,
        )

    def cell_at(self, pos):
        """Grid cell under a screen position, or None off the board."""
        point = self.to_layout(pos)
        cell = self.layout.from_space(point)
        centre = self.layout.to_space(cell)
        half = self.layout.cell_size / 2
        if abs(point.x - centre.x) > half or abs(point.y - centre.y) > half:
            return None
        return cell

    def on_attack(self, event: AttackPerformed) -> None:
        self.flashes.append((
            self.layout.to_space(event.cell),
            self.layout.to_space(event.target_cell),
            0.15,
        ))

    def update(self, dt: float) -> None:
        self.flashes = [(a, b, t - dt) for a, b, t in self.flashes if t - dt > 0]

    def draw(self, screen, font, hover) -> None:
        grid = self.game.context.grid
        size = int(self.layout.cell_size * self.scale)

        for cell in grid.cells():
            cx, cy = self.to_screen(self.layout.to_space(cell))
            color = PLACEMENT_CELL if grid.is_placeable(cell) else LANE_CELL
            if hover == cell and grid.is_placeable(cell):
                color = HOVER_CELL
            pygame.draw.rect(screen, color, (cx - size // 2, cy - size // 2, size, size))

        for cell, defender in self.game.defenders.items():
            cx, cy = self.to_screen(self.layout.to_space(cell))
            pygame.draw.circle(screen, DEFENDER_COLORS[defender.defender_type], (cx, cy), size // 3)

        for enemy in self.game.context.enemies.active_enemies():
            if not enemy.is_alive:
                continue
            # Enemy positions are in grid units; interpolate between cell centres
            start = self.layout.to_space(enemy.cell)
            point = Point2D(x=start.x, y=start.y + enemy.progress * self.layout.pitch)
            ex, ey = self.to_screen(point)
            pygame.draw.circle(screen, ENEMY_COLORS[enemy.enemy_type], (ex, ey), size // 4)
            bar = int(size * 0.5 * enemy.current_health / enemy.max_health)
            pygame.draw.rect(screen, (60, 220, 60), (ex - size // 4, ey - size // 3, bar, 4))

        for start, end, _ in self.flashes:
            pygame.draw.line(screen, SHOT, self.to_screen(start), self.to_screen(end), 3)

        self._draw_hud(screen, font)

    def _draw_hud(self, screen, font) -> None:
        game = self.game
        parts = [
            f"Level {game.current_level}",
            f"State: {game.state.value}",
            f"Lives: {game.lives}",
            f"Enemies left: {game.waves.remaining_enemies}",
        ]
        if game.state == GameState.PREPARATION:
            inventory = game.placement.inventory()
            parts.append(' '.join(
                f"[{i + 1}] {t.value} x{inventory[t]}"
                + ('*' if game.placement.selected_type == t else '')
                for i, t in enumerate(DefenderType)
            ))
        screen.blit(font.render('   '.join(parts), True, TEXT), (12, 12))

        hint = {
            GameState.MAIN_MENU: "SPACE to start",
            GameState.PREPARATION: "1-3 select, click to place, right click to remove, SPACE to fight",
            GameState.BATTLE: "P to pause, +/- speed",
            GameState.PAUSED: "P to resume",
            GameState.VICTORY: "Victory! R to replay",
            GameState.DEFEAT: "Defeat. R to retry",
        }.get(game.state, "")
        screen.blit(font.render(hint, True, TEXT), (12, 40))


def _print_levels(loader: ManifestLoader) -> None:
    print("\nAvailable levels:")
    print("-" * 40)
    for slug in loader.list_levels():
        info = loader.get_level_info(slug)
        print(f"  {slug:20} {info.name if info else ''}")

    groups = loader.list_groups()
    if groups:
        print("\nLevel groups:")
        print("-" * 40)
        for slug in groups:
            info = loader.get_level_info(slug)
            count = len(info.levels) if info else 0
            print(f"  {slug:20} ({count} levels) {info.name if info else ''}")
    print()


def main():
    """Main entry point for the development viewer."""
    parser = argparse.ArgumentParser(
        description='Board Defence development viewer - play with mouse and keyboard',
    )
    parser.add_argument('--list', '-l', action='store_true', help='List levels and groups and exit')
    parser.add_argument('--group', '-g', type=str, default=None, help='Level group to play')
    parser.add_argument('--seed', type=int, default=None, help='Seed for spawn columns')
    parser.add_argument('--speed', type=float, default=1.0, help='Simulation time scale')
    parser.add_argument('--auto-start', action='store_true', help='Start battle when preparation time runs out')
    parser.add_argument('--log-level', type=str, default=None, help='Default log level (e.g. DEBUG)')
    parser.add_argument(
        '--resolution', '-r',
        type=str,
        default='900x900',
        help='Window resolution as WIDTHxHEIGHT (default: 900x900)'
    )
    args = parser.parse_args()

    if args.log_level:
        configure_logging(level=args.log_level)

    settings = SimulationSettings()
    if args.auto_start:
        settings.auto_start_battle = True

    if args.list:
        _print_levels(ManifestLoader(settings.levels_dir))
        return 0

    try:
        width, height = (int(v) for v in args.resolution.split('x'))
    except ValueError:
        print(f"Invalid resolution format: {args.resolution}")
        print("Expected format: WIDTHxHEIGHT (e.g., 1920x1080)")
        return 1

    try:
        game = GameStateMachine.from_level_group(args.group, settings=settings, seed=args.seed)
    except (ConfigError, FileNotFoundError) as e:
        print(f"ERROR: Failed to load levels: {e}")
        return 1
    game.time_scale = args.speed

    register_sink('events', create_sink_for_environment('events'))

    pygame.init()
    screen = pygame.display.set_mode((width, height))
    pygame.display.set_caption("Board Defence - Development Mode")
    font = pygame.font.Font(None, 24)

    view = BoardView(game, width, height)
    game.events.subscribe(AttackPerformed, view.on_attack)
    game.events.subscribe(GameStateChanged, lambda e: print(f"State: {e.new_state.value}"))
    game.events.subscribe(EnemyReachedBase, lambda e: print(f"Enemy got through in column {e.column}"))
    game.events.subscribe(LevelCompleted, lambda e: print(f"Level {e.level} complete"))

    print("=" * 60)
    print("Development Mode: Board Defence")
    print("=" * 60)
    print("Controls:")
    print("  - SPACE to start game / start battle")
    print("  - 1/2/3 to select a defender, click to place, right click to remove")
    print("  - P to pause/resume, +/- to change speed")
    print("  - R to restart after victory or defeat")
    print("  - ESC to quit")
    print()

    clock = pygame.time.Clock()
    running = True

    while running:
        dt = clock.tick(60) / 1000.0
        hover = view.cell_at(pygame.mouse.get_pos())

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    running = False
                elif event.key == pygame.K_SPACE:
                    if game.state == GameState.MAIN_MENU:
                        game.start_game()
                    else:
                        game.start_battle()
                elif event.key == pygame.K_p:
                    if game.state == GameState.PAUSED:
                        game.resume()
                    else:
                        game.pause()
                elif event.key == pygame.K_r:
                    game.restart()
                elif event.key in (pygame.K_PLUS, pygame.K_EQUALS):
                    game.time_scale = min(8.0, game.time_scale * 2)
                elif event.key == pygame.K_MINUS:
                    game.time_scale = max(0.25, game.time_scale / 2)
                elif event.key in SELECT_KEYS:
                    game.select_defender_type(SELECT_KEYS[event.key])
            elif event.type == pygame.MOUSEBUTTONDOWN and hover is not None:
                try:
                    if event.button == 1:
                        game.place_selected(hover)
                    elif event.button == 3:
                        game.remove_defender(hover)
                except PlacementError as e:
                    print(f"Can't place there: {e.reason.value}")

        game.tick(dt)
        view.update(dt)

        screen.fill(BACKGROUND)
        view.draw(screen, font, hover)
        pygame.display.flip()

    close_all_sinks()
    pygame.quit()
    return 0


if __name__ == "__main__":
    sys.exit(main())
