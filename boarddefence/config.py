"""
Configuration for the Board Defence simulation.

Loads settings from the .env file next to this module, with sensible
defaults. Real environment variables take precedence over the file.
"""
import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

PACKAGE_DIR = Path(__file__).parent
DATA_DIR = PACKAGE_DIR / 'data'
LEVELS_DIR = DATA_DIR / 'levels'
SCHEMAS_DIR = DATA_DIR / 'schemas'

# Load .env from package directory
load_dotenv(PACKAGE_DIR / '.env')


def _get_bool(key: str, default: bool) -> bool:
    """Get boolean from environment."""
    val = os.getenv(key, str(default)).lower()
    return val in ('true', '1', 'yes', 'on')


def _get_int(key: str, default: int) -> int:
    """Get integer from environment."""
    return int(os.getenv(key, str(default)))


def _get_float(key: str, default: float) -> float:
    """Get float from environment."""
    return float(os.getenv(key, str(default)))


# Board geometry
BOARD_WIDTH: int = _get_int('BOARD_WIDTH', 4)
BOARD_HEIGHT: int = _get_int('BOARD_HEIGHT', 8)
PLACEABLE_ROW_START: int = _get_int('PLACEABLE_ROW_START', 4)  # Rows 4-7 by default

# Layout space (consumed by presentation collaborators)
CELL_SIZE: float = _get_float('CELL_SIZE', 1.0)
CELL_SPACING: float = _get_float('CELL_SPACING', 0.1)

# Game rules
PLAYER_LIVES: int = _get_int('PLAYER_LIVES', 3)
AUTO_START_BATTLE: bool = _get_bool('AUTO_START_BATTLE', False)

# Enemy pool (split evenly across enemy types)
ENEMY_POOL_SIZE: int = _get_int('ENEMY_POOL_SIZE', 20)
ENEMY_POOL_EXPANDABLE: bool = _get_bool('ENEMY_POOL_EXPANDABLE', True)

# How close an enemy must be to a candidate cell centre to be targeted, in layout
# units (one cell step is CELL_SIZE + CELL_SPACING, so 0.75 is about 0.68 cells)
TARGET_TOLERANCE: float = _get_float('TARGET_TOLERANCE', 0.75)

# Level group played by start_game when none is given
LEVEL_GROUP: str = os.getenv('LEVEL_GROUP', 'campaign')


@dataclass
class SimulationSettings:
    """Tunable simulation parameters.

    Defaults come from the module constants above; tests and tools build
    their own instances.
    """
    board_width: int = BOARD_WIDTH
    board_height: int = BOARD_HEIGHT
    placeable_row_start: int = PLACEABLE_ROW_START
    cell_size: float = CELL_SIZE
    cell_spacing: float = CELL_SPACING
    player_lives: int = PLAYER_LIVES
    auto_start_battle: bool = AUTO_START_BATTLE
    enemy_pool_size: int = ENEMY_POOL_SIZE
    enemy_pool_expandable: bool = ENEMY_POOL_EXPANDABLE
    target_tolerance: float = TARGET_TOLERANCE
    level_group: str = LEVEL_GROUP
    levels_dir: Path = field(default=LEVELS_DIR)
