"""
Level loading for Board Defence.

Levels are YAML (or JSON) files describing one LevelManifest each. Files
are validated against `data/schemas/level.schema.json` before parsing.

Level Groups:
Level groups define the order levels are played in. They are YAML files
with a `group: true` marker.

Example level group (campaign.yaml):
    group: true
    name: "Campaign"
    description: "The three standard levels"
    levels:
      - level_01
      - level_02
      - level_03
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
import json
from pathlib import Path
from typing import Any, Dict, Generic, List, Optional, TypeVar

import jsonschema
import yaml
from pydantic import ValidationError

from boarddefence.config import LEVELS_DIR, SCHEMAS_DIR
from boarddefence.errors import ConfigError, LevelSchemaError
from boarddefence.logging import get_logger
from models.level import LevelManifest

log = get_logger('levels')


# =============================================================================
# Schema Validation
# =============================================================================

_level_schema: Optional[Dict[str, Any]] = None


def _get_level_schema() -> Dict[str, Any]:
    """Lazy-load level schema."""
    global _level_schema
    if _level_schema is None:
        schema_path = SCHEMAS_DIR / 'level.schema.json'
        if not schema_path.exists():
            raise LevelSchemaError(f"Schema file not found: {schema_path}")
        with open(schema_path) as f:
            _level_schema = json.load(f)
    return _level_schema


def validate_level_data(data: Dict[str, Any], source_path: Optional[Path] = None) -> None:
    """Validate level data against the level schema.

    Args:
        data: Parsed YAML/JSON data
        source_path: Optional path for error messages

    Raises:
        LevelSchemaError: If validation fails
    """
    schema = _get_level_schema()
    try:
        jsonschema.validate(data, schema)
    except jsonschema.ValidationError as e:
        path_str = f" in {source_path}" if source_path else ""
        location = '/'.join(str(p) for p in e.absolute_path)
        raise LevelSchemaError(
            f"Schema validation error{path_str}: {e.message} at {location}"
        ) from e
    except jsonschema.SchemaError as e:
        raise LevelSchemaError(f"Invalid schema: {e.message}") from e


def _load_data_file(path: Path) -> Dict[str, Any]:
    """Load data from a YAML or JSON file.

    Raises:
        ConfigError: If the file cannot be parsed
        FileNotFoundError: If the file does not exist
    """
    if not path.exists():
        raise FileNotFoundError(f"No data file found: {path}")

    try:
        with open(path, 'r') as f:
            if path.suffix == '.json':
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigError(f"Cannot parse {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a mapping at the top of {path}")
    return data


# =============================================================================
# Level Data Classes
# =============================================================================

@dataclass
class LevelInfo:
    """Basic level metadata.

    The minimal info needed to list levels without building manifests.
    """
    name: str
    slug: str  # Filename without extension, used as identifier
    description: str = ""
    level_number: int = 0
    file_path: Optional[Path] = None

    # For level groups
    is_group: bool = False
    levels: List[str] = field(default_factory=list)


@dataclass
class LevelGroup:
    """An ordered sequence of levels (the campaign)."""
    name: str
    slug: str
    description: str = ""
    levels: List[str] = field(default_factory=list)  # Level slugs in order
    file_path: Optional[Path] = None

    # Runtime state (not persisted)
    current_index: int = 0

    @property
    def current_level(self) -> Optional[str]:
        """Get current level slug."""
        if 0 <= self.current_index < len(self.levels):
            return self.levels[self.current_index]
        return None

    @property
    def is_complete(self) -> bool:
        """Check if all levels completed."""
        return self.current_index >= len(self.levels)

    def advance(self) -> Optional[str]:
        """Advance to next level. Returns next level slug or None if complete."""
        self.current_index += 1
        return self.current_level

    def reset(self) -> None:
        """Reset to first level."""
        self.current_index = 0


T = TypeVar('T')


class LevelLoader(Generic[T], ABC):
    """Base class for level loaders.

    Subclasses implement _parse_level_data() to convert validated dicts
    into a level object.

    Usage:
        loader = ManifestLoader(levels_dir)
        slugs = loader.list_levels()
        manifest = loader.load_level('level_01')
    """

    def __init__(self, levels_dir: Path):
        """Initialize the level loader.

        Args:
            levels_dir: Directory containing level files
        """
        self._levels_dir = Path(levels_dir)
        self._info_cache: Dict[str, LevelInfo] = {}
        self._group_cache: Dict[str, LevelGroup] = {}

    @property
    def levels_dir(self) -> Path:
        return self._levels_dir

    @abstractmethod
    def _parse_level_data(self, data: Dict[str, Any], file_path: Path) -> T:
        """Parse validated data into a level object.

        Args:
            data: Raw level data dict
            file_path: Path to the level file (for error messages)
        """

    def list_levels(self) -> List[str]:
        """List available level slugs (sorted, groups excluded)."""
        return sorted(
            slug for slug, info in self._scan().items() if not info.is_group
        )

    def list_groups(self) -> List[str]:
        """List available level group slugs (sorted)."""
        return sorted(
            slug for slug, info in self._scan().items() if info.is_group
        )

    def _scan(self) -> Dict[str, LevelInfo]:
        found: Dict[str, LevelInfo] = {}
        if not self._levels_dir.exists():
            return found

        for ext in ['*.yaml', '*.yml', '*.json']:
            for path in self._levels_dir.rglob(ext):
                # Skip hidden and private files
                if path.name.startswith("_") or path.name.startswith("."):
                    continue
                info = self.get_level_info(path.stem)
                if info:
                    found[path.stem] = info
        return found

    def get_level_info(self, slug: str) -> Optional[LevelInfo]:
        """Get level metadata without building the level.

        Args:
            slug: Level identifier (filename without extension)

        Returns:
            LevelInfo or None if not found or unreadable
        """
        if slug in self._info_cache:
            return self._info_cache[slug]

        path = self._find_level_file(slug)
        if not path:
            return None

        try:
            data = _load_data_file(path)
        except ConfigError as e:
            log.warning("Skipping unreadable level file %s: %s", path, e)
            return None

        is_group = bool(data.get('group', False))
        info = LevelInfo(
            name=data.get('name', slug),
            slug=slug,
            description=data.get('description', ''),
            level_number=data.get('level_number', 0) if not is_group else 0,
            file_path=path,
            is_group=is_group,
            levels=list(data.get('levels', [])) if is_group else [],
        )
        self._info_cache[slug] = info
        return info

    def load_level(self, slug: str) -> T:
        """Load a level by slug.

        Raises:
            FileNotFoundError: If the level file doesn't exist
            LevelSchemaError: If the file fails schema validation
            ConfigError: If the file is empty, a group, or otherwise invalid
        """
        path = self._find_level_file(slug)
        if not path:
            raise FileNotFoundError(f"Level not found: {slug}")

        data = _load_data_file(path)
        if not data:
            raise ConfigError(f"Empty level file: {slug}")
        if data.get('group', False):
            raise ConfigError(f"'{slug}' is a level group, not a level")

        validate_level_data(data, path)
        level = self._parse_level_data(data, path)
        log.info("Loaded level '%s' from %s", slug, path)
        return level

    def load_group(self, slug: str) -> LevelGroup:
        """Load a level group by slug.

        Raises:
            FileNotFoundError: If the group file doesn't exist
            ConfigError: If the file is not a group or lists no levels
        """
        if slug in self._group_cache:
            group = self._group_cache[slug]
            group.reset()  # Reset progress for new load
            return group

        path = self._find_level_file(slug)
        if not path:
            raise FileNotFoundError(f"Level group not found: {slug}")

        data = _load_data_file(path)
        if not data:
            raise ConfigError(f"Empty group file: {slug}")
        if not data.get('group', False):
            raise ConfigError(f"'{slug}' is a level, not a group")

        levels = data.get('levels', [])
        if not isinstance(levels, list) or not all(isinstance(s, str) for s in levels):
            raise ConfigError(f"Group '{slug}' must list level slugs")
        if not levels:
            raise ConfigError(f"Group '{slug}' lists no levels")

        group = LevelGroup(
            name=data.get('name', slug),
            slug=slug,
            description=data.get('description', ''),
            levels=list(levels),
            file_path=path,
        )
        self._group_cache[slug] = group
        return group

    def _find_level_file(self, slug: str) -> Optional[Path]:
        """Find the file for a slug, directly or in any subdirectory."""
        extensions = ['.yaml', '.yml', '.json']

        for ext in extensions:
            direct = self._levels_dir / f"{slug}{ext}"
            if direct.exists():
                return direct

        # Search recursively as last resort
        for ext in extensions:
            for path in self._levels_dir.rglob(f"{slug}{ext}"):
                return path

        return None


# =============================================================================
# Manifest Loader
# =============================================================================

class ManifestLoader(LevelLoader[LevelManifest]):
    """Loads level files as LevelManifest models."""

    def __init__(self, levels_dir: Path = LEVELS_DIR):
        super().__init__(levels_dir)

    def _parse_level_data(self, data: Dict[str, Any], file_path: Path) -> LevelManifest:
        """Build a manifest from validated level data.

        Allocations are written as a `type: count` mapping in level files.
        """
        fields = dict(data)
        allocations = fields.pop('defenders', {}) or {}
        spawns = fields.pop('enemies', []) or []
        fields.pop('group', None)

        try:
            return LevelManifest(
                defender_allocations=[
                    {'defender_type': defender_type, 'count': count}
                    for defender_type, count in allocations.items()
                    if count > 0
                ],
                enemy_spawns=[
                    {
                        'enemy_type': entry['type'],
                        'count': entry.get('count', 1),
                        'spawn_delay': entry.get('spawn_delay'),
                    }
                    for entry in spawns
                ],
                **fields,
            )
        except ValidationError as e:
            raise ConfigError(f"Invalid level {file_path}: {e}") from e

    def load_campaign(self, slug: str = 'campaign') -> List[LevelManifest]:
        """Load every level of a group, in order.

        Raises:
            ConfigError: If the group or any of its levels is invalid
            FileNotFoundError: If the group or a listed level is missing
        """
        group = self.load_group(slug)
        levels = [self.load_level(level_slug) for level_slug in group.levels]
        log.info("Loaded group '%s' with %d levels", slug, len(levels))
        return levels
