"""
Procedural Multi-Floor Dungeon Generator.

Each floor is built on its own occupancy grid: rooms are placed by
weighted draw, joined by a greedy spanning tree of corridors, stocked with
content scaled to the floor level, and given one entrance and one exit.
Floor ``i`` (0-indexed) runs at difficulty ``level + i``.
"""
import logging
import random
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union

from dungeongen.core.errors import ConfigurationError, GenerationError
from .connectivity import ConnectivityBuilder
from .content_populator import ContentPopulator
from .models import GRID_SIZES, Dungeon, Floor, FloorPortal, PortalType, SizeClass, new_id
from .room_placer import RoomPlacer
from .room_templates import GeneratorConfig
from .serialization import export_dungeon, import_dungeon
from .spatial_grid import SpatialGrid

logger = logging.getLogger("dungeongen.map_generation")


def _require_positive_int(name: str, value: Any) -> int:
    # bool is an int subclass; True must not pass as 1
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(name, f"{name} must be an integer", value)
    if value < 1:
        raise ConfigurationError(name, f"{name} must be at least 1", value)
    return value


@dataclass
class GenerationOptions:
    """Parameters for a single generate() call. Only unset values take defaults."""
    name: str = "Generated Dungeon"
    level: int = 1
    floors: int = 1
    rooms_per_floor: int = 10
    theme: str = "generic"
    size: Union[SizeClass, str] = SizeClass.MEDIUM

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GenerationOptions":
        """Build options from a mapping, leaving missing or None keys at their defaults."""
        known = {"name", "level", "floors", "rooms_per_floor", "theme", "size"}
        unknown = set(data) - known
        if unknown:
            raise ConfigurationError(sorted(unknown)[0], f"Unknown option: {sorted(unknown)[0]}")
        return cls(**{k: v for k, v in data.items() if v is not None})

    def validate(self, config: GeneratorConfig) -> "GenerationOptions":
        """
        Check every option against the configuration.

        Returns:
            A normalized copy (size as SizeClass, rooms capped)

        Raises:
            ConfigurationError: On the first invalid option
        """
        if not isinstance(self.name, str) or not self.name.strip():
            raise ConfigurationError("name", "name must be a non-empty string", self.name)
        level = _require_positive_int("level", self.level)
        floors = _require_positive_int("floors", self.floors)
        rooms = _require_positive_int("rooms_per_floor", self.rooms_per_floor)

        try:
            size = SizeClass(self.size)
        except ValueError:
            raise ConfigurationError(
                "size", f"Unknown size class '{self.size}', expected one of: "
                        f"{', '.join(s.value for s in SizeClass)}", self.size
            )

        if not isinstance(self.theme, str) or self.theme not in config.themes:
            raise ConfigurationError("theme", f"Unknown theme '{self.theme}'", self.theme)

        return GenerationOptions(
            name=self.name,
            level=level,
            floors=floors,
            rooms_per_floor=min(rooms, config.max_rooms_per_floor),
            theme=self.theme,
            size=size,
        )


class FloorBuilder:
    """Builds one floor: placement, connectivity, content, then entrance and exit."""

    def __init__(self, config: GeneratorConfig, rng: random.Random):
        self.config = config
        self.rng = rng

    def build(self, floor_number: int, level: int, theme_id: str, size: SizeClass, rooms: int) -> Floor:
        width, height = GRID_SIZES[size]
        floor = Floor(
            id=new_id(self.rng),
            floor_number=floor_number,
            level=level,
            theme=theme_id,
            grid_width=width,
            grid_height=height,
            requested_rooms=rooms,
            description=f"Floor {floor_number} of the {theme_id} dungeon",
        )

        grid = SpatialGrid(width, height)
        placer = RoomPlacer(
            self.config.eligible_room_types(theme_id),
            self.rng,
            placement_attempts=self.config.placement_attempts,
            feature_chance=self.config.feature_chance,
        )
        placement = placer.place(grid, rooms, floor.id, level)
        if not placement.rooms:
            raise GenerationError(
                f"No room could be placed on floor {floor_number}",
                {"floor_number": floor_number, "grid": f"{width}x{height}", "requested": rooms},
            )
        floor.rooms = placement.rooms

        theme = self.config.themes.get(theme_id)
        connector = ConnectivityBuilder(
            self.rng,
            corridor_features=theme.corridor_features,
            feature_chance=self.config.corridor_feature_chance,
        )
        floor.corridors = connector.connect(floor.rooms)

        ContentPopulator(self.config.room_types, self.config.content, self.rng).populate(floor.rooms, level)

        floor.entrances.append(FloorPortal(
            portal_type=PortalType.STAIRS_DOWN,
            room_id=floor.rooms[0].id,
            description="A staircase leading down into the dungeon",
        ))
        floor.exits.append(FloorPortal(
            portal_type=PortalType.STAIRS_UP,
            room_id=floor.rooms[-1].id,
            description="A staircase leading up to the surface",
        ))

        logger.debug(
            f"Floor {floor_number}: {floor.achieved_rooms}/{rooms} rooms "
            f"({placement.dropped} dropped), {len(floor.corridors)} corridors"
        )
        return floor


class DungeonGenerator:
    """
    Generates multi-floor dungeons.

    Registries and limits come from an explicit GeneratorConfig; randomness
    comes from an injected random.Random so seeded runs are reproducible.
    """

    def __init__(
        self,
        config: Optional[GeneratorConfig] = None,
        rng: Optional[random.Random] = None,
        seed: Optional[int] = None
    ):
        """
        Initialize the dungeon generator.

        Args:
            config: Registries and limits (built-in defaults when omitted)
            rng: Random source to draw from
            seed: Seed for a fresh random source when ``rng`` is not given
        """
        self.config = config or GeneratorConfig.default()
        self.rng = rng or random.Random(seed)

    def generate(self, options: Optional[Union[GenerationOptions, Dict[str, Any]]] = None) -> Dungeon:
        """
        Generate a dungeon.

        Options are validated before any grid work starts.

        Raises:
            ConfigurationError: If any option is invalid
            GenerationError: If a floor ends up with no rooms at all
        """
        if options is None:
            options = GenerationOptions()
        elif isinstance(options, dict):
            options = GenerationOptions.from_dict(options)
        options = options.validate(self.config)

        dungeon = Dungeon(
            id=new_id(self.rng),
            name=options.name,
            level=options.level,
            theme=options.theme,
            size=options.size,
            created_at=datetime.now(timezone.utc).isoformat(),
        )

        builder = FloorBuilder(self.config, self.rng)
        for index in range(options.floors):
            dungeon.floors.append(builder.build(
                floor_number=index + 1,
                level=options.level + index,
                theme_id=options.theme,
                size=options.size,
                rooms=options.rooms_per_floor,
            ))

        total_rooms = sum(f.achieved_rooms for f in dungeon.floors)
        logger.info(
            f"Generated dungeon '{dungeon.name}' ({dungeon.id}): {len(dungeon.floors)} floors, "
            f"{total_rooms} rooms, theme={dungeon.theme}, size={dungeon.size.value}"
        )
        return dungeon

    def export(self, dungeon: Dungeon) -> str:
        return export_dungeon(dungeon)

    def import_(self, data: Union[str, bytes, Dict[str, Any]]) -> Dungeon:
        return import_dungeon(data)


def generate_dungeon(
    name: str = "Generated Dungeon",
    level: int = 1,
    floors: int = 1,
    rooms_per_floor: int = 10,
    theme: str = "generic",
    size: str = "medium",
    seed: Optional[int] = None,
    config: Optional[GeneratorConfig] = None
) -> Dungeon:
    """
    Convenience function to generate a dungeon.

    Args:
        name: Display name of the dungeon
        level: Difficulty of the first floor (1+)
        floors: Number of floors (1+)
        rooms_per_floor: Requested rooms per floor (capped by the config)
        theme: Registered theme id
        size: "small", "medium", "large", or "huge"
        seed: Random seed for reproducibility
        config: Registries and limits (built-in defaults when omitted)

    Returns:
        The generated Dungeon
    """
    generator = DungeonGenerator(config=config, seed=seed)
    return generator.generate(GenerationOptions(
        name=name,
        level=level,
        floors=floors,
        rooms_per_floor=rooms_per_floor,
        theme=theme,
        size=size,
    ))
