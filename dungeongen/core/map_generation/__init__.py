"""
Procedural Dungeon Generation System.

Generates multi-floor dungeons using:
- Weighted room types placed on a per-floor occupancy grid
- Greedy nearest-neighbour corridors guaranteeing full connectivity
- Content from the catalog scaled to each floor's difficulty level
"""

from .content import ContentCategory, ContentRegistry, ItemEntry, MonsterEntry, SpellEntry
from .dungeon_generator import DungeonGenerator, FloorBuilder, GenerationOptions, generate_dungeon
from .models import Corridor, Dungeon, Floor, Room, SizeClass
from .room_templates import GeneratorConfig, RoomTypeDefinition, ThemeDefinition
from .serialization import export_dungeon, import_dungeon

__all__ = [
    "ContentCategory",
    "ContentRegistry",
    "ItemEntry",
    "MonsterEntry",
    "SpellEntry",
    "DungeonGenerator",
    "FloorBuilder",
    "GenerationOptions",
    "generate_dungeon",
    "Corridor",
    "Dungeon",
    "Floor",
    "Room",
    "SizeClass",
    "GeneratorConfig",
    "RoomTypeDefinition",
    "ThemeDefinition",
    "export_dungeon",
    "import_dungeon",
]
