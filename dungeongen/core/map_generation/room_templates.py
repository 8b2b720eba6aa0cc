"""
Room Templates for Dungeon Generation.

Defines weighted room types (size bounds, feature tags, content policy),
dungeon themes, and the GeneratorConfig that bundles both registries with
the content catalog for a generator instance.
"""
import logging
import random
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional, Sequence, Tuple, Type, Union

from pydantic import BaseModel, Field, ValidationError, model_validator

from dungeongen.core.dice import roll_notation
from dungeongen.core.errors import RegistrationError, format_validation_errors
from .content import ContentCategory, ContentRegistry, MonsterEntry
from .models import MonsterContent, PuzzleContent, RoomContent, TreasureContent, TreasureItem

logger = logging.getLogger("dungeongen.map_generation")

DEFAULT_CORRIDOR_FEATURES: Tuple[str, ...] = ("torches", "debris", "bones", "traps")


class ContentPolicy(str, Enum):
    """What a room type generates when populated."""
    COMBAT = "combat"
    TREASURE = "treasure"
    PUZZLE = "puzzle"
    NONE = "none"


# =============================================================================
# ROOM TYPES
# =============================================================================

@dataclass(frozen=True)
class RoomTypeDefinition:
    """
    A weighted room type.

    The base class generates no content; subclasses override populate()
    to attach monsters, treasure or puzzles.
    """
    type_id: str
    name: str
    weight: float
    min_width: int
    max_width: int
    min_height: int
    max_height: int
    features: Tuple[str, ...] = ()
    descriptions: Tuple[str, ...] = ()
    ambience: str = ""
    lighting: str = ""

    content_policy: ClassVar[ContentPolicy] = ContentPolicy.NONE

    def __post_init__(self):
        if not self.type_id:
            raise RegistrationError("room_type", "Room type id must not be empty")
        if self.weight <= 0:
            raise RegistrationError("room_type", "Room type weight must be positive", self.type_id)
        if not (1 <= self.min_width <= self.max_width and 1 <= self.min_height <= self.max_height):
            raise RegistrationError(
                "room_type", "Room size bounds must satisfy 1 <= min <= max", self.type_id
            )

    def sample_size(self, rng: random.Random) -> Tuple[int, int]:
        """Uniform width and height within the inclusive bounds."""
        width = rng.randint(self.min_width, self.max_width)
        height = rng.randint(self.min_height, self.max_height)
        return width, height

    def sample_features(self, rng: random.Random, chance: float) -> List[str]:
        """Include each feature tag independently with probability ``chance``."""
        return [f for f in self.features if rng.random() < chance]

    def describe(self, rng: random.Random) -> str:
        if not self.descriptions:
            return ""
        return rng.choice(self.descriptions)

    def decorate(self, features: Sequence[str]) -> Dict[str, str]:
        """
        Ambience and lighting for a room of this type.

        Receives the sampled feature tags so subclasses can vary the mood.
        """
        return {"ambience": self.ambience, "lighting": self.lighting}

    def populate(self, level: int, registry: ContentRegistry, rng: random.Random) -> List[RoomContent]:
        """Content for a room of this type at the given difficulty level."""
        return []

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type_id": self.type_id,
            "name": self.name,
            "weight": self.weight,
            "min_width": self.min_width,
            "max_width": self.max_width,
            "min_height": self.min_height,
            "max_height": self.max_height,
            "features": list(self.features),
            "descriptions": list(self.descriptions),
            "ambience": self.ambience,
            "lighting": self.lighting,
            "content": self.content_policy.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RoomTypeDefinition":
        """Build a definition from a registration payload, picking the class by its ``content`` key."""
        try:
            spec = RoomTypeSpec.model_validate(data)
        except ValidationError as e:
            raise RegistrationError("room_type", f"Invalid room type definition: {format_validation_errors(e)}",
                                    str(data.get("type_id", "")) if isinstance(data, dict) else None)
        return spec.build()


class CombatRoomType(RoomTypeDefinition):
    """Rooms stocked with 1-3 monsters at or below the floor level."""
    content_policy: ClassVar[ContentPolicy] = ContentPolicy.COMBAT

    def populate(self, level: int, registry: ContentRegistry, rng: random.Random) -> List[RoomContent]:
        pool = registry.filter_by_max_difficulty(
            registry.list_by_category(ContentCategory.MONSTERS), level
        )
        count = rng.randint(1, 3)
        if not pool:
            return []

        monsters: List[RoomContent] = []
        for _ in range(count):
            monster = rng.choice(pool)
            monsters.append(MonsterContent(
                entry_id=monster.id,
                name=monster.name,
                hp=_roll_hit_points(monster, rng),
                challenge_rating=monster.cr,
                description=monster.description,
            ))
        return monsters


class TreasureRoomType(RoomTypeDefinition):
    """Rooms holding level-scaled gold and 1-3 catalog items."""
    content_policy: ClassVar[ContentPolicy] = ContentPolicy.TREASURE

    def populate(self, level: int, registry: ContentRegistry, rng: random.Random) -> List[RoomContent]:
        gold = rng.randint(50, 50 + level * 100 - 1)
        catalog = registry.list_by_category(ContentCategory.ITEMS)
        count = rng.randint(1, 3)
        items = []
        if catalog:
            for _ in range(count):
                item = rng.choice(catalog)
                items.append(TreasureItem(entry_id=item.id, name=item.name, description=item.description))
        return [TreasureContent(gold=gold, items=items)]


class PuzzleRoomType(RoomTypeDefinition):
    """Rooms with a single puzzle whose difficulty equals the floor level."""
    content_policy: ClassVar[ContentPolicy] = ContentPolicy.PUZZLE

    def populate(self, level: int, registry: ContentRegistry, rng: random.Random) -> List[RoomContent]:
        return [PuzzleContent(difficulty=level)]


POLICY_CLASSES: Dict[ContentPolicy, Type[RoomTypeDefinition]] = {
    ContentPolicy.COMBAT: CombatRoomType,
    ContentPolicy.TREASURE: TreasureRoomType,
    ContentPolicy.PUZZLE: PuzzleRoomType,
    ContentPolicy.NONE: RoomTypeDefinition,
}


def _roll_hit_points(monster: MonsterEntry, rng: random.Random) -> int:
    if isinstance(monster.hp, int):
        return monster.hp
    return roll_notation(monster.hp, rng)


class RoomTypeSpec(BaseModel):
    """Registration payload for a room type."""
    type_id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    weight: float = Field(gt=0)
    min_width: int = Field(ge=1)
    max_width: int = Field(ge=1)
    min_height: int = Field(ge=1)
    max_height: int = Field(ge=1)
    features: List[str] = Field(default_factory=list)
    descriptions: List[str] = Field(default_factory=list)
    ambience: str = ""
    lighting: str = ""
    content: ContentPolicy = ContentPolicy.NONE

    @model_validator(mode="after")
    def _check_bounds(self) -> "RoomTypeSpec":
        if self.min_width > self.max_width:
            raise ValueError("min_width must not exceed max_width")
        if self.min_height > self.max_height:
            raise ValueError("min_height must not exceed max_height")
        return self

    def build(self) -> RoomTypeDefinition:
        definition_cls = POLICY_CLASSES[self.content]
        return definition_cls(
            type_id=self.type_id,
            name=self.name,
            weight=self.weight,
            min_width=self.min_width,
            max_width=self.max_width,
            min_height=self.min_height,
            max_height=self.max_height,
            features=tuple(self.features),
            descriptions=tuple(self.descriptions),
            ambience=self.ambience,
            lighting=self.lighting,
        )


# Built-in room types
BUILTIN_ROOM_TYPES: Tuple[RoomTypeDefinition, ...] = (
    CombatRoomType(
        type_id="combat",
        name="Combat Room",
        weight=40,
        min_width=3, max_width=8,
        min_height=3, max_height=8,
        features=("cover", "obstacles", "traps"),
        descriptions=(
            "The air smells of dampness and decay",
            "Weapons and armor litter the floor",
            "Scratches cover the walls",
        ),
        ambience="tense",
        lighting="dim",
    ),
    TreasureRoomType(
        type_id="treasure",
        name="Treasure Room",
        weight=15,
        min_width=2, max_width=5,
        min_height=2, max_height=5,
        features=("chest", "loot", "traps"),
        descriptions=(
            "Golden coins sparkle in the dim light",
            "A chest sits in the center of the room",
            "Precious items are scattered about",
        ),
        ambience="mysterious",
        lighting="faint_glow",
    ),
    PuzzleRoomType(
        type_id="puzzle",
        name="Puzzle Room",
        weight=10,
        min_width=3, max_width=6,
        min_height=3, max_height=6,
        features=("mechanism", "clues", "traps"),
        descriptions=(
            "Ancient runes cover the walls",
            "A mysterious device hums with energy",
            "Strange symbols glow faintly",
        ),
        ambience="ancient",
        lighting="magical",
    ),
    RoomTypeDefinition(
        type_id="rest",
        name="Rest Area",
        weight=10,
        min_width=2, max_width=4,
        min_height=2, max_height=4,
        features=("fountain", "benches", "healing"),
        descriptions=(
            "A peaceful sanctuary",
            "The sound of trickling water echoes",
            "Soft light fills the room",
        ),
        ambience="peaceful",
        lighting="warm",
    ),
    RoomTypeDefinition(
        type_id="special",
        name="Special Room",
        weight=10,
        min_width=3, max_width=6,
        min_height=3, max_height=6,
        features=("unique", "story", "boss"),
        descriptions=(
            "An otherworldly presence fills the air",
            "Ancient magic permeates the chamber",
            "Something powerful resides here",
        ),
        ambience="powerful",
        lighting="dramatic",
    ),
)


class RoomTypeRegistry:
    """Room types in registration order, guarded by a coarse lock."""

    def __init__(self, definitions: Sequence[RoomTypeDefinition] = ()):
        self._lock = threading.Lock()
        self._types: Dict[str, RoomTypeDefinition] = {}
        for definition in definitions:
            self.register(definition)

    def register(self, definition: Union[RoomTypeDefinition, Dict[str, Any]]) -> RoomTypeDefinition:
        """Add or replace a room type."""
        if isinstance(definition, dict):
            definition = RoomTypeDefinition.from_dict(definition)
        with self._lock:
            replaced = definition.type_id in self._types
            self._types[definition.type_id] = definition
        if replaced:
            logger.info(f"Replaced room type '{definition.type_id}'")
        return definition

    def get(self, type_id: str) -> Optional[RoomTypeDefinition]:
        return self._types.get(type_id)

    def __contains__(self, type_id: str) -> bool:
        return type_id in self._types

    def all(self) -> Tuple[RoomTypeDefinition, ...]:
        """Snapshot of every registered type."""
        with self._lock:
            return tuple(self._types.values())


# =============================================================================
# THEMES
# =============================================================================

@dataclass(frozen=True)
class ThemeDefinition:
    """Thematic flavouring applied to a whole dungeon."""
    theme_id: str
    name: str
    description: str = ""
    room_types: Tuple[str, ...] = ()  # empty = every registered type
    corridor_features: Tuple[str, ...] = DEFAULT_CORRIDOR_FEATURES

    def to_dict(self) -> Dict[str, Any]:
        return {
            "theme_id": self.theme_id,
            "name": self.name,
            "description": self.description,
            "room_types": list(self.room_types),
            "corridor_features": list(self.corridor_features),
        }


class ThemeSpec(BaseModel):
    """Registration payload for a theme."""
    name: str = Field(min_length=1)
    description: str = ""
    room_types: List[str] = Field(default_factory=list)
    corridor_features: List[str] = Field(default_factory=lambda: list(DEFAULT_CORRIDOR_FEATURES))

    def build(self, theme_id: str) -> ThemeDefinition:
        return ThemeDefinition(
            theme_id=theme_id,
            name=self.name,
            description=self.description,
            room_types=tuple(self.room_types),
            corridor_features=tuple(self.corridor_features),
        )


def build_theme(theme_id: str, data: Dict[str, Any]) -> ThemeDefinition:
    """Validate a theme registration payload."""
    try:
        return ThemeSpec.model_validate(data).build(theme_id)
    except ValidationError as e:
        raise RegistrationError("theme", f"Invalid theme definition: {format_validation_errors(e)}", theme_id)


GENERIC_THEME = ThemeDefinition(
    theme_id="generic",
    name="Generic",
    description="A classic dungeon of stone halls and forgotten chambers",
)


class ThemeRegistry:
    """Dungeon themes keyed by id, guarded by a coarse lock."""

    def __init__(self, themes: Sequence[ThemeDefinition] = ()):
        self._lock = threading.Lock()
        self._themes: Dict[str, ThemeDefinition] = {}
        for theme in themes:
            self.register(theme.theme_id, theme)

    def register(self, theme_id: str, definition: Union[ThemeDefinition, Dict[str, Any]]) -> ThemeDefinition:
        if not theme_id:
            raise RegistrationError("theme", "Theme id must not be empty")
        if isinstance(definition, dict):
            definition = build_theme(theme_id, definition)
        elif definition.theme_id != theme_id:
            raise RegistrationError("theme", "Theme id does not match its definition", theme_id)
        with self._lock:
            self._themes[theme_id] = definition
        return definition

    def get(self, theme_id: str) -> Optional[ThemeDefinition]:
        return self._themes.get(theme_id)

    def __contains__(self, theme_id: str) -> bool:
        return theme_id in self._themes

    def all(self) -> Tuple[ThemeDefinition, ...]:
        with self._lock:
            return tuple(self._themes.values())


# =============================================================================
# GENERATOR CONFIGURATION
# =============================================================================

@dataclass
class GeneratorConfig:
    """
    Everything a DungeonGenerator reads besides its random source.

    Built once at startup and handed to generators explicitly, so
    independent generators (tests, tenants) never share registries by accident.
    """
    room_types: RoomTypeRegistry = field(default_factory=lambda: RoomTypeRegistry(BUILTIN_ROOM_TYPES))
    themes: ThemeRegistry = field(default_factory=lambda: ThemeRegistry((GENERIC_THEME,)))
    content: ContentRegistry = field(default_factory=ContentRegistry)
    max_rooms_per_floor: int = 15
    placement_attempts: int = 100
    feature_chance: float = 0.5
    corridor_feature_chance: float = 0.3

    @classmethod
    def default(cls, content: Optional[ContentRegistry] = None) -> "GeneratorConfig":
        """Built-in room types and themes with the given (or an empty) catalog."""
        return cls(content=content or ContentRegistry())

    @classmethod
    def from_settings(cls, settings, content: Optional[ContentRegistry] = None) -> "GeneratorConfig":
        """Built-in registries with limits taken from application settings."""
        if content is None:
            content = ContentRegistry()
            content.load_from_directory(settings.CONTENT_DATA_DIR)
        return cls(
            content=content,
            max_rooms_per_floor=settings.DUNGEON_MAX_ROOMS_PER_FLOOR,
            placement_attempts=settings.DUNGEON_PLACEMENT_ATTEMPTS,
            feature_chance=settings.DUNGEON_FEATURE_CHANCE,
            corridor_feature_chance=settings.DUNGEON_CORRIDOR_FEATURE_CHANCE,
        )

    def register_room_type(self, definition: Union[RoomTypeDefinition, Dict[str, Any]]) -> RoomTypeDefinition:
        """Extension hook: add or replace a room type before generation."""
        definition = self.room_types.register(definition)
        logger.info(f"Registered room type '{definition.type_id}' (weight={definition.weight})")
        return definition

    def register_theme(self, theme_id: str, definition: Union[ThemeDefinition, Dict[str, Any]]) -> ThemeDefinition:
        """Extension hook: add or replace a theme; its room types must already be registered."""
        if isinstance(definition, dict):
            definition = build_theme(theme_id, definition)
        unknown = [t for t in definition.room_types if t not in self.room_types]
        if unknown:
            raise RegistrationError("theme", f"Theme references unknown room types: {', '.join(unknown)}", theme_id)
        definition = self.themes.register(theme_id, definition)
        logger.info(f"Registered theme '{theme_id}'")
        return definition

    def eligible_room_types(self, theme_id: str) -> Tuple[RoomTypeDefinition, ...]:
        """Room types a theme may place, in registration order."""
        theme = self.themes.get(theme_id)
        every_type = self.room_types.all()
        if theme is None or not theme.room_types:
            return every_type
        allowed = set(theme.room_types)
        return tuple(t for t in every_type if t.type_id in allowed)
