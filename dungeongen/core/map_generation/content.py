"""
Content Registry for Dungeon Population.

Read-mostly catalog of monsters, items and spells consumed by the
content populator. Entries are validated when they are registered, so the
generator never has to guess at the shape of a record.
"""
import json
import logging
import threading
from abc import abstractmethod
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Type, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from dungeongen.core.dice import parse_dice_notation
from dungeongen.core.errors import ContentValidationError, format_validation_errors

logger = logging.getLogger("dungeongen.content")


class ContentCategory(str, Enum):
    """Catalog categories known to the registry."""
    MONSTERS = "monsters"
    ITEMS = "items"
    SPELLS = "spells"


class ItemRarity(str, Enum):
    """Item rarity tiers, ordered from most to least common."""
    COMMON = "common"
    UNCOMMON = "uncommon"
    RARE = "rare"
    VERY_RARE = "very_rare"
    LEGENDARY = "legendary"
    ARTIFACT = "artifact"


RARITY_TIERS: Dict[ItemRarity, int] = {
    rarity: tier for tier, rarity in enumerate(ItemRarity)
}


class CatalogEntry(BaseModel):
    """Fields shared by every catalog entry. Only the per-category subclasses are instantiated."""
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    description: str = ""

    @property
    @abstractmethod
    def difficulty_rating(self) -> float:
        """Rating compared against a floor level when filtering."""


class MonsterEntry(CatalogEntry):
    """A monster stat block summary."""
    cr: float = Field(ge=0, description="Challenge rating")
    hp: Union[int, str] = Field(description="Hit points or hit dice notation")
    ac: int = Field(default=10, ge=0)

    @field_validator("hp")
    @classmethod
    def _check_hp(cls, value: Union[int, str]) -> Union[int, str]:
        if isinstance(value, str):
            parse_dice_notation(value)
        elif value < 1:
            raise ValueError("hp must be at least 1")
        return value

    @property
    def difficulty_rating(self) -> float:
        return self.cr


class ItemEntry(CatalogEntry):
    """A piece of equipment or loot."""
    type: str = "gear"
    rarity: ItemRarity = ItemRarity.COMMON

    @property
    def difficulty_rating(self) -> float:
        return RARITY_TIERS[self.rarity]


class SpellEntry(CatalogEntry):
    """A spell, rated by spell level."""
    level: int = Field(ge=0, le=9)
    school: str = ""

    @property
    def difficulty_rating(self) -> float:
        return self.level


ENTRY_MODELS: Dict[ContentCategory, Type[CatalogEntry]] = {
    ContentCategory.MONSTERS: MonsterEntry,
    ContentCategory.ITEMS: ItemEntry,
    ContentCategory.SPELLS: SpellEntry,
}


class ContentRegistry:
    """
    Catalog of content entries keyed by category and id.

    Registration takes a coarse lock; reads return snapshots so a
    generation pass never observes a half-applied registration.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._entries: Dict[ContentCategory, Dict[str, CatalogEntry]] = {
            category: {} for category in ContentCategory
        }
        self._sources: Dict[ContentCategory, Dict[str, str]] = {
            category: {} for category in ContentCategory
        }

    @staticmethod
    def _category(category: Union[str, ContentCategory]) -> ContentCategory:
        try:
            return ContentCategory(category)
        except ValueError:
            raise ContentValidationError(str(category), f"Unknown content category: {category}")

    @staticmethod
    def _validate(cat: ContentCategory, data: Union[dict, CatalogEntry]) -> CatalogEntry:
        model = ENTRY_MODELS[cat]
        if isinstance(data, model):
            return data
        if isinstance(data, BaseModel):
            data = data.model_dump()
        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise ContentValidationError(
                cat.value,
                f"Invalid {cat.value} entry",
                errors=format_validation_errors(e),
            )

    def register(
        self,
        category: Union[str, ContentCategory],
        data: Union[dict, CatalogEntry],
        source: str = "core"
    ) -> CatalogEntry:
        """
        Validate and register a single entry.

        Args:
            category: Catalog category ("monsters", "items", "spells")
            data: Raw mapping or an already built entry
            source: Mod id the entry came from

        Returns:
            The registered entry

        Raises:
            ContentValidationError: If the entry is missing required fields
        """
        cat = self._category(category)
        entry = self._validate(cat, data)
        with self._lock:
            self._entries[cat][entry.id] = entry
            self._sources[cat][entry.id] = source
        return entry

    def register_many(
        self,
        category: Union[str, ContentCategory],
        items: Sequence[dict],
        source: str = "core"
    ) -> int:
        """Register a batch of entries; nothing is registered if any entry is invalid."""
        cat = self._category(category)
        entries = [self._validate(cat, item) for item in items]
        with self._lock:
            for entry in entries:
                self._entries[cat][entry.id] = entry
                self._sources[cat][entry.id] = source
        return len(entries)

    def load_from_directory(self, directory: Union[str, Path], source: str = "core") -> int:
        """
        Load catalog files laid out as ``<directory>/<category>/*.json``.

        Each file holds one entry or a list of entries. A file that fails to
        parse or validate is skipped and logged; the rest still load.

        Returns:
            Number of entries loaded
        """
        root = Path(directory)
        if not root.is_dir():
            logger.warning(f"Content directory does not exist: {root}")
            return 0

        loaded = 0
        for category in ContentCategory:
            category_dir = root / category.value
            if not category_dir.is_dir():
                continue
            for filepath in sorted(category_dir.glob("*.json")):
                try:
                    with open(filepath, "r", encoding="utf-8") as f:
                        payload = json.load(f)
                    items = payload if isinstance(payload, list) else [payload]
                    loaded += self.register_many(category, items, source)
                except (json.JSONDecodeError, OSError) as e:
                    logger.warning(f"Failed to read {filepath}: {e}")
                except ContentValidationError as e:
                    logger.warning(f"Rejected {filepath}: {e.message} {e.details.get('errors')}")

        logger.info(f"Loaded {loaded} content entries from {root} (source={source})")
        return loaded

    def get(self, category: Union[str, ContentCategory], entry_id: str) -> Optional[CatalogEntry]:
        """Look up a single entry."""
        return self._entries[self._category(category)].get(entry_id)

    def list_by_category(self, category: Union[str, ContentCategory]) -> List[CatalogEntry]:
        """Return every entry of a category in registration order."""
        cat = self._category(category)
        with self._lock:
            return list(self._entries[cat].values())

    @staticmethod
    def filter_by_max_difficulty(entries: Sequence[CatalogEntry], level: float) -> List[CatalogEntry]:
        """Keep entries whose difficulty rating does not exceed ``level``."""
        return [e for e in entries if e.difficulty_rating <= level]

    def search(self, category: Union[str, ContentCategory], query: str) -> List[CatalogEntry]:
        """Case-insensitive match against name and description."""
        needle = query.lower()
        return [
            e for e in self.list_by_category(category)
            if needle in e.name.lower() or needle in e.description.lower()
        ]

    def remove_source(self, source: str) -> int:
        """Drop every entry registered by ``source``; returns how many were removed."""
        removed = 0
        with self._lock:
            for category in ContentCategory:
                doomed = [i for i, s in self._sources[category].items() if s == source]
                for entry_id in doomed:
                    del self._entries[category][entry_id]
                    del self._sources[category][entry_id]
                removed += len(doomed)
        return removed

    def stats(self) -> Dict[str, int]:
        """Entry count per category."""
        with self._lock:
            return {category.value: len(entries) for category, entries in self._entries.items()}
