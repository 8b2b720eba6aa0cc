"""
Dungeon Generator - Test Configuration and Fixtures
Shared test utilities and fixtures for pytest.
"""
import random
from typing import Any, Dict, List

import pytest

from dungeongen.core.map_generation.content import ContentCategory, ContentRegistry
from dungeongen.core.map_generation.room_templates import GeneratorConfig


# ==================== Random Source Fixtures ====================

@pytest.fixture
def rng() -> random.Random:
    """Seeded random source so every test run draws the same numbers."""
    return random.Random(1234)


# ==================== Catalog Fixtures ====================

@pytest.fixture
def sample_monsters() -> List[Dict[str, Any]]:
    """A small monster catalog spanning several challenge ratings."""
    return [
        {"id": "goblin", "name": "Goblin", "cr": 0.25, "hp": "2d6", "description": "Small and cunning"},
        {"id": "orc", "name": "Orc", "cr": 0.5, "hp": 15, "description": "A savage warrior"},
        {"id": "ogre", "name": "Ogre", "cr": 2, "hp": "7d10+21", "description": "A hulking giant"},
        {"id": "troll", "name": "Troll", "cr": 5, "hp": "8d10+40", "description": "It regenerates"},
    ]


@pytest.fixture
def sample_items() -> List[Dict[str, Any]]:
    """Items of increasing rarity."""
    return [
        {"id": "potion", "name": "Potion of Healing", "rarity": "common"},
        {"id": "cloak", "name": "Cloak of Protection", "rarity": "uncommon"},
        {"id": "flame_tongue", "name": "Flame Tongue", "rarity": "rare"},
    ]


@pytest.fixture
def sample_spells() -> List[Dict[str, Any]]:
    return [
        {"id": "fire_bolt", "name": "Fire Bolt", "level": 0, "school": "evocation"},
        {"id": "fireball", "name": "Fireball", "level": 3, "school": "evocation"},
    ]


@pytest.fixture
def content_registry(sample_monsters, sample_items, sample_spells) -> ContentRegistry:
    """Registry populated with the sample catalog."""
    registry = ContentRegistry()
    registry.register_many(ContentCategory.MONSTERS, sample_monsters)
    registry.register_many(ContentCategory.ITEMS, sample_items)
    registry.register_many(ContentCategory.SPELLS, sample_spells)
    return registry


@pytest.fixture
def empty_registry() -> ContentRegistry:
    """Registry with no entries at all."""
    return ContentRegistry()


# ==================== Generator Fixtures ====================

@pytest.fixture
def generator_config(content_registry) -> GeneratorConfig:
    """Built-in room types and themes backed by the sample catalog."""
    return GeneratorConfig.default(content_registry)


@pytest.fixture
def empty_config(empty_registry) -> GeneratorConfig:
    """Built-in room types and themes with no catalog content."""
    return GeneratorConfig.default(empty_registry)
