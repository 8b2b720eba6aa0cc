"""Tests for the content catalog."""
import json
import logging

import pytest

from dungeongen.config import DEFAULT_CONTENT_DIR
from dungeongen.core.errors import ContentValidationError, ErrorCode
from dungeongen.core.map_generation.content import (
    CatalogEntry,
    ContentCategory,
    ContentRegistry,
    ItemEntry,
    MonsterEntry,
)


class TestRegistration:
    """Entries are validated when registered."""

    def test_register_returns_typed_entry(self, empty_registry):
        entry = empty_registry.register("monsters", {"id": "goblin", "name": "Goblin", "cr": 0.25, "hp": "2d6"})
        assert isinstance(entry, MonsterEntry)
        assert empty_registry.get(ContentCategory.MONSTERS, "goblin") is entry

    def test_missing_field_rejected(self, empty_registry):
        """A monster without a challenge rating is refused."""
        with pytest.raises(ContentValidationError) as exc_info:
            empty_registry.register("monsters", {"id": "blob", "name": "Blob", "hp": 10})
        assert exc_info.value.code == ErrorCode.INVALID_CONTENT
        assert any(e["field"] == "cr" for e in exc_info.value.details["errors"])

    def test_bad_hit_dice_rejected(self, empty_registry):
        with pytest.raises(ContentValidationError):
            empty_registry.register("monsters", {"id": "x", "name": "X", "cr": 1, "hp": "lots"})

    def test_unknown_category_rejected(self, empty_registry):
        with pytest.raises(ContentValidationError):
            empty_registry.register("vehicles", {"id": "cart", "name": "Cart"})

    def test_register_many_is_all_or_nothing(self, empty_registry):
        batch = [
            {"id": "potion", "name": "Potion"},
            {"id": "broken", "name": "Broken", "rarity": "mythic"},
        ]
        with pytest.raises(ContentValidationError):
            empty_registry.register_many("items", batch)
        assert empty_registry.list_by_category("items") == []

    def test_extra_fields_ignored(self, empty_registry):
        entry = empty_registry.register("items", {"id": "rope", "name": "Rope", "weight": 10})
        assert isinstance(entry, ItemEntry)
        assert not hasattr(entry, "weight")


class TestQueries:
    """Read operations."""

    def test_list_by_category_in_registration_order(self, content_registry):
        ids = [m.id for m in content_registry.list_by_category("monsters")]
        assert ids == ["goblin", "orc", "ogre", "troll"]

    def test_list_is_a_snapshot(self, content_registry):
        monsters = content_registry.list_by_category("monsters")
        monsters.clear()
        assert len(content_registry.list_by_category("monsters")) == 4

    def test_filter_by_max_difficulty(self, content_registry):
        monsters = content_registry.list_by_category("monsters")
        assert [m.id for m in ContentRegistry.filter_by_max_difficulty(monsters, 2)] == ["goblin", "orc", "ogre"]
        assert ContentRegistry.filter_by_max_difficulty(monsters, 0) == []

    def test_item_rating_is_rarity_tier(self, content_registry):
        items = content_registry.list_by_category("items")
        assert [i.id for i in ContentRegistry.filter_by_max_difficulty(items, 1)] == ["potion", "cloak"]

    def test_spell_rating_is_level(self, content_registry):
        spells = content_registry.list_by_category("spells")
        assert [s.id for s in ContentRegistry.filter_by_max_difficulty(spells, 1)] == ["fire_bolt"]

    def test_base_entry_is_abstract(self):
        """Every category must say how its entries are rated."""
        with pytest.raises(TypeError):
            CatalogEntry(id="blank", name="Blank")

    def test_search(self, content_registry):
        assert [m.id for m in content_registry.search("monsters", "giant")] == ["ogre"]
        assert [m.id for m in content_registry.search("monsters", "GOB")] == ["goblin"]

    def test_stats(self, content_registry):
        assert content_registry.stats() == {"monsters": 4, "items": 3, "spells": 2}

    def test_missing_entry_returns_none(self, content_registry):
        assert content_registry.get("monsters", "beholder") is None


class TestSources:
    """Entries remember which mod registered them."""

    def test_remove_source(self, content_registry):
        content_registry.register("monsters", {"id": "mimic", "name": "Mimic", "cr": 2, "hp": 58}, source="chests")
        assert content_registry.remove_source("chests") == 1
        assert content_registry.get("monsters", "mimic") is None
        assert len(content_registry.list_by_category("monsters")) == 4


class TestLoadFromDirectory:
    """Catalog files on disk."""

    def test_bundled_catalog_loads(self):
        registry = ContentRegistry()
        loaded = registry.load_from_directory(DEFAULT_CONTENT_DIR)
        stats = registry.stats()
        assert loaded == sum(stats.values())
        assert all(count > 0 for count in stats.values())

    def test_bad_file_skipped(self, tmp_path, caplog):
        (tmp_path / "monsters").mkdir()
        (tmp_path / "monsters" / "good.json").write_text(json.dumps(
            [{"id": "rat", "name": "Rat", "cr": 0, "hp": 1}]
        ))
        (tmp_path / "monsters" / "bad.json").write_text(json.dumps({"id": "nope"}))
        (tmp_path / "monsters" / "broken.json").write_text("{not json")

        registry = ContentRegistry()
        with caplog.at_level(logging.WARNING, logger="dungeongen.content"):
            loaded = registry.load_from_directory(tmp_path, source="test-mod")

        assert loaded == 1
        assert registry.get("monsters", "rat") is not None
        assert "bad.json" in caplog.text
        assert "broken.json" in caplog.text
        assert registry.remove_source("test-mod") == 1

    def test_missing_directory_loads_nothing(self, tmp_path):
        assert ContentRegistry().load_from_directory(tmp_path / "absent") == 0
