"""Tests for dungeon export and import."""
import json

import pytest

from dungeongen.core.errors import ErrorCode, InvalidDungeonDataError
from dungeongen.core.map_generation import DungeonGenerator, GenerationOptions, export_dungeon, import_dungeon
from dungeongen.core.map_generation.models import MonsterContent, PuzzleContent, TreasureContent


@pytest.fixture
def dungeon(generator_config):
    return DungeonGenerator(generator_config, seed=17).generate(
        GenerationOptions(name="Sunken Halls", level=2, floors=3, rooms_per_floor=12, size="large")
    )


@pytest.fixture
def exported(dungeon) -> dict:
    return json.loads(export_dungeon(dungeon))


class TestRoundTrip:
    """Export followed by import reproduces the dungeon."""

    def test_import_export_is_identity(self, dungeon):
        assert import_dungeon(export_dungeon(dungeon)) == dungeon

    def test_accepts_bytes_and_dict(self, dungeon):
        text = export_dungeon(dungeon)
        assert import_dungeon(text.encode("utf-8")) == dungeon
        assert import_dungeon(json.loads(text)) == dungeon

    def test_generator_delegates(self, generator_config, dungeon):
        generator = DungeonGenerator(generator_config)
        assert generator.import_(generator.export(dungeon)) == dungeon

    def test_content_variants_restored(self, dungeon):
        restored = import_dungeon(export_dungeon(dungeon))
        kinds = {type(c) for f in restored.floors for r in f.rooms for c in r.contents}
        assert kinds <= {MonsterContent, TreasureContent, PuzzleContent}
        assert kinds

    def test_export_is_readable_json(self, exported):
        assert exported["name"] == "Sunken Halls"
        assert exported["size"] == "large"
        corridor = next(c for f in exported["floors"] for c in f["corridors"])
        assert all(len(cell) == 2 for cell in corridor["path"])


class TestMalformedImport:
    """Import never returns a partial dungeon."""

    def expect_invalid(self, data):
        with pytest.raises(InvalidDungeonDataError) as exc_info:
            import_dungeon(data)
        assert exc_info.value.code == ErrorCode.INVALID_DUNGEON_DATA
        assert exc_info.value.errors
        return exc_info.value

    def test_not_json(self):
        self.expect_invalid("{definitely not json")

    def test_not_an_object(self):
        self.expect_invalid("[1, 2, 3]")

    def test_missing_field(self, exported):
        del exported["floors"][0]["rooms"][0]["width"]
        error = self.expect_invalid(exported)
        assert any("width" in e["field"] for e in error.errors)

    def test_unknown_field(self, exported):
        exported["floors"][0]["secret"] = True
        self.expect_invalid(exported)

    def test_wrong_type_not_coerced(self, exported):
        exported["floors"][0]["rooms"][0]["x"] = "3"
        self.expect_invalid(exported)

    def test_unknown_content_type(self, exported):
        exported["floors"][0]["rooms"][0]["contents"] = [{"type": "dragon_hoard", "gold": 5}]
        self.expect_invalid(exported)

    def test_unknown_size(self, exported):
        exported["size"] = "gigantic"
        self.expect_invalid(exported)

    def test_dangling_connection(self, exported):
        room = exported["floors"][0]["rooms"][0]
        room["connections"] = [{"target_room_id": "nowhere", "corridor_id": "none"}]
        error = self.expect_invalid(exported)
        assert any("connections" in e["field"] for e in error.errors)

    def test_cross_floor_reference(self, exported):
        other_room = exported["floors"][1]["rooms"][0]["id"]
        exported["floors"][0]["exits"][0]["room_id"] = other_room
        self.expect_invalid(exported)

    def test_duplicate_ids(self, exported):
        exported["floors"][1]["id"] = exported["floors"][0]["id"]
        for room in exported["floors"][1]["rooms"]:
            room["floor_id"] = exported["floors"][0]["id"]
        error = self.expect_invalid(exported)
        assert any("Duplicate" in e["message"] for e in error.errors)

    def test_room_outside_grid(self, exported):
        floor = exported["floors"][0]
        floor["rooms"][0]["x"] = floor["grid_width"]
        self.expect_invalid(exported)

    def test_path_cell_outside_grid(self, exported):
        floor = exported["floors"][0]
        floor["corridors"][0]["path"].append([floor["grid_width"], 0])
        self.expect_invalid(exported)

    def test_floor_without_rooms(self, exported):
        exported["floors"][0]["rooms"] = []
        self.expect_invalid(exported)

    def test_corridor_endpoint_outside_grid(self, exported):
        corridor = next(c for f in exported["floors"] for c in f["corridors"])
        corridor["start"]["x"] = 9999
        error = self.expect_invalid(exported)
        assert any("start" in e["field"] for e in error.errors)

    def test_corridor_endpoint_off_its_path(self, exported):
        floor = exported["floors"][0]
        corridor = floor["corridors"][0]
        x, y = corridor["path"][-1]
        corridor["end"]["x"] = (x + 1) % floor["grid_width"]
        error = self.expect_invalid(exported)
        assert any("does not match its path" in e["message"] for e in error.errors)

    def test_deeply_nested_text(self):
        self.expect_invalid("[" * 100000 + "]" * 100000)

    def test_deeply_nested_mapping(self, exported):
        nested = []
        for _ in range(100000):
            nested = [nested]
        exported["floors"][0]["description"] = nested
        self.expect_invalid(exported)
