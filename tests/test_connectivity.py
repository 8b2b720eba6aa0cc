"""Tests for corridor construction."""
import random

import pytest

from dungeongen.core.map_generation.connectivity import ConnectivityBuilder, manhattan, walk_path
from dungeongen.core.map_generation.models import CorridorType, Room
from dungeongen.core.map_generation.room_placer import RoomPlacer
from dungeongen.core.map_generation.room_templates import BUILTIN_ROOM_TYPES
from dungeongen.core.map_generation.spatial_grid import SpatialGrid


def make_room(room_id: str, x: int, y: int, w: int = 3, h: int = 3) -> Room:
    return Room(id=room_id, room_type="rest", x=x, y=y, width=w, height=h, floor_id="f1", level=1)


def reachable(rooms, corridors):
    """Room ids reachable from the first room over corridor endpoints."""
    adjacency = {r.id: set() for r in rooms}
    for c in corridors:
        adjacency[c.start.room_id].add(c.end.room_id)
        adjacency[c.end.room_id].add(c.start.room_id)
    seen = {rooms[0].id}
    stack = [rooms[0].id]
    while stack:
        for neighbour in adjacency[stack.pop()]:
            if neighbour not in seen:
                seen.add(neighbour)
                stack.append(neighbour)
    return seen


class TestWalkPath:
    """Horizontal-then-vertical path construction."""

    def test_horizontal_then_vertical(self):
        assert walk_path((1, 1), (3, 3)) == [(1, 1), (2, 1), (3, 1), (3, 2), (3, 3)]

    def test_walks_backwards(self):
        assert walk_path((4, 5), (2, 3)) == [(4, 5), (3, 5), (2, 5), (2, 4), (2, 3)]

    def test_same_cell(self):
        assert walk_path((2, 2), (2, 2)) == [(2, 2)]

    def test_length_is_manhattan_plus_one(self):
        start, end = (0, 7), (9, 2)
        assert len(walk_path(start, end)) == manhattan(start, end) + 1


class TestConnectivityBuilder:
    """Greedy nearest-neighbour spanning tree."""

    def test_no_rooms_no_corridors(self, rng):
        assert ConnectivityBuilder(rng).connect([]) == []

    def test_single_room_no_corridors(self, rng):
        room = make_room("a", 1, 1)
        assert ConnectivityBuilder(rng).connect([room]) == []
        assert room.connections == []

    def test_joins_nearest_first(self, rng):
        """The room closest to the connected set is joined first."""
        a = make_room("a", 1, 1)     # center (2, 2)
        far = make_room("far", 20, 20)
        near = make_room("near", 6, 1)  # center (7, 2)
        corridors = ConnectivityBuilder(rng).connect([a, far, near])
        assert [(c.start.room_id, c.end.room_id) for c in corridors] == [("a", "near"), ("near", "far")]

    def test_tie_goes_to_first_in_room_order(self, rng):
        a = make_room("a", 5, 5)      # center (6, 6)
        left = make_room("left", 0, 5)   # center (1, 6), distance 5
        right = make_room("right", 10, 5)  # center (11, 6), distance 5
        corridors = ConnectivityBuilder(rng).connect([a, left, right])
        assert corridors[0].end.room_id == "left"

    def test_connections_recorded_on_both_rooms(self, rng):
        a, b = make_room("a", 1, 1), make_room("b", 6, 1)
        corridor = ConnectivityBuilder(rng).connect([a, b])[0]
        assert a.connections[0].target_room_id == "b"
        assert b.connections[0].target_room_id == "a"
        assert a.connections[0].corridor_id == corridor.id == b.connections[0].corridor_id

    def test_path_runs_between_centers(self, rng):
        a, b = make_room("a", 1, 1), make_room("b", 8, 6)
        corridor = ConnectivityBuilder(rng).connect([a, b])[0]
        assert corridor.path[0] == a.center == (corridor.start.x, corridor.start.y)
        assert corridor.path[-1] == b.center == (corridor.end.x, corridor.end.y)

    def test_axis_aligned_is_straight(self, rng):
        a, b = make_room("a", 1, 1), make_room("b", 8, 1)
        assert ConnectivityBuilder(rng).connect([a, b])[0].corridor_type == CorridorType.STRAIGHT

    def test_bent_corridor_labels(self):
        """Non-aligned corridors are labelled L, T or cross, never straight."""
        seen = set()
        for seed in range(40):
            a, b = make_room("a", 1, 1), make_room("b", 8, 6)
            seen.add(ConnectivityBuilder(random.Random(seed)).connect([a, b])[0].corridor_type)
        assert CorridorType.STRAIGHT not in seen
        assert seen == {CorridorType.L_SHAPED, CorridorType.T_SHAPED, CorridorType.CROSS}

    def test_corridor_features_from_pool(self, rng):
        rooms = [make_room(str(i), 1 + 5 * i, 1) for i in range(5)]
        corridors = ConnectivityBuilder(rng, corridor_features=("torches", "bones"), feature_chance=1.0).connect(rooms)
        assert all(c.features == ["torches", "bones"] for c in corridors)

    @pytest.mark.parametrize("seed", [1, 2, 3, 4, 5])
    def test_spanning_tree_over_placed_rooms(self, seed):
        """n rooms get n - 1 corridors and every room is reachable."""
        rng = random.Random(seed)
        rooms = RoomPlacer(BUILTIN_ROOM_TYPES, rng).place(SpatialGrid(30, 30), 15, "f", 1).rooms
        corridors = ConnectivityBuilder(rng).connect(rooms)
        assert len(corridors) == len(rooms) - 1
        assert reachable(rooms, corridors) == {r.id for r in rooms}

    def test_endpoints_lie_inside_their_rooms(self, rng):
        rooms = RoomPlacer(BUILTIN_ROOM_TYPES, rng).place(SpatialGrid(30, 30), 12, "f", 1).rooms
        by_id = {r.id: r for r in rooms}
        for corridor in ConnectivityBuilder(rng).connect(rooms):
            assert by_id[corridor.start.room_id].contains(corridor.start.x, corridor.start.y)
            assert by_id[corridor.end.room_id].contains(corridor.end.x, corridor.end.y)
            assert not by_id[corridor.start.room_id].contains(corridor.end.x, corridor.end.y)
