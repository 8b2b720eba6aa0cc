"""
Corridor construction between placed rooms.

Greedy nearest-neighbour spanning construction: starting from the first
room, repeatedly join the closest (connected, unconnected) pair by
Manhattan distance between room centers. The full pairwise scan is redone
every step; with at most a few dozen rooms per floor that is cheap enough.
Ties go to the first pair encountered in room order, so the topology
depends on placement order.
"""
import random
from typing import List, Sequence, Tuple

from .models import Connection, Corridor, CorridorEndpoint, CorridorType, Room, new_id
from .room_templates import DEFAULT_CORRIDOR_FEATURES


def manhattan(a: Tuple[int, int], b: Tuple[int, int]) -> int:
    return abs(a[0] - b[0]) + abs(a[1] - b[1])


def walk_path(start: Tuple[int, int], end: Tuple[int, int]) -> List[Tuple[int, int]]:
    """Cells from start to end, all horizontal steps first, then vertical. Both ends included."""
    x, y = start
    path = [(x, y)]
    step_x = 1 if end[0] > x else -1
    while x != end[0]:
        x += step_x
        path.append((x, y))
    step_y = 1 if end[1] > y else -1
    while y != end[1]:
        y += step_y
        path.append((x, y))
    return path


class ConnectivityBuilder:
    """Joins every room on a floor into a single spanning tree of corridors."""

    def __init__(
        self,
        rng: random.Random,
        corridor_features: Sequence[str] = DEFAULT_CORRIDOR_FEATURES,
        feature_chance: float = 0.3
    ):
        self.rng = rng
        self.corridor_features = tuple(corridor_features)
        self.feature_chance = feature_chance

    def connect(self, rooms: Sequence[Room]) -> List[Corridor]:
        """
        Build n - 1 corridors for n rooms and record the connections on both rooms.

        Zero or one room yields no corridors.
        """
        if len(rooms) < 2:
            return []

        connected = [rooms[0]]
        unconnected = list(rooms[1:])
        corridors: List[Corridor] = []

        while unconnected:
            best = None
            best_distance = None
            for source in connected:
                for target in unconnected:
                    distance = manhattan(source.center, target.center)
                    if best_distance is None or distance < best_distance:
                        best = (source, target)
                        best_distance = distance

            source, target = best
            corridor = self._create_corridor(source, target)
            corridors.append(corridor)

            source.connections.append(Connection(target_room_id=target.id, corridor_id=corridor.id))
            target.connections.append(Connection(target_room_id=source.id, corridor_id=corridor.id))

            connected.append(target)
            unconnected.remove(target)

        return corridors

    def _create_corridor(self, room_a: Room, room_b: Room) -> Corridor:
        start = room_a.center
        end = room_b.center
        return Corridor(
            id=new_id(self.rng),
            corridor_type=self._classify(start, end),
            start=CorridorEndpoint(room_id=room_a.id, x=start[0], y=start[1]),
            end=CorridorEndpoint(room_id=room_b.id, x=end[0], y=end[1]),
            path=walk_path(start, end),
            features=[f for f in self.corridor_features if self.rng.random() < self.feature_chance],
        )

    def _classify(self, start: Tuple[int, int], end: Tuple[int, int]) -> CorridorType:
        # T and cross are relabels of the same L path
        if start[0] == end[0] or start[1] == end[1]:
            return CorridorType.STRAIGHT
        if self.rng.random() < 0.3:
            return CorridorType.CROSS
        return CorridorType.L_SHAPED if self.rng.random() < 0.5 else CorridorType.T_SHAPED
