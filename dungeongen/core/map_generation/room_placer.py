"""
Room Placement for Dungeon Floors.

Picks room types by weighted draw, samples their size and tries random
positions on the floor's SpatialGrid until one fits. A room that finds no
position within the attempt budget is dropped, so a floor may hold fewer
rooms than requested.
"""
import logging
import random
from dataclasses import dataclass, field
from typing import List, Sequence

from dungeongen.core.errors import GenerationError
from .models import Room, new_id
from .room_templates import RoomTypeDefinition
from .spatial_grid import SpatialGrid

logger = logging.getLogger("dungeongen.map_generation")


@dataclass
class PlacementResult:
    """Rooms placed on one floor, with the requested count kept alongside."""
    rooms: List[Room] = field(default_factory=list)
    requested: int = 0
    dropped: int = 0

    @property
    def achieved(self) -> int:
        return len(self.rooms)


def choose_room_type(types: Sequence[RoomTypeDefinition], rng: random.Random) -> RoomTypeDefinition:
    """
    Roulette-wheel selection by weight.

    Returns the first type whose cumulative weight exceeds a uniform draw
    in [0, total).
    """
    if not types:
        raise GenerationError("No room types are registered")

    total = sum(t.weight for t in types)
    draw = rng.random() * total
    cumulative = 0.0
    for room_type in types:
        cumulative += room_type.weight
        if draw < cumulative:
            return room_type
    return types[-1]


class RoomPlacer:
    """Places non-overlapping rooms on a single floor grid."""

    def __init__(
        self,
        room_types: Sequence[RoomTypeDefinition],
        rng: random.Random,
        placement_attempts: int = 100,
        feature_chance: float = 0.5
    ):
        self.room_types = tuple(room_types)
        self.rng = rng
        self.placement_attempts = placement_attempts
        self.feature_chance = feature_chance

    def place(self, grid: SpatialGrid, count: int, floor_id: str, level: int) -> PlacementResult:
        """
        Place up to ``count`` rooms on ``grid``.

        Args:
            grid: Fresh occupancy grid owned by this floor
            count: Requested number of rooms
            floor_id: Id of the floor the rooms belong to
            level: Difficulty level of the floor

        Returns:
            PlacementResult with the rooms in placement order
        """
        result = PlacementResult(requested=count)

        for _ in range(count):
            room_type = choose_room_type(self.room_types, self.rng)
            width, height = room_type.sample_size(self.rng)

            position = self._find_position(grid, width, height)
            if position is None:
                result.dropped += 1
                logger.debug(
                    f"Dropped {room_type.type_id} room ({width}x{height}) on floor {floor_id}: "
                    f"no position after {self.placement_attempts} attempts"
                )
                continue

            x, y = position
            room = self._build_room(room_type, x, y, width, height, floor_id, level)
            grid.mark(room)
            result.rooms.append(room)

        return result

    def _find_position(self, grid: SpatialGrid, width: int, height: int):
        max_x = max(1, grid.width - width - 2)
        max_y = max(1, grid.height - height - 2)
        for _ in range(self.placement_attempts):
            x = self.rng.randint(1, max_x)
            y = self.rng.randint(1, max_y)
            if grid.can_place(x, y, width, height):
                return x, y
        return None

    def _build_room(
        self,
        room_type: RoomTypeDefinition,
        x: int,
        y: int,
        width: int,
        height: int,
        floor_id: str,
        level: int
    ) -> Room:
        features = room_type.sample_features(self.rng, self.feature_chance)
        decoration = room_type.decorate(features)
        return Room(
            id=new_id(self.rng),
            room_type=room_type.type_id,
            x=x,
            y=y,
            width=width,
            height=height,
            floor_id=floor_id,
            level=level,
            features=features,
            description=room_type.describe(self.rng),
            ambience=decoration["ambience"],
            lighting=decoration["lighting"],
        )
