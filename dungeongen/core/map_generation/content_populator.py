"""Attaches monsters, treasure and puzzles to placed rooms."""
import random
from typing import List, Optional, Sequence

from .content import ContentRegistry
from .models import RoomContent, Room
from .room_templates import RoomTypeRegistry


class ContentPopulator:
    """
    Fills rooms through their room type's populate() capability.

    Catalog misses are not errors: a combat room with no eligible monsters
    simply stays empty.
    """

    def __init__(self, room_types: RoomTypeRegistry, registry: ContentRegistry, rng: random.Random):
        self.room_types = room_types
        self.registry = registry
        self.rng = rng

    def contents_for(self, room_type_id: str, level: int) -> List[RoomContent]:
        definition = self.room_types.get(room_type_id)
        if definition is None:
            return []
        return definition.populate(level, self.registry, self.rng)

    def populate(self, rooms: Sequence[Room], level: Optional[int] = None) -> None:
        """Assign contents to every room, at ``level`` or each room's own level."""
        for room in rooms:
            room.contents = self.contents_for(room.room_type, room.level if level is None else level)
