"""
Dungeon data model.

Plain dataclasses for the generated aggregate (Dungeon -> Floor -> Room /
Corridor). Every record converts to and from a JSON-compatible dict.
"""
import random
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Tuple, Union


class SizeClass(str, Enum):
    """Dungeon size presets."""
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"
    HUGE = "huge"


GRID_SIZES: Dict[SizeClass, Tuple[int, int]] = {
    SizeClass.SMALL: (10, 10),
    SizeClass.MEDIUM: (15, 15),
    SizeClass.LARGE: (20, 20),
    SizeClass.HUGE: (30, 30),
}


def new_id(rng: random.Random) -> str:
    """UUID4-formatted identifier drawn from the given random source."""
    return str(uuid.UUID(int=rng.getrandbits(128), version=4))


class CorridorType(str, Enum):
    """Geometric classification of a corridor."""
    STRAIGHT = "straight"
    L_SHAPED = "L_shaped"
    T_SHAPED = "T_shaped"
    CROSS = "cross"


class PortalType(str, Enum):
    """Ways into and out of a floor."""
    STAIRS_DOWN = "stairs_down"
    STAIRS_UP = "stairs_up"


# =============================================================================
# ROOM CONTENTS
# =============================================================================

@dataclass
class MonsterContent:
    """A monster placed in a room."""
    entry_id: str
    name: str
    hp: int
    challenge_rating: float
    description: str = ""
    type: str = field(default="monster", init=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "entry_id": self.entry_id,
            "name": self.name,
            "hp": self.hp,
            "challenge_rating": self.challenge_rating,
            "description": self.description,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MonsterContent":
        return cls(
            entry_id=data["entry_id"],
            name=data["name"],
            hp=data["hp"],
            challenge_rating=data["challenge_rating"],
            description=data.get("description", ""),
        )


@dataclass
class TreasureItem:
    """An item inside a treasure hoard."""
    entry_id: str
    name: str
    description: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"entry_id": self.entry_id, "name": self.name, "description": self.description}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TreasureItem":
        return cls(entry_id=data["entry_id"], name=data["name"], description=data.get("description", ""))


@dataclass
class TreasureContent:
    """Coins plus a handful of items."""
    gold: int
    items: List[TreasureItem] = field(default_factory=list)
    type: str = field(default="treasure", init=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "gold": self.gold,
            "items": [i.to_dict() for i in self.items],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TreasureContent":
        return cls(
            gold=data["gold"],
            items=[TreasureItem.from_dict(i) for i in data.get("items", [])],
        )


@dataclass
class PuzzleContent:
    """An abstract puzzle scaled to the floor level."""
    difficulty: int
    description: str = "A complex mechanism blocks your path"
    type: str = field(default="puzzle", init=False)

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "difficulty": self.difficulty, "description": self.description}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PuzzleContent":
        return cls(difficulty=data["difficulty"], description=data.get("description", ""))


RoomContent = Union[MonsterContent, TreasureContent, PuzzleContent]

CONTENT_TYPES = {
    "monster": MonsterContent,
    "treasure": TreasureContent,
    "puzzle": PuzzleContent,
}


def content_from_dict(data: Dict[str, Any]) -> RoomContent:
    """Rebuild a content record from its tagged dict form."""
    return CONTENT_TYPES[data["type"]].from_dict(data)


# =============================================================================
# ROOMS AND CORRIDORS
# =============================================================================

@dataclass
class Connection:
    """Link from a room to a neighbour through a corridor."""
    target_room_id: str
    corridor_id: str

    def to_dict(self) -> Dict[str, Any]:
        return {"target_room_id": self.target_room_id, "corridor_id": self.corridor_id}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Connection":
        return cls(target_room_id=data["target_room_id"], corridor_id=data["corridor_id"])


@dataclass
class Room:
    """A placed rectangular room on a floor."""
    id: str
    room_type: str
    x: int
    y: int
    width: int
    height: int
    floor_id: str
    level: int
    contents: List[RoomContent] = field(default_factory=list)
    features: List[str] = field(default_factory=list)
    description: str = ""
    ambience: str = ""
    lighting: str = ""
    connections: List[Connection] = field(default_factory=list)

    @property
    def center(self) -> Tuple[int, int]:
        """Integer center of the room."""
        return (self.x + self.width // 2, self.y + self.height // 2)

    def contains(self, px: int, py: int) -> bool:
        """Check if a point is inside this room."""
        return (self.x <= px < self.x + self.width and
                self.y <= py < self.y + self.height)

    def cells(self) -> Iterator[Tuple[int, int]]:
        for iy in range(self.y, self.y + self.height):
            for ix in range(self.x, self.x + self.width):
                yield ix, iy

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "room_type": self.room_type,
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "floor_id": self.floor_id,
            "level": self.level,
            "contents": [c.to_dict() for c in self.contents],
            "features": list(self.features),
            "description": self.description,
            "ambience": self.ambience,
            "lighting": self.lighting,
            "connections": [c.to_dict() for c in self.connections],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Room":
        return cls(
            id=data["id"],
            room_type=data["room_type"],
            x=data["x"],
            y=data["y"],
            width=data["width"],
            height=data["height"],
            floor_id=data["floor_id"],
            level=data["level"],
            contents=[content_from_dict(c) for c in data.get("contents", [])],
            features=list(data.get("features", [])),
            description=data.get("description", ""),
            ambience=data.get("ambience", ""),
            lighting=data.get("lighting", ""),
            connections=[Connection.from_dict(c) for c in data.get("connections", [])],
        )


@dataclass
class CorridorEndpoint:
    """One end of a corridor: the room it serves and the cell it starts on."""
    room_id: str
    x: int
    y: int

    def to_dict(self) -> Dict[str, Any]:
        return {"room_id": self.room_id, "x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CorridorEndpoint":
        return cls(room_id=data["room_id"], x=data["x"], y=data["y"])


@dataclass
class Corridor:
    """A corridor connecting two rooms."""
    id: str
    corridor_type: CorridorType
    start: CorridorEndpoint
    end: CorridorEndpoint
    path: List[Tuple[int, int]]
    features: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "corridor_type": self.corridor_type.value,
            "start": self.start.to_dict(),
            "end": self.end.to_dict(),
            "path": [[x, y] for x, y in self.path],
            "features": list(self.features),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Corridor":
        return cls(
            id=data["id"],
            corridor_type=CorridorType(data["corridor_type"]),
            start=CorridorEndpoint.from_dict(data["start"]),
            end=CorridorEndpoint.from_dict(data["end"]),
            path=[(int(x), int(y)) for x, y in data["path"]],
            features=list(data.get("features", [])),
        )


# =============================================================================
# FLOORS AND DUNGEONS
# =============================================================================

@dataclass
class FloorPortal:
    """An entrance or exit of a floor."""
    portal_type: PortalType
    room_id: str
    description: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"portal_type": self.portal_type.value, "room_id": self.room_id, "description": self.description}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FloorPortal":
        return cls(
            portal_type=PortalType(data["portal_type"]),
            room_id=data["room_id"],
            description=data.get("description", ""),
        )


@dataclass
class Floor:
    """One level of a dungeon with its own room/corridor graph."""
    id: str
    floor_number: int
    level: int
    theme: str
    grid_width: int
    grid_height: int
    requested_rooms: int
    rooms: List[Room] = field(default_factory=list)
    corridors: List[Corridor] = field(default_factory=list)
    entrances: List[FloorPortal] = field(default_factory=list)
    exits: List[FloorPortal] = field(default_factory=list)
    description: str = ""

    @property
    def achieved_rooms(self) -> int:
        """Rooms actually placed; may be lower than requested."""
        return len(self.rooms)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "floor_number": self.floor_number,
            "level": self.level,
            "theme": self.theme,
            "grid_width": self.grid_width,
            "grid_height": self.grid_height,
            "requested_rooms": self.requested_rooms,
            "rooms": [r.to_dict() for r in self.rooms],
            "corridors": [c.to_dict() for c in self.corridors],
            "entrances": [e.to_dict() for e in self.entrances],
            "exits": [e.to_dict() for e in self.exits],
            "description": self.description,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Floor":
        return cls(
            id=data["id"],
            floor_number=data["floor_number"],
            level=data["level"],
            theme=data["theme"],
            grid_width=data["grid_width"],
            grid_height=data["grid_height"],
            requested_rooms=data["requested_rooms"],
            rooms=[Room.from_dict(r) for r in data.get("rooms", [])],
            corridors=[Corridor.from_dict(c) for c in data.get("corridors", [])],
            entrances=[FloorPortal.from_dict(e) for e in data.get("entrances", [])],
            exits=[FloorPortal.from_dict(e) for e in data.get("exits", [])],
            description=data.get("description", ""),
        )


@dataclass
class Dungeon:
    """A complete generated dungeon."""
    id: str
    name: str
    level: int
    theme: str
    size: SizeClass
    floors: List[Floor] = field(default_factory=list)
    created_at: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for API response."""
        return {
            "id": self.id,
            "name": self.name,
            "level": self.level,
            "theme": self.theme,
            "size": self.size.value,
            "floors": [f.to_dict() for f in self.floors],
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Dungeon":
        return cls(
            id=data["id"],
            name=data["name"],
            level=data["level"],
            theme=data["theme"],
            size=SizeClass(data["size"]),
            floors=[Floor.from_dict(f) for f in data.get("floors", [])],
            created_at=data.get("created_at", ""),
        )
