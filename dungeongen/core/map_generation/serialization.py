"""
Dungeon export and import.

Export writes the whole aggregate as indented JSON. Import parses the
text, validates its structure with pydantic schemas and then checks the
references between records, so a caller either gets a complete Dungeon or
an InvalidDungeonDataError listing what is wrong.
"""
import json
from typing import Annotated, Any, Dict, List, Literal, Set, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from dungeongen.core.errors import InvalidDungeonDataError, format_validation_errors
from .models import CorridorType, Dungeon, PortalType, SizeClass


class _Schema(BaseModel):
    model_config = ConfigDict(extra="forbid", strict=True)


class MonsterContentSchema(_Schema):
    type: Literal["monster"]
    entry_id: str
    name: str
    hp: int
    challenge_rating: Union[int, float]
    description: str = ""


class TreasureItemSchema(_Schema):
    entry_id: str
    name: str
    description: str = ""


class TreasureContentSchema(_Schema):
    type: Literal["treasure"]
    gold: int = Field(ge=0)
    items: List[TreasureItemSchema] = Field(default_factory=list)


class PuzzleContentSchema(_Schema):
    type: Literal["puzzle"]
    difficulty: int = Field(ge=1)
    description: str = ""


ContentSchema = Annotated[
    Union[MonsterContentSchema, TreasureContentSchema, PuzzleContentSchema],
    Field(discriminator="type"),
]


class ConnectionSchema(_Schema):
    target_room_id: str
    corridor_id: str


class RoomSchema(_Schema):
    id: str = Field(min_length=1)
    room_type: str = Field(min_length=1)
    x: int = Field(ge=0)
    y: int = Field(ge=0)
    width: int = Field(ge=1)
    height: int = Field(ge=1)
    floor_id: str
    level: int = Field(ge=1)
    contents: List[ContentSchema] = Field(default_factory=list)
    features: List[str] = Field(default_factory=list)
    description: str = ""
    ambience: str = ""
    lighting: str = ""
    connections: List[ConnectionSchema] = Field(default_factory=list)


class EndpointSchema(_Schema):
    room_id: str
    x: int
    y: int


class CorridorSchema(_Schema):
    id: str = Field(min_length=1)
    corridor_type: CorridorType
    start: EndpointSchema
    end: EndpointSchema
    path: List[List[int]] = Field(min_length=1)
    features: List[str] = Field(default_factory=list)


class PortalSchema(_Schema):
    portal_type: PortalType
    room_id: str
    description: str = ""


class FloorSchema(_Schema):
    id: str = Field(min_length=1)
    floor_number: int = Field(ge=1)
    level: int = Field(ge=1)
    theme: str
    grid_width: int = Field(ge=1)
    grid_height: int = Field(ge=1)
    requested_rooms: int = Field(ge=1)
    rooms: List[RoomSchema] = Field(min_length=1)
    corridors: List[CorridorSchema] = Field(default_factory=list)
    entrances: List[PortalSchema] = Field(min_length=1)
    exits: List[PortalSchema] = Field(min_length=1)
    description: str = ""


class DungeonSchema(_Schema):
    id: str = Field(min_length=1)
    name: str
    level: int = Field(ge=1)
    theme: str
    size: SizeClass
    floors: List[FloorSchema] = Field(min_length=1)
    created_at: str = ""


def export_dungeon(dungeon: Dungeon) -> str:
    """Serialize a dungeon to indented JSON text."""
    return json.dumps(dungeon.to_dict(), indent=2, ensure_ascii=False)


def _check_references(data: DungeonSchema) -> List[Dict[str, Any]]:
    """Cross-record checks the schemas cannot express."""
    errors: List[Dict[str, Any]] = []
    seen: Set[str] = set()

    def fail(field: str, message: str):
        errors.append({"field": field, "message": message, "type": "reference_error"})

    def claim(field: str, identifier: str):
        if identifier in seen:
            fail(field, f"Duplicate id '{identifier}'")
        seen.add(identifier)

    claim("id", data.id)
    for fi, floor in enumerate(data.floors):
        base = f"floors -> {fi}"
        claim(f"{base} -> id", floor.id)
        room_ids = {room.id for room in floor.rooms}
        corridor_ids = {corridor.id for corridor in floor.corridors}

        for ri, room in enumerate(floor.rooms):
            where = f"{base} -> rooms -> {ri}"
            claim(f"{where} -> id", room.id)
            if room.floor_id != floor.id:
                fail(f"{where} -> floor_id", "Room belongs to a different floor")
            if room.x + room.width > floor.grid_width or room.y + room.height > floor.grid_height:
                fail(where, "Room extends outside the floor grid")
            for ci, connection in enumerate(room.connections):
                if connection.target_room_id not in room_ids:
                    fail(f"{where} -> connections -> {ci}", "Connection targets a room not on this floor")
                if connection.corridor_id not in corridor_ids:
                    fail(f"{where} -> connections -> {ci}", "Connection references an unknown corridor")

        for ci, corridor in enumerate(floor.corridors):
            where = f"{base} -> corridors -> {ci}"
            claim(f"{where} -> id", corridor.id)
            for end_name, endpoint, cell in (("start", corridor.start, corridor.path[0]),
                                             ("end", corridor.end, corridor.path[-1])):
                if endpoint.room_id not in room_ids:
                    fail(f"{where} -> {end_name}", "Corridor endpoint references a room not on this floor")
                if not (0 <= endpoint.x < floor.grid_width and 0 <= endpoint.y < floor.grid_height):
                    fail(f"{where} -> {end_name}", "Corridor endpoint lies outside the floor grid")
                elif cell != [endpoint.x, endpoint.y]:
                    fail(f"{where} -> {end_name}", "Corridor endpoint does not match its path")
            for pi, cell in enumerate(corridor.path):
                if len(cell) != 2:
                    fail(f"{where} -> path -> {pi}", "Path cells must be [x, y] pairs")
                elif not (0 <= cell[0] < floor.grid_width and 0 <= cell[1] < floor.grid_height):
                    fail(f"{where} -> path -> {pi}", "Path cell lies outside the floor grid")

        for kind, portals in (("entrances", floor.entrances), ("exits", floor.exits)):
            for pi, portal in enumerate(portals):
                if portal.room_id not in room_ids:
                    fail(f"{base} -> {kind} -> {pi}", "Portal references a room not on this floor")

    return errors


def import_dungeon(data: Union[str, bytes, Dict[str, Any]]) -> Dungeon:
    """
    Parse and validate exported dungeon data.

    Args:
        data: Export text, its UTF-8 bytes, or the already decoded mapping

    Returns:
        The reconstructed Dungeon

    Raises:
        InvalidDungeonDataError: If the data is not valid JSON, does not match
            the dungeon structure, or references records that do not exist
    """
    if isinstance(data, (str, bytes)):
        try:
            data = json.loads(data)
        except (json.JSONDecodeError, UnicodeDecodeError, RecursionError) as e:
            raise InvalidDungeonDataError(
                "Dungeon data is not valid JSON",
                [{"field": "", "message": str(e), "type": "json_invalid"}],
            )
    if not isinstance(data, dict):
        raise InvalidDungeonDataError(
            "Dungeon data must be a JSON object",
            [{"field": "", "message": f"Got {type(data).__name__}", "type": "type_error"}],
        )

    try:
        # JSON has no tuples or enums, so validate in JSON mode
        schema = DungeonSchema.model_validate_json(json.dumps(data))
    except ValidationError as e:
        raise InvalidDungeonDataError("Dungeon data failed validation", format_validation_errors(e))
    except (TypeError, ValueError, RecursionError) as e:
        raise InvalidDungeonDataError(
            "Dungeon data is not JSON-compatible",
            [{"field": "", "message": str(e), "type": "type_error"}],
        )

    errors = _check_references(schema)
    if errors:
        raise InvalidDungeonDataError("Dungeon data has broken references", errors)

    return Dungeon.from_dict(schema.model_dump(mode="json"))
