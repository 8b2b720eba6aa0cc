"""
Dungeon Generation API Routes.

Handles multi-floor dungeon generation, export/import, and the
registration hooks for room types and themes.
"""
import logging
from functools import lru_cache
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel, Field, StrictInt

from dungeongen.config import get_settings
from dungeongen.core.map_generation import DungeonGenerator, GeneratorConfig, GenerationOptions, SizeClass
from dungeongen.core.map_generation.models import GRID_SIZES

logger = logging.getLogger("dungeongen.api")

router = APIRouter(prefix="/dungeons", tags=["dungeons"])


@lru_cache()
def get_generator_config() -> GeneratorConfig:
    """Process-wide generator configuration, built once from settings."""
    return GeneratorConfig.from_settings(get_settings())


# =============================================================================
# REQUEST/RESPONSE MODELS
# =============================================================================

class GenerateDungeonRequest(BaseModel):
    """Request to generate a dungeon. Omitted fields take their defaults."""
    name: Optional[str] = Field(default=None, description="Dungeon name")
    level: Optional[StrictInt] = Field(default=None, description="Difficulty of the first floor")
    floors: Optional[StrictInt] = Field(default=None, description="Number of floors")
    rooms_per_floor: Optional[StrictInt] = Field(default=None, description="Requested rooms per floor")
    theme: Optional[str] = Field(default=None, description="Registered theme id")
    size: Optional[str] = Field(default=None, description="small, medium, large or huge")
    seed: Optional[StrictInt] = Field(default=None, description="Random seed")

    def to_options(self) -> GenerationOptions:
        return GenerationOptions.from_dict(self.model_dump(exclude={"seed"}))


class DungeonResponse(BaseModel):
    """Response containing a dungeon."""
    success: bool
    dungeon: Dict[str, Any]
    message: str = ""


class ImportDungeonRequest(BaseModel):
    """Exported dungeon text to validate and load."""
    data: str


class ThemeRequest(BaseModel):
    """Theme registration payload."""
    theme_id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    description: str = ""
    room_types: List[str] = Field(default_factory=list)
    corridor_features: Optional[List[str]] = None


class RoomTypesResponse(BaseModel):
    """Response listing available room types."""
    success: bool
    room_types: List[Dict[str, Any]]


class ThemesResponse(BaseModel):
    """Response listing available themes."""
    success: bool
    themes: List[Dict[str, Any]]


def _generate(request: GenerateDungeonRequest, config: GeneratorConfig):
    generator = DungeonGenerator(config=config, seed=request.seed)
    return generator, generator.generate(request.to_options())


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.post("/generate", response_model=DungeonResponse)
async def generate_dungeon(
    request: GenerateDungeonRequest,
    config: GeneratorConfig = Depends(get_generator_config),
):
    """
    Generate a procedural dungeon.

    Each floor gets weighted random rooms, a corridor spanning tree that
    connects all of them, and content scaled to the floor level.
    Fewer rooms than requested may fit on small grids.
    """
    _, dungeon = _generate(request, config)
    total_rooms = sum(f.achieved_rooms for f in dungeon.floors)

    return DungeonResponse(
        success=True,
        dungeon=dungeon.to_dict(),
        message=f"Generated {len(dungeon.floors)}-floor dungeon '{dungeon.name}' with {total_rooms} rooms"
    )


@router.post("/export")
async def export_dungeon(
    request: GenerateDungeonRequest,
    config: GeneratorConfig = Depends(get_generator_config),
):
    """Generate a dungeon and return its export document as a download."""
    generator, dungeon = _generate(request, config)
    return Response(
        content=generator.export(dungeon),
        media_type="application/json",
        headers={
            "Content-Disposition": f"attachment; filename=dungeon-{dungeon.id}.json"
        }
    )


@router.post("/import", response_model=DungeonResponse)
async def import_dungeon(
    request: ImportDungeonRequest,
    config: GeneratorConfig = Depends(get_generator_config),
):
    """
    Validate and load an exported dungeon.

    Malformed documents are rejected with INVALID_DUNGEON_DATA and a
    field-level error list.
    """
    dungeon = DungeonGenerator(config=config).import_(request.data)
    logger.info(f"Imported dungeon '{dungeon.name}' ({dungeon.id}) with {len(dungeon.floors)} floors")
    return DungeonResponse(
        success=True,
        dungeon=dungeon.to_dict(),
        message=f"Imported dungeon '{dungeon.name}'"
    )


@router.get("/room-types", response_model=RoomTypesResponse)
async def list_room_types(config: GeneratorConfig = Depends(get_generator_config)):
    """List all registered room types with their weights and size bounds."""
    return RoomTypesResponse(
        success=True,
        room_types=[rt.to_dict() for rt in config.room_types.all()]
    )


@router.post("/room-types", response_model=RoomTypesResponse)
async def register_room_type(
    definition: Dict[str, Any],
    config: GeneratorConfig = Depends(get_generator_config),
):
    """
    Register or replace a room type.

    The ``content`` key selects what the room generates:
    combat, treasure, puzzle or none.
    """
    registered = config.register_room_type(definition)
    return RoomTypesResponse(success=True, room_types=[registered.to_dict()])


@router.get("/themes", response_model=ThemesResponse)
async def list_themes(config: GeneratorConfig = Depends(get_generator_config)):
    """List all registered themes."""
    return ThemesResponse(
        success=True,
        themes=[t.to_dict() for t in config.themes.all()]
    )


@router.post("/themes", response_model=ThemesResponse)
async def register_theme(
    request: ThemeRequest,
    config: GeneratorConfig = Depends(get_generator_config),
):
    """Register or replace a theme. Every listed room type must already exist."""
    payload = request.model_dump(exclude={"theme_id"}, exclude_none=True)
    registered = config.register_theme(request.theme_id, payload)
    return ThemesResponse(success=True, themes=[registered.to_dict()])


@router.get("/size-classes")
async def list_size_classes():
    """List the size classes and their grid dimensions."""
    return {
        "success": True,
        "size_classes": [
            {"id": size.value, "width": GRID_SIZES[size][0], "height": GRID_SIZES[size][1]}
            for size in SizeClass
        ],
    }
