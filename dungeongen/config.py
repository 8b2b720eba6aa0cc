"""Application configuration using environment variables."""
import os
from functools import lru_cache
from pathlib import Path
from dotenv import load_dotenv

from dungeongen.core.errors import ConfigurationError

load_dotenv()

DEFAULT_CONTENT_DIR = Path(__file__).parent / "data" / "content"


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(name, f"{name} must be an integer", raw)


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ConfigurationError(name, f"{name} must be a number", raw)
    if not 0.0 <= value <= 1.0:
        raise ConfigurationError(name, f"{name} must be between 0 and 1", raw)
    return value


class Settings:
    """Application settings loaded from environment variables."""

    def __init__(self):
        # Server
        self.HOST: str = os.getenv("HOST", "127.0.0.1")
        self.PORT: int = _env_int("PORT", 8000)
        self.DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"
        self.LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

        # CORS - Frontend URL
        self.FRONTEND_URL: str = os.getenv("FRONTEND_URL", "http://localhost:3000")

        # Generation limits
        self.DUNGEON_MAX_ROOMS_PER_FLOOR: int = _env_int("DUNGEON_MAX_ROOMS_PER_FLOOR", 15)
        self.DUNGEON_PLACEMENT_ATTEMPTS: int = _env_int("DUNGEON_PLACEMENT_ATTEMPTS", 100)
        self.DUNGEON_FEATURE_CHANCE: float = _env_float("DUNGEON_FEATURE_CHANCE", 0.5)
        self.DUNGEON_CORRIDOR_FEATURE_CHANCE: float = _env_float("DUNGEON_CORRIDOR_FEATURE_CHANCE", 0.3)

        # Content catalog
        self.CONTENT_DATA_DIR: Path = Path(os.getenv("CONTENT_DATA_DIR") or DEFAULT_CONTENT_DIR)

        if self.DUNGEON_MAX_ROOMS_PER_FLOOR < 1:
            raise ConfigurationError(
                "DUNGEON_MAX_ROOMS_PER_FLOOR", "DUNGEON_MAX_ROOMS_PER_FLOOR must be at least 1",
                self.DUNGEON_MAX_ROOMS_PER_FLOOR,
            )
        if self.DUNGEON_PLACEMENT_ATTEMPTS < 1:
            raise ConfigurationError(
                "DUNGEON_PLACEMENT_ATTEMPTS", "DUNGEON_PLACEMENT_ATTEMPTS must be at least 1",
                self.DUNGEON_PLACEMENT_ATTEMPTS,
            )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
