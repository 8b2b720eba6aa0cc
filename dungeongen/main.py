"""FastAPI application entry point."""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from dungeongen.config import get_settings
from dungeongen.middleware.error_handler import setup_error_handlers
from dungeongen.api.routes import dungeons

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger("dungeongen.api")

app = FastAPI(
    title="Dungeon Generator",
    description="Procedural multi-floor dungeon generation service",
    version="0.1.0",
)

# CORS middleware for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        settings.FRONTEND_URL,
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5173",  # Vite
        "http://127.0.0.1:5173",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Structured error handlers
setup_error_handlers(app, debug=settings.DEBUG)


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "online", "service": "Dungeon Generator", "version": "0.1.0"}


@app.get("/api/health")
async def api_health_check():
    """Detailed health check."""
    config = dungeons.get_generator_config()
    return {
        "status": "healthy",
        "debug_mode": settings.DEBUG,
        "room_types": len(config.room_types.all()),
        "themes": len(config.themes.all()),
        "content": config.content.stats(),
    }


# Routes
app.include_router(dungeons.router, prefix="/api", tags=["dungeons"])

logger.info(f"Dungeon Generator ready (debug={settings.DEBUG})")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("dungeongen.main:app", host=settings.HOST, port=settings.PORT, reload=settings.DEBUG)
