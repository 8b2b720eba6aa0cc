"""Middleware package for the Dungeon Generator service."""

from dungeongen.middleware.error_handler import setup_error_handlers

__all__ = [
    "setup_error_handlers",
]
