"""
Dungeon Generator - Custom Error Types
Structured exceptions for generation errors with recovery hints.
"""
from typing import Dict, Any, List, Optional
from enum import Enum


class ErrorCode(str, Enum):
    """Standard error codes for the dungeon generator."""
    # General errors
    UNKNOWN = "UNKNOWN"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"

    # Generation errors
    INVALID_CONFIGURATION = "INVALID_CONFIGURATION"
    GENERATION_FAILED = "GENERATION_FAILED"

    # Registry errors
    INVALID_CONTENT = "INVALID_CONTENT"
    INVALID_DEFINITION = "INVALID_DEFINITION"

    # Import errors
    INVALID_DUNGEON_DATA = "INVALID_DUNGEON_DATA"


class DungeonError(Exception):
    """
    Base exception for all dungeon generator errors.

    Provides structured error information with:
    - Error code for programmatic handling
    - Human-readable message
    - Additional context details
    - Recovery hints for API clients
    """

    def __init__(
        self,
        code: ErrorCode = ErrorCode.UNKNOWN,
        message: str = "An unexpected error occurred",
        details: Optional[Dict[str, Any]] = None,
        recoverable: bool = True,
        recovery_hint: Optional[str] = None,
        http_status: int = 500
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}
        self.recoverable = recoverable
        self.recovery_hint = recovery_hint
        self.http_status = http_status

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for JSON response."""
        return {
            "error": {
                "code": self.code.value,
                "message": self.message,
                "details": self.details,
                "recoverable": self.recoverable,
                "recovery_hint": self.recovery_hint
            }
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code.value}, message={self.message!r})"


# =============================================================================
# Generation Errors
# =============================================================================

class ConfigurationError(DungeonError):
    """Raised when generation options or settings are invalid."""

    def __init__(self, field: str, message: str, value: Any = None):
        details = {"field": field}
        if value is not None:
            details["value"] = str(value)
        super().__init__(
            code=ErrorCode.INVALID_CONFIGURATION,
            message=message,
            details=details,
            http_status=400,
            recovery_hint=f"Check the value for '{field}'"
        )
        self.field = field


class GenerationError(DungeonError):
    """Raised when a floor cannot be generated at all."""

    def __init__(self, reason: str = "Dungeon generation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__(
            code=ErrorCode.GENERATION_FAILED,
            message=reason,
            details=details,
            http_status=500,
            recoverable=False,
            recovery_hint="Register room types that fit the requested grid size"
        )


# =============================================================================
# Registry Errors
# =============================================================================

class ContentValidationError(DungeonError):
    """Raised when a catalog entry is rejected at registration time."""

    def __init__(self, category: str, reason: str, errors: Optional[List[Dict[str, Any]]] = None):
        details: Dict[str, Any] = {"category": category}
        if errors:
            details["errors"] = errors
        super().__init__(
            code=ErrorCode.INVALID_CONTENT,
            message=reason,
            details=details,
            http_status=400,
            recovery_hint="Fix the catalog entry and register it again"
        )


class RegistrationError(DungeonError):
    """Raised when a room type or theme definition is invalid."""

    def __init__(self, kind: str, reason: str, identifier: Optional[str] = None):
        details = {"kind": kind}
        if identifier:
            details["identifier"] = identifier
        super().__init__(
            code=ErrorCode.INVALID_DEFINITION,
            message=reason,
            details=details,
            http_status=400,
            recovery_hint=f"Check the {kind} definition"
        )


# =============================================================================
# Import Errors
# =============================================================================

class InvalidDungeonDataError(DungeonError):
    """Raised when imported dungeon data fails structural validation."""

    def __init__(self, reason: str = "Invalid dungeon data", errors: Optional[List[Dict[str, Any]]] = None):
        super().__init__(
            code=ErrorCode.INVALID_DUNGEON_DATA,
            message=reason,
            details={"errors": errors or []},
            http_status=400,
            recovery_hint="Import a document produced by the dungeon export"
        )
        self.errors = errors or []


def format_validation_errors(exc: Exception) -> List[Dict[str, Any]]:
    """Flatten a pydantic ValidationError into field/message/type records."""
    errors = []
    for error in exc.errors():
        field = " -> ".join(str(loc) for loc in error.get("loc", []))
        errors.append({
            "field": field,
            "message": error.get("msg", "Invalid value"),
            "type": error.get("type", "validation_error")
        })
    return errors
