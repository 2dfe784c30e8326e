"""Error taxonomy for the NightMind engine.

Every error carries a short, user-facing ``message`` and a stable ``code``.
Stack traces and collaborator details belong in the logs, not in messages.

Usage:
    from core.errors import ValidationError, NotFoundError

    if not 1 <= mood <= 10:
        raise ValidationError("Mood must be a number between 1 and 10", field="mood")
"""
from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(str, Enum):
    """Stable error codes exposed to the UI layer."""
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    EXTERNAL_SERVICE_ERROR = "EXTERNAL_SERVICE_ERROR"
    DATABASE_ERROR = "DATABASE_ERROR"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"


class NightMindError(Exception):
    """Base class for all engine errors."""
    code = ErrorCode.VALIDATION_ERROR

    def __init__(self, message: str, **details: Any):
        super().__init__(message)
        self.message = message
        self.details: Dict[str, Any] = details

    def to_dict(self) -> dict:
        return {"code": self.code.value, "message": self.message}


class ValidationError(NightMindError):
    """Missing required content or a value out of range. Never persisted."""
    code = ErrorCode.VALIDATION_ERROR


class NotFoundError(NightMindError):
    """Operation on an id that does not exist."""
    code = ErrorCode.NOT_FOUND

    def __init__(self, kind: str, entity_id: str):
        super().__init__(f"{kind} not found", kind=kind, entity_id=entity_id)


class CollaboratorFailure(NightMindError):
    """Completion or Analysis Service unreachable, timed out or erroring."""
    code = ErrorCode.EXTERNAL_SERVICE_ERROR

    def __init__(self, service: str, message: Optional[str] = None):
        super().__init__(message or f"{service} is unavailable", service=service)
        self.service = service


class PersistenceFailure(NightMindError):
    """Encrypted store could not be written."""
    code = ErrorCode.DATABASE_ERROR


class ConfigurationError(NightMindError):
    code = ErrorCode.CONFIGURATION_ERROR
