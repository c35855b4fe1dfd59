"""Error Hierarchy — typed, categorized exceptions for every roomstate failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Absence is never an error: lookups return None / [] instead
    - Domain errors (400-level) are caller mistakes; consistency, serialization
      and storage errors (500-level) are critical
    - to_response() produces the REST envelope; no internal details leaked

Design Decisions:
    - Single hierarchy with RoomStateError base: the FastAPI handler catches all
    - One explicit conversion point per upstream source: SQLAlchemy errors in
      infrastructure/database.py, pydantic errors in schemas/events.py,
      identifier errors in core/identifiers.py
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    AUTHORIZATION = "authorization"
    RESOURCE_NOT_FOUND = "resource_not_found"
    CONFLICT = "conflict"
    SERIALIZATION = "serialization"
    CONSISTENCY = "consistency"
    DATABASE = "database"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    room_id: str | None = None
    user_id: str | None = None
    event_id: str | None = None
    path: str | None = None
    debug_info: dict[str, Any] | None = None


class RoomStateError(Exception):
    """Base exception for all roomstate errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    @property
    def retryable(self) -> bool:
        return False

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "retryable": self.retryable,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "room_id": self.context.room_id,
                    "user_id": self.context.user_id,
                    "event_id": self.context.event_id,
                    "path": self.context.path,
                },
            }
        }


# ─── Domain Errors (400-level) ──────────────────────────────────

class UnauthorizedError(RoomStateError):
    """Membership creation rejected by the room's join rule."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "M_FORBIDDEN", ErrorCategory.AUTHORIZATION,
            ErrorSeverity.WARNING, context, 403,
        )


class ResourceNotFoundError(RoomStateError):
    """A resource required to complete the operation does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "M_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class TransactionConflictError(RoomStateError):
    """A transaction for (path, access_token) is already cached."""
    def __init__(self, path: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.path = path
        super().__init__(
            f"Transaction for '{path}' already exists",
            "TRANSACTION_CONFLICT", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, ctx, 409,
        )


class ConcurrencyError(RoomStateError):
    """Concurrent modification detected; the caller may retry."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "CONCURRENCY_CONFLICT", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, context, 409,
        )

    @property
    def retryable(self) -> bool:
        return True


# ─── Integrity Errors (500-level) ───────────────────────────────

class SerializationError(RoomStateError):
    """A stored membership value or event payload has an unexpected shape."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "SERIALIZATION_ERROR", ErrorCategory.SERIALIZATION,
            ErrorSeverity.CRITICAL, context, 500,
        )


class ConsistencyError(RoomStateError):
    """A membership row points at an event missing from the event log."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "CONSISTENCY_VIOLATION", ErrorCategory.CONSISTENCY,
            ErrorSeverity.CRITICAL, context, 500,
        )


class IdentifierError(RoomStateError):
    """An event identifier could not be generated."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "IDENTIFIER_ERROR", ErrorCategory.INTERNAL,
            ErrorSeverity.CRITICAL, context, 500,
        )


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatabaseError(RoomStateError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation
