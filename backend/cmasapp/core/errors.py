"""Error Hierarchy — typed failures of user operations and their HTTP mapping.

Invariants:
    - Every error carries a code, a category and the user/operation it concerns
    - HTTP status is derived from the category via HTTP_STATUS_BY_CATEGORY only
    - to_response() produces a problem object (status + human-readable detail)
    - Store failures never leak driver messages to clients

Design Decisions:
    - Single hierarchy with CmasError base: one global handler catches all
    - Category → status table instead of per-class status codes: the taxonomy stays closed
      and the mapping exhaustive (tests assert every category is mapped)
    - ErrorContext travels with the error so handlers can log user_id/operation
      without re-parsing messages
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from http import HTTPStatus
from typing import Any


class ErrorSeverity(str, Enum):
    """Drives the log level used when the error is reported."""
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """Failure kinds — the keys of the status dispatch table."""
    VALIDATION = "validation"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"
    INTERNAL = "internal"


HTTP_STATUS_BY_CATEGORY: dict[ErrorCategory, HTTPStatus] = {
    ErrorCategory.VALIDATION: HTTPStatus.BAD_REQUEST,
    ErrorCategory.BUSINESS_RULE: HTTPStatus.BAD_REQUEST,
    ErrorCategory.RESOURCE_NOT_FOUND: HTTPStatus.NOT_FOUND,
    ErrorCategory.DATABASE: HTTPStatus.SERVICE_UNAVAILABLE,
    ErrorCategory.INTERNAL: HTTPStatus.INTERNAL_SERVER_ERROR,
}


@dataclass
class ErrorContext:
    """Which user and which store operation a failure belongs to."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    user_id: int | None = None
    email: str | None = None
    operation: str | None = None


def build_problem(status: HTTPStatus, detail: str, **extra: Any) -> dict:
    """Problem object shared by domain, validation and catch-all handlers."""
    problem = {
        "type": "about:blank",
        "title": status.phrase,
        "status": status.value,
        "detail": detail,
    }
    problem.update(extra)
    return problem


class CmasError(Exception):
    """Base exception for all user-service errors."""

    category: ErrorCategory = ErrorCategory.INTERNAL
    code: str = "INTERNAL_ERROR"
    severity: ErrorSeverity = ErrorSeverity.ERROR

    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(message)
        self.message = message
        self.context = context or ErrorContext()

    @property
    def http_status(self) -> HTTPStatus:
        return HTTP_STATUS_BY_CATEGORY[self.category]

    def log_extra(self) -> dict:
        """Structured fields for the JSON log line reporting this error."""
        return {
            "error_code": self.code,
            "user_id": self.context.user_id,
            "operation": self.context.operation,
            "status": self.http_status.value,
        }

    def to_response(self) -> dict:
        """Convert to a problem+json body."""
        return build_problem(self.http_status, self.message, code=self.code)


# ─── Domain Errors (400-level) ──────────────────────────────────

class UserNotFoundError(CmasError):
    """No user is stored under the requested id."""
    category = ErrorCategory.RESOURCE_NOT_FOUND
    code = "USER_NOT_FOUND"
    severity = ErrorSeverity.WARNING

    def __init__(self, user_id: int, operation: str | None = None):
        super().__init__(
            f"User by id {user_id} was not found",
            ErrorContext(user_id=user_id, operation=operation),
        )
        self.user_id = user_id


class EmailTakenError(CmasError):
    """Another user already owns the email."""
    category = ErrorCategory.BUSINESS_RULE
    code = "EMAIL_TAKEN"
    severity = ErrorSeverity.WARNING

    def __init__(
        self, email: str, user_id: int | None = None, operation: str | None = None,
    ):
        super().__init__(
            f"Email {email} taken",
            ErrorContext(user_id=user_id, email=email, operation=operation),
        )
        self.email = email


class BadRequestError(CmasError):
    """Request payload could not be turned into a user."""
    category = ErrorCategory.VALIDATION
    code = "BAD_REQUEST"
    severity = ErrorSeverity.WARNING

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatabaseError(CmasError):
    """The store failed while running a user operation."""
    category = ErrorCategory.DATABASE
    code = "DATABASE_ERROR"
    severity = ErrorSeverity.CRITICAL

    def __init__(self, message: str, operation: str, user_id: int | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            ErrorContext(user_id=user_id, operation=operation),
        )
        self.operation = operation
