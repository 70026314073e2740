"""Error hierarchy for every failure the API reports to clients.

Each error carries a code, a category and the HTTP status it maps to.
Handlers in error_handlers.py turn them into JSON responses; routes never
catch them.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional


class ErrorCategory(str, Enum):
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    VALIDATION = "validation"
    RESOURCE_NOT_FOUND = "resource_not_found"
    CONFLICT = "conflict"
    DATABASE = "database"
    EXTERNAL_API = "external_api"
    INTERNAL = "internal"


class ContestHubError(Exception):
    """Base exception for all API errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.http_status = http_status
        self.timestamp = datetime.now(timezone.utc)

    def to_response(self) -> dict:
        return {
            "message": self.message,
            "error": {
                "code": self.code,
                "category": self.category.value,
                "timestamp": self.timestamp.isoformat(),
            },
        }


# --- Auth (401 / 403) ---

class UnauthorizedError(ContestHubError):
    """Token cookie missing, malformed, badly signed or expired."""
    def __init__(self, reason: Optional[str] = None):
        super().__init__(
            "unauthorized access", "UNAUTHORIZED",
            ErrorCategory.AUTHENTICATION, 401,
        )
        self.reason = reason


class ForbiddenError(ContestHubError):
    """Valid token, but the stored role is not allowed on this route."""
    def __init__(self, required_roles, actual_role: Optional[str] = None):
        super().__init__(
            "forbidden access", "FORBIDDEN",
            ErrorCategory.AUTHORIZATION, 403,
        )
        self.required_roles = tuple(required_roles)
        self.actual_role = actual_role


# --- Domain (400-level) ---

class InvalidIdentifierError(ContestHubError):
    def __init__(self, value: str):
        super().__init__(
            f"'{value}' is not a valid document id", "INVALID_ID",
            ErrorCategory.VALIDATION, 400,
        )
        self.value = value


class PaymentValidationError(ContestHubError):
    def __init__(self, message: str):
        super().__init__(
            message, "PAYMENT_VALIDATION_ERROR",
            ErrorCategory.VALIDATION, 400,
        )


class ResourceNotFoundError(ContestHubError):
    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(
            f"{resource_type} '{resource_id}' not found", "RESOURCE_NOT_FOUND",
            ErrorCategory.RESOURCE_NOT_FOUND, 404,
        )


class WinnerAlreadyDeclaredError(ContestHubError):
    def __init__(self, contest_id: str):
        super().__init__(
            f"Contest '{contest_id}' already has a winner",
            "WINNER_ALREADY_DECLARED", ErrorCategory.CONFLICT, 409,
        )
        self.contest_id = contest_id


# --- Infrastructure (500-level) ---

class DatabaseError(ContestHubError):
    def __init__(self, message: str, operation: str = "query"):
        super().__init__(
            f"Database {operation} failed: {message}", "DATABASE_ERROR",
            ErrorCategory.DATABASE, 503,
        )
        self.operation = operation


class PaymentProviderError(ContestHubError):
    def __init__(self, message: str):
        super().__init__(
            f"Payment provider error: {message}", "PAYMENT_PROVIDER_ERROR",
            ErrorCategory.EXTERNAL_API, 502,
        )
