"""
Custom exception classes for consistent error handling across all modules.

Each class carries the HTTP status and machine-readable code the global
exception handler renders, so services never import FastAPI.
"""

from typing import Any


class RentoraException(Exception):
    """Base exception for all Rentora related errors."""

    status_code: int = 400
    error_code: str = "error"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(RentoraException):
    """Raised when data validation fails."""

    status_code = 400
    error_code = "validation_error"

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)
        self.field = field
        self.value = value


class AuthenticationError(RentoraException):
    """Raised when the bearer token or credentials are missing or invalid."""

    status_code = 401
    error_code = "authentication_error"

    def __init__(
        self,
        message: str = "Authentication failed",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)


class AuthorizationError(RentoraException):
    """Raised when the actor's role or hierarchy scope forbids an action."""

    status_code = 403
    error_code = "authorization_error"

    def __init__(
        self,
        message: str = "You are not allowed to perform this action",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)


class NotFoundError(RentoraException):
    """Raised when a resource is not found."""

    status_code = 404
    error_code = "not_found"

    def __init__(
        self, message: str = "Resource not found", details: dict[str, Any] | None = None
    ):
        super().__init__(message, details)


class ConflictError(RentoraException):
    """Raised on an illegal state transition.

    Callers must re-fetch the resource before retrying.
    """

    status_code = 409
    error_code = "conflict"


class DatabaseError(RentoraException):
    """Raised when database operations fail."""

    status_code = 500
    error_code = "database_error"


class ExternalServiceError(RentoraException):
    """Raised when external service integration fails."""

    status_code = 502
    error_code = "external_service_error"

    def __init__(
        self,
        service_name: str,
        operation: str,
        details: dict[str, Any] | None = None,
    ):
        message = f"External service '{service_name}' failed during '{operation}'"
        super().__init__(message, details)
        self.service_name = service_name
        self.operation = operation
