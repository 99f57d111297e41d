"""
Scorecard engine error types.

Each error knows its stable ``ErrorCode`` and the HTTP status it maps to,
so the API layer renders any of them as ``{"error": {...}}`` without
branching on the concrete class.
"""

from typing import Any, Dict, List, Optional
from enum import Enum


class ErrorCode(str, Enum):
    """Machine-readable codes carried in every error payload"""
    INTERNAL_ERROR = "INTERNAL_ERROR"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"

    # Caller identity and permissions
    AUTHENTICATION_FAILED = "AUTHENTICATION_FAILED"
    AUTHORIZATION_FAILED = "AUTHORIZATION_FAILED"

    VALIDATION_ERROR = "VALIDATION_ERROR"
    COMPUTATION_ERROR = "COMPUTATION_ERROR"

    # Storage
    DATABASE_ERROR = "DATABASE_ERROR"
    CACHE_ERROR = "CACHE_ERROR"


class BaseAppException(Exception):
    """
    Root of every error the engine raises on purpose.

    Attributes:
        message: Human-readable summary, safe to show to API clients
        error_code: Stable ErrorCode
        details: Extra structured context (never driver messages)
        status_code: HTTP status used when the error reaches the API
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 500
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.status_code = status_code
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Error payload returned by the API"""
        return {
            "error": {
                "message": self.message,
                "code": self.error_code.value,
                "details": self.details,
                "type": type(self).__name__
            }
        }

    def __str__(self) -> str:
        return f"{self.error_code.value}: {self.message}"

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.error_code.value!r}, status={self.status_code})"


# ========================================
# Request errors
# ========================================

class ValidationError(BaseAppException):
    """Bad period, malformed payload or ambiguous scheme; ``field_errors`` maps field to messages"""

    def __init__(
        self,
        message: str = "Validation failed",
        field_errors: Optional[Dict[str, List[str]]] = None
    ):
        details = {"field_errors": field_errors} if field_errors else {}
        super().__init__(message, ErrorCode.VALIDATION_ERROR, details, 422)


class ResourceNotFoundError(BaseAppException):
    """The addressed record is absent (never used to reveal an unknown agent)"""

    def __init__(
        self,
        resource_type: str = "Resource",
        resource_id: Optional[str] = None,
        message: Optional[str] = None
    ):
        if message is None:
            suffix = f" (ID: {resource_id})" if resource_id else ""
            message = f"{resource_type} not found{suffix}"
        super().__init__(
            message,
            ErrorCode.RESOURCE_NOT_FOUND,
            {"resource_type": resource_type, "resource_id": resource_id},
            404,
        )


class ComputationError(BaseAppException):
    """Scoring arithmetic produced something that is not a finite number"""

    def __init__(
        self,
        message: str = "Scorecard computation failed",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, ErrorCode.COMPUTATION_ERROR, details, 500)


class AuthenticationError(BaseAppException):
    """No usable principal on the request"""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message, ErrorCode.AUTHENTICATION_FAILED, None, 401)


class AuthorizationError(BaseAppException):
    """The principal may not act on the target agent's scorecard"""

    def __init__(
        self,
        message: str = "Access denied",
        required_permission: Optional[str] = None
    ):
        details = {"required_permission": required_permission} if required_permission else {}
        super().__init__(message, ErrorCode.AUTHORIZATION_FAILED, details, 403)


# ========================================
# Storage errors
# ========================================

class DatabaseError(BaseAppException):
    """Metric store failure; the transaction has been rolled back"""

    def __init__(
        self,
        message: str = "Database operation failed",
        operation: Optional[str] = None,
        table: Optional[str] = None
    ):
        super().__init__(
            message,
            ErrorCode.DATABASE_ERROR,
            {"operation": operation, "table": table},
            500,
        )


class CacheError(BaseAppException):
    """Cached views could not be invalidated; the write is not confirmed and may be retried"""

    def __init__(
        self,
        message: str = "Cache operation failed",
        operation: Optional[str] = None,
        key: Optional[str] = None
    ):
        super().__init__(
            message,
            ErrorCode.CACHE_ERROR,
            {"operation": operation, "key": key},
            503,
        )


# ========================================
# Helpers
# ========================================

def handle_database_exception(
    exc: Exception,
    operation: Optional[str] = None,
    table: Optional[str] = None,
) -> DatabaseError:
    """
    Wrap a driver or ORM exception in a generic DatabaseError.

    Only the operation and table travel with the result. The caller logs
    ``exc`` itself before raising.
    """
    return DatabaseError(operation=operation, table=table)


def create_validation_error(field_errors: Dict[str, List[str]]) -> ValidationError:
    """Build a ValidationError whose message counts the individual problems"""
    count = sum(len(messages) for messages in field_errors.values())
    return ValidationError(f"Validation failed with {count} error(s)", field_errors)


__all__ = [
    'ErrorCode',
    'BaseAppException',
    'ValidationError',
    'ResourceNotFoundError',
    'ComputationError',
    'AuthenticationError',
    'AuthorizationError',
    'DatabaseError',
    'CacheError',
    'handle_database_exception',
    'create_validation_error',
]
