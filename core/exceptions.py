# =============================================================================
# USERHUB BACKEND - CORE EXCEPTIONS MODULE
# =============================================================================
# File: core/exceptions.py
# Description: Custom exception hierarchy for the backend
#              Provides granular error handling with HTTP status code mapping
# =============================================================================

from typing import Optional, Dict, Any
from fastapi import status


class UserHubException(Exception):
    """
    ┌─────────────────────────────────────────────────────────────────────────┐
    │                    BASE EXCEPTION CLASS                                  │
    │  All custom exceptions inherit from this base class                      │
    │  Provides consistent error structure across the application             │
    └─────────────────────────────────────────────────────────────────────────┘

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable error identifier
        status_code: HTTP status code for API responses
        details: Additional context for debugging
    """

    def __init__(
        self,
        message: str = "An error occurred",
        error_code: str = "INTERNAL_ERROR",
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON serialization."""
        return {
            "error": True,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details
        }


# =============================================================================
# AUTHENTICATION EXCEPTIONS
# =============================================================================

class AuthenticationError(UserHubException):
    """
    Raised when authentication fails (bad credentials, bad token, no header).

    Every subclass maps to HTTP 401.
    """

    def __init__(
        self,
        message: str = "Authentication failed",
        error_code: str = "AUTHENTICATION_FAILED",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            error_code=error_code,
            status_code=status.HTTP_401_UNAUTHORIZED,
            details=details
        )


class AuthFailedError(AuthenticationError):
    """
    Raised on a failed login.

    The message is the same whether the username is unknown or the
    password is wrong.
    """

    def __init__(self, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message="Invalid username or password",
            error_code="AUTH_FAILED",
            details=details
        )


class UnauthorizedError(AuthenticationError):
    """Raised by the auth gate for any rejected request."""

    def __init__(
        self,
        message: str = "Authentication required",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            error_code="UNAUTHORIZED",
            details=details
        )


class TokenError(AuthenticationError):
    """Base class for all token-related errors."""

    def __init__(
        self,
        message: str = "Token error",
        error_code: str = "TOKEN_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            error_code=error_code,
            details=details
        )


class TokenExpiredError(TokenError):
    """Raised when a JWT token has expired."""

    def __init__(self, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message="Token has expired",
            error_code="TOKEN_EXPIRED",
            details=details
        )


class TokenInvalidError(TokenError):
    """Raised when a token is malformed, badly signed, revoked or replayed."""

    def __init__(self, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message="Invalid token",
            error_code="TOKEN_INVALID",
            details=details
        )


# =============================================================================
# AUTHORIZATION EXCEPTIONS
# =============================================================================

class PermissionDeniedError(UserHubException):
    """
    Raised when an authenticated user lacks permission for an action.

    Examples:
        - Non-admin updating another user's profile
        - Non-admin deleting another user's upload
    """

    def __init__(
        self,
        message: str = "Permission denied",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            error_code="PERMISSION_DENIED",
            status_code=status.HTTP_403_FORBIDDEN,
            details=details
        )


# =============================================================================
# RESOURCE EXCEPTIONS
# =============================================================================

class ResourceExistsError(UserHubException):
    """Raised when creating a record that violates a uniqueness rule."""

    def __init__(
        self,
        field: str = "username",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=f"A record with this {field} already exists",
            error_code="RESOURCE_EXISTS",
            status_code=status.HTTP_409_CONFLICT,
            details=details
        )


class ResourceNotFoundError(UserHubException):
    """Raised when a requested record does not exist."""

    def __init__(
        self,
        resource: str = "Resource",
        identifier: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        message = f"{resource} not found"
        if identifier:
            message = f"{resource} '{identifier}' not found"
        super().__init__(
            message=message,
            error_code="RESOURCE_NOT_FOUND",
            status_code=status.HTTP_404_NOT_FOUND,
            details=details
        )


# =============================================================================
# VALIDATION EXCEPTIONS
# =============================================================================

class ValidationError(UserHubException):
    """Raised when input validation fails outside of request-body parsing."""

    def __init__(
        self,
        message: str = "Validation failed",
        error_code: str = "VALIDATION_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            error_code=error_code,
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            details=details
        )


class FileTypeNotAllowedError(ValidationError):
    """Raised when an upload's extension is not allowed for its type."""

    def __init__(self, extension: str, upload_type: str):
        super().__init__(
            message=f"File type '{extension or '(none)'}' is not allowed for '{upload_type}' uploads",
            error_code="FILE_TYPE_NOT_ALLOWED",
            details={"extension": extension, "type": upload_type},
        )


class FileTooLargeError(ValidationError):
    """Raised when an upload exceeds the configured size limit."""

    def __init__(self, size: int, limit: int):
        super().__init__(
            message=f"File exceeds the maximum size of {limit} bytes",
            error_code="FILE_TOO_LARGE",
            details={"size": size, "limit": limit},
        )


class TooManyFilesError(ValidationError):
    """Raised when a batch upload carries more files than allowed."""

    def __init__(self, count: int, limit: int):
        super().__init__(
            message=f"Too many files. At most {limit} files may be uploaded at once",
            error_code="TOO_MANY_FILES",
            details={"count": count, "limit": limit},
        )


# =============================================================================
# INFRASTRUCTURE EXCEPTIONS
# =============================================================================

class DatabaseError(UserHubException):
    """Raised when the relational store fails."""

    def __init__(
        self,
        message: str = "Database error",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            error_code="DATABASE_ERROR",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            details=details
        )


class CacheUnavailableError(UserHubException):
    """Raised when the key-value store is unreachable or times out."""

    def __init__(
        self,
        message: str = "Cache is unavailable",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            error_code="CACHE_UNAVAILABLE",
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            details=details
        )
