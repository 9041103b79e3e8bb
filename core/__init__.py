# =============================================================================
# CORE MODULE INITIALIZATION
# =============================================================================
# File: core/__init__.py
# Description: Core module exports for centralized access
# =============================================================================

from core.config import get_settings, Settings
from core.exceptions import (
    # Base
    UserHubException,

    # Authentication
    AuthenticationError,
    AuthFailedError,
    TokenError,
    TokenInvalidError,
    TokenExpiredError,
    UnauthorizedError,

    # Authorization
    PermissionDeniedError,

    # Resources
    ResourceExistsError,
    ResourceNotFoundError,

    # Validation
    ValidationError,
    FileTypeNotAllowedError,
    FileTooLargeError,
    TooManyFilesError,

    # Infrastructure
    DatabaseError,
    CacheUnavailableError,
)
from core.security import (
    PasswordManager,
    TokenCodec,
    TokenIssuer,
    AccessClaims,
    RefreshClaims,
    generate_token_id,
    generate_resource_id,
)

__all__ = [
    # Config
    "get_settings",
    "Settings",

    # Exceptions
    "UserHubException",
    "AuthenticationError",
    "AuthFailedError",
    "TokenError",
    "TokenInvalidError",
    "TokenExpiredError",
    "UnauthorizedError",
    "PermissionDeniedError",
    "ResourceExistsError",
    "ResourceNotFoundError",
    "ValidationError",
    "FileTypeNotAllowedError",
    "FileTooLargeError",
    "TooManyFilesError",
    "DatabaseError",
    "CacheUnavailableError",

    # Security
    "PasswordManager",
    "TokenCodec",
    "TokenIssuer",
    "AccessClaims",
    "RefreshClaims",
    "generate_token_id",
    "generate_resource_id",
]
