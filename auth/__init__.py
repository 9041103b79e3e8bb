# =============================================================================
# AUTH MODULE INITIALIZATION
# =============================================================================
# File: auth/__init__.py
# Description: Auth module exports. The gate, service and dependencies
#              depend on the session package and are imported directly.
# =============================================================================

from auth.schemas import (
    RegisterRequest,
    RegisterResponse,
    RegisteredUser,
    UserResponse,
    UserUpdate,
    UserListResponse,
    LoginRequest,
    LoginResponse,
    RefreshRequest,
    TokenResponse,
    MessageResponse,
)
from auth.repository import UserRepository, SqlUserDirectory

__all__ = [
    "RegisterRequest",
    "RegisterResponse",
    "RegisteredUser",
    "UserResponse",
    "UserUpdate",
    "UserListResponse",
    "LoginRequest",
    "LoginResponse",
    "RefreshRequest",
    "TokenResponse",
    "MessageResponse",
    "UserRepository",
    "SqlUserDirectory",
]
