# =============================================================================
# USERHUB BACKEND - AUTH SCHEMAS
# =============================================================================
# File: auth/schemas.py
# Description: Pydantic models for request/response validation
#              Type-safe data transfer objects for the auth and user API
# =============================================================================

from typing import Annotated, Optional, List, Literal
from datetime import datetime
import re

from pydantic import BaseModel, EmailStr, Field, StringConstraints, field_validator, ConfigDict


USERNAME_PATTERN = re.compile(r"^[a-zA-Z][a-zA-Z0-9_]*$")


def _check_password_strength(v: str) -> str:
    errors = []
    if not any(c.isupper() for c in v):
        errors.append("at least one uppercase letter")
    if not any(c.isdigit() for c in v):
        errors.append("at least one digit")
    if errors:
        raise ValueError(f"Password must contain: {', '.join(errors)}")
    return v


# =============================================================================
# BASE SCHEMAS
# =============================================================================

class BaseSchema(BaseModel):
    """Base schema with common configuration."""
    model_config = ConfigDict(
        from_attributes=True,
        str_strip_whitespace=True,
    )


# Passwords keep surrounding whitespace
Password = Annotated[str, StringConstraints(strip_whitespace=False)]


# =============================================================================
# REGISTRATION
# =============================================================================

class RegisterRequest(BaseSchema):
    """
    Schema for user registration request.

    Validation Rules:
        - username: 3-50 characters, starts with a letter, letters/digits/underscores
        - password: 6-128 characters, at least one uppercase letter and one digit
        - email:    Valid email format
    """
    username: str = Field(
        ...,
        min_length=3,
        max_length=50,
        description="Unique username",
        examples=["alice"]
    )
    password: Password = Field(
        ...,
        min_length=6,
        max_length=128,
        description="Password (min 6 chars, requires uppercase and digit)",
        examples=["Secret123"]
    )
    email: EmailStr = Field(
        ...,
        description="User's email address",
        examples=["alice@example.com"]
    )

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str) -> str:
        """Validate username format."""
        if not USERNAME_PATTERN.match(v):
            raise ValueError(
                "Username must start with a letter and contain only "
                "letters, numbers, and underscores"
            )
        return v

    @field_validator("password")
    @classmethod
    def validate_password_complexity(cls, v: str) -> str:
        """Validate password complexity requirements."""
        return _check_password_strength(v)


class RegisteredUser(BaseSchema):
    """Public fields echoed back after registration."""
    id: str
    username: str
    email: Optional[str] = None
    role: str


class RegisterResponse(BaseSchema):
    """Registration response wrapper."""
    user: RegisteredUser


# =============================================================================
# USER SCHEMAS
# =============================================================================

class UserResponse(BaseSchema):
    """Schema for user response (excludes the password hash)."""
    id: str = Field(..., description="User UUID")
    username: str = Field(..., description="Username")
    email: Optional[str] = Field(None, description="Email address")
    role: str = Field(..., description="Role name")
    phone: Optional[str] = None
    nickname: Optional[str] = None
    avatar: Optional[str] = None
    bio: Optional[str] = None
    is_active: bool = Field(True, description="Account enabled")
    is_online: bool = Field(False, description="Has a live session")
    last_login_time: Optional[datetime] = None
    last_login_ip: Optional[str] = None
    created_at: Optional[datetime] = None


class UserUpdate(BaseSchema):
    """Schema for updating a user. Only provided fields change."""
    email: Optional[EmailStr] = None
    password: Optional[Password] = Field(None, min_length=6, max_length=128)
    phone: Optional[str] = Field(None, max_length=20)
    nickname: Optional[str] = Field(None, max_length=50)
    avatar: Optional[str] = Field(None, max_length=500)
    bio: Optional[str] = None
    role: Optional[Literal["user", "admin"]] = None
    is_active: Optional[bool] = None

    @field_validator("password")
    @classmethod
    def validate_password_complexity(cls, v: Optional[str]) -> Optional[str]:
        """Validate password complexity if provided."""
        if v is None:
            return v
        return _check_password_strength(v)


class UserListResponse(BaseSchema):
    """Paginated user listing."""
    items: List[UserResponse]
    total: int
    page: int
    limit: int


# =============================================================================
# LOGIN / TOKEN SCHEMAS
# =============================================================================

class LoginRequest(BaseSchema):
    """Schema for login request."""
    username: str = Field(..., min_length=1, max_length=50, description="Username")
    password: Password = Field(..., min_length=1, max_length=128, description="Password")


class RefreshRequest(BaseSchema):
    """Schema for token refresh request."""
    refresh_token: str = Field(..., min_length=1, description="Refresh token")


class TokenResponse(BaseSchema):
    """Token pair response."""
    access_token: str = Field(..., description="JWT access token")
    refresh_token: str = Field(..., description="JWT refresh token")
    token_type: str = Field("bearer", description="Token type")
    expires_in: int = Field(..., description="Access token lifetime in seconds")


class LoginResponse(TokenResponse):
    """Login response with user data."""
    user: UserResponse = Field(..., description="User information")


class MessageResponse(BaseSchema):
    """Generic message response."""
    message: str = Field(..., description="Response message")
    success: bool = Field(True, description="Operation success status")
