# =============================================================================
# USERHUB BACKEND - SESSION MODELS
# =============================================================================
# File: session/models.py
# Description: Pydantic models for cached session entries and the results
#              of session lifecycle operations
# =============================================================================

from datetime import datetime
from pydantic import BaseModel, Field

from auth.schemas import UserResponse


class AccessEntry(BaseModel):
    """Cached half of a session keyed by ``access_token:{token_id}``."""
    user_id: str = Field(..., description="Owner of the session")
    access_token: str = Field(..., description="Exact access token string issued")


class RefreshEntry(BaseModel):
    """Cached half of a session keyed by ``refresh_token:{token_id}``."""
    user_id: str = Field(..., description="Owner of the session")
    refresh_token: str = Field(..., description="Exact refresh token string issued")


class SessionRecord(BaseModel):
    """
    One login's token pair.

    Persisted as two independently expiring entries; this model is what
    the manager assembles before writing them.
    """
    token_id: str
    user_id: str
    access_token: str
    refresh_token: str
    issued_at: datetime
    access_expires_at: datetime
    refresh_expires_at: datetime


class LoginResult(BaseModel):
    """Outcome of a successful login. ``user`` never carries a password hash."""
    user: UserResponse
    access_token: str
    refresh_token: str
    expires_in: int


class TokenPair(BaseModel):
    """Outcome of a successful refresh."""
    access_token: str
    refresh_token: str
    expires_in: int
