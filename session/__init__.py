# =============================================================================
# SESSION MODULE INITIALIZATION
# =============================================================================
# File: session/__init__.py
# Description: Session module exports
# =============================================================================

from session.models import (
    AccessEntry,
    RefreshEntry,
    SessionRecord,
    LoginResult,
    TokenPair,
)
from session.storage import SessionStore
from session.manager import SessionManager, UserDirectory

__all__ = [
    "AccessEntry",
    "RefreshEntry",
    "SessionRecord",
    "LoginResult",
    "TokenPair",
    "SessionStore",
    "SessionManager",
    "UserDirectory",
]
