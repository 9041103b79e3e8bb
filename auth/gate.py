# =============================================================================
# USERHUB BACKEND - AUTH GATE
# =============================================================================
# File: auth/gate.py
# Description: Authenticates protected requests against the live session
#              index, producing a typed request context
# =============================================================================

from dataclasses import dataclass
from typing import Optional
import hmac
import logging

from core.exceptions import (
    CacheUnavailableError,
    TokenExpiredError,
    TokenInvalidError,
    UnauthorizedError,
)
from core.security import TokenIssuer
from session.storage import SessionStore


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthContext:
    """Verified identity of the caller, handed to route handlers."""
    user_id: str
    username: str
    role: str
    access_token: str
    client_ip: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


class AuthGate:
    """
    ┌─────────────────────────────────────────────────────────────────────────┐
    │                    AUTH GATE                                             │
    │  Bearer token → signature check → live-session check → AuthContext     │
    └─────────────────────────────────────────────────────────────────────────┘

    A token with a valid signature is still rejected unless one of the
    user's indexed sessions stores that exact access token, so logout and
    a newer login revoke it immediately. If the cache cannot be reached
    the request is rejected.
    """

    HEADER_MISSING = "Authorization header is required"
    HEADER_MALFORMED = "Invalid authorization header format"
    TOKEN_REJECTED = "Invalid or expired token"

    def __init__(self, issuer: TokenIssuer, store: SessionStore):
        self._issuer = issuer
        self._store = store

    @classmethod
    def extract_bearer(cls, authorization: Optional[str]) -> str:
        """
        Pull the token out of ``Authorization: Bearer <token>``.

        Raises:
            UnauthorizedError: If the header is missing or malformed
        """
        if not authorization or not authorization.strip():
            raise UnauthorizedError(cls.HEADER_MISSING)

        parts = authorization.split()
        if len(parts) != 2 or parts[0].lower() != "bearer":
            raise UnauthorizedError(cls.HEADER_MALFORMED)
        return parts[1]

    async def _is_live(self, user_id: str, token: str) -> bool:
        for token_id in await self._store.get_active_index(user_id):
            entry = await self._store.get_access_entry(token_id)
            if entry is None or entry.user_id != user_id:
                continue
            if hmac.compare_digest(entry.access_token, token):
                return True
        return False

    async def authenticate(
        self,
        authorization: Optional[str],
        client_ip: Optional[str] = None,
    ) -> AuthContext:
        """
        Authenticate a request from its Authorization header.

        Raises:
            UnauthorizedError: For every rejection, whatever the cause
        """
        token = self.extract_bearer(authorization)

        try:
            claims = self._issuer.verify_access(token)
        except (TokenInvalidError, TokenExpiredError):
            raise UnauthorizedError(self.TOKEN_REJECTED)

        try:
            live = await self._is_live(claims.user_id, token)
        except CacheUnavailableError as e:
            logger.warning(f"Rejecting request for user {claims.user_id}: {e.details}")
            raise UnauthorizedError(self.TOKEN_REJECTED)

        if not live:
            raise UnauthorizedError(self.TOKEN_REJECTED)

        return AuthContext(
            user_id=claims.user_id,
            username=claims.username,
            role=claims.role,
            access_token=token,
            client_ip=client_ip,
        )
