# =============================================================================
# USERHUB BACKEND - SESSION MANAGER
# =============================================================================
# File: session/manager.py
# Description: Login, refresh-token rotation and logout over the token
#              issuer, the session store and the user directory
# =============================================================================

from typing import Any, Awaitable, List, Optional, Protocol
from datetime import datetime, timedelta, timezone
import hmac
import logging

from auth.schemas import UserResponse
from core.exceptions import (
    AuthFailedError,
    TokenInvalidError,
    TokenExpiredError,
)
from core.security import PasswordManager, TokenIssuer, generate_token_id
from db.models import User
from session.models import LoginResult, SessionRecord, TokenPair
from session.storage import SessionStore


logger = logging.getLogger(__name__)


class UserDirectory(Protocol):
    """User lookup and status updates the session layer needs from persistence."""

    async def get_by_username(self, username: str) -> Optional[User]: ...

    async def get_by_id(self, user_id: str) -> Optional[User]: ...

    async def record_login(
        self,
        user_id: str,
        client_ip: Optional[str],
        at: datetime,
    ) -> Optional[User]: ...

    async def set_online(self, user_id: str, online: bool) -> None: ...


class SessionManager:
    """
    ┌─────────────────────────────────────────────────────────────────────────┐
    │                    SESSION MANAGER                                       │
    │  One live session per user: login replaces, refresh rotates,            │
    │  logout clears                                                          │
    └─────────────────────────────────────────────────────────────────────────┘

    States per user:
        NoSession ──login──▶ Active(t1) ──refresh──▶ Active(t2)
        Active(t) ──login──▶ Active(t') ──logout──▶ NoSession

    Every transition writes a fresh index that fully supersedes the old
    one. No in-process lock is taken: concurrent requests for the same
    user resolve by last index write wins, and anything no longer named
    by the index is dead even if its entries have not expired yet.
    """

    def __init__(
        self,
        issuer: TokenIssuer,
        store: SessionStore,
        users: UserDirectory,
        passwords: PasswordManager,
    ):
        self._issuer = issuer
        self._store = store
        self._users = users
        self._passwords = passwords

    # =========================================================================
    # INTERNALS
    # =========================================================================

    async def _best_effort(self, action: str, operation: Awaitable[Any]) -> Any:
        """Await a side operation whose failure must not abort the caller."""
        try:
            return await operation
        except Exception as e:
            logger.warning(f"Best-effort step '{action}' failed: {e}")
            return None

    def _mint(self, user: User) -> SessionRecord:
        """Issue a new token pair bound to a fresh token id."""
        issued_at = datetime.now(timezone.utc)
        return SessionRecord(
            token_id=generate_token_id(user.id),
            user_id=user.id,
            access_token=self._issuer.issue_access(user),
            refresh_token=self._issuer.issue_refresh(user),
            issued_at=issued_at,
            access_expires_at=issued_at + timedelta(seconds=self._issuer.access_ttl),
            refresh_expires_at=issued_at + timedelta(seconds=self._issuer.refresh_ttl),
        )

    async def _persist(self, record: SessionRecord) -> None:
        await self._store.put_session(
            token_id=record.token_id,
            user_id=record.user_id,
            access_token=record.access_token,
            refresh_token=record.refresh_token,
            access_ttl=self._issuer.access_ttl,
            refresh_ttl=self._issuer.refresh_ttl,
        )

    async def revoke_all(self, user_id: str) -> int:
        """
        Delete every indexed session of a user, then the index itself.

        Returns:
            int: Number of token ids that were indexed
        """
        token_ids = await self._store.get_active_index(user_id)
        for token_id in token_ids:
            await self._store.delete_session(token_id)
        await self._store.clear_active_index(user_id)
        return len(token_ids)

    # =========================================================================
    # LOGIN
    # =========================================================================

    async def login(
        self,
        username: str,
        password: str,
        client_ip: Optional[str] = None,
    ) -> LoginResult:
        """
        Authenticate and open the user's only session.

        Any session the user already had is revoked first.

        Raises:
            AuthFailedError: Unknown user, wrong password or disabled account
            CacheUnavailableError: If the new session cannot be stored
        """
        user = await self._users.get_by_username(username)
        if user is None:
            raise AuthFailedError()

        is_valid, _ = self._passwords.verify_password(password, user.password_hash)
        if not is_valid or not user.is_active:
            raise AuthFailedError()

        updated = await self._best_effort(
            "record login",
            self._users.record_login(user.id, client_ip, datetime.now(timezone.utc)),
        )
        if updated is not None:
            user = updated

        await self.revoke_all(user.id)

        record = self._mint(user)
        await self._persist(record)
        await self._store.set_active_index(
            user.id, [record.token_id], ttl=self._issuer.refresh_ttl
        )

        logger.info(f"User {user.id} logged in from {client_ip or 'unknown'}")

        return LoginResult(
            user=UserResponse.model_validate(user),
            access_token=record.access_token,
            refresh_token=record.refresh_token,
            expires_in=self._issuer.access_ttl,
        )

    # =========================================================================
    # REFRESH
    # =========================================================================

    async def _find_session(self, index: List[str], user_id: str, refresh_token: str) -> Optional[str]:
        for token_id in index:
            entry = await self._store.get_refresh_entry(token_id)
            if entry is None or entry.user_id != user_id:
                continue
            if hmac.compare_digest(entry.refresh_token, refresh_token):
                return token_id
        return None

    async def refresh_token(self, refresh_token: str) -> TokenPair:
        """
        Exchange a live refresh token for a new pair.

        The presented token must be the exact string stored for one of the
        user's indexed sessions. That session is replaced in place and the
        presented token can never be used again.

        Raises:
            TokenExpiredError: If the refresh token's signature has expired
            TokenInvalidError: Bad signature, no live session, replay, or
                               any unexpected failure
            AuthFailedError: If the token's user no longer exists
        """
        try:
            claims = self._issuer.verify_refresh(refresh_token)
        except TokenInvalidError as e:
            logger.info(f"Rejected refresh token: {e.details}")
            raise TokenInvalidError()

        try:
            user = await self._users.get_by_id(claims.user_id)
            if user is None:
                raise AuthFailedError()

            index = await self._store.get_active_index(user.id)
            if not index:
                raise TokenInvalidError()

            matched = await self._find_session(index, user.id, refresh_token)
            if matched is None:
                raise TokenInvalidError()

            record = self._mint(user)
            await self._persist(record)
            await self._store.delete_session(matched)

            rotated = [record.token_id if token_id == matched else token_id for token_id in index]
            await self._store.set_active_index(user.id, rotated, ttl=self._issuer.refresh_ttl)

        except (AuthFailedError, TokenInvalidError, TokenExpiredError):
            raise
        except Exception:
            logger.exception(f"Token refresh failed for user {claims.user_id}")
            raise TokenInvalidError()

        logger.info(f"Rotated session for user {user.id}")

        return TokenPair(
            access_token=record.access_token,
            refresh_token=record.refresh_token,
            expires_in=self._issuer.access_ttl,
        )

    # =========================================================================
    # LOGOUT
    # =========================================================================

    async def logout(self, user_id: str) -> None:
        """
        Close every session of the user and mark them offline.

        Idempotent: a user with no session is a successful no-op.
        """
        revoked = await self.revoke_all(user_id)
        await self._best_effort("mark offline", self._users.set_online(user_id, False))
        logger.info(f"User {user_id} logged out ({revoked} session(s) closed)")
