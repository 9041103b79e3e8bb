# =============================================================================
# USERHUB BACKEND - SESSION STORAGE
# =============================================================================
# File: session/storage.py
# Description: Maps users to their live token pairs in Redis
#              Two TTL'd entries per session plus one index per user
# =============================================================================

from typing import List, Optional, Sequence
import logging

from pydantic import ValidationError as PydanticValidationError

from db.adapters.redis_adapter import RedisAdapter
from session.models import AccessEntry, RefreshEntry


logger = logging.getLogger(__name__)


class SessionStore:
    """
    ┌─────────────────────────────────────────────────────────────────────────┐
    │                    SESSION STORE                                         │
    │  Redis-backed record of which token pairs are live for which user       │
    │  Every method may raise CacheUnavailableError                           │
    └─────────────────────────────────────────────────────────────────────────┘

    Key Patterns:
        - access_token:{token_id}   → AccessEntry JSON, TTL = access lifetime
        - refresh_token:{token_id}  → RefreshEntry JSON, TTL = refresh lifetime
        - user:{user_id}:tokens     → JSON list of token ids, oldest first

    There are no cross-key transactions. A token id is only live while it
    is named by the user's index AND its entries still exist, so a
    half-written or half-deleted session reads as invalid.
    """

    ACCESS_PREFIX = "access_token:"
    REFRESH_PREFIX = "refresh_token:"

    def __init__(self, redis: RedisAdapter):
        self._redis = redis

    @classmethod
    def _access_key(cls, token_id: str) -> str:
        return f"{cls.ACCESS_PREFIX}{token_id}"

    @classmethod
    def _refresh_key(cls, token_id: str) -> str:
        return f"{cls.REFRESH_PREFIX}{token_id}"

    @staticmethod
    def _index_key(user_id: str) -> str:
        return f"user:{user_id}:tokens"

    # =========================================================================
    # SESSION ENTRIES
    # =========================================================================

    async def put_session(
        self,
        token_id: str,
        user_id: str,
        access_token: str,
        refresh_token: str,
        access_ttl: int,
        refresh_ttl: int,
    ) -> None:
        """Write both halves of a session, each with its own TTL."""
        await self._redis.set_json(
            self._access_key(token_id),
            AccessEntry(user_id=user_id, access_token=access_token).model_dump(),
            ttl=access_ttl,
        )
        await self._redis.set_json(
            self._refresh_key(token_id),
            RefreshEntry(user_id=user_id, refresh_token=refresh_token).model_dump(),
            ttl=refresh_ttl,
        )

    async def get_access_entry(self, token_id: str) -> Optional[AccessEntry]:
        """Return the access half of a session, or None if absent/malformed."""
        raw = await self._redis.get_json(self._access_key(token_id))
        if raw is None:
            return None
        try:
            return AccessEntry.model_validate(raw)
        except PydanticValidationError:
            logger.warning(f"Discarding malformed access entry for token id {token_id}")
            return None

    async def get_refresh_entry(self, token_id: str) -> Optional[RefreshEntry]:
        """Return the refresh half of a session, or None if absent/malformed."""
        raw = await self._redis.get_json(self._refresh_key(token_id))
        if raw is None:
            return None
        try:
            return RefreshEntry.model_validate(raw)
        except PydanticValidationError:
            logger.warning(f"Discarding malformed refresh entry for token id {token_id}")
            return None

    async def delete_session(self, token_id: str) -> int:
        """
        Delete both halves of a session.

        Returns the number of entries that existed. Missing entries are
        not an error.
        """
        return await self._redis.delete(
            self._access_key(token_id),
            self._refresh_key(token_id),
        )

    # =========================================================================
    # ACTIVE INDEX
    # =========================================================================

    async def get_active_index(self, user_id: str) -> List[str]:
        """Token ids currently indexed for the user, oldest first."""
        raw = await self._redis.get_json(self._index_key(user_id))
        if not isinstance(raw, list):
            if raw is not None:
                logger.warning(f"Discarding malformed token index for user {user_id}")
            return []
        return [token_id for token_id in raw if isinstance(token_id, str)]

    async def set_active_index(
        self,
        user_id: str,
        token_ids: Sequence[str],
        ttl: int,
    ) -> None:
        """Overwrite the user's index. An empty sequence clears it."""
        if not token_ids:
            await self.clear_active_index(user_id)
            return
        await self._redis.set_json(self._index_key(user_id), list(token_ids), ttl=ttl)

    async def clear_active_index(self, user_id: str) -> None:
        """Remove the user's index entry."""
        await self._redis.delete(self._index_key(user_id))
