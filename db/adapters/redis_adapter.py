# =============================================================================
# USERHUB BACKEND - REDIS ADAPTER
# =============================================================================
# File: db/adapters/redis_adapter.py
# Description: Key-value client used for session storage and cache
#              inspection. Every call is time-bounded and failures surface
#              as CacheUnavailableError
# =============================================================================

from typing import Any, Awaitable, Callable, List, Optional, TypeVar
import asyncio
import json
import logging

from redis.asyncio import Redis, ConnectionPool
from redis.exceptions import RedisError

from core.config import Settings
from core.exceptions import CacheUnavailableError


logger = logging.getLogger(__name__)

T = TypeVar("T")


class RedisAdapter:
    """
    ┌─────────────────────────────────────────────────────────────────────────┐
    │                    REDIS ADAPTER                                         │
    │  String keys with optional namespace prefix and per-key TTL (EX)        │
    │  Bounded calls: no operation waits longer than the operation timeout    │
    └─────────────────────────────────────────────────────────────────────────┘

    Key Patterns:
        - access_token:{token_id}   → JSON {user_id, access_token}
        - refresh_token:{token_id}  → JSON {user_id, refresh_token}
        - user:{user_id}:tokens     → JSON list of token ids

    The connection may be down at any time. Callers get
    ``CacheUnavailableError`` and decide how to degrade; the underlying
    pool reconnects on the next call.
    """

    def __init__(self, settings: Settings, client: Optional[Redis] = None):
        """
        Args:
            settings: Application settings
            client: Pre-built client (tests inject fakeredis here)
        """
        self._redis_url = settings.redis_url
        self._prefix = settings.redis_key_prefix
        self._timeout = settings.redis_operation_timeout
        self._options = {
            "max_connections": settings.redis_max_connections,
            "socket_timeout": settings.redis_socket_timeout,
            "socket_connect_timeout": settings.redis_connect_timeout,
            "retry_on_timeout": True,
            "decode_responses": True,
        }

        self._pool: Optional[ConnectionPool] = None
        self._client: Optional[Redis] = client
        self._owns_client = client is None

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    async def connect(self) -> bool:
        """
        Create the connection pool and ping the server.

        Returns:
            True if the server answered. An unreachable server is logged
            and tolerated; later calls retry through the pool.
        """
        if self._client is None:
            self._pool = ConnectionPool.from_url(self._redis_url, **self._options)
            self._client = Redis(connection_pool=self._pool)

        healthy = await self.check_health()
        if healthy:
            logger.info("Redis connection established")
        else:
            logger.warning("Redis is unreachable; sessions will fail closed until it recovers")
        return healthy

    async def disconnect(self) -> None:
        """Close the client and pool this adapter created."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

        if self._pool is not None:
            await self._pool.disconnect()
            self._pool = None

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _key(self, key: str) -> str:
        return f"{self._prefix}:{key}" if self._prefix else key

    def _strip(self, full_key: str) -> str:
        if self._prefix and full_key.startswith(f"{self._prefix}:"):
            return full_key[len(self._prefix) + 1:]
        return full_key

    async def _call(self, operation: str, command: Callable[[Redis], Awaitable[T]]) -> T:
        if self._client is None:
            raise CacheUnavailableError(
                message="Redis client is not initialised",
                details={"operation": operation},
            )
        try:
            return await asyncio.wait_for(command(self._client), timeout=self._timeout)
        except (RedisError, asyncio.TimeoutError, OSError) as e:
            raise CacheUnavailableError(
                details={"operation": operation, "error": str(e) or type(e).__name__}
            )

    @property
    def prefix(self) -> str:
        """Namespace prepended to every key."""
        return self._prefix

    # =========================================================================
    # STRING OPERATIONS
    # =========================================================================

    async def get(self, key: str) -> Optional[str]:
        """Get string value by key, None if absent."""
        return await self._call("get", lambda c: c.get(self._key(key)))

    async def set(self, key: str, value: str, ttl: Optional[int] = None) -> bool:
        """
        Set a string value, expiring after ``ttl`` seconds when given.

        A non-positive TTL means the value is already expired, so nothing
        is stored and False is returned.
        """
        if ttl is not None and ttl <= 0:
            return False
        result = await self._call("set", lambda c: c.set(self._key(key), value, ex=ttl))
        return bool(result)

    async def delete(self, *keys: str) -> int:
        """Delete keys, returning how many existed."""
        if not keys:
            return 0
        full_keys = [self._key(k) for k in keys]
        return await self._call("delete", lambda c: c.delete(*full_keys))

    async def exists(self, key: str) -> bool:
        """Check if key exists."""
        return await self._call("exists", lambda c: c.exists(self._key(key))) > 0

    async def ttl(self, key: str) -> int:
        """Remaining TTL in seconds: -1 if no TTL, -2 if key doesn't exist."""
        return await self._call("ttl", lambda c: c.ttl(self._key(key)))

    # =========================================================================
    # JSON HELPERS
    # =========================================================================

    async def get_json(self, key: str) -> Any:
        """Get and decode a JSON value; non-JSON values are returned raw."""
        raw = await self.get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            return raw

    async def set_json(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        """Encode ``value`` as JSON and store it."""
        return await self.set(key, json.dumps(value), ttl)

    # =========================================================================
    # KEYSPACE
    # =========================================================================

    async def scan_keys(self, pattern: str = "*") -> List[str]:
        """
        List keys matching ``pattern`` inside this adapter's namespace.

        Uses SCAN rather than KEYS; returned keys have the prefix removed.
        """
        async def collect(client: Redis) -> List[str]:
            return [key async for key in client.scan_iter(match=self._key(pattern), count=100)]

        keys = await self._call("scan", collect)
        return sorted(self._strip(k) for k in keys)

    # =========================================================================
    # HEALTH
    # =========================================================================

    async def ping(self) -> bool:
        """Ping the server. Raises CacheUnavailableError when unreachable."""
        return bool(await self._call("ping", lambda c: c.ping()))

    async def check_health(self) -> bool:
        """Ping without raising."""
        try:
            return await self.ping()
        except CacheUnavailableError:
            return False
