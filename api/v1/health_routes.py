# =============================================================================
# USERHUB BACKEND - HEALTH ROUTES
# =============================================================================
# File: api/v1/health_routes.py
# Description: Health checks for orchestration plus Redis cache inspection
#              and cleanup endpoints for administrators
# =============================================================================

from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional
import logging

from fastapi import APIRouter, Query
from pydantic import BaseModel, Field, model_validator

from auth.dependencies import AdminAuth, Container, Redis
from core.exceptions import CacheUnavailableError, DatabaseError
from db.adapters.redis_adapter import RedisAdapter


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["Health"])


# =============================================================================
# RESPONSE MODELS
# =============================================================================

class HealthResponse(BaseModel):
    """Health check response model."""
    status: str = Field(..., description="Overall status: healthy, degraded")
    timestamp: datetime = Field(..., description="Check timestamp")
    version: str = Field(..., description="Application version")
    environment: str = Field(..., description="Environment name")


class DetailedHealthResponse(HealthResponse):
    """Detailed health check with component statuses."""
    components: Dict[str, Dict[str, Any]] = Field(
        default_factory=dict,
        description="Individual component health"
    )


class CacheEntry(BaseModel):
    key: str
    value: Any = None
    ttl: int


class CacheStats(BaseModel):
    total_keys: int


class CacheListResponse(BaseModel):
    status: Literal["UP", "DOWN"]
    connected: bool
    timestamp: datetime
    pattern: str
    cache_stats: Optional[CacheStats] = None
    redis_list: List[CacheEntry] = Field(default_factory=list)


class CacheKeyResponse(BaseModel):
    status: Literal["UP", "DOWN"]
    connected: bool
    timestamp: datetime
    key: str
    exists: bool = False
    ttl: Optional[str] = None
    value: Any = None


class CacheDeleteRequest(BaseModel):
    """Keys win over pattern when both are given."""
    keys: Optional[List[str]] = None
    pattern: Optional[str] = None
    prefix: Optional[str] = None

    @model_validator(mode="after")
    def require_keys_or_pattern(self) -> "CacheDeleteRequest":
        if not self.keys and not self.pattern:
            raise ValueError("Either keys or pattern must be provided")
        return self


class CacheMultiDeleteRequest(BaseModel):
    keys: List[str] = Field(..., min_length=1)
    prefix: Optional[str] = None


class KeyDeletion(BaseModel):
    key: str
    deleted: bool
    message: str


class CacheDeleteResponse(BaseModel):
    status: Literal["SUCCESS", "PARTIAL_SUCCESS", "PARTIAL_FAILURE", "NOT_FOUND", "DOWN"]
    connected: bool
    timestamp: datetime
    message: str
    pattern: Optional[str] = None
    total_keys: int = 0
    deleted_keys: int = 0
    not_found_keys: int = 0
    failed_keys: int = 0
    details: List[KeyDeletion] = Field(default_factory=list)


# =============================================================================
# HELPERS
# =============================================================================

def _now() -> datetime:
    return datetime.now(timezone.utc)


def _full_key(key: str, prefix: Optional[str]) -> str:
    return f"{prefix}:{key}" if prefix else key


def describe_ttl(ttl: int) -> str:
    """Human-readable form of a Redis TTL reply."""
    if ttl == -1:
        return "Never expires"
    if ttl == -2:
        return "Key does not exist"
    return f"{ttl} seconds"


def deletion_status(total: int, deleted: int, failed: int) -> str:
    if total and deleted == total:
        return "SUCCESS"
    if deleted > 0:
        return "PARTIAL_SUCCESS"
    if failed > 0:
        return "PARTIAL_FAILURE"
    return "NOT_FOUND"


async def _delete_keys(
    redis: RedisAdapter,
    keys: Optional[List[str]],
    pattern: Optional[str],
    prefix: Optional[str],
) -> CacheDeleteResponse:
    if not await redis.check_health():
        return CacheDeleteResponse(
            status="DOWN",
            connected=False,
            timestamp=_now(),
            message="Redis connection is not available",
            pattern=pattern,
        )

    if keys:
        targets = [_full_key(k, prefix) for k in keys]
    else:
        targets = await redis.scan_keys(pattern or "*")

    if not targets:
        return CacheDeleteResponse(
            status="NOT_FOUND",
            connected=True,
            timestamp=_now(),
            message=f"No keys found matching pattern: {pattern}" if pattern else "No keys to delete",
            pattern=pattern,
        )

    details: List[KeyDeletion] = []
    for key in targets:
        try:
            removed = await redis.delete(key)
        except CacheUnavailableError as e:
            details.append(KeyDeletion(key=key, deleted=False, message=f"Failed to delete: {e.message}"))
            continue
        if removed:
            details.append(KeyDeletion(key=key, deleted=True, message="Deleted successfully"))
        else:
            details.append(KeyDeletion(key=key, deleted=False, message="Key does not exist"))

    deleted = sum(1 for d in details if d.deleted)
    failed = sum(1 for d in details if d.message.startswith("Failed"))
    not_found = len(details) - deleted - failed

    logger.info(f"Cache cleanup removed {deleted}/{len(details)} key(s)")

    return CacheDeleteResponse(
        status=deletion_status(len(details), deleted, failed),
        connected=True,
        timestamp=_now(),
        message=f"Deleted {deleted} out of {len(details)} keys",
        pattern=pattern,
        total_keys=len(details),
        deleted_keys=deleted,
        not_found_keys=not_found,
        failed_keys=failed,
        details=details,
    )


# =============================================================================
# HEALTH ENDPOINTS
# =============================================================================

@router.get(
    "",
    response_model=HealthResponse,
    summary="Basic health check",
    description="Quick health check for load balancers.",
)
async def health_check(container: Container) -> HealthResponse:
    """
    Basic health check.

    Returns minimal health status for load balancer probes.
    This endpoint should be fast and not check dependencies.
    """
    return HealthResponse(
        status="healthy",
        timestamp=_now(),
        version=container.settings.app_version,
        environment=container.settings.app_env,
    )


@router.get(
    "/live",
    response_model=HealthResponse,
    summary="Liveness check",
)
async def liveness_check(container: Container) -> HealthResponse:
    """Simple check that the process is running."""
    return HealthResponse(
        status="healthy",
        timestamp=_now(),
        version=container.settings.app_version,
        environment=container.settings.app_env,
    )


@router.get(
    "/ready",
    response_model=DetailedHealthResponse,
    summary="Readiness check",
    description="Check if the service is ready to handle requests.",
)
async def readiness_check(container: Container) -> DetailedHealthResponse:
    """
    Readiness check.

    Verifies the database and Redis answer. Sessions cannot be created
    while Redis is down, so either failure reports ``degraded``.
    """
    components: Dict[str, Dict[str, Any]] = {}
    overall_status = "healthy"

    try:
        await container.db.ping()
        components["database"] = {"status": "healthy", "type": container.settings.db_type}
    except DatabaseError as e:
        logger.warning(f"Database readiness check failed: {e.details}")
        components["database"] = {"status": "unhealthy", "error": e.message}
        overall_status = "degraded"

    if await container.redis.check_health():
        components["redis"] = {"status": "healthy"}
    else:
        components["redis"] = {"status": "unhealthy"}
        overall_status = "degraded"

    return DetailedHealthResponse(
        status=overall_status,
        timestamp=_now(),
        version=container.settings.app_version,
        environment=container.settings.app_env,
        components=components,
    )


# =============================================================================
# CACHE INSPECTION (ADMIN)
# =============================================================================

@router.get(
    "/redis/list",
    response_model=CacheListResponse,
    summary="List cache entries",
)
async def list_cache(
    admin: AdminAuth,
    redis: Redis,
    pattern: str = Query("*"),
) -> CacheListResponse:
    """All keys matching ``pattern`` with their decoded values and TTLs."""
    if not await redis.check_health():
        return CacheListResponse(status="DOWN", connected=False, timestamp=_now(), pattern=pattern)

    keys = await redis.scan_keys(pattern)
    entries: List[CacheEntry] = []
    for key in keys:
        entries.append(CacheEntry(key=key, value=await redis.get_json(key), ttl=await redis.ttl(key)))

    return CacheListResponse(
        status="UP",
        connected=True,
        timestamp=_now(),
        pattern=pattern,
        cache_stats=CacheStats(total_keys=len(keys)),
        redis_list=entries,
    )


@router.get(
    "/redis/{key}",
    response_model=CacheKeyResponse,
    summary="Inspect one cache entry",
)
async def get_cache_entry(
    key: str,
    admin: AdminAuth,
    redis: Redis,
    prefix: Optional[str] = Query(None),
) -> CacheKeyResponse:
    full_key = _full_key(key, prefix)
    if not await redis.check_health():
        return CacheKeyResponse(status="DOWN", connected=False, timestamp=_now(), key=full_key)

    exists = await redis.exists(full_key)
    return CacheKeyResponse(
        status="UP",
        connected=True,
        timestamp=_now(),
        key=full_key,
        exists=exists,
        ttl=describe_ttl(await redis.ttl(full_key)),
        value=await redis.get_json(full_key) if exists else None,
    )


@router.delete(
    "/redis/{key}",
    response_model=CacheDeleteResponse,
    summary="Delete one cache entry",
)
async def delete_cache_entry(
    key: str,
    admin: AdminAuth,
    redis: Redis,
    prefix: Optional[str] = Query(None),
) -> CacheDeleteResponse:
    return await _delete_keys(redis, [key], None, prefix)


@router.post(
    "/redis/delete",
    response_model=CacheDeleteResponse,
    summary="Delete cache entries by keys or pattern",
)
async def delete_cache_entries(
    body: CacheDeleteRequest,
    admin: AdminAuth,
    redis: Redis,
) -> CacheDeleteResponse:
    if body.keys:
        return await _delete_keys(redis, body.keys, None, body.prefix)
    return await _delete_keys(redis, None, body.pattern, None)


@router.post(
    "/redis/delete-multiple",
    response_model=CacheDeleteResponse,
    summary="Delete several cache entries",
)
async def delete_multiple_cache_entries(
    body: CacheMultiDeleteRequest,
    admin: AdminAuth,
    redis: Redis,
) -> CacheDeleteResponse:
    return await _delete_keys(redis, body.keys, None, body.prefix)
