# =============================================================================
# API V1 MODULE INITIALIZATION
# =============================================================================
# File: api/v1/__init__.py
# Description: API v1 module exports and router aggregation
# =============================================================================

from fastapi import APIRouter

from api.v1.auth_routes import router as auth_router
from api.v1.user_routes import router as user_router
from api.v1.upload_routes import router as upload_router
from api.v1.health_routes import router as health_router


def build_api_router(prefix: str = "/api/v1") -> APIRouter:
    """Aggregate the versioned routers under ``prefix``."""
    api_router = APIRouter(prefix=prefix)
    api_router.include_router(auth_router)
    api_router.include_router(user_router)
    api_router.include_router(upload_router)
    return api_router


__all__ = [
    "build_api_router",
    "auth_router",
    "user_router",
    "upload_router",
    "health_router",
]
