# =============================================================================
# API MODULE INITIALIZATION
# =============================================================================
# File: api/__init__.py
# Description: API module exports
# =============================================================================

from api.v1 import build_api_router, health_router
from api.middleware import (
    RequestIDMiddleware,
    LoggingMiddleware,
)

__all__ = [
    "build_api_router",
    "health_router",
    "RequestIDMiddleware",
    "LoggingMiddleware",
]
