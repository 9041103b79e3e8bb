# =============================================================================
# MIDDLEWARE MODULE INITIALIZATION
# =============================================================================
# File: api/middleware/__init__.py
# Description: Middleware module exports
# =============================================================================

from api.middleware.logging_middleware import (
    RequestIDMiddleware,
    LoggingMiddleware,
)

__all__ = [
    "RequestIDMiddleware",
    "LoggingMiddleware",
]
