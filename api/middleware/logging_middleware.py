# =============================================================================
# USERHUB BACKEND - REQUEST LOGGING MIDDLEWARE
# =============================================================================
# File: api/middleware/logging_middleware.py
# Description: Request ID propagation and per-request access logging
# =============================================================================

import logging
import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from auth.dependencies import get_client_ip
from core.logging_config import request_id_var


logger = logging.getLogger(__name__)


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    ┌─────────────────────────────────────────────────────────────────────────┐
    │                    REQUEST ID MIDDLEWARE                                 │
    │  Reuses the caller's X-Request-ID or generates one, exposes it on       │
    │  request.state and to log records, and echoes it on the response       │
    └─────────────────────────────────────────────────────────────────────────┘
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable,
    ) -> Response:
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        request.state.request_id = request_id
        token = request_id_var.set(request_id)

        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)

        response.headers["X-Request-ID"] = request_id
        return response


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    ┌─────────────────────────────────────────────────────────────────────────┐
    │                    LOGGING MIDDLEWARE                                    │
    │  Logs method, path, status, duration and client IP for every request   │
    └─────────────────────────────────────────────────────────────────────────┘
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable,
    ) -> Response:
        start_time = time.perf_counter()

        method = request.method
        path = request.url.path
        client_ip = get_client_ip(request)
        request_id = getattr(request.state, "request_id", "unknown")

        try:
            response = await call_next(request)
        except Exception as e:
            duration_ms = round((time.perf_counter() - start_time) * 1000, 2)
            logger.error(
                f"{method} {path} - ERROR - {duration_ms}ms - "
                f"IP: {client_ip} - RequestID: {request_id} - {e}"
            )
            raise

        duration_ms = round((time.perf_counter() - start_time) * 1000, 2)
        level = logging.INFO if response.status_code < 400 else logging.WARNING
        logger.log(
            level,
            f"{method} {path} - {response.status_code} - {duration_ms}ms - "
            f"IP: {client_ip} - RequestID: {request_id}"
        )
        response.headers["X-Response-Time"] = f"{duration_ms}ms"
        return response
