# =============================================================================
# USERHUB BACKEND - MAIN APPLICATION
# =============================================================================
# File: main.py
# Description: FastAPI application entry point with lifecycle management
# =============================================================================

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Awaitable, Callable, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from api import build_api_router, health_router, LoggingMiddleware, RequestIDMiddleware
from core.bootstrap import AppContainer, bootstrap, shutdown
from core.config import Settings, get_settings
from core.exceptions import UserHubException


logger = logging.getLogger(__name__)

Bootstrapper = Callable[[Settings], Awaitable[AppContainer]]


def create_application(
    settings: Optional[Settings] = None,
    bootstrapper: Bootstrapper = bootstrap,
) -> FastAPI:
    """
    Create and configure FastAPI application.

    Args:
        settings: Settings to use (defaults to ``get_settings()``)
        bootstrapper: Coroutine building the container at startup

    Returns:
        FastAPI: Configured application instance
    """
    settings = settings or get_settings()

    # =========================================================================
    # APPLICATION LIFECYCLE
    # =========================================================================

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Startup: build every collaborator before requests are served.
        Shutdown: close database and Redis connections.
        """
        logger.info(f"Starting {settings.app_name} in {settings.app_env} mode")

        try:
            app.state.container = await bootstrapper(settings)
        except Exception as e:
            logger.error(f"Startup failed: {e}")
            raise

        logger.info(f"{settings.app_name} started successfully")

        yield

        logger.info(f"Shutting down {settings.app_name}")
        try:
            await shutdown(app.state.container)
        except Exception as e:
            logger.error(f"Shutdown error: {e}")
        logger.info(f"{settings.app_name} shutdown complete")

    app = FastAPI(
        title=settings.app_name,
        description="User backend with JWT sessions, file uploads and cache inspection",
        version=settings.app_version,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        openapi_url="/openapi.json" if settings.is_development else None,
        lifespan=lifespan,
    )

    # =========================================================================
    # MIDDLEWARE STACK (last added = outermost)
    # =========================================================================

    app.add_middleware(LoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Response-Time"],
    )

    # =========================================================================
    # EXCEPTION HANDLERS
    # =========================================================================

    @app.exception_handler(UserHubException)
    async def userhub_exception_handler(
        request: Request,
        exc: UserHubException,
    ) -> JSONResponse:
        """Handle application exceptions."""
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.error_code} {exc.message}")
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.to_dict(),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request,
        exc: StarletteHTTPException,
    ) -> JSONResponse:
        """Handle standard HTTP exceptions."""
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": True,
                "error_code": f"HTTP_{exc.status_code}",
                "message": exc.detail,
                "details": {},
            },
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.exception("Unhandled exception")

        # Don't expose internal errors in production
        if settings.is_production:
            message = "An internal error occurred"
        else:
            message = str(exc)

        return JSONResponse(
            status_code=500,
            content={
                "error": True,
                "error_code": "INTERNAL_ERROR",
                "message": message,
                "details": {},
            },
        )

    # =========================================================================
    # ROUTES
    # =========================================================================

    app.include_router(build_api_router(settings.api_prefix))

    # Health routes at root level
    app.include_router(health_router)

    # Uploaded files; the directory is created by bootstrap
    app.mount(
        settings.upload_url_prefix,
        StaticFiles(directory=Path(settings.upload_dir), check_dir=False),
        name="uploads",
    )

    @app.get("/", include_in_schema=False)
    async def root():
        """Root endpoint with API info."""
        return {
            "name": settings.app_name,
            "version": settings.app_version,
            "status": "running",
            "docs": "/docs" if settings.is_development else None,
        }

    return app


# =============================================================================
# APPLICATION INSTANCE
# =============================================================================

app = create_application()


# =============================================================================
# ENTRYPOINT
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    _settings = get_settings()
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=_settings.is_development,
        log_level=_settings.log_level.lower(),
    )
