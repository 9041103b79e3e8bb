# =============================================================================
# USERHUB BACKEND - AUTH DEPENDENCIES
# =============================================================================
# File: auth/dependencies.py
# Description: FastAPI dependencies resolving collaborators from the
#              bootstrap container and authenticating protected routes
# =============================================================================

from typing import Annotated, AsyncGenerator, Optional

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from auth.gate import AuthContext
from auth.service import AuthService
from core.bootstrap import AppContainer
from core.config import Settings
from core.exceptions import PermissionDeniedError
from db.adapters.redis_adapter import RedisAdapter
from session.manager import SessionManager
from upload.service import UploadService


# =============================================================================
# CONTAINER
# =============================================================================

def get_container(request: Request) -> AppContainer:
    """Collaborators composed at startup by ``bootstrap``."""
    return request.app.state.container


Container = Annotated[AppContainer, Depends(get_container)]


def get_app_settings(container: Container) -> Settings:
    return container.settings


AppSettings = Annotated[Settings, Depends(get_app_settings)]


def get_session_manager(container: Container) -> SessionManager:
    return container.session_manager


SessionManagerDep = Annotated[SessionManager, Depends(get_session_manager)]


def get_redis(container: Container) -> RedisAdapter:
    return container.redis


Redis = Annotated[RedisAdapter, Depends(get_redis)]


# =============================================================================
# DATABASE DEPENDENCIES
# =============================================================================

async def get_db_session(container: Container) -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency for database session.

    Yields:
        AsyncSession: Database session with auto-commit/rollback
    """
    async with container.db.get_session() as session:
        yield session


DBSession = Annotated[AsyncSession, Depends(get_db_session)]


# =============================================================================
# SERVICE DEPENDENCIES
# =============================================================================

def get_auth_service(session: DBSession, container: Container) -> AuthService:
    return AuthService(session, container.passwords, container.session_manager)


AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]


def get_upload_service(session: DBSession, container: Container) -> UploadService:
    return UploadService(session, container.settings)


UploadServiceDep = Annotated[UploadService, Depends(get_upload_service)]


# =============================================================================
# REQUEST CONTEXT
# =============================================================================

def get_client_ip(request: Request) -> str:
    """
    Extract client IP from request.

    Handles proxy headers (X-Forwarded-For, X-Real-IP).
    """
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        # Take first IP in chain
        return forwarded_for.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip.strip()

    return request.client.host if request.client else "unknown"


ClientIP = Annotated[str, Depends(get_client_ip)]


# =============================================================================
# AUTHENTICATION
# =============================================================================

async def get_auth_context(
    container: Container,
    client_ip: ClientIP,
    authorization: Optional[str] = Header(None, alias="Authorization"),
) -> AuthContext:
    """
    Authenticate the request through the auth gate.

    Raises:
        UnauthorizedError: If the bearer token is missing, invalid or not live
    """
    return await container.auth_gate.authenticate(authorization, client_ip=client_ip)


CurrentAuth = Annotated[AuthContext, Depends(get_auth_context)]


async def require_admin(auth: CurrentAuth) -> AuthContext:
    """
    Raises:
        PermissionDeniedError: If the caller is not an administrator
    """
    if not auth.is_admin:
        raise PermissionDeniedError("Administrator role required")
    return auth


AdminAuth = Annotated[AuthContext, Depends(require_admin)]
