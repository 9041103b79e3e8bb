# =============================================================================
# USERHUB BACKEND - AUTH ROUTES
# =============================================================================
# File: api/v1/auth_routes.py
# Description: Registration, login, token refresh and logout endpoints
# =============================================================================

from fastapi import APIRouter, status

from auth.schemas import (
    RegisterRequest,
    RegisterResponse,
    LoginRequest,
    LoginResponse,
    RefreshRequest,
    TokenResponse,
    MessageResponse,
    UserResponse,
)
from auth.dependencies import (
    AuthServiceDep,
    ClientIP,
    CurrentAuth,
    SessionManagerDep,
)


router = APIRouter(prefix="/auth", tags=["Authentication"])


# =============================================================================
# REGISTRATION
# =============================================================================

@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
    responses={409: {"description": "Username or email already registered"}},
)
async def register(
    data: RegisterRequest,
    auth_service: AuthServiceDep,
) -> RegisterResponse:
    """
    Register a new user account.

    - **username**: 3-50 characters, starts with a letter
    - **password**: at least 6 characters with an uppercase letter and a digit
    - **email**: valid email address
    """
    return await auth_service.register(data)


# =============================================================================
# LOGIN / REFRESH / LOGOUT
# =============================================================================

@router.post(
    "/login",
    response_model=LoginResponse,
    summary="Log in",
    description="Authenticate and open a session. Any previous session of the user is closed.",
    responses={401: {"description": "Invalid username or password"}},
)
async def login(
    credentials: LoginRequest,
    client_ip: ClientIP,
    sessions: SessionManagerDep,
) -> LoginResponse:
    result = await sessions.login(
        username=credentials.username,
        password=credentials.password,
        client_ip=client_ip,
    )
    return LoginResponse(
        user=result.user,
        access_token=result.access_token,
        refresh_token=result.refresh_token,
        expires_in=result.expires_in,
    )


@router.post(
    "/refresh",
    response_model=TokenResponse,
    summary="Refresh tokens",
    description="Exchange a refresh token for a new token pair. The old pair stops working.",
    responses={401: {"description": "Invalid or expired refresh token"}},
)
async def refresh_tokens(
    data: RefreshRequest,
    sessions: SessionManagerDep,
) -> TokenResponse:
    pair = await sessions.refresh_token(data.refresh_token)
    return TokenResponse(
        access_token=pair.access_token,
        refresh_token=pair.refresh_token,
        expires_in=pair.expires_in,
    )


@router.post(
    "/logout",
    response_model=MessageResponse,
    summary="Log out",
    description="Close the current user's session.",
)
async def logout(
    auth: CurrentAuth,
    sessions: SessionManagerDep,
) -> MessageResponse:
    await sessions.logout(auth.user_id)
    return MessageResponse(message="Logged out successfully", success=True)


@router.get(
    "/me",
    response_model=UserResponse,
    summary="Get current user",
)
async def get_me(
    auth: CurrentAuth,
    auth_service: AuthServiceDep,
) -> UserResponse:
    """Profile of the authenticated caller."""
    return await auth_service.get_user(auth.user_id)
