# =============================================================================
# USERHUB BACKEND - AUTH SERVICE
# =============================================================================
# File: auth/service.py
# Description: Registration and user management business logic
# =============================================================================

from typing import Optional
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from auth.repository import UserRepository
from auth.schemas import (
    RegisterRequest,
    RegisterResponse,
    RegisteredUser,
    UserResponse,
    UserUpdate,
    UserListResponse,
)
from core.exceptions import (
    PermissionDeniedError,
    ResourceExistsError,
    ResourceNotFoundError,
)
from core.security import PasswordManager
from session.manager import SessionManager


logger = logging.getLogger(__name__)


class AuthService:
    """
    ┌─────────────────────────────────────────────────────────────────────────┐
    │                    AUTH SERVICE                                          │
    │  Registration and user CRUD on top of the user repository              │
    └─────────────────────────────────────────────────────────────────────────┘

    Login, refresh and logout live in SessionManager; this service only
    touches sessions to close them when a user is deleted.
    """

    def __init__(
        self,
        session: AsyncSession,
        passwords: PasswordManager,
        sessions: SessionManager,
    ):
        self._session = session
        self._user_repo = UserRepository(session)
        self._passwords = passwords
        self._sessions = sessions

    # =========================================================================
    # REGISTRATION
    # =========================================================================

    async def register(self, data: RegisterRequest) -> RegisterResponse:
        """
        Register a new user.

        Raises:
            ResourceExistsError: If the username or email is taken
        """
        if await self._user_repo.username_exists(data.username):
            raise ResourceExistsError(field="username")
        if await self._user_repo.email_exists(data.email):
            raise ResourceExistsError(field="email")

        try:
            user = await self._user_repo.create(
                username=data.username,
                password_hash=self._passwords.hash_password(data.password),
                email=data.email,
            )
        except IntegrityError:
            # Lost a race with a concurrent registration
            raise ResourceExistsError(field="username")

        logger.info(f"Registered user {user.id} ({user.username})")
        return RegisterResponse(user=RegisteredUser.model_validate(user))

    # =========================================================================
    # USER MANAGEMENT
    # =========================================================================

    async def list_users(self, page: int = 1, limit: int = 20) -> UserListResponse:
        """Paginated user listing."""
        users = await self._user_repo.list_users(offset=(page - 1) * limit, limit=limit)
        total = await self._user_repo.count()
        return UserListResponse(
            items=[UserResponse.model_validate(u) for u in users],
            total=total,
            page=page,
            limit=limit,
        )

    async def get_user(self, user_id: str) -> UserResponse:
        """
        Raises:
            ResourceNotFoundError: If the user does not exist
        """
        user = await self._user_repo.get_by_id(user_id)
        if user is None:
            raise ResourceNotFoundError("User", user_id)
        return UserResponse.model_validate(user)

    async def update_user(
        self,
        actor_id: str,
        actor_role: str,
        user_id: str,
        data: UserUpdate,
    ) -> UserResponse:
        """
        Update a user. Users may edit themselves; admins may edit anyone.
        Only admins may change ``role`` or ``is_active``.

        Raises:
            PermissionDeniedError: If the actor may not make this change
            ResourceNotFoundError: If the user does not exist
            ResourceExistsError: If the new email is taken
        """
        is_admin = actor_role == "admin"
        if actor_id != user_id and not is_admin:
            raise PermissionDeniedError("You may only update your own account")

        fields = data.model_dump(exclude_unset=True)
        if not is_admin and ({"role", "is_active"} & fields.keys()):
            raise PermissionDeniedError("Only administrators may change role or status")

        user = await self._user_repo.get_by_id(user_id)
        if user is None:
            raise ResourceNotFoundError("User", user_id)

        password: Optional[str] = fields.pop("password", None)
        if password is not None:
            fields["password_hash"] = self._passwords.hash_password(password)

        email = fields.get("email")
        if email is not None:
            if await self._user_repo.email_exists(email, exclude_user_id=user_id):
                raise ResourceExistsError(field="email")
            fields["email"] = email.lower()

        user = await self._user_repo.update(user, **fields)
        return UserResponse.model_validate(user)

    async def delete_user(self, actor_id: str, actor_role: str, user_id: str) -> None:
        """
        Delete a user and close their sessions.

        Raises:
            PermissionDeniedError: If a non-admin deletes someone else
            ResourceNotFoundError: If the user does not exist
        """
        if actor_id != user_id and actor_role != "admin":
            raise PermissionDeniedError("You may only delete your own account")

        user = await self._user_repo.get_by_id(user_id)
        if user is None:
            raise ResourceNotFoundError("User", user_id)

        await self._sessions.revoke_all(user_id)
        await self._user_repo.delete(user)
        logger.info(f"User {user_id} deleted by {actor_id}")
