# =============================================================================
# USERHUB BACKEND - AUTH REPOSITORY
# =============================================================================
# File: auth/repository.py
# Description: Data access layer for user operations
#              Implements repository pattern with SQLAlchemy async
# =============================================================================

from typing import Any, Optional, List
from datetime import datetime

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from db.base import BaseDBAdapter
from db.models import User


class UserRepository:
    """
    ┌─────────────────────────────────────────────────────────────────────────┐
    │                    USER REPOSITORY                                       │
    │  Data access layer for User entity operations                           │
    │  Provides clean separation between business logic and data access       │
    └─────────────────────────────────────────────────────────────────────────┘

    All methods are async and work with SQLAlchemy AsyncSession.
    The repository does not handle transactions - that's the caller's
    responsibility.
    """

    def __init__(self, session: AsyncSession):
        self._session = session

    # =========================================================================
    # CREATE OPERATIONS
    # =========================================================================

    async def create(
        self,
        username: str,
        password_hash: str,
        email: Optional[str] = None,
        role: str = "user",
    ) -> User:
        """
        Create a new user.

        Returns:
            User: Created user entity
        """
        user = User(
            username=username,
            email=email.lower() if email else None,
            password_hash=password_hash,
            role=role,
        )

        self._session.add(user)
        await self._session.flush()
        await self._session.refresh(user)

        return user

    # =========================================================================
    # READ OPERATIONS
    # =========================================================================

    async def get_by_id(self, user_id: str) -> Optional[User]:
        """Get user by ID, None if not found."""
        result = await self._session.execute(
            select(User).where(User.id == user_id)
        )
        return result.scalar_one_or_none()

    async def get_by_username(self, username: str) -> Optional[User]:
        """Get user by exact username, None if not found."""
        result = await self._session.execute(
            select(User).where(User.username == username)
        )
        return result.scalar_one_or_none()

    async def username_exists(self, username: str) -> bool:
        """Check if username is already taken."""
        result = await self._session.execute(
            select(func.count()).select_from(User).where(User.username == username)
        )
        return result.scalar_one() > 0

    async def email_exists(self, email: str, exclude_user_id: Optional[str] = None) -> bool:
        """Check if email is already registered, optionally ignoring one user."""
        query = select(func.count()).select_from(User).where(User.email == email.lower())
        if exclude_user_id:
            query = query.where(User.id != exclude_user_id)
        result = await self._session.execute(query)
        return result.scalar_one() > 0

    async def list_users(self, offset: int = 0, limit: int = 20) -> List[User]:
        """List users, newest first."""
        result = await self._session.execute(
            select(User)
            .order_by(User.created_at.desc(), User.username)
            .offset(offset)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def count(self) -> int:
        """Total number of users."""
        result = await self._session.execute(select(func.count()).select_from(User))
        return result.scalar_one()

    # =========================================================================
    # UPDATE OPERATIONS
    # =========================================================================

    async def update(self, user: User, **fields: Any) -> User:
        """
        Apply field changes to a user.

        Args:
            user: Attached user entity
            **fields: Column values to set
        """
        for name, value in fields.items():
            setattr(user, name, value)

        await self._session.flush()
        await self._session.refresh(user)
        return user

    # =========================================================================
    # DELETE OPERATIONS
    # =========================================================================

    async def delete(self, user: User) -> None:
        """Permanently delete a user."""
        await self._session.delete(user)
        await self._session.flush()


class SqlUserDirectory:
    """
    User lookups for the session layer.

    Each call runs in its own short transaction, so the returned users are
    detached snapshots safe to read after the call returns.
    """

    def __init__(self, db: BaseDBAdapter):
        self._db = db

    async def get_by_username(self, username: str) -> Optional[User]:
        async with self._db.get_session() as session:
            return await UserRepository(session).get_by_username(username)

    async def get_by_id(self, user_id: str) -> Optional[User]:
        async with self._db.get_session() as session:
            return await UserRepository(session).get_by_id(user_id)

    async def record_login(
        self,
        user_id: str,
        client_ip: Optional[str],
        at: datetime,
    ) -> Optional[User]:
        """Mark the user online and stamp the login time and address."""
        async with self._db.get_session() as session:
            repo = UserRepository(session)
            user = await repo.get_by_id(user_id)
            if user is None:
                return None
            return await repo.update(
                user,
                is_online=True,
                last_login_time=at,
                last_login_ip=client_ip,
            )

    async def set_online(self, user_id: str, online: bool) -> None:
        async with self._db.get_session() as session:
            repo = UserRepository(session)
            user = await repo.get_by_id(user_id)
            if user is not None:
                await repo.update(user, is_online=online)
