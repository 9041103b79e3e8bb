# =============================================================================
# USERHUB BACKEND - TEST HELPERS
# =============================================================================
# File: tests/helpers.py
# Description: Fakes and HTTP shortcuts shared by the test modules
# =============================================================================

from datetime import datetime
from typing import Dict, Optional
from uuid import uuid4

from fastapi.testclient import TestClient

from auth.repository import UserRepository
from core.security import PasswordManager
from db.models import User


PASSWORD = "Secret123"
API = "/api/v1"


class InMemoryUserDirectory:
    """UserDirectory over a dict, for exercising the session layer alone."""

    def __init__(self, passwords: PasswordManager):
        self._passwords = passwords
        self.users: Dict[str, User] = {}

    def add(self, username: str, password: str = PASSWORD, **fields) -> User:
        user = User(
            id=str(uuid4()),
            username=username,
            email=f"{username}@example.com",
            password_hash=self._passwords.hash_password(password),
            role=fields.pop("role", "user"),
            is_active=fields.pop("is_active", True),
            is_online=False,
            **fields,
        )
        self.users[user.id] = user
        return user

    async def get_by_username(self, username: str) -> Optional[User]:
        return next((u for u in self.users.values() if u.username == username), None)

    async def get_by_id(self, user_id: str) -> Optional[User]:
        return self.users.get(user_id)

    async def record_login(self, user_id: str, client_ip: Optional[str], at: datetime) -> Optional[User]:
        user = self.users.get(user_id)
        if user is not None:
            user.is_online = True
            user.last_login_ip = client_ip
            user.last_login_time = at
        return user

    async def set_online(self, user_id: str, online: bool) -> None:
        user = self.users.get(user_id)
        if user is not None:
            user.is_online = online


class FlakyUserDirectory(InMemoryUserDirectory):
    """Directory whose status writes always fail; lookups still work."""

    async def record_login(self, user_id: str, client_ip: Optional[str], at: datetime) -> Optional[User]:
        raise ConnectionError("user table is locked")

    async def set_online(self, user_id: str, online: bool) -> None:
        raise ConnectionError("user table is locked")


# =============================================================================
# HTTP SHORTCUTS
# =============================================================================

def register(client: TestClient, username: str, password: str = PASSWORD, email: Optional[str] = None):
    return client.post(
        f"{API}/auth/register",
        json={"username": username, "password": password, "email": email or f"{username}@example.com"},
    )


def login(client: TestClient, username: str, password: str = PASSWORD):
    return client.post(f"{API}/auth/login", json={"username": username, "password": password})


def bearer(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def promote_to_admin(client: TestClient, user_id: str) -> None:
    """Give a registered user the admin role directly in the database."""

    async def _promote():
        container = client.app.state.container
        async with container.db.get_session() as session:
            repo = UserRepository(session)
            user = await repo.get_by_id(user_id)
            await repo.update(user, role="admin")

    client.portal.call(_promote)
