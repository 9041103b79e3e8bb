# =============================================================================
# USERHUB BACKEND - SESSION MANAGER TESTS
# =============================================================================
# File: tests/test_session_manager.py
# Description: Login, refresh rotation and logout over fakeredis with an
#              in-memory user directory
# =============================================================================

import asyncio

import pytest

from core.exceptions import (
    AuthFailedError,
    CacheUnavailableError,
    TokenExpiredError,
    TokenInvalidError,
)
from core.security import TokenCodec
from session.manager import SessionManager
from session.storage import SessionStore

from tests.helpers import PASSWORD, FlakyUserDirectory, InMemoryUserDirectory


class TestLogin:
    """Test suite for SessionManager.login."""

    async def test_login_opens_single_session(self, manager: SessionManager, users, store: SessionStore):
        alice = users.add("alice")

        result = await manager.login("alice", PASSWORD, client_ip="10.0.0.1")

        index = await store.get_active_index(alice.id)
        assert len(index) == 1
        assert index[0].startswith(f"{alice.id}:")
        assert (await store.get_access_entry(index[0])).access_token == result.access_token
        assert (await store.get_refresh_entry(index[0])).refresh_token == result.refresh_token
        assert result.user.username == "alice"
        assert result.expires_in == 7200

    async def test_login_records_client(self, manager: SessionManager, users: InMemoryUserDirectory):
        alice = users.add("alice")

        result = await manager.login("alice", PASSWORD, client_ip="10.0.0.1")

        assert alice.is_online is True
        assert result.user.last_login_ip == "10.0.0.1"

    async def test_wrong_password_fails(self, manager: SessionManager, users):
        users.add("alice")

        with pytest.raises(AuthFailedError):
            await manager.login("alice", "Wrong123")

    async def test_unknown_user_fails_the_same_way(self, manager: SessionManager):
        with pytest.raises(AuthFailedError) as exc_info:
            await manager.login("nobody", PASSWORD)

        assert exc_info.value.message == "Invalid username or password"

    async def test_inactive_user_fails(self, manager: SessionManager, users, store: SessionStore):
        bob = users.add("bob", is_active=False)

        with pytest.raises(AuthFailedError):
            await manager.login("bob", PASSWORD)
        assert await store.get_active_index(bob.id) == []

    async def test_second_login_revokes_first(self, manager: SessionManager, users, store: SessionStore):
        alice = users.add("alice")
        first = await manager.login("alice", PASSWORD)
        first_index = await store.get_active_index(alice.id)

        second = await manager.login("alice", PASSWORD)

        index = await store.get_active_index(alice.id)
        assert len(index) == 1
        assert index != first_index
        assert await store.get_access_entry(first_index[0]) is None
        assert await store.get_refresh_entry(first_index[0]) is None
        assert second.access_token != first.access_token

    async def test_login_during_outage_raises(self, manager: SessionManager, users, fake_server):
        users.add("alice")
        fake_server.connected = False

        with pytest.raises(CacheUnavailableError):
            await manager.login("alice", PASSWORD)

    async def test_concurrent_logins_leave_one_session(self, manager: SessionManager, users, store: SessionStore):
        alice = users.add("alice")

        first, second = await asyncio.gather(
            manager.login("alice", PASSWORD),
            manager.login("alice", PASSWORD),
        )

        index = await store.get_active_index(alice.id)
        assert len(index) == 1
        live = (await store.get_access_entry(index[0])).access_token
        assert live in (first.access_token, second.access_token)


class TestRefresh:
    """Test suite for SessionManager.refresh_token."""

    async def test_refresh_rotates_pair(self, manager: SessionManager, users, store: SessionStore):
        alice = users.add("alice")
        login = await manager.login("alice", PASSWORD)
        old_id = (await store.get_active_index(alice.id))[0]

        pair = await manager.refresh_token(login.refresh_token)

        index = await store.get_active_index(alice.id)
        assert len(index) == 1
        assert index[0] != old_id
        assert await store.get_refresh_entry(old_id) is None
        assert (await store.get_refresh_entry(index[0])).refresh_token == pair.refresh_token
        assert pair.access_token != login.access_token
        assert pair.refresh_token != login.refresh_token

    async def test_reused_refresh_token_is_rejected(self, manager: SessionManager, users):
        users.add("alice")
        login = await manager.login("alice", PASSWORD)
        await manager.refresh_token(login.refresh_token)

        with pytest.raises(TokenInvalidError):
            await manager.refresh_token(login.refresh_token)

    async def test_rotated_token_keeps_working(self, manager: SessionManager, users):
        users.add("alice")
        login = await manager.login("alice", PASSWORD)

        pair = await manager.refresh_token(login.refresh_token)
        again = await manager.refresh_token(pair.refresh_token)

        assert again.refresh_token != pair.refresh_token

    async def test_refresh_after_relogin_is_rejected(self, manager: SessionManager, users):
        users.add("alice")
        first = await manager.login("alice", PASSWORD)
        await manager.login("alice", PASSWORD)

        with pytest.raises(TokenInvalidError):
            await manager.refresh_token(first.refresh_token)

    async def test_refresh_after_logout_is_rejected(self, manager: SessionManager, users):
        alice = users.add("alice")
        login = await manager.login("alice", PASSWORD)
        await manager.logout(alice.id)

        with pytest.raises(TokenInvalidError):
            await manager.refresh_token(login.refresh_token)

    async def test_access_token_cannot_refresh(self, manager: SessionManager, users):
        users.add("alice")
        login = await manager.login("alice", PASSWORD)

        with pytest.raises(TokenInvalidError):
            await manager.refresh_token(login.access_token)

    async def test_unverifiable_token_carries_no_details(self, manager: SessionManager):
        with pytest.raises(TokenInvalidError) as exc_info:
            await manager.refresh_token("abc.def.ghi")

        assert exc_info.value.details == {}
        assert exc_info.value.message == TokenInvalidError().message

    async def test_expired_refresh_token(self, manager: SessionManager, users, settings):
        alice = users.add("alice")
        expired = TokenCodec.sign({"user_id": alice.id}, settings.jwt_refresh_secret, "HS256", ttl=0)

        with pytest.raises(TokenExpiredError):
            await manager.refresh_token(expired)

    async def test_deleted_user_cannot_refresh(self, manager: SessionManager, users):
        alice = users.add("alice")
        login = await manager.login("alice", PASSWORD)
        del users.users[alice.id]

        with pytest.raises(AuthFailedError):
            await manager.refresh_token(login.refresh_token)

    async def test_concurrent_refresh_yields_one_live_session(self, manager: SessionManager, users, store: SessionStore):
        alice = users.add("alice")
        login = await manager.login("alice", PASSWORD)

        results = await asyncio.gather(
            manager.refresh_token(login.refresh_token),
            manager.refresh_token(login.refresh_token),
            return_exceptions=True,
        )

        assert any(not isinstance(r, Exception) for r in results)
        assert len(await store.get_active_index(alice.id)) == 1

    async def test_refresh_during_outage_is_invalid(self, manager: SessionManager, users, fake_server):
        users.add("alice")
        login = await manager.login("alice", PASSWORD)
        fake_server.connected = False

        with pytest.raises(TokenInvalidError):
            await manager.refresh_token(login.refresh_token)


class TestLogout:
    """Test suite for SessionManager.logout."""

    async def test_logout_clears_everything(self, manager: SessionManager, users, store: SessionStore):
        alice = users.add("alice")
        await manager.login("alice", PASSWORD)
        token_id = (await store.get_active_index(alice.id))[0]

        await manager.logout(alice.id)

        assert await store.get_active_index(alice.id) == []
        assert await store.get_access_entry(token_id) is None
        assert alice.is_online is False

    async def test_logout_is_idempotent(self, manager: SessionManager, users):
        alice = users.add("alice")
        await manager.login("alice", PASSWORD)

        await manager.logout(alice.id)
        await manager.logout(alice.id)

    async def test_logout_leaves_other_users_alone(self, manager: SessionManager, users, store: SessionStore):
        alice = users.add("alice")
        bob = users.add("bob")
        await manager.login("alice", PASSWORD)
        await manager.login("bob", PASSWORD)

        await manager.logout(alice.id)

        assert len(await store.get_active_index(bob.id)) == 1

    async def test_revoke_all_reports_count(self, manager: SessionManager, users):
        alice = users.add("alice")
        await manager.login("alice", PASSWORD)

        assert await manager.revoke_all(alice.id) == 1
        assert await manager.revoke_all(alice.id) == 0


class TestStatusUpdateFailures:
    """Failures while recording login or online status never abort the session flow."""

    @pytest.fixture
    def flaky_users(self, passwords) -> FlakyUserDirectory:
        return FlakyUserDirectory(passwords)

    @pytest.fixture
    def flaky_manager(self, issuer, store, flaky_users, passwords) -> SessionManager:
        return SessionManager(issuer=issuer, store=store, users=flaky_users, passwords=passwords)

    async def test_login_succeeds_when_record_login_fails(
        self, flaky_manager: SessionManager, flaky_users, store: SessionStore
    ):
        alice = flaky_users.add("alice")

        result = await flaky_manager.login("alice", PASSWORD, client_ip="10.0.0.1")

        index = await store.get_active_index(alice.id)
        assert len(index) == 1
        assert (await store.get_access_entry(index[0])).access_token == result.access_token
        assert result.user.id == alice.id

    async def test_logout_succeeds_when_set_online_fails(
        self, flaky_manager: SessionManager, flaky_users, store: SessionStore
    ):
        alice = flaky_users.add("alice")
        await flaky_manager.login("alice", PASSWORD)
        token_id = (await store.get_active_index(alice.id))[0]

        await flaky_manager.logout(alice.id)

        assert await store.get_active_index(alice.id) == []
        assert await store.get_access_entry(token_id) is None
        assert await store.get_refresh_entry(token_id) is None
