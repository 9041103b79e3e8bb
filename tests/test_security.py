# =============================================================================
# USERHUB BACKEND - SECURITY TESTS
# =============================================================================
# File: tests/test_security.py
# Description: Unit tests for password hashing, the token codec and issuer
# =============================================================================

import re
import time

import pytest
from jose import jwt

from core.config import Settings
from core.exceptions import TokenExpiredError, TokenInvalidError
from core.security import (
    PasswordManager,
    TokenCodec,
    TokenIssuer,
    generate_resource_id,
    generate_token_id,
)
from db.models import User


SECRET = "a-test-secret-that-is-at-least-32-characters"


class TestPasswordManager:
    """Test suite for PasswordManager."""

    def test_hash_password_argon2(self, passwords: PasswordManager):
        hashed = passwords.hash_password("Secret123")

        assert hashed != "Secret123"
        assert hashed.startswith("$argon2")

    def test_verify_password_correct(self, passwords: PasswordManager):
        hashed = passwords.hash_password("Secret123")

        is_valid, needs_rehash = passwords.verify_password("Secret123", hashed)

        assert is_valid is True
        assert needs_rehash is False

    def test_verify_password_incorrect(self, passwords: PasswordManager):
        hashed = passwords.hash_password("Secret123")

        is_valid, _ = passwords.verify_password("Wrong123", hashed)

        assert is_valid is False

    def test_unknown_hash_format_is_rejected(self, passwords: PasswordManager):
        assert passwords.verify_password("Secret123", "plaintext") == (False, False)

    def test_bcrypt_hash_verifies_and_asks_for_rehash(self, settings: Settings):
        bcrypt_manager = PasswordManager(settings.model_copy(update={"password_hash_algorithm": "bcrypt"}))
        hashed = bcrypt_manager.hash_password("Secret123")

        is_valid, needs_rehash = PasswordManager(settings).verify_password("Secret123", hashed)

        assert hashed.startswith("$2")
        assert is_valid is True
        assert needs_rehash is True


class TestTokenCodec:
    """Test suite for TokenCodec."""

    def test_round_trip_returns_payload(self):
        payload = {"user_id": "u1", "username": "alice", "role": "user"}

        token = TokenCodec.sign(payload, SECRET, "HS256", ttl=60)

        assert TokenCodec.verify(token, SECRET, "HS256") == payload

    def test_tokens_for_same_payload_differ(self):
        first = TokenCodec.sign({"user_id": "u1"}, SECRET, "HS256", ttl=60)
        second = TokenCodec.sign({"user_id": "u1"}, SECRET, "HS256", ttl=60)

        assert first != second

    def test_zero_ttl_is_already_expired(self):
        token = TokenCodec.sign({"user_id": "u1"}, SECRET, "HS256", ttl=0)

        with pytest.raises(TokenExpiredError):
            TokenCodec.verify(token, SECRET, "HS256")

    def test_past_expiry_is_expired(self):
        token = jwt.encode({"user_id": "u1", "exp": int(time.time()) - 10}, SECRET, algorithm="HS256")

        with pytest.raises(TokenExpiredError):
            TokenCodec.verify(token, SECRET, "HS256")

    def test_wrong_key_is_invalid(self):
        token = TokenCodec.sign({"user_id": "u1"}, SECRET, "HS256", ttl=60)

        with pytest.raises(TokenInvalidError):
            TokenCodec.verify(token, SECRET + "-other", "HS256")

    def test_garbage_is_invalid(self):
        with pytest.raises(TokenInvalidError):
            TokenCodec.verify("not.a.token", SECRET, "HS256")

    def test_token_without_expiry_is_invalid(self):
        token = jwt.encode({"user_id": "u1"}, SECRET, algorithm="HS256")

        with pytest.raises(TokenInvalidError):
            TokenCodec.verify(token, SECRET, "HS256")

    def test_reserved_claims_are_refused(self):
        with pytest.raises(ValueError):
            TokenCodec.sign({"exp": 1}, SECRET, "HS256", ttl=60)


class TestTokenIssuer:
    """Test suite for TokenIssuer."""

    @pytest.fixture
    def user(self) -> User:
        return User(id="user-1", username="alice", role="user")

    def test_access_claims(self, issuer: TokenIssuer, user: User):
        claims = issuer.verify_access(issuer.issue_access(user))

        assert claims.user_id == "user-1"
        assert claims.username == "alice"
        assert claims.role == "user"

    def test_refresh_claims(self, issuer: TokenIssuer, user: User):
        claims = issuer.verify_refresh(issuer.issue_refresh(user))

        assert claims.user_id == "user-1"

    def test_refresh_token_is_not_an_access_token(self, issuer: TokenIssuer, user: User):
        with pytest.raises(TokenInvalidError):
            issuer.verify_access(issuer.issue_refresh(user))

    def test_access_token_is_not_a_refresh_token(self, issuer: TokenIssuer, user: User):
        with pytest.raises(TokenInvalidError):
            issuer.verify_refresh(issuer.issue_access(user))

    def test_ttls_follow_settings(self, settings: Settings):
        custom = TokenIssuer(settings.model_copy(update={
            "jwt_access_expires_in": 30,
            "jwt_refresh_expires_in": 90,
        }))

        assert custom.access_ttl == 30
        assert custom.refresh_ttl == 90

    def test_rs_algorithm_requires_key_paths(self, settings: Settings):
        with pytest.raises(ValueError):
            TokenIssuer(settings.model_copy(update={"jwt_access_algorithm": "RS256"}))


class TestIdentifiers:

    def test_token_id_format(self):
        token_id = generate_token_id("user-1")

        assert re.fullmatch(r"user-1:\d{13}:[0-9a-f]{16}", token_id)

    def test_token_ids_are_unique(self):
        assert len({generate_token_id("user-1") for _ in range(100)}) == 100

    def test_resource_id_is_hex(self):
        assert re.fullmatch(r"[0-9a-f]{32}", generate_resource_id())
