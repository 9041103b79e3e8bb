# =============================================================================
# USERHUB BACKEND - CORE SECURITY MODULE
# =============================================================================
# File: core/security.py
# Description: Password hashing and JWT signing/verification
#              Argon2id with Bcrypt fallback, HS*/RS* signed tokens
# =============================================================================

from typing import Optional, Dict, Any, Literal, Mapping, Protocol
from datetime import datetime, timedelta, timezone
from uuid import uuid4
import secrets
import time

from passlib.context import CryptContext
from argon2 import PasswordHasher
from argon2.exceptions import VerifyMismatchError, VerificationError, InvalidHash
from jose import jwt, JWTError, ExpiredSignatureError
from pydantic import BaseModel, ValidationError as PydanticValidationError

from core.config import Settings
from core.exceptions import TokenExpiredError, TokenInvalidError


# =============================================================================
# PASSWORD HASHER CONFIGURATION
# =============================================================================

class PasswordManager:
    """
    ┌─────────────────────────────────────────────────────────────────────────┐
    │                    PASSWORD HASHING MANAGER                              │
    │  Implements OWASP recommended Argon2id with Bcrypt fallback            │
    │  Supports automatic algorithm upgrade on password verification         │
    └─────────────────────────────────────────────────────────────────────────┘

    Algorithm Selection:
        - Primary:  Argon2id (OWASP recommended for new passwords)
        - Fallback: Bcrypt (for legacy password verification)
    """

    def __init__(self, settings: Settings):
        """Initialize password manager with configured algorithms."""
        self._argon2_hasher = PasswordHasher(
            time_cost=settings.argon2_time_cost,
            memory_cost=settings.argon2_memory_cost,
            parallelism=settings.argon2_parallelism,
            hash_len=32,
            salt_len=16,
        )

        self._bcrypt_context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=settings.bcrypt_rounds,
        )

        self._preferred_algorithm = settings.password_hash_algorithm

    def hash_password(self, password: str) -> str:
        """
        Hash a password using the configured algorithm.

        Example:
            >>> pm = PasswordManager(get_settings())
            >>> pm.hash_password("Secret123").startswith("$argon2id$")
            True
        """
        if self._preferred_algorithm == "argon2":
            return self._argon2_hasher.hash(password)
        return self._bcrypt_context.hash(password)

    def verify_password(
        self,
        plain_password: str,
        hashed_password: str
    ) -> tuple[bool, bool]:
        """
        Verify a password against its hash with algorithm detection.

        Returns:
            tuple[bool, bool]: (is_valid, needs_rehash)
        """
        if hashed_password.startswith("$argon2"):
            try:
                self._argon2_hasher.verify(hashed_password, plain_password)
            except (VerifyMismatchError, VerificationError, InvalidHash):
                return False, False
            return True, self._argon2_hasher.check_needs_rehash(hashed_password)

        if hashed_password.startswith("$2"):
            try:
                is_valid = self._bcrypt_context.verify(plain_password, hashed_password)
            except ValueError:
                return False, False
            return is_valid, is_valid and self._preferred_algorithm == "argon2"

        # Unknown hash format
        return False, False


# =============================================================================
# TOKEN CODEC
# =============================================================================

# Registered claims added by sign() and removed again by verify()
RESERVED_CLAIMS = ("exp", "iat", "jti")


class TokenCodec:
    """
    ┌─────────────────────────────────────────────────────────────────────────┐
    │                    TOKEN CODEC                                           │
    │  Signs and verifies expiring JWTs; knows nothing about sessions         │
    └─────────────────────────────────────────────────────────────────────────┘

    A token verified right after signing yields back exactly the payload
    that was signed. Each token carries a random ``jti`` so two tokens
    signed for the same payload within the same second still differ.
    """

    @staticmethod
    def sign(
        payload: Mapping[str, Any],
        key: str,
        algorithm: str,
        ttl: int,
    ) -> str:
        """
        Sign ``payload`` with an expiry ``ttl`` seconds from now.

        Raises:
            ValueError: If the payload uses a reserved claim name
        """
        clashing = [name for name in RESERVED_CLAIMS if name in payload]
        if clashing:
            raise ValueError(f"Payload may not contain reserved claims: {clashing}")

        now = datetime.now(timezone.utc)
        claims = dict(payload)
        claims.update({
            "iat": now,
            "exp": now + timedelta(seconds=ttl),
            "jti": uuid4().hex,
        })
        return jwt.encode(claims, key, algorithm=algorithm)

    @staticmethod
    def verify(token: str, key: str, algorithm: str) -> Dict[str, Any]:
        """
        Verify signature and expiry and return the signed payload.

        Raises:
            TokenExpiredError: If the token's expiry is not in the future
            TokenInvalidError: If the token is malformed or badly signed
        """
        try:
            claims = jwt.decode(token, key, algorithms=[algorithm])
        except ExpiredSignatureError:
            raise TokenExpiredError()
        except JWTError as e:
            raise TokenInvalidError(details={"error": str(e)})

        exp = claims.get("exp")
        if not isinstance(exp, (int, float)):
            raise TokenInvalidError(details={"error": "Missing expiry"})
        # jose accepts exp == now; a token expiring this second is expired
        if exp <= time.time():
            raise TokenExpiredError()

        return {k: v for k, v in claims.items() if k not in RESERVED_CLAIMS}


# =============================================================================
# TOKEN PAYLOAD MODELS
# =============================================================================

class AccessClaims(BaseModel):
    """Payload carried by access tokens."""
    user_id: str
    username: str
    role: str


class RefreshClaims(BaseModel):
    """Payload carried by refresh tokens."""
    user_id: str


class TokenSubject(Protocol):
    """Anything a token can be issued for."""
    id: str
    username: str
    role: str


# =============================================================================
# TOKEN ISSUER
# =============================================================================

class TokenIssuer:
    """
    ┌─────────────────────────────────────────────────────────────────────────┐
    │                    TOKEN ISSUER                                          │
    │  Binds the codec to per-kind keys, algorithms and lifetimes             │
    │  Access and refresh tokens never share a signing key                    │
    └─────────────────────────────────────────────────────────────────────────┘
    """

    def __init__(self, settings: Settings, codec: Optional[TokenCodec] = None):
        self._codec = codec or TokenCodec()
        self._access_ttl = settings.jwt_access_expires_in
        self._refresh_ttl = settings.jwt_refresh_expires_in
        self._algorithms = {
            "access": settings.jwt_access_algorithm,
            "refresh": settings.jwt_refresh_algorithm,
        }
        self._secrets = {
            "access": settings.jwt_access_secret,
            "refresh": settings.jwt_refresh_secret,
        }

        self._private_key: Optional[str] = None
        self._public_key: Optional[str] = None
        if any(alg.startswith("RS") for alg in self._algorithms.values()):
            self._load_rsa_keys(settings)

    def _load_rsa_keys(self, settings: Settings) -> None:
        """Load RSA keys from configured paths."""
        if not settings.jwt_private_key_path or not settings.jwt_public_key_path:
            raise ValueError("RS algorithms require jwt_private_key_path and jwt_public_key_path")

        with open(settings.jwt_private_key_path, "r") as f:
            self._private_key = f.read()
        with open(settings.jwt_public_key_path, "r") as f:
            self._public_key = f.read()

    def _signing_key(self, kind: Literal["access", "refresh"]) -> str:
        if self._algorithms[kind].startswith("RS"):
            return self._private_key  # type: ignore[return-value]
        return self._secrets[kind]

    def _verification_key(self, kind: Literal["access", "refresh"]) -> str:
        if self._algorithms[kind].startswith("RS"):
            return self._public_key  # type: ignore[return-value]
        return self._secrets[kind]

    @property
    def access_ttl(self) -> int:
        """Access token lifetime in seconds."""
        return self._access_ttl

    @property
    def refresh_ttl(self) -> int:
        """Refresh token lifetime in seconds."""
        return self._refresh_ttl

    def issue_access(self, user: TokenSubject) -> str:
        """Mint an access token carrying ``{user_id, username, role}``."""
        claims = AccessClaims(user_id=user.id, username=user.username, role=user.role)
        return self._codec.sign(
            claims.model_dump(),
            self._signing_key("access"),
            self._algorithms["access"],
            self._access_ttl,
        )

    def issue_refresh(self, user: TokenSubject) -> str:
        """Mint a refresh token carrying ``{user_id}``."""
        claims = RefreshClaims(user_id=user.id)
        return self._codec.sign(
            claims.model_dump(),
            self._signing_key("refresh"),
            self._algorithms["refresh"],
            self._refresh_ttl,
        )

    def verify_access(self, token: str) -> AccessClaims:
        """
        Verify an access token.

        Raises:
            TokenExpiredError: If the token has expired
            TokenInvalidError: If the token is invalid or not an access token
        """
        payload = self._codec.verify(
            token, self._verification_key("access"), self._algorithms["access"]
        )
        try:
            return AccessClaims.model_validate(payload)
        except PydanticValidationError:
            raise TokenInvalidError(details={"error": "Unexpected access token payload"})

    def verify_refresh(self, token: str) -> RefreshClaims:
        """
        Verify a refresh token.

        Raises:
            TokenExpiredError: If the token has expired
            TokenInvalidError: If the token is invalid or not a refresh token
        """
        payload = self._codec.verify(
            token, self._verification_key("refresh"), self._algorithms["refresh"]
        )
        try:
            return RefreshClaims.model_validate(payload)
        except PydanticValidationError:
            raise TokenInvalidError(details={"error": "Unexpected refresh token payload"})


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================

def generate_token_id(user_id: str) -> str:
    """
    Generate a per-login token id: ``{user_id}:{epoch ms}:{random hex}``.

    The random suffix carries 64 bits from ``secrets`` so ids are
    unguessable and do not collide even within the same millisecond.
    """
    return f"{user_id}:{int(time.time() * 1000)}:{secrets.token_hex(8)}"


def generate_resource_id() -> str:
    """Generate a public identifier for an uploaded file."""
    return uuid4().hex
