# =============================================================================
# USERHUB BACKEND - DATABASE MODELS
# =============================================================================
# File: db/models.py
# Description: SQLAlchemy ORM models for users and uploaded resources
# =============================================================================

from typing import Optional
from datetime import datetime, timezone
from enum import IntEnum
from uuid import uuid4

from sqlalchemy import String, Boolean, Integer, BigInteger, DateTime, Text, Index
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def generate_uuid() -> str:
    """Generate a new UUID string."""
    return str(uuid4())


def utc_now() -> datetime:
    """Get current UTC timestamp."""
    return datetime.now(timezone.utc)


# =============================================================================
# USER MODEL
# =============================================================================

class User(Base):
    """
    ┌─────────────────────────────────────────────────────────────────────────┐
    │                    USER MODEL                                            │
    │  Identity record; the session layer only touches the status fields     │
    └─────────────────────────────────────────────────────────────────────────┘

    Fields:
        - id:              UUID primary key (auto-generated)
        - username:        Unique login name (indexed)
        - email:           Unique email address, optional
        - password_hash:   Argon2id/Bcrypt hashed password
        - role:            "user" or "admin"
        - is_active:       Account enabled flag
        - is_online:       Set on login, cleared on logout
        - last_login_time: Last successful login
        - last_login_ip:   Client address of the last login
    """

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=generate_uuid,
    )

    # Authentication Fields
    username: Mapped[str] = mapped_column(
        String(50),
        unique=True,
        nullable=False,
        index=True
    )
    email: Mapped[Optional[str]] = mapped_column(
        String(255),
        unique=True,
        nullable=True,
    )
    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False
    )
    role: Mapped[str] = mapped_column(
        String(20),
        default="user",
        nullable=False
    )

    # Profile
    phone: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    nickname: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    avatar: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    bio: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Account Status
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False
    )
    is_online: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False
    )
    last_login_time: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True
    )
    last_login_ip: Mapped[Optional[str]] = mapped_column(
        String(45),  # IPv6 max length
        nullable=True
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        onupdate=utc_now,
        nullable=False
    )

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username={self.username})>"


# =============================================================================
# RESOURCE MODEL
# =============================================================================

class ResourceStatus(IntEnum):
    """Lifecycle of an uploaded file."""
    DISABLED = 0
    ENABLED = 1
    DELETED = 2


class Resource(Base):
    """
    Uploaded file metadata. The file itself lives under the upload
    directory; ``resource_id`` is the public handle used for deletion.
    """

    __tablename__ = "resources"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    resource_id: Mapped[str] = mapped_column(
        String(32),
        unique=True,
        nullable=False,
        index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    original_name: Mapped[str] = mapped_column(String(255), nullable=False)
    path: Mapped[str] = mapped_column(String(500), nullable=False)
    type: Mapped[str] = mapped_column(String(20), nullable=False, default="default")
    format: Mapped[str] = mapped_column(String(20), nullable=False, default="")
    size: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    user_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True, index=True)
    status: Mapped[int] = mapped_column(
        Integer,
        default=ResourceStatus.ENABLED,
        nullable=False
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        onupdate=utc_now,
        nullable=False
    )

    __table_args__ = (
        Index("ix_resources_type_status", "type", "status"),
    )

    def __repr__(self) -> str:
        return f"<Resource(resource_id={self.resource_id}, name={self.name})>"
