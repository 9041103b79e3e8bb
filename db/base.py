# =============================================================================
# USERHUB BACKEND - DATABASE BASE MODULE
# =============================================================================
# File: db/base.py
# Description: Declarative base and the relational adapter contract
#              shared by the SQLite and PostgreSQL adapters
# =============================================================================

from abc import ABC, abstractmethod
from typing import Any, Optional, AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy import MetaData, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    create_async_engine,
    AsyncSession,
    AsyncEngine,
    async_sessionmaker,
)
from sqlalchemy.orm import DeclarativeBase

from core.exceptions import DatabaseError


# =============================================================================
# SQLALCHEMY BASE CONFIGURATION
# =============================================================================

# Naming convention for constraints
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s"
}

metadata = MetaData(naming_convention=NAMING_CONVENTION)


class Base(DeclarativeBase):
    """
    SQLAlchemy declarative base with custom metadata.
    All ORM models inherit from this base class.
    """
    metadata = metadata


# =============================================================================
# ABSTRACT DATABASE ADAPTER INTERFACE
# =============================================================================

class IDBAdapter(ABC):
    """
    ┌─────────────────────────────────────────────────────────────────────────┐
    │                    ABSTRACT DATABASE ADAPTER INTERFACE                   │
    │  Defines the contract that all database implementations must follow     │
    │  Enables seamless switching between SQLite and PostgreSQL               │
    └─────────────────────────────────────────────────────────────────────────┘

    Methods:
        connect()       - Establish database connection
        disconnect()    - Close database connection
        get_session()   - Get async session for operations
        create_tables() - Initialize database schema
        ping()          - Round-trip a trivial query
    """

    @abstractmethod
    async def connect(self) -> None:
        """Establish connection to the database."""

    @abstractmethod
    async def disconnect(self) -> None:
        """Close database connection and cleanup resources."""

    @abstractmethod
    def get_session(self) -> Any:
        """
        Provide an async database session context manager.

        Usage:
            async with adapter.get_session() as session:
                result = await session.execute(query)
        """

    @abstractmethod
    async def create_tables(self) -> None:
        """Create all defined tables if they don't exist."""

    @abstractmethod
    async def ping(self) -> bool:
        """Return True when the database answers a trivial query."""


# =============================================================================
# BASE ADAPTER IMPLEMENTATION
# =============================================================================

class BaseDBAdapter(IDBAdapter):
    """
    Base implementation of database adapter with common functionality.
    Concrete adapters (SQLite, PostgreSQL) extend this class.
    """

    def __init__(self, database_url: str, **engine_options: Any):
        """
        Initialize base adapter with database URL.

        Args:
            database_url: Async-compatible database URL
            **engine_options: Additional SQLAlchemy engine options
        """
        self._database_url = database_url
        self._engine_options = engine_options
        self._engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[async_sessionmaker[AsyncSession]] = None
        self._is_connected = False

    async def connect(self) -> None:
        """Create async engine and session factory."""
        if self._is_connected:
            return

        self._engine = create_async_engine(
            self._database_url,
            **self._engine_options
        )

        self._session_factory = async_sessionmaker(
            bind=self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

        self._is_connected = True

    async def disconnect(self) -> None:
        """Dispose of engine and cleanup connections."""
        if self._engine:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None
            self._is_connected = False

    @asynccontextmanager
    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Provide session with automatic commit/rollback handling.

        Commits on successful exit, rolls back on exception.
        """
        if not self._session_factory:
            await self.connect()

        session = self._session_factory()  # type: ignore[misc]
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    async def create_tables(self) -> None:
        """Create all tables defined in SQLAlchemy metadata."""
        if not self._engine:
            await self.connect()

        async with self._engine.begin() as conn:  # type: ignore[union-attr]
            await conn.run_sync(Base.metadata.create_all)

    async def ping(self) -> bool:
        """
        Execute ``SELECT 1`` through a fresh session.

        Raises:
            DatabaseError: If the database cannot be reached
        """
        try:
            async with self.get_session() as session:
                result = await session.execute(text("SELECT 1"))
                return result.scalar() == 1
        except (SQLAlchemyError, OSError) as e:
            raise DatabaseError(
                message="Database is unreachable",
                details={"error": type(e).__name__},
            )

    @property
    def engine(self) -> AsyncEngine:
        """Get the SQLAlchemy engine."""
        if not self._engine:
            raise RuntimeError("Database not connected. Call connect() first.")
        return self._engine

    @property
    def is_connected(self) -> bool:
        """Check if database is connected."""
        return self._is_connected
