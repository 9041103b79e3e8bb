# =============================================================================
# USERHUB BACKEND - SQLITE ADAPTER
# =============================================================================
# File: db/adapters/sqlite_adapter.py
# Description: SQLite database adapter for development and testing
#              Uses aiosqlite for async operations with SQLAlchemy
# =============================================================================

from typing import Any
from pathlib import Path

from sqlalchemy import text
from sqlalchemy.pool import StaticPool

from db.base import BaseDBAdapter


SQLITE_URL_PREFIX = "sqlite+aiosqlite:///"


class SQLiteAdapter(BaseDBAdapter):
    """
    ┌─────────────────────────────────────────────────────────────────────────┐
    │                    SQLITE DATABASE ADAPTER                               │
    │  Async SQLite implementation for development and testing environments   │
    │  Uses aiosqlite driver with SQLAlchemy async ORM                        │
    └─────────────────────────────────────────────────────────────────────────┘

    Features:
        - File-based persistent storage with WAL journaling
        - In-memory option for testing (single shared connection)
        - Auto-creation of database directory

    Usage:
        adapter = SQLiteAdapter("sqlite+aiosqlite:///./data/userhub.db")
        await adapter.connect()
        async with adapter.get_session() as session:
            ...
        await adapter.disconnect()
    """

    def __init__(self, database_url: str, **kwargs: Any):
        """
        Initialize SQLite adapter.

        Args:
            database_url: ``sqlite+aiosqlite:///`` URL
            **kwargs: Additional engine options (e.g. ``echo``)
        """
        self._in_memory = ":memory:" in database_url

        default_options: dict[str, Any] = {
            "echo": False,
            "connect_args": {
                "check_same_thread": False,
                "timeout": 30,
            },
        }

        if self._in_memory:
            # Every new connection to :memory: would see an empty database
            default_options["poolclass"] = StaticPool
        else:
            db_path = Path(database_url.replace(SQLITE_URL_PREFIX, ""))
            db_path.parent.mkdir(parents=True, exist_ok=True)
            default_options["pool_pre_ping"] = True

        default_options.update(kwargs)

        super().__init__(database_url, **default_options)

    async def connect(self) -> None:
        """
        Connect to SQLite database and apply PRAGMA settings:
            - WAL mode for better concurrency (file databases only)
            - Foreign keys enabled
            - Busy timeout of 30 seconds
        """
        if self._is_connected:
            return
        await super().connect()

        async with self.get_session() as session:
            if not self._in_memory:
                await session.execute(text("PRAGMA journal_mode=WAL"))
                await session.execute(text("PRAGMA synchronous=NORMAL"))
            await session.execute(text("PRAGMA foreign_keys=ON"))
            await session.execute(text("PRAGMA busy_timeout=30000"))

    @classmethod
    def create_for_testing(cls) -> "SQLiteAdapter":
        """
        Create an in-memory SQLite adapter for testing.

        Data lives as long as the adapter stays connected.
        """
        return cls(database_url=f"{SQLITE_URL_PREFIX}:memory:")
