# =============================================================================
# USERHUB BACKEND - POSTGRESQL ADAPTER
# =============================================================================
# File: db/adapters/postgres_adapter.py
# Description: PostgreSQL database adapter for production environments
#              Uses asyncpg for high-performance async operations
# =============================================================================

from typing import Any

from db.base import BaseDBAdapter
from core.config import Settings


class PostgresAdapter(BaseDBAdapter):
    """
    ┌─────────────────────────────────────────────────────────────────────────┐
    │                    POSTGRESQL DATABASE ADAPTER                           │
    │  Async PostgreSQL implementation for production                         │
    │  Uses asyncpg driver with SQLAlchemy async ORM                          │
    └─────────────────────────────────────────────────────────────────────────┘

    Connection Pool Configuration:
        - pool_size:     Initial connections (default: 5)
        - max_overflow:  Extra connections allowed (default: 10)
        - pool_timeout:  Wait time for connection (default: 30s)
        - pool_recycle:  Recycle connections after 1800s
    """

    def __init__(self, settings: Settings, **kwargs: Any):
        default_options = {
            "pool_size": settings.db_pool_size,
            "max_overflow": settings.db_max_overflow,
            "pool_timeout": settings.db_pool_timeout,
            "pool_recycle": 1800,
            "pool_pre_ping": True,
            "echo": settings.debug and settings.is_development,
            "connect_args": {
                "statement_cache_size": 100,
                "command_timeout": 60,
            },
        }
        default_options.update(kwargs)

        super().__init__(settings.database_url, **default_options)

    async def connect(self) -> None:
        """Connect and verify the server answers."""
        if self._is_connected:
            return
        await super().connect()
        await self.ping()
