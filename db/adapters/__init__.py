# =============================================================================
# DATABASE ADAPTERS INITIALIZATION
# =============================================================================
# File: db/adapters/__init__.py
# Description: Relational and cache adapter exports
# =============================================================================

from db.adapters.sqlite_adapter import SQLiteAdapter
from db.adapters.postgres_adapter import PostgresAdapter
from db.adapters.redis_adapter import RedisAdapter

__all__ = [
    "SQLiteAdapter",
    "PostgresAdapter",
    "RedisAdapter",
]
