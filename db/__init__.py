# =============================================================================
# DATABASE MODULE INITIALIZATION
# =============================================================================
# File: db/__init__.py
# Description: Database module exports
# =============================================================================

from db.base import Base, IDBAdapter, BaseDBAdapter
from db.models import (
    User,
    Resource,
    ResourceStatus,
)
from db.adapters import (
    SQLiteAdapter,
    PostgresAdapter,
    RedisAdapter,
)

__all__ = [
    # Base
    "Base",
    "IDBAdapter",
    "BaseDBAdapter",

    # Models
    "User",
    "Resource",
    "ResourceStatus",

    # Adapters
    "SQLiteAdapter",
    "PostgresAdapter",
    "RedisAdapter",
]
