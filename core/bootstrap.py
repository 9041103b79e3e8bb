# =============================================================================
# USERHUB BACKEND - BOOTSTRAP
# =============================================================================
# File: core/bootstrap.py
# Description: Builds every long-lived collaborator once at process start
#              and wires them together explicitly
# =============================================================================

from dataclasses import dataclass
from pathlib import Path
from typing import Optional
import logging

from redis.asyncio import Redis

from auth.gate import AuthGate
from auth.repository import SqlUserDirectory
from core.config import Settings
from core.logging_config import configure_logging
from core.security import PasswordManager, TokenIssuer
from db.adapters.postgres_adapter import PostgresAdapter
from db.adapters.redis_adapter import RedisAdapter
from db.adapters.sqlite_adapter import SQLiteAdapter
from db.base import BaseDBAdapter
from session.manager import SessionManager
from session.storage import SessionStore


logger = logging.getLogger(__name__)


@dataclass
class AppContainer:
    """Process-lifetime collaborators, shared by reference."""
    settings: Settings
    db: BaseDBAdapter
    redis: RedisAdapter
    passwords: PasswordManager
    issuer: TokenIssuer
    session_store: SessionStore
    session_manager: SessionManager
    auth_gate: AuthGate


def build_db_adapter(settings: Settings) -> BaseDBAdapter:
    """Pick the relational adapter for ``settings.db_type``."""
    if settings.db_type == "postgresql":
        return PostgresAdapter(settings)
    return SQLiteAdapter(settings.database_url, echo=settings.debug and settings.is_development)


async def bootstrap(
    settings: Settings,
    *,
    redis_client: Optional[Redis] = None,
) -> AppContainer:
    """
    Initialize logging, storage and services.

    An unreachable Redis is logged and tolerated. A database that cannot
    be reached or migrated aborts startup.

    Args:
        settings: Application settings
        redis_client: Pre-built Redis client (tests pass fakeredis)

    Returns:
        AppContainer: Fully wired collaborators
    """
    configure_logging(settings)
    Path(settings.upload_dir).mkdir(parents=True, exist_ok=True)

    db = build_db_adapter(settings)
    await db.connect()
    await db.create_tables()
    logger.info(f"Database ready ({settings.db_type})")

    redis = RedisAdapter(settings, client=redis_client)
    await redis.connect()

    passwords = PasswordManager(settings)
    issuer = TokenIssuer(settings)
    store = SessionStore(redis)
    manager = SessionManager(
        issuer=issuer,
        store=store,
        users=SqlUserDirectory(db),
        passwords=passwords,
    )

    return AppContainer(
        settings=settings,
        db=db,
        redis=redis,
        passwords=passwords,
        issuer=issuer,
        session_store=store,
        session_manager=manager,
        auth_gate=AuthGate(issuer, store),
    )


async def shutdown(container: AppContainer) -> None:
    """Close connections opened by ``bootstrap``."""
    await container.redis.disconnect()
    await container.db.disconnect()
    logger.info("Connections closed")
