"""
Database session configuration.

Builds the async engine for the ledger store (PostgreSQL via asyncpg in
production, SQLite via aiosqlite for local runs) and the request-scoped
session dependency.
"""

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from fleet_ledger.app.core.config import settings


def _engine_options(database_url: str) -> dict:
    """Pool sizing only applies to server databases; SQLite uses its own pool."""
    if database_url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_size": settings.db_pool_size,
        "max_overflow": settings.db_max_overflow,
        "pool_pre_ping": True,
    }


# Create async engine
engine = create_async_engine(
    settings.database_url,
    echo=settings.db_echo,
    **_engine_options(settings.database_url),
)

# Session factory; objects stay readable after commit so services can
# return them to the response layer
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)

# Create declarative base for models
Base = declarative_base()


async def get_db():
    """
    FastAPI dependency for database sessions.

    Yields one session per request; the ledger store commits each write
    itself, so nothing is committed here.
    """
    async with AsyncSessionLocal() as session:
        yield session
