"""
Lifedash Database Configuration

SQLAlchemy async engine backing the SQL document store.
SQLite for development; any async SQLAlchemy URL works in production.
"""
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy import event
from .config import settings


class Base(DeclarativeBase):
    """Base class for all database models."""
    pass


def create_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """Create an async engine, applying SQLite pragmas when relevant."""
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args = {
            "timeout": 30,  # Wait up to 30 seconds for locks
            "check_same_thread": False,
        }

    new_engine = create_async_engine(
        database_url,
        echo=echo,
        future=True,
        connect_args=connect_args,
    )

    if database_url.startswith("sqlite"):
        @event.listens_for(new_engine.sync_engine, "connect")
        def configure_sqlite(dbapi_connection, connection_record):
            """Configure SQLite for better concurrency."""
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA busy_timeout=30000")  # 30 second timeout for busy locks
            cursor.close()

    return new_engine


engine = create_engine(settings.database_url, echo=settings.debug)


# Session factory
async_session = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def init_db(target: AsyncEngine = engine) -> None:
    """Initialize database tables."""
    # Import models so their tables are registered on Base.metadata
    from . import models  # noqa: F401

    async with target.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db(target: AsyncEngine = engine) -> None:
    """Close database connections."""
    await target.dispose()
