"""Database connection and session management."""
import logging
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker

from tutor.core.config import settings
from tutor.db.models import Base

logger = logging.getLogger(__name__)


# Convert postgresql:// to postgresql+asyncpg:// for async support
database_url = settings.database_url
if database_url.startswith("postgresql://"):
    database_url = database_url.replace("postgresql://", "postgresql+asyncpg://", 1)
elif database_url.startswith("sqlite://"):
    database_url = database_url.replace("sqlite://", "sqlite+aiosqlite://", 1)

engine = create_async_engine(
    database_url,
    echo=False,
    future=True,
)

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


async def init_db() -> None:
    """Initialize database tables."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def reset_db() -> None:
    """Reset database by deleting all rows. Removes all data but keeps schema."""
    logger.info("Resetting database: deleting all rows...")
    async with engine.begin() as conn:
        # Children first so foreign keys stay satisfied
        for table in reversed(Base.metadata.sorted_tables):
            await conn.execute(table.delete())
    logger.info("Database reset complete: all tables are now empty")


async def dispose_db() -> None:
    """Close pooled connections."""
    await engine.dispose()


async def get_db() -> AsyncSession:
    """Dependency for getting database session."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()
