import asyncio
import logging
from typing import AsyncGenerator, Optional
from sqlalchemy.ext.asyncio import create_async_engine, AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool
from .errors import StoreUnavailable
from .models import Base

logger = logging.getLogger(__name__)

engine: Optional[AsyncEngine] = None
AsyncSessionLocal: Optional[async_sessionmaker] = None


def configure_engine(database_url: str) -> AsyncEngine:
    """Create the async engine and session factory for the given URL"""
    global engine, AsyncSessionLocal

    if database_url.startswith("sqlite"):
        # SQLite connections are cheap and must not outlive their event loop
        pool_settings = {"poolclass": NullPool}
    else:
        pool_settings = {
            "pool_size": 5,
            "max_overflow": 10,
            "pool_timeout": 20,
            "pool_recycle": 300,  # 5 minutes
            "pool_pre_ping": True,
        }

    engine = create_async_engine(database_url, echo=False, **pool_settings)
    AsyncSessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    logger.info("Database engine created for %s", engine.url.render_as_string(hide_password=True))
    return engine


async def init_db(database_url: str, max_retries: int = 3, retry_delay: float = 5.0):
    """Configure the engine and create the tasks table"""
    configure_engine(database_url)
    max_retries = max(1, max_retries)

    for attempt in range(max_retries):
        try:
            logger.info("Database connection attempt %d/%d", attempt + 1, max_retries)
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            logger.info("Database tables created successfully")
            return
        except Exception as e:
            logger.warning("Database connection attempt %d failed: %s", attempt + 1, e)
            if attempt < max_retries - 1:
                logger.info("Retrying in %s seconds...", retry_delay)
                await asyncio.sleep(retry_delay)
            else:
                logger.error("All database connection attempts failed")
                raise


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency to get database session"""
    if not AsyncSessionLocal:
        raise StoreUnavailable(error="Database not configured")

    async with AsyncSessionLocal() as session:
        yield session


async def close_db():
    """Close database connections"""
    global engine, AsyncSessionLocal
    if engine:
        await engine.dispose()
        logger.info("Database connections closed")
    engine = None
    AsyncSessionLocal = None
