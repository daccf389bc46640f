"""Database initialization and health check."""

import asyncio
import logging
from sqlalchemy import func, select, text
from sqlalchemy.exc import SQLAlchemyError

from .base import Base, build_session_factory, get_async_engine
from .models import Component

logger = logging.getLogger(__name__)


async def check_database_connection(engine=None) -> bool:
    """
    Check if database connection is available.

    Returns:
        True if connection successful, False otherwise
    """
    try:
        engine = engine or get_async_engine()
        async with engine.connect() as conn:
            result = await conn.execute(text("SELECT 1"))
            return result.scalar() == 1
    except (SQLAlchemyError, OSError) as e:
        logger.error(f"Database connection failed: {e}")
        return False


async def create_tables(engine=None):
    """Create any missing tables."""
    engine = engine or get_async_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def init_database(engine=None, session_factory=None):
    """
    Initialize database connection, create tables and log the component count.
    """
    engine = engine or get_async_engine()
    logger.info(f"Connecting to database at {engine.url.render_as_string(hide_password=True)}")

    if not await check_database_connection(engine):
        logger.warning("Database connection failed, import and sync will be unavailable")
        return False

    logger.info("Database connection successful")
    await create_tables(engine)

    session_factory = session_factory or build_session_factory(engine)
    try:
        async with session_factory() as session:
            result = await session.execute(select(func.count()).select_from(Component))
            logger.info(f"Found {result.scalar()} component(s) in database")
    except SQLAlchemyError as e:
        logger.warning(f"Could not access component table: {e}")
    return True


def run_init():
    """Run database initialization synchronously."""
    asyncio.run(init_database())
