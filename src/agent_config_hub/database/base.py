"""Database connection and session management."""

from urllib.parse import quote_plus
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from ..config import settings

# Create base class for models
Base = declarative_base()

# Create database URL with properly encoded password
DATABASE_URL = settings.database_url or (
    f"mysql+aiomysql://{settings.mysql_user}:{quote_plus(settings.mysql_password)}"
    f"@{settings.mysql_host}:{settings.mysql_port}/{settings.mysql_database}"
)


def build_engine(url: str = DATABASE_URL, echo: bool = False):
    """
    Create an async engine for the given URL.

    SQLite does not take the pool sizing arguments used for MySQL.
    """
    if url.startswith("sqlite"):
        return create_async_engine(url, echo=echo)
    return create_async_engine(
        url,
        echo=echo,
        pool_pre_ping=True,
        pool_size=10,
        max_overflow=20,
    )


def build_session_factory(bind) -> async_sessionmaker:
    """Create a session factory bound to an engine."""
    return async_sessionmaker(bind, class_=AsyncSession, expire_on_commit=False)


# Create async engine
engine = None


def get_async_engine():
    """Get or create async database engine."""
    global engine
    if engine is None:
        engine = build_engine(DATABASE_URL, echo=settings.debug)
    return engine


# Create async session factory
async_session = None


def get_async_session():
    """Get async session factory."""
    global async_session
    if async_session is None:
        async_session = build_session_factory(get_async_engine())
    return async_session
