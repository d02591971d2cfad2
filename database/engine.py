import logging
from pathlib import Path

from sqlalchemy import Engine, create_engine
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

from core.config import settings

logger = logging.getLogger(__name__)


# Base class for the simulator's backend tables
class Base(DeclarativeBase):
    pass


# Base class for tables that live in the dashboard's own local database
class LocalBase(DeclarativeBase):
    pass


def _is_memory_url(url: str) -> bool:
    return ":memory:" in url or url in ("sqlite://", "sqlite+aiosqlite://")


def _ensure_parent_dir(url: str) -> None:
    """Create the directory of a file-backed SQLite URL."""
    if _is_memory_url(url) or ":///" not in url:
        return
    db_file = url.split(":///", 1)[1]
    Path(db_file).parent.mkdir(parents=True, exist_ok=True)


# Create the simulator's async engine; in-memory URLs share one connection
def create_db_engine(database_url: str | None = None) -> AsyncEngine:
    url = database_url or settings.simulator_database_url
    logger.info(f"Connecting to simulator database at {url}")
    _ensure_parent_dir(url)

    if _is_memory_url(url):
        return create_async_engine(
            url,
            echo=False,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_async_engine(url, echo=False)


# Create async session maker to be used by the simulator's routes
def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


# Function to initialize the database (create tables)
async def init_db(engine: AsyncEngine) -> None:
    # Registers the simulator tables on Base.metadata
    import database.models.records  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


# Function to close database connections
async def close_db(engine: AsyncEngine) -> None:
    """Close database engine and connections."""
    await engine.dispose()


def create_local_engine(db_path: str | None = None) -> Engine:
    """
    Synchronous engine for the dashboard's local overlay database.

    ``db_path`` is a file path, or ``":memory:"`` for a throwaway store.
    """
    path = db_path or settings.overlay_database_path
    if path == ":memory:":
        return create_engine(
            "sqlite://",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    return create_engine(f"sqlite:///{path}", connect_args={"check_same_thread": False})


def init_local_db(engine: Engine) -> sessionmaker[Session]:
    """Create the local tables and return a session factory bound to them."""
    import database.models.overlay  # noqa: F401

    LocalBase.metadata.create_all(engine)
    return sessionmaker(engine, expire_on_commit=False)
