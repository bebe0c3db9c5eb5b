"""Async database engine and session factory for the credential store.

Supports both PostgreSQL and SQLite (local hosts, tests).
"""

from pathlib import Path

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from socialfeed.models import Base


def create_engine(db_url: str, echo: bool = False) -> AsyncEngine:
    """Create an async engine, preparing the SQLite data directory if needed."""
    if db_url.startswith("sqlite"):
        db_path = db_url.split("///")[-1]
        # ":memory:" has no parent directory to create
        if db_path and db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        return create_async_engine(db_url, echo=echo, connect_args={"check_same_thread": False})
    return create_async_engine(db_url, echo=echo, pool_pre_ping=True)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def init_db(engine: AsyncEngine) -> None:
    """Create all tables that don't exist yet."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
