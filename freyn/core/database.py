"""Async engine, session factory and schema bootstrap."""

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

from freyn.core.config import get_settings

settings = get_settings()


def _in_memory_sqlite(url: str) -> bool:
    return url.startswith("sqlite") and (url.endswith("://") or ":memory:" in url)


def build_engine(url: str) -> AsyncEngine:
    """Pooled engine for Postgres; an in-memory SQLite DB lives on one shared connection."""
    if _in_memory_sqlite(url):
        return create_async_engine(url, echo=False, poolclass=StaticPool)
    if url.startswith("sqlite"):
        return create_async_engine(url, echo=False)
    return create_async_engine(
        url, echo=False, pool_size=20, max_overflow=10, pool_pre_ping=True,
    )


def build_session_factory(bind: AsyncEngine) -> sessionmaker:
    # Keep attributes loaded after commit; handlers serialize after saving.
    return sessionmaker(bind, class_=AsyncSession, expire_on_commit=False)


engine = build_engine(settings.database_url)
async_session_factory = build_session_factory(engine)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency that yields an async DB session."""
    async with async_session_factory() as session:
        yield session


async def init_db(bind: AsyncEngine | None = None) -> None:
    """Create all tables. Use Alembic migrations in production."""
    async with (bind or engine).begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


async def dispose_db() -> None:
    await engine.dispose()
