"""
AppBackend — Database Session Management
=========================================

What:  Async SQLAlchemy engine, session factory, declarative base and the
       FastAPI session dependency.
How:   One engine with a connection pool per process; one AsyncSession per
       request.
Who:   Route handlers via FastAPI's dependency injection; Alembic via `Base`.

Commit Discipline:
    The insert pipeline commits its primary write and every fan-out batch on
    its own. The dependency's final commit only flushes whatever a handler
    left pending, and its rollback can only discard work that was never
    committed. A failing post-action therefore never undoes the resource row.
"""

from typing import Any, AsyncGenerator, Dict

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from appbackend.config import settings


def _engine_options(database_url: str) -> Dict[str, Any]:
    """Pool arguments are only valid for server databases, not SQLite."""
    options: Dict[str, Any] = {
        "echo": settings.log_level == "DEBUG",
    }
    if not database_url.startswith("sqlite"):
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            pool_recycle=3600,
        )
    return options


# ── Engine Configuration ──────────────────────────────────────────────────
engine = create_async_engine(settings.database_url, **_engine_options(settings.database_url))

# ── Session Factory ───────────────────────────────────────────────────────
# expire_on_commit=False: the pipeline keeps using the inserted object
# (its id, its parent references) after committing it
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """Base class for all ORM models; its metadata drives Alembic."""
    pass


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the factory
        2. Yields it to the route handler
        3. On success: commits anything still pending
        4. On error: rolls back uncommitted work and re-raises
        5. Always: closes the session (returns connection to pool)

    Example usage in a route:
        @router.post("/box")
        async def create_box(db: AsyncSession = Depends(get_db_session)):
            ...
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def dispose_engine() -> None:
    """Closes all pooled connections; called from the shutdown lifespan."""
    await engine.dispose()
