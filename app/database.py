"""
Engine, session factory and the request transaction boundary for posts.

Repositories only flush; ``get_db`` decides whether a request's writes
are committed or rolled back.  The engine itself is disposed by the
application lifespan in ``app.main``.
"""
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from app.config import settings
from app.middleware import install_query_counter


def make_engine(database_url: str, *, echo: bool = False, **options) -> AsyncEngine:
    """Build an async engine with the SQL statement counter attached."""
    options["echo"] = echo
    if make_url(database_url).get_backend_name() == "sqlite":
        # aiosqlite hands the connection between threads.
        options["connect_args"] = {"check_same_thread": False}
    else:
        options["pool_pre_ping"] = True

    new_engine = create_async_engine(database_url, **options)
    install_query_counter(new_engine)
    return new_engine


engine = make_engine(settings.DATABASE_URL, echo=settings.DEBUG)

async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


class Base(DeclarativeBase):
    pass


async def get_db():
    """
    Request-scoped session.  Commits when the handler returns normally and
    rolls back on any exception, including the service errors that the
    exception handler later turns into 4xx/5xx responses.
    """
    async with async_session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
