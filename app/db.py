from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.config import settings

_raw_url = settings.database_url

if _raw_url.startswith("postgres://"):
    _raw_url = _raw_url.replace("postgres://", "postgresql+asyncpg://", 1)
elif _raw_url.startswith("postgresql://"):
    _raw_url = _raw_url.replace("postgresql://", "postgresql+asyncpg://", 1)

engine = create_async_engine(_raw_url, pool_pre_ping=True, echo=settings.sql_echo)
async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_session() -> AsyncSession:  # type: ignore[misc]
    async with async_session() as session:
        yield session


@asynccontextmanager
async def unit_of_work(session: AsyncSession):
    """Commit everything done inside the block, or roll all of it back.

    Any read transaction already open on the session is folded into the
    unit, so callers may read before writing.
    """
    try:
        yield session
        await session.commit()
    except BaseException:
        await session.rollback()
        raise
