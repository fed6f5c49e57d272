from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.core.config import settings

engine = create_async_engine(settings.database_url, pool_pre_ping=True)
SessionLocal = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


async def get_db() -> AsyncIterator[AsyncSession]:
    # Endpoints commit explicitly; anything left uncommitted is rolled back here.
    async with SessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
