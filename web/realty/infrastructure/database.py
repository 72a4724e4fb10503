from typing import AsyncGenerator
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker

from ..core import get_settings


settings = get_settings()

_engine_kwargs = {"echo": settings.DB_ECHO, "pool_pre_ping": True}
if not settings.DB_DSN.startswith("sqlite"):
    # SQLite pools are not sized
    _engine_kwargs["pool_size"] = settings.DB_POOL_SIZE

# Create async engine
engine = create_async_engine(settings.DB_DSN, **_engine_kwargs)

# Create async session factory
AsyncSessionFactory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
    autocommit=False
)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Dependency to get database session"""
    async with AsyncSessionFactory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
