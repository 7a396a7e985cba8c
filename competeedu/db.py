from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from competeedu.settings import settings

Base = declarative_base()

engine = create_async_engine(
    settings.database_url,
    echo=settings.db_echo,
    future=True
)

async_session = sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False
)


async def get_session() -> AsyncSession:
    async with async_session() as session:
        yield session


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
