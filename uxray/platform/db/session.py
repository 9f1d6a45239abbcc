from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.orm import sessionmaker

from uxray.platform.config import settings


def _pool_options(url: str) -> dict:
    if url.startswith("sqlite"):
        return {}
    return {
        "pool_pre_ping": True,
        "pool_recycle": 1800,
        "pool_size": 20,
        "max_overflow": 30,  # (burst capacity)
        "pool_timeout": 30,
    }


def sync_database_url(url: str) -> str:
    """Convert an async driver URL into the matching sync one for the scan pipeline."""
    if url.startswith("postgresql+asyncpg://"):
        return url.replace("postgresql+asyncpg://", "postgresql://", 1)
    if url.startswith("sqlite+aiosqlite://"):
        return url.replace("sqlite+aiosqlite://", "sqlite://", 1)
    return url


engine = create_async_engine(
    settings.DATABASE_URL,
    echo=False,
    future=True,
    **_pool_options(settings.DATABASE_URL),
)
SessionLocal = async_sessionmaker(engine, expire_on_commit=False, autoflush=False, autocommit=False)


# The scan pipeline drives a blocking browser, so it persists through a sync session
sync_engine = create_engine(
    sync_database_url(settings.DATABASE_URL),
    **_pool_options(settings.DATABASE_URL),
)
SyncSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=sync_engine)


async def get_db():
    async with SessionLocal() as session:
        yield session


def get_sync_db():
    db = SyncSessionLocal()
    try:
        yield db
    finally:
        db.close()
