import logging

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.load_secrets import db_backend
from src.models import basic_authentication_schemas  # noqa: F401  registers the users table
from src.models.schemas import Base

if db_backend == "sqlite":
    from src.create_sqlite_engine import engine

    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
else:
    from src.create_postgres_engine import engine

# Centralized session factory to avoid creating it in router modules.
Session = async_sessionmaker(
    autocommit=False,
    class_=AsyncSession,
    autoflush=True,
    expire_on_commit=False,
    bind=engine,
)


async def create_tables() -> None:
    """Create tables if not exists"""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_tables() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
