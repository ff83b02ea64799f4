from sqlalchemy.engine import URL
from sqlalchemy.ext.asyncio import create_async_engine

from src.load_secrets import db_name, db_pool_size, host, password, port, user

# URL.create escapes credentials that contain "@" or "/".
postgres_url = URL.create(
    "postgresql+asyncpg",
    username=user,
    password=password,
    host=host,
    port=int(port) if port else None,
    database=db_name,
)

engine = create_async_engine(
    postgres_url,
    pool_size=db_pool_size,
    max_overflow=db_pool_size,
    pool_pre_ping=True,
)
