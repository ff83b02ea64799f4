import pathlib

from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import NullPool

from src.load_secrets import sqlite_path

if sqlite_path:
    file_path = pathlib.Path(sqlite_path)
else:
    file_path = pathlib.Path(__file__).parents[1]
    file_path /= "./src/spin_trade.sqlite3"
sqlite_url = f"sqlite+aiosqlite:///{file_path}"

# NullPool: a connection never outlives the event loop that opened it.
engine = create_async_engine(url=sqlite_url, echo=False, poolclass=NullPool)
