"""Shared fixtures.

The service reads its configuration at import time, so the environment is
pointed at a throwaway SQLite database before anything from `src` is imported.
"""

import asyncio
import os
import tempfile

_DB_DIR = tempfile.mkdtemp(prefix="spin-trade-tests-")
os.environ["DB_BACKEND"] = "sqlite"
os.environ["SQLITE_PATH"] = os.path.join(_DB_DIR, "test.sqlite3")
os.environ["SPIN_PROOF_SECRET"] = "test-spin-secret"
os.environ["PEPPER_DATA"] = "test-pepper"
os.environ["REQUIRE_SPIN_PROOF"] = "false"

import pytest  # noqa: E402

from src.authentication.basic_authentication import BasicAuthentication  # noqa: E402
from src.crud import CreateData  # noqa: E402
from src.db import Session, create_tables, drop_tables  # noqa: E402
from src.models.schema_models import ItemSchema  # noqa: E402

PASSWORD = "correct horse"


class FakeRedis:
    """Records published messages instead of talking to a Redis server."""

    def __init__(self):
        self.published = []

    async def publish(self, channel, message):
        self.published.append((channel, message))
        return 0

    async def aclose(self):
        pass


async def _reset_database():
    await drop_tables()
    await create_tables()


async def _create_item(item_id, owner_id, value, name=""):
    async with Session() as session:
        return await CreateData.create_item_data(
            ItemSchema(item_id=item_id, owner_id=owner_id, value=value, name=name), session
        )


@pytest.fixture
def database():
    asyncio.run(_reset_database())


@pytest.fixture
def fake_redis(monkeypatch):
    from src.routers import trades

    redis = FakeRedis()
    monkeypatch.setattr(trades, "redis", redis)
    return redis


@pytest.fixture
def make_user(database):
    basic_auth = BasicAuthentication()

    def _make_user(username):
        return asyncio.run(basic_auth.store_user_data(username, PASSWORD))

    return _make_user


@pytest.fixture
def make_item(database):
    def _make_item(item_id, owner, value, name=""):
        return asyncio.run(_create_item(item_id, owner.user_id, value, name))

    return _make_item


@pytest.fixture
def alice(make_user):
    return make_user("alice")


@pytest.fixture
def bob(make_user):
    return make_user("bob")


@pytest.fixture
def carol(make_user):
    return make_user("carol")


@pytest.fixture
def client(database, fake_redis):
    from fastapi.testclient import TestClient

    from src.main import app

    with TestClient(app) as test_client:
        yield test_client


def auth(user):
    return (user.username, PASSWORD)
