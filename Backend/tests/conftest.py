import os

# Settings are read at import time; give them a key before anything imports them.
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import httpx
import pytest
import pytest_asyncio

from recordstore.models.user import UserRole
from recordstore.services.database import Database

from factories import add_user, auth_headers


@pytest_asyncio.fixture
async def database(tmp_path):
    database = Database(f"sqlite+aiosqlite:///{tmp_path / 'recordstore.db'}")
    await database.create_all()
    yield database
    await database.dispose()


@pytest_asyncio.fixture
async def session(database):
    async with database.session() as session:
        yield session


@pytest_asyncio.fixture
async def client(database):
    from main import create_app

    app = create_app(database=database)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def user(session):
    return await add_user(session, "alice")


@pytest_asyncio.fixture
async def admin(session):
    return await add_user(session, "boss", role=UserRole.ADMIN)


@pytest.fixture
def user_headers(user):
    return auth_headers(user)


@pytest.fixture
def admin_headers(admin):
    return auth_headers(admin)
