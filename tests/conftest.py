import os

os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("DB_TYPE", "sqlite")

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import backoffice.models  # noqa: F401
from main import app
from backoffice.core.db import Base, get_db
from backoffice.core.security import hash_password, hash_pin
from backoffice.models.user_models import User
from backoffice.utils.get_user import get_current_user

TEST_PIN = "2468"
PIN_HEADER = {"X-Auth-Pin": TEST_PIN}


@pytest_asyncio.fixture
async def session_factory():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield sessionmaker(bind=engine, class_=AsyncSession, autoflush=False, expire_on_commit=False)

    await engine.dispose()


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def admin_user(db):
    user = User(
        username="admin",
        password_hash=hash_password("admin123"),
        pin_hash=hash_pin(TEST_PIN),
        role="admin",
        is_active=True,
        token_version=0,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


def _override_db(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session
    return override_get_db


@pytest_asyncio.fixture
async def client(session_factory, admin_user):
    """Client authenticated as the admin without going through JWT."""
    async def override_current_user():
        return admin_user

    app.dependency_overrides[get_db] = _override_db(session_factory)
    app.dependency_overrides[get_current_user] = override_current_user
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def anon_client(session_factory, admin_user):
    """Client with the real auth chain, for login and token checks."""
    app.dependency_overrides[get_db] = _override_db(session_factory)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
