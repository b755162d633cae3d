import os

os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from iqol.database import Base, enable_sqlite_foreign_keys, get_db
from iqol.main import app
from iqol.models import Brand, User
from iqol.services.auth_service import create_access_token


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
async def session_maker(anyio_backend, tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'iqol.db'}")
    enable_sqlite_foreign_keys(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
async def client(anyio_backend, session_maker):
    async def override_get_db():
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
    app.dependency_overrides.pop(get_db, None)


@pytest.fixture
def seed(session_maker):
    """Insert ORM rows and return them with their ids populated."""
    async def _seed(*rows):
        async with session_maker() as session:
            session.add_all(rows)
            await session.commit()
        return rows if len(rows) > 1 else rows[0]
    return _seed


@pytest.fixture
async def brands(anyio_backend, seed):
    return await seed(Brand(name="TruEstate"), Brand(name="Canvas Homes"), Brand(name="ACN"))


def make_user(name: str, role: str = "user", allowed_brands=None, password_hash: str = "unused") -> User:
    return User(
        name=name,
        email=f"{name.lower()}@iqol.in",
        password_hash=password_hash,
        role=role,
        allowed_brands=list(allowed_brands or []),
        is_active=True,
    )


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(str(user.id))}"}
