import pytest
from fastapi import Depends, HTTPException, status
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool
from app.main import app
from app.db.base import Base
from app.db.postgres import get_db
from app.auth.middleware import JWTPayload, security, verify_token
from factories import TOKENS, auth_headers, create_guest, create_practitioner


@pytest.fixture(scope="function")
async def session_factory(tmp_path):
    """Fresh SQLite database per test, shared by every request of that test."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        poolclass=NullPool,
        connect_args={"timeout": 30},
        echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest.fixture(scope="function")
async def db_session(session_factory):
    """Session for arranging rows before the requests run."""
    async with session_factory() as session:
        yield session


@pytest.fixture(scope="function")
async def client(session_factory):
    """Create a test client where each request gets its own database session."""

    async def override_get_db():
        async with session_factory() as session:
            yield session

    async def override_verify_token(credentials=Depends(security)) -> JWTPayload:
        payload = TOKENS.get(credentials.credentials)
        if payload is None:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
        return payload

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[verify_token] = override_verify_token

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
    TOKENS.clear()


@pytest.fixture
async def guest(db_session):
    return await create_guest(db_session)


@pytest.fixture
async def practitioner(db_session):
    return await create_practitioner(db_session)


@pytest.fixture
def guest_headers(guest):
    return auth_headers(guest.id, "guest")


@pytest.fixture
def practitioner_headers(practitioner):
    return auth_headers(practitioner.id, "practitioner")
