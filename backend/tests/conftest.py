from __future__ import annotations

from collections.abc import AsyncIterator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from dreamcatcher.db.base import Base
from dreamcatcher.db.database import get_session
from dreamcatcher.main import app
from dreamcatcher.models import Admin
from dreamcatcher.security.passwords import PasswordHasher
from dreamcatcher.security.tokens import ADMIN_DOMAIN, CLIENT_DOMAIN, build_token_service
from dreamcatcher.utils.config import Settings, get_settings

ADMIN_EMAIL = "admin@dreamcatcher.com"
ADMIN_PASSWORD = "correct horse"

BOOKING_REQUEST = {
    "accessKey": "1234",
    "password": "secret1",
    "packageName": "Gold",
    "totalPrice": 5500,
    "email": "a@b.com",
    "phoneNumber": "555",
    "selectedItems": ["album", "drone"],
    "brideName": "Anna",
    "groomName": "Piotr",
    "weddingDate": "2026-06-20",
}


class ScriptedRandom:
    """Stands in for ``secrets.SystemRandom`` and replays fixed codes."""

    def __init__(self, *codes: str) -> None:
        self._chars = iter("".join(codes))

    def choice(self, alphabet: str) -> str:
        return next(self._chars)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        DATABASE_URL="sqlite+aiosqlite://",
        JWT_SECRET="test-client-secret",
        ADMIN_JWT_SECRET="test-admin-secret",
        BCRYPT_ROUNDS=4,
        UNIT_OF_WORK_TIMEOUT=5,
    )


@pytest.fixture
def hasher(settings: Settings) -> PasswordHasher:
    return PasswordHasher(rounds=settings.bcrypt_rounds)


@pytest.fixture
def client_tokens(settings: Settings):
    return build_token_service(CLIENT_DOMAIN, settings)


@pytest.fixture
def admin_tokens(settings: Settings):
    return build_token_service(ADMIN_DOMAIN, settings)


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as connection:
        await connection.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


@pytest.fixture
async def client(session_factory, settings: Settings) -> AsyncIterator[AsyncClient]:
    async def override_get_session() -> AsyncIterator[AsyncSession]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_settings] = lambda: settings
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as http_client:
        yield http_client
    app.dependency_overrides.clear()


@pytest.fixture
async def admin(session_factory, hasher: PasswordHasher) -> Admin:
    async with session_factory() as session:
        admin = Admin(email=ADMIN_EMAIL, password_hash=hasher.hash(ADMIN_PASSWORD))
        session.add(admin)
        await session.commit()
    return admin


@pytest.fixture
def admin_headers(admin: Admin, admin_tokens) -> dict[str, str]:
    token = admin_tokens.issue({"sub": str(admin.id), "email": admin.email})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def book(client: AsyncClient):
    async def _book(**overrides) -> dict:
        response = await client.post("/api/bookings", json={**BOOKING_REQUEST, **overrides})
        assert response.status_code == 201, response.text
        return response.json()

    return _book
