import os
import tempfile
import uuid
from contextlib import asynccontextmanager

import pytest
from httpx import ASGITransport, AsyncClient

# IMPORTANT:
# Set env vars BEFORE importing app.core.config/app.main (pydantic settings load at import time)
os.environ["ENV"] = "test"
os.environ.setdefault(
    "DATABASE_URL",
    "sqlite+aiosqlite:///" + os.path.join(tempfile.gettempdir(), f"language_exchange_test_{uuid.uuid4().hex[:8]}.db"),
)
os.environ.setdefault("JWT_SECRET_KEY", "dev-test-secret")
os.environ.setdefault("CORS_ORIGINS", "http://localhost:5173")
# Chat provider stays unconfigured unless a test opts in.
os.environ["STREAM_API_KEY"] = ""
os.environ["STREAM_API_SECRET"] = ""

from app.main import app as fastapi_app  # noqa: E402
from app.db.base_class import Base  # noqa: E402
import app.db.base  # noqa: F401,E402  (register models)
from app.db.session import engine, AsyncSessionLocal, get_db_session  # noqa: E402

COOKIE_NAME = "jwt"
ONBOARDING_PROFILE = {
    "fullName": "Ann Example",
    "bio": "Learning Spanish one podcast at a time",
    "nativeLanguage": "english",
    "learningLanguage": "spanish",
    "location": "Lisbon, Portugal",
}


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
async def _schema():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def db_session(_schema):
    async with AsyncSessionLocal() as session:
        yield session


@pytest.fixture
async def client(db_session):
    """
    Overrides app.db.session.get_db_session so every route and the session
    dependency use the same test session.
    """

    async def _override_get_db_session():
        yield db_session

    fastapi_app.dependency_overrides[get_db_session] = _override_get_db_session

    transport = ASGITransport(app=fastapi_app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    fastapi_app.dependency_overrides.pop(get_db_session, None)


@pytest.fixture
def client_factory(client):
    """Extra clients with their own cookie jars, sharing the overridden session."""

    @asynccontextmanager
    async def _factory():
        transport = ASGITransport(app=fastapi_app)
        async with AsyncClient(transport=transport, base_url="http://test") as c:
            yield c

    return _factory


# --- Small helpers ---

def _unique(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:10]}"


@pytest.fixture
def unique_str():
    return _unique


@pytest.fixture
def user_factory(unique_str):
    """Sign up through the API; the client is left authenticated as the new user."""

    async def _create(
        client: AsyncClient,
        *,
        email: str | None = None,
        full_name: str = "Ann",
        password: str = "secret123",
    ):
        email = email or f"{unique_str('user')}@example.com"
        r = await client.post(
            "/auth/signup",
            json={"email": email, "password": password, "fullName": full_name},
        )
        assert r.status_code == 201, r.text
        data = r.json()
        assert client.cookies.get(COOKIE_NAME), "Signup did not set the session cookie"
        return {
            "id": data["user"]["id"],
            "email": email,
            "full_name": full_name,
            "password": password,
        }

    return _create


@pytest.fixture
def login_helper():
    async def _login(client: AsyncClient, *, email: str, password: str):
        client.cookies.clear()
        r = await client.post("/auth/login", json={"email": email, "password": password})
        assert r.status_code == 200, r.text
        token = client.cookies.get(COOKIE_NAME)
        assert token, "Login did not set the session cookie"
        return r.json()["user"]

    return _login


@pytest.fixture
def onboard_helper():
    async def _onboard(client: AsyncClient, **overrides):
        payload = {**ONBOARDING_PROFILE, **overrides}
        r = await client.post("/auth/onboard", json=payload)
        assert r.status_code == 200, r.text
        return r.json()["user"]

    return _onboard


@pytest.fixture
def onboarded_user(user_factory, onboard_helper):
    async def _create(client: AsyncClient, **kwargs):
        user = await user_factory(client, **kwargs)
        await onboard_helper(client, fullName=user["full_name"])
        return user

    return _create
