import os
import sys
import tempfile
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Settings are read at import time
os.environ["ENVIRONMENT"] = "test"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["DATA_PATH"] = tempfile.mkdtemp(prefix="service-manager-tests-")
os.environ["NTFY_URL"] = "https://ntfy.sh"
os.environ["NTFY_TOPIC"] = "test-topic"
os.environ["FRONTEND_URL"] = "http://localhost:5174"
os.environ.pop("DATABASE_URL", None)

import httpx  # noqa: E402
import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from sqlalchemy import event  # noqa: E402
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from service_manager import models  # noqa: E402,F401
from service_manager.database import Base, get_db  # noqa: E402
from service_manager.main import app  # noqa: E402
from service_manager.utils.rate_limit import limiter  # noqa: E402


def _enable_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@pytest.fixture(autouse=True)
def reset_rate_limiter():
    limiter.reset()
    yield
    limiter.reset()


@pytest_asyncio.fixture
async def session_factory():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    event.listen(engine.sync_engine, "connect", _enable_foreign_keys)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, expire_on_commit=False)

    await engine.dispose()


@pytest_asyncio.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides = {}


@pytest.fixture
def register(client):
    """Register a user and return (headers, user)."""

    async def _register(email="alice@example.com", password="secret123", name="Alice"):
        response = await client.post(
            "/api/auth/register",
            json={"email": email, "password": password, "name": name},
        )
        assert response.status_code == 201, response.text
        body = response.json()
        return {"Authorization": f"Bearer {body['token']}"}, body["user"]

    return _register


@pytest_asyncio.fixture
async def auth_headers(register):
    headers, _ = await register()
    return headers


@pytest_asyncio.fixture
async def other_headers(register):
    headers, _ = await register(email="bob@example.com", name="Bob")
    return headers


@pytest.fixture
def create_service(client):
    async def _create(headers, **fields):
        payload = {"name": "API Gateway"}
        payload.update(fields)
        response = await client.post("/api/services", json=payload, headers=headers)
        assert response.status_code == 201, response.text
        return response.json()["service"]

    return _create
