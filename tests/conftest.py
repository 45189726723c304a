import os
import sys
from pathlib import Path

import httpx
import pytest_asyncio

# Ensure project root on path before importing app modules
project_root = Path(__file__).resolve().parents[1]
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

# Configure the app to use a local SQLite database during tests
_test_db_path = project_root / "test.db"
os.environ["APP_DATABASE_URL"] = f"sqlite+aiosqlite:///{_test_db_path.as_posix()}"
os.environ["APP_DEBUG"] = "false"
os.environ["APP_AUTOSEED_ENABLED"] = "false"
os.environ["APP_PASSWORD_HASH_ROUNDS"] = "4"

# Start each test session from a clean database file
if _test_db_path.exists():
    _test_db_path.unlink()


@pytest_asyncio.fixture(autouse=True)
async def setup_database():
    """Create all tables before each test and drop them afterwards."""
    from nomadnest.database import create_tables, drop_tables

    await create_tables()
    yield
    await drop_tables()


@pytest_asyncio.fixture
async def store(setup_database):
    """A document store on its own session, for arranging and inspecting data."""
    from nomadnest.database import AsyncSessionLocal
    from nomadnest.services.document_store import DocumentStore

    async with AsyncSessionLocal() as session:
        yield DocumentStore(session)


@pytest_asyncio.fixture
async def client(setup_database):
    from nomadnest.main import app

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


async def register(client, email: str, name: str = "Test User", password: str = "secret123") -> dict:
    """Register through the API and return the auth response with ready-made headers."""
    response = await client.post(
        "/auth/register",
        json={"email": email, "password": password, "name": name},
    )
    assert response.status_code == 201, response.text
    data = response.json()
    data["headers"] = {"Authorization": f"Bearer {data['access_token']}"}
    return data


@pytest_asyncio.fixture
async def user(client):
    return await register(client, "traveler@example.com", "Jane Traveler")


@pytest_asyncio.fixture
async def other_user(client):
    return await register(client, "buddy@example.com", "Sam Buddy")


@pytest_asyncio.fixture
async def admin(store):
    from nomadnest.services.auth_service import register_user
    from nomadnest.services.jwt_service import JWTService

    admin_user = await register_user(store, "admin@example.com", "adminpass", "Admin User", role="admin")
    token = JWTService.create_token(admin_user["id"], "admin")
    return {"user": admin_user, "headers": {"Authorization": f"Bearer {token}"}}
