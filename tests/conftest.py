import asyncio
import os
import tempfile
import uuid

_TMP_DIR = tempfile.mkdtemp(prefix="devconnect-tests-")
os.environ["DATABASE_PATH"] = os.path.join(_TMP_DIR, "test.db")
os.environ["LOG_DIR"] = os.path.join(_TMP_DIR, "logs")
os.environ["UPLOAD_DIR"] = os.path.join(_TMP_DIR, "uploads")
os.environ["PASSWORD_HASH_ROUNDS"] = "4"
os.environ["EMAIL_HOST"] = ""
os.environ["RAPIDAPI_KEY"] = ""
os.environ["OSS_ACCESS_KEY_ID"] = ""

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from app.config import settings  # noqa: E402
from app.database import AsyncSessionLocal, drop_tables  # noqa: E402
from app.main import app  # noqa: E402


def run_db(fn):
    """Run ``fn(session)`` against the test database and return its result."""
    async def _run():
        async with AsyncSessionLocal() as session:
            result = await fn(session)
            await session.commit()
            return result
    return asyncio.run(_run())


@pytest.fixture
def client():
    asyncio.run(drop_tables())
    with TestClient(app) as test_client:
        yield test_client


def _login(client, username_or_email, password):
    resp = client.post("/api/auth/signin", json={"username_or_email": username_or_email, "password": password})
    assert resp.status_code == 200, resp.text
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


@pytest.fixture
def make_user(client):
    """Sign up a user, fill in a display name and return ``(user_id, headers)``."""
    def _make(username=None, password="secret123", name=None, roles=None):
        username = username or f"user_{uuid.uuid4().hex[:8]}"
        body = {"username": username, "email": f"{username}@example.com", "password": password}
        if roles is not None:
            body["roles"] = roles
        resp = client.post("/api/auth/signup", json=body)
        assert resp.status_code == 201, resp.text
        headers = _login(client, username, password)
        me = client.put("/api/user", json={"name": name or username.title()}, headers=headers)
        assert me.status_code == 200, me.text
        return me.json()["id"], headers
    return _make


@pytest.fixture
def admin_headers(client):
    return _login(client, settings.ADMIN_USERNAME, settings.ADMIN_PASSWORD)


@pytest.fixture
def login(client):
    def _do(username_or_email, password):
        return _login(client, username_or_email, password)
    return _do
