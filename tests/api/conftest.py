"""
API test fixtures.

Requests go through httpx's ASGI transport with the database dependency
pointed at the test session.
"""

import httpx
import pytest

from badge_engine.db.session import get_async_db
from badge_engine.main import app


@pytest.fixture
async def client(db):
    async def override_db():
        yield db

    app.dependency_overrides[get_async_db] = override_db
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
