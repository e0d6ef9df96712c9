"""
GoodJob Backend - Test Configuration (conftest.py)

Shared fixtures:
    db        - dict-like fake database, one MagicMock collection per name
    manager   - ModelManager bound to that fake database
    user      - a logged-in Facebook user document
    app       - the FastAPI app with get_manager / get_optional_user overridden
    client    - HTTPX AsyncClient talking to the app through ASGITransport

No MongoDB, SMTP server or OAuth provider is needed.
"""

import os
from collections import defaultdict
from unittest.mock import MagicMock

import pytest
import pytest_asyncio
from bson import ObjectId
from httpx import AsyncClient, ASGITransport

# Settings are read once, so override them before any app import
os.environ["JWT_SECRET_KEY"] = "test-secret"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["GOOGLE_CLIENT_ID"] = ""


def _assign_id(document):
    # pymongo sets _id on the inserted document
    document.setdefault("_id", ObjectId())
    return MagicMock(inserted_id=document["_id"])


@pytest.fixture
def db():
    """
    Fake database: db["workings"] etc. are independent MagicMocks whose
    insert_one assigns an _id the way pymongo does.
    """
    def new_collection():
        collection = MagicMock()
        collection.insert_one.side_effect = _assign_id
        return collection

    return defaultdict(new_collection)


@pytest.fixture
def manager(db):
    from goodjob.services.mongo_service import ModelManager
    return ModelManager(db)


@pytest.fixture
def user():
    return {
        "_id": ObjectId(),
        "name": "Mark Chen",
        "email": "mark@goodjob.life",
        "facebook_id": "-1",
        "facebook": {"id": "-1", "name": "Mark Chen"},
        "email_status": "UNVERIFIED",
    }


@pytest.fixture
def current_user(user):
    """The user returned by get_optional_user; tests set it to None to log out."""
    return {"value": user}


@pytest.fixture
def app(manager, current_user):
    from goodjob.core.auth import get_optional_user
    from goodjob.main import app as fastapi_app
    from goodjob.services.mongo_service import get_manager

    fastapi_app.dependency_overrides[get_manager] = lambda: manager
    fastapi_app.dependency_overrides[get_optional_user] = lambda: current_user["value"]
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(app):
    """
    Usage:
        async def test_me(client):
            response = await client.get("/me")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as async_client:
        yield async_client
