"""
Authentication Route Tests

What we test:
    - Facebook / Google login for existing and new users
    - 401 for a missing token or a token the provider rejects
    - the returned JWT identifies the user
"""

from unittest.mock import AsyncMock, patch

import pytest
from bson import ObjectId

from goodjob.core.auth import decode_token
from goodjob.services.oauth_client import OAuthVerificationError

FACEBOOK_ACCOUNT = {"id": "-1", "name": "Mark Chen", "email": "mark@goodjob.life"}
GOOGLE_ACCOUNT = {"sub": "g-1", "name": "Mark Chen", "email": "mark@goodjob.life"}


class TestFacebookLogin:
    @pytest.mark.asyncio
    async def test_existing_user(self, client, db, user):
        db["users"].find_one.return_value = user

        with patch("goodjob.services.oauth_client.facebook_access_token_auth",
                   AsyncMock(return_value=FACEBOOK_ACCOUNT)):
            response = await client.post("/auth/facebook", json={"access_token": "fb-token"})

        assert response.status_code == 200
        body = response.json()
        assert body["user"] == {
            "_id": str(user["_id"]),
            "facebook_id": "-1",
            "email": "mark@goodjob.life",
        }
        assert decode_token(body["token"])["user_id"] == str(user["_id"])
        db["users"].insert_one.assert_not_called()

    @pytest.mark.asyncio
    async def test_new_user_is_created(self, client, db):
        db["users"].find_one.return_value = None

        with patch("goodjob.services.oauth_client.facebook_access_token_auth",
                   AsyncMock(return_value=FACEBOOK_ACCOUNT)):
            response = await client.post("/auth/facebook", json={"access_token": "fb-token"})

        assert response.status_code == 200
        created = db["users"].insert_one.call_args[0][0]
        assert created["facebook_id"] == "-1"
        assert created["facebook"] == FACEBOOK_ACCOUNT
        assert created["email_status"] == "UNVERIFIED"
        assert response.json()["user"]["_id"] == str(created["_id"])

    @pytest.mark.asyncio
    async def test_missing_token(self, client):
        response = await client.post("/auth/facebook", json={})
        assert response.status_code == 401
        assert response.json() == {"detail": "Unauthorized"}

    @pytest.mark.asyncio
    async def test_rejected_token(self, client):
        with patch("goodjob.services.oauth_client.facebook_access_token_auth",
                   AsyncMock(side_effect=OAuthVerificationError("bad token"))):
            response = await client.post("/auth/facebook", json={"access_token": "bad"})

        assert response.status_code == 401


class TestGoogleLogin:
    @pytest.mark.asyncio
    async def test_new_user_is_created(self, client, db):
        db["users"].find_one.return_value = None

        with patch("goodjob.services.oauth_client.google_verify_id_token",
                   AsyncMock(return_value=GOOGLE_ACCOUNT)):
            response = await client.post("/auth/google", json={"id_token": "google-token"})

        assert response.status_code == 200
        created = db["users"].insert_one.call_args[0][0]
        assert created["google_id"] == "g-1"
        assert response.json()["user"] == {"_id": str(created["_id"]), "google_id": "g-1"}

    @pytest.mark.asyncio
    async def test_account_without_email_is_rejected(self, client, db):
        db["users"].find_one.return_value = None
        account = {"sub": "g-2", "name": "No Mail"}

        with patch("goodjob.services.oauth_client.google_verify_id_token", AsyncMock(return_value=account)):
            response = await client.post("/auth/google", json={"id_token": "google-token"})

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_missing_token(self, client):
        response = await client.post("/auth/google", json={"id_token": ""})
        assert response.status_code == 401


class TestMe:
    @pytest.mark.asyncio
    async def test_me(self, client, user):
        response = await client.get("/me")
        assert response.status_code == 200
        assert response.json()["_id"] == str(user["_id"])
        assert response.json()["name"] == "Mark Chen"

    @pytest.mark.asyncio
    async def test_me_requires_login(self, client, current_user):
        current_user["value"] = None
        response = await client.get("/me")
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_recommendation_string(self, client, db, user):
        recommendation_id = ObjectId()
        db["recommendations"].find_one_and_update.return_value = {
            "_id": recommendation_id,
            "user": user["_id"],
            "count": 0,
        }

        response = await client.get("/me/recommendations")

        assert response.status_code == 200
        assert response.json() == {
            "user": {"_id": str(user["_id"])},
            "recommendation_string": str(recommendation_id),
        }
