"""
User Service - OAuth logins and per-user helpers.

Both REST (/auth/*) and GraphQL (facebookLogin / googleLogin) go through
the login functions here, so users are created the same way everywhere.
"""

import logging
from typing import Tuple

from pydantic import ValidationError

from goodjob.core.auth import sign_user
from goodjob.core.errors import HttpError
from goodjob.core.validation import required_non_empty_string
from goodjob.services import oauth_client
from goodjob.services.mongo_service import ModelManager

logger = logging.getLogger(__name__)


def _find_or_create(manager: ModelManager, account: dict, provider: str, provider_id: str) -> dict:
    user_model = manager.UserModel
    if provider == "facebook":
        user = user_model.find_one_by_facebook_id(provider_id)
    else:
        user = user_model.find_one_by_google_id(provider_id)

    if not user:
        new_user = {
            "name": account.get("name"),
            f"{provider}_id": provider_id,
            provider: account,
            "email": account.get("email"),
        }
        try:
            user = user_model.create(new_user)
        except ValidationError as e:
            logger.info("create %s user failed: %s", provider, e)
            raise HttpError("Unauthorized", 401)
        logger.info("new %s user id=%s", provider, user["_id"])

    user_model.set_missing_name_and_email(user, account)
    for field in ["name", "email"]:
        if not user.get(field) and account.get(field):
            user[field] = account[field]
    return user


async def facebook_login(manager: ModelManager, access_token: str) -> Tuple[dict, str]:
    """Verify a Facebook access token; returns (user, jwt)."""
    if not required_non_empty_string(access_token):
        raise HttpError("Unauthorized", 401)
    try:
        account = await oauth_client.facebook_access_token_auth(access_token)
    except oauth_client.OAuthVerificationError:
        raise HttpError("Unauthorized", 401)

    user = _find_or_create(manager, account, "facebook", account["id"])
    return user, sign_user(user)


async def google_login(manager: ModelManager, id_token: str) -> Tuple[dict, str]:
    """Verify a Google ID token; returns (user, jwt)."""
    if not required_non_empty_string(id_token):
        raise HttpError("Unauthorized", 401)
    try:
        account = await oauth_client.google_verify_id_token(id_token)
    except oauth_client.OAuthVerificationError:
        raise HttpError("Unauthorized", 401)

    user = _find_or_create(manager, account, "google", account["sub"])
    return user, sign_user(user)


def get_recommendation_string(manager: ModelManager, user: dict) -> str:
    recommendation = manager.RecommendationModel.get_or_create_by_user(user["_id"])
    return str(recommendation["_id"])
