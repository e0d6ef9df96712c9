"""
OAuth Client - verifies provider tokens over HTTP.

Facebook: an access token is checked by reading /me from the Graph API.
Google:   an ID token is checked with the tokeninfo endpoint.
"""

import logging
from typing import Optional

import httpx

from goodjob.core.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()


class OAuthVerificationError(Exception):
    """The provider rejected the token (or could not be asked)."""


async def _get_json(url: str, params: dict, client: Optional[httpx.AsyncClient] = None) -> dict:
    try:
        if client is not None:
            response = await client.get(url, params=params)
        else:
            async with httpx.AsyncClient(timeout=settings.oauth_timeout_seconds) as new_client:
                response = await new_client.get(url, params=params)
        response.raise_for_status()
        return response.json()
    except (httpx.HTTPError, ValueError) as e:
        logger.info("OAuth provider request failed: %s", e)
        raise OAuthVerificationError(str(e)) from e


async def facebook_access_token_auth(access_token: str, client: Optional[httpx.AsyncClient] = None) -> dict:
    """Return the Facebook account {id, name, email} of an access token."""
    account = await _get_json(
        settings.facebook_graph_url,
        {"fields": "id,name,email", "access_token": access_token},
        client,
    )
    if not account.get("id"):
        raise OAuthVerificationError("facebook account has no id")
    return account


async def google_verify_id_token(id_token: str, client: Optional[httpx.AsyncClient] = None) -> dict:
    """Return the claims of a Google ID token (`sub` is the account id)."""
    claims = await _get_json(settings.google_tokeninfo_url, {"id_token": id_token}, client)
    if not claims.get("sub"):
        raise OAuthVerificationError("google token has no subject")
    if settings.google_client_id and claims.get("aud") != settings.google_client_id:
        raise OAuthVerificationError("google token audience mismatch")
    return claims
