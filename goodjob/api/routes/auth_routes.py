"""
Authentication Routes

POST /auth/facebook - Login with a Facebook access token
POST /auth/google - Login with a Google ID token

Both return the platform's own JWT; send it as Authorization: Bearer <token>.
"""

from fastapi import APIRouter, Depends

from goodjob.schemas.schemas import (
    FacebookLoginRequest, GoogleLoginRequest, LoginResponse
)
from goodjob.services.mongo_service import ModelManager, get_manager
from goodjob.services.user_service import facebook_login, google_login

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/facebook", response_model=LoginResponse, response_model_exclude_none=True)
async def login_with_facebook(request: FacebookLoginRequest, manager: ModelManager = Depends(get_manager)):
    """Exchange a Facebook access token for a JWT. Unknown users are created."""
    user, token = await facebook_login(manager, request.access_token)

    return {
        "user": {
            "_id": str(user["_id"]),
            "facebook_id": user.get("facebook_id"),
            "email": user.get("email"),
        },
        "token": token,
    }


@router.post("/google", response_model=LoginResponse, response_model_exclude_none=True)
async def login_with_google(request: GoogleLoginRequest, manager: ModelManager = Depends(get_manager)):
    """Exchange a Google ID token for a JWT. Unknown users are created."""
    user, token = await google_login(manager, request.id_token)

    return {
        "user": {
            "_id": str(user["_id"]),
            "google_id": user.get("google_id"),
        },
        "token": token,
    }
