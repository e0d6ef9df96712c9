"""
Current User Routes

GET /me - The logged-in user
GET /me/recommendations - The user's recommendation string (created on first call)
"""

from fastapi import APIRouter, Depends

from goodjob.core.auth import get_current_user
from goodjob.schemas.schemas import MeResponse, RecommendationStringResponse
from goodjob.services.mongo_service import ModelManager, get_manager
from goodjob.services.user_service import get_recommendation_string

router = APIRouter(prefix="/me", tags=["Me"])


@router.get("", response_model=MeResponse)
async def get_me(user: dict = Depends(get_current_user)):
    return {
        "_id": str(user["_id"]),
        "name": user.get("name"),
        "email": user.get("email"),
        "email_status": user.get("email_status"),
        "facebook_id": user.get("facebook_id"),
        "google_id": user.get("google_id"),
        "time_and_salary_count": user.get("time_and_salary_count", 0),
    }


@router.get("/recommendations", response_model=RecommendationStringResponse)
async def get_my_recommendation(
    user: dict = Depends(get_current_user),
    manager: ModelManager = Depends(get_manager)
):
    """Friends send this string with their workings to credit the user."""
    return {
        "user": {"_id": str(user["_id"])},
        "recommendation_string": get_recommendation_string(manager, user),
    }
