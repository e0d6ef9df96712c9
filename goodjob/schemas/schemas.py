"""
Pydantic Schemas - Request/Response Validation

All API request and response schemas in one file for simplicity.
"""

from pydantic import AnyUrl, BaseModel, EmailStr, Field, StrictInt, StrictStr, model_validator
from typing import Optional, List


# ============================================================
# AUTH SCHEMAS
# ============================================================

class FacebookLoginRequest(BaseModel):
    # a missing token is a 401, not a 422
    access_token: Optional[str] = None


class GoogleLoginRequest(BaseModel):
    id_token: Optional[str] = None


class LoginUser(BaseModel):
    id: str = Field(..., alias="_id")
    facebook_id: Optional[str] = None
    google_id: Optional[str] = None
    email: Optional[str] = None

    model_config = {"populate_by_name": True}


class LoginResponse(BaseModel):
    user: LoginUser
    token: str


# ============================================================
# USER SCHEMAS
# ============================================================

class MeResponse(BaseModel):
    id: str = Field(..., alias="_id")
    name: Optional[str] = None
    email: Optional[str] = None
    email_status: Optional[str] = None
    facebook_id: Optional[str] = None
    google_id: Optional[str] = None
    time_and_salary_count: int = 0

    model_config = {"populate_by_name": True}


class RecommendationStringResponse(BaseModel):
    user: dict
    recommendation_string: str


class NewUser(BaseModel):
    """A user about to be inserted; the provider id and profile come in pairs."""
    name: StrictStr = Field(..., min_length=1)
    email: EmailStr
    facebook_id: Optional[str] = None
    facebook: Optional[dict] = None
    google_id: Optional[str] = None
    google: Optional[dict] = None

    @model_validator(mode="after")
    def check_providers(self):
        if (self.facebook_id is None) != (self.facebook is None):
            raise ValueError('"facebook_id" and "facebook" must be given together')
        if (self.google_id is None) != (self.google is None):
            raise ValueError('"google_id" and "google" must be given together')
        if self.facebook_id is None and self.google_id is None:
            raise ValueError('one of "facebook_id" or "google_id" is required')
        return self


# ============================================================
# WORKING SCHEMAS
# ============================================================

class WorkingResponse(BaseModel):
    working: dict


class WorkingListResponse(BaseModel):
    total_count: int
    page: int
    time_and_salary: List[dict] = []


# ============================================================
# EXPERIENCE SCHEMAS
# ============================================================

class ExperienceId(BaseModel):
    id: str = Field(..., alias="_id")

    model_config = {"populate_by_name": True}


class CreateExperienceResponse(BaseModel):
    success: bool
    experience: ExperienceId


# ============================================================
# JOB TITLE SCHEMAS
# ============================================================

class JobTitleResponse(BaseModel):
    id: str = Field(..., alias="_id")
    des: Optional[str] = None

    model_config = {"populate_by_name": True}


# ============================================================
# EMAIL TEMPLATE VARIABLES
# ============================================================

class SurveyVariables(BaseModel):
    userName: StrictStr = Field(..., min_length=1)
    surveryUrl: AnyUrl


class NotifiedExperience(BaseModel):
    title: StrictStr
    typeName: StrictStr
    content: StrictStr
    viewCount: StrictInt = Field(..., ge=0)
    url: AnyUrl


class ExperienceViewLogNotificationVariables(BaseModel):
    username: StrictStr = Field(..., min_length=1)
    experience: NotifiedExperience


# ============================================================
# GENERIC SCHEMAS
# ============================================================

class HealthResponse(BaseModel):
    status: str
    mongodb: str
