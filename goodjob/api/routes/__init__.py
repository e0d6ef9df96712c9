"""
API Routes - Combines all route modules into single router.
"""

from fastapi import APIRouter

from goodjob.api.routes.auth_routes import router as auth_router
from goodjob.api.routes.working_routes import router as working_router
from goodjob.api.routes.experience_routes import router as experience_router
from goodjob.api.routes.job_routes import router as job_router
from goodjob.api.routes.me_routes import router as me_router

# Main API router
api_router = APIRouter()

# Include all sub-routers
api_router.include_router(auth_router)
api_router.include_router(working_router)
api_router.include_router(experience_router)
api_router.include_router(job_router)
api_router.include_router(me_router)
