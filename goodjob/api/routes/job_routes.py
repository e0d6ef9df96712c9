"""
Job Title Routes

GET /jobs/search - Job title autocomplete over the job title catalogue
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from goodjob.schemas.schemas import JobTitleResponse
from goodjob.services.mongo_service import ModelManager, get_manager
from goodjob.services.statistics_service import search_job_title_catalogue

router = APIRouter(prefix="/jobs", tags=["Jobs"])


@router.get("/search", response_model=List[JobTitleResponse])
async def search_jobs(
    key: Optional[str] = Query(None, description="Keyword contained in the job title"),
    page: int = Query(0, ge=0),
    manager: ModelManager = Depends(get_manager)
):
    """25 job titles per page; without a key every title is listed."""
    return search_job_title_catalogue(manager, key, page)
