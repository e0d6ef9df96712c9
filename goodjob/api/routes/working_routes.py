"""
Working Routes (salary & working time)

POST /workings - Submit a salary / working-time record (login required)
GET /workings - List published records, newest first by default
"""

from typing import Optional

from fastapi import APIRouter, Body, Depends, Query, Request

from goodjob.core.auth import get_current_user
from goodjob.schemas.schemas import WorkingListResponse, WorkingResponse
from goodjob.services.mongo_service import ModelManager, get_manager
from goodjob.services.wage_service import pagination, pickup_sort_query, valid_sort_query
from goodjob.services.working_service import list_workings, submit_working
from goodjob.utils.request import get_client_ip

router = APIRouter(prefix="/workings", tags=["Workings"])


@router.post("", response_model=WorkingResponse)
async def create_working(
    request: Request,
    body: dict = Body(...),
    user: dict = Depends(get_current_user),
    manager: ModelManager = Depends(get_manager)
):
    """
    Submit one record. Either the working-time fields or the salary fields
    (or both) must be filled; errors come back as 422 with a readable message.
    """
    return submit_working(body, user, manager, client_ip=get_client_ip(request))


@router.get("", response_model=WorkingListResponse)
async def get_workings(
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    sort_by: Optional[str] = Query(None),
    order: Optional[str] = Query(None),
    manager: ModelManager = Depends(get_manager)
):
    """List published, non-archived records with page/limit and sort_by/order."""
    sort_query = {"sort_by": sort_by, "order": order}
    valid_sort_query(sort_query)
    _, _, sort = pickup_sort_query(sort_query)
    paging = pagination(page, limit)

    return list_workings(manager, paging["page"], paging["limit"], sort)
