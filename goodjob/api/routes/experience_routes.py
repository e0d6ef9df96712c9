"""
Experience Routes

POST /work_experiences - Share a work experience (login required)
POST /interview_experiences - Share an interview experience (login required)

Both run the matching GraphQL mutation, so REST and GraphQL clients store
experiences the same way.
"""

import logging

from fastapi import APIRouter, Body, Depends, Request

from goodjob.core.auth import get_current_user
from goodjob.core.errors import HttpError
from goodjob.graphql.context import GraphQLContext
from goodjob.graphql.schema import schema
from goodjob.schemas.schemas import CreateExperienceResponse
from goodjob.services.experience_service import (
    pickup_interview_experience,
    pickup_work_experience,
    resolve_company,
    validate_work_experience,
)
from goodjob.services.mongo_service import ModelManager, get_manager
from goodjob.utils.request import get_client_ip

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Experiences"])

CREATE_WORK_EXPERIENCE = """
    mutation CreateWorkExperience($input: CreateWorkExperienceInput!) {
        createWorkExperience(input: $input) {
            success
            experience {
                id
            }
        }
    }
"""

CREATE_INTERVIEW_EXPERIENCE = """
    mutation CreateInterviewExperience($input: CreateInterviewExperienceInput!) {
        createInterviewExperience(input: $input) {
            success
            experience {
                id
            }
        }
    }
"""


async def _run_mutation(mutation: str, field: str, experience: dict, context: GraphQLContext) -> dict:
    result = await schema.execute(mutation, variable_values={"input": experience}, context_value=context)

    if result.errors:
        # every failure is reported as 422, the frontend only knows that status
        message = "; ".join(error.message for error in result.errors)
        logger.info("%s failed: %s", field, message)
        raise HttpError(message, 422)

    payload = result.data[field]
    return {
        "success": payload["success"],
        "experience": {"_id": payload["experience"]["id"]},
    }


@router.post("/work_experiences", response_model=CreateExperienceResponse)
async def create_work_experience(
    request: Request,
    body: dict = Body(...),
    user: dict = Depends(get_current_user),
    manager: ModelManager = Depends(get_manager)
):
    """Validate, resolve the company, then store through createWorkExperience."""
    validate_work_experience(body)

    experience = pickup_work_experience(body)
    experience["company"] = resolve_company(manager, {
        "id": body.get("company_id"),
        "query": body.get("company_query"),
    })

    context = GraphQLContext(manager, user, get_client_ip(request))
    return await _run_mutation(CREATE_WORK_EXPERIENCE, "createWorkExperience", experience, context)


@router.post("/interview_experiences", response_model=CreateExperienceResponse)
async def create_interview_experience(
    request: Request,
    body: dict = Body(...),
    user: dict = Depends(get_current_user),
    manager: ModelManager = Depends(get_manager)
):
    """Store through createInterviewExperience; validation happens in the mutation."""
    experience = pickup_interview_experience(body)

    context = GraphQLContext(manager, user, get_client_ip(request))
    return await _run_mutation(CREATE_INTERVIEW_EXPERIENCE, "createInterviewExperience", experience, context)
