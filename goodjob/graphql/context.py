"""
GraphQL context - one per request.

Carries the ModelManager, the (optional) logged-in user, the client
address and the DataLoaders that batch the company / job title lookups
of a single query.
"""

from collections import defaultdict
from typing import Any, Callable, List, Optional

from fastapi import Depends, Request
from strawberry.dataloader import DataLoader
from strawberry.fastapi import BaseContext

from goodjob.core.auth import get_optional_user
from goodjob.services.experience_service import INTERVIEW_EXPERIENCE_TYPE, WORK_EXPERIENCE_TYPE
from goodjob.services.mongo_service import ModelManager, get_manager
from goodjob.utils.request import get_client_ip


def _grouped_loader(fetch: Callable[[List[str]], List[dict]], key: Callable[[dict], Any]) -> DataLoader:
    """DataLoader returning, for each key, the fetched documents that `key` maps to it."""

    async def load(keys: List[str]) -> List[List[dict]]:
        grouped = defaultdict(list)
        for doc in fetch(keys):
            grouped[key(doc)].append(doc)
        return [grouped.get(k, []) for k in keys]

    return DataLoader(load_fn=load)


def _company_name(doc: dict) -> Optional[str]:
    return (doc.get("company") or {}).get("name")


def _job_title(doc: dict) -> Optional[str]:
    return doc.get("job_title")


class Loaders:
    def __init__(self, manager: ModelManager):
        workings = manager.SalaryWorkTimeModel
        experiences = manager.ExperienceModel

        self.workings_by_company = _grouped_loader(workings.find_by_company_names, _company_name)
        self.workings_by_job_title = _grouped_loader(workings.find_by_job_titles, _job_title)

        self.work_experiences_by_company = _grouped_loader(
            lambda names: experiences.find_by_company_names(names, WORK_EXPERIENCE_TYPE), _company_name
        )
        self.interview_experiences_by_company = _grouped_loader(
            lambda names: experiences.find_by_company_names(names, INTERVIEW_EXPERIENCE_TYPE), _company_name
        )
        self.work_experiences_by_job_title = _grouped_loader(
            lambda names: experiences.find_by_job_titles(names, WORK_EXPERIENCE_TYPE), _job_title
        )
        self.interview_experiences_by_job_title = _grouped_loader(
            lambda names: experiences.find_by_job_titles(names, INTERVIEW_EXPERIENCE_TYPE), _job_title
        )


class GraphQLContext(BaseContext):
    def __init__(self, manager: ModelManager, user: Optional[dict] = None, client_ip: Optional[str] = None):
        super().__init__()
        self.manager = manager
        self.user = user
        self.client_ip = client_ip
        self.loaders = Loaders(manager)


async def get_context(
    request: Request,
    manager: ModelManager = Depends(get_manager),
    user: Optional[dict] = Depends(get_optional_user)
) -> GraphQLContext:
    """context_getter for the GraphQL router (FastAPI dependencies apply)."""
    return GraphQLContext(manager, user, get_client_ip(request))
