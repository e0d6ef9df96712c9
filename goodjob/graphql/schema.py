"""
GraphQL schema - queries and mutations served at /graphql.

Field names stay snake_case (auto_camel_case is off); the few camelCase
mutations and arguments are named explicitly.
"""

import dataclasses
from enum import Enum
from typing import Annotated, List, Optional

import strawberry
from strawberry.fastapi import GraphQLRouter
from strawberry.schema.config import StrawberryConfig
from strawberry.types import Info

from goodjob.core.validation import required_number_in_range
from goodjob.graphql.context import get_context
from goodjob.graphql.errors import authentication_error, graphql_errors, user_input_error
from goodjob.graphql.types import (
    Company,
    Experience,
    InternExperience,
    InterviewExperience,
    JobTitle,
    PublishStatus,
    SalaryWorkTime,
    User,
    WorkExperience,
)
from goodjob.services import experience_service, statistics_service, user_service
from goodjob.services.statistics_service import search_job_title_catalogue


def _require_user(info: Info) -> dict:
    user = info.context.user
    if user is None:
        raise authentication_error()
    return user


def _to_dict(value):
    """Plain dict/list/str version of a strawberry input."""
    if dataclasses.is_dataclass(value):
        return {f.name: _to_dict(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, list):
        return [_to_dict(v) for v in value]
    if isinstance(value, Enum):
        return value.value
    return value


def _input_to_document(value) -> dict:
    # unset optional inputs are dropped, nested nulls (e.g. subtitle) are kept
    return {key: v for key, v in _to_dict(value).items() if v is not None}


# ============================================================
# INPUTS
# ============================================================

@strawberry.input
class FacebookLoginInput:
    access_token: str = strawberry.field(name="accessToken")


@strawberry.input
class GoogleLoginInput:
    id_token: str = strawberry.field(name="idToken")


@strawberry.input
class ChangeSalaryWorkTimeStatusInput:
    id: strawberry.ID
    status: PublishStatus


@strawberry.input
class CompanyInput:
    id: Optional[str] = None
    name: Optional[str] = None
    query: Optional[str] = None


@strawberry.input
class YearMonthInput:
    year: int
    month: int


@strawberry.input
class SalaryInput:
    type: str
    amount: float


@strawberry.input
class SectionInput:
    content: str
    subtitle: Optional[str] = None


@strawberry.input
class InterviewQuestionInput:
    question: Optional[str] = None
    answer: Optional[str] = None


@strawberry.enum
class YesNo(Enum):
    yes = "yes"
    no = "no"


@strawberry.input
class CreateWorkExperienceInput:
    company: CompanyInput
    region: str
    job_title: str
    title: str
    sections: List[SectionInput]
    is_currently_employed: YesNo
    experience_in_year: Optional[int] = None
    education: Optional[str] = None
    status: Optional[str] = "published"
    email: Optional[str] = None
    salary: Optional[SalaryInput] = None
    week_work_time: Optional[float] = None
    recommend_to_others: Optional[YesNo] = None
    job_ending_time: Optional[YearMonthInput] = None


@strawberry.input
class CreateInterviewExperienceInput:
    company: CompanyInput
    region: str
    job_title: str
    title: str
    sections: List[SectionInput]
    interview_time: YearMonthInput
    interview_result: str
    overall_rating: int
    experience_in_year: Optional[int] = None
    education: Optional[str] = None
    status: Optional[str] = "published"
    email: Optional[str] = None
    interview_qas: Optional[List[InterviewQuestionInput]] = None
    interview_sensitive_questions: Optional[List[str]] = None
    salary: Optional[SalaryInput] = None


# ============================================================
# PAYLOADS
# ============================================================

@strawberry.type
class LoginPayload:
    user: User
    token: str


@strawberry.type
class ChangeSalaryWorkTimeStatusPayload:
    salary_work_time: SalaryWorkTime


@strawberry.type
class CreateWorkExperiencePayload:
    success: bool
    experience: WorkExperience


@strawberry.type
class CreateInterviewExperiencePayload:
    success: bool
    experience: InterviewExperience


@strawberry.type
class JobTitleCatalogueItem:
    id: strawberry.ID
    name: Optional[str] = None


# ============================================================
# QUERY
# ============================================================

@strawberry.type
class Query:
    @strawberry.field
    def me(self, info: Info) -> User:
        return User.from_doc(_require_user(info))

    # experiences
    @strawberry.field(description="取得單篇經驗分享")
    def experience(self, info: Info, id: strawberry.ID) -> Optional[Experience]:
        doc = experience_service.get_experience(info.context.manager, id)
        return Experience.from_doc(doc) if doc else None

    @strawberry.field
    def popular_experiences(
        self,
        info: Info,
        return_number: Annotated[int, strawberry.argument(name="returnNumber")] = 3,
        sample_number: Annotated[int, strawberry.argument(name="sampleNumber")] = 20,
    ) -> List[Experience]:
        if not required_number_in_range(return_number, 0, 20):
            raise user_input_error("returnNumber 必須是 0 ~ 20")
        docs = experience_service.popular_experiences(info.context.manager, return_number, sample_number)
        return [e for e in (Experience.from_doc(d) for d in docs) if e is not None]

    # companies
    @strawberry.field
    def search_companies(self, info: Info, query: str) -> List[Company]:
        return [
            Company(name=c.get("name", ""), id=c.get("id"))
            for c in statistics_service.search_companies(info.context.manager, query)
        ]

    @strawberry.field
    def company(self, info: Info, name: str) -> Optional[Company]:
        company = statistics_service.get_company(info.context.manager, name)
        return Company(name=company["name"]) if company else None

    @strawberry.field
    def companies_having_data(self, info: Info) -> List[Company]:
        return [Company(name=c["name"]) for c in statistics_service.companies_having_data(info.context.manager)]

    @strawberry.field
    def popular_companies(self, info: Info, limit: int = 5) -> List[Company]:
        return [Company(name=c["name"]) for c in statistics_service.popular_companies(info.context.manager, limit)]

    # job titles
    @strawberry.field
    def search_job_titles(self, info: Info, query: str) -> List[JobTitle]:
        return [JobTitle(name=j["name"]) for j in statistics_service.search_job_titles(info.context.manager, query)]

    @strawberry.field
    def job_title(self, info: Info, name: str) -> Optional[JobTitle]:
        job_title = statistics_service.get_job_title(info.context.manager, name)
        return JobTitle(name=job_title["name"]) if job_title else None

    @strawberry.field
    def job_titles_having_data(self, info: Info) -> List[JobTitle]:
        return [JobTitle(name=j["name"]) for j in statistics_service.job_titles_having_data(info.context.manager)]

    @strawberry.field
    def popular_job_titles(self, info: Info, limit: int = 5) -> List[JobTitle]:
        return [
            JobTitle(name=j["name"], count=j.get("count"))
            for j in statistics_service.popular_job_titles(info.context.manager, limit)
        ]

    @strawberry.field
    def job_titles(self, info: Info, query: Optional[str] = None, page: int = 0) -> List[JobTitleCatalogueItem]:
        return [
            JobTitleCatalogueItem(id=strawberry.ID(j["_id"]), name=j["des"])
            for j in search_job_title_catalogue(info.context.manager, query, page)
        ]

    # keywords
    @strawberry.field
    def company_keywords(self, info: Info, limit: int = 5) -> List[str]:
        with graphql_errors():
            return statistics_service.company_keywords(info.context.manager, limit)

    @strawberry.field
    def job_title_keywords(self, info: Info, limit: int = 5) -> List[str]:
        with graphql_errors():
            return statistics_service.job_title_keywords(info.context.manager, limit)

    # salary work times
    @strawberry.field
    def salary_work_times(self, info: Info, start: int, limit: int) -> List[SalaryWorkTime]:
        with graphql_errors():
            docs = statistics_service.salary_work_times(info.context.manager, start, limit)
        return [SalaryWorkTime.from_doc(d) for d in docs]

    @strawberry.field
    def salary_work_time_count(self, info: Info) -> int:
        return statistics_service.salary_work_time_count(info.context.manager)


# ============================================================
# MUTATION
# ============================================================

@strawberry.type
class Mutation:
    @strawberry.mutation(name="facebookLogin")
    async def facebook_login(self, info: Info, input: FacebookLoginInput) -> LoginPayload:
        if not input.access_token:
            raise user_input_error('"accessToken" is not allowed to be empty')
        with graphql_errors():
            user, token = await user_service.facebook_login(info.context.manager, input.access_token)
        return LoginPayload(user=User.from_doc(user), token=token)

    @strawberry.mutation(name="googleLogin")
    async def google_login(self, info: Info, input: GoogleLoginInput) -> LoginPayload:
        if not input.id_token:
            raise user_input_error('"idToken" is not allowed to be empty')
        with graphql_errors():
            user, token = await user_service.google_login(info.context.manager, input.id_token)
        return LoginPayload(user=User.from_doc(user), token=token)

    @strawberry.mutation(name="changeSalaryWorkTimeStatus")
    def change_salary_work_time_status(
        self, info: Info, input: ChangeSalaryWorkTimeStatusInput
    ) -> ChangeSalaryWorkTimeStatusPayload:
        user = _require_user(info)
        model = info.context.manager.SalaryWorkTimeModel

        with graphql_errors():
            working = model.get_working_by_id(input.id, {"user_id": 1})
            if working.get("user_id") != user["_id"]:
                raise authentication_error("user is unauthorized")
            result = model.update_status(input.id, input.status.value)

        return ChangeSalaryWorkTimeStatusPayload(salary_work_time=SalaryWorkTime.from_doc(result))

    @strawberry.mutation(name="createWorkExperience")
    def create_work_experience(self, info: Info, input: CreateWorkExperienceInput) -> CreateWorkExperiencePayload:
        user = _require_user(info)
        manager = info.context.manager
        data = _input_to_document(input)

        with graphql_errors():
            company = data.pop("company")
            experience_service.validate_work_experience({
                **data,
                "company_query": company.get("query") or company.get("name") or company.get("id"),
            })
            data["job_title"] = data["job_title"].upper()
            data["company"] = experience_service.resolve_company(manager, company)
            experience = experience_service.create_work_experience(data, user, manager, info.context.client_ip)

        return CreateWorkExperiencePayload(success=True, experience=WorkExperience.from_doc(experience))

    @strawberry.mutation(name="createInterviewExperience")
    def create_interview_experience(
        self, info: Info, input: CreateInterviewExperienceInput
    ) -> CreateInterviewExperiencePayload:
        user = _require_user(info)
        manager = info.context.manager
        data = _input_to_document(input)

        with graphql_errors():
            company = data.pop("company")
            experience_service.validate_interview_experience({
                **data,
                "company_query": company.get("query") or company.get("name") or company.get("id"),
            })
            data["job_title"] = data["job_title"].upper()
            data["company"] = experience_service.resolve_company(manager, company)
            experience = experience_service.create_interview_experience(data, user, manager, info.context.client_ip)

        return CreateInterviewExperiencePayload(success=True, experience=InterviewExperience.from_doc(experience))


schema = strawberry.Schema(
    query=Query,
    mutation=Mutation,
    types=[WorkExperience, InterviewExperience, InternExperience],
    config=StrawberryConfig(auto_camel_case=False),
)


def create_graphql_router() -> GraphQLRouter:
    return GraphQLRouter(schema, context_getter=get_context)
