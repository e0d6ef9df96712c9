"""
GraphQL object types.

Every type is built from a MongoDB document with `from_doc`; the raw
document is kept in `_doc` for the resolvers that need more than the
exposed fields.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

import strawberry
from strawberry.types import Info

from goodjob.core.validation import required_number_greater_than_or_equal_to, required_number_in_range
from goodjob.graphql.errors import user_input_error
from goodjob.services import experience_service, statistics_service


# ============================================================
# ENUMS
# ============================================================

@strawberry.enum
class PublishStatus(Enum):
    published = "published"
    hidden = "hidden"


@strawberry.enum
class SalaryType(Enum):
    year = "year"
    month = "month"
    day = "day"
    hour = "hour"


@strawberry.enum
class ExperienceType(Enum):
    work = "work"
    interview = "interview"
    intern = "intern"


@strawberry.enum
class EmploymentType(Enum):
    full_time = "full-time"
    part_time = "part-time"
    intern = "intern"
    temporary = "temporary"
    contract = "contract"
    dispatched_labor = "dispatched-labor"


@strawberry.enum
class EmailStatus(Enum):
    UNVERIFIED = "UNVERIFIED"
    SENT_VERIFICATION_LINK = "SENT_VERIFICATION_LINK"
    VERIFIED = "VERIFIED"


def _enum(enum_cls, value):
    if value is None:
        return None
    try:
        return enum_cls(value)
    except ValueError:
        return None


def _slice(docs: List[dict], start: Optional[int], limit: Optional[int]) -> List[dict]:
    start = start or 0
    if limit is None:
        return docs[start:]
    return docs[start:start + limit]


# ============================================================
# SMALL VALUE TYPES
# ============================================================

@strawberry.type
class YearMonth:
    year: int
    month: int

    @classmethod
    def from_doc(cls, doc: Optional[dict]) -> Optional["YearMonth"]:
        if not doc:
            return None
        return cls(year=doc["year"], month=doc["month"])


@strawberry.type
class Salary:
    type: SalaryType
    amount: int

    @classmethod
    def from_doc(cls, doc: Optional[dict]) -> Optional["Salary"]:
        if not doc or _enum(SalaryType, doc.get("type")) is None:
            return None
        return cls(type=SalaryType(doc["type"]), amount=int(doc["amount"]))


@strawberry.type
class Archive:
    is_archived: bool
    reason: str

    @classmethod
    def from_doc(cls, doc: Optional[dict]) -> "Archive":
        doc = doc or {}
        return cls(is_archived=bool(doc.get("is_archived", False)), reason=doc.get("reason") or "")


@strawberry.type
class Section:
    subtitle: Optional[str] = None
    content: Optional[str] = None


@strawberry.type
class InterviewQuestion:
    question: Optional[str] = None
    answer: Optional[str] = None


# ============================================================
# STATISTICS TYPES
# ============================================================

@strawberry.type
class YesNoOrUnknownCount:
    yes: int
    no: int
    unknown: int


@strawberry.type
class OvertimeFrequencyCount:
    seldom: int
    sometimes: int
    usually: int
    almost_everyday: int


@strawberry.type
class AverageSalary:
    type: SalaryType
    amount: float


@strawberry.type
class JobAverageSalary:
    job_title: "JobTitle"
    average_salary: AverageSalary
    data_count: int


@strawberry.type
class SalaryWorkTimeStatistics:
    count: int
    average_week_work_time: Optional[float] = None
    average_estimated_hourly_wage: Optional[float] = None
    has_compensatory_dayoff_count: Optional[YesNoOrUnknownCount] = None
    has_overtime_salary_count: Optional[YesNoOrUnknownCount] = None
    is_overtime_salary_legal_count: Optional[YesNoOrUnknownCount] = None
    overtime_frequency_count: Optional[OvertimeFrequencyCount] = None
    job_average_salaries: List[JobAverageSalary] = strawberry.field(default_factory=list)

    @classmethod
    def from_records(cls, records: List[dict]) -> "SalaryWorkTimeStatistics":
        stats = statistics_service.salary_work_time_statistics(records)

        def count(value):
            return YesNoOrUnknownCount(**value) if value is not None else None

        return cls(
            count=stats["count"],
            average_week_work_time=stats["average_week_work_time"],
            average_estimated_hourly_wage=stats["average_estimated_hourly_wage"],
            has_compensatory_dayoff_count=count(stats["has_compensatory_dayoff_count"]),
            has_overtime_salary_count=count(stats["has_overtime_salary_count"]),
            is_overtime_salary_legal_count=count(stats["is_overtime_salary_legal_count"]),
            overtime_frequency_count=OvertimeFrequencyCount(**stats["overtime_frequency_count"]),
            job_average_salaries=[
                JobAverageSalary(
                    job_title=JobTitle(name=item["job_title"]["name"]),
                    average_salary=AverageSalary(
                        type=SalaryType(item["average_salary"]["type"]),
                        amount=item["average_salary"]["amount"],
                    ),
                    data_count=item["data_count"],
                )
                for item in stats["job_average_salaries"]
            ],
        )


@strawberry.type
class WorkExperienceStatistics:
    count: int
    recommend_to_others: YesNoOrUnknownCount

    @classmethod
    def from_records(cls, experiences: List[dict]) -> "WorkExperienceStatistics":
        stats = statistics_service.work_experience_statistics(experiences)
        return cls(count=stats["count"], recommend_to_others=YesNoOrUnknownCount(**stats["recommend_to_others"]))


@strawberry.type
class InterviewExperienceStatistics:
    count: int
    overall_rating: float

    @classmethod
    def from_records(cls, experiences: List[dict]) -> "InterviewExperienceStatistics":
        stats = statistics_service.interview_experience_statistics(experiences)
        return cls(count=stats["count"], overall_rating=stats["overall_rating"])


@strawberry.type
class SalaryRange:
    type: SalaryType
    from_: int = strawberry.field(name="from")
    to: int


@strawberry.type
class SalaryDistributionBin:
    data_count: int
    range: SalaryRange


@strawberry.type
class SalaryDistribution:
    bins: Optional[List[SalaryDistributionBin]] = None

    @classmethod
    def from_result(cls, result: dict) -> "SalaryDistribution":
        return cls(bins=[
            SalaryDistributionBin(
                data_count=b["data_count"],
                range=SalaryRange(
                    type=SalaryType(b["range"]["type"]),
                    from_=b["range"]["from"],
                    to=b["range"]["to"],
                ),
            )
            for b in result["bins"]
        ])


# ============================================================
# COMPANY / JOB TITLE
# ============================================================

@strawberry.type
class Company:
    name: str
    id: Optional[str] = None

    @strawberry.field
    async def salary_work_times(self, info: Info) -> List["SalaryWorkTime"]:
        docs = await info.context.loaders.workings_by_company.load(self.name)
        return [SalaryWorkTime.from_doc(d) for d in docs]

    @strawberry.field
    async def work_experiences(
        self, info: Info, start: Optional[int] = None, limit: Optional[int] = None
    ) -> List["WorkExperience"]:
        docs = await info.context.loaders.work_experiences_by_company.load(self.name)
        return [WorkExperience.from_doc(d) for d in _slice(docs, start, limit)]

    @strawberry.field
    async def interview_experiences(
        self, info: Info, start: Optional[int] = None, limit: Optional[int] = None
    ) -> List["InterviewExperience"]:
        docs = await info.context.loaders.interview_experiences_by_company.load(self.name)
        return [InterviewExperience.from_doc(d) for d in _slice(docs, start, limit)]

    @strawberry.field
    async def salary_work_time_statistics(self, info: Info) -> SalaryWorkTimeStatistics:
        docs = await info.context.loaders.workings_by_company.load(self.name)
        return SalaryWorkTimeStatistics.from_records(docs)

    @strawberry.field
    async def work_experience_statistics(self, info: Info) -> WorkExperienceStatistics:
        docs = await info.context.loaders.work_experiences_by_company.load(self.name)
        return WorkExperienceStatistics.from_records(docs)

    @strawberry.field
    async def interview_experience_statistics(self, info: Info) -> InterviewExperienceStatistics:
        docs = await info.context.loaders.interview_experiences_by_company.load(self.name)
        return InterviewExperienceStatistics.from_records(docs)


@strawberry.type
class JobTitle:
    name: str
    # record count from popular_job_titles, saves a count query in salary_distribution
    count: strawberry.Private[Optional[int]] = None

    @strawberry.field
    async def salary_work_times(self, info: Info) -> List["SalaryWorkTime"]:
        docs = await info.context.loaders.workings_by_job_title.load(self.name)
        return [SalaryWorkTime.from_doc(d) for d in docs]

    @strawberry.field
    async def work_experiences(
        self, info: Info, start: Optional[int] = None, limit: Optional[int] = None
    ) -> List["WorkExperience"]:
        docs = await info.context.loaders.work_experiences_by_job_title.load(self.name)
        return [WorkExperience.from_doc(d) for d in _slice(docs, start, limit)]

    @strawberry.field
    async def interview_experiences(
        self, info: Info, start: Optional[int] = None, limit: Optional[int] = None
    ) -> List["InterviewExperience"]:
        docs = await info.context.loaders.interview_experiences_by_job_title.load(self.name)
        return [InterviewExperience.from_doc(d) for d in _slice(docs, start, limit)]

    @strawberry.field
    async def salary_work_time_statistics(self, info: Info) -> SalaryWorkTimeStatistics:
        docs = await info.context.loaders.workings_by_job_title.load(self.name)
        return SalaryWorkTimeStatistics.from_records(docs)

    @strawberry.field
    async def work_experience_statistics(self, info: Info) -> WorkExperienceStatistics:
        docs = await info.context.loaders.work_experiences_by_job_title.load(self.name)
        return WorkExperienceStatistics.from_records(docs)

    @strawberry.field
    async def interview_experience_statistics(self, info: Info) -> InterviewExperienceStatistics:
        docs = await info.context.loaders.interview_experiences_by_job_title.load(self.name)
        return InterviewExperienceStatistics.from_records(docs)

    @strawberry.field
    def salary_distribution(self, info: Info) -> SalaryDistribution:
        result = statistics_service.salary_distribution(info.context.manager, self.name, self.count)
        return SalaryDistribution.from_result(result)


# ============================================================
# SALARY WORK TIME
# ============================================================

@strawberry.type
class SalaryWorkTime:
    id: strawberry.ID
    company: Company
    job_title: JobTitle
    created_at: datetime
    status: PublishStatus
    archive: Archive
    data_time: Optional[YearMonth] = None
    day_promised_work_time: Optional[float] = None
    day_real_work_time: Optional[float] = None
    employment_type: Optional[EmploymentType] = None
    experience_in_year: Optional[int] = None
    overtime_frequency: Optional[int] = None
    salary: Optional[Salary] = None
    sector: Optional[str] = None
    week_work_time: Optional[float] = None
    estimated_hourly_wage: Optional[float] = None
    about_this_job: Optional[str] = None

    @classmethod
    def from_doc(cls, doc: dict) -> "SalaryWorkTime":
        company = doc.get("company") or {}
        return cls(
            id=strawberry.ID(str(doc["_id"])),
            company=Company(name=company.get("name", ""), id=company.get("id")),
            job_title=JobTitle(name=doc.get("job_title", "")),
            created_at=doc["created_at"],
            status=_enum(PublishStatus, doc.get("status")) or PublishStatus.published,
            archive=Archive.from_doc(doc.get("archive")),
            data_time=YearMonth.from_doc(doc.get("data_time")),
            day_promised_work_time=doc.get("day_promised_work_time"),
            day_real_work_time=doc.get("day_real_work_time"),
            employment_type=_enum(EmploymentType, doc.get("employment_type")),
            experience_in_year=doc.get("experience_in_year"),
            overtime_frequency=doc.get("overtime_frequency"),
            salary=Salary.from_doc(doc.get("salary")),
            sector=doc.get("sector"),
            week_work_time=doc.get("week_work_time"),
            estimated_hourly_wage=doc.get("estimated_hourly_wage"),
            about_this_job=doc.get("about_this_job"),
        )


# ============================================================
# EXPERIENCES
# ============================================================

@strawberry.interface
class Experience:
    id: strawberry.ID
    type: ExperienceType
    company: Company
    job_title: JobTitle
    region: str
    sections: List[Section]
    created_at: datetime
    reply_count: int
    report_count: int
    like_count: int
    status: PublishStatus
    archive: Archive
    title: Optional[str] = None
    experience_in_year: Optional[int] = None
    education: Optional[str] = None
    salary: Optional[Salary] = None
    _doc: strawberry.Private[Optional[dict]] = None

    @strawberry.field(description="使用者是否按贊 (null 代表未傳入驗證資訊)")
    def liked(self, info: Info) -> Optional[bool]:
        return experience_service.is_liked(info.context.manager, self._doc, info.context.user)

    @strawberry.field(description="preview，通常是列表時可以用來簡單預覽內容")
    def preview(self) -> Optional[str]:
        return experience_service.preview(self._doc)

    @classmethod
    def common_fields(cls, doc: dict) -> dict:
        company = doc.get("company") or {}
        return {
            "id": strawberry.ID(str(doc["_id"])),
            "type": ExperienceType(doc["type"]),
            "company": Company(name=company.get("name", ""), id=company.get("id")),
            "job_title": JobTitle(name=doc.get("job_title", "")),
            "region": doc.get("region") or "",
            "sections": [
                Section(subtitle=s.get("subtitle"), content=s.get("content"))
                for s in doc.get("sections") or []
            ],
            "created_at": doc["created_at"],
            "reply_count": doc.get("reply_count", 0),
            "report_count": doc.get("report_count", 0),
            "like_count": doc.get("like_count", 0),
            "status": _enum(PublishStatus, doc.get("status")) or PublishStatus.published,
            "archive": Archive.from_doc(doc.get("archive")),
            "title": doc.get("title"),
            "experience_in_year": doc.get("experience_in_year"),
            "education": doc.get("education"),
            "salary": Salary.from_doc(doc.get("salary")),
            "_doc": doc,
        }

    @staticmethod
    def from_doc(doc: dict) -> Optional["Experience"]:
        """Concrete experience type for a document (None for unknown types)."""
        experience_cls = {
            experience_service.WORK_EXPERIENCE_TYPE: WorkExperience,
            experience_service.INTERVIEW_EXPERIENCE_TYPE: InterviewExperience,
            experience_service.INTERN_EXPERIENCE_TYPE: InternExperience,
        }.get(doc.get("type"))
        if experience_cls is None:
            return None
        return experience_cls.from_doc(doc)


@strawberry.type
class WorkExperience(Experience):
    data_time: Optional[YearMonth] = None
    week_work_time: Optional[float] = None
    recommend_to_others: Optional[str] = None

    @classmethod
    def from_doc(cls, doc: dict) -> "WorkExperience":
        return cls(
            **cls.common_fields(doc),
            data_time=YearMonth.from_doc(doc.get("data_time")),
            week_work_time=doc.get("week_work_time"),
            recommend_to_others=doc.get("recommend_to_others"),
        )


@strawberry.type
class InterviewExperience(Experience):
    interview_time: Optional[YearMonth] = None
    interview_result: Optional[str] = None
    overall_rating: Optional[int] = None
    interview_qas: Optional[List[InterviewQuestion]] = None
    interview_sensitive_questions: Optional[List[str]] = None

    @classmethod
    def from_doc(cls, doc: dict) -> "InterviewExperience":
        qas = doc.get("interview_qas")
        return cls(
            **cls.common_fields(doc),
            interview_time=YearMonth.from_doc(doc.get("interview_time")),
            interview_result=doc.get("interview_result"),
            overall_rating=doc.get("overall_rating"),
            interview_qas=(
                [InterviewQuestion(question=q.get("question"), answer=q.get("answer")) for q in qas]
                if qas is not None else None
            ),
            interview_sensitive_questions=doc.get("interview_sensitive_questions"),
        )


@strawberry.type
class InternExperience(Experience):
    starting_year: Optional[int] = None
    overall_rating: Optional[float] = None

    @classmethod
    def from_doc(cls, doc: dict) -> "InternExperience":
        return cls(
            **cls.common_fields(doc),
            starting_year=doc.get("starting_year"),
            overall_rating=doc.get("overall_rating"),
        )


# ============================================================
# USER
# ============================================================

@strawberry.type
class User:
    id: strawberry.ID = strawberry.field(name="_id")
    name: str
    facebook_id: Optional[str] = None
    google_id: Optional[str] = None
    email: Optional[str] = None
    email_status: Optional[EmailStatus] = None
    created_at: Optional[datetime] = None
    _doc: strawberry.Private[Optional[dict]] = None

    @classmethod
    def from_doc(cls, doc: dict) -> "User":
        return cls(
            id=strawberry.ID(str(doc["_id"])),
            name=doc.get("name") or "",
            facebook_id=doc.get("facebook_id"),
            google_id=doc.get("google_id"),
            email=doc.get("email"),
            email_status=_enum(EmailStatus, doc.get("email_status")),
            created_at=doc.get("created_at"),
            _doc=doc,
        )

    @strawberry.field
    def experiences(self, info: Info, start: int = 0, limit: int = 20) -> List[Experience]:
        if not required_number_greater_than_or_equal_to(start, 0):
            raise user_input_error("start 格式錯誤")
        if not required_number_in_range(limit, 1, 100):
            raise user_input_error("limit 格式錯誤")

        docs = info.context.manager.ExperienceModel.get_experiences(
            {"author_id": self._doc["_id"]},
            sort={"created_at": -1},
            skip=start,
            limit=limit,
        )
        return [e for e in (Experience.from_doc(d) for d in docs) if e is not None]

    @strawberry.field
    def experience_count(self, info: Info) -> int:
        return info.context.manager.ExperienceModel.get_experiences_count_by_query({"author_id": self._doc["_id"]})

    @strawberry.field
    def salary_work_times(self, info: Info) -> List[SalaryWorkTime]:
        docs = info.context.manager.SalaryWorkTimeModel.get_workings({"user_id": self._doc["_id"]})
        return [SalaryWorkTime.from_doc(d) for d in docs]

    @strawberry.field
    def salary_work_time_count(self, info: Info) -> int:
        return info.context.manager.SalaryWorkTimeModel.get_workings_count_by_query({"user_id": self._doc["_id"]})

