"""
Experience Service - work / interview experience submissions and reads.

Validation raises HttpError(422) with a message meant for the end user.
Creation is shared by the REST routes and the GraphQL mutations.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional, List, Any

from bson import ObjectId

from goodjob.core.errors import HttpError
from goodjob.core.validation import (
    required_non_empty_string,
    required_number,
    optional_number,
    should_in,
    string_require_length,
    validate_email,
)
from goodjob.services.company_service import get_company_by_id_or_query
from goodjob.services.mongo_service import ModelManager, PUBLISHED_QUERY, is_valid_object_id

logger = logging.getLogger(__name__)

WORK_EXPERIENCE_TYPE = "work"
INTERVIEW_EXPERIENCE_TYPE = "interview"
INTERN_EXPERIENCE_TYPE = "intern"

MAX_PREVIEW_SIZE = 160

REGIONS = [
    "彰化縣", "嘉義市", "嘉義縣", "新竹市", "新竹縣",
    "花蓮縣", "高雄市", "基隆市", "金門縣", "連江縣",
    "苗栗縣", "南投縣", "新北市", "澎湖縣", "屏東縣",
    "臺中市", "臺南市", "臺北市", "臺東縣", "桃園市",
    "宜蘭縣", "雲林縣",
]

EDUCATIONS = [
    "大學", "碩士", "博士", "高職", "五專",
    "二專", "二技", "高中", "國中", "國小",
]

MAX_INTERVIEW_QAS = 30


# ============================================================
# VALIDATION
# ============================================================

def validate_common_input_fields(data: dict) -> None:
    """Fields shared by every experience type."""
    if not required_non_empty_string(data.get("company_query")):
        raise HttpError("公司/單位名稱要填喔！", 422)

    if not required_non_empty_string(data.get("region")):
        raise HttpError("地區要填喔！", 422)
    if not should_in(data["region"], REGIONS):
        raise HttpError(f"地區不允許 {data['region']}！", 422)

    if not required_non_empty_string(data.get("job_title")):
        raise HttpError("職稱要填喔！", 422)

    if not required_non_empty_string(data.get("title")):
        raise HttpError("標題要寫喔！", 422)
    if not string_require_length(data["title"], 1, 50):
        raise HttpError("標題僅限 1~50 字！", 422)

    sections = data.get("sections")
    if not sections or not isinstance(sections, list):
        raise HttpError("內容要寫喔！", 422)
    for section in sections:
        if not isinstance(section, dict) or not required_non_empty_string(section.get("content")):
            raise HttpError("內容要寫喔！", 422)
        subtitle = section.get("subtitle")
        if subtitle is not None and not string_require_length(subtitle, 1, 25):
            raise HttpError("內容標題僅限 1~25 字！", 422)
        if not string_require_length(section["content"], 1, 5000):
            raise HttpError("內容僅限 1~5000 字！", 422)

    experience_in_year = data.get("experience_in_year")
    if not optional_number(experience_in_year):
        raise HttpError("相關職務工作經驗是數字！", 422)
    if experience_in_year is not None:
        if experience_in_year < 0 or experience_in_year > 50:
            raise HttpError("相關職務工作經驗需大於等於0，小於等於50", 422)

    if data.get("education"):
        if not should_in(data["education"], EDUCATIONS):
            raise HttpError("最高學歷範圍錯誤", 422)

    if data.get("email") and not validate_email(data["email"]):
        raise HttpError("E-mail 格式錯誤", 422)

    salary = data.get("salary")
    if salary:
        if not isinstance(salary, dict) or not should_in(salary.get("type"), ["year", "month", "day", "hour"]):
            raise HttpError("薪資種類需為年薪/月薪/日薪/時薪", 422)
        if not required_number(salary.get("amount")):
            raise HttpError("薪資需為數字", 422)
        if salary["amount"] < 0:
            raise HttpError("薪資不小於0", 422)


def _validate_year_month(value: Any, now: datetime, labels: dict) -> None:
    if not isinstance(value, dict):
        raise HttpError(labels["missing"], 422)
    if not required_number(value.get("year")):
        raise HttpError(labels["year_missing"], 422)
    if not required_number(value.get("month")):
        raise HttpError(labels["month_missing"], 422)

    year, month = value["year"], value["month"]
    if year <= now.year - 10:
        raise HttpError(labels["year_range"], 422)
    if month < 1 or month > 12:
        raise HttpError(labels["month_range"], 422)
    if (year == now.year and month > now.month) or year > now.year:
        raise HttpError(labels["future"], 422)


def validate_work_input_fields(data: dict, now: datetime = None) -> None:
    now = now or datetime.utcnow()

    if not data.get("is_currently_employed"):
        raise HttpError("你現在在職嗎？", 422)
    if not should_in(data["is_currently_employed"], ["yes", "no"]):
        raise HttpError("是否在職 yes or no", 422)

    if data["is_currently_employed"] == "no":
        _validate_year_month(data.get("job_ending_time"), now, {
            "missing": "離職年、月份要填喔！",
            "year_missing": "離職年份要填喔！",
            "month_missing": "離職月份要填喔！",
            "year_range": "離職年份需在10年內",
            "month_range": "離職月份需在1~12月",
            "future": "離職月份不可能比現在時間晚",
        })

    if data.get("week_work_time") is not None:
        if not required_number(data["week_work_time"]):
            raise HttpError("工時需為數字", 422)
        if data["week_work_time"] < 0 or data["week_work_time"] > 168:
            raise HttpError("工時需介於 0~168 之間", 422)

    if data.get("recommend_to_others"):
        if not should_in(data["recommend_to_others"], ["yes", "no"]):
            raise HttpError("是否推薦此工作需為 yes or no", 422)


def validate_interview_input_fields(data: dict, now: datetime = None) -> None:
    now = now or datetime.utcnow()

    _validate_year_month(data.get("interview_time"), now, {
        "missing": "面試年、月份要填喔！",
        "year_missing": "面試年份要填喔！",
        "month_missing": "面試月份要填喔！",
        "year_range": "面試年份需在10年內",
        "month_range": "面試月份需在1~12月",
        "future": "面試月份不可能比現在時間晚",
    })

    if not string_require_length(data.get("interview_result"), 1, 100):
        raise HttpError("面試結果僅限 1~100 字！", 422)

    overall_rating = data.get("overall_rating")
    if not required_number(overall_rating) or int(overall_rating) != overall_rating:
        raise HttpError("整體面試滿意度需為整數", 422)
    if overall_rating < 1 or overall_rating > 5:
        raise HttpError("整體面試滿意度需介於 1~5", 422)

    interview_qas = data.get("interview_qas")
    if interview_qas:
        if not isinstance(interview_qas, list):
            raise HttpError("面試題目列表格式錯誤", 422)
        if len(interview_qas) > MAX_INTERVIEW_QAS:
            raise HttpError("面試題目列表最多 30 題", 422)
        for qa in interview_qas:
            if not isinstance(qa, dict) or not string_require_length(qa.get("question"), 1, 250):
                raise HttpError("面試題目僅限 1~250 字！", 422)
            answer = qa.get("answer")
            if answer is not None and not string_require_length(answer, 0, 5000):
                raise HttpError("面試回答僅限 0~5000 字！", 422)

    sensitive_questions = data.get("interview_sensitive_questions")
    if sensitive_questions:
        if not isinstance(sensitive_questions, list):
            raise HttpError("面試中提及的特別問題格式錯誤", 422)
        for question in sensitive_questions:
            if not string_require_length(question, 1, 20):
                raise HttpError("面試中提及的特別問題僅限 1~20 字！", 422)


def validate_work_experience(data: dict, now: datetime = None) -> None:
    validate_common_input_fields(data)
    validate_work_input_fields(data, now)


def validate_interview_experience(data: dict, now: datetime = None) -> None:
    validate_common_input_fields(data)
    validate_interview_input_fields(data, now)


# ============================================================
# PICK UP
# ============================================================

def pickup_work_experience(data: dict) -> dict:
    """Stored fields of a work experience; optional ones only when set."""
    experience = {
        "region": data["region"],
        "job_title": data["job_title"].upper(),
        "title": data["title"],
        "sections": data["sections"],
        "is_currently_employed": data["is_currently_employed"],
    }
    if data.get("job_ending_time"):
        experience["job_ending_time"] = data["job_ending_time"]

    for field in ["experience_in_year", "education", "salary", "week_work_time",
                  "recommend_to_others", "email"]:
        if data.get(field):
            experience[field] = data[field]

    experience["status"] = data.get("status") or "published"
    return experience


def pickup_interview_experience(data: dict) -> dict:
    experience = {
        "company": {
            "id": data.get("company_id"),
            "query": data.get("company_query"),
        },
    }
    for field in [
        "region", "job_title", "title", "sections", "experience_in_year",
        "education", "email", "interview_time", "interview_qas",
        "interview_result", "interview_sensitive_questions", "salary",
        "overall_rating", "status",
    ]:
        if data.get(field) is not None:
            experience[field] = data[field]
    return experience


def resolve_company(manager: ModelManager, company: Optional[dict]) -> dict:
    """
    Company of a new experience. An already resolved {id, name} is kept;
    otherwise the id / query (or name) is looked up.
    """
    company = company or {}
    if company.get("id") and company.get("name"):
        return {"id": company["id"], "name": company["name"]}
    return get_company_by_id_or_query(
        manager.CompanyModel,
        company.get("id"),
        company.get("query") or company.get("name"),
    )


# ============================================================
# CREATE
# ============================================================

def _base_document(experience: dict, experience_type: str, user: dict) -> dict:
    experience.update({
        "type": experience_type,
        "author_id": user["_id"],
        "like_count": 0,
        "reply_count": 0,
        "report_count": 0,
        "created_at": datetime.utcnow(),
        "archive": {
            "is_archived": False,
            "reason": "",
        },
    })
    experience.setdefault("status", "published")
    return experience


def _store(experience: dict, user: dict, manager: ModelManager) -> None:
    manager.ExperienceModel.create_experience(experience)
    if experience.get("email"):
        manager.UserModel.update_subscribe_email(user["_id"], experience["email"])


def create_work_experience(experience: dict, user: dict, manager: ModelManager,
                           client_ip: str = None) -> dict:
    """Insert a work experience; returns the stored document (with _id)."""
    _base_document(experience, WORK_EXPERIENCE_TYPE, user)

    if experience.get("is_currently_employed") == "yes":
        now = experience["created_at"]
        experience["data_time"] = {"year": now.year, "month": now.month}
    else:
        experience["data_time"] = experience.get("job_ending_time")

    _store(experience, user, manager)
    logger.info("work experiences insert data success id=%s ip=%s", experience.get("_id"), client_ip)
    return experience


def create_interview_experience(experience: dict, user: dict, manager: ModelManager,
                                client_ip: str = None) -> dict:
    """Insert an interview experience; returns the stored document (with _id)."""
    _base_document(experience, INTERVIEW_EXPERIENCE_TYPE, user)
    _store(experience, user, manager)
    logger.info("interview experiences insert data success id=%s ip=%s", experience.get("_id"), client_ip)
    return experience


# ============================================================
# READ
# ============================================================

def preview(experience: dict) -> Optional[str]:
    sections = experience.get("sections") or []
    if not sections:
        return None
    return (sections[0].get("content") or "")[:MAX_PREVIEW_SIZE]


def is_liked(manager: ModelManager, experience: dict, user: Optional[dict]) -> Optional[bool]:
    """None without a user, else whether the user liked the experience."""
    if not user:
        return None
    like = manager.ExperienceLikeModel.get_like_by_experience_and_user(experience["_id"], user)
    return like is not None


def get_experience(manager: ModelManager, _id: Any) -> Optional[dict]:
    """A published, non-archived experience, or None."""
    if not is_valid_object_id(_id):
        return None
    return manager.ExperienceModel.collection.find_one({"_id": ObjectId(_id), **PUBLISHED_QUERY})


def popular_experiences(manager: ModelManager, return_number: int = 3,
                        sample_number: int = 20, now: datetime = None) -> List[dict]:
    """
    Longest experiences of the last 30 days, then `return_number` of them
    sampled from the top `sample_number`.
    """
    now = now or datetime.utcnow()
    pipeline = [
        {
            "$match": {
                "created_at": {"$gte": now - timedelta(days=30)},
                **PUBLISHED_QUERY,
            }
        },
        {
            "$addFields": {
                "contentsLength": {
                    "$strLenCP": {
                        "$reduce": {
                            "input": "$sections",
                            "initialValue": "1",
                            "in": {"$concat": ["$$value", "$$this.content"]},
                        }
                    }
                }
            }
        },
        {"$sort": {"contentsLength": -1}},
        {"$limit": sample_number},
        {"$sample": {"size": return_number}},
    ]
    return list(manager.ExperienceModel.collection.aggregate(pipeline))

