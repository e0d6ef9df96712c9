"""
Working Service - the salary / working-time submission pipeline.

POST /workings runs these steps in order:
    input_check      -> shape of the raw body (pydantic)
    collect_data     -> pick the fields we store, keep helpers in `custom`
    validation       -> business rules (422 on failure)
    normalize_data   -> salary, wage estimates, data_time, company
    create_working   -> recommendation, insert, user counters, response

Form values arrive as strings, so numeric fields are parsed here rather
than trusted.
"""

import logging
import re
from datetime import datetime
from typing import Optional, Any, Tuple, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from goodjob.core.errors import HttpError, ObjectIdError
from goodjob.core.validation import validate_email
from goodjob.services.company_service import get_company_by_id_or_query
from goodjob.services.mongo_service import ModelManager, PUBLISHED_QUERY, serialize_doc
from goodjob.services.wage_service import (
    calculate_estimated_hourly_wage,
    calculate_estimated_monthly_wage,
)

logger = logging.getLogger(__name__)

YES_NO_UNKNOWN = ["yes", "no", "don't know"]

# Fields copied verbatim (when they are non-empty) into the stored working
COLLECTED_FIELDS = [
    # working time data
    "week_work_time",
    "overtime_frequency",
    "day_promised_work_time",
    "day_real_work_time",
    "has_overtime_salary",
    "is_overtime_salary_legal",
    "has_compensatory_dayoff",
    # salary data
    "experience_in_year",
    "campaign_name",
    "about_this_job",
    "email",
]

WORKING_TIME_FIELDS = [
    "week_work_time",
    "overtime_frequency",
    "day_promised_work_time",
    "day_real_work_time",
    "has_overtime_salary",
    "is_overtime_salary_legal",
    "has_compensatory_dayoff",
]

_INT_RE = re.compile(r"^\s*([+-]?\d+)")
_FLOAT_RE = re.compile(r"^\s*([+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?)")


# ============================================================
# INPUT CHECK
# ============================================================

class WorkingInput(BaseModel):
    """Shape check of the raw body; unknown keys are allowed through."""

    model_config = ConfigDict(extra="allow")

    job_title: str = Field(..., min_length=1, max_length=100)
    sector: Optional[str] = None
    gender: Optional[Literal["male", "female", "other"]] = None
    employment_type: Literal[
        "full-time", "part-time", "intern", "temporary", "contract", "dispatched-labor"
    ]
    is_currently_employed: Literal["yes", "no"]
    job_ending_time_year: Optional[int] = None
    job_ending_time_month: Optional[int] = Field(None, ge=1, le=12)

    @model_validator(mode="after")
    def check_job_ending_time(self):
        if self.is_currently_employed == "no":
            if self.job_ending_time_year is None:
                raise ValueError('"job_ending_time_year" is required')
            if self.job_ending_time_month is None:
                raise ValueError('"job_ending_time_month" is required')
        else:
            if self.job_ending_time_year is not None:
                raise ValueError('"job_ending_time_year" is not allowed')
            if self.job_ending_time_month is not None:
                raise ValueError('"job_ending_time_month" is not allowed')
        return self


def input_check(body: dict) -> None:
    try:
        WorkingInput.model_validate(body)
    except ValidationError as e:
        raise HttpError(_validation_message(e), 422)


def _validation_message(error: ValidationError) -> str:
    messages = []
    for err in error.errors():
        location = ".".join(str(part) for part in err.get("loc", ()))
        messages.append(f"{location}: {err['msg']}" if location else err["msg"])
    return "; ".join(messages)


# ============================================================
# PARSING HELPERS
# ============================================================

def parse_int(value: Any) -> Optional[int]:
    """Leading-integer parse ("12.5" -> 12); None when there is no number."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    match = _INT_RE.match(str(value))
    return int(match.group(1)) if match else None


def parse_float(value: Any) -> Optional[float]:
    """Leading-float parse ("40 hours" -> 40.0); None when there is no number."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    match = _FLOAT_RE.match(str(value))
    return float(match.group(1)) if match else None


def _has_value(body: dict, field: str) -> bool:
    value = body.get(field)
    if isinstance(value, bool) or value is None:
        return False
    if isinstance(value, (int, float)):
        return True
    return isinstance(value, str) and value != ""


def _as_text(value: Any) -> str:
    return value if isinstance(value, str) else str(value)


# ============================================================
# COLLECT
# ============================================================

def collect_data(body: dict, user: dict) -> Tuple[dict, dict]:
    """
    Build the working document and the side data (`custom`) from the body.

    Returns (working, custom). `custom` keeps values that are validated
    and reshaped later: company query, ending time, salary, recommendation.
    """
    working = {
        "user_id": user["_id"],
        "company": {},
        "status": "published",
        "created_at": datetime.utcnow(),
    }
    custom = {}

    working["job_title"] = body["job_title"].upper()
    if body.get("sector"):
        working["sector"] = body["sector"]
    if body.get("gender"):
        working["gender"] = body["gender"]
    working["employment_type"] = body["employment_type"]
    working["is_currently_employed"] = body["is_currently_employed"]

    for field in COLLECTED_FIELDS:
        if _has_value(body, field):
            working[field] = _as_text(body[field])

    if body.get("extra_info"):
        working["extra_info"] = body["extra_info"]

    if _has_value(body, "company_id"):
        working["company"]["id"] = _as_text(body["company_id"])
    if _has_value(body, "company"):
        custom["company_query"] = _as_text(body["company"])

    for field in ["job_ending_time_year", "job_ending_time_month", "salary_type", "salary_amount"]:
        if _has_value(body, field):
            custom[field] = _as_text(body[field])

    if _has_value(body, "recommendation_string"):
        custom["recommendation_string"] = _as_text(body["recommendation_string"])

    return working, custom


# ============================================================
# VALIDATION
# ============================================================

def validate_common_data(working: dict, custom: dict, now: datetime = None) -> None:
    now = now or datetime.utcnow()

    if not working["company"].get("id"):
        if not custom.get("company_query"):
            raise HttpError("公司/單位名稱必填", 422)

    if working["is_currently_employed"] == "yes":
        if custom.get("job_ending_time_year") or custom.get("job_ending_time_month"):
            raise HttpError("若在職，則離職時間這個欄位沒有意義", 422)

    if working["is_currently_employed"] == "no":
        if not custom.get("job_ending_time_year"):
            raise HttpError("離職年份必填", 422)
        if not custom.get("job_ending_time_month"):
            raise HttpError("離職月份必填", 422)

        year = parse_int(custom["job_ending_time_year"])
        month = parse_int(custom["job_ending_time_month"])

        if year is None:
            raise HttpError("離職年份需為數字", 422)
        if year <= now.year - 10:
            raise HttpError("離職年份需在10年內", 422)
        if month is None:
            raise HttpError("離職月份需為數字", 422)
        if month < 1 or month > 12:
            raise HttpError("離職月份需在1~12月", 422)
        if (year == now.year and month > now.month) or year > now.year:
            raise HttpError("離職月份不能比現在時間晚", 422)

        custom["job_ending_time_year"] = year
        custom["job_ending_time_month"] = month

    if "extra_info" in working:
        extra_info = working["extra_info"]
        if not isinstance(extra_info, list):
            raise HttpError("extra_info should be Array", 422)
        if not all(
            isinstance(e, dict) and isinstance(e.get("key"), str) and isinstance(e.get("value"), str)
            for e in extra_info
        ):
            raise HttpError("extra_info data structure is wrong", 422)

    if working.get("email"):
        if not validate_email(working["email"]):
            raise HttpError("E-mail 格式錯誤", 422)


def _parse_hours(working: dict, field: str, missing: str, not_number: str,
                 out_of_range: str, maximum: float) -> None:
    if not working.get(field):
        raise HttpError(missing, 422)
    value = parse_float(working[field])
    if value is None:
        raise HttpError(not_number, 422)
    if value < 0 or value > maximum:
        raise HttpError(out_of_range, 422)
    working[field] = value


def validate_working_time_data(working: dict) -> None:
    """Check (and convert in place) the working-time fields."""
    _parse_hours(
        working, "week_work_time",
        "最近一週實際工時未填", "最近一週實際工時必須是數字", "最近一週實際工時必須在0~168之間", 168
    )

    if not working.get("overtime_frequency"):
        raise HttpError("加班頻率必填", 422)
    if working["overtime_frequency"] not in ["0", "1", "2", "3"]:
        raise HttpError("加班頻率格式錯誤", 422)
    working["overtime_frequency"] = int(working["overtime_frequency"])

    _parse_hours(
        working, "day_promised_work_time",
        "工作日表訂工時未填", "工作日表訂工時必須是數字", "工作日表訂工時必須在0~24之間", 24
    )
    _parse_hours(
        working, "day_real_work_time",
        "工作日實際工時必填", "工作日實際工時必須是數字", "工作日實際工時必須在0~24之間", 24
    )

    if working.get("has_overtime_salary"):
        if working["has_overtime_salary"] not in YES_NO_UNKNOWN:
            raise HttpError("加班是否有加班費應為是/否/不知道", 422)

    if working.get("is_overtime_salary_legal"):
        if working.get("has_overtime_salary") != "yes":
            raise HttpError("加班應有加班費，本欄位才有意義", 422)
        if working["is_overtime_salary_legal"] not in YES_NO_UNKNOWN:
            raise HttpError("加班費是否合法應為是/否/不知道", 422)

    if working.get("has_compensatory_dayoff"):
        if working["has_compensatory_dayoff"] not in YES_NO_UNKNOWN:
            raise HttpError("加班是否有補修應為是/否/不知道", 422)


def validate_salary_data(working: dict, custom: dict) -> None:
    """Check (and convert in place) salary type / amount / experience."""
    if not custom.get("salary_type"):
        raise HttpError("薪資種類必填", 422)
    if custom["salary_type"] not in ["year", "month", "day", "hour"]:
        raise HttpError("薪資種類需為年薪/月薪/日薪/時薪", 422)

    if not custom.get("salary_amount"):
        raise HttpError("薪資多寡必填", 422)
    amount = parse_int(custom["salary_amount"])
    if amount is None:
        raise HttpError("薪資需為整數", 422)
    if amount < 0:
        raise HttpError("薪資不小於0", 422)
    if amount > 100000000:
        raise HttpError("薪資不大於一億", 422)
    custom["salary_amount"] = amount

    if not working.get("experience_in_year"):
        raise HttpError("相關職務工作經驗必填", 422)
    experience_in_year = parse_int(working["experience_in_year"])
    if experience_in_year is None:
        raise HttpError("相關職務工作經驗需為整數", 422)
    if experience_in_year < 0 or experience_in_year > 50:
        raise HttpError("相關職務工作經驗需大於等於0，小於等於50", 422)
    working["experience_in_year"] = experience_in_year


def validation(working: dict, custom: dict, client_ip: str = None) -> None:
    """
    Run every rule. At least one of the working-time group or the salary
    group has to be filled in.
    """
    try:
        validate_common_data(working, custom)
    except HttpError:
        logger.info("validating fail ip=%s", client_ip)
        raise

    has_working_time_data = any(working.get(field) for field in WORKING_TIME_FIELDS)
    has_salary_data = bool(
        custom.get("salary_type") or custom.get("salary_amount") or working.get("experience_in_year")
    )

    if has_working_time_data:
        validate_working_time_data(working)
    if has_salary_data:
        validate_salary_data(working, custom)

    if not has_working_time_data and not has_salary_data:
        raise HttpError("薪資或工時欄位擇一必填", 422)


# ============================================================
# NORMALIZE
# ============================================================

def normalize_data(working: dict, custom: dict, manager: ModelManager) -> dict:
    if custom.get("job_ending_time_year") and custom.get("job_ending_time_month"):
        working["job_ending_time"] = {
            "year": custom["job_ending_time_year"],
            "month": custom["job_ending_time_month"],
        }

    if custom.get("salary_type") and custom.get("salary_amount") is not None:
        working["salary"] = {
            "type": custom["salary_type"],
            "amount": custom["salary_amount"],
        }

        estimated_hourly_wage = calculate_estimated_hourly_wage(working)
        if estimated_hourly_wage is not None:
            working["estimated_hourly_wage"] = estimated_hourly_wage

        estimated_monthly_wage = calculate_estimated_monthly_wage(working)
        if estimated_monthly_wage is not None:
            working["estimated_monthly_wage"] = estimated_monthly_wage

    if working["is_currently_employed"] == "no":
        working["data_time"] = {
            "year": working["job_ending_time"]["year"],
            "month": working["job_ending_time"]["month"],
        }
    elif working["is_currently_employed"] == "yes":
        created_at = working["created_at"]
        working["data_time"] = {
            "year": created_at.year,
            "month": created_at.month,
        }

    working["company"] = get_company_by_id_or_query(
        manager.CompanyModel,
        working["company"].get("id"),
        custom.get("company_query"),
    )
    return working


# ============================================================
# PERSIST
# ============================================================

def _resolve_recommendation(working: dict, custom: dict, manager: ModelManager) -> None:
    recommendation_string = custom.get("recommendation_string")
    if not recommendation_string:
        return

    rec_user = None
    try:
        rec_user = manager.RecommendationModel.get_user_by_recommendation_string(recommendation_string)
    except ObjectIdError:
        # not a recommendation id, stored as-is below
        pass

    if rec_user is not None:
        working["recommended_by"] = rec_user
        manager.RecommendationModel.increase_count(rec_user)
    else:
        working["recommended_by"] = recommendation_string


def create_working(working: dict, custom: dict, manager: ModelManager, user: dict,
                   client_ip: str = None) -> dict:
    """Store the working and return the response body {"working": ...}."""
    try:
        _resolve_recommendation(working, custom, manager)

        working["archive"] = {
            "is_archived": False,
            "reason": "",
        }

        manager.SalaryWorkTimeModel.create_salary_work_time(working)
        manager.UserModel.increase_salary_work_time_count(user["_id"])

        if working.get("email"):
            manager.UserModel.update_subscribe_email(user["_id"], working["email"])
    except Exception:
        logger.info("workings insert data fail id=%s ip=%s", working.get("_id"), client_ip, exc_info=True)
        raise

    logger.info("workings insert data success id=%s ip=%s", working.get("_id"), client_ip)

    response_working = {
        key: value for key, value in working.items()
        if key not in ("recommended_by", "user_id")
    }
    return {"working": serialize_doc(response_working)}


def submit_working(body: dict, user: dict, manager: ModelManager, client_ip: str = None) -> dict:
    """Whole pipeline for one POST /workings body."""
    input_check(body)
    working, custom = collect_data(body, user)
    validation(working, custom, client_ip)
    normalize_data(working, custom, manager)
    return create_working(working, custom, manager, user, client_ip)


def list_workings(manager: ModelManager, page: int, limit: int, sort: dict) -> dict:
    """Published, non-archived workings for GET /workings."""
    model = manager.SalaryWorkTimeModel
    total_count = model.get_workings_count_by_query(PUBLISHED_QUERY)
    workings = model.get_workings(
        PUBLISHED_QUERY,
        sort=sort,
        skip=page * limit,
        limit=limit,
        projection={"user_id": 0, "recommended_by": 0, "email": 0},
    )
    return {
        "total_count": total_count,
        "page": page,
        "time_and_salary": [serialize_doc(w) for w in workings],
    }
