"""
Wage Service - estimated wages and sort/pagination rules for workings.

Estimation assumes 52 working weeks a year minus 19 days off
(12 national holidays + 7 days of annual leave).
"""

from typing import Optional, Tuple, Dict

from goodjob.core.errors import HttpError, SalaryValidationError
from goodjob.core.validation import should_in

DAYS_OFF_PER_YEAR = 12 + 7
WEEKS_PER_YEAR = 52

SALARY_TYPES = ["year", "month", "day", "hour"]

SORT_BY_FIELDS = ["created_at", "week_work_time", "estimated_hourly_wage"]
ORDERS = ["descending", "ascending"]

DEFAULT_PAGE = 0
DEFAULT_LIMIT = 25
MAX_LIMIT = 50

# Accepted amount per salary type (inclusive); anything outside is most
# likely a missing/extra zero or a wrong salary type.
SALARY_RANGES = {
    "hour": (10, 10000),
    "day": (100, 120000),
    "month": (1000, 1000000),
    "year": (10000, 12000000),
}

SALARY_TOO_LOW = "薪資過低。可能有少填寫 0，或薪資種類(年薪/月薪/日薪/時薪)選擇錯誤，請再檢查一次"
SALARY_TOO_HIGH = "薪資過高。可能有多填寫 0，或薪資種類(年薪/月薪/日薪/時薪)選擇錯誤，請再檢查一次"


def _yearly_work_hours(working: dict) -> float:
    return (
        WEEKS_PER_YEAR * working["week_work_time"]
        - DAYS_OFF_PER_YEAR * working["day_real_work_time"]
    )


def calculate_estimated_hourly_wage(working: dict) -> Optional[float]:
    """Estimate the hourly wage of a working, or None when it can't be done."""
    salary = working["salary"]
    salary_type = salary["type"]
    amount = salary["amount"]
    day_real_work_time = working.get("day_real_work_time")
    week_work_time = working.get("week_work_time")

    if salary_type == "hour":
        return amount
    if day_real_work_time and salary_type == "day":
        return amount / day_real_work_time
    if day_real_work_time and week_work_time:
        # zero or negative for very short weeks
        if _yearly_work_hours(working) <= 0:
            return None
        if salary_type == "month":
            return (amount * 12) / _yearly_work_hours(working)
        if salary_type == "year":
            return amount / _yearly_work_hours(working)
    return None


def calculate_estimated_monthly_wage(working: dict) -> Optional[float]:
    """Estimate the monthly wage of a working, or None when it can't be done."""
    salary = working["salary"]
    salary_type = salary["type"]
    amount = salary["amount"]
    has_work_times = bool(
        working.get("week_work_time")
        and working.get("day_real_work_time")
        and _yearly_work_hours(working) > 0
    )

    if salary_type == "hour":
        # hourly * yearly hours / 12
        if has_work_times:
            return amount * _yearly_work_hours(working) / 12
        return None
    if salary_type == "day":
        # (daily / daily hours) * yearly hours / 12
        if has_work_times:
            return (amount / working["day_real_work_time"]) * _yearly_work_hours(working) / 12
        return None
    if salary_type == "month":
        return amount
    if salary_type == "year":
        return amount / 12
    return None


def validate_salary(salary: dict) -> None:
    """
    Check a stored salary object.

    Raises SalaryValidationError for an unknown type, a non-integer amount,
    or an amount outside the range of its type.
    """
    salary_type = salary.get("type")
    amount = salary.get("amount")

    if salary_type not in SALARY_RANGES:
        raise SalaryValidationError("薪資種類需為年薪/月薪/日薪/時薪")
    if isinstance(amount, bool) or not isinstance(amount, (int, float)) or int(amount) != amount:
        raise SalaryValidationError("薪資需為整數")

    minimum, maximum = SALARY_RANGES[salary_type]
    if amount < minimum:
        raise SalaryValidationError(SALARY_TOO_LOW)
    if amount > maximum:
        raise SalaryValidationError(SALARY_TOO_HIGH)


def valid_sort_query(query: dict) -> None:
    if query.get("sort_by"):
        if not should_in(query["sort_by"], SORT_BY_FIELDS):
            raise HttpError("query: sort_by error", 422)
    if query.get("order"):
        if not should_in(query["order"], ORDERS):
            raise HttpError("query: order error", 422)


def pickup_sort_query(query: dict) -> Tuple[str, int, Dict[str, int]]:
    sort_by = query.get("sort_by") or "created_at"
    order = -1 if (query.get("order") or "descending") == "descending" else 1
    return sort_by, order, {sort_by: order}


def pagination(page: Optional[str] = None, limit: Optional[str] = None) -> Dict[str, int]:
    """
    Parse page/limit query values.

    Unparsable or zero values fall back to the defaults; a limit above 50
    is rejected.
    """
    page_value = _parse_int(page) or DEFAULT_PAGE
    limit_value = _parse_int(limit) or DEFAULT_LIMIT

    if limit_value > MAX_LIMIT:
        raise HttpError("limit is not allow", 422)

    return {"page": page_value, "limit": limit_value}


def _parse_int(value) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(str(value).strip())
    except ValueError:
        return None
