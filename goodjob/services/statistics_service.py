"""
Statistics Service - aggregations behind the company / job title pages.

Statistics functions work on already loaded record lists; search and
"popular" helpers run MongoDB queries and aggregation pipelines.
"""

import math
import random
from collections import Counter
from typing import Optional, List, Dict, Any

from goodjob.core.errors import HttpError
from goodjob.core.validation import required_number_in_range, required_number_greater_than_or_equal_to
from goodjob.services.mongo_service import ModelManager, PUBLISHED_QUERY, escape_regex

# overtime_frequency is stored as 0..3
OVERTIME_FREQUENCY_NAMES = ["seldom", "sometimes", "usually", "almost_everyday"]

# yes/no counts are hidden below this many records
MIN_RECORDS_FOR_COUNTS = 5

MAX_JOB_AVERAGE_SALARIES = 3

BUCKET_SIZE = 4

HAS_MONTHLY_WAGE = {"estimated_monthly_wage": {"$exists": True, "$ne": None}}


# ============================================================
# SALARY / WORKING TIME STATISTICS
# ============================================================

def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _average(values: List[Any]) -> Optional[float]:
    numbers = [v for v in values if _is_number(v)]
    if not numbers:
        return None
    return sum(numbers) / len(numbers)


def yes_no_unknown_count(records: List[dict], field: str) -> Optional[Dict[str, int]]:
    if len(records) < MIN_RECORDS_FOR_COUNTS:
        return None
    counts = Counter(r.get(field) for r in records)
    return {
        "yes": counts["yes"],
        "no": counts["no"],
        "unknown": counts["don't know"],
    }


def overtime_frequency_count(records: List[dict]) -> Dict[str, int]:
    counter = {name: 0 for name in OVERTIME_FREQUENCY_NAMES}
    for record in records:
        frequency = record.get("overtime_frequency")
        if isinstance(frequency, int) and 0 <= frequency < len(OVERTIME_FREQUENCY_NAMES):
            counter[OVERTIME_FREQUENCY_NAMES[frequency]] += 1
    return counter


def job_average_salaries(records: List[dict], rng: random.Random = None) -> List[dict]:
    """Mean estimated monthly wage per job title, for at most 3 random titles."""
    rng = rng or random
    totals: Dict[str, Dict[str, float]] = {}
    for record in records:
        wage = record.get("estimated_monthly_wage")
        if not wage:
            continue
        entry = totals.setdefault(record.get("job_title"), {"wage": 0, "count": 0})
        entry["wage"] += wage
        entry["count"] += 1

    picked = rng.sample(list(totals), min(len(totals), MAX_JOB_AVERAGE_SALARIES))
    return [
        {
            "job_title": {"name": job_title},
            "data_count": totals[job_title]["count"],
            "average_salary": {
                "type": "month",
                "amount": round(totals[job_title]["wage"] / totals[job_title]["count"]),
            },
        }
        for job_title in picked
    ]


def salary_work_time_statistics(records: List[dict]) -> dict:
    return {
        "count": len(records),
        "average_week_work_time": _average([r.get("week_work_time") for r in records]),
        "average_estimated_hourly_wage": _average([r.get("estimated_hourly_wage") for r in records]),
        "has_compensatory_dayoff_count": yes_no_unknown_count(records, "has_compensatory_dayoff"),
        "has_overtime_salary_count": yes_no_unknown_count(records, "has_overtime_salary"),
        "is_overtime_salary_legal_count": yes_no_unknown_count(records, "is_overtime_salary_legal"),
        "overtime_frequency_count": overtime_frequency_count(records),
        "job_average_salaries": job_average_salaries(records),
    }


# ============================================================
# EXPERIENCE STATISTICS
# ============================================================

def work_experience_statistics(experiences: List[dict]) -> dict:
    counts = Counter(e.get("recommend_to_others") for e in experiences)
    return {
        "count": len(experiences),
        "recommend_to_others": {
            "yes": counts["yes"],
            "no": counts["no"],
            "unknown": len(experiences) - counts["yes"] - counts["no"],
        },
    }


def interview_experience_statistics(experiences: List[dict]) -> dict:
    ratings = [e.get("overall_rating") for e in experiences]
    return {
        "count": len(experiences),
        "overall_rating": _average(ratings) or 0,
    }


# ============================================================
# SALARY DISTRIBUTION
# ============================================================

def build_salary_bins(wages: List[float]) -> List[dict]:
    """
    Split sorted monthly wages into BUCKET_SIZE bins of equal width
    (rounded down to a multiple of 1000). The last bin takes the rest.
    """
    if not wages:
        return []

    min_value = wages[0]
    max_value = wages[-1]
    bin_size = 1000 * math.floor((max_value - min_value) / BUCKET_SIZE / 1000)

    bins = [0] * BUCKET_SIZE
    bin_index = 0
    i = 0
    while i < len(wages):
        if wages[i] <= min_value + bin_size * (bin_index + 1):
            bins[bin_index] += 1
            i += 1
        else:
            bin_index += 1
            if bin_index >= BUCKET_SIZE - 1:
                bins[bin_index] += len(wages) - i
                break

    return [
        {
            "data_count": data_count,
            "range": {
                "type": "month",
                "from": math.floor(min_value + index * bin_size),
                "to": (
                    math.floor(max_value)
                    if index == BUCKET_SIZE - 1
                    else math.floor(min_value + (index + 1) * bin_size)
                ),
            },
        }
        for index, data_count in enumerate(bins)
    ]


def salary_distribution(manager: ModelManager, job_title: str, count: int = None) -> dict:
    """Monthly wage histogram of a job title, trimmed to the middle 90%."""
    collection = manager.SalaryWorkTimeModel.collection
    query = {**HAS_MONTHLY_WAGE, "job_title": job_title}

    if count is None:
        count = collection.count_documents(query)
    # count * 0.9 should be > 1
    if count < 2:
        return {"bins": []}

    results = list(collection.aggregate([
        {"$match": query},
        {"$sort": {"estimated_monthly_wage": 1}},
        {"$skip": math.floor(count * 0.05)},
        {"$limit": math.floor(count * 0.9)},
        {"$project": {"wage": "$estimated_monthly_wage"}},
    ]))
    return {"bins": build_salary_bins([r["wage"] for r in results])}


# ============================================================
# COMPANIES
# ============================================================

def search_companies(manager: ModelManager, query: str) -> List[dict]:
    # TODO: search the `companies` catalogue once it is kept in sync with workings
    return list(manager.SalaryWorkTimeModel.collection.aggregate([
        {
            "$match": {
                **PUBLISHED_QUERY,
                "company.name": escape_regex(query.upper()),
            }
        },
        {"$group": {"_id": "$company"}},
        {"$project": {"_id": 0, "id": "$_id.id", "name": "$_id.name"}},
    ]))


def get_company(manager: ModelManager, name: str) -> Optional[dict]:
    """{name} when workings or experiences hold a visible record of the company."""
    query = {**PUBLISHED_QUERY, "company.name": name}
    if manager.SalaryWorkTimeModel.collection.find_one(query, {"_id": 1}):
        return {"name": name}
    if manager.ExperienceModel.collection.find_one(query, {"_id": 1}):
        return {"name": name}
    return None


def _union(first: List[Any], second: List[Any]) -> List[Any]:
    seen = []
    for value in list(first) + list(second):
        if value not in seen:
            seen.append(value)
    return seen


def companies_having_data(manager: ModelManager) -> List[dict]:
    from_workings = manager.SalaryWorkTimeModel.collection.distinct("company.name", PUBLISHED_QUERY)
    from_experiences = manager.ExperienceModel.collection.distinct("company.name", PUBLISHED_QUERY)
    return [{"name": name} for name in _union(from_workings, from_experiences)]


def popular_companies(manager: ModelManager, limit: int = 5) -> List[dict]:
    """Companies with at least 3 job titles that each have 3+ wage records."""
    return list(manager.SalaryWorkTimeModel.collection.aggregate([
        {"$match": {"estimated_monthly_wage": {"$exists": True}}},
        {
            "$project": {
                "company": "$company.name",
                "job_title": "$job_title",
                "monthly_wage": "$estimated_monthly_wage",
            }
        },
        {
            "$group": {
                "_id": {"company": "$company", "job_title": "$job_title"},
                "count": {"$sum": 1},
                "avg_salary": {"$avg": "$monthly_wage"},
            }
        },
        {"$match": {"count": {"$gte": 3}}},
        {"$group": {"_id": "$_id.company", "count": {"$sum": 1}}},
        {"$match": {"count": {"$gte": 3}}},
        {"$sample": {"size": limit}},
        {"$project": {"name": "$_id"}},
    ]))


# ============================================================
# JOB TITLES
# ============================================================

def search_job_titles(manager: ModelManager, query: str) -> List[dict]:
    names = manager.SalaryWorkTimeModel.collection.distinct("job_title", {
        **PUBLISHED_QUERY,
        "job_title": escape_regex(query.upper()),
    })
    return [{"name": name} for name in names]


def get_job_title(manager: ModelManager, name: str) -> Optional[dict]:
    result = manager.SalaryWorkTimeModel.collection.find_one({**PUBLISHED_QUERY, "job_title": name})
    if not result:
        return None
    return {"name": result["job_title"]}


def job_titles_having_data(manager: ModelManager) -> List[dict]:
    from_workings = manager.SalaryWorkTimeModel.collection.distinct("job_title", PUBLISHED_QUERY)
    from_experiences = manager.ExperienceModel.collection.distinct("job_title", PUBLISHED_QUERY)
    return [{"name": name} for name in _union(from_workings, from_experiences)]


def popular_job_titles(manager: ModelManager, limit: int = 5) -> List[dict]:
    """Job titles with at least 5 wage records; `count` is kept for salary_distribution."""
    return list(manager.SalaryWorkTimeModel.collection.aggregate([
        {"$match": HAS_MONTHLY_WAGE},
        {"$group": {"_id": {"job_title": "$job_title"}, "count": {"$sum": 1}}},
        {"$match": {"count": {"$gte": 5}}},
        {"$sort": {"count": -1}},
        {"$sample": {"size": limit}},
        {"$project": {"name": "$_id.job_title", "count": "$count"}},
    ]))


# ============================================================
# KEYWORDS & LISTS
# ============================================================

def _check_keyword_limit(limit: int) -> None:
    if not required_number_in_range(limit, 1, 20):
        raise HttpError("limit 必須是 1 ~ 20", 422)


def company_keywords(manager: ModelManager, limit: int = 5) -> List[str]:
    _check_keyword_limit(limit)
    return [r["_id"] for r in manager.CompanyKeywordModel.aggregate(limit)]


def job_title_keywords(manager: ModelManager, limit: int = 5) -> List[str]:
    _check_keyword_limit(limit)
    return [r["_id"] for r in manager.JobTitleKeywordModel.aggregate(limit)]


def salary_work_times(manager: ModelManager, start: int, limit: int) -> List[dict]:
    """Newest published workings."""
    if not required_number_greater_than_or_equal_to(start, 0):
        raise HttpError("start 格式錯誤", 422)
    if not required_number_in_range(limit, 1, 100):
        raise HttpError("limit 格式錯誤", 422)
    return manager.SalaryWorkTimeModel.get_workings(
        PUBLISHED_QUERY,
        sort={"created_at": -1},
        skip=start,
        limit=limit,
    )


def salary_work_time_count(manager: ModelManager) -> int:
    return manager.SalaryWorkTimeModel.get_workings_count_by_query(PUBLISHED_QUERY)


def search_job_title_catalogue(manager: ModelManager, keyword: Optional[str], page: int = 0) -> List[dict]:
    """GET /jobs/search rows: [{_id, des}]."""
    return [
        {"_id": str(job["_id"]), "des": job.get("des")}
        for job in manager.JobTitleModel.search(keyword, page)
    ]
