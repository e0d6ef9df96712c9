"""
Statistics Service Unit Tests

What we test:
    - yes/no/unknown counts hidden below 5 records
    - overtime frequency buckets and job average salaries
    - experience statistics
    - salary distribution bins and the middle-90% pipeline
    - keyword limits and list argument checks
"""

import random

import pytest
from bson import ObjectId

from goodjob.core.errors import HttpError
from goodjob.services.statistics_service import (
    build_salary_bins,
    companies_having_data,
    company_keywords,
    get_company,
    get_job_title,
    interview_experience_statistics,
    job_average_salaries,
    overtime_frequency_count,
    salary_distribution,
    salary_work_time_statistics,
    salary_work_times,
    search_job_title_catalogue,
    work_experience_statistics,
    yes_no_unknown_count,
)


class TestSalaryWorkTimeStatistics:
    def test_counts_hidden_below_five_records(self):
        records = [{"has_overtime_salary": "yes"}] * 4
        assert yes_no_unknown_count(records, "has_overtime_salary") is None

    def test_counts(self):
        records = [
            {"has_overtime_salary": "yes"},
            {"has_overtime_salary": "yes"},
            {"has_overtime_salary": "no"},
            {"has_overtime_salary": "don't know"},
            {},
        ]
        assert yes_no_unknown_count(records, "has_overtime_salary") == {"yes": 2, "no": 1, "unknown": 1}

    def test_overtime_frequency_count(self):
        records = [{"overtime_frequency": 0}, {"overtime_frequency": 3}, {"overtime_frequency": 3}, {}]
        assert overtime_frequency_count(records) == {
            "seldom": 1,
            "sometimes": 0,
            "usually": 0,
            "almost_everyday": 2,
        }

    def test_job_average_salaries(self):
        records = [
            {"job_title": "ENGINEER", "estimated_monthly_wage": 40000},
            {"job_title": "ENGINEER", "estimated_monthly_wage": 50001},
            {"job_title": "PM", "estimated_monthly_wage": None},
        ]
        result = job_average_salaries(records, random.Random(0))
        assert result == [{
            "job_title": {"name": "ENGINEER"},
            "data_count": 2,
            "average_salary": {"type": "month", "amount": 45000},
        }]

    def test_at_most_three_job_titles(self):
        records = [{"job_title": str(i), "estimated_monthly_wage": 30000} for i in range(5)]
        assert len(job_average_salaries(records, random.Random(1))) == 3

    def test_averages(self):
        records = [
            {"week_work_time": 40, "estimated_hourly_wage": 200},
            {"week_work_time": 50},
        ]
        statistics = salary_work_time_statistics(records)
        assert statistics["count"] == 2
        assert statistics["average_week_work_time"] == 45
        assert statistics["average_estimated_hourly_wage"] == 200
        assert statistics["has_overtime_salary_count"] is None

    def test_empty_records(self):
        statistics = salary_work_time_statistics([])
        assert statistics["average_week_work_time"] is None
        assert statistics["job_average_salaries"] == []


class TestExperienceStatistics:
    def test_work_experience_recommend_counts(self):
        experiences = [
            {"recommend_to_others": "yes"},
            {"recommend_to_others": "no"},
            {},
        ]
        assert work_experience_statistics(experiences) == {
            "count": 3,
            "recommend_to_others": {"yes": 1, "no": 1, "unknown": 1},
        }

    def test_interview_average_rating(self):
        assert interview_experience_statistics([{"overall_rating": 4}, {"overall_rating": 5}]) == {
            "count": 2,
            "overall_rating": 4.5,
        }
        assert interview_experience_statistics([])["overall_rating"] == 0


class TestSalaryDistribution:
    def test_bins(self):
        bins = build_salary_bins([30000, 40000, 50000, 60000, 70000])
        assert [b["data_count"] for b in bins] == [2, 1, 1, 1]
        assert [(b["range"]["from"], b["range"]["to"]) for b in bins] == [
            (30000, 40000),
            (40000, 50000),
            (50000, 60000),
            (60000, 70000),
        ]

    def test_no_wages(self):
        assert build_salary_bins([]) == []

    def test_too_few_records(self, manager, db):
        assert salary_distribution(manager, "ENGINEER", count=1) == {"bins": []}
        db["workings"].aggregate.assert_not_called()

    def test_middle_ninety_percent(self, manager, db):
        db["workings"].aggregate.return_value = iter([{"wage": w} for w in range(30000, 80000, 10000)])

        result = salary_distribution(manager, "ENGINEER", count=40)

        pipeline = db["workings"].aggregate.call_args[0][0]
        assert {"$skip": 2} in pipeline
        assert {"$limit": 36} in pipeline
        assert sum(b["data_count"] for b in result["bins"]) == 5


class TestLookups:
    def test_get_company_from_experiences(self, manager, db):
        db["workings"].find_one.return_value = None
        db["experiences"].find_one.return_value = {"_id": ObjectId()}
        assert get_company(manager, "GOODJOB") == {"name": "GOODJOB"}

    def test_get_company_missing(self, manager, db):
        db["workings"].find_one.return_value = None
        db["experiences"].find_one.return_value = None
        assert get_company(manager, "NOPE") is None

    def test_companies_having_data_union(self, manager, db):
        db["workings"].distinct.return_value = ["A", "B"]
        db["experiences"].distinct.return_value = ["B", "C"]
        assert companies_having_data(manager) == [{"name": "A"}, {"name": "B"}, {"name": "C"}]

    def test_get_job_title(self, manager, db):
        db["workings"].find_one.return_value = {"job_title": "ENGINEER"}
        assert get_job_title(manager, "ENGINEER") == {"name": "ENGINEER"}

    def test_job_title_catalogue(self, manager, db):
        _id = ObjectId()
        cursor = db["job_titles"].find.return_value
        cursor.sort.return_value = cursor
        cursor.skip.return_value = cursor
        cursor.limit.return_value = [{"_id": _id, "des": "軟體工程師"}]

        assert search_job_title_catalogue(manager, "工程師", 1) == [{"_id": str(_id), "des": "軟體工程師"}]
        cursor.skip.assert_called_once_with(25)


class TestArguments:
    @pytest.mark.parametrize("limit", [0, 21])
    def test_keyword_limit(self, manager, limit):
        with pytest.raises(HttpError) as exc_info:
            company_keywords(manager, limit)
        assert exc_info.value.message == "limit 必須是 1 ~ 20"

    def test_company_keywords(self, manager, db):
        db["company_keywords"].aggregate.return_value = iter([{"_id": "GOODJOB", "count": 3}])
        assert company_keywords(manager, 5) == ["GOODJOB"]

    def test_salary_work_times_arguments(self, manager):
        with pytest.raises(HttpError) as exc_info:
            salary_work_times(manager, -1, 10)
        assert exc_info.value.message == "start 格式錯誤"

        with pytest.raises(HttpError) as exc_info:
            salary_work_times(manager, 0, 101)
        assert exc_info.value.message == "limit 格式錯誤"
