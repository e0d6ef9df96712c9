"""
Workings / Experiences / Jobs Route Tests

What we test:
    - POST /workings: login required, 422 messages, stored response
    - GET /workings: sort and pagination checks
    - POST /work_experiences and /interview_experiences through GraphQL
    - GET /jobs/search and /health
"""

from datetime import datetime
from unittest.mock import patch

import pytest
from bson import ObjectId

LAST_YEAR = datetime.utcnow().year - 1


def _working_body(**overrides):
    body = {
        "job_title": "engineer",
        "employment_type": "full-time",
        "is_currently_employed": "yes",
        "company": "goodjob",
        "week_work_time": "40",
        "overtime_frequency": "1",
        "day_promised_work_time": "8",
        "day_real_work_time": "10",
        "salary_type": "month",
        "salary_amount": "44000",
        "experience_in_year": "3",
    }
    body.update(overrides)
    return body


def _work_experience_body(**overrides):
    body = {
        "company_query": "goodjob",
        "region": "臺北市",
        "job_title": "engineer",
        "title": "我的工作心得",
        "sections": [{"subtitle": "工作內容", "content": "寫程式"}],
        "is_currently_employed": "yes",
        "experience_in_year": 3,
        "salary": {"type": "month", "amount": 44000},
        "recommend_to_others": "yes",
    }
    body.update(overrides)
    return body


def _interview_experience_body(**overrides):
    body = {
        "company_query": "goodjob",
        "region": "臺北市",
        "job_title": "engineer",
        "title": "我的面試經驗",
        "sections": [{"subtitle": "面試過程", "content": "聊得很開心"}],
        "interview_time": {"year": LAST_YEAR, "month": 10},
        "interview_result": "錄取",
        "overall_rating": 4,
        "interview_qas": [{"question": "自我介紹", "answer": "..."}],
    }
    body.update(overrides)
    return body


class TestPostWorkings:
    @pytest.mark.asyncio
    async def test_requires_login(self, client, current_user):
        current_user["value"] = None
        response = await client.post("/workings", json=_working_body())
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_created(self, client, db):
        db["companies"].find.return_value = []

        response = await client.post(
            "/workings",
            json=_working_body(),
            headers={"X-Forwarded-For": "10.0.0.1, 10.0.0.2"},
        )

        assert response.status_code == 200
        working = response.json()["working"]
        assert working["job_title"] == "ENGINEER"
        assert working["company"] == {"name": "GOODJOB"}
        assert working["estimated_monthly_wage"] == 44000
        assert "user_id" not in working
        db["workings"].insert_one.assert_called_once()

    @pytest.mark.asyncio
    async def test_created_without_hourly_estimate_for_short_weeks(self, client, db):
        db["companies"].find.return_value = []

        response = await client.post(
            "/workings",
            json=_working_body(week_work_time="4.75", day_real_work_time="13"),
        )

        assert response.status_code == 200
        working = response.json()["working"]
        assert "estimated_hourly_wage" not in working
        assert working["estimated_monthly_wage"] == 44000

    @pytest.mark.asyncio
    async def test_validation_message(self, client):
        response = await client.post("/workings", json=_working_body(company=""))
        assert response.status_code == 422
        assert response.json() == {"detail": "公司/單位名稱必填"}

    @pytest.mark.asyncio
    async def test_input_check(self, client):
        response = await client.post("/workings", json=_working_body(employment_type="freelance"))
        assert response.status_code == 422


class TestGetWorkings:
    def _mock_list(self, db, docs):
        db["workings"].count_documents.return_value = len(docs)
        cursor = db["workings"].find.return_value
        cursor.sort.return_value = cursor
        cursor.skip.return_value = cursor
        cursor.limit.return_value = docs

    @pytest.mark.asyncio
    async def test_list(self, client, db):
        self._mock_list(db, [{"_id": ObjectId(), "job_title": "ENGINEER"}])

        response = await client.get("/workings", params={"page": "1", "limit": "10", "order": "ascending"})

        assert response.status_code == 200
        body = response.json()
        assert body["total_count"] == 1
        assert body["page"] == 1
        db["workings"].find.return_value.sort.assert_called_once_with([("created_at", 1)])

    @pytest.mark.asyncio
    async def test_limit_too_large(self, client):
        response = await client.get("/workings", params={"limit": "51"})
        assert response.status_code == 422
        assert response.json() == {"detail": "limit is not allow"}

    @pytest.mark.asyncio
    async def test_bad_sort_by(self, client):
        response = await client.get("/workings", params={"sort_by": "salary"})
        assert response.status_code == 422
        assert response.json() == {"detail": "query: sort_by error"}


class TestPostExperiences:
    @pytest.mark.asyncio
    async def test_work_experience_created(self, client, db, user):
        db["companies"].find.return_value = []

        response = await client.post("/work_experiences", json=_work_experience_body())

        assert response.status_code == 200
        stored = db["experiences"].insert_one.call_args[0][0]
        assert response.json() == {"success": True, "experience": {"_id": str(stored["_id"])}}
        assert stored["type"] == "work"
        assert stored["job_title"] == "ENGINEER"
        assert stored["company"] == {"name": "GOODJOB"}
        assert stored["author_id"] == user["_id"]
        assert stored["recommend_to_others"] == "yes"

    @pytest.mark.asyncio
    async def test_work_experience_validation(self, client):
        response = await client.post("/work_experiences", json=_work_experience_body(region="火星"))
        assert response.status_code == 422
        assert response.json() == {"detail": "地區不允許 火星！"}

    @pytest.mark.asyncio
    async def test_work_experience_requires_login(self, client, current_user):
        current_user["value"] = None
        response = await client.post("/work_experiences", json=_work_experience_body())
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_interview_experience_created(self, client, db):
        db["companies"].find.return_value = [{"id": "12345678", "name": "GOODJOB"}]

        response = await client.post("/interview_experiences", json=_interview_experience_body())

        assert response.status_code == 200
        stored = db["experiences"].insert_one.call_args[0][0]
        assert stored["type"] == "interview"
        assert stored["company"] == {"id": "12345678", "name": "GOODJOB"}
        assert stored["overall_rating"] == 4

    @pytest.mark.asyncio
    async def test_interview_experience_validation(self, client, db):
        response = await client.post(
            "/interview_experiences",
            json=_interview_experience_body(overall_rating=6),
        )
        assert response.status_code == 422
        assert response.json() == {"detail": "整體面試滿意度需介於 1~5"}
        db["experiences"].insert_one.assert_not_called()


class TestJobs:
    @pytest.mark.asyncio
    async def test_search(self, client, db):
        _id = ObjectId()
        cursor = db["job_titles"].find.return_value
        cursor.sort.return_value = cursor
        cursor.skip.return_value = cursor
        cursor.limit.return_value = [{"_id": _id, "des": "軟體工程師"}]

        response = await client.get("/jobs/search", params={"key": "工程師"})

        assert response.status_code == 200
        assert response.json() == [{"_id": str(_id), "des": "軟體工程師"}]


@pytest.mark.asyncio
async def test_health(client):
    with patch("goodjob.main.test_mongo_connection", return_value=True):
        response = await client.get("/health")
    assert response.json() == {"status": "healthy", "mongodb": "connected"}
