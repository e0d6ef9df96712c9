"""
GraphQL Tests (POST /graphql)

What we test:
    - me: data for a logged-in user, UNAUTHENTICATED otherwise
    - experience / popular_experiences: interface dispatch, preview, liked
    - company / job_title pages: statistics through the DataLoaders
    - keyword limits reported as BAD_USER_INPUT
    - mutations: facebookLogin, changeSalaryWorkTimeStatus, createInterviewExperience
    - service errors mapped to extension codes
"""

from datetime import datetime
from unittest.mock import AsyncMock, patch

import pytest
from bson import ObjectId
from graphql import GraphQLError

from goodjob.core.errors import HttpError
from goodjob.graphql.errors import graphql_errors

LAST_YEAR = datetime.utcnow().year - 1


async def _execute(client, query, variables=None):
    response = await client.post("/graphql", json={"query": query, "variables": variables or {}})
    assert response.status_code == 200
    return response.json()


def _experience_doc(**overrides):
    doc = {
        "_id": ObjectId(),
        "type": "work",
        "company": {"id": "12345678", "name": "GOODJOB"},
        "job_title": "ENGINEER",
        "region": "臺北市",
        "title": "我的工作心得",
        "sections": [{"subtitle": "工作內容", "content": "寫程式" * 100}],
        "created_at": datetime(2019, 12, 1),
        "like_count": 3,
        "reply_count": 0,
        "report_count": 0,
        "status": "published",
        "archive": {"is_archived": False, "reason": ""},
        "recommend_to_others": "yes",
        "week_work_time": 40,
    }
    doc.update(overrides)
    return doc


def _mock_find_sorted(collection, docs):
    collection.find.return_value.sort.return_value = docs


class TestMe:
    @pytest.mark.asyncio
    async def test_me(self, client, db, user):
        db["experiences"].count_documents.return_value = 2

        result = await _execute(client, "{ me { _id name email_status experience_count } }")

        assert result["data"]["me"] == {
            "_id": str(user["_id"]),
            "name": "Mark Chen",
            "email_status": "UNVERIFIED",
            "experience_count": 2,
        }

    @pytest.mark.asyncio
    async def test_me_unauthenticated(self, client, current_user):
        current_user["value"] = None

        result = await _execute(client, "{ me { _id } }")

        assert result["data"] is None
        assert result["errors"][0]["extensions"]["code"] == "UNAUTHENTICATED"

    @pytest.mark.asyncio
    async def test_experiences_limit(self, client):
        result = await _execute(client, "{ me { experiences(limit: 101) { id } } }")
        assert result["errors"][0]["message"] == "limit 格式錯誤"
        assert result["errors"][0]["extensions"]["code"] == "BAD_USER_INPUT"


class TestExperience:
    @pytest.mark.asyncio
    async def test_work_experience(self, client, db):
        doc = _experience_doc()
        db["experiences"].find_one.return_value = doc
        db["experience_likes"].find_one.return_value = None

        result = await _execute(client, """
            query ($id: ID!) {
                experience(id: $id) {
                    id
                    type
                    title
                    preview
                    liked
                    company { name }
                    ... on WorkExperience { recommend_to_others week_work_time }
                }
            }
        """, {"id": str(doc["_id"])})

        experience = result["data"]["experience"]
        assert experience["id"] == str(doc["_id"])
        assert experience["type"] == "work"
        assert len(experience["preview"]) == 160
        assert experience["liked"] is False
        assert experience["company"] == {"name": "GOODJOB"}
        assert experience["recommend_to_others"] == "yes"

    @pytest.mark.asyncio
    async def test_missing_experience(self, client, db):
        db["experiences"].find_one.return_value = None
        result = await _execute(client, '{ experience(id: "5d0b3a9c8f5b4a2a3c2b1a00") { id } }')
        assert result["data"]["experience"] is None

    @pytest.mark.asyncio
    async def test_popular_experiences(self, client, db):
        interview = _experience_doc(type="interview", overall_rating=4, interview_result="錄取")
        db["experiences"].aggregate.return_value = iter([_experience_doc(), interview])

        result = await _execute(client, """
            {
                popular_experiences(returnNumber: 2) {
                    __typename
                    ... on InterviewExperience { overall_rating }
                }
            }
        """)

        assert result["data"]["popular_experiences"] == [
            {"__typename": "WorkExperience"},
            {"__typename": "InterviewExperience", "overall_rating": 4},
        ]

    @pytest.mark.asyncio
    async def test_popular_experiences_return_number(self, client):
        result = await _execute(client, "{ popular_experiences(returnNumber: 21) { id } }")
        assert result["errors"][0]["extensions"]["code"] == "BAD_USER_INPUT"


class TestCompanyAndJobTitle:
    @pytest.mark.asyncio
    async def test_company_statistics(self, client, db):
        db["workings"].find_one.return_value = {"_id": ObjectId()}
        workings = [
            {
                "_id": ObjectId(),
                "company": {"name": "GOODJOB"},
                "job_title": "ENGINEER",
                "week_work_time": week_work_time,
                "estimated_monthly_wage": 40000,
                "created_at": datetime(2019, 12, 1),
                "status": "published",
                "archive": {"is_archived": False, "reason": ""},
            }
            for week_work_time in [40, 50]
        ]
        _mock_find_sorted(db["workings"], workings)
        _mock_find_sorted(db["experiences"], [
            _experience_doc(recommend_to_others="yes"),
            _experience_doc(recommend_to_others="no"),
        ])

        result = await _execute(client, """
            {
                company(name: "GOODJOB") {
                    name
                    salary_work_time_statistics {
                        count
                        average_week_work_time
                        job_average_salaries { job_title { name } average_salary { amount } data_count }
                    }
                    work_experience_statistics { count recommend_to_others { yes no unknown } }
                    salary_work_times { company { name } week_work_time }
                }
            }
        """)

        company = result["data"]["company"]
        assert company["name"] == "GOODJOB"
        assert company["salary_work_time_statistics"]["count"] == 2
        assert company["salary_work_time_statistics"]["average_week_work_time"] == 45
        assert company["salary_work_time_statistics"]["job_average_salaries"] == [
            {"job_title": {"name": "ENGINEER"}, "average_salary": {"amount": 40000}, "data_count": 2},
        ]
        # the type filter is applied in mongo, the mock returns both docs for every type
        assert company["work_experience_statistics"]["recommend_to_others"]["yes"] == 1
        assert len(company["salary_work_times"]) == 2

    @pytest.mark.asyncio
    async def test_unknown_company(self, client, db):
        db["workings"].find_one.return_value = None
        db["experiences"].find_one.return_value = None
        result = await _execute(client, '{ company(name: "NOPE") { name } }')
        assert result["data"]["company"] is None

    @pytest.mark.asyncio
    async def test_job_title_salary_distribution(self, client, db):
        db["workings"].find_one.return_value = {"job_title": "ENGINEER"}
        db["workings"].count_documents.return_value = 1

        result = await _execute(client, """
            { job_title(name: "ENGINEER") { name salary_distribution { bins { data_count range { from to } } } } }
        """)

        assert result["data"]["job_title"] == {"name": "ENGINEER", "salary_distribution": {"bins": []}}

    @pytest.mark.asyncio
    async def test_company_keywords_limit(self, client):
        result = await _execute(client, "{ company_keywords(limit: 21) }")
        assert result["errors"][0]["message"] == "limit 必須是 1 ~ 20"
        assert result["errors"][0]["extensions"]["code"] == "BAD_USER_INPUT"

    @pytest.mark.asyncio
    async def test_job_title_keywords(self, client, db):
        db["job_title_keywords"].aggregate.return_value = iter([{"_id": "ENGINEER", "count": 5}])
        result = await _execute(client, "{ job_title_keywords(limit: 5) }")
        assert result["data"]["job_title_keywords"] == ["ENGINEER"]


class TestMutations:
    @pytest.mark.asyncio
    async def test_facebook_login(self, client, db, user):
        db["users"].find_one.return_value = user

        with patch("goodjob.services.oauth_client.facebook_access_token_auth",
                   AsyncMock(return_value={"id": "-1", "name": "Mark Chen"})):
            result = await _execute(client, """
                mutation { facebookLogin(input: {accessToken: "fb-token"}) { user { _id name } token } }
            """)

        login = result["data"]["facebookLogin"]
        assert login["user"] == {"_id": str(user["_id"]), "name": "Mark Chen"}
        assert login["token"]

    @pytest.mark.asyncio
    async def test_google_login_empty_token(self, client):
        result = await _execute(client, 'mutation { googleLogin(input: {idToken: ""}) { token } }')

        assert result["errors"][0]["extensions"]["code"] == "BAD_USER_INPUT"

    @pytest.mark.asyncio
    async def test_change_status_by_owner(self, client, db, user):
        _id = ObjectId()
        db["workings"].find_one.return_value = {"_id": _id, "user_id": user["_id"]}
        db["workings"].find_one_and_update.return_value = {
            "_id": _id,
            "company": {"name": "GOODJOB"},
            "job_title": "ENGINEER",
            "created_at": datetime(2019, 12, 1),
            "status": "hidden",
            "archive": {"is_archived": False, "reason": ""},
        }

        result = await _execute(client, """
            mutation ($id: ID!) {
                changeSalaryWorkTimeStatus(input: {id: $id, status: hidden}) {
                    salary_work_time { id status }
                }
            }
        """, {"id": str(_id)})

        assert result["data"]["changeSalaryWorkTimeStatus"]["salary_work_time"] == {
            "id": str(_id),
            "status": "hidden",
        }

    @pytest.mark.asyncio
    async def test_change_status_by_someone_else(self, client, db):
        _id = ObjectId()
        db["workings"].find_one.return_value = {"_id": _id, "user_id": ObjectId()}

        result = await _execute(client, """
            mutation ($id: ID!) {
                changeSalaryWorkTimeStatus(input: {id: $id, status: hidden}) { salary_work_time { id } }
            }
        """, {"id": str(_id)})

        assert result["errors"][0]["message"] == "user is unauthorized"
        assert result["errors"][0]["extensions"]["code"] == "UNAUTHENTICATED"
        db["workings"].find_one_and_update.assert_not_called()

    @pytest.mark.asyncio
    async def test_change_status_of_missing_working(self, client, db):
        db["workings"].find_one.return_value = None

        result = await _execute(client, """
            mutation { changeSalaryWorkTimeStatus(input: {id: "bad-id", status: hidden}) { salary_work_time { id } } }
        """)

        assert result["errors"][0]["message"] == "該筆資料不存在"

    @pytest.mark.asyncio
    async def test_create_interview_experience(self, client, db, user):
        db["companies"].find.return_value = []

        result = await _execute(client, """
            mutation ($input: CreateInterviewExperienceInput!) {
                createInterviewExperience(input: $input) {
                    success
                    experience { id job_title { name } interview_time { year month } overall_rating }
                }
            }
        """, {"input": {
            "company": {"query": "goodjob"},
            "region": "臺北市",
            "job_title": "engineer",
            "title": "我的面試經驗",
            "sections": [{"content": "聊得很開心"}],
            "interview_time": {"year": LAST_YEAR, "month": 1},
            "interview_result": "錄取",
            "overall_rating": 5,
        }})

        payload = result["data"]["createInterviewExperience"]
        assert payload["success"] is True
        assert payload["experience"]["job_title"] == {"name": "ENGINEER"}
        assert payload["experience"]["interview_time"] == {"year": LAST_YEAR, "month": 1}
        stored = db["experiences"].insert_one.call_args[0][0]
        assert stored["author_id"] == user["_id"]
        assert stored["company"] == {"name": "GOODJOB"}
        assert stored["sections"] == [{"content": "聊得很開心", "subtitle": None}]

    @pytest.mark.asyncio
    async def test_create_requires_login(self, client, current_user):
        current_user["value"] = None

        result = await _execute(client, """
            mutation ($input: CreateWorkExperienceInput!) { createWorkExperience(input: $input) { success } }
        """, {"input": {
            "company": {"name": "GOODJOB"},
            "region": "臺北市",
            "job_title": "engineer",
            "title": "t",
            "sections": [{"content": "c"}],
            "is_currently_employed": "yes",
        }})

        assert result["errors"][0]["extensions"]["code"] == "UNAUTHENTICATED"


class TestErrors:
    def test_service_error_becomes_bad_user_input(self):
        with pytest.raises(GraphQLError) as exc_info:
            with graphql_errors():
                raise HttpError("limit 格式錯誤", 422)

        assert exc_info.value.message == "limit 格式錯誤"
        assert exc_info.value.extensions == {"code": "BAD_USER_INPUT"}

    def test_unauthorized_becomes_unauthenticated(self):
        with pytest.raises(GraphQLError) as exc_info:
            with graphql_errors():
                raise HttpError("Unauthorized", 401)

        assert exc_info.value.extensions == {"code": "UNAUTHENTICATED"}
