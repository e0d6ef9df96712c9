"""
MongoDB Service - one model class per collection.

Collections in this database:
1. users              - accounts created from Facebook / Google logins
2. workings           - salary & working-time records
3. experiences        - work / interview / intern write-ups
4. companies          - company catalogue (id = tax id, name)
5. company_keywords   - logged company search keywords
6. job_title_keywords - logged job title search keywords
7. job_titles         - job title catalogue used by autocomplete
8. experience_likes   - which user liked which experience
9. recommendations    - one recommendation string per user
10. email_logs        - notification emails already sent

Only published, non-archived documents are ever shown to other users.
"""

import re
from datetime import datetime
from typing import Optional, List, Dict, Any

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ReturnDocument
from pymongo.collection import Collection
from pymongo.database import Database

from goodjob.core.errors import ObjectIdError, ObjectNotExistError
from goodjob.db.mongodb import get_mongo_db, COLLECTIONS
from goodjob.schemas.schemas import NewUser
from goodjob.services.wage_service import validate_salary

# Email status of a user
UNVERIFIED = "UNVERIFIED"
SENT_VERIFICATION_LINK = "SENT_VERIFICATION_LINK"
VERIFIED = "VERIFIED"

PUBLISHED_QUERY = {
    "status": "published",
    "archive.is_archived": False,
}

JOB_TITLE_PAGE_SIZE = 25


# ============================================================
# HELPERS
# ============================================================

def serialize_doc(doc: Any) -> Any:
    """Convert a MongoDB document (recursively) to something JSON can encode."""
    if doc is None:
        return None
    if isinstance(doc, ObjectId):
        return str(doc)
    if isinstance(doc, dict):
        return {key: serialize_doc(value) for key, value in doc.items()}
    if isinstance(doc, list):
        return [serialize_doc(value) for value in doc]
    return doc


def to_object_id(value: Any) -> ObjectId:
    """Parse an ObjectId, raising ObjectIdError when it is malformed."""
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise ObjectIdError(f"{value} is not a valid ObjectId")


def is_valid_object_id(value: Any) -> bool:
    return isinstance(value, ObjectId) or (value is not None and ObjectId.is_valid(value))


def escape_regex(text: str) -> re.Pattern:
    return re.compile(re.escape(text))


def _sort_spec(sort: Optional[Dict[str, int]]) -> List:
    return list((sort or {}).items())


class BaseModel:
    """Binds a model to one collection of the given (or default) database."""

    collection_name: str = ""

    def __init__(self, db: Database = None):
        db = db if db is not None else get_mongo_db()
        self.db = db
        self.collection: Collection = db[self.collection_name]


# ============================================================
# EXPERIENCES COLLECTION
# ============================================================

class ExperienceModel(BaseModel):
    """
    Work / interview / intern experiences, told apart by `type`.

    Counters (like/reply/report) are only touched through the increment
    helpers so they never go below zero.
    """

    collection_name = COLLECTIONS["experiences"]

    def get_experiences(
        self,
        query: dict,
        sort: Dict[str, int] = None,
        skip: int = 0,
        limit: int = 25,
        projection: dict = None
    ) -> List[dict]:
        """Find experiences by a raw mongo query, sorted and paginated."""
        cursor = self.collection.find(query, projection)
        if sort:
            cursor = cursor.sort(_sort_spec(sort))
        return list(cursor.skip(skip).limit(limit))

    def get_experiences_count_by_query(self, query: dict) -> int:
        return self.collection.count_documents(query)

    def find_one_or_fail(self, _id: Any, projection: dict = None) -> dict:
        """Fetch one experience; raises ObjectNotExistError if missing."""
        if not is_valid_object_id(_id):
            raise ObjectNotExistError("該文章不存在")
        experience = self.collection.find_one({"_id": ObjectId(_id)}, projection)
        if experience:
            return experience
        raise ObjectNotExistError("該文章不存在")

    def is_exist(self, _id: Any) -> bool:
        if not is_valid_object_id(_id):
            return False
        return self.collection.find_one({"_id": ObjectId(_id)}, {"_id": 1}) is not None

    def create_experience(self, experience: dict):
        """Insert an experience. `experience` gets its `_id` set in place."""
        if experience and experience.get("salary"):
            validate_salary(experience["salary"])
        return self.collection.insert_one(experience)

    def increment_reply_count(self, _id: Any) -> Optional[dict]:
        return self._increment_field("reply_count", _id)

    def increment_report_count(self, _id: Any) -> Optional[dict]:
        return self._increment_field("report_count", _id)

    def increment_like_count(self, _id: Any) -> Optional[dict]:
        return self._increment_field("like_count", _id)

    def decrement_like_count(self, _id: Any) -> Optional[dict]:
        return self._decrement_field("like_count", _id)

    def _increment_field(self, field: str, _id: Any) -> Optional[dict]:
        if not is_valid_object_id(_id):
            raise ObjectNotExistError("該文章不存在")
        return self.collection.find_one_and_update(
            {"_id": ObjectId(_id)},
            {"$inc": {field: 1}},
            projection={field: 1},
            return_document=ReturnDocument.AFTER
        )

    def _decrement_field(self, field: str, _id: Any) -> Optional[dict]:
        if not is_valid_object_id(_id):
            raise ObjectNotExistError("該文章不存在")
        return self.collection.find_one_and_update(
            {"_id": ObjectId(_id), field: {"$gt": 0}},
            {"$inc": {field: -1}},
            projection={field: 1},
            return_document=ReturnDocument.AFTER
        )

    def update_status(self, _id: Any, status: str) -> Optional[dict]:
        return self.collection.find_one_and_update(
            {"_id": to_object_id(_id)},
            {"$set": {"status": status}},
            projection={"_id": 1, "status": 1},
            return_document=ReturnDocument.AFTER
        )

    def find_by_company_names(self, names: List[str], experience_type: str = None) -> List[dict]:
        query = {**PUBLISHED_QUERY, "company.name": {"$in": list(names)}}
        if experience_type:
            query["type"] = experience_type
        return list(self.collection.find(query).sort("created_at", -1))

    def find_by_job_titles(self, job_titles: List[str], experience_type: str = None) -> List[dict]:
        query = {**PUBLISHED_QUERY, "job_title": {"$in": list(job_titles)}}
        if experience_type:
            query["type"] = experience_type
        return list(self.collection.find(query).sort("created_at", -1))


# ============================================================
# WORKINGS COLLECTION (salary & working time)
# ============================================================

class SalaryWorkTimeModel(BaseModel):
    """Salary / working-time records, stored in `workings`."""

    collection_name = COLLECTIONS["workings"]

    def find_by_company_names(self, names: List[str]) -> List[dict]:
        return list(
            self.collection.find({**PUBLISHED_QUERY, "company.name": {"$in": list(names)}})
            .sort("created_at", -1)
        )

    def find_by_job_titles(self, job_titles: List[str]) -> List[dict]:
        return list(
            self.collection.find({**PUBLISHED_QUERY, "job_title": {"$in": list(job_titles)}})
            .sort("created_at", -1)
        )

    def create_salary_work_time(self, salary_work_time: dict):
        """Insert a working. `salary_work_time` gets its `_id` set in place."""
        if salary_work_time and salary_work_time.get("salary"):
            validate_salary(salary_work_time["salary"])
        return self.collection.insert_one(salary_work_time)

    def get_workings(
        self,
        query: dict,
        sort: Dict[str, int] = None,
        skip: int = 0,
        limit: int = 0,
        projection: dict = None
    ) -> List[dict]:
        cursor = self.collection.find(query, projection)
        if sort:
            cursor = cursor.sort(_sort_spec(sort))
        # limit(0) means "no limit" for pymongo
        return list(cursor.skip(skip).limit(limit))

    def get_workings_count_by_query(self, query: dict) -> int:
        return self.collection.count_documents(query)

    def get_working_by_id(self, _id: Any, projection: dict = None) -> dict:
        if not is_valid_object_id(_id):
            raise ObjectNotExistError("該筆資料不存在")
        working = self.collection.find_one({"_id": ObjectId(_id)}, projection)
        if not working:
            raise ObjectNotExistError("該筆資料不存在")
        return working

    def update_status(self, _id: Any, status: str) -> Optional[dict]:
        return self.collection.find_one_and_update(
            {"_id": to_object_id(_id)},
            {"$set": {"status": status}},
            return_document=ReturnDocument.AFTER
        )


# ============================================================
# USERS COLLECTION
# ============================================================

class UserModel(BaseModel):
    """
    Platform users. A user logs in with Facebook, Google or both; the
    provider profile is kept under `facebook` / `google`.
    """

    collection_name = COLLECTIONS["users"]

    def find_one_by_id(self, _id: Any) -> Optional[dict]:
        if not is_valid_object_id(_id):
            return None
        return self.collection.find_one({"_id": ObjectId(_id)})

    def find_one_by_facebook_id(self, facebook_id: str) -> Optional[dict]:
        return self.collection.find_one({"facebook_id": facebook_id})

    def find_one_by_google_id(self, google_id: str) -> Optional[dict]:
        return self.collection.find_one({"google_id": google_id})

    def create(self, user: dict) -> dict:
        """
        Validate and insert a new user.

        Rules:
            - name: non-empty string, email: valid address (both required)
            - facebook_id & facebook come together
            - google_id & google come together
            - at least one of facebook_id / google_id

        Raises pydantic.ValidationError when a rule is broken.
        Returns the inserted document (with _id and email_status).
        """
        NewUser.model_validate(user)

        new_user = {
            **user,
            "email_status": UNVERIFIED,
            "created_at": datetime.utcnow(),
        }
        self.collection.insert_one(new_user)
        return new_user

    def update_subscribe_email(self, _id: ObjectId, email: Optional[str]) -> None:
        """Store `email` on the user and subscribe them to our mails."""
        if email:
            self.collection.update_one(
                {"_id": _id},
                {"$set": {"email": email, "subscribeEmail": True}}
            )

    def set_missing_name_and_email(self, user: dict, account: dict) -> None:
        """Fill name / email from the provider account when the user has none."""
        updates = {}
        if not user.get("name") and account.get("name"):
            updates["name"] = account["name"]
        if not user.get("email") and account.get("email"):
            updates["email"] = account["email"]
        if updates:
            self.collection.update_one({"_id": user["_id"]}, {"$set": updates})

    def increase_salary_work_time_count(self, _id: Any) -> Optional[dict]:
        return self._increase_field("time_and_salary_count", _id)

    def _increase_field(self, field: str, _id: Any) -> Optional[dict]:
        if not is_valid_object_id(_id):
            raise ObjectNotExistError("該使用者不存在")
        return self.collection.find_one_and_update(
            {"_id": ObjectId(_id)},
            {"$inc": {field: 1}},
            upsert=True,
            return_document=ReturnDocument.AFTER
        )


# ============================================================
# COMPANIES COLLECTION
# ============================================================

class CompanyModel(BaseModel):
    collection_name = COLLECTIONS["companies"]

    def find_by_id(self, company_id: str) -> List[dict]:
        return list(self.collection.find({"id": company_id}))

    def find_by_name_or_id(self, query: str) -> List[dict]:
        return list(self.collection.find({
            "$or": [
                {"name": query.upper()},
                {"id": query},
            ]
        }))


# ============================================================
# KEYWORD COLLECTIONS
# ============================================================

class KeywordModel(BaseModel):
    """Search keyword log; `aggregate` returns the most searched words."""

    def create_keyword(self, word: str):
        if not word:
            return None
        return self.collection.insert_one({"word": word, "created_at": datetime.utcnow()})

    def aggregate(self, limit: int = 5) -> List[dict]:
        return list(self.collection.aggregate([
            {"$group": {"_id": "$word", "count": {"$sum": 1}}},
            {"$sort": {"count": -1, "_id": 1}},
            {"$limit": limit},
        ]))


class CompanyKeywordModel(KeywordModel):
    collection_name = COLLECTIONS["company_keywords"]


class JobTitleKeywordModel(KeywordModel):
    collection_name = COLLECTIONS["job_title_keywords"]


# ============================================================
# JOB TITLES COLLECTION (catalogue)
# ============================================================

class JobTitleModel(BaseModel):
    collection_name = COLLECTIONS["job_titles"]

    def search(self, keyword: Optional[str], page: int = 0) -> List[dict]:
        """25 job titles per page; an empty keyword matches everything."""
        query = {"des": escape_regex(keyword)} if keyword else {}
        cursor = (
            self.collection.find(query)
            .sort("_id", 1)
            .skip(JOB_TITLE_PAGE_SIZE * page)
            .limit(JOB_TITLE_PAGE_SIZE)
        )
        return list(cursor)


# ============================================================
# EXPERIENCE LIKES COLLECTION
# ============================================================

class ExperienceLikeModel(BaseModel):
    collection_name = COLLECTIONS["experience_likes"]

    def get_like_by_experience_and_user(self, experience_id: ObjectId, user: dict) -> Optional[dict]:
        return self.collection.find_one({
            "experience_id": experience_id,
            "user_id": user["_id"],
        })


# ============================================================
# RECOMMENDATIONS COLLECTION
# ============================================================

class RecommendationModel(BaseModel):
    """
    Each user owns one recommendation document; its _id (as a string) is
    the "recommendation string" they share with friends.
    """

    collection_name = COLLECTIONS["recommendations"]

    def get_user_by_recommendation_string(self, recommendation_string: str) -> Optional[Any]:
        """Return the recommending user id, None if unknown; ObjectIdError if malformed."""
        _id = to_object_id(recommendation_string)
        doc = self.collection.find_one({"_id": _id})
        if doc is None:
            return None
        return doc["user"]

    def get_or_create_by_user(self, user_id: ObjectId) -> dict:
        return self.collection.find_one_and_update(
            {"user": user_id},
            {"$setOnInsert": {"user": user_id, "count": 0, "created_at": datetime.utcnow()}},
            upsert=True,
            return_document=ReturnDocument.AFTER
        )

    def increase_count(self, user_id: Any):
        return self.collection.update_one({"user": user_id}, {"$inc": {"count": 1}})


# ============================================================
# EMAIL LOGS COLLECTION
# ============================================================

class EmailLogModel(BaseModel):
    collection_name = COLLECTIONS["email_logs"]

    def insert_log(self, user_id: Any, experience_id: Any, threshold: int, created_at: datetime = None):
        return self.collection.insert_one({
            "user_id": to_object_id(user_id),
            "created_at": created_at or datetime.utcnow(),
            "reason": {
                "experience_id": to_object_id(experience_id),
                "threshold": threshold,
            },
        })


# ============================================================
# MODEL MANAGER: one entry point per request
# ============================================================

class ModelManager:
    """
    Hands out the model for each collection of one database.

    Usage:
        manager = ModelManager(get_mongo_db())
        manager.UserModel.find_one_by_id(...)
    """

    def __init__(self, db: Database = None):
        self.db = db if db is not None else get_mongo_db()
        self._salary_work_time_model = None

    @property
    def ExperienceModel(self) -> ExperienceModel:
        return ExperienceModel(self.db)

    @property
    def SalaryWorkTimeModel(self) -> SalaryWorkTimeModel:
        if self._salary_work_time_model is None:
            self._salary_work_time_model = SalaryWorkTimeModel(self.db)
        return self._salary_work_time_model

    @property
    def UserModel(self) -> UserModel:
        return UserModel(self.db)

    @property
    def CompanyModel(self) -> CompanyModel:
        return CompanyModel(self.db)

    @property
    def CompanyKeywordModel(self) -> CompanyKeywordModel:
        return CompanyKeywordModel(self.db)

    @property
    def JobTitleKeywordModel(self) -> JobTitleKeywordModel:
        return JobTitleKeywordModel(self.db)

    @property
    def JobTitleModel(self) -> JobTitleModel:
        return JobTitleModel(self.db)

    @property
    def ExperienceLikeModel(self) -> ExperienceLikeModel:
        return ExperienceLikeModel(self.db)

    @property
    def RecommendationModel(self) -> RecommendationModel:
        return RecommendationModel(self.db)

    @property
    def EmailLogModel(self) -> EmailLogModel:
        return EmailLogModel(self.db)


def get_manager() -> ModelManager:
    """FastAPI dependency - a ModelManager over the application database."""
    return ModelManager(get_mongo_db())
