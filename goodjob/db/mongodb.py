"""
MongoDB Connection Utility

MongoDB stores everything:
- users: accounts created from Facebook / Google logins
- workings: salary and working-time records
- experiences: work / interview / intern write-ups
- company_keywords, job_title_keywords: search keyword logs
- companies, job_titles: reference catalogues
- recommendations, email_logs, experience_likes, migrations
"""
import logging

from pymongo import MongoClient, ASCENDING, DESCENDING
from pymongo.database import Database
from goodjob.core.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

# Global client (connection pooling handled internally by pymongo)
_client: MongoClient = None
_db: Database = None


def get_mongo_client() -> MongoClient:
    """Get or create MongoDB client (singleton pattern)"""
    global _client
    if _client is None:
        _client = MongoClient(settings.mongodb_uri, tz_aware=False)
    return _client


def get_mongo_db() -> Database:
    """Get the application database"""
    global _db
    if _db is None:
        client = get_mongo_client()
        _db = client[settings.mongodb_db]
    return _db


def close_mongo_client() -> None:
    global _client, _db
    if _client is not None:
        _client.close()
    _client = None
    _db = None


def test_mongo_connection() -> bool:
    """
    Test if MongoDB is reachable.
    Returns True if connection successful, False otherwise.
    """
    try:
        client = get_mongo_client()
        # ping command checks connection
        client.admin.command('ping')
        return True
    except Exception as e:
        logger.warning("MongoDB connection failed: %s", e)
        return False


# Collection name constants (avoid typos)
COLLECTIONS = {
    "users": "users",
    "workings": "workings",
    "experiences": "experiences",
    "companies": "companies",
    "company_keywords": "company_keywords",
    "job_title_keywords": "job_title_keywords",
    "job_titles": "job_titles",
    "experience_likes": "experience_likes",
    "recommendations": "recommendations",
    "email_logs": "email_logs",
    "migrations": "migrations",
}


def init_mongo_indexes(db: Database = None):
    """
    Create indexes for the lookups the API does on every request.
    Call this once during app startup.
    """
    db = db if db is not None else get_mongo_db()

    # Login lookups
    db[COLLECTIONS["users"]].create_index("facebook_id")
    db[COLLECTIONS["users"]].create_index("google_id")

    # Company / job title pages and the newest-first lists
    db[COLLECTIONS["workings"]].create_index("company.name")
    db[COLLECTIONS["workings"]].create_index("job_title")
    db[COLLECTIONS["workings"]].create_index([("created_at", DESCENDING)])
    db[COLLECTIONS["workings"]].create_index("user_id")

    db[COLLECTIONS["experiences"]].create_index("company.name")
    db[COLLECTIONS["experiences"]].create_index("job_title")
    db[COLLECTIONS["experiences"]].create_index("author_id")

    db[COLLECTIONS["companies"]].create_index("id")
    db[COLLECTIONS["companies"]].create_index("name")

    db[COLLECTIONS["email_logs"]].create_index("user_id")

    db[COLLECTIONS["experience_likes"]].create_index([
        ("experience_id", ASCENDING),
        ("user_id", ASCENDING)
    ], unique=True)

    db[COLLECTIONS["recommendations"]].create_index("user", unique=True)

    logger.info("MongoDB indexes created successfully")
