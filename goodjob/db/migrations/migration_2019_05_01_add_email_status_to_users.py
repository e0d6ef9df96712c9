import logging

from pymongo.database import Database

from goodjob.services.mongo_service import UNVERIFIED

logger = logging.getLogger(__name__)


def up(db: Database):
    result = db["users"].update_many({}, {"$set": {"email_status": UNVERIFIED}})
    logger.info("nModified: %s", result.modified_count)
    return result
