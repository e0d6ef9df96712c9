import logging

from pymongo.database import Database

logger = logging.getLogger(__name__)


def up(db: Database):
    result = db["experiences"].update_many(
        {"report_count": {"$eq": None}},
        {"$set": {"report_count": 0}},
    )
    logger.info("nModified: %s", result.modified_count)
    return result
