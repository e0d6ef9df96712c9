"""Link Facebook-authored workings to their user via workings.user_id."""

import logging

from pymongo import UpdateOne
from pymongo.database import Database

logger = logging.getLogger(__name__)


def up(db: Database):
    workings = list(db["workings"].find({
        "author.id": {"$exists": True},
        "author.type": "facebook",
    }))
    logger.info("expected nModified: %s", len(workings))

    operations = []
    for working in workings:
        user = db["users"].find_one({"facebook_id": working["author"]["id"]})
        if user:
            operations.append(UpdateOne({"_id": working["_id"]}, {"$set": {"user_id": user["_id"]}}))

    if not operations:
        return None

    result = db["workings"].bulk_write(operations)
    logger.info("nModified: %s", result.modified_count)
    return result
