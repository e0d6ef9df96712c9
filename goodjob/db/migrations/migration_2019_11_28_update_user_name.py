"""Fill users.name from the Facebook or Google profile when it is missing."""

import logging

from pymongo import UpdateOne
from pymongo.database import Database

logger = logging.getLogger(__name__)


def up(db: Database):
    users = db["users"].find({
        "$and": [
            {"name": {"$exists": False}},
            {"$or": [
                {"facebook.name": {"$exists": True}},
                {"google.name": {"$exists": True}},
            ]},
        ]
    })

    operations = []
    for user in users:
        name = (user.get("facebook") or {}).get("name") or (user.get("google") or {}).get("name")
        if name:
            operations.append(UpdateOne({"_id": user["_id"]}, {"$set": {"name": name}}))

    if not operations:
        return None

    result = db["users"].bulk_write(operations)
    logger.info("nModified: %s", result.modified_count)
    return result
