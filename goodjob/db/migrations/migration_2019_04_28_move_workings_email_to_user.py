"""Copy the newest valid author email of each Facebook author into users.email."""

import logging

from pymongo import DESCENDING, UpdateOne
from pymongo.database import Database

from goodjob.core.validation import validate_email

logger = logging.getLogger(__name__)


def up(db: Database):
    workings = db["workings"].find(
        {"author.email": {"$ne": None}},
        {"_id": 1, "author": 1},
    ).sort("created_at", DESCENDING)

    user_emails = {}
    for working in workings:
        facebook_id = working["author"].get("id")
        email = working["author"]["email"].strip().lower()
        if not validate_email(email):
            logger.info("invalid email: |%s| will be skipped", email)
            continue
        # newest first, so the first email wins
        user_emails.setdefault(facebook_id, email)

    if not user_emails:
        return None

    result = db["users"].bulk_write([
        UpdateOne({"facebook_id": facebook_id}, {"$set": {"email": email}})
        for facebook_id, email in user_emails.items()
    ])
    logger.info("nModified: %s", result.modified_count)
    return result
