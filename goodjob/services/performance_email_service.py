"""
Performance Email Service - tell authors their experience is being read.

For every view-count threshold (highest first) we pick authors that:
    - subscribed to emails and have an address
    - got no email from us in the last 14 days
and mail them about their first experience that crossed the threshold
and was not already mailed at this (or a higher) threshold.
"""

import asyncio
import logging
from datetime import datetime, timedelta
from typing import List

from fastapi.concurrency import run_in_threadpool
from pymongo.database import Database

from goodjob.core.config import get_settings
from goodjob.db.mongodb import COLLECTIONS
from goodjob.services.email_service import send_emails_from_template
from goodjob.services.email_templates import ExperienceViewLogNotificationTemplate
from goodjob.services.mongo_service import EmailLogModel, PUBLISHED_QUERY

logger = logging.getLogger(__name__)

# order is important
VIEW_COUNT_THRESHOLDS = [1000, 500, 100]

EMAIL_INTERVAL = timedelta(days=14)

CONCURRENCY = 10

TYPE_NAMES = {
    "intern": "實習心得",
    "interview": "面試經驗",
}
DEFAULT_TYPE_NAME = "工作心得"


def users_with_experiences_pipeline(threshold: int) -> List[dict]:
    return [
        {"$match": {**PUBLISHED_QUERY, "view_count": {"$gte": threshold}}},
        {
            "$lookup": {
                "from": COLLECTIONS["users"],
                "localField": "author_id",
                "foreignField": "_id",
                "as": "user",
            }
        },
        {"$match": {"user.subscribeEmail": True, "user.email": {"$exists": True}}},
        {"$unwind": "$user"},
        {
            "$lookup": {
                "from": COLLECTIONS["email_logs"],
                "localField": "user._id",
                "foreignField": "user_id",
                "as": "user.email_logs",
            }
        },
        {
            "$group": {
                "_id": "$author_id",
                "experiences": {
                    "$push": {
                        "_id": "$_id",
                        "title": "$title",
                        "viewCount": "$view_count",
                        "type": "$type",
                        "sections": "$sections",
                    }
                },
                "user": {"$first": "$user"},
            }
        },
    ]


def _not_mailed_recently(email_logs: List[dict], now: datetime) -> bool:
    return all(log["created_at"] < now - EMAIL_INTERVAL for log in email_logs)


def _is_new_experience(experience: dict, email_logs: List[dict], threshold: int) -> bool:
    """Never mailed, or mailed only at thresholds below this one."""
    for log in email_logs:
        reason = log.get("reason") or {}
        if str(reason.get("experience_id")) != str(experience["_id"]):
            continue
        if not (reason.get("threshold", 0) < experience["viewCount"] and reason.get("threshold", 0) < threshold):
            return False
    return True


def select_new_experiences(users_with_experiences: List[dict], threshold: int,
                           now: datetime = None, domain: str = None) -> List[dict]:
    """Drop recently mailed users and experiences already mailed at this level."""
    now = now or datetime.utcnow()
    domain = domain or get_settings().frontend_domain

    selected = []
    for item in users_with_experiences:
        email_logs = item["user"].get("email_logs") or []
        if not _not_mailed_recently(email_logs, now):
            continue

        experiences = [
            {**experience, "url": f"{domain}/experiences/{experience['_id']}"}
            for experience in item["experiences"]
            if _is_new_experience(experience, email_logs, threshold)
        ]
        if experiences:
            selected.append({**item, "experiences": experiences})
    return selected


def build_email_info(item: dict) -> dict:
    # TODO: send every new experience of the user in one email
    experience = item["experiences"][0]
    content = "\n".join(section.get("content", "") for section in experience.get("sections") or [])

    return {
        "email": item["user"]["email"],
        "user_id": item["user"]["_id"],
        "experience_id": experience["_id"],
        "variables": {
            "username": item["user"].get("name"),
            "experience": {
                "title": experience.get("title"),
                "viewCount": experience["viewCount"],
                "url": experience["url"],
                "typeName": TYPE_NAMES.get(experience.get("type"), DEFAULT_TYPE_NAME),
                "content": content,
            },
        },
    }


async def send_performance_email(db: Database, now: datetime = None) -> int:
    """Send the notifications for every threshold; returns the number of emails sent."""
    experiences = db[COLLECTIONS["experiences"]]
    email_log_model = EmailLogModel(db)
    template = ExperienceViewLogNotificationTemplate()
    semaphore = asyncio.Semaphore(CONCURRENCY)
    sent = 0

    for threshold in VIEW_COUNT_THRESHOLDS:
        pipeline = users_with_experiences_pipeline(threshold)
        users_with_experiences = await run_in_threadpool(lambda: list(experiences.aggregate(pipeline)))
        email_infos = [
            build_email_info(item)
            for item in select_new_experiences(users_with_experiences, threshold, now)
        ]

        async def send(email_info: dict):
            async with semaphore:
                await send_emails_from_template([email_info["email"]], template, email_info["variables"])
                await run_in_threadpool(
                    email_log_model.insert_log,
                    email_info["user_id"],
                    email_info["experience_id"],
                    threshold,
                    created_at=datetime.utcnow(),
                )

        await asyncio.gather(*(send(info) for info in email_infos))
        logger.info("performance emails sent threshold=%s count=%s", threshold, len(email_infos))
        sent += len(email_infos)

    return sent
