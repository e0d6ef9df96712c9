import logging

from pymongo import UpdateOne
from pymongo.database import Database

from goodjob.services.wage_service import calculate_estimated_monthly_wage

logger = logging.getLogger(__name__)

MAX_ESTIMATED_MONTHLY_WAGE = 100000000


def up(db: Database):
    workings = db["workings"].find({
        "salary.amount": {"$exists": True},
        "day_real_work_time": {"$exists": True},
        "week_work_time": {"$exists": True},
    })

    operations = []
    for working in workings:
        estimated_monthly_wage = calculate_estimated_monthly_wage(working)
        if estimated_monthly_wage is not None and estimated_monthly_wage > MAX_ESTIMATED_MONTHLY_WAGE:
            continue
        operations.append(UpdateOne(
            {"_id": working["_id"]},
            {"$set": {"estimated_monthly_wage": estimated_monthly_wage}},
        ))

    if not operations:
        return None

    result = db["workings"].bulk_write(operations)
    logger.info("Update nModified: %s", result.modified_count)
    return result
