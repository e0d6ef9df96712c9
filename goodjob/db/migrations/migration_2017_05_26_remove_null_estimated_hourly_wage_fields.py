from pymongo.database import Database


def up(db: Database):
    return db["workings"].update_many(
        {"estimated_hourly_wage": {"$exists": True, "$eq": None}},
        {"$unset": {"estimated_hourly_wage": ""}},
    )
