"""
Migration Tests

What we test:
    - the runner skips recorded migrations and records new ones
    - each migration sends the expected update to MongoDB
"""

import importlib
from unittest.mock import MagicMock

import pytest
from bson import ObjectId

from goodjob.db.migrate import migrate, run_migrations
from goodjob.db.migrations import MIGRATIONS


def _migration(name):
    return importlib.import_module(f"goodjob.db.migrations.{name}")


class FakeDatabase(dict):
    def __missing__(self, name):
        collection = MagicMock()
        collection.bulk_write.return_value.modified_count = 1
        collection.update_many.return_value.modified_count = 1
        self[name] = collection
        return collection


@pytest.fixture
def db():
    return FakeDatabase()


class TestRunner:
    def test_every_migration_module_exists(self):
        for name in MIGRATIONS:
            assert callable(_migration(name).up)

    def test_skips_applied_migration(self, db):
        db["migrations"].find_one.return_value = {"_id": MIGRATIONS[0]}

        assert migrate(db, MIGRATIONS[0]) is False
        db["migrations"].insert_one.assert_not_called()
        db["workings"].update_many.assert_not_called()

    def test_runs_and_records_new_migration(self, db):
        db["migrations"].find_one.return_value = None

        assert migrate(db, MIGRATIONS[0]) is True

        db["workings"].update_many.assert_called_once()
        record = db["migrations"].insert_one.call_args[0][0]
        assert record["_id"] == MIGRATIONS[0]
        assert "created_at" in record

    def test_run_migrations_in_order(self, db):
        applied = {MIGRATIONS[1]}
        db["migrations"].find_one.side_effect = lambda query: {"_id": query["_id"]} if query["_id"] in applied else None

        names = run_migrations(db, [MIGRATIONS[0], MIGRATIONS[1], MIGRATIONS[3]])

        assert names == [MIGRATIONS[0], MIGRATIONS[3]]


class TestMigrations:
    def test_remove_null_estimated_hourly_wage(self, db):
        _migration(MIGRATIONS[0]).up(db)
        db["workings"].update_many.assert_called_once_with(
            {"estimated_hourly_wage": {"$exists": True, "$eq": None}},
            {"$unset": {"estimated_hourly_wage": ""}},
        )

    def test_move_workings_email_to_user(self, db):
        cursor = db["workings"].find.return_value
        cursor.sort.return_value = [
            {"_id": ObjectId(), "author": {"id": "1", "email": " New@GoodJob.life "}},
            {"_id": ObjectId(), "author": {"id": "1", "email": "old@goodjob.life"}},
            {"_id": ObjectId(), "author": {"id": "2", "email": "invalid"}},
        ]

        _migration(MIGRATIONS[1]).up(db)

        operations = db["users"].bulk_write.call_args[0][0]
        assert len(operations) == 1
        assert operations[0]._filter == {"facebook_id": "1"}
        assert operations[0]._doc == {"$set": {"email": "new@goodjob.life"}}

    def test_add_email_status(self, db):
        _migration(MIGRATIONS[2]).up(db)
        db["users"].update_many.assert_called_once_with({}, {"$set": {"email_status": "UNVERIFIED"}})

    def test_add_missing_report_count(self, db):
        _migration(MIGRATIONS[3]).up(db)
        db["experiences"].update_many.assert_called_once_with(
            {"report_count": {"$eq": None}},
            {"$set": {"report_count": 0}},
        )

    def test_update_user_name(self, db):
        google_user = {"_id": ObjectId(), "google": {"name": "Google Name"}}
        db["users"].find.return_value = [google_user, {"_id": ObjectId(), "facebook": {}}]

        _migration(MIGRATIONS[4]).up(db)

        operations = db["users"].bulk_write.call_args[0][0]
        assert len(operations) == 1
        assert operations[0]._doc == {"$set": {"name": "Google Name"}}

    def test_normalize_working_author(self, db):
        user_id = ObjectId()
        working_id = ObjectId()
        db["workings"].find.return_value = [{"_id": working_id, "author": {"id": "1", "type": "facebook"}}]
        db["users"].find_one.return_value = {"_id": user_id}

        _migration(MIGRATIONS[5]).up(db)

        operations = db["workings"].bulk_write.call_args[0][0]
        assert operations[0]._filter == {"_id": working_id}
        assert operations[0]._doc == {"$set": {"user_id": user_id}}

    def test_add_estimated_monthly_wage(self, db):
        db["workings"].find.return_value = [
            {"_id": 1, "salary": {"type": "month", "amount": 40000}, "day_real_work_time": 8, "week_work_time": 40},
            {"_id": 2, "salary": {"type": "year", "amount": 1300000000}, "day_real_work_time": 8,
             "week_work_time": 40},
        ]

        _migration(MIGRATIONS[6]).up(db)

        operations = db["workings"].bulk_write.call_args[0][0]
        assert len(operations) == 1
        assert operations[0]._doc == {"$set": {"estimated_monthly_wage": 40000}}

    def test_nothing_to_update(self, db):
        db["workings"].find.return_value = []
        assert _migration(MIGRATIONS[6]).up(db) is None
        db["workings"].bulk_write.assert_not_called()

