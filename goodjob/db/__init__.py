"""
Database module - MongoDB connection and migrations.
"""
from goodjob.db.mongodb import get_mongo_db, test_mongo_connection

__all__ = [
    "get_mongo_db",
    "test_mongo_connection"
]
