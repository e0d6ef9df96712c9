"""
Migration runner

Applies goodjob.db.migrations.MIGRATIONS in order. Applied names are
recorded in the `migrations` collection as {_id: name, created_at}.
"""

import importlib
import logging
from datetime import datetime
from typing import List

from pymongo.database import Database

from goodjob.db.migrations import MIGRATIONS
from goodjob.db.mongodb import COLLECTIONS

logger = logging.getLogger(__name__)


def is_migrated(db: Database, name: str) -> bool:
    return db[COLLECTIONS["migrations"]].find_one({"_id": name}) is not None


def record_migration(db: Database, name: str):
    return db[COLLECTIONS["migrations"]].insert_one({
        "_id": name,
        "created_at": datetime.utcnow(),
    })


def migrate(db: Database, name: str) -> bool:
    """Run one migration unless it already ran. Returns True when it ran."""
    if is_migrated(db, name):
        logger.info("%s is migrated, skipped", name)
        return False

    migration = importlib.import_module(f"goodjob.db.migrations.{name}")
    migration.up(db)
    record_migration(db, name)
    logger.info("%s is migrating, done", name)
    return True


def run_migrations(db: Database, names: List[str] = None) -> List[str]:
    """Apply every pending migration; returns the names that ran."""
    applied = []
    for name in names if names is not None else MIGRATIONS:
        if migrate(db, name):
            applied.append(name)
    return applied
