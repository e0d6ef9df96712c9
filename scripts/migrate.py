#!/usr/bin/env python3
"""
Migration Script

Applies every pending migration to the configured MongoDB database.
Run: python scripts/migrate.py
"""
import sys
sys.path.insert(0, '.')

from goodjob.core.log import configure_logging
from goodjob.db.migrate import run_migrations
from goodjob.db.mongodb import close_mongo_client, get_mongo_db


def main():
    configure_logging()
    try:
        applied = run_migrations(get_mongo_db())
        print(f"Applied {len(applied)} migration(s)")
    finally:
        close_mongo_client()


if __name__ == "__main__":
    main()
