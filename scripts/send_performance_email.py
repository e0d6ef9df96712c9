#!/usr/bin/env python3
"""
Performance Email Script

Tells authors that their experiences passed a view count threshold.
Run: python scripts/send_performance_email.py
"""
import sys
sys.path.insert(0, '.')

import asyncio

from goodjob.core.log import configure_logging
from goodjob.db.mongodb import close_mongo_client, get_mongo_db
from goodjob.services.performance_email_service import send_performance_email


def main():
    configure_logging()
    try:
        sent = asyncio.run(send_performance_email(get_mongo_db()))
        print(f"Sent {sent} email(s)")
    finally:
        close_mongo_client()


if __name__ == "__main__":
    main()
