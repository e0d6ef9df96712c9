#!/usr/bin/env python3
"""
Survey Letter Script

Sends the survey letter to users listed in a JSON file
([{"_id": ..., "name": ..., "email": ...}, ...]).
Run: python scripts/send_survey_letter.py users.json
"""
import sys
sys.path.insert(0, '.')

import asyncio
import json

from goodjob.core.log import configure_logging
from goodjob.services.survey_service import send_survey_letter


def main():
    if len(sys.argv) < 2:
        print("usage: python scripts/send_survey_letter.py <users.json>")
        sys.exit(1)

    configure_logging()
    with open(sys.argv[1], encoding="utf-8") as f:
        user_list = json.load(f)

    asyncio.run(send_survey_letter(user_list))


if __name__ == "__main__":
    main()
