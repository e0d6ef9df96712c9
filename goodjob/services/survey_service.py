"""
Survey Service - send the survey letter to a list of users.

The form link is prefilled with the user's email.
"""

import logging
from datetime import datetime
from typing import List, Optional

from goodjob.core.config import get_settings
from goodjob.core.validation import validate_email
from goodjob.services.email_service import send_emails_from_template
from goodjob.services.email_templates import SurveyTemplate

logger = logging.getLogger(__name__)


def prepare_variables(user: dict, survey_form_url: str = None) -> Optional[dict]:
    email = user.get("email")
    user_name = user.get("name")
    if email and user_name:
        survey_form_url = survey_form_url or get_settings().survey_form_url
        return {
            "userName": user_name,
            "surveryUrl": f"{survey_form_url}{email}",
        }
    return None


async def send_survey_letter(user_list: List[dict]) -> int:
    """
    Send the letter to every user with a valid email and a name.

    Returns how many letters were sent.
    """
    template = SurveyTemplate()
    send_count = 0
    for user in user_list:
        email = user.get("email")
        variables = prepare_variables(user)
        if variables is None or not validate_email(email):
            continue

        await send_emails_from_template([email], template, variables)
        logger.info("survey letter sent %s %s %s %s", user.get("_id"), user.get("name"), email, datetime.utcnow())
        send_count += 1

    print(f"Sent/Total: {send_count}/{len(user_list)}")
    return send_count
