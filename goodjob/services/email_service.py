"""
Email Service

Sends template emails over SMTP with aiosmtplib. SMTP settings come from
Settings (SMTP_HOST, SMTP_PORT, SMTP_USERNAME, ...).
"""

import logging
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Any, Dict, List, Optional

import aiosmtplib

from goodjob.core.config import Settings, get_settings
from goodjob.core.errors import EmailTemplateTypeError
from goodjob.services.email_templates import EmailTemplate

logger = logging.getLogger(__name__)


def build_message(to_addresses: List[str], subject: str, html_content: str,
                  settings: Optional[Settings] = None) -> MIMEMultipart:
    settings = settings or get_settings()
    message = MIMEMultipart("alternative")
    message["From"] = f"{settings.from_name} <{settings.from_email}>"
    message["To"] = ", ".join(to_addresses)
    message["Subject"] = subject
    message.attach(MIMEText(html_content, "html", "utf-8"))
    return message


async def send_message(message: MIMEMultipart, settings: Optional[Settings] = None) -> None:
    """Deliver one message through the configured SMTP server."""
    settings = settings or get_settings()
    smtp_kwargs = {
        "hostname": settings.smtp_host,
        "port": settings.smtp_port,
        "use_tls": settings.smtp_use_tls,
        "start_tls": settings.smtp_start_tls and not settings.smtp_use_tls,
    }
    if settings.smtp_username and settings.smtp_password:
        smtp_kwargs["username"] = settings.smtp_username
        smtp_kwargs["password"] = settings.smtp_password

    await aiosmtplib.send(message, **smtp_kwargs)


async def send_emails_from_template(
    to_addresses: List[str],
    template: EmailTemplate,
    variables: Dict[str, Any],
    settings: Optional[Settings] = None
) -> None:
    """
    Render `template` with `variables` and send it to every address.

    Raises:
        EmailTemplateTypeError: template is not an EmailTemplate
        EmailTemplateVariablesError: variables rejected by the template
    """
    if not isinstance(template, EmailTemplate):
        raise EmailTemplateTypeError("template should be an EmailTemplate")

    subject, html_content = template.render(variables)
    message = build_message(to_addresses, subject, html_content, settings)

    try:
        await send_message(message, settings)
    except aiosmtplib.SMTPException:
        logger.error("Failed to send email to %s: %s", to_addresses, subject, exc_info=True)
        raise

    logger.info("Email sent to %s: %s", to_addresses, subject)
