import logging
import smtplib
from email.message import EmailMessage
from typing import Dict, Any

from clinic_scheduler.core.config import settings

logger = logging.getLogger(__name__)


def send_notification(recipient: str, subject: str, body: str, channel: str = "email") -> Dict[str, Any]:
    """Deliver a message to a recipient over the given channel.

    Only email is supported. When EMAIL_ENABLED is off the message is
    logged instead of sent. Transport errors propagate to the caller.
    """
    if channel != "email":
        raise ValueError(f"Unsupported notification channel: {channel}")

    if not settings.EMAIL_ENABLED:
        logger.info(f"Email delivery disabled, skipping message to {recipient}: {subject}")
        return {"status": "skipped", "recipient": recipient, "channel": channel}

    message = EmailMessage()
    message["From"] = settings.EMAIL_FROM
    message["To"] = recipient
    message["Subject"] = subject
    message.set_content(body)

    with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=10) as smtp:
        if settings.SMTP_USE_TLS:
            smtp.starttls()
        if settings.SMTP_USER:
            smtp.login(settings.SMTP_USER, settings.SMTP_PASSWORD or "")
        smtp.send_message(message)

    logger.info(f"Sent {channel} notification to {recipient}: {subject}")
    return {"status": "sent", "recipient": recipient, "channel": channel}
