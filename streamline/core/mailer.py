import logging
from dataclasses import dataclass
from typing import Optional

import requests

from streamline.config import settings

logger = logging.getLogger(__name__)

RESEND_API_URL = "https://api.resend.com/emails"


@dataclass
class EmailMessage:
    to: str
    subject: str
    html: str
    text: str


def send_email(message: EmailMessage) -> Optional[str]:
    """Deliver through Resend. Returns the provider id, or None when not delivered.

    Delivery failures are logged, never raised: the request that triggered the
    email (sign-up, invitation, reset) has already succeeded.
    """
    if not settings.RESEND_API_KEY:
        logger.info("Email delivery disabled, skipping '%s' to %s", message.subject, message.to)
        return None

    headers = {
        "Authorization": f"Bearer {settings.RESEND_API_KEY}",
        "Content-Type": "application/json",
    }
    payload = {
        "from": settings.RESEND_FROM_EMAIL,
        "to": [message.to],
        "subject": message.subject,
        "html": message.html,
        "text": message.text,
    }

    try:
        response = requests.post(RESEND_API_URL, json=payload, headers=headers, timeout=10)
        response.raise_for_status()
    except requests.RequestException as e:
        logger.error("Failed to send '%s' to %s: %s", message.subject, message.to, e)
        return None

    return response.json().get("id")
