import logging

import requests

from app.core.config import settings

logger = logging.getLogger("app.email")

RESEND_URL = "https://api.resend.com/emails"


class EmailDeliveryError(RuntimeError):
    """Resend refused or failed to accept a message."""


def _send(to_email: str, subject: str, text: str) -> None:
    response = requests.post(
        RESEND_URL,
        json={
            "from": settings.RESEND_FROM_EMAIL,
            "to": [to_email],
            "subject": subject,
            "text": text,
        },
        headers={
            "Authorization": f"Bearer {settings.RESEND_API_KEY}",
            "Content-Type": "application/json",
        },
        timeout=10,
    )

    if response.status_code >= 400:
        raise EmailDeliveryError(f"Email sending failed: {response.text}")


def send_password_reset_email(to_email: str, reset_link: str) -> None:
    if not settings.RESEND_API_KEY:
        logger.warning(f"RESEND_API_KEY not set, password reset email to {to_email} not sent")
        return

    _send(
        to_email,
        f"Reset your {settings.COMPANY_NAME} CRM password",
        f"""Hi,

Someone asked to reset the password of your {settings.COMPANY_NAME} CRM account.

Set a new password here:
{reset_link}

The link works once and expires in {settings.PASSWORD_RESET_EXPIRE_MINUTES} minutes.
If you did not ask for this, ignore this message and your password stays the same.
""",
    )
    logger.info(f"Password reset email sent to {to_email}")
