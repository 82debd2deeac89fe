"""
Core email sending utilities using the Brevo transactional email API.
"""

from typing import Any, Optional

import httpx
from libs.common.config import get_settings
from libs.common.logging import get_logger

logger = get_logger(__name__)


async def send_email(
    to_email: str,
    subject: str,
    body: str,
    html_body: Optional[str] = None,
    to_name: Optional[str] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> bool:
    """
    Send an email through Brevo.

    Args:
        to_email: Recipient email address
        subject: Email subject line
        body: Plain text body
        html_body: Optional HTML body
        to_name: Optional recipient display name
        transport: Optional httpx transport (tests inject a MockTransport)

    Returns:
        True if Brevo accepted the message, False otherwise
    """
    settings = get_settings()

    if not settings.BREVO_API_KEY:
        logger.warning("BREVO_API_KEY not configured - email not sent")
        logger.info(f"Would have sent email to {to_email}: {subject}")
        return False

    recipient: dict[str, Any] = {"email": to_email}
    if to_name:
        recipient["name"] = to_name

    payload: dict[str, Any] = {
        "sender": {
            "name": settings.BREVO_SENDER_NAME,
            "email": settings.BREVO_SENDER_EMAIL,
        },
        "to": [recipient],
        "subject": subject,
        "textContent": body,
    }
    if html_body:
        payload["htmlContent"] = html_body

    try:
        async with httpx.AsyncClient(
            timeout=settings.EMAIL_TIMEOUT_SECONDS, transport=transport
        ) as client:
            response = await client.post(
                settings.BREVO_API_URL,
                json=payload,
                headers={
                    "api-key": settings.BREVO_API_KEY,
                    "Content-Type": "application/json",
                },
            )
    except httpx.HTTPError as e:
        logger.error(f"Failed to reach Brevo for {to_email}: {e}")
        return False

    if response.status_code >= 400:
        logger.error(f"Brevo returned {response.status_code}: {response.text}")
        return False

    logger.info(f"Email sent successfully to {to_email}")
    return True
