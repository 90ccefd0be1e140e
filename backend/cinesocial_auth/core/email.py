"""Email sending via Resend API.

Simple HTTP POST to Resend for verification code emails. Delivery is
best-effort: send_verification_code_email() never raises, so a failed send
leaves the already-stored code valid.
"""

import logging
from html import escape

import httpx

from cinesocial_auth.core.config import settings
from cinesocial_auth.core.errors import DeliveryError

logger = logging.getLogger(__name__)

_RESEND_API_URL = "https://api.resend.com/emails"
_RESEND_TIMEOUT = 10.0

_CODE_SUBJECT = "Your CineSocial sign-in code"


async def send_email(*, to: str, subject: str, html_body: str) -> None:
    """Send one HTML email via Resend.

    Not retried.

    Args:
        to: Recipient email address.
        subject: Email subject line.
        html_body: HTML content.

    Raises:
        DeliveryError: If the request fails or Resend rejects it.
    """
    try:
        async with httpx.AsyncClient() as client:
            resp = await client.post(
                _RESEND_API_URL,
                headers={
                    "Authorization": f"Bearer {settings.resend_api_key.get_secret_value()}",
                },
                json={
                    "from": settings.email_from,
                    "to": to,
                    "subject": subject,
                    "html": html_body,
                },
                timeout=_RESEND_TIMEOUT,
            )
            resp.raise_for_status()
    except httpx.HTTPError as exc:
        raise DeliveryError(f"Failed to send email: {exc}") from exc


def build_code_email(code: str, ttl_minutes: int) -> str:
    """Render the HTML body carrying a verification code."""
    return (
        "<p>Your CineSocial verification code is:</p>"
        f"<p style=\"font-size:24px;font-weight:bold;letter-spacing:4px\">{escape(code)}</p>"
        f"<p>This code expires in {ttl_minutes} minutes. "
        "If you didn't request it, you can safely ignore this email.</p>"
    )


async def send_verification_code_email(*, to_email: str, code: str) -> None:
    """Send a verification code email, best-effort.

    Without a configured provider (development), the code is logged
    instead so the flow can be exercised locally.

    Args:
        to_email: Recipient email address.
        code: Plain verification code.
    """
    if not settings.email_enabled:
        logger.info("Email delivery disabled; code for %s: %s", to_email, code)
        return

    try:
        await send_email(
            to=to_email,
            subject=_CODE_SUBJECT,
            html_body=build_code_email(code, settings.code_ttl_minutes),
        )
    except DeliveryError:
        logger.warning("Failed to send verification code email", exc_info=True)
