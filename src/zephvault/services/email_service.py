"""SendGrid email service for tenant rent notices.

Uses asyncio.to_thread to wrap the synchronous SendGrid client. Without a
SendGrid key the message is only logged and reported as delivered, which is
how the dashboard runs before an email account is wired up.
"""

import asyncio
import logging

import sendgrid
from sendgrid.helpers.mail import Email, HtmlContent, Mail, To

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Configuration (read from Pydantic settings, which loads .env)
# ---------------------------------------------------------------------------


def _get_config():
    """Get email config from app settings (lazy to avoid import-time issues)."""
    from zephvault.app.config import get_settings
    s = get_settings()
    return s.sendgrid_api_key, s.firm_email, s.firm_name


def _get_client() -> sendgrid.SendGridAPIClient:
    """Return a configured SendGrid API client."""
    api_key, _, _ = _get_config()
    return sendgrid.SendGridAPIClient(api_key=api_key)


def _send_mail(mail: Mail) -> bool:
    """Synchronous send via SendGrid. Returns True on success."""
    client = _get_client()
    response = client.send(mail)
    if response.status_code in (200, 201, 202):
        return True
    logger.error(
        "SendGrid returned status %s: %s",
        response.status_code,
        response.body,
    )
    return False


# ---------------------------------------------------------------------------
# Public async API
# ---------------------------------------------------------------------------


async def send_rent_notice_email(to_email: str, subject: str, html_body: str) -> bool:
    """Send a rent notice to a tenant.

    Args:
        to_email: Tenant email address.
        subject: Rendered subject line.
        html_body: Rendered HTML body.

    Returns:
        True on success (or when sending is stubbed out), False on failure.
    """
    api_key, firm_email, firm_name = _get_config()
    if not api_key:
        logger.info(
            "SENDGRID_API_KEY not set, logging rent notice instead of sending: to=%s subject=%s",
            to_email,
            subject,
        )
        logger.debug("Rent notice body for %s:\n%s", to_email, html_body)
        return True

    try:
        mail = Mail(
            from_email=Email(firm_email, firm_name),
            to_emails=To(to_email),
            subject=subject,
            html_content=HtmlContent(html_body),
        )
        result = await asyncio.to_thread(_send_mail, mail)
        if result:
            logger.info("Rent notice email sent to %s", to_email)
        return result
    except Exception:
        logger.exception("Failed to send rent notice email to %s", to_email)
        return False
