"""Rent notice composition and delivery for a single tenant."""

import html
import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from zephvault.domain.enums import NoticeType, NotificationStatus
from zephvault.services.email_service import send_rent_notice_email
from zephvault.services.tenant_service import (
    TenantNotFoundError,
    TenantUnitView,
    get_tenant_view,
    log_notification,
)

logger = logging.getLogger(__name__)

_FIXED_DAYS_TEXT = {
    NoticeType.THIRTY_DAY_REMINDER.value: "30 days",
    NoticeType.SEVEN_DAY_URGENT.value: "7 days",
    NoticeType.ONE_DAY_FINAL.value: "1 day",
}

_URGENT_TYPES = {NoticeType.SEVEN_DAY_URGENT.value, NoticeType.ONE_DAY_FINAL.value}


@dataclass
class RentNotice:
    subject: str
    html: str


@dataclass
class NoticeResult:
    success: bool
    status: str
    message: str


def _format_date(value: date) -> str:
    return f"{value:%B} {value.day}, {value.year}"


def days_remaining_text(notice_type: str, days_until_due: int) -> str:
    """Human wording for how long until rent is due.

    Threshold notices use their fixed window; manual reminders use the live
    distance to the due date.
    """
    if notice_type in _FIXED_DAYS_TEXT:
        return _FIXED_DAYS_TEXT[notice_type]
    if days_until_due < 0:
        overdue = abs(days_until_due)
        return f"overdue by {overdue} day{'s' if overdue != 1 else ''}"
    if days_until_due == 0:
        return "today"
    return f"{days_until_due} day{'s' if days_until_due != 1 else ''}"


def _urgency_paragraph(notice_type: str, days_until_due: int) -> str:
    if notice_type == NoticeType.SEVEN_DAY_URGENT.value:
        return (
            "<p><strong>URGENT:</strong> Your rent is due within a week. Please contact "
            "our office immediately if you have any concerns about your payment.</p>"
        )
    if notice_type == NoticeType.ONE_DAY_FINAL.value:
        return (
            "<p><strong>FINAL NOTICE:</strong> Your rent is due tomorrow. Immediate "
            "action is required to avoid late fees.</p>"
        )
    if days_until_due < 0:
        return (
            "<p><strong>OVERDUE:</strong> Our records show this payment has not been "
            "received. Please settle it or contact our office without delay.</p>"
        )
    return "<p>We appreciate your continued tenancy and prompt payment.</p>"


def render_rent_notice(
    view: TenantUnitView,
    notice_type: str,
    firm_name: str,
    firm_email: str,
) -> RentNotice:
    """Render the subject line and HTML body of a rent renewal notice."""
    unit_number = view.unit_number or "N/A"
    property_name = view.property_name or "N/A"
    days_text = days_remaining_text(notice_type, view.days_until_due)
    if days_text.startswith("overdue"):
        due_sentence = f"your rent payment is {days_text}"
    elif days_text == "today":
        due_sentence = "your rent payment is due today"
    else:
        due_sentence = f"your rent payment is due in {days_text}"

    esc = html.escape
    subject = f"OFFICIAL NOTICE: Rent Renewal for {unit_number} - {property_name}"
    box_style = (
        "background-color: #f8d7da; border: 1px solid #f5c6cb;"
        if notice_type in _URGENT_TYPES
        else "background-color: #fff3cd; border: 1px solid #ffeaa7;"
    )

    body = f"""
<!DOCTYPE html>
<html lang="en">
<head><meta charset="UTF-8"></head>
<body style="margin: 0; padding: 0; font-family: Arial, sans-serif; line-height: 1.6; color: #333333;">
    <table role="presentation" width="100%" cellpadding="0" cellspacing="0">
        <tr>
            <td style="background-color: #f8f9fa; padding: 20px; text-align: center;">
                <h1 style="margin: 0;">{esc(firm_name)}</h1>
                <p style="margin: 4px 0 0 0;">Legal and Property Management Services</p>
            </td>
        </tr>
        <tr>
            <td style="padding: 20px;">
                <p>Dear {esc(view.full_name)},</p>
                <div style="{box_style} padding: 15px; margin: 20px 0;">
                    <h2 style="margin-top: 0;">RENT RENEWAL NOTICE</h2>
                    <p><strong>Property:</strong> {esc(property_name)}</p>
                    <p><strong>Unit:</strong> {esc(unit_number)}</p>
                    <p><strong>Tenant:</strong> {esc(view.full_name)}</p>
                    <p><strong>Rent Due Date:</strong> {_format_date(view.rent_due_date)}</p>
                    <p><strong>Days Remaining:</strong> {esc(days_text)}</p>
                </div>
                <p>This is an official notice that {esc(due_sentence)}. Please ensure your payment is made on or before the due date to avoid any late fees or complications.</p>
                {_urgency_paragraph(notice_type, view.days_until_due)}
                <p>If you have any questions or concerns, please do not hesitate to contact our office.</p>
                <p>Best regards,<br>{esc(firm_name)}<br>Property Management Department</p>
            </td>
        </tr>
        <tr>
            <td style="background-color: #f8f9fa; padding: 20px; text-align: center; font-size: 14px; color: #666666;">
                <p>This is an automated message from {esc(firm_name)}</p>
                <p>Email: {esc(firm_email)}</p>
                <p>This notice is sent in accordance with your tenancy agreement.</p>
            </td>
        </tr>
    </table>
</body>
</html>
"""
    return RentNotice(subject=subject, html=body)


async def send_rent_notice(
    db: AsyncSession,
    tenant_id: str,
    notice_type: str,
    today: Optional[date] = None,
) -> NoticeResult:
    """Render, send and log one rent notice.

    Raises:
        TenantNotFoundError: the tenant id matches no tenant.
    """
    from zephvault.app.config import get_settings

    view = await get_tenant_view(db, tenant_id, today=today)
    if view is None:
        raise TenantNotFoundError(tenant_id)

    settings = get_settings()
    notice = render_rent_notice(view, notice_type, settings.firm_name, settings.firm_email)
    sent = await send_rent_notice_email(view.email, notice.subject, notice.html)
    status = NotificationStatus.SENT.value if sent else NotificationStatus.FAILED.value

    try:
        await log_notification(db, tenant_id, notice_type, status)
    except Exception as exc:
        logger.error("Error logging %s notification for %s: %s", notice_type, tenant_id, exc)
        await db.rollback()

    if sent:
        logger.info("Rent notice %s sent to %s (%s)", notice_type, view.full_name, view.email)
        return NoticeResult(success=True, status=status, message="Rent notice sent successfully")
    return NoticeResult(success=False, status=status, message="Failed to send email")
