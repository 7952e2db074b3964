"""Tenant read models and rent-reminder selection.

Builds the tenant/unit/property join the dashboard reads from, derives
``days_until_due`` and ``payment_status`` against a reference date, picks the
tenants that need a notice today and appends notification-log rows.
"""

import logging
from dataclasses import asdict, dataclass
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from zephvault.domain.enums import NoticeType, NotificationStatus, PaymentStatus, ReminderStatus
from zephvault.domain.models import NotificationLog, Property, Tenant, Unit

logger = logging.getLogger(__name__)

URGENT_WINDOW_DAYS = 7
DUE_SOON_WINDOW_DAYS = 30

# days_until_due -> notice sent on that day
REMINDER_THRESHOLDS: dict[int, NoticeType] = {
    30: NoticeType.THIRTY_DAY_REMINDER,
    7: NoticeType.SEVEN_DAY_URGENT,
    1: NoticeType.ONE_DAY_FINAL,
}


class TenantNotFoundError(LookupError):
    """Raised when a tenant id does not resolve to a tenant row."""


@dataclass
class TenantUnitView:
    """Tenant joined with its unit and property, plus derived due-date fields."""

    tenant_id: str
    full_name: str
    email: str
    phone_number: Optional[str]
    rent_due_date: date
    yearly_rent_amount: Optional[Decimal]
    reminder_status: str
    unit_id: Optional[str]
    unit_number: Optional[str]
    unit_status: Optional[str]
    property_id: Optional[str]
    property_name: Optional[str]
    property_address: Optional[str]
    days_until_due: int
    payment_status: str

    def to_dict(self) -> dict:
        data = asdict(self)
        data["rent_due_date"] = self.rent_due_date.isoformat()
        if self.yearly_rent_amount is not None:
            data["yearly_rent_amount"] = float(self.yearly_rent_amount)
        return data


@dataclass
class ReminderCandidate:
    """A tenant the reminder job should notify today."""

    tenant_id: str
    full_name: str
    email: str
    phone_number: Optional[str]
    unit_number: Optional[str]
    property_name: Optional[str]
    property_address: Optional[str]
    rent_due_date: date
    days_until_due: int
    notice_type: str

    def to_dict(self) -> dict:
        data = asdict(self)
        data["rent_due_date"] = self.rent_due_date.isoformat()
        return data


# ---------------------------------------------------------------------------
# Derivations
# ---------------------------------------------------------------------------


def days_until(due: date, today: date) -> int:
    return (due - today).days


def classify_payment_status(days_until_due: int) -> PaymentStatus:
    """Bucket a due-date distance into overdue / urgent / due_soon / current."""
    if days_until_due < 0:
        return PaymentStatus.OVERDUE
    if days_until_due <= URGENT_WINDOW_DAYS:
        return PaymentStatus.URGENT
    if days_until_due <= DUE_SOON_WINDOW_DAYS:
        return PaymentStatus.DUE_SOON
    return PaymentStatus.CURRENT


def notice_type_for(days_until_due: int) -> Optional[NoticeType]:
    """Return the notice due on this day, or None when no threshold is hit."""
    return REMINDER_THRESHOLDS.get(days_until_due)


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


def _view_query():
    return (
        select(Tenant, Unit, Property)
        .outerjoin(Unit, Tenant.unit_id == Unit.id)
        .outerjoin(Property, Property.id == func.coalesce(Unit.property_id, Tenant.property_id))
    )


def _to_view(tenant: Tenant, unit: Optional[Unit], prop: Optional[Property], today: date) -> TenantUnitView:
    days = days_until(tenant.rent_due_date, today)
    return TenantUnitView(
        tenant_id=tenant.id,
        full_name=tenant.full_name,
        email=tenant.email,
        phone_number=tenant.phone_number,
        rent_due_date=tenant.rent_due_date,
        yearly_rent_amount=tenant.yearly_rent_amount,
        reminder_status=tenant.reminder_status,
        unit_id=unit.id if unit else None,
        unit_number=unit.unit_number if unit else None,
        unit_status=unit.status if unit else None,
        property_id=prop.id if prop else None,
        property_name=prop.name if prop else None,
        property_address=prop.address if prop else None,
        days_until_due=days,
        payment_status=classify_payment_status(days).value,
    )


async def list_tenant_views(
    db: AsyncSession,
    today: Optional[date] = None,
    property_id: Optional[str] = None,
) -> list[TenantUnitView]:
    """Return every tenant view, soonest due date first."""
    today = today or date.today()
    stmt = _view_query().order_by(Tenant.rent_due_date, Tenant.full_name)
    if property_id:
        stmt = stmt.where(func.coalesce(Unit.property_id, Tenant.property_id) == property_id)
    result = await db.execute(stmt)
    return [_to_view(t, u, p, today) for t, u, p in result.all()]


async def get_tenant_view(
    db: AsyncSession,
    tenant_id: str,
    today: Optional[date] = None,
) -> Optional[TenantUnitView]:
    today = today or date.today()
    result = await db.execute(_view_query().where(Tenant.id == tenant_id))
    row = result.first()
    if row is None:
        return None
    tenant, unit, prop = row
    return _to_view(tenant, unit, prop, today)


async def _already_notified_today(db: AsyncSession, today: date) -> set[tuple[str, str]]:
    start = datetime.combine(today, time.min)
    end = start + timedelta(days=1)
    result = await db.execute(
        select(NotificationLog.tenant_id, NotificationLog.notice_type).where(
            NotificationLog.status == NotificationStatus.SENT.value,
            NotificationLog.sent_at >= start,
            NotificationLog.sent_at < end,
        )
    )
    return {(tenant_id, notice_type) for tenant_id, notice_type in result.all()}


async def get_tenants_needing_reminders(
    db: AsyncSession,
    today: Optional[date] = None,
) -> list[ReminderCandidate]:
    """Select active tenants sitting exactly on a 30/7/1-day threshold today.

    Tenants already sent the same notice today are left out, so a second run
    on the same day selects nobody twice.
    """
    today = today or date.today()
    views = await list_tenant_views(db, today=today)
    notified = await _already_notified_today(db, today)

    candidates = []
    for view in views:
        if view.reminder_status != ReminderStatus.ACTIVE.value:
            continue
        notice_type = notice_type_for(view.days_until_due)
        if notice_type is None:
            continue
        if (view.tenant_id, notice_type.value) in notified:
            logger.info(
                "Skipping %s: %s already sent today", view.full_name, notice_type.value
            )
            continue
        candidates.append(
            ReminderCandidate(
                tenant_id=view.tenant_id,
                full_name=view.full_name,
                email=view.email,
                phone_number=view.phone_number,
                unit_number=view.unit_number,
                property_name=view.property_name,
                property_address=view.property_address,
                rent_due_date=view.rent_due_date,
                days_until_due=view.days_until_due,
                notice_type=notice_type.value,
            )
        )
    return candidates


async def log_notification(
    db: AsyncSession,
    tenant_id: str,
    notice_type: str,
    status: str = NotificationStatus.SENT.value,
) -> str:
    """Append a notification-log row and commit. Returns the new row id."""
    entry = NotificationLog(tenant_id=tenant_id, notice_type=notice_type, status=status)
    db.add(entry)
    await db.commit()
    return entry.id
