"""Properties, tenants and the dashboard overview."""

import logging
import time
from datetime import date
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from zephvault.domain.enums import UnitStatus
from zephvault.domain.models import Document, Property, Tenant, Unit
from zephvault.domain.schemas import PropertyCreate, TenantCreate, TenantUpdate
from zephvault.services.tenant_service import (
    DUE_SOON_WINDOW_DAYS,
    TenantNotFoundError,
    list_tenant_views,
)

logger = logging.getLogger(__name__)

OVERVIEW_UPCOMING_LIMIT = 5


class PropertyNotFoundError(LookupError):
    """Raised when a property id does not resolve to a property row."""


# ---------------------------------------------------------------------------
# Properties
# ---------------------------------------------------------------------------


async def list_properties(db: AsyncSession) -> list[Property]:
    result = await db.execute(select(Property).order_by(Property.created_at.desc()))
    return list(result.scalars().all())


async def create_property(db: AsyncSession, data: PropertyCreate) -> Property:
    prop = Property(name=data.name, address=data.address)
    db.add(prop)
    await db.commit()
    await db.refresh(prop)
    logger.info("Created property %s (%s)", prop.name, prop.id)
    return prop


async def _require_property(db: AsyncSession, property_id: str) -> Property:
    prop = await db.get(Property, property_id)
    if prop is None:
        raise PropertyNotFoundError(property_id)
    return prop


# ---------------------------------------------------------------------------
# Tenants
# ---------------------------------------------------------------------------


async def _unit_for_new_tenant(db: AsyncSession, property_id: str) -> Unit:
    """First unit of the property, or a fresh occupied placeholder unit."""
    result = await db.execute(
        select(Unit).where(Unit.property_id == property_id).order_by(Unit.created_at).limit(1)
    )
    unit = result.scalars().first()
    if unit is not None:
        return unit

    unit = Unit(
        property_id=property_id,
        unit_number=f"Unit-{int(time.time() * 1000)}",
        status=UnitStatus.OCCUPIED.value,
    )
    db.add(unit)
    await db.flush()
    logger.info("Created placeholder unit %s for property %s", unit.unit_number, property_id)
    return unit


async def create_tenant(db: AsyncSession, data: TenantCreate) -> Tenant:
    """Attach a new tenant to a unit of ``data.property_id``.

    Raises:
        PropertyNotFoundError: the property does not exist.
    """
    await _require_property(db, data.property_id)
    unit = await _unit_for_new_tenant(db, data.property_id)

    tenant = Tenant(
        unit_id=unit.id,
        property_id=data.property_id,
        full_name=data.full_name,
        email=data.email,
        phone_number=data.phone_number,
        rent_due_date=data.rent_due_date,
        yearly_rent_amount=data.yearly_rent_amount,
        reminder_status=data.reminder_status,
    )
    db.add(tenant)
    await db.commit()
    await db.refresh(tenant)
    logger.info("Created tenant %s in unit %s", tenant.full_name, unit.unit_number)
    return tenant


async def update_tenant(db: AsyncSession, tenant_id: str, data: TenantUpdate) -> Tenant:
    tenant = await db.get(Tenant, tenant_id)
    if tenant is None:
        raise TenantNotFoundError(tenant_id)

    for key, value in data.model_dump(exclude_unset=True).items():
        setattr(tenant, key, value)
    await db.commit()
    await db.refresh(tenant)
    return tenant


async def delete_tenant(db: AsyncSession, tenant_id: str) -> None:
    tenant = await db.get(Tenant, tenant_id)
    if tenant is None:
        raise TenantNotFoundError(tenant_id)
    await db.delete(tenant)
    await db.commit()
    logger.info("Deleted tenant %s", tenant_id)


# ---------------------------------------------------------------------------
# Dashboard
# ---------------------------------------------------------------------------


async def _count(db: AsyncSession, model) -> int:
    result = await db.execute(select(func.count()).select_from(model))
    return result.scalar_one()


async def dashboard_overview(db: AsyncSession, today: Optional[date] = None) -> dict:
    """Portfolio counts and the tenants whose rent falls due within 30 days."""
    today = today or date.today()
    views = await list_tenant_views(db, today=today)
    upcoming = [v for v in views if 0 <= v.days_until_due <= DUE_SOON_WINDOW_DAYS]

    return {
        "totalProperties": await _count(db, Property),
        "totalTenants": len(views),
        "totalDocuments": await _count(db, Document),
        "upcomingRenewals": len(upcoming),
        "upcomingTenants": [v.to_dict() for v in upcoming[:OVERVIEW_UPCOMING_LIMIT]],
    }
