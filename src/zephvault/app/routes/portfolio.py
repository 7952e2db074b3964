"""Properties, tenants and the dashboard overview."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from zephvault.domain.enums import ReminderStatus
from zephvault.domain.schemas import PropertyCreate, PropertyResponse, TenantCreate, TenantUpdate
from zephvault.infra.database import get_db
from zephvault.services import portfolio_service
from zephvault.services.portfolio_service import PropertyNotFoundError
from zephvault.services.tenant_service import (
    TenantNotFoundError,
    get_tenant_view,
    list_tenant_views,
)

logger = logging.getLogger(__name__)

properties_router = APIRouter(prefix="/api/properties", tags=["properties"])
tenants_router = APIRouter(prefix="/api/tenants", tags=["tenants"])
dashboard_router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])

_REMINDER_STATUSES = {s.value for s in ReminderStatus}
_REQUIRED_TENANT_FIELDS = ("full_name", "email", "rent_due_date", "reminder_status")


def _check_required_not_null(body: TenantUpdate) -> None:
    for field in _REQUIRED_TENANT_FIELDS:
        if field in body.model_fields_set and getattr(body, field) is None:
            raise HTTPException(status_code=400, detail=f"{field} cannot be null")


def _check_reminder_status(value: Optional[str]) -> None:
    if value is not None and value not in _REMINDER_STATUSES:
        raise HTTPException(status_code=400, detail=f"Unknown reminder status: {value}")


# ---------------------------------------------------------------------------
# Properties
# ---------------------------------------------------------------------------


@properties_router.get("", response_model=list[PropertyResponse])
async def list_properties(db: AsyncSession = Depends(get_db)):
    return await portfolio_service.list_properties(db)


@properties_router.post("", response_model=PropertyResponse, status_code=201)
async def create_property(body: PropertyCreate, db: AsyncSession = Depends(get_db)):
    return await portfolio_service.create_property(db, body)


@properties_router.get("/{property_id}/tenants")
async def list_property_tenants(property_id: str, db: AsyncSession = Depends(get_db)):
    views = await list_tenant_views(db, property_id=property_id)
    return {"tenants": [v.to_dict() for v in views]}


# ---------------------------------------------------------------------------
# Tenants
# ---------------------------------------------------------------------------


@tenants_router.get("")
async def list_tenants(
    property_id: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    views = await list_tenant_views(db, property_id=property_id)
    return {"tenants": [v.to_dict() for v in views]}


@tenants_router.post("", status_code=201)
async def create_tenant(body: TenantCreate, db: AsyncSession = Depends(get_db)):
    _check_reminder_status(body.reminder_status)
    try:
        tenant = await portfolio_service.create_tenant(db, body)
    except PropertyNotFoundError:
        raise HTTPException(status_code=404, detail="Property not found")
    view = await get_tenant_view(db, tenant.id)
    return view.to_dict()


@tenants_router.patch("/{tenant_id}")
async def update_tenant(tenant_id: str, body: TenantUpdate, db: AsyncSession = Depends(get_db)):
    _check_required_not_null(body)
    _check_reminder_status(body.reminder_status)
    try:
        await portfolio_service.update_tenant(db, tenant_id, body)
    except TenantNotFoundError:
        raise HTTPException(status_code=404, detail="Tenant not found")
    view = await get_tenant_view(db, tenant_id)
    return view.to_dict()


@tenants_router.delete("/{tenant_id}")
async def delete_tenant(tenant_id: str, db: AsyncSession = Depends(get_db)):
    try:
        await portfolio_service.delete_tenant(db, tenant_id)
    except TenantNotFoundError:
        raise HTTPException(status_code=404, detail="Tenant not found")
    return {"success": True}


# ---------------------------------------------------------------------------
# Dashboard
# ---------------------------------------------------------------------------


@dashboard_router.get("/overview")
async def overview(db: AsyncSession = Depends(get_db)):
    return await portfolio_service.dashboard_overview(db)
