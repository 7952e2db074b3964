"""Rent reminder cron endpoint, called once a day by an external scheduler."""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from zephvault.app.config import get_settings
from zephvault.infra.database import get_db
from zephvault.services.rent_reminder_scheduler import (
    DirectNoticeDispatcher,
    HttpNoticeDispatcher,
    RentReminderScheduler,
)
from zephvault.services.tenant_service import get_tenants_needing_reminders

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["rent-reminders"])


async def verify_cron_secret(authorization: Optional[str] = Header(None)):
    """Require ``Authorization: Bearer <CRON_SECRET>``.

    An unset secret rejects every request.
    """
    secret = get_settings().cron_secret
    if not secret or authorization != f"Bearer {secret}":
        raise HTTPException(status_code=401, detail="Unauthorized")


@router.post("/check-rent-reminders", dependencies=[Depends(verify_cron_secret)])
async def run_rent_reminders(db: AsyncSession = Depends(get_db)):
    """Send every 30/7/1-day notice due today."""
    settings = get_settings()
    if settings.app_url:
        dispatcher = HttpNoticeDispatcher(settings.app_url)
    else:
        dispatcher = DirectNoticeDispatcher(db)

    scheduler = RentReminderScheduler(
        db, dispatcher, delay_seconds=settings.reminder_send_delay_seconds
    )
    run = await scheduler.run()

    logger.info("Rent reminder run: %s", run.summary())
    if run.total == 0:
        message = "No rent reminders needed today"
    else:
        message = f"Processed {run.total} rent reminders"
    return {
        "success": True,
        "message": message,
        "summary": run.summary(),
        "details": [d.to_dict() for d in run.details],
    }


@router.get("/check-rent-reminders")
async def preview_rent_reminders(db: AsyncSession = Depends(get_db)):
    """List who would be notified today without sending anything."""
    candidates = await get_tenants_needing_reminders(db)
    return {
        "success": True,
        "message": "Rent reminder check (test mode)",
        "tenantsNeedingReminders": [c.to_dict() for c in candidates],
    }
