"""Manual and scheduled rent notice delivery."""
import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from zephvault.domain.enums import NoticeType
from zephvault.domain.schemas import SendRentNoticeRequest
from zephvault.infra.database import get_db
from zephvault.services.rent_notice_service import send_rent_notice
from zephvault.services.tenant_service import TenantNotFoundError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["rent-notices"])

_NOTICE_TYPES = {t.value for t in NoticeType}


@router.post("/send-rent-notice")
async def send_notice(body: SendRentNoticeRequest, db: AsyncSession = Depends(get_db)):
    """Email one rent notice to a tenant and log the attempt."""
    if not body.tenant_id or not body.notice_type:
        raise HTTPException(status_code=400, detail="Tenant ID and notice type are required")
    if body.notice_type not in _NOTICE_TYPES:
        raise HTTPException(status_code=400, detail=f"Unknown notice type: {body.notice_type}")

    try:
        result = await send_rent_notice(db, body.tenant_id, body.notice_type)
    except TenantNotFoundError:
        raise HTTPException(status_code=404, detail="Tenant not found")

    if not result.success:
        raise HTTPException(status_code=500, detail=result.message)
    return {"success": True, "message": result.message}
