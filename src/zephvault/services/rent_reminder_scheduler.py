"""Rent Reminder Scheduler, the daily cron job behind /api/check-rent-reminders."""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Optional, Protocol

import httpx
from sqlalchemy.ext.asyncio import AsyncSession

from zephvault.services.tenant_service import TenantNotFoundError, get_tenants_needing_reminders

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Dispatchers
# ---------------------------------------------------------------------------


@dataclass
class DispatchResult:
    ok: bool
    message: str = ""


class NoticeDispatcher(Protocol):
    async def dispatch(self, tenant_id: str, notice_type: str) -> DispatchResult:
        ...


class HttpNoticeDispatcher:
    """Calls the app's own send-rent-notice endpoint over HTTP."""

    def __init__(self, base_url: str, timeout: float = 30.0) -> None:
        self._url = f"{base_url.rstrip('/')}/api/send-rent-notice"
        self._timeout = timeout

    async def dispatch(self, tenant_id: str, notice_type: str) -> DispatchResult:
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            resp = await client.post(
                self._url, json={"tenantId": tenant_id, "noticeType": notice_type}
            )
        try:
            body = resp.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        message = body.get("message") or body.get("error") or body.get("detail") or ""
        return DispatchResult(ok=resp.is_success, message=str(message))


class DirectNoticeDispatcher:
    """Sends notices in-process on the scheduler's own session."""

    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def dispatch(self, tenant_id: str, notice_type: str) -> DispatchResult:
        from zephvault.services.rent_notice_service import send_rent_notice

        try:
            result = await send_rent_notice(self._db, tenant_id, notice_type)
        except TenantNotFoundError:
            return DispatchResult(ok=False, message="Tenant not found")
        return DispatchResult(ok=result.success, message=result.message)


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


@dataclass
class ReminderOutcome:
    tenant: str
    unit: Optional[str]
    notice_type: str
    success: bool
    message: str

    def to_dict(self) -> dict:
        return {
            "tenant": self.tenant,
            "unit": self.unit,
            "noticeType": self.notice_type,
            "success": self.success,
            "message": self.message,
        }


@dataclass
class ReminderRunResult:
    details: list[ReminderOutcome] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.details)

    @property
    def successful(self) -> int:
        return sum(1 for d in self.details if d.success)

    @property
    def failed(self) -> int:
        return self.total - self.successful

    def summary(self) -> dict:
        return {"total": self.total, "successful": self.successful, "failed": self.failed}


# ---------------------------------------------------------------------------
# Scheduler
# ---------------------------------------------------------------------------


class RentReminderScheduler:
    """Sends today's rent notices one tenant at a time.

    A failure for one tenant is recorded and the loop moves on. Nothing is
    retried within a run; the next daily run picks up whoever still
    qualifies.
    """

    def __init__(
        self,
        db: AsyncSession,
        dispatcher: NoticeDispatcher,
        delay_seconds: float = 1.0,
    ):
        self.db = db
        self.dispatcher = dispatcher
        self.delay_seconds = delay_seconds

    async def run(self, today: Optional[date] = None) -> ReminderRunResult:
        candidates = await get_tenants_needing_reminders(self.db, today=today)
        run = ReminderRunResult()
        if not candidates:
            logger.info("No rent reminders needed today")
            return run

        logger.info("Sending %d rent reminders", len(candidates))
        for index, candidate in enumerate(candidates):
            try:
                dispatched = await self.dispatcher.dispatch(
                    candidate.tenant_id, candidate.notice_type
                )
                outcome = ReminderOutcome(
                    tenant=candidate.full_name,
                    unit=candidate.unit_number,
                    notice_type=candidate.notice_type,
                    success=dispatched.ok,
                    message=dispatched.message,
                )
            except Exception as exc:
                logger.error("Error sending reminder to %s: %s", candidate.full_name, exc)
                outcome = ReminderOutcome(
                    tenant=candidate.full_name,
                    unit=candidate.unit_number,
                    notice_type=candidate.notice_type,
                    success=False,
                    message=str(exc) or type(exc).__name__,
                )
            run.details.append(outcome)

            # Self-imposed throttle on the outbound mail provider
            if self.delay_seconds > 0 and index < len(candidates) - 1:
                await asyncio.sleep(self.delay_seconds)

        logger.info("Rent reminder run finished: %s", run.summary())
        return run
