"""Tests for the rent reminder scheduler and its cron endpoint."""

from datetime import date, timedelta
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from zephvault.app.routes.rent_reminders import router as rent_reminders_router
from zephvault.infra.database import get_db
from zephvault.services.rent_reminder_scheduler import (
    DirectNoticeDispatcher,
    DispatchResult,
    HttpNoticeDispatcher,
    RentReminderScheduler,
)

TODAY = date(2025, 1, 1)


class RecordingDispatcher:
    """Dispatcher double: raises for tenants listed in ``explode_for``."""

    def __init__(self, explode_for=(), fail_for=()):
        self.calls = []
        self.explode_for = set(explode_for)
        self.fail_for = set(fail_for)

    async def dispatch(self, tenant_id, notice_type):
        self.calls.append((tenant_id, notice_type))
        if tenant_id in self.explode_for:
            raise RuntimeError("mail provider unreachable")
        if tenant_id in self.fail_for:
            return DispatchResult(ok=False, message="Failed to send email")
        return DispatchResult(ok=True, message="Rent notice sent successfully")


def _settings(**overrides):
    s = MagicMock()
    s.cron_secret = "s3cret"
    s.app_url = ""
    s.reminder_send_delay_seconds = 0
    for key, value in overrides.items():
        setattr(s, key, value)
    return s


# ---------------------------------------------------------------------------
# Scheduler
# ---------------------------------------------------------------------------


class TestScheduler:

    async def test_one_failure_does_not_stop_the_run(self, db_session, make_tenant):
        a = await make_tenant(full_name="Tenant A", unit_number="A1", rent_due_date=date(2025, 1, 31))
        b = await make_tenant(full_name="Tenant B", unit_number="B1", rent_due_date=date(2025, 1, 8))
        c = await make_tenant(full_name="Tenant C", unit_number="C1", rent_due_date=date(2025, 1, 2))
        dispatcher = RecordingDispatcher(explode_for={b.id})

        run = await RentReminderScheduler(db_session, dispatcher, delay_seconds=0).run(today=TODAY)

        assert len(dispatcher.calls) == 3
        assert run.summary() == {"total": 3, "successful": 2, "failed": 1}
        outcomes = {d.tenant: d for d in run.details}
        assert outcomes["Tenant B"].success is False
        assert "unreachable" in outcomes["Tenant B"].message
        assert outcomes["Tenant A"].success and outcomes["Tenant C"].success
        assert {a.id, c.id} <= {tid for tid, _ in dispatcher.calls}

    async def test_unsuccessful_dispatch_counts_as_failed(self, db_session, make_tenant):
        t = await make_tenant(rent_due_date=date(2025, 1, 8))
        run = await RentReminderScheduler(
            db_session, RecordingDispatcher(fail_for={t.id}), delay_seconds=0
        ).run(today=TODAY)

        assert run.summary() == {"total": 1, "successful": 0, "failed": 1}
        assert run.details[0].to_dict() == {
            "tenant": "Jane Doe",
            "unit": "A1",
            "noticeType": "7_day_urgent",
            "success": False,
            "message": "Failed to send email",
        }

    async def test_sleeps_between_tenants_only(self, db_session, make_tenant):
        await make_tenant(full_name="A", rent_due_date=date(2025, 1, 31))
        await make_tenant(full_name="B", rent_due_date=date(2025, 1, 8))

        with patch(
            "zephvault.services.rent_reminder_scheduler.asyncio.sleep", new_callable=AsyncMock
        ) as sleep:
            await RentReminderScheduler(db_session, RecordingDispatcher(), delay_seconds=1.0).run(today=TODAY)

        sleep.assert_awaited_once_with(1.0)

    async def test_nobody_due(self, db_session, make_tenant):
        await make_tenant(rent_due_date=date(2025, 3, 1))
        dispatcher = RecordingDispatcher()

        run = await RentReminderScheduler(db_session, dispatcher).run(today=TODAY)

        assert run.total == 0
        assert dispatcher.calls == []


class TestDispatchers:

    async def test_direct_dispatcher_maps_missing_tenant(self, db_session):
        result = await DirectNoticeDispatcher(db_session).dispatch("missing", "7_day_urgent")
        assert result == DispatchResult(ok=False, message="Tenant not found")

    async def test_http_dispatcher_posts_camel_case_body(self):
        response = httpx.Response(
            500,
            json={"detail": "Failed to send email"},
            request=httpx.Request("POST", "http://app.local/api/send-rent-notice"),
        )
        mock_client = AsyncMock()
        mock_client.post = AsyncMock(return_value=response)
        mock_client.__aenter__ = AsyncMock(return_value=mock_client)
        mock_client.__aexit__ = AsyncMock(return_value=False)

        with patch(
            "zephvault.services.rent_reminder_scheduler.httpx.AsyncClient",
            return_value=mock_client,
        ):
            result = await HttpNoticeDispatcher("http://app.local/").dispatch("t-1", "1_day_final")

        mock_client.post.assert_awaited_once_with(
            "http://app.local/api/send-rent-notice",
            json={"tenantId": "t-1", "noticeType": "1_day_final"},
        )
        assert result == DispatchResult(ok=False, message="Failed to send email")


# ---------------------------------------------------------------------------
# Cron endpoint
# ---------------------------------------------------------------------------


def _tracking_client(db_session, opened: list) -> AsyncClient:
    test_app = FastAPI()
    test_app.include_router(rent_reminders_router)

    async def _override_get_db():
        opened.append(True)
        yield db_session

    test_app.dependency_overrides[get_db] = _override_get_db
    return AsyncClient(transport=ASGITransport(app=test_app), base_url="http://testserver")


class TestCronEndpoint:

    @pytest.mark.parametrize("headers", [
        {},
        {"Authorization": "Bearer wrong"},
        {"Authorization": "s3cret"},
    ])
    async def test_rejects_without_valid_token(self, db_session, headers):
        opened = []
        with patch("zephvault.app.routes.rent_reminders.get_settings", return_value=_settings()):
            async with _tracking_client(db_session, opened) as client:
                resp = await client.post("/api/check-rent-reminders", headers=headers)

        assert resp.status_code == 401
        assert opened == []

    async def test_unset_secret_rejects_everything(self, db_session):
        opened = []
        with patch(
            "zephvault.app.routes.rent_reminders.get_settings",
            return_value=_settings(cron_secret=""),
        ):
            async with _tracking_client(db_session, opened) as client:
                resp = await client.post(
                    "/api/check-rent-reminders", headers={"Authorization": "Bearer "}
                )

        assert resp.status_code == 401
        assert opened == []

    async def test_runs_and_reports(self, db_session, make_tenant):
        await make_tenant(full_name="Jane Doe", rent_due_date=date.today() + timedelta(days=7))
        opened = []
        with (
            patch("zephvault.app.routes.rent_reminders.get_settings", return_value=_settings()),
            patch(
                "zephvault.services.rent_notice_service.send_rent_notice_email",
                new_callable=AsyncMock,
                return_value=True,
            ),
        ):
            async with _tracking_client(db_session, opened) as client:
                resp = await client.post(
                    "/api/check-rent-reminders", headers={"Authorization": "Bearer s3cret"}
                )

        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["summary"] == {"total": 1, "successful": 1, "failed": 0}
        assert body["details"][0]["noticeType"] == "7_day_urgent"

    async def test_same_day_rerun_sends_nothing(self, db_session, make_tenant):
        await make_tenant(rent_due_date=date.today() + timedelta(days=30))
        with (
            patch("zephvault.app.routes.rent_reminders.get_settings", return_value=_settings()),
            patch(
                "zephvault.services.rent_notice_service.send_rent_notice_email",
                new_callable=AsyncMock,
                return_value=True,
            ) as send,
        ):
            async with _tracking_client(db_session, []) as client:
                first = await client.post(
                    "/api/check-rent-reminders", headers={"Authorization": "Bearer s3cret"}
                )
                second = await client.post(
                    "/api/check-rent-reminders", headers={"Authorization": "Bearer s3cret"}
                )

        assert first.json()["summary"]["total"] == 1
        assert second.json()["summary"]["total"] == 0
        assert second.json()["message"] == "No rent reminders needed today"
        assert send.await_count == 1

    async def test_preview_lists_candidates(self, db_session, make_tenant):
        await make_tenant(full_name="Jane Doe", rent_due_date=date.today() + timedelta(days=1))

        async with _tracking_client(db_session, []) as client:
            resp = await client.get("/api/check-rent-reminders")

        body = resp.json()
        assert resp.status_code == 200
        assert [t["full_name"] for t in body["tenantsNeedingReminders"]] == ["Jane Doe"]
        assert body["tenantsNeedingReminders"][0]["notice_type"] == "1_day_final"
