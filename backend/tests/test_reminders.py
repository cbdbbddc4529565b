# tests/test_reminders.py
from __future__ import annotations

import pytest
from sqlalchemy import select

from synergies.core.config import settings
from synergies.core.lifecycle import ActivityType, DealStage, IntakeStatus, EmployeeRole
from synergies.models.activity import Activity
from synergies.services.mailer import EmailDeliveryError
from synergies.services.reminders import (
    run_closed_deal_notifications,
    run_intake_reminders,
    run_manager_escalations,
)

from tests.factories import create_employee, create_reco, hours_ago


async def _team(db):
    manager = await create_employee(db, "manager@example.com", first_name="Marie", role=EmployeeRole.ADMIN.value)
    receiver = await create_employee(db, "recv@example.com", manager=manager)
    prescriber = await create_employee(db, "presc@example.com")
    return manager, receiver, prescriber


@pytest.mark.asyncio
async def test_intake_reminder_sent_once_then_cooldown(db, mailer):
    _, receiver, prescriber = await _team(db)
    reco = await create_reco(db, prescriber, receiver, created_at=hours_ago(49))
    await db.commit()

    first = await run_intake_reminders(db, mailer, delay=0)
    assert (first.checked, first.sent) == (1, 1)
    assert mailer.sent[0]["to"] == "recv@example.com"
    assert mailer.sent[0]["cc"] == "presc@example.com"
    assert reco.last_reminder_at is not None

    second = await run_intake_reminders(db, mailer, delay=0)
    assert (second.checked, second.sent) == (0, 0)
    assert len(mailer.sent) == 1

    entries = (await db.execute(select(Activity).where(Activity.reco_id == reco.id))).scalars().all()
    assert [e.action_type for e in entries] == [ActivityType.REMINDER_SENT.value]


@pytest.mark.asyncio
async def test_intake_reminder_ignores_recent_and_treated_referrals(db, mailer):
    _, receiver, prescriber = await _team(db)
    await create_reco(db, prescriber, receiver, created_at=hours_ago(47))
    await create_reco(
        db, prescriber, receiver, created_at=hours_ago(100), intake_status=IntakeStatus.CONTACTED.value
    )
    await db.commit()

    run = await run_intake_reminders(db, mailer, delay=0)

    assert run.checked == 0
    assert mailer.sent == []


@pytest.mark.asyncio
async def test_intake_reminder_due_again_after_cooldown(db, mailer):
    _, receiver, prescriber = await _team(db)
    await create_reco(db, prescriber, receiver, created_at=hours_ago(120), last_reminder_at=hours_ago(25))
    await create_reco(db, prescriber, receiver, created_at=hours_ago(120), last_reminder_at=hours_ago(2))
    await db.commit()

    run = await run_intake_reminders(db, mailer, delay=0)

    assert (run.checked, run.sent) == (1, 1)


@pytest.mark.asyncio
async def test_failed_send_leaves_row_due(db, mailer):
    _, receiver, prescriber = await _team(db)
    reco = await create_reco(db, prescriber, receiver, created_at=hours_ago(50))
    await db.commit()
    mailer.fail_with = EmailDeliveryError("rate limited", status_code=429)

    run = await run_intake_reminders(db, mailer, delay=0)

    assert (run.checked, run.sent) == (1, 0)
    assert reco.last_reminder_at is None

    mailer.fail_with = None
    run = await run_intake_reminders(db, mailer, delay=0)
    assert run.sent == 1


@pytest.mark.asyncio
async def test_one_failed_send_does_not_stop_the_batch(db, mailer):
    _, receiver, prescriber = await _team(db)
    bad_receiver = await create_employee(db, "bad@example.com")
    # oldest first, so the failing row is handled before the good one
    failing = await create_reco(db, prescriber, bad_receiver, created_at=hours_ago(60))
    ok = await create_reco(db, prescriber, receiver, created_at=hours_ago(50))
    await db.commit()
    mailer.fail_for = {"bad@example.com"}

    run = await run_intake_reminders(db, mailer, delay=0)

    assert (run.checked, run.sent, run.skipped) == (2, 1, 0)
    assert [m["to"] for m in mailer.sent] == ["recv@example.com"]
    await db.refresh(failing)
    await db.refresh(ok)
    assert failing.last_reminder_at is None
    assert ok.last_reminder_at is not None


@pytest.mark.asyncio
async def test_zero_limit_sends_nothing(db, mailer):
    _, receiver, prescriber = await _team(db)
    await create_reco(db, prescriber, receiver, created_at=hours_ago(50))
    await db.commit()

    run = await run_intake_reminders(db, mailer, limit=0, delay=0)

    assert (run.checked, run.sent) == (0, 0)
    assert mailer.sent == []


@pytest.mark.asyncio
async def test_escalation_skips_receiver_without_manager(db, mailer):
    prescriber = await create_employee(db, "presc@example.com")
    lonely = await create_employee(db, "lonely@example.com")
    reco = await create_reco(db, prescriber, lonely, created_at=hours_ago(80))
    await db.commit()

    run = await run_manager_escalations(db, mailer, delay=0)

    assert (run.checked, run.sent, run.skipped) == (1, 0, 1)
    assert mailer.sent == []
    await db.refresh(reco)
    assert reco.manager_reminder_at is None
    entries = (await db.execute(select(Activity))).scalars().all()
    assert entries == []


@pytest.mark.asyncio
async def test_escalation_reaches_manager_through_receiver_email(db, mailer):
    manager, receiver, prescriber = await _team(db)
    # no receiver_id: resolved through the email column
    reco = await create_reco(
        db, prescriber, None, receiver_email=receiver.email, created_at=hours_ago(73)
    )
    await db.commit()

    run = await run_manager_escalations(db, mailer, delay=0)

    assert run.sent == 1
    assert mailer.sent[0]["to"] == manager.email
    assert reco.manager_reminder_at is not None

    again = await run_manager_escalations(db, mailer, delay=0)
    assert again.checked == 0


@pytest.mark.asyncio
async def test_closed_deal_notification_is_sent_once(db, mailer):
    manager, receiver, prescriber = await _team(db)
    reco = await create_reco(db, prescriber, receiver, deal_stage=DealStage.CLOSED_WON.value)
    await create_reco(db, prescriber, receiver, deal_stage=DealStage.CONVERTED.value)
    await db.commit()

    run = await run_closed_deal_notifications(db, mailer, delay=0)
    assert (run.checked, run.sent) == (1, 1)
    assert mailer.sent[0]["to"] == manager.email
    assert reco.manager_notified_at is not None

    run = await run_closed_deal_notifications(db, mailer, delay=0)
    assert (run.checked, run.sent) == (0, 0)
    assert len(mailer.sent) == 1


@pytest.mark.asyncio
async def test_cron_endpoint_returns_summary(client, db, mailer):
    _, receiver, prescriber = await _team(db)
    await create_reco(db, prescriber, receiver, created_at=hours_ago(49))
    await db.commit()

    r = await client.get("/api/v1/cron/reminder-48h")
    assert r.status_code == 200
    assert r.json() == {"ok": True, "checked": 1, "sent": 1}

    r = await client.get("/api/v1/cron/reminder-48h")
    assert r.json() == {"ok": True, "checked": 0, "sent": 0}


@pytest.mark.asyncio
async def test_cron_72h_alias_runs_manager_escalation(client, db, mailer):
    manager, receiver, prescriber = await _team(db)
    await create_reco(db, prescriber, receiver, created_at=hours_ago(73))
    await db.commit()

    r = await client.get("/api/v1/cron/reminder-72h")

    assert r.status_code == 200
    assert r.json()["sent"] == 1
    assert mailer.sent[0]["to"] == manager.email


@pytest.mark.asyncio
async def test_cron_secret_is_enforced_when_configured(client, db, monkeypatch):
    monkeypatch.setattr(settings, "CRON_SECRET", "s3cret")

    r = await client.get("/api/v1/cron/notify-manager-closed-deal")
    assert r.status_code == 401

    r = await client.get("/api/v1/cron/notify-manager-closed-deal", params={"key": "wrong"})
    assert r.status_code == 401

    r = await client.get("/api/v1/cron/notify-manager-closed-deal", params={"key": "s3cret"})
    assert r.status_code == 200

    r = await client.get("/api/v1/cron/reminder-72h-manager", headers={"X-Cron-Secret": "s3cret"})
    assert r.status_code == 200
    assert r.json()["ok"] is True


@pytest.mark.asyncio
async def test_cron_failure_is_reported_as_json(client, monkeypatch):
    async def boom(db, mailer):
        raise RuntimeError("database unavailable")

    monkeypatch.setattr("synergies.api.v1.cron.run_intake_reminders", boom)

    r = await client.get("/api/v1/cron/reminder-48h")

    assert r.status_code == 500
    assert r.json() == {"ok": False, "error": "database unavailable"}
