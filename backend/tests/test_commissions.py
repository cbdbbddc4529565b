# tests/test_commissions.py
from __future__ import annotations

from decimal import Decimal

import pytest
from sqlalchemy import select

from synergies.core.lifecycle import ActivityType, CommissionStatus, DealStage, EmployeeRole
from synergies.models.activity import Activity

from tests.factories import auth_headers, create_commission, create_employee, create_reco


async def _setup(db):
    admin = await create_employee(db, "direction@example.com", first_name="Dir", role=EmployeeRole.ADMIN.value)
    prescriber = await create_employee(db, "presc@example.com", first_name="Paul", last_name="Martin")
    receiver = await create_employee(db, "recv@example.com")
    return admin, prescriber, receiver


@pytest.mark.asyncio
async def test_mark_paid_sets_status_and_paid_at_then_disables_action(client, db):
    admin, prescriber, receiver = await _setup(db)
    reco = await create_reco(db, prescriber, receiver, deal_stage=DealStage.CLOSED_WON.value)
    commission = await create_commission(db, reco, amount=Decimal("100.00"))
    await db.commit()
    headers = auth_headers(admin)

    r = await client.post(f"/api/v1/admin/commissions/{commission.id}/mark-paid", headers=headers)

    assert r.status_code == 200
    body = r.json()
    assert body["status"] == CommissionStatus.PAID.value
    assert body["paid_at"] is not None
    assert body["can_mark_paid"] is False

    await db.refresh(commission)
    assert commission.status == CommissionStatus.PAID.value
    assert commission.paid_at is not None

    r = await client.post(f"/api/v1/admin/commissions/{commission.id}/mark-paid", headers=headers)
    assert r.status_code == 409

    r = await client.get("/api/v1/admin/commissions", headers=headers)
    row = r.json()["items"][0]
    assert row["status"] == "paid"
    assert row["can_mark_paid"] is False


@pytest.mark.asyncio
async def test_ledger_lists_closed_won_including_missing_commission_rows(client, db):
    admin, prescriber, receiver = await _setup(db)
    with_row = await create_reco(
        db, prescriber, receiver, client_name="Avec", project_title="Vente", deal_stage=DealStage.CLOSED_WON.value
    )
    await create_commission(db, with_row, amount=Decimal("100.00"), validated_by_manager=True)
    await create_reco(
        db, prescriber, receiver, client_name="Sans", project_title="Recrutement", deal_stage=DealStage.CLOSED_WON.value
    )
    await create_reco(db, prescriber, receiver, client_name="Ouvert", deal_stage=DealStage.IN_PROGRESS.value)
    await db.commit()

    r = await client.get("/api/v1/admin/commissions", headers=auth_headers(admin))

    assert r.status_code == 200
    items = {i["client_name"]: i for i in r.json()["items"]}
    assert set(items) == {"Avec", "Sans"}

    assert items["Sans"]["commission_id"] is None
    assert items["Sans"]["status"] == "pending"
    assert items["Sans"]["can_mark_paid"] is False
    assert Decimal(items["Sans"]["suggested_amount"]) == Decimal("500.00")

    assert items["Avec"]["commission_id"] is not None
    assert items["Avec"]["can_mark_paid"] is True


@pytest.mark.asyncio
async def test_ledger_filters(client, db):
    admin, prescriber, receiver = await _setup(db)
    paid = await create_reco(
        db, prescriber, receiver, client_name="Payee", project_title="Syndic", deal_stage=DealStage.CLOSED_WON.value
    )
    await create_commission(db, paid, status=CommissionStatus.PAID.value, validated_by_manager=True)
    open_ = await create_reco(
        db, prescriber, receiver, client_name="Ouverte", project_title="Vente", deal_stage=DealStage.CLOSED_WON.value
    )
    await create_commission(db, open_)
    await db.commit()
    headers = auth_headers(admin)

    async def names(**params):
        r = await client.get("/api/v1/admin/commissions", params=params, headers=headers)
        assert r.status_code == 200
        return sorted(i["client_name"] for i in r.json()["items"])

    assert await names(paid="paid") == ["Payee"]
    assert await names(paid="not_paid") == ["Ouverte"]
    assert await names(validation="validated") == ["Payee"]
    assert await names(validation="not_validated") == ["Ouverte"]
    assert await names(project="Vente") == ["Ouverte"]
    assert await names(q="paul") == ["Ouverte", "Payee"]
    assert await names(q="zzz") == []


@pytest.mark.asyncio
async def test_ensure_creates_missing_commission_and_refuses_open_referrals(client, db):
    admin, prescriber, receiver = await _setup(db)
    won = await create_reco(db, prescriber, receiver, project_title="Gestion", deal_stage=DealStage.CLOSED_WON.value)
    open_ = await create_reco(db, prescriber, receiver)
    await db.commit()
    headers = auth_headers(admin)

    r = await client.post(f"/api/v1/admin/commissions/ensure/{won.id}", headers=headers)
    assert r.status_code == 200
    first = r.json()
    assert first["status"] == "pending"
    assert Decimal(first["amount"]) == Decimal("100.00")

    r = await client.post(f"/api/v1/admin/commissions/ensure/{won.id}", headers=headers)
    assert r.json()["id"] == first["id"]

    r = await client.post(f"/api/v1/admin/commissions/ensure/{open_.id}", headers=headers)
    assert r.status_code == 409


@pytest.mark.asyncio
async def test_edit_amount_and_due_date(client, db):
    admin, prescriber, receiver = await _setup(db)
    reco = await create_reco(db, prescriber, receiver, deal_stage=DealStage.CLOSED_WON.value)
    commission = await create_commission(db, reco)
    await db.commit()
    headers = auth_headers(admin)

    r = await client.patch(
        f"/api/v1/admin/commissions/{commission.id}",
        json={"amount": "250.00", "due_date": "2026-12-31"},
        headers=headers,
    )
    assert r.status_code == 200
    assert Decimal(r.json()["amount"]) == Decimal("250.00")
    assert r.json()["due_date"] == "2026-12-31"

    r = await client.patch(f"/api/v1/admin/commissions/{commission.id}", json={"amount": "-1"}, headers=headers)
    assert r.status_code == 422


@pytest.mark.asyncio
async def test_validation_toggle_records_actor_from_session(client, db):
    admin, prescriber, receiver = await _setup(db)
    reco = await create_reco(db, prescriber, receiver, deal_stage=DealStage.CLOSED_WON.value)
    commission = await create_commission(db, reco)
    await db.commit()

    r = await client.post(
        f"/api/v1/admin/commissions/{commission.id}/validation",
        json={"validated": True, "comment": "ok direction"},
        headers=auth_headers(admin),
    )

    assert r.status_code == 200
    assert r.json()["validated_by_manager"] is True

    entries = (await db.execute(select(Activity).where(Activity.commission_id == commission.id))).scalars().all()
    assert len(entries) == 1
    assert entries[0].action_type == ActivityType.COMMISSION_VALIDATED.value
    assert entries[0].actor_id == admin.id
    assert entries[0].note == "ok direction"

    await db.refresh(commission)
    assert commission.validated_by_manager is True
