# tests/test_admin_gate.py
from __future__ import annotations

from decimal import Decimal

import pytest

from synergies.core.lifecycle import DealStage, EmployeeRole

from tests.factories import auth_headers, create_commission, create_employee, create_reco

ADMIN_ENDPOINTS = [
    "/api/v1/admin/recommendations",
    "/api/v1/admin/recommendations/export",
    "/api/v1/admin/commissions",
    "/api/v1/admin/commissions/export",
    "/api/v1/teams/recommendations",
]


@pytest.mark.asyncio
@pytest.mark.parametrize("path", ADMIN_ENDPOINTS)
async def test_non_admin_gets_only_an_error(client, db, path):
    prescriber = await create_employee(db, "presc@example.com")
    receiver = await create_employee(db, "recv@example.com")
    reco = await create_reco(
        db, prescriber, receiver, client_name="Secret Client", deal_stage=DealStage.CLOSED_WON.value
    )
    await create_commission(db, reco)
    await db.commit()

    r = await client.get(path, headers=auth_headers(prescriber))

    assert r.status_code == 403
    assert r.json() == {
        "detail": {"code": "admin_required", "message": "Accès réservé à la Direction."}
    }
    assert "Secret Client" not in r.text


@pytest.mark.asyncio
async def test_non_admin_cannot_write_commissions(client, db):
    prescriber = await create_employee(db, "presc@example.com")
    receiver = await create_employee(db, "recv@example.com")
    reco = await create_reco(db, prescriber, receiver, deal_stage=DealStage.CLOSED_WON.value)
    commission = await create_commission(db, reco)
    await db.commit()
    headers = auth_headers(receiver)

    r = await client.post(f"/api/v1/admin/commissions/{commission.id}/mark-paid", headers=headers)
    assert r.status_code == 403

    r = await client.post(
        f"/api/v1/admin/commissions/{commission.id}/validation", json={"validated": True}, headers=headers
    )
    assert r.status_code == 403


@pytest.mark.asyncio
async def test_direction_dashboard_totals_and_filters(client, db):
    admin = await create_employee(db, "direction@example.com", role=EmployeeRole.ADMIN.value)
    prescriber = await create_employee(db, "presc@example.com")
    receiver = await create_employee(db, "recv@example.com")
    other = await create_employee(db, "other@example.com")

    await create_reco(db, prescriber, receiver, client_name="Un", amount=Decimal("1000.00"))
    await create_reco(db, prescriber, other, client_name="Deux", amount=Decimal("250.50"))
    await create_reco(db, other, receiver, client_name="Trois")
    await db.commit()
    headers = auth_headers(admin)

    r = await client.get("/api/v1/admin/recommendations", headers=headers)
    assert r.status_code == 200
    body = r.json()
    assert body["count"] == 3
    assert Decimal(body["total_amount"]) == Decimal("1250.50")
    assert body["receiver_options"] == ["other@example.com", "recv@example.com"]
    assert body["prescriber_options"] == ["other@example.com", "presc@example.com"]

    r = await client.get("/api/v1/admin/recommendations", params={"receiver": "recv@example.com"}, headers=headers)
    assert sorted(i["client_name"] for i in r.json()["items"]) == ["Trois", "Un"]

    r = await client.get("/api/v1/admin/recommendations", params={"deal_stage": "bogus"}, headers=headers)
    assert r.status_code == 422
