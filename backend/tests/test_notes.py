# tests/test_notes.py
from __future__ import annotations

import pytest

from tests.factories import auth_headers, create_employee, create_reco


@pytest.mark.asyncio
async def test_parties_add_and_read_notes(client, db):
    prescriber = await create_employee(db, "presc@example.com", first_name="Paul", last_name="Martin")
    receiver = await create_employee(db, "recv@example.com")
    outsider = await create_employee(db, "out@example.com")
    reco = await create_reco(db, prescriber, receiver)
    await db.commit()

    r = await client.post(
        f"/api/v1/recommendations/{reco.id}/notes", json={"body": "Client rappelé"}, headers=auth_headers(prescriber)
    )
    assert r.status_code == 201
    assert r.json()["author_name"] == "Paul Martin"

    r = await client.get(f"/api/v1/recommendations/{reco.id}/notes", headers=auth_headers(receiver))
    assert r.status_code == 200
    assert [n["body"] for n in r.json()] == ["Client rappelé"]

    r = await client.get(f"/api/v1/recommendations/{reco.id}/notes", headers=auth_headers(outsider))
    assert r.status_code == 403


@pytest.mark.asyncio
async def test_only_author_deletes_note(client, db):
    prescriber = await create_employee(db, "presc@example.com")
    receiver = await create_employee(db, "recv@example.com")
    reco = await create_reco(db, prescriber, receiver)
    await db.commit()

    r = await client.post(
        f"/api/v1/recommendations/{reco.id}/notes", json={"body": "à supprimer"}, headers=auth_headers(receiver)
    )
    note_id = r.json()["id"]

    r = await client.delete(f"/api/v1/notes/{note_id}", headers=auth_headers(prescriber))
    assert r.status_code == 403

    r = await client.delete(f"/api/v1/notes/{note_id}", headers=auth_headers(receiver))
    assert r.status_code == 204

    r = await client.get(f"/api/v1/recommendations/{reco.id}/notes", headers=auth_headers(receiver))
    assert r.json() == []
