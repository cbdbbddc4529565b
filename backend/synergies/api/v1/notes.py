# backend/synergies/api/v1/notes.py
from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from synergies.api.deps.permissions import get_current_employee, get_recommendation_or_404, require_party
from synergies.db.session import get_db
from synergies.models.employee import Employee
from synergies.models.note import Note
from synergies.schemas.note import NoteCreate, NoteOut

router = APIRouter(tags=["notes"])


def _to_out(note: Note, author: Employee | None) -> NoteOut:
    return NoteOut(
        id=note.id,
        reco_id=note.reco_id,
        body=note.body,
        created_at=note.created_at,
        author_id=note.author_id,
        author_name=author.display_name if author else None,
    )


@router.get("/recommendations/{reco_id}/notes", response_model=list[NoteOut])
async def list_notes(
    reco_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    me: Employee = Depends(get_current_employee),
):
    """Newest first."""
    reco = await get_recommendation_or_404(db, reco_id)
    require_party(me, reco)

    stmt = (
        select(Note, Employee)
        .outerjoin(Employee, Employee.id == Note.author_id)
        .where(Note.reco_id == reco.id)
        .order_by(Note.created_at.desc())
    )
    rows = (await db.execute(stmt)).all()
    return [_to_out(note, author) for note, author in rows]


@router.post(
    "/recommendations/{reco_id}/notes",
    response_model=NoteOut,
    status_code=status.HTTP_201_CREATED,
)
async def add_note(
    reco_id: uuid.UUID,
    payload: NoteCreate,
    db: AsyncSession = Depends(get_db),
    me: Employee = Depends(get_current_employee),
):
    reco = await get_recommendation_or_404(db, reco_id)
    require_party(me, reco)

    note = Note(reco_id=reco.id, author_id=me.id, body=payload.body)
    db.add(note)
    await db.commit()
    return _to_out(note, me)


@router.delete("/notes/{note_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_note(
    note_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    me: Employee = Depends(get_current_employee),
):
    note = await db.get(Note, note_id)
    if note is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Note not found")
    if note.author_id != me.id and not me.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only the author can delete this note")

    await db.delete(note)
    await db.commit()
    return None
