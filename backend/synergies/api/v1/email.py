# backend/synergies/api/v1/email.py
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from synergies.api.deps.permissions import get_current_employee
from synergies.models.employee import Employee
from synergies.schemas.email import SendEmailRequest
from synergies.services.mailer import EmailDeliveryError, Mailer, get_mailer

logger = logging.getLogger(__name__)

router = APIRouter(tags=["email"])


@router.post("/send-email")
async def send_email(
    payload: SendEmailRequest,
    me: Employee = Depends(get_current_employee),
    mailer: Mailer = Depends(get_mailer),
):
    """
    Forward a prepared message to the email provider.

    Returns {"ok": true}, or the provider's status code with {"ok": false, "error"}.
    """
    if not payload.to or not payload.subject or not payload.html:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"ok": False, "error": "Missing fields"},
        )

    try:
        await mailer.send(to=payload.to, cc=payload.cc or None, subject=payload.subject, html=payload.html)
    except EmailDeliveryError as exc:
        logger.error("send-email by %s failed: %s", me.id, exc.message)
        return JSONResponse(status_code=exc.status_code, content={"ok": False, "error": exc.message})

    return {"ok": True}
