from __future__ import annotations

import secrets
from typing import Optional

from fastapi import Header, HTTPException, Query, status

from synergies.core.config import settings


async def require_cron_secret(
    key: Optional[str] = Query(default=None),
    x_cron_secret: Optional[str] = Header(default=None, alias="X-Cron-Secret"),
) -> None:
    """
    Shared secret for the scheduler, as ?key=... or the X-Cron-Secret header.
    Without a configured CRON_SECRET (development) the check is skipped;
    staging/production refuse to start without one.
    """
    expected = settings.CRON_SECRET.strip()
    if not expected:
        return

    provided = key or x_cron_secret or ""
    if not secrets.compare_digest(provided, expected):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"ok": False, "error": "unauthorized"},
        )
