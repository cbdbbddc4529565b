# synergies/core/formatting.py
"""French-locale display helpers shared by CSV exports and email bodies."""
from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from zoneinfo import ZoneInfo

from synergies.core.clock import as_utc
from synergies.core.config import settings


def _local(value: datetime) -> datetime:
    return as_utc(value).astimezone(ZoneInfo(settings.DISPLAY_TIMEZONE))


def fmt_date(value: date | datetime | None) -> str:
    if value is None:
        return ""
    if isinstance(value, datetime):
        value = _local(value).date()
    return value.strftime("%d/%m/%Y")


def fmt_datetime(value: datetime | None) -> str:
    if value is None:
        return ""
    return _local(value).strftime("%d/%m/%Y %H:%M")


def fmt_money(value: Decimal | float | int | None) -> str:
    amount = Decimal(str(value if value is not None else 0)).quantize(Decimal("0.01"))
    return f"{amount:.2f}".replace(".", ",")
