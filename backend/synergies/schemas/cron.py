# backend/synergies/schemas/cron.py
from pydantic import BaseModel


class ReminderSummary(BaseModel):
    ok: bool = True
    checked: int
    sent: int
