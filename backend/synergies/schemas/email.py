# backend/synergies/schemas/email.py
from __future__ import annotations

from typing import List, Optional, Union

from pydantic import BaseModel


class SendEmailRequest(BaseModel):
    """
    Forwarded verbatim to the provider. Fields are optional here so a missing
    one is answered with the 400 payload instead of a validation error.
    """

    to: Optional[Union[str, List[str]]] = None
    cc: Optional[Union[str, List[str]]] = None
    subject: Optional[str] = None
    html: Optional[str] = None
