"""Transactional email through the Resend REST API.

One mailer instance is built per process and handed to routes/jobs through the
`get_mailer` dependency, so tests can swap in a recording fake.
"""

from __future__ import annotations

import logging
from typing import Protocol, Sequence

import httpx

from synergies.core.config import settings

logger = logging.getLogger(__name__)

RESEND_TIMEOUT_SECONDS = 20.0


class EmailDeliveryError(Exception):
    """The provider refused the message or could not be reached."""

    def __init__(self, message: str, status_code: int = 502) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class Mailer(Protocol):
    async def send(
        self,
        *,
        to: str | Sequence[str],
        subject: str,
        html: str,
        cc: str | Sequence[str] | None = None,
    ) -> None: ...


def _as_list(value: str | Sequence[str] | None) -> list[str]:
    if not value:
        return []
    if isinstance(value, str):
        return [value]
    return [v for v in value if v]


class ResendMailer:
    def __init__(
        self,
        *,
        api_key: str,
        sender: str,
        api_url: str = "https://api.resend.com/emails",
        timeout: float = RESEND_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key
        self.sender = sender
        self.api_url = api_url
        self.timeout = timeout
        self._transport = transport

    async def send(
        self,
        *,
        to: str | Sequence[str],
        subject: str,
        html: str,
        cc: str | Sequence[str] | None = None,
    ) -> None:
        if not self.api_key:
            logger.error("RESEND_API_KEY missing; email %r not sent", subject)
            raise EmailDeliveryError("RESEND_API_KEY missing", status_code=500)

        payload: dict[str, object] = {
            "from": self.sender,
            "to": _as_list(to),
            "subject": subject,
            "html": html,
        }
        cc_list = _as_list(cc)
        if cc_list:
            payload["cc"] = cc_list

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(self.api_url, headers=headers, json=payload)
        except httpx.HTTPError as exc:
            logger.error("Resend request failed for %r: %s", subject, exc)
            raise EmailDeliveryError(f"Email provider unreachable: {exc}") from exc

        if response.status_code >= 400:
            logger.error("Resend error %s for %r: %s", response.status_code, subject, response.text)
            raise EmailDeliveryError(response.text or "Email provider error", status_code=response.status_code)


_mailer: ResendMailer | None = None


def get_mailer() -> Mailer:
    """FastAPI dependency: the process-wide mailer."""
    global _mailer
    if _mailer is None:
        _mailer = ResendMailer(
            api_key=settings.RESEND_API_KEY,
            sender=settings.MAIL_FROM,
            api_url=settings.RESEND_API_URL,
        )
    return _mailer
