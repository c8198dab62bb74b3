"""Mailgun messages over raw HTTP via httpx (no SDK)."""

import logging
from typing import Any

import httpx

from crust.errors import UpstreamError

logger = logging.getLogger("crust.services")


class MailgunMailer:
    """Send plain-text e-mail with the Mailgun REST API.

    Authenticates as ``api`` with the API key. Pass ``transport`` to
    route requests elsewhere (tests use ``httpx.MockTransport``).
    """

    __slots__ = ("_api_key", "_base_url", "_domain", "_sender", "_transport")

    def __init__(
        self,
        domain: str,
        api_key: str,
        sender: str,
        *,
        base_url: str = "https://api.mailgun.net/v3",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._domain = domain
        self._api_key = api_key
        self._sender = sender
        self._base_url = base_url.rstrip("/")
        self._transport = transport

    async def send(self, to: str, subject: str, text: str) -> dict[str, Any]:
        """Send one message. Raises ``UpstreamError`` on failure."""
        form = {
            "from": self._sender,
            "to": to,
            "subject": subject,
            "text": text,
        }
        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=None) as client:
                response = await client.post(
                    f"{self._base_url}/{self._domain}/messages",
                    data=form,
                    auth=("api", self._api_key),
                )
        except httpx.HTTPError as exc:
            raise UpstreamError("mailgun", None, str(exc)) from exc

        if not response.is_success:
            raise UpstreamError("mailgun", response.status_code, response.text)

        try:
            data = response.json()
        except ValueError:
            data = {"message": response.text}

        logger.info("Mail to %s queued: %s", to, subject)
        return data
