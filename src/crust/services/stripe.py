"""Stripe charges over raw HTTP via httpx (no SDK)."""

import logging
from typing import Any

import httpx

from crust.errors import UpstreamError

logger = logging.getLogger("crust.services")

CHARGES_PATH = "/v1/charges"


class StripePayments:
    """Create charges with the Stripe REST API.

    The secret key is sent as the basic-auth user name with an empty
    password. Pass ``transport`` to route requests elsewhere (tests use
    ``httpx.MockTransport``).
    """

    __slots__ = ("_base_url", "_currency", "_secret", "_transport")

    def __init__(
        self,
        secret: str,
        *,
        base_url: str = "https://api.stripe.com",
        currency: str = "usd",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._secret = secret
        self._base_url = base_url.rstrip("/")
        self._currency = currency
        self._transport = transport

    async def charge(self, source: str, amount: int, description: str) -> dict[str, Any]:
        """Charge *amount* to *source* and return the charge object.

        Raises ``UpstreamError`` for a transport failure, a non-2xx answer
        or a body without a charge id.
        """
        form = {
            "amount": str(amount),
            "currency": self._currency,
            "source": source,
            "description": description,
        }
        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=None) as client:
                response = await client.post(
                    f"{self._base_url}{CHARGES_PATH}",
                    data=form,
                    auth=(self._secret, ""),
                )
        except httpx.HTTPError as exc:
            raise UpstreamError("stripe", None, str(exc)) from exc

        if not response.is_success:
            raise UpstreamError("stripe", response.status_code, response.text)

        try:
            data = response.json()
        except ValueError as exc:
            raise UpstreamError("stripe", response.status_code, "Invalid JSON in response") from exc

        if not isinstance(data, dict) or not data.get("id"):
            raise UpstreamError("stripe", response.status_code, "Response has no charge id")

        logger.info("Stripe charge %s created for %d %s", data["id"], amount, self._currency)
        return data
