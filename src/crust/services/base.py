"""Provider protocols the shop depends on.

The order flow only needs "charge a card" and "send an e-mail". Tests
and alternative providers satisfy these protocols without subclassing.
"""

from typing import Any, Protocol


class PaymentGateway(Protocol):
    async def charge(self, source: str, amount: int, description: str) -> dict[str, Any]:
        """Charge *amount* (smallest currency unit) to *source*; return the charge."""
        ...


class Mailer(Protocol):
    async def send(self, to: str, subject: str, text: str) -> dict[str, Any]:
        """Deliver a plain-text message to *to*."""
        ...
