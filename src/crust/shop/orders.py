"""Orders: placing a cart and paying for it."""

import logging
from datetime import datetime
from typing import Any

from crust._internal import clock
from crust.data.store import FileStore
from crust.errors import ShopError, StoreError, UpstreamError
from crust.security.ids import random_string
from crust.services.base import Mailer, PaymentGateway
from crust.shop.carts import Carts
from crust.shop.users import Users

logger = logging.getLogger("crust.shop")

EMPTY_CART = "Your cart is empty. Add new items to your cart to make an order"
ORDER_NOT_FOUND = "Could not find the order"
ALREADY_PAID = "This order is already paid"

RECEIPT_SUBJECT = "Pizza delivery payment"
RECEIPT_TEXT = "Your payment for pizza delivery was successfully completed"


def order_total(order: dict[str, Any]) -> int:
    """Sum of price times count over the order's items."""
    return int(sum(item.get("price", 0) * item.get("count", 0) for item in order.get("items", [])))


class Orders:
    """Order records::

        {"id", "status": "created" | "paid", "userId", "items",
         "stripeId", "createdAt"}

    ``userId`` is the owner's e-mail; the user record lists its order ids.
    """

    __slots__ = ("_carts", "_mailer", "_payments", "_store", "_users")

    def __init__(
        self,
        store: FileStore,
        users: Users,
        carts: Carts,
        payments: PaymentGateway,
        mailer: Mailer,
    ) -> None:
        self._store = store
        self._users = users
        self._carts = carts
        self._payments = payments
        self._mailer = mailer

    async def _order_ids(self, email: str) -> list[str]:
        user = await self._users.find_one(email)
        if user is None:
            return []
        return list(user.get("orders") or [])

    async def find(self, email: str) -> list[dict[str, Any]]:
        """The user's orders, oldest first."""
        orders = []
        for order_id in await self._order_ids(email):
            order = await self._store.get(order_id)
            if order is not None:
                orders.append(order)
        return orders

    async def find_one(self, email: str, order_id: str) -> dict[str, Any] | None:
        """The order, or None unless it belongs to the user."""
        if order_id not in await self._order_ids(email):
            return None
        return await self._store.get(order_id)

    async def place(self, user: dict[str, Any]) -> dict[str, Any]:
        """Turn the user's cart into a new order.

        Raises ``ShopError`` for an empty cart; nothing is written then.
        """
        email = user["email"]
        items = await self._carts.find_one(email)
        if not items:
            raise ShopError(EMPTY_CART)

        order: dict[str, Any] = {
            "id": random_string(20),
            "status": "created",
            "userId": email,
            "items": items,
            "stripeId": None,
            "createdAt": clock.isoformat(),
        }
        await self._store.create(order["id"], order)

        order_ids = await self._order_ids(email)
        order_ids.append(order["id"])
        await self._users.update(email, {"orders": order_ids})
        logger.info("Order %s placed by %s", order["id"], email)
        return order

    async def pay(self, user: dict[str, Any], order_id: str, source: str) -> dict[str, Any]:
        """Charge the order total to *source* and mark the order paid.

        A failed charge raises ``UpstreamError`` and leaves the order as it
        was. After a successful charge the receipt e-mail and the cart
        cleanup run; their failures are logged and do not undo the payment.
        """
        email = user["email"]
        order = await self.find_one(email, order_id)
        if order is None:
            raise ShopError(ORDER_NOT_FOUND)
        if order.get("status") == "paid":
            raise ShopError(ALREADY_PAID)

        amount = order_total(order)
        description = (
            f"Payment from {user.get('firstName', '')} {user.get('lastName', '')} "
            f"({email}) for pizza delivery"
        )
        charge = await self._payments.charge(source, amount, description)

        order["status"] = "paid"
        order["stripeId"] = charge["id"]
        await self._store.put(order_id, order)
        logger.info("Order %s paid (%s)", order_id, charge["id"])

        try:
            await self._mailer.send(email, RECEIPT_SUBJECT, RECEIPT_TEXT)
        except UpstreamError:
            logger.exception("Could not send the receipt for order %s", order_id)

        try:
            await self._carts.empty(email)
        except StoreError:
            logger.exception("Could not empty the cart of %s", email)

        return order

    async def recent(self, since: datetime) -> list[dict[str, Any]]:
        """All orders created at or after *since*."""
        return [
            order
            for order in await self._store.list()
            if (created := clock.parse(order.get("createdAt", ""))) is not None and created >= since
        ]

    async def get(self, order_id: str) -> dict[str, Any] | None:
        """Any order by id, regardless of owner (admin console)."""
        return await self._store.get(order_id)
