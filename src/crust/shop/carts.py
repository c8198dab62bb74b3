"""Per-user shopping carts, keyed by e-mail address."""

import logging
from collections.abc import Mapping
from typing import Any

from crust.data.store import FileStore
from crust.errors import ShopError
from crust.shop.pizzas import Pizzas

logger = logging.getLogger("crust.shop")

ITEM_NOT_IN_CART = "Could not find the item in your cart"


def _entry(item: Mapping[str, Any]) -> dict[str, Any]:
    return {"id": item["id"], "count": item["count"], "price": item["price"]}


class Carts:
    """Cart records: a list of ``{"id", "count", "price"}`` entries.

    The same pizza may appear in several entries.
    """

    __slots__ = ("_store",)

    def __init__(self, store: FileStore) -> None:
        self._store = store

    async def find_one(self, email: str) -> list[dict[str, Any]]:
        """The user's cart entries; empty when there is no cart."""
        items = await self._store.get(email)
        return items if isinstance(items, list) else []

    async def add(self, email: str, item: Mapping[str, Any]) -> list[dict[str, Any]]:
        items = await self.find_one(email)
        items.append(_entry(item))
        await self._store.put(email, items)
        return items

    async def update(self, email: str, item: Mapping[str, Any]) -> list[dict[str, Any]]:
        """Replace the first entry with the same pizza id."""
        items = await self.find_one(email)
        for index, existing in enumerate(items):
            if existing.get("id") == item["id"]:
                items[index] = _entry(item)
                break
        else:
            raise ShopError(ITEM_NOT_IN_CART)
        await self._store.put(email, items)
        return items

    async def remove(self, email: str, pizza_id: str) -> list[dict[str, Any]]:
        """Drop the first entry with *pizza_id*; a missing id is a no-op."""
        items = await self.find_one(email)
        for index, existing in enumerate(items):
            if existing.get("id") == pizza_id:
                del items[index]
                break
        await self._store.put(email, items)
        return items

    async def empty(self, email: str) -> None:
        """Delete the user's cart."""
        if await self._store.get(email) is None:
            return
        await self._store.delete(email)

    async def describe(
        self, items: list[dict[str, Any]], pizzas: Pizzas
    ) -> list[dict[str, Any]]:
        """Join cart entries with their pizza records.

        Entries whose pizza left the menu are skipped.
        """
        described = []
        for item in items:
            pizza = await pizzas.find_one(item.get("id", ""))
            if pizza is None:
                logger.warning("Cart entry for unknown pizza %s skipped", item.get("id"))
                continue
            described.append({**pizza, "count": item.get("count", 0)})
        return described
