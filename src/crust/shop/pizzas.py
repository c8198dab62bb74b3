"""The pizza menu."""

import logging
from collections.abc import Mapping
from typing import Any

from crust._internal import clock
from crust.data.store import FileStore
from crust.errors import ShopError
from crust.security.ids import random_string

logger = logging.getLogger("crust.shop")

EDITABLE_FIELDS = ("name", "description", "price")
PIZZA_NOT_FOUND = "Could not find chosen pizza"


class Pizzas:
    """Pizza records: ``{"id", "name", "description", "price", "createdAt"}``.

    Prices are integers in the smallest currency unit (cents).
    """

    __slots__ = ("_store",)

    def __init__(self, store: FileStore) -> None:
        self._store = store

    async def create(self, data: Mapping[str, Any]) -> dict[str, Any]:
        record: dict[str, Any] = {
            "id": random_string(20),
            "name": data.get("name", ""),
            "description": data.get("description", ""),
            "price": data.get("price", 0),
            "createdAt": clock.isoformat(),
        }
        await self._store.create(record["id"], record)
        logger.info("Pizza %s added to the menu", record["id"])
        return record

    async def find(self) -> list[dict[str, Any]]:
        return await self._store.list()

    async def find_one(self, pizza_id: str) -> dict[str, Any] | None:
        if not pizza_id:
            return None
        return await self._store.get(pizza_id)

    async def update(self, pizza_id: str, changes: Mapping[str, Any]) -> dict[str, Any]:
        """Merge the editable fields of *changes* into the pizza."""
        pizza = await self.find_one(pizza_id)
        if pizza is None:
            raise ShopError(PIZZA_NOT_FOUND)
        pizza.update({key: changes[key] for key in EDITABLE_FIELDS if key in changes})
        await self._store.put(pizza_id, pizza)
        return pizza

    async def delete(self, pizza_id: str) -> None:
        await self._store.delete(pizza_id)
