"""The signed-in user's cart."""

from typing import Any

from crust.app import App
from crust.errors import ShopError
from crust.http.request import Request
from crust.http.response import ResponseWriter
from crust.shop import Shop
from crust.shop.guards import authenticated, reject_invalid, respond_error
from crust.shop.pizzas import PIZZA_NOT_FOUND
from crust.validation import Field, validation

ITEM_RULES = {
    "id": Field(required=True, type="string"),
    "count": Field(required=True, type="number", min=1),
}

REMOVE_RULES = {
    "id": Field(required=True, type="string"),
}


def register(app: App, shop: Shop) -> None:
    carts, pizzas = shop.carts, shop.pizzas
    require_token = authenticated(shop.tokens)

    async def priced_item(request: Request) -> dict[str, Any]:
        pizza = await pizzas.find_one(request.body["id"])
        if pizza is None:
            raise ShopError(PIZZA_NOT_FOUND)
        return {"id": pizza["id"], "count": request.body["count"], "price": pizza["price"]}

    async def show_cart(request: Request, response: ResponseWriter, next: Any) -> None:
        items = await carts.find_one(request.user["email"])
        response.send(await carts.describe(items, pizzas))

    async def add_item(request: Request, response: ResponseWriter, next: Any) -> None:
        if reject_invalid(request, response):
            return
        try:
            items = await carts.add(request.user["email"], await priced_item(request))
        except ShopError as exc:
            respond_error(request, response, [str(exc)], 500)
            return
        response.send(await carts.describe(items, pizzas))

    async def update_item(request: Request, response: ResponseWriter, next: Any) -> None:
        if reject_invalid(request, response):
            return
        try:
            items = await carts.update(request.user["email"], await priced_item(request))
        except ShopError as exc:
            respond_error(request, response, [str(exc)], 500)
            return
        response.send(await carts.describe(items, pizzas))

    async def remove_item(request: Request, response: ResponseWriter, next: Any) -> None:
        if reject_invalid(request, response):
            return
        await carts.remove(request.user["email"], request.query["id"])
        response.send({"message": "The record has been deleted"})

    app.get("/carts", require_token, show_cart)
    app.post("/carts", require_token, validation(ITEM_RULES), add_item)
    app.put("/carts", require_token, validation(ITEM_RULES), update_item)
    app.delete("/carts", require_token, validation(REMOVE_RULES), remove_item)
