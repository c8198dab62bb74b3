"""The menu API. Reading needs a token; changes are admin only."""

from typing import Any

from crust.app import App
from crust.errors import ShopError, StoreError
from crust.http.request import Request
from crust.http.response import ResponseWriter
from crust.shop import Shop
from crust.shop.guards import admin_only, authenticated, reject_invalid, respond_error
from crust.shop.pizzas import PIZZA_NOT_FOUND
from crust.validation import Field, validation

CREATE_RULES = {
    "name": Field(required=True, type="string", min=5, max=50),
    "description": Field(required=True, type="string", min=10, max=500),
    "price": Field(required=True, type="number", min=50),
}

UPDATE_RULES = {
    "id": Field(required=True, type="string"),
    "name": Field(type="string", min=5, max=50),
    "description": Field(type="string", min=10, max=500),
    "price": Field(type="number", min=50),
}

DELETE_RULES = {
    "id": Field(required=True, type="string"),
}


def register(app: App, shop: Shop) -> None:
    pizzas = shop.pizzas
    require_token = authenticated(shop.tokens)

    async def list_pizzas(request: Request, response: ResponseWriter, next: Any) -> None:
        pizza_id = request.query.get("id")
        if pizza_id:
            pizza = await pizzas.find_one(pizza_id)
            if pizza is None:
                respond_error(request, response, [PIZZA_NOT_FOUND], 500)
                return
            response.send(pizza)
            return
        response.send(await pizzas.find())

    async def create_pizza(request: Request, response: ResponseWriter, next: Any) -> None:
        if reject_invalid(request, response):
            return
        response.send(await pizzas.create(request.body))

    async def update_pizza(request: Request, response: ResponseWriter, next: Any) -> None:
        if reject_invalid(request, response):
            return
        try:
            pizza = await pizzas.update(request.body["id"], request.body)
        except ShopError as exc:
            respond_error(request, response, [str(exc)], 500)
            return
        response.send(pizza)

    async def delete_pizza(request: Request, response: ResponseWriter, next: Any) -> None:
        if reject_invalid(request, response):
            return
        try:
            await pizzas.delete(request.query["id"])
        except StoreError as exc:
            respond_error(request, response, [str(exc)], 500)
            return
        response.send({"message": "The record has been deleted"})

    app.get("/pizzas", require_token, list_pizzas)
    app.post("/pizzas", require_token, admin_only, validation(CREATE_RULES), create_pizza)
    app.put("/pizzas", require_token, admin_only, validation(UPDATE_RULES), update_pizza)
    app.delete("/pizzas", require_token, admin_only, validation(DELETE_RULES), delete_pizza)
