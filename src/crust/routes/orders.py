"""Placing and paying orders."""

from typing import Any

from crust.app import App
from crust.errors import ShopError, UpstreamError
from crust.http.request import Request
from crust.http.response import ResponseWriter
from crust.shop import Shop
from crust.shop.guards import authenticated, reject_invalid, respond_error
from crust.shop.orders import ORDER_NOT_FOUND
from crust.validation import Field, validation

PAY_RULES = {
    "id": Field(required=True),
    "source": Field(required=True),
}


def register(app: App, shop: Shop) -> None:
    orders = shop.orders
    require_token = authenticated(shop.tokens)

    async def list_orders(request: Request, response: ResponseWriter, next: Any) -> None:
        email = request.user["email"]
        order_id = request.query.get("id")
        if order_id:
            order = await orders.find_one(email, order_id)
            if order is None:
                respond_error(request, response, [ORDER_NOT_FOUND], 500)
                return
            response.send(order)
            return
        response.send(await orders.find(email))

    async def place_order(request: Request, response: ResponseWriter, next: Any) -> None:
        try:
            order = await orders.place(request.user)
        except ShopError as exc:
            respond_error(request, response, [str(exc)], 500, "/profile")
            return
        if request.wants_json:
            response.send(order)
        else:
            response.redirect("/profile")

    async def pay_order(request: Request, response: ResponseWriter, next: Any) -> None:
        if reject_invalid(request, response, "/profile"):
            return
        body = request.body
        try:
            order = await orders.pay(request.user, str(body["id"]), str(body["source"]))
        except (ShopError, UpstreamError) as exc:
            respond_error(request, response, [str(exc)], 500, "/profile")
            return
        if request.wants_json:
            response.send(order)
        else:
            response.redirect("/profile")

    app.get("/orders", require_token, list_orders)
    app.post("/orders", require_token, place_order)
    app.put("/orders/pay", require_token, validation(PAY_RULES), pay_order)
    app.post("/orders/pay", require_token, validation(PAY_RULES), pay_order)
