"""HTML pages rendered from the packaged templates."""

from typing import Any

from crust.app import App
from crust.http.request import Request
from crust.http.response import ResponseWriter
from crust.shop import Shop
from crust.shop.guards import authenticated
from crust.shop.orders import order_total

DEFAULT_ERROR = "Something went wrong. Please try again."


def money(cents: Any) -> str:
    """Format an amount in cents as ``12.50``."""
    try:
        return f"{float(cents) / 100:.2f}"
    except (TypeError, ValueError):
        return ""


def flashed(request: Request) -> tuple[list[dict[str, str]], dict[str, Any]]:
    """Pop the flash: error messages as loop items, and the echoed fields."""
    data = request.get_flash() or {}
    if not isinstance(data, dict):
        return [], {}
    messages = [{"message": str(message)} for message in data.get("errors") or []]
    fields = data.get("fields") or {}
    return messages, fields if isinstance(fields, dict) else {}


def register(app: App, shop: Shop) -> None:
    renderer = app.renderer
    require_token = authenticated(shop.tokens)

    async def render(response: ResponseWriter, page: str, context: dict[str, Any]) -> None:
        response.send_html(await renderer.render(page, context))

    async def index(request: Request, response: ResponseWriter, next: Any) -> None:
        errors, _ = flashed(request)
        menu = [{**pizza, "price": money(pizza.get("price"))} for pizza in await shop.pizzas.find()]
        await render(response, "index.html", {"title": "Menu", "pizzas": menu, "errors": errors})

    async def sign_in_page(request: Request, response: ResponseWriter, next: Any) -> None:
        errors, fields = flashed(request)
        await render(
            response,
            "sign-in.html",
            {"title": "Sign in", "errors": errors, "email": fields.get("email", "")},
        )

    async def sign_up_page(request: Request, response: ResponseWriter, next: Any) -> None:
        errors, fields = flashed(request)
        context = {
            "title": "Sign up",
            "errors": errors,
            "email": fields.get("email", ""),
            "firstName": fields.get("firstName", ""),
            "lastName": fields.get("lastName", ""),
            "address": fields.get("address", ""),
        }
        await render(response, "sign-up.html", context)

    async def error_page(request: Request, response: ResponseWriter, next: Any) -> None:
        errors, _ = flashed(request)
        message = " ".join(item["message"] for item in errors) or DEFAULT_ERROR
        await render(
            response,
            "error.html",
            {"title": "Error", "header": "Something went wrong", "message": message},
        )

    async def profile_page(request: Request, response: ResponseWriter, next: Any) -> None:
        errors, _ = flashed(request)
        user = request.user or {}
        orders = [
            {
                "id": order["id"],
                "status": order.get("status", ""),
                "createdAt": order.get("createdAt", ""),
                "total": money(order_total(order)),
            }
            for order in await shop.orders.find(user["email"])
        ]
        cart = await shop.carts.describe(await shop.carts.find_one(user["email"]), shop.pizzas)
        context = {
            "title": "Profile",
            "errors": errors,
            "email": user.get("email", ""),
            "firstName": user.get("firstName", ""),
            "lastName": user.get("lastName", ""),
            "address": user.get("address", ""),
            "orders": orders,
            "cart": [{**item, "price": money(item.get("price"))} for item in cart],
        }
        await render(response, "profile.html", context)

    app.get("/", index)
    app.get("/sign-in", sign_in_page)
    app.get("/sign-up", sign_up_page)
    app.get("/error", error_page)
    app.get("/profile", require_token, profile_page)
