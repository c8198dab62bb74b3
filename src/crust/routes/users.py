"""User administration. Every endpoint is admin only."""

from typing import Any

from crust.app import App
from crust.errors import ShopError, StoreError
from crust.http.request import Request
from crust.http.response import ResponseWriter
from crust.routes.account import EMAIL_PATTERN, SIGN_UP_RULES
from crust.shop import Shop
from crust.shop.guards import admin_only, authenticated, reject_invalid, respond_error
from crust.shop.users import public
from crust.validation import Field, validation

USER_NOT_FOUND = "Could not find the user"

EMAIL_RULES = {
    "email": Field(required=True, type="string", match=EMAIL_PATTERN),
}


def register(app: App, shop: Shop) -> None:
    users = shop.users
    guard = (authenticated(shop.tokens), admin_only)

    async def list_users(request: Request, response: ResponseWriter, next: Any) -> None:
        email = request.query.get("email")
        if email:
            user = await users.find_one(email)
            if user is None:
                respond_error(request, response, [USER_NOT_FOUND], 500)
                return
            response.send(public(user))
            return
        response.send([public(user) for user in await users.find()])

    async def create_user(request: Request, response: ResponseWriter, next: Any) -> None:
        if reject_invalid(request, response):
            return
        body = request.body
        try:
            user = await users.create(body, admin=body.get("admin") is True)
        except StoreError as exc:
            respond_error(request, response, [str(exc)], 500)
            return
        response.send(public(user))

    async def update_user(request: Request, response: ResponseWriter, next: Any) -> None:
        if reject_invalid(request, response):
            return
        body = request.body
        try:
            user = await users.update(body["email"], body)
        except (ShopError, StoreError) as exc:
            respond_error(request, response, [str(exc)], 500)
            return
        response.send(public(user))

    async def delete_user(request: Request, response: ResponseWriter, next: Any) -> None:
        if reject_invalid(request, response):
            return
        try:
            await users.delete(request.query["email"])
        except StoreError as exc:
            respond_error(request, response, [str(exc)], 500)
            return
        response.send({"message": "The record has been deleted"})

    app.get("/users", *guard, list_users)
    app.post("/users", *guard, validation(SIGN_UP_RULES), create_user)
    app.put("/users", *guard, validation(EMAIL_RULES), update_user)
    app.delete("/users", *guard, validation(EMAIL_RULES), delete_user)
