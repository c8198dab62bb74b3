"""Sign-up, sign-in, logout and the signed-in user's own profile."""

from typing import Any

from crust.app import App
from crust.errors import ShopError, StoreError
from crust.http.request import Request
from crust.http.response import ResponseWriter
from crust.shop import Shop
from crust.shop.guards import authenticated, reject_invalid, respond_error
from crust.shop.users import PROFILE_FIELDS, public
from crust.validation import Field, validation

EMAIL_PATTERN = r"[a-z0-9_\-+]@[a-z0-9]{2,}\.[a-z]{2,}"
BAD_CREDENTIALS = "Your password or email are not valid"

SIGN_UP_RULES = {
    "email": Field(required=True, type="string", match=EMAIL_PATTERN),
    "password": Field(required=True, min=6, max=10),
    "firstName": Field(required=True),
    "lastName": Field(required=True),
}

SIGN_IN_RULES = {
    "email": Field(required=True),
    "password": Field(required=True),
}

PROFILE_RULES = {
    "firstName": Field(required=True),
    "lastName": Field(required=True),
    "address": Field(min=1, max=100),
}


def register(app: App, shop: Shop) -> None:
    users, tokens = shop.users, shop.tokens
    require_token = authenticated(tokens)

    async def signed_in(
        request: Request, response: ResponseWriter, user: dict[str, Any]
    ) -> None:
        token = await tokens.issue(user["email"])
        if request.wants_json:
            response.send({**public(user), "token": token["id"]})
            return
        response.set_cookies({tokens.cookie_name: token["id"]})
        response.redirect("/profile")

    async def sign_up(request: Request, response: ResponseWriter, next: Any) -> None:
        if reject_invalid(request, response, "/sign-up"):
            return
        try:
            user = await users.create(request.body)
        except StoreError as exc:
            respond_error(request, response, [str(exc)], 500, "/sign-up")
            return
        await signed_in(request, response, user)

    async def sign_in(request: Request, response: ResponseWriter, next: Any) -> None:
        if reject_invalid(request, response, "/sign-in"):
            return
        body = request.body
        user = await users.authenticate(str(body["email"]), str(body["password"]))
        if user is None:
            respond_error(request, response, [BAD_CREDENTIALS], 401, "/sign-in")
            return
        await signed_in(request, response, user)

    async def logout(request: Request, response: ResponseWriter, next: Any) -> None:
        try:
            await tokens.delete(request.token or "")
        except StoreError as exc:
            respond_error(request, response, [str(exc)], 500)
            return
        response.set_cookies({tokens.cookie_name: None})
        if request.wants_json:
            response.send({"message": "Logout successfully completed"})
        else:
            response.redirect("/sign-in")

    def me(request: Request, response: ResponseWriter, next: Any) -> None:
        response.send(public(request.user or {}))

    async def update_me(request: Request, response: ResponseWriter, next: Any) -> None:
        if reject_invalid(request, response, "/profile"):
            return
        user = request.user or {}
        changes = {key: request.body[key] for key in PROFILE_FIELDS if key in request.body}
        try:
            updated = await users.update(user["email"], changes)
        except (ShopError, StoreError) as exc:
            respond_error(request, response, [str(exc)], 500, "/profile")
            return
        if request.wants_json:
            response.send(public(updated))
        else:
            response.redirect("/profile")

    app.post("/sign-up", validation(SIGN_UP_RULES), sign_up)
    app.post("/sign-in", validation(SIGN_IN_RULES), sign_in)
    app.get("/logout", require_token, logout)
    app.delete("/logout", require_token, logout)
    app.get("/me", require_token, me)
    app.post("/me", require_token, validation(PROFILE_RULES), update_me)
    app.put("/me", require_token, validation(PROFILE_RULES), update_me)
