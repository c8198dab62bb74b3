"""End-to-end JSON API tests through the ASGI app and TestClient."""

import json
from pathlib import Path
from typing import Any

import pytest

from crust.app import App
from crust.config import AppConfig
from crust.shop import Shop
from crust.site import build_shop
from crust.testing import TestClient

JSON = {"content-type": "application/json"}


def _auth(token: str) -> dict[str, str]:
    return {**JSON, "token": token}


@pytest.fixture
def shop(config: AppConfig, payments, mailer) -> Shop:
    """The same records the app sees, for setup and inspection."""
    return build_shop(config, payments=payments, mailer=mailer)


@pytest.fixture
async def admin_token(shop: Shop) -> str:
    await shop.users.create(
        {"email": "admin@example.com", "password": "adminpw", "firstName": "A", "lastName": "D"},
        admin=True,
    )
    return (await shop.tokens.issue("admin@example.com"))["id"]


@pytest.fixture
async def pizza(shop: Shop) -> dict[str, Any]:
    return await shop.pizzas.create(
        {"name": "Margherita", "description": "Tomato, mozzarella, basil", "price": 1000}
    )


def _record(config: AppConfig, collection: str, key: str) -> Any:
    path = Path(config.data_dir) / collection / f"{key}.json"
    return json.loads(path.read_text(encoding="utf-8"))


class TestSignUp:
    async def test_sign_up_returns_token_and_hashes_password(
        self, client: TestClient, config: AppConfig
    ) -> None:
        response = await client.post(
            "/sign-up",
            json={"email": "a@bc.com", "password": "secret", "firstName": "A", "lastName": "B"},
        )
        assert response.status == 200
        body = response.json()
        assert body["token"]
        assert "password" not in body

        stored = _record(config, "users", "a@bc.com")
        assert stored["password"] != "secret"
        assert stored["admin"] is False

    async def test_sign_up_validation(self, client: TestClient) -> None:
        response = await client.post("/sign-up", json={"email": "nope", "password": "1"})
        assert response.status == 422
        errors = response.json()["errors"]
        assert 'The field "email" is invalid' in errors
        assert 'The field "firstName" is required' in errors

    async def test_sign_up_cannot_grant_admin(self, client: TestClient, config: AppConfig) -> None:
        await client.post(
            "/sign-up",
            json={
                "email": "x@yz.com",
                "password": "secret",
                "firstName": "X",
                "lastName": "Y",
                "admin": True,
            },
        )
        assert _record(config, "users", "x@yz.com")["admin"] is False

    async def test_duplicate_sign_up(self, client: TestClient, sign_up) -> None:
        await sign_up("a@bc.com")
        response = await client.post(
            "/sign-up",
            json={"email": "a@bc.com", "password": "secret", "firstName": "A", "lastName": "B"},
        )
        assert response.status == 500
        assert response.json()["errors"] == ["The record exists and cannot be overwritten"]


class TestSignIn:
    async def test_sign_in(self, client: TestClient, sign_up) -> None:
        await sign_up("a@bc.com")
        response = await client.post("/sign-in", json={"email": "a@bc.com", "password": "secret1"})
        assert response.status == 200
        assert response.json()["email"] == "a@bc.com"
        assert response.json()["token"]

    async def test_bad_password(self, client: TestClient, sign_up) -> None:
        await sign_up("a@bc.com")
        response = await client.post("/sign-in", json={"email": "a@bc.com", "password": "nope"})
        assert response.status == 401
        assert response.json() == {"errors": ["Your password or email are not valid"]}


class TestProfile:
    async def test_me(self, client: TestClient, sign_up) -> None:
        token = await sign_up()
        response = await client.get("/me", headers=_auth(token))
        assert response.status == 200
        assert response.json()["firstName"] == "Jane"
        assert "password" not in response.json()

    async def test_me_without_token(self, client: TestClient) -> None:
        response = await client.get("/me", headers=JSON)
        assert response.status == 401
        assert response.json() == {"errors": ["You are not authorized for this resource"]}

    @pytest.mark.parametrize(
        "headers",
        [
            {"token": "../etc"},
            {"authorization": "Bearer a/b"},
            {"token": ".hidden"},
        ],
    )
    async def test_malformed_token_is_unauthorized(
        self, client: TestClient, headers: dict[str, str]
    ) -> None:
        response = await client.get("/me", headers={**JSON, **headers})
        assert response.status == 401
        assert response.json() == {"errors": ["You are not authorized for this resource"]}

    async def test_malformed_token_cookie_is_unauthorized(self, client: TestClient) -> None:
        response = await client.get("/me", headers={**JSON, "cookie": "token=../x"})
        assert response.status == 401

    async def test_bearer_header(self, client: TestClient, sign_up) -> None:
        token = await sign_up()
        response = await client.get("/me", headers={**JSON, "authorization": f"Bearer {token}"})
        assert response.status == 200

    async def test_update_me(self, client: TestClient, sign_up) -> None:
        token = await sign_up()
        response = await client.put(
            "/me",
            headers=_auth(token),
            json={"firstName": "Janet", "lastName": "Doe", "admin": True},
        )
        assert response.status == 200
        assert response.json()["firstName"] == "Janet"
        assert response.json()["admin"] is False

    async def test_logout_invalidates_token(self, client: TestClient, sign_up) -> None:
        token = await sign_up()
        response = await client.delete("/logout", headers=_auth(token))
        assert response.status == 200
        assert (await client.get("/me", headers=_auth(token))).status == 401


class TestAdmin:
    async def test_non_admin_is_rejected(self, client: TestClient, sign_up) -> None:
        token = await sign_up()
        response = await client.post(
            "/pizzas",
            headers=_auth(token),
            json={"name": "Hawaii", "description": "Ham and pineapple", "price": 900},
        )
        assert response.status == 403
        assert response.json() == {"errors": ["Only admin can access to this resource"]}

    async def test_admin_creates_pizza(self, client: TestClient, admin_token: str) -> None:
        response = await client.post(
            "/pizzas",
            headers=_auth(admin_token),
            json={"name": "Hawaii", "description": "Ham and pineapple", "price": 900},
        )
        assert response.status == 200
        pizza = response.json()
        listed = await client.get("/pizzas", headers=_auth(admin_token))
        assert [p["id"] for p in listed.json()] == [pizza["id"]]

    async def test_pizza_price_boundary(self, client: TestClient, admin_token: str) -> None:
        body = {"name": "Cheap one", "description": "Just the dough", "price": 49}
        response = await client.post("/pizzas", headers=_auth(admin_token), json=body)
        assert response.status == 422
        body["price"] = 50
        response = await client.post("/pizzas", headers=_auth(admin_token), json=body)
        assert response.status == 200

    async def test_admin_lists_users_without_passwords(
        self, client: TestClient, admin_token: str
    ) -> None:
        response = await client.get("/users", headers=_auth(admin_token))
        assert response.status == 200
        assert all("password" not in user for user in response.json())

    async def test_lookup_with_unsafe_key_is_not_found(
        self, client: TestClient, admin_token: str
    ) -> None:
        pizza = await client.get("/pizzas?id=a/b", headers=_auth(admin_token))
        assert pizza.status == 500
        assert pizza.json() == {"errors": ["Could not find chosen pizza"]}
        user = await client.get("/users?email=../x", headers=_auth(admin_token))
        assert user.status == 500
        assert user.json() == {"errors": ["Could not find the user"]}

    async def test_delete_pizza(self, client: TestClient, admin_token: str, pizza: dict) -> None:
        response = await client.delete(f"/pizzas?id={pizza['id']}", headers=_auth(admin_token))
        assert response.status == 200
        missing = await client.get(f"/pizzas?id={pizza['id']}", headers=_auth(admin_token))
        assert missing.status == 500
        assert missing.json() == {"errors": ["Could not find chosen pizza"]}


class TestCartsAndOrders:
    async def test_add_to_cart(
        self, client: TestClient, sign_up, pizza: dict, config: AppConfig
    ) -> None:
        token = await sign_up("a@bc.com")
        response = await client.post(
            "/carts", headers=_auth(token), json={"id": pizza["id"], "count": 2}
        )
        assert response.status == 200
        assert _record(config, "carts", "a@bc.com") == [
            {"id": pizza["id"], "count": 2, "price": 1000}
        ]

    async def test_add_unknown_pizza(self, client: TestClient, sign_up) -> None:
        token = await sign_up()
        response = await client.post("/carts", headers=_auth(token), json={"id": "x", "count": 1})
        assert response.status == 500
        assert response.json() == {"errors": ["Could not find chosen pizza"]}

    async def test_remove_from_cart(self, client: TestClient, sign_up, pizza: dict) -> None:
        token = await sign_up()
        await client.post("/carts", headers=_auth(token), json={"id": pizza["id"], "count": 1})
        response = await client.delete(f"/carts?id={pizza['id']}", headers=_auth(token))
        assert response.status == 200
        assert (await client.get("/carts", headers=_auth(token))).json() == []

    async def test_order_with_empty_cart(
        self, client: TestClient, sign_up, config: AppConfig
    ) -> None:
        token = await sign_up()
        response = await client.post("/orders", headers=_auth(token), json={})
        assert response.status == 500
        assert response.json()["errors"][0].startswith("Your cart is empty")
        orders_dir = Path(config.data_dir) / "orders"
        assert not orders_dir.exists() or not any(orders_dir.iterdir())

    async def test_place_and_pay(
        self, client: TestClient, sign_up, pizza: dict, payments, mailer
    ) -> None:
        token = await sign_up()
        await client.post("/carts", headers=_auth(token), json={"id": pizza["id"], "count": 2})
        order = (await client.post("/orders", headers=_auth(token), json={})).json()
        assert order["status"] == "created"

        response = await client.post(
            "/orders/pay", headers=_auth(token), json={"id": order["id"], "source": "tok_visa"}
        )
        assert response.status == 200
        assert response.json()["status"] == "paid"
        assert payments.charges[0][1] == 2000
        assert len(mailer.sent) == 1
        assert (await client.get("/carts", headers=_auth(token))).json() == []

    async def test_pay_twice_is_rejected(
        self, client: TestClient, sign_up, pizza: dict, config: AppConfig
    ) -> None:
        token = await sign_up()
        await client.post("/carts", headers=_auth(token), json={"id": pizza["id"], "count": 1})
        order = (await client.post("/orders", headers=_auth(token), json={})).json()
        pay = {"id": order["id"], "source": "tok_visa"}
        await client.put("/orders/pay", headers=_auth(token), json=pay)
        before = _record(config, "orders", order["id"])

        response = await client.put("/orders/pay", headers=_auth(token), json=pay)
        assert response.status == 500
        assert response.json() == {"errors": ["This order is already paid"]}
        assert _record(config, "orders", order["id"]) == before

    async def test_declined_payment(
        self, client: TestClient, sign_up, pizza: dict, payments
    ) -> None:
        token = await sign_up()
        await client.post("/carts", headers=_auth(token), json={"id": pizza["id"], "count": 1})
        order = (await client.post("/orders", headers=_auth(token), json={})).json()
        payments.fail = True
        response = await client.post(
            "/orders/pay", headers=_auth(token), json={"id": order["id"], "source": "tok"}
        )
        assert response.status == 500
        shown = await client.get(f"/orders?id={order['id']}", headers=_auth(token))
        assert shown.json()["status"] == "created"


class TestPipeline:
    async def test_unknown_route(self, client: TestClient) -> None:
        response = await client.post("/nope", json={})
        assert response.status == 404

    async def test_malformed_json(self, client: TestClient) -> None:
        response = await client.post("/sign-in", headers=JSON, body=b"{broken")
        assert response.status == 400
        assert "errors" in response.json()

    async def test_first_request_sets_session_cookie(self, client: TestClient) -> None:
        response = await client.get("/sign-in")
        cookies = [v for k, v in response.headers if k == "set-cookie"]
        assert len(cookies) == 1
        assert cookies[0].startswith("sessionId=")
        assert client.cookies["sessionId"]

    async def test_session_is_kept(self, client: TestClient) -> None:
        await client.get("/sign-in")
        first = client.cookies["sessionId"]
        await client.get("/sign-in")
        assert client.cookies["sessionId"] == first

    async def test_handler_exception_is_500(self, config: AppConfig) -> None:
        app = App(config)

        def boom(request: Any, response: Any, next: Any) -> None:
            raise RuntimeError("boom")

        app.get("/boom", boom)
        async with TestClient(app) as client:
            response = await client.get("/boom")
        assert response.status == 500
        assert response.text == "Something went wrong\n"

    async def test_unanswered_chain_is_500(self, config: AppConfig) -> None:
        app = App(config)
        app.get("/silent", lambda request, response, next: None)
        async with TestClient(app) as client:
            response = await client.get("/silent")
        assert response.status == 500
