"""Shared fixtures: a shop app over a temporary data directory."""

from pathlib import Path
from typing import Any

import pytest

from crust.app import App
from crust.config import AppConfig
from crust.errors import UpstreamError
from crust.site import create_app
from crust.testing import TestClient


class FakePayments:
    """Records charges; fails when ``fail`` is set."""

    def __init__(self) -> None:
        self.charges: list[tuple[str, int, str]] = []
        self.fail = False

    async def charge(self, source: str, amount: int, description: str) -> dict[str, Any]:
        if self.fail:
            raise UpstreamError("stripe", 402, "Your card was declined.")
        self.charges.append((source, amount, description))
        return {"id": f"ch_{len(self.charges)}", "amount": amount}


class FakeMailer:
    """Records sent mail; fails when ``fail`` is set."""

    def __init__(self) -> None:
        self.sent: list[tuple[str, str, str]] = []
        self.fail = False

    async def send(self, to: str, subject: str, text: str) -> dict[str, Any]:
        if self.fail:
            raise UpstreamError("mailgun", 500, "unavailable")
        self.sent.append((to, subject, text))
        return {"id": f"<{len(self.sent)}@mail>"}


@pytest.fixture
def config(tmp_path: Path) -> AppConfig:
    return AppConfig(data_dir=tmp_path / "data")


@pytest.fixture
def payments() -> FakePayments:
    return FakePayments()


@pytest.fixture
def mailer() -> FakeMailer:
    return FakeMailer()


@pytest.fixture
def app(config: AppConfig, payments: FakePayments, mailer: FakeMailer) -> App:
    return create_app(config, payments=payments, mailer=mailer)


@pytest.fixture
async def client(app: App):
    async with TestClient(app) as c:
        yield c


@pytest.fixture
def sign_up(client: TestClient):
    """Create an account over HTTP and return its bearer token."""

    async def _sign_up(email: str = "jane@example.com", **extra: Any) -> str:
        body = {
            "email": email,
            "password": "secret1",
            "firstName": "Jane",
            "lastName": "Doe",
            "address": "1 Main St",
            **extra,
        }
        response = await client.post("/sign-up", json=body)
        assert response.status == 200, response.text
        return response.json()["token"]

    return _sign_up
