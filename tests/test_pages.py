"""HTML flows: forms, flash messages, redirects and the static fallback."""

from dataclasses import replace
from pathlib import Path

from crust.config import AppConfig
from crust.site import create_app
from crust.testing import TestClient

SIGN_UP_FORM = {
    "email": "jane@example.com",
    "password": "secret1",
    "firstName": "Jane",
    "lastName": "Doe",
    "address": "1 Main St",
}


class TestFormFlows:
    async def test_sign_up_sets_token_cookie_and_redirects(self, client: TestClient) -> None:
        response = await client.post("/sign-up", form=SIGN_UP_FORM)
        assert response.status == 301
        assert response.header("location") == "/profile"
        assert client.cookies.get("token")

        profile = await client.get("/profile")
        assert profile.status == 200
        assert profile.content_type.startswith("text/html")
        assert "Jane" in profile.text
        assert "1 Main St" in profile.text

    async def test_invalid_form_flashes_errors_once(self, client: TestClient) -> None:
        response = await client.post(
            "/sign-up", form={"email": "jane@example.com", "password": "secret1"}
        )
        assert response.status == 301
        assert response.header("location") == "/sign-up"

        page = await client.get("/sign-up")
        assert "firstName" in page.text
        assert "is required" in page.text
        assert 'value="jane@example.com"' in page.text

        again = await client.get("/sign-up")
        assert "is required" not in again.text

    async def test_bad_credentials(self, client: TestClient) -> None:
        await client.post("/sign-up", form=SIGN_UP_FORM)
        await client.get("/logout")
        response = await client.post(
            "/sign-in", form={"email": "jane@example.com", "password": "wrong"}
        )
        assert response.header("location") == "/sign-in"
        page = await client.get("/sign-in")
        assert "Your password or email are not valid" in page.text

    async def test_logout_clears_token_cookie(self, client: TestClient) -> None:
        await client.post("/sign-up", form=SIGN_UP_FORM)
        response = await client.get("/logout")
        assert response.status == 301
        assert response.header("location") == "/sign-in"
        assert "token" not in client.cookies

    async def test_profile_without_token_redirects_to_error(self, client: TestClient) -> None:
        response = await client.get("/profile")
        assert response.status == 301
        assert response.header("location") == "/error"
        page = await client.get("/error")
        assert "You are not authorized for this resource" in page.text

    async def test_index_lists_menu(self, client: TestClient, config: AppConfig, payments, mailer) -> None:
        from crust.site import build_shop

        shop = build_shop(config, payments=payments, mailer=mailer)
        await shop.pizzas.create(
            {"name": "<Diavola>", "description": "Spicy salami", "price": 1250}
        )
        page = await client.get("/")
        assert page.status == 200
        assert "&lt;Diavola&gt;" in page.text
        assert "12.50" in page.text

    async def test_values_in_forms_are_escaped(self, client: TestClient) -> None:
        await client.post("/sign-in", form={"email": '"><script>x</script>'})
        page = await client.get("/sign-in")
        assert "<script>x</script>" not in page.text


class TestStaticFallback:
    async def test_packaged_assets(self, client: TestClient) -> None:
        response = await client.get("/style.css")
        assert response.status == 200
        assert response.content_type == "text/css"

    async def test_png(self, config: AppConfig, tmp_path: Path, payments, mailer) -> None:
        public = tmp_path / "public"
        public.mkdir()
        (public / "logo.png").write_bytes(b"\x89PNG\r\n\x1a\n")
        app = create_app(replace(config, static_dir=public), payments=payments, mailer=mailer)
        async with TestClient(app) as client:
            present = await client.get("/logo.png")
            missing = await client.get("/nonexistent.png")

        assert present.status == 200
        assert present.content_type == "image/png"
        assert present.body == b"\x89PNG\r\n\x1a\n"
        assert missing.status == 404
        assert missing.content_type == "text/html"
        assert "404" in missing.text
        assert "The page you are looking for does not exist" in missing.text

    async def test_no_static_root_is_404(self, config: AppConfig, payments, mailer) -> None:
        app = create_app(replace(config, static_dir=None), payments=payments, mailer=mailer)
        async with TestClient(app) as client:
            response = await client.get("/style.css")
        assert response.status == 404
        assert response.text == "Not Found\n"
