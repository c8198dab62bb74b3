"""Tests for crust.templating.renderer: includes, loops and escaping."""

from pathlib import Path

import pytest

from crust.errors import ConfigurationError, TemplateNotFound
from crust.templating.renderer import PageRenderer


@pytest.fixture
def templates(tmp_path: Path) -> Path:
    (tmp_path / "partials").mkdir()
    (tmp_path / "partials" / "header.html").write_text("<h1>{{ title }}</h1>")
    (tmp_path / "partials" / "item.html").write_text("<li>{{ name }}:{{ price }}</li>")
    (tmp_path / "page.html").write_text(
        "<!-- include: partials/header.html -->"
        "<ul><!-- loop:items: partials/item.html --></ul>"
        "<p>{{ note }}</p>"
    )
    return tmp_path


class TestPageRenderer:
    async def test_include_and_loop(self, templates: Path) -> None:
        renderer = PageRenderer(templates)
        html = await renderer.render(
            "page.html",
            {
                "title": "Menu",
                "note": "fresh",
                "items": [{"name": "Margherita", "price": 10}, {"name": "Diavola", "price": 12}],
            },
        )
        assert html == (
            "<h1>Menu</h1><ul><li>Margherita:10</li><li>Diavola:12</li></ul><p>fresh</p>"
        )

    async def test_missing_fields_render_empty(self, templates: Path) -> None:
        html = await PageRenderer(templates).render("page.html", {})
        assert html == "<h1></h1><ul></ul><p></p>"

    async def test_loop_item_missing_field(self, templates: Path) -> None:
        html = await PageRenderer(templates).render("page.html", {"items": [{"name": "Plain"}]})
        assert "<li>Plain:</li>" in html

    async def test_values_are_escaped(self, templates: Path) -> None:
        html = await PageRenderer(templates).render(
            "page.html",
            {"title": "<script>", "items": [{"name": "<b>", "price": 1}]},
        )
        assert "<script>" not in html
        assert "&lt;script&gt;" in html
        assert "&lt;b&gt;" in html

    async def test_missing_page(self, templates: Path) -> None:
        with pytest.raises(TemplateNotFound):
            await PageRenderer(templates).render("nope.html")

    async def test_missing_include(self, tmp_path: Path) -> None:
        (tmp_path / "page.html").write_text("<!-- include: gone.html -->")
        with pytest.raises(TemplateNotFound):
            await PageRenderer(tmp_path).render("page.html")

    async def test_page_outside_root(self, tmp_path: Path) -> None:
        root = tmp_path / "templates"
        root.mkdir()
        (tmp_path / "secret.html").write_text("secret")
        with pytest.raises(TemplateNotFound):
            await PageRenderer(root).render("../secret.html")

    async def test_include_cycle(self, tmp_path: Path) -> None:
        (tmp_path / "a.html").write_text("<!-- include: b.html -->")
        (tmp_path / "b.html").write_text("<!-- include: a.html -->")
        with pytest.raises(ConfigurationError):
            await PageRenderer(tmp_path).render("a.html")


class TestPackagedTemplates:
    async def test_error_page(self) -> None:
        from crust.config import AppConfig

        renderer = PageRenderer(AppConfig().template_dir)
        html = await renderer.render(
            "error.html", {"title": "Not Found", "header": "404", "message": "Gone"}
        )
        assert "<h1>404</h1>" in html
        assert "Gone" in html
        assert "<!DOCTYPE html>" in html
