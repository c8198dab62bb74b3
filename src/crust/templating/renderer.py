"""Page rendering over kida.

Pages are plain HTML files with three kinds of markers::

    <!-- include: partials/header.html -->
    <!-- loop:pizzas: partials/pizza.html -->
    <h1>{{ title }}</h1>

Includes are spliced in first (recursively, relative to the template
root). Each loop marker becomes the fragment rendered once per element of
the named list, with the element's fields as context. The assembled page
is then rendered by kida with autoescape, so ``{{ field }}`` values are
HTML-escaped. Fields the context does not provide render empty.
"""

import logging
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import anyio.to_thread
from kida import Environment, FileSystemLoader
from kida.template import Markup

from crust.errors import ConfigurationError, TemplateNotFound

logger = logging.getLogger("crust.server")

INCLUDE_RE = re.compile(r"<!--\s*include:\s*(.*?)\s*-->")
LOOP_RE = re.compile(r"<!--\s*loop:(\w+):\s*(.*?)\s*-->")
FIELD_RE = re.compile(r"\{\{\s*([A-Za-z_]\w*)")

MAX_INCLUDE_DEPTH = 10


def _fill_missing(source: str, context: Mapping[str, Any]) -> dict[str, Any]:
    """Copy *context*, defaulting every referenced but absent field to ``""``."""
    filled = dict(context)
    for name in FIELD_RE.findall(source):
        filled.setdefault(name, "")
    return filled


class PageRenderer:
    """Render pages from a template directory.

    Usage::

        renderer = PageRenderer("templates")
        html = await renderer.render("index.html", {"pizzas": menu})
    """

    __slots__ = ("_env", "_root")

    def __init__(self, template_dir: str | Path, *, autoescape: bool = True) -> None:
        self._root = Path(template_dir).resolve()
        self._env = Environment(
            loader=FileSystemLoader(str(self._root)),
            autoescape=autoescape,
        )

    @property
    def root(self) -> Path:
        return self._root

    @property
    def env(self) -> Environment:
        return self._env

    async def render(self, name: str, data: Mapping[str, Any] | None = None) -> str:
        """Render page *name* with *data*.

        Raises ``TemplateNotFound`` when the page or an included file is
        missing.
        """
        context = dict(data or {})
        source = await self._read(name)
        source = await self._splice_includes(source)

        loops = list(LOOP_RE.finditer(source))
        for index, match in enumerate(loops):
            variable, fragment = match.group(1), match.group(2)
            rendered = await self._render_loop(fragment, context.get(variable))
            context[f"loop_fragment_{index}"] = rendered

        counter = iter(range(len(loops)))
        source = LOOP_RE.sub(lambda _m: "{{ loop_fragment_%d }}" % next(counter), source)

        template = self._env.from_string(source)
        return template.render(_fill_missing(source, context))

    async def _render_loop(self, fragment: str, items: Any) -> Markup:
        """Render *fragment* once per element of *items*."""
        if not isinstance(items, list) or not fragment:
            return Markup("")
        source = await self._splice_includes(await self._read(fragment))
        template = self._env.from_string(source)
        parts = [
            template.render(_fill_missing(source, item if isinstance(item, Mapping) else {}))
            for item in items
        ]
        return Markup("".join(parts))

    async def _splice_includes(self, source: str, depth: int = 0) -> str:
        matches = list(INCLUDE_RE.finditer(source))
        if not matches:
            return source
        if depth >= MAX_INCLUDE_DEPTH:
            msg = f"Template includes nest deeper than {MAX_INCLUDE_DEPTH} levels."
            raise ConfigurationError(msg)

        pieces: list[str] = []
        position = 0
        for match in matches:
            included = await self._read(match.group(1))
            pieces.append(source[position : match.start()])
            pieces.append(await self._splice_includes(included, depth + 1))
            position = match.end()
        pieces.append(source[position:])
        return "".join(pieces)

    async def _read(self, name: str) -> str:
        path = (self._root / name.strip().lstrip("/")).resolve()
        if not path.is_relative_to(self._root):
            raise TemplateNotFound(name)
        try:
            return await anyio.to_thread.run_sync(path.read_text, "utf-8")
        except OSError as exc:
            logger.debug("Template %s could not be read: %s", name, exc)
            raise TemplateNotFound(name) from exc
