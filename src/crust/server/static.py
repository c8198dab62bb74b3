"""Static file fallback for unmatched GET requests.

``/`` serves ``index.html``; every other path maps onto the directory
verbatim. Paths with a ``..`` segment, or that resolve outside the
directory, are treated as missing. Missing files answer 404 with the
rendered ``error.html`` page.
"""

import logging
from pathlib import Path

import anyio.to_thread

from crust.errors import TemplateNotFound
from crust.http.request import Request
from crust.http.response import ResponseWriter
from crust.templating.renderer import PageRenderer

logger = logging.getLogger("crust.server")

CONTENT_TYPES: dict[str, str] = {
    "html": "text/html",
    "js": "application/javascript",
    "css": "text/css",
    "json": "application/json",
    "png": "image/png",
    "jpg": "image/jpeg",
    "gif": "image/gif",
    "wav": "audio/wav",
    "mp4": "video/mp4",
    "woff": "font/woff",
    "ttf": "font/ttf",
    "eot": "application/vnd.ms-fontobject",
    "otf": "font/otf",
    "svg": "image/svg+xml",
}
DEFAULT_CONTENT_TYPE = "application/octet-stream"

NOT_FOUND_PAGE = "error.html"
NOT_FOUND_CONTEXT = {
    "title": "Not Found",
    "header": "404",
    "message": "The page you are looking for does not exist",
}


def content_type_for(path: str | Path) -> str:
    """Content type from the file extension, via the fixed table."""
    suffix = Path(path).suffix.lower().lstrip(".")
    return CONTENT_TYPES.get(suffix, DEFAULT_CONTENT_TYPE)


class StaticFiles:
    """Serve files from one directory.

    Usage::

        static = StaticFiles("public", renderer)
        router.set_static_root(static)
    """

    __slots__ = ("_directory", "_index", "_renderer")

    def __init__(
        self,
        directory: str | Path,
        renderer: PageRenderer,
        *,
        index: str = "index.html",
    ) -> None:
        self._directory = Path(directory).resolve()
        self._renderer = renderer
        self._index = index

    @property
    def directory(self) -> Path:
        return self._directory

    def resolve(self, url_path: str) -> Path | None:
        """Map a URL path to a file under the directory, or None when unsafe."""
        relative = self._index if url_path in ("", "/") else url_path.lstrip("/")
        if ".." in relative.replace("\\", "/").split("/"):
            return None
        candidate = (self._directory / relative).resolve()
        if not candidate.is_relative_to(self._directory):
            return None
        return candidate

    async def serve(self, request: Request, response: ResponseWriter) -> None:
        """Answer *request* with the file bytes, or the 404 page."""
        path = self.resolve(request.path)
        if path is not None:
            try:
                data = await anyio.to_thread.run_sync(path.read_bytes)
            except OSError:
                logger.debug("Static file missing: %s", request.path)
            else:
                response.send_bytes(data, content_type_for(path))
                return
        await self._not_found(response)

    async def _not_found(self, response: ResponseWriter) -> None:
        try:
            html = await self._renderer.render(NOT_FOUND_PAGE, NOT_FOUND_CONTEXT)
        except TemplateNotFound:
            logger.warning("Error page %s is missing; answering 404 in plain text", NOT_FOUND_PAGE)
            response.send("Not Found\n", 404)
            return
        response.send_html(html, 404)
