"""HTTP responses.

``Response`` is the immutable value that leaves the pipeline, built with
chainable ``.with_*()`` calls. ``ResponseWriter`` is the per-request
helper handed to every chain handler: it collects cookies and headers
and produces exactly one terminal ``Response`` via ``send``,
``send_html`` or ``redirect``.
"""

from __future__ import annotations

import json as json_module
from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any

from crust.http.cookies import SetCookie


@dataclass(frozen=True, slots=True)
class Response:
    """An HTTP response built through immutable transformations."""

    body: str | bytes = ""
    status: int = 200
    content_type: str = "text/plain; charset=utf-8"
    headers: tuple[tuple[str, str], ...] = ()
    cookies: tuple[SetCookie, ...] = ()

    # -- Chainable transformations --

    def with_status(self, status: int) -> Response:
        """Return a new Response with a different status code."""
        return replace(self, status=status)

    def with_header(self, name: str, value: str) -> Response:
        """Return a new Response with an additional header."""
        return replace(self, headers=(*self.headers, (name, value)))

    def with_headers(self, headers: Mapping[str, str] | tuple[tuple[str, str], ...]) -> Response:
        """Return a new Response with additional headers."""
        new = tuple(headers.items()) if isinstance(headers, Mapping) else headers
        return replace(self, headers=(*self.headers, *new))

    def with_cookies(self, cookies: tuple[SetCookie, ...]) -> Response:
        """Return a new Response with additional Set-Cookie directives."""
        return replace(self, cookies=(*self.cookies, *cookies))

    # -- Body helpers --

    @property
    def body_bytes(self) -> bytes:
        """Body as bytes."""
        if isinstance(self.body, str):
            return self.body.encode("utf-8")
        return self.body

    @property
    def text(self) -> str:
        """Body as string."""
        if isinstance(self.body, bytes):
            return self.body.decode("utf-8")
        return self.body

    def json(self) -> Any:
        """Decode the body as JSON."""
        return json_module.loads(self.body_bytes)

    def header(self, name: str) -> str | None:
        """First value of header *name* (case-insensitive), or None."""
        wanted = name.lower()
        for key, value in self.headers:
            if key.lower() == wanted:
                return value
        return None


class ResponseWriter:
    """Per-request response helpers.

    Cookies and headers may be queued at any point before the terminal
    call. ``send``, ``send_html`` and ``redirect`` are terminal: a second
    terminal call raises ``RuntimeError``.

    Usage inside a chain handler::

        async def show(request, response, next):
            response.set_cookies({"theme": "dark"})
            response.send({"ok": True})
    """

    __slots__ = ("_cookies", "_headers", "_response")

    def __init__(self) -> None:
        self._cookies: list[SetCookie] = []
        self._headers: list[tuple[str, str]] = []
        self._response: Response | None = None

    @property
    def finished(self) -> bool:
        """True once a terminal helper has produced the response."""
        return self._response is not None

    @property
    def response(self) -> Response | None:
        """The terminal response, or None while the chain is still running."""
        return self._response

    @property
    def pending_cookies(self) -> tuple[SetCookie, ...]:
        return tuple(self._cookies)

    # -- Non-terminal --

    def set_cookies(self, cookies: Mapping[str, str | None]) -> None:
        """Queue one ``Set-Cookie`` per pair; a falsy value clears the cookie."""
        for name, value in cookies.items():
            if value:
                self._cookies.append(SetCookie(name=name, value=str(value)))
            else:
                self._cookies.append(SetCookie.expired(name))

    def set_header(self, name: str, value: str) -> None:
        """Queue an extra response header."""
        self._headers.append((name, value))

    # -- Terminal --

    def send(self, data: Any, status: int | None = None) -> Response:
        """Send structured data as JSON, anything else as plain text."""
        if isinstance(data, (dict, list)):
            return self._finish(
                Response(
                    body=json_module.dumps(data, default=str),
                    status=status or 200,
                    content_type="application/json",
                )
            )
        body = data if isinstance(data, (str, bytes)) else str(data)
        return self._finish(
            Response(body=body, status=status or 200, content_type="text/plain")
        )

    def send_html(self, html: str | bytes, status: int = 200) -> Response:
        """Send an HTML page."""
        return self._finish(Response(body=html, status=status, content_type="text/html"))

    def send_bytes(self, data: bytes, content_type: str, status: int = 200) -> Response:
        """Send raw bytes with an explicit content type (static files)."""
        return self._finish(Response(body=data, status=status, content_type=content_type))

    def redirect(self, url: str, status: int = 301) -> Response:
        """Send an empty redirect to *url*."""
        return self._finish(Response(body="", status=status).with_header("Location", url))

    def _finish(self, response: Response) -> Response:
        if self._response is not None:
            msg = "Response already sent for this request."
            raise RuntimeError(msg)
        response = response.with_headers(tuple(self._headers)).with_cookies(tuple(self._cookies))
        self._response = response
        return response
