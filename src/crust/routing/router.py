"""Exact-path route table and request dispatch.

Routes are registered during setup and frozen when the app compiles.
Paths are literal strings: ``/orders/pay`` matches only ``/orders/pay``.
There are no pattern segments; registering one is a setup error.
"""

import json
import logging
from typing import TYPE_CHECKING, Any
from urllib.parse import parse_qs

from crust._internal.types import ChainHandler
from crust.errors import BodyDecodeError, ConfigurationError, NotFound
from crust.http.cookies import parse_cookies
from crust.http.request import Request
from crust.http.response import ResponseWriter
from crust.routing.chain import run_chain
from crust.sessions import SessionStore

if TYPE_CHECKING:
    from crust.server.static import StaticFiles

logger = logging.getLogger("crust.server")

BODY_METHODS = frozenset({"POST", "PUT", "PATCH"})


def decode_body(request: Request) -> Any:
    """Decode ``request.raw_body`` according to its Content-Type.

    ``application/json`` is parsed as JSON; anything else is read as
    URL-encoded form fields (first value per name). An empty body
    decodes to ``{}``.

    Raises ``BodyDecodeError`` for malformed JSON.
    """
    raw = request.raw_body
    if not raw or not raw.strip():
        return {}
    if request.media_type == "application/json":
        try:
            return json.loads(raw)
        except (UnicodeDecodeError, ValueError) as exc:
            raise BodyDecodeError(f"Malformed JSON body: {exc}") from exc
    fields = parse_qs(raw.decode("utf-8", errors="replace"), keep_blank_values=True)
    return {name: values[0] for name, values in fields.items()}


class Router:
    """Route table keyed by method, then by exact path.

    Usage::

        router = Router(SessionStore())
        router.register("GET", "/pizzas", authenticated(tokens), list_pizzas)
        router.compile()
        await router.process(request, response)
    """

    __slots__ = ("_compiled", "_routes", "_sessions", "_static")

    def __init__(self, sessions: SessionStore) -> None:
        self._sessions = sessions
        self._routes: dict[str, dict[str, tuple[ChainHandler, ...]]] = {}
        self._static: StaticFiles | None = None
        self._compiled = False

    # -- Registration --

    def register(self, method: str, path: str, *handlers: ChainHandler) -> None:
        """Store the handler sequence for an exact (method, path) pair.

        Registering the same pair again replaces the earlier sequence.
        """
        if self._compiled:
            msg = "Cannot register routes after the router is compiled."
            raise ConfigurationError(msg)
        if not path:
            msg = "Route path must not be empty."
            raise ConfigurationError(msg)
        if "{" in path or "}" in path:
            msg = f"Route {path!r} has a pattern segment; only literal paths are supported."
            raise ConfigurationError(msg)
        method = method.upper()
        previous = self._routes.setdefault(method, {}).get(path)
        if previous is not None:
            logger.debug("Replacing handlers for %s %s", method, path)
        self._routes[method][path] = tuple(handlers)

    def has_route(self, method: str, path: str) -> bool:
        """True iff a non-empty handler sequence is registered for the pair."""
        return bool(self._routes.get(method.upper(), {}).get(path))

    def lookup(self, method: str, path: str) -> tuple[ChainHandler, ...] | None:
        """Return the handler sequence for the pair, or None."""
        handlers = self._routes.get(method.upper(), {}).get(path)
        return handlers or None

    def set_static_root(self, static: "StaticFiles | None") -> None:
        """Serve unmatched GET requests from *static*."""
        self._static = static

    @property
    def static(self) -> "StaticFiles | None":
        return self._static

    @property
    def routes(self) -> list[tuple[str, str, tuple[ChainHandler, ...]]]:
        """All registered ``(method, path, handlers)`` entries, sorted."""
        return sorted(
            (method, path, handlers)
            for method, table in self._routes.items()
            for path, handlers in table.items()
        )

    def compile(self) -> None:
        """Freeze the router. No more routes can be registered."""
        self._compiled = True

    @property
    def compiled(self) -> bool:
        return self._compiled

    # -- Dispatch --

    async def process(self, request: Request, response: ResponseWriter) -> None:
        """Dispatch one request.

        1. Parse cookies and attach them.
        2. Resolve or create the session; always queue its cookie.
        3. Non-GET without a route: raise ``NotFound``.
        4. GET without a route: static fallback, or ``NotFound`` without a root.
        5. Decode the body for POST/PUT/PATCH.
        6. Run the handler chain.
        """
        request.cookies = parse_cookies(request.headers.get("cookie", ""))

        session_id, session = self._sessions.get_or_create(request.cookies)
        request.session_id = session_id
        request.session = session
        response.set_cookies({self._sessions.cookie_name: session_id})

        handlers = self.lookup(request.method, request.path)
        if handlers is None:
            if request.method == "GET" and self._static is not None:
                await self._static.serve(request, response)
                return
            raise NotFound()

        if request.method in BODY_METHODS:
            request.body = decode_body(request)

        await run_chain(handlers, request, response)

    def __repr__(self) -> str:
        count = sum(len(table) for table in self._routes.values())
        return f"Router(routes={count}, compiled={self._compiled})"
