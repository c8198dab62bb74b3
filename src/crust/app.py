"""Crust application class.

Mutable during setup (route registration, lifecycle hooks).
Frozen at runtime when app.run() or __call__() is first invoked.
"""

import logging
import threading
from collections.abc import Callable

from crust._internal.asgi import Receive, Scope, Send
from crust._internal.invoke import invoke
from crust._internal.types import ChainHandler, Hook
from crust.config import AppConfig
from crust.errors import ConfigurationError
from crust.routing.router import Router
from crust.server.handler import handle_request
from crust.server.static import StaticFiles
from crust.sessions import SessionStore
from crust.templating.renderer import PageRenderer

logger = logging.getLogger("crust.server")


class App:
    """The crust application.

    Routes map an exact (method, path) pair to an ordered handler chain::

        app = App()
        app.get("/pizzas", authenticated(tokens), list_pizzas)
        app.post("/carts", authenticated(tokens), validation(CART_RULES), add_to_cart)

    Thread safety:
        The setup phase is single-threaded. The freeze transition uses a
        Lock + double-check so exactly one thread compiles the app, even
        when several ASGI workers receive their first request at once.
    """

    __slots__ = (
        "_freeze_lock",
        "_frozen",
        "_router",
        "_shutdown_hooks",
        "_startup_hooks",
        "config",
        "renderer",
        "sessions",
    )

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        sessions: SessionStore | None = None,
        renderer: PageRenderer | None = None,
    ) -> None:
        self.config: AppConfig = config or AppConfig()
        self.sessions: SessionStore = sessions or SessionStore(self.config.session_cookie)
        self.renderer: PageRenderer = renderer or PageRenderer(
            self.config.template_dir, autoescape=self.config.autoescape
        )
        self._router = Router(self.sessions)
        self._startup_hooks: list[Hook] = []
        self._shutdown_hooks: list[Hook] = []
        self._frozen: bool = False
        self._freeze_lock: threading.Lock = threading.Lock()

    # -- Route registration --

    def register(self, method: str, path: str, *handlers: ChainHandler) -> None:
        """Register a handler chain for an exact (method, path) pair.

        Registering the same pair twice replaces the earlier chain.
        """
        self._check_not_frozen()
        self._router.register(method, path, *handlers)

    def get(self, path: str, *handlers: ChainHandler) -> None:
        self.register("GET", path, *handlers)

    def post(self, path: str, *handlers: ChainHandler) -> None:
        self.register("POST", path, *handlers)

    def put(self, path: str, *handlers: ChainHandler) -> None:
        self.register("PUT", path, *handlers)

    def patch(self, path: str, *handlers: ChainHandler) -> None:
        self.register("PATCH", path, *handlers)

    def delete(self, path: str, *handlers: ChainHandler) -> None:
        self.register("DELETE", path, *handlers)

    def route(
        self,
        path: str,
        *,
        methods: list[str] | None = None,
    ) -> Callable[[ChainHandler], ChainHandler]:
        """Register a single terminal handler via decorator.

        Args:
            path: Exact URL path.
            methods: HTTP methods. Defaults to ``["GET"]``.
        """

        def decorator(func: ChainHandler) -> ChainHandler:
            for method in methods or ["GET"]:
                self.register(method, path, func)
            return func

        return decorator

    def has_route(self, method: str, path: str) -> bool:
        """True iff a non-empty handler chain is registered for the pair."""
        return self._router.has_route(method, path)

    @property
    def router(self) -> Router:
        return self._router

    # -- Lifecycle hooks --

    def on_startup(self, func: Hook) -> Hook:
        """Register an async or sync startup hook via decorator.

        Hooks run in registration order during ASGI lifespan startup,
        before the server begins accepting HTTP requests.
        """
        self._check_not_frozen()
        self._startup_hooks.append(func)
        return func

    def on_shutdown(self, func: Hook) -> Hook:
        """Register an async or sync shutdown hook via decorator.

        Hooks run in registration order during ASGI lifespan shutdown.
        """
        self._check_not_frozen()
        self._shutdown_hooks.append(func)
        return func

    # -- Serving --

    def run(self, host: str | None = None, port: int | None = None) -> None:
        """Start the server.

        Freezes the app and serves it with pounce. Debug mode enables
        reload on file changes.
        """
        self._ensure_frozen()

        from crust.server.serve import run_server

        run_server(
            self,
            host or self.config.host,
            port or self.config.port,
            reload=self.config.debug,
            log_level=self.config.log_level,
        )

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point.

        Handles lifespan scopes directly, then delegates HTTP scopes to
        the request handler pipeline.
        """
        if scope["type"] == "lifespan":
            await self._handle_lifespan(scope, receive, send)
            return

        self._ensure_frozen()
        await handle_request(
            scope,
            receive,
            send,
            router=self._router,
            debug=self.config.debug,
        )

    async def _handle_lifespan(
        self,
        scope: Scope,
        receive: Receive,
        send: Send,
    ) -> None:
        """Run the ASGI lifespan protocol."""
        self._ensure_frozen()

        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    for hook in self._startup_hooks:
                        await invoke(hook)
                    await send({"type": "lifespan.startup.complete"})
                except Exception as exc:
                    logger.exception("Startup hook failed")
                    await send(
                        {
                            "type": "lifespan.startup.failed",
                            "message": str(exc),
                        }
                    )
                    return

            elif msg_type == "lifespan.shutdown":
                for hook in self._shutdown_hooks:
                    await invoke(hook)
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- Internal --

    def _ensure_frozen(self) -> None:
        """Thread-safe freeze with double-check locking."""
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._freeze()

    def _freeze(self) -> None:
        """Compile the app into its frozen runtime state.

        MUST only be called while holding _freeze_lock.
        """
        if self.config.static_dir is not None:
            self._router.set_static_root(StaticFiles(self.config.static_dir, self.renderer))
        self._router.compile()
        self._frozen = True
        logger.debug("App frozen with %d routes", len(self._router.routes))

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the app after it has started serving requests. "
                "Register routes and hooks before calling app.run()."
            )
            raise ConfigurationError(msg)
