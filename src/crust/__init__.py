"""Crust: a small pizza-ordering web application on a minimal ASGI kernel.

Exact-path routes run ordered handler chains with an explicit
continuation; a cookie session store, a static-file fallback and a
flat-file record store sit underneath the shop.

Basic usage::

    from crust import App

    app = App()

    def hello(request, response, next):
        response.send("Hello, World!")

    app.get("/", hello)
    app.run()

The shop itself::

    from crust import AppConfig, create_app

    create_app(AppConfig.from_env()).run()
"""

__version__ = "0.1.0"
__all__ = [
    "App",
    "AppConfig",
    "ConfigurationError",
    "CrustError",
    "HTTPError",
    "Next",
    "NotFound",
    "Request",
    "Response",
    "ResponseWriter",
    "Router",
    "SessionStore",
    "create_app",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import crust`` fast while providing a clean top-level API.
    """
    if name == "App":
        from crust.app import App

        return App

    if name == "AppConfig":
        from crust.config import AppConfig

        return AppConfig

    if name == "Request":
        from crust.http.request import Request

        return Request

    if name in ("Response", "ResponseWriter"):
        from crust.http import response as _resp

        return getattr(_resp, name)

    if name in ("Next", "Router"):
        from crust import routing as _routing

        return getattr(_routing, name)

    if name == "SessionStore":
        from crust.sessions import SessionStore

        return SessionStore

    if name == "create_app":
        from crust.site import create_app

        return create_app

    if name in ("ConfigurationError", "CrustError", "HTTPError", "NotFound"):
        from crust import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
