"""Run the app under pounce.

Pounce's ``run()`` takes an import string, but crust hands over a live
``App`` object, so ``pounce.Server`` is used directly with the ASGI
callable. Pounce is an optional dependency (``pip install crust[server]``).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from crust.app import App


def run_server(
    app: App,
    host: str,
    port: int,
    *,
    reload: bool = False,
    log_level: str = "info",
) -> None:
    """Start a single-worker pounce server for *app*.

    Args:
        app: ASGI callable (crust App instance).
        host: Bind host address.
        port: Bind port number.
        reload: Restart on file changes (development).
        log_level: Server log level (debug, info, warning, error).
    """
    from pounce.config import ServerConfig
    from pounce.server import Server

    config = ServerConfig(
        host=host,
        port=port,
        workers=1,
        reload=reload,
        log_level=log_level,
    )
    server = Server(config, app)
    server.run()
