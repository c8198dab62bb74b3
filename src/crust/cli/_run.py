"""``crust serve``: build the shop app from the environment and serve it."""

import argparse
import logging
from dataclasses import replace

from crust.config import AppConfig
from crust.site import create_app


def run_server(args: argparse.Namespace) -> None:
    """Start the shop server.

    Configuration comes from ``AppConfig.from_env()``; ``--host``,
    ``--port`` and ``--debug`` override it.
    """
    config = AppConfig.from_env()
    overrides: dict[str, object] = {}
    if args.host:
        overrides["host"] = args.host
    if args.port:
        overrides["port"] = args.port
    if args.debug:
        overrides["debug"] = True
        overrides["log_level"] = "debug"
    if overrides:
        config = replace(config, **overrides)

    logging.basicConfig(
        level=config.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger("crust.server").info(
        "Starting crust (%s) on http://%s:%d", config.environment, config.host, config.port
    )

    app = create_app(config)
    app.run()
